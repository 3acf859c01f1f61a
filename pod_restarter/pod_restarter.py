import threading
import time
from enum import Enum
from typing import Callable, Optional

from pod_restarter import metrics
from pod_restarter.config import Config
from pod_restarter.exceptions import DirectoryUnavailable
from pod_restarter.logger import RestarterLogger
from pod_restarter.models import CycleReport
from pod_restarter.remediation import RemediationPolicy
from pod_restarter.selector import CandidateSelector


class LoopState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


class PodRestarter:
    """Runs select -> grace period -> remediate on a fixed interval"""

    def __init__(self, config: Config, k8s_client, logger: Optional[RestarterLogger] = None,
                 stop_event: Optional[threading.Event] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.config = config
        self.k8s_client = k8s_client
        self.logger = logger or RestarterLogger()
        self.stop_event = stop_event or threading.Event()
        self.clock = clock
        self.state = LoopState.IDLE
        self.cycle_count = 0

        self.selector = CandidateSelector(
            k8s_client, config.criterion, logger=self.logger, max_workers=config.max_workers
        )
        self.policy = RemediationPolicy(
            k8s_client, logger=self.logger, max_workers=config.max_workers
        )

    def stop(self):
        self.stop_event.set()

    def run_cycle(self) -> CycleReport:
        """Run one full cycle and return its report"""
        report = CycleReport()

        try:
            report.pending_count, candidates = self.selector.select(self.config.namespace)
        except DirectoryUnavailable as e:
            self.logger.log_error(e, context="list_pending_pods")
            return report
        report.candidate_count = len(candidates)

        if not candidates:
            return report

        self.logger.log_grace_wait(self.config.grace_period_seconds, len(candidates))
        if self.stop_event.wait(self.config.grace_period_seconds):
            self.logger.log_warning("Shutdown requested during grace period, skipping remediation")
            report.aborted = True
            return report

        report.results = self.policy.remediate(candidates, dry_run=self.config.dry_run)
        return report

    def _tick(self) -> float:
        """Idle -> Running -> Idle; returns how long the cycle took"""
        self.state = LoopState.RUNNING
        self.cycle_count += 1
        started = self.clock()
        self.logger.log_cycle_start(self.cycle_count)

        report = CycleReport()
        try:
            report = self.run_cycle()
        except Exception as e:
            self.logger.log_error(e, context="reconciliation cycle", exc_info=True, cycle_id=self.cycle_count)
        finally:
            self.state = LoopState.IDLE

        elapsed = self.clock() - started
        self.logger.log_cycle_end(self.cycle_count, report, elapsed)
        metrics.record_cycle(report, elapsed)
        return elapsed

    def run_forever(self):
        """Loop until the stop event is set"""
        interval = self.config.polling_interval
        if interval < self.config.grace_period_seconds:
            self.logger.log_warning(
                "Polling interval is shorter than the grace period, cycles will run back-to-back",
                polling_interval=interval,
                grace_period_seconds=self.config.grace_period_seconds
            )

        while not self.stop_event.is_set():
            elapsed = self._tick()
            remainder = max(0.0, interval - elapsed)
            self.logger.log_debug("Waiting until next cycle", seconds=round(remainder, 3))
            if self.stop_event.wait(remainder):
                break

        self.logger.log_warning("Pod Restarter stopped", cycles=self.cycle_count)

    def run_once(self) -> None:
        self._tick()
