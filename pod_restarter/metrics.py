"""
Prometheus metrics for Pod Restarter
"""

import logging

from prometheus_client import Counter, Gauge, Histogram, start_http_server

from pod_restarter.models import CycleReport

logger = logging.getLogger(__name__)

CYCLES = Counter(
    "pod_restarter_cycles_total",
    "Number of reconciliation cycles run",
)
PENDING_PODS = Gauge(
    "pod_restarter_pending_pods",
    "Pending pods seen in the last cycle",
)
CANDIDATE_PODS = Gauge(
    "pod_restarter_candidate_pods",
    "Pending pods matching the error criterion in the last cycle",
)
OUTCOMES = Counter(
    "pod_restarter_remediation_outcomes_total",
    "Remediation decisions taken per candidate pod",
    ["outcome"],
)
CYCLE_DURATION = Histogram(
    "pod_restarter_cycle_duration_seconds",
    "Wall time of one reconciliation cycle, grace period included",
)


def record_cycle(report: CycleReport, duration: float) -> None:
    CYCLES.inc()
    CYCLE_DURATION.observe(duration)
    if report.aborted:
        return
    PENDING_PODS.set(report.pending_count)
    CANDIDATE_PODS.set(report.candidate_count)
    for result in report.results:
        OUTCOMES.labels(outcome=result.outcome.value).inc()


def start_metrics_server(port: int) -> bool:
    """Expose metrics over HTTP, returns False when disabled"""
    if port <= 0:
        return False
    start_http_server(port)
    logger.info(f"Serving Prometheus metrics on :{port}/metrics")
    return True
