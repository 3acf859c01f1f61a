"""
Logging configuration for Pod Restarter
"""

import logging
import sys
from typing import Any, Dict, Optional
import structlog
from colorama import init as colorama_init

from pod_restarter import __version__
from pod_restarter.models import EventRecord, PodRef, PodSnapshot, RemediationResult

# Initialize colorama for cross-platform colored output
colorama_init()


def setup_logging(log_level: str = "INFO", log_format: str = "json") -> None:
    """Setup structured logging for the application"""

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if log_format == "json"
            else structlog.dev.ConsoleRenderer(colors=True)
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )

    # Suppress verbose kubernetes client logs
    logging.getLogger("kubernetes").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance"""
    return structlog.get_logger(name)


class RestarterLogger:
    """Decision-point logging for the reconciliation pipeline"""

    def __init__(self, logger: Optional[Any] = None):
        self.logger = logger or get_logger("pod-restarter")

    def log_startup(self, config_dict: Dict[str, Any]) -> None:
        self.logger.info(
            "Pod Restarter starting up",
            version=__version__,
            config=config_dict
        )

    def log_cycle_start(self, cycle_id: int) -> None:
        self.logger.info("Starting reconciliation cycle", cycle_id=cycle_id)

    def log_cycle_end(self, cycle_id: int, report, duration: float) -> None:
        self.logger.info(
            "Reconciliation cycle completed",
            cycle_id=cycle_id,
            pending_pods=report.pending_count,
            candidate_pods=report.candidate_count,
            outcomes=report.outcome_counts(),
            aborted=report.aborted,
            duration_seconds=round(duration, 3)
        )

    def log_pod_pending(self, ref: PodRef) -> None:
        self.logger.debug("Pod is in Pending state", namespace=ref.namespace, pod_name=ref.name)

    def log_pod_matched(self, ref: PodRef, event: EventRecord) -> None:
        self.logger.info(
            "Pod has error event",
            namespace=ref.namespace,
            pod_name=ref.name,
            reason=event.reason,
            message=event.message
        )

    def log_selection_summary(self, matched: int, pending: int, criterion) -> None:
        self.logger.info(
            f"{matched}/{pending} pods in Pending state matched error criterion",
            matched=matched,
            pending=pending,
            reason=criterion.reason,
            error_message=criterion.message_substring
        )

    def log_grace_wait(self, seconds: float, candidates: int) -> None:
        self.logger.info(
            "Waiting for pods to self heal",
            grace_period_seconds=seconds,
            candidate_pods=candidates
        )

    def log_still_pending(self, snapshot: PodSnapshot, age_seconds: Optional[float]) -> None:
        self.logger.info(
            "Pod still in Pending state",
            namespace=snapshot.ref.namespace,
            pod_name=snapshot.ref.name,
            age_seconds=age_seconds
        )

    def log_outcome(self, result: RemediationResult, owner_summary=None) -> None:
        """Log the remediation decision taken for one pod"""
        fields = {
            "namespace": result.ref.namespace,
            "pod_name": result.ref.name,
            "outcome": result.outcome.value,
        }
        if result.phase is not None:
            fields["phase"] = result.phase.value
        if owner_summary is not None:
            fields["owners"] = owner_summary

        if result.error:
            self.logger.error("Pod remediation failed", error=result.error, **fields)
        else:
            self.logger.info("Pod remediation decision", **fields)

    def log_error(self, error: Exception, context: str = None, exc_info: bool = False, **kwargs) -> None:
        """Log errors with context"""
        self.logger.error(
            "Error occurred",
            error=str(error),
            error_type=type(error).__name__,
            context=context,
            exc_info=exc_info,
            **kwargs
        )

    def log_warning(self, message: str, **kwargs) -> None:
        self.logger.warning(message, **kwargs)

    def log_debug(self, message: str, **kwargs) -> None:
        self.logger.debug(message, **kwargs)
