"""
Configuration management for Pod Restarter
"""

import argparse
import os
from dataclasses import dataclass, field
from typing import List, Optional
from dotenv import load_dotenv

from pod_restarter.models import MatchCriterion

DEFAULT_EVENT_REASON = "FailedCreatePodSandBox"
DEFAULT_EVENT_MESSAGE = "container veth name provided (eth0) already exists"
LOG_FORMATS = ("json", "console")


def _default_kubeconfig() -> str:
    home = os.path.expanduser("~")
    if home and home != "~":
        return os.path.join(home, ".kube", "config")
    return ""


def _env_bool(name: str, default: bool) -> bool:
    return os.getenv(name, str(default)).lower() in ("1", "true", "yes")


@dataclass
class Config:
    """Configuration class for Pod Restarter"""

    # Kubernetes configuration
    kubeconfig: str = field(default_factory=_default_kubeconfig)
    request_timeout_seconds: int = 30

    # Scope and matching
    namespace: str = ""
    event_reason: str = DEFAULT_EVENT_REASON
    event_message: str = DEFAULT_EVENT_MESSAGE

    # Scheduling configuration
    polling_interval: int = 10
    grace_period_seconds: float = 5
    max_workers: int = 1
    run_once: bool = False

    # Execution control
    dry_run: bool = False

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"
    metrics_port: int = 0

    def __post_init__(self):
        """Override with environment variables if present"""
        self.kubeconfig = os.getenv("KUBECONFIG", self.kubeconfig)
        self.request_timeout_seconds = int(
            os.getenv("REQUEST_TIMEOUT_SECONDS", self.request_timeout_seconds)
        )
        self.namespace = os.getenv("NAMESPACE", self.namespace)
        self.event_reason = os.getenv("EVENT_REASON", self.event_reason)
        self.event_message = os.getenv("EVENT_MESSAGE", self.event_message)
        self.polling_interval = int(os.getenv("POLLING_INTERVAL", self.polling_interval))
        self.grace_period_seconds = float(
            os.getenv("GRACE_PERIOD_SECONDS", self.grace_period_seconds)
        )
        self.max_workers = int(os.getenv("MAX_WORKERS", self.max_workers))
        self.run_once = _env_bool("RUN_ONCE", self.run_once)
        self.dry_run = _env_bool("DRY_RUN", self.dry_run)
        self.log_level = os.getenv("LOG_LEVEL", self.log_level)
        self.log_format = os.getenv("LOG_FORMAT", self.log_format)
        self.metrics_port = int(os.getenv("METRICS_PORT", self.metrics_port))

    @property
    def criterion(self) -> MatchCriterion:
        return MatchCriterion(
            reason=self.event_reason, message_substring=self.event_message
        )

    def as_dict(self):
        return {
            "namespace": self.namespace or "<all>",
            "polling_interval": self.polling_interval,
            "grace_period_seconds": self.grace_period_seconds,
            "event_reason": self.event_reason,
            "event_message": self.event_message,
            "dry_run": self.dry_run,
            "max_workers": self.max_workers,
            "run_once": self.run_once,
            "metrics_port": self.metrics_port,
        }


def build_parser(defaults: Config) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="pod-restarter",
        description="Delete Pending pods that are stuck on a known error event",
    )
    p.add_argument("--namespace", default=defaults.namespace,
                   help="Kubernetes namespace to watch (default: all namespaces)")
    p.add_argument("--polling-interval", type=int, default=defaults.polling_interval,
                   help="Number of seconds between cycle starts")
    p.add_argument("--reason", dest="event_reason", default=defaults.event_reason,
                   help="Event reason to match")
    p.add_argument("--error-message", dest="event_message", default=defaults.event_message,
                   help="Substring to look for in the event message")
    p.add_argument("--dry-run", action=argparse.BooleanOptionalAction, default=defaults.dry_run,
                   help="Only log the pods that would be deleted")
    p.add_argument("--kubeconfig", default=defaults.kubeconfig,
                   help="(optional) absolute path to the kubeconfig file")
    p.add_argument("--grace-period", dest="grace_period_seconds", type=float,
                   default=defaults.grace_period_seconds,
                   help="Seconds to let selected pods self heal before re-checking them")
    p.add_argument("--max-workers", type=int, default=defaults.max_workers,
                   help="Pods evaluated in parallel within a cycle")
    p.add_argument("--once", dest="run_once", action="store_true", default=defaults.run_once,
                   help="Run a single cycle and exit")
    p.add_argument("--metrics-port", type=int, default=defaults.metrics_port,
                   help="Expose Prometheus metrics on this port (0 disables)")
    p.add_argument("--log-level", default=defaults.log_level)
    p.add_argument("--log-format", choices=LOG_FORMATS, default=defaults.log_format)
    return p


def load_config(argv: Optional[List[str]] = None) -> Config:
    """Build the configuration from .env, environment and command line flags"""
    load_dotenv()
    config = Config()
    parser = build_parser(config)
    args = parser.parse_args(argv)

    for key, value in vars(args).items():
        setattr(config, key, value)

    if config.polling_interval <= 0:
        parser.error("--polling-interval must be a positive number of seconds")
    if config.grace_period_seconds < 0:
        parser.error("--grace-period cannot be negative")
    if config.max_workers < 1:
        parser.error("--max-workers must be at least 1")
    if config.log_format not in LOG_FORMATS:
        parser.error(f"--log-format must be one of {', '.join(LOG_FORMATS)}")
    return config
