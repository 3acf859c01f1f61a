#!/usr/bin/env python3
"""
Kubernetes Pod Restarter - Main Application
"""

import signal
import threading

from pod_restarter.config import load_config
from pod_restarter.exceptions import DirectoryConfigError
from pod_restarter.kubernetes_client import KubernetesClient
from pod_restarter.logger import RestarterLogger, setup_logging
from pod_restarter.metrics import start_metrics_server
from pod_restarter.pod_restarter import PodRestarter


def main(argv=None):
    """Main application entry point"""
    config = load_config(argv)
    setup_logging(config.log_level, config.log_format)
    log = RestarterLogger()

    log.log_startup(config.as_dict())
    if config.dry_run:
        log.log_warning("Running in DRY RUN mode - no pods will be deleted")

    try:
        k8s_client = KubernetesClient(
            kubeconfig=config.kubeconfig,
            request_timeout=config.request_timeout_seconds,
        )
    except DirectoryConfigError as e:
        log.log_error(e, context="kubernetes client initialization")
        return 1

    start_metrics_server(config.metrics_port)

    stop_event = threading.Event()

    def handle_signal(signum, frame):
        log.log_warning("Received termination signal, shutting down...", signal=signum)
        stop_event.set()

    signal.signal(signal.SIGTERM, handle_signal)
    signal.signal(signal.SIGINT, handle_signal)

    restarter = PodRestarter(config, k8s_client, logger=log, stop_event=stop_event)

    if config.run_once:
        log.log_debug("Running a single cycle")
        restarter.run_once()
        return 0

    log.log_debug("Starting main loop", polling_interval=config.polling_interval)
    restarter.run_forever()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
