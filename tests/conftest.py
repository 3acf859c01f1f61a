"""Shared test fixtures for pod-restarter."""

import threading
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from kubernetes import client

from pod_restarter.kubernetes_client import KubernetesClient
from pod_restarter.logger import RestarterLogger
from pod_restarter.models import EventRecord, MatchCriterion, PodPhase, PodRef, PodSnapshot

SANDBOX_REASON = "FailedCreatePodSandBox"
VETH_MESSAGE = "container veth name provided (eth0) already exists"

CONFIG_ENV_VARS = [
    "KUBECONFIG",
    "REQUEST_TIMEOUT_SECONDS",
    "NAMESPACE",
    "EVENT_REASON",
    "EVENT_MESSAGE",
    "POLLING_INTERVAL",
    "GRACE_PERIOD_SECONDS",
    "MAX_WORKERS",
    "RUN_ONCE",
    "DRY_RUN",
    "LOG_LEVEL",
    "LOG_FORMAT",
    "METRICS_PORT",
]


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch):
    """Keep the host environment and any .env file out of the tests."""
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("pod_restarter.config.load_dotenv", lambda *a, **kw: False)


class RecordingEvent(threading.Event):
    """Stop event whose waits never block but are recorded."""

    def __init__(self):
        super().__init__()
        self.timeouts = []

    def wait(self, timeout=None):
        self.timeouts.append(timeout)
        return super().wait(0)


@pytest.fixture
def stop_event():
    return RecordingEvent()


@pytest.fixture
def criterion():
    return MatchCriterion(reason=SANDBOX_REASON, message_substring=VETH_MESSAGE)


@pytest.fixture
def quiet_logger():
    return RestarterLogger(MagicMock())


@pytest.fixture
def directory():
    """Fake directory adapter: no pending pods, no events, nothing to get."""
    fake = MagicMock(spec=KubernetesClient)
    fake.list_pending_pods.return_value = set()
    fake.list_events.return_value = []
    fake.delete_pod.return_value = None
    return fake


@pytest.fixture
def sandbox_event():
    def _make(name, reason=SANDBOX_REASON, message=None):
        return EventRecord(
            involved_object_name=name,
            reason=reason,
            message=message if message is not None else f"Failed to create pod sandbox: {VETH_MESSAGE}",
        )

    return _make


@pytest.fixture
def snapshot():
    def _make(name, namespace="ns1", phase=PodPhase.PENDING, owned=True):
        return PodSnapshot(
            ref=PodRef(name, namespace),
            phase=phase,
            has_owner_reference=owned,
            owner_summary=["ReplicaSet/web-7d9f"] if owned else [],
            creation_timestamp=datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc),
        )

    return _make


@pytest.fixture
def mock_core_v1():
    return MagicMock(spec=client.CoreV1Api)


@pytest.fixture
def k8s_client(mock_core_v1):
    return KubernetesClient(request_timeout=7, core_v1=mock_core_v1)


@pytest.fixture
def v1_pod():
    def _make(name, namespace="ns1", phase="Pending", owned=True):
        owners = None
        if owned:
            owners = [
                client.V1OwnerReference(
                    api_version="apps/v1", kind="ReplicaSet", name="web-7d9f", uid="uid-1"
                )
            ]
        return client.V1Pod(
            metadata=client.V1ObjectMeta(
                name=name,
                namespace=namespace,
                owner_references=owners,
                creation_timestamp=datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc),
            ),
            status=client.V1PodStatus(phase=phase),
        )

    return _make


@pytest.fixture
def v1_event():
    def _make(pod_name, reason, message, namespace="ns1"):
        return client.CoreV1Event(
            metadata=client.V1ObjectMeta(name=f"{pod_name}.17a", namespace=namespace),
            involved_object=client.V1ObjectReference(kind="Pod", name=pod_name, namespace=namespace),
            reason=reason,
            message=message,
        )

    return _make
