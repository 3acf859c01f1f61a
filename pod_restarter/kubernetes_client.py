import os
import logging
from typing import List, Optional, Set

import urllib3
from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException

from pod_restarter.exceptions import DirectoryConfigError, DirectoryUnavailable, NotFound
from pod_restarter.models import EventRecord, PodPhase, PodRef, PodSnapshot

logger = logging.getLogger(__name__)

PENDING_FIELD_SELECTOR = "status.phase=Pending"
TRANSPORT_ERRORS = (ApiException, urllib3.exceptions.HTTPError)


def _unavailable(action: str, error: Exception) -> DirectoryUnavailable:
    status = getattr(error, "status", None)
    reason = getattr(error, "reason", None) or error
    return DirectoryUnavailable(f"Could not {action}: {reason}", status=status)


class KubernetesClient:
    """Thin wrapper around CoreV1Api with typed errors and no retries"""

    def __init__(self, kubeconfig: Optional[str] = None, request_timeout: int = 30,
                 core_v1: Optional[client.CoreV1Api] = None):
        self.request_timeout = request_timeout

        if core_v1 is not None:
            self.v1 = core_v1
            return

        try:
            # Prefer in-cluster credentials, then the kubeconfig file
            try:
                config.load_incluster_config()
                logger.info("Running from INSIDE the cluster")
            except ConfigException:
                if kubeconfig and os.path.exists(kubeconfig):
                    config.load_kube_config(config_file=kubeconfig)
                else:
                    config.load_kube_config()
                logger.info("Running from OUTSIDE the cluster")

            self.v1 = client.CoreV1Api()
        except (ConfigException, OSError, TypeError) as e:
            raise DirectoryConfigError(f"The kubeconfig cannot be loaded: {e}") from e

        logger.info("Kubernetes client initialized successfully")

    def list_pending_pods(self, namespace: str = "") -> Set[PodRef]:
        """List Pending pods in a namespace, or in all namespaces when empty"""
        try:
            if namespace:
                pods = self.v1.list_namespaced_pod(
                    namespace,
                    field_selector=PENDING_FIELD_SELECTOR,
                    _request_timeout=self.request_timeout,
                )
            else:
                pods = self.v1.list_pod_for_all_namespaces(
                    field_selector=PENDING_FIELD_SELECTOR,
                    _request_timeout=self.request_timeout,
                )
        except TRANSPORT_ERRORS as e:
            raise _unavailable("list Pending pods", e) from e

        return {
            PodRef(name=pod.metadata.name, namespace=pod.metadata.namespace)
            for pod in pods.items
        }

    def list_events(self, ref: PodRef) -> List[EventRecord]:
        """List the events whose involved object is the given pod"""
        try:
            events = self.v1.list_namespaced_event(
                ref.namespace,
                field_selector=f"involvedObject.kind=Pod,involvedObject.name={ref.name}",
                _request_timeout=self.request_timeout,
            )
        except TRANSPORT_ERRORS as e:
            raise _unavailable(f"list events of pod {ref}", e) from e

        return [
            EventRecord(
                involved_object_name=item.involved_object.name if item.involved_object else ref.name,
                reason=item.reason or "",
                message=item.message or "",
            )
            for item in events.items
        ]

    def get_pod(self, ref: PodRef) -> PodSnapshot:
        """Read a fresh snapshot of a pod"""
        try:
            pod = self.v1.read_namespaced_pod(
                ref.name, ref.namespace, _request_timeout=self.request_timeout
            )
        except ApiException as e:
            if e.status == 404:
                raise NotFound(f"Pod {ref} does not exist anymore") from e
            raise _unavailable(f"get pod {ref}", e) from e
        except urllib3.exceptions.HTTPError as e:
            raise _unavailable(f"get pod {ref}", e) from e

        owners = pod.metadata.owner_references or []
        return PodSnapshot(
            ref=PodRef(name=pod.metadata.name, namespace=pod.metadata.namespace),
            phase=PodPhase.from_api(pod.status.phase if pod.status else None),
            has_owner_reference=len(owners) > 0,
            owner_summary=[f"{owner.kind}/{owner.name}" for owner in owners],
            creation_timestamp=pod.metadata.creation_timestamp,
        )

    def delete_pod(self, ref: PodRef) -> None:
        """Delete a pod; a pod that is already gone counts as deleted"""
        try:
            self.v1.delete_namespaced_pod(
                ref.name, ref.namespace, _request_timeout=self.request_timeout
            )
        except ApiException as e:
            if e.status == 404:
                logger.debug(f"Pod {ref} was already gone")
                return
            raise _unavailable(f"delete pod {ref}", e) from e
        except urllib3.exceptions.HTTPError as e:
            raise _unavailable(f"delete pod {ref}", e) from e
