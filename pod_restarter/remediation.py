"""
Remediation policy applied to candidates after the grace period.

Every candidate is re-read from the API before anything is done to it, so a
pod that recovered, moved on or disappeared since selection is left alone.
Pods without an owner reference are never deleted: nothing would recreate
them. Each pod is handled on its own; a failure on one pod never stops the
others and is left for the next cycle to pick up again.
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from pod_restarter.exceptions import DirectoryUnavailable, NotFound
from pod_restarter.logger import RestarterLogger
from pod_restarter.models import Outcome, PodPhase, PodRef, PodSnapshot, RemediationResult


def _age_seconds(snapshot: PodSnapshot) -> Optional[float]:
    if snapshot.creation_timestamp is None:
        return None
    created = snapshot.creation_timestamp
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return round((datetime.now(timezone.utc) - created).total_seconds(), 1)


class RemediationPolicy:
    def __init__(self, k8s_client, logger: Optional[RestarterLogger] = None,
                 max_workers: int = 1):
        self.k8s_client = k8s_client
        self.logger = logger or RestarterLogger()
        self.max_workers = max_workers

    def remediate_pod(self, ref: PodRef, dry_run: bool = False) -> RemediationResult:
        """Decide and apply the action for a single candidate"""
        try:
            snapshot = self.k8s_client.get_pod(ref)
        except NotFound:
            result = RemediationResult(ref, Outcome.VANISHED)
            self.logger.log_outcome(result)
            return result
        except DirectoryUnavailable as e:
            result = RemediationResult(ref, Outcome.CHECK_FAILED, error=str(e))
            self.logger.log_outcome(result)
            return result
        except Exception as e:
            self.logger.log_error(e, context="get_pod", exc_info=True,
                                  namespace=ref.namespace, pod_name=ref.name)
            result = RemediationResult(ref, Outcome.CHECK_FAILED, error=str(e))
            self.logger.log_outcome(result)
            return result

        if snapshot.phase != PodPhase.PENDING:
            result = RemediationResult(ref, Outcome.STATE_CHANGED, phase=snapshot.phase)
            self.logger.log_outcome(result)
            return result

        self.logger.log_still_pending(snapshot, _age_seconds(snapshot))

        if not snapshot.has_owner_reference:
            result = RemediationResult(ref, Outcome.SKIPPED_NO_OWNER, phase=snapshot.phase)
            self.logger.log_outcome(result, owner_summary=snapshot.owner_summary)
            return result

        if dry_run:
            result = RemediationResult(ref, Outcome.WOULD_DELETE, phase=snapshot.phase)
            self.logger.log_outcome(result, owner_summary=snapshot.owner_summary)
            return result

        try:
            self.k8s_client.delete_pod(ref)
        except DirectoryUnavailable as e:
            result = RemediationResult(ref, Outcome.DELETE_FAILED, phase=snapshot.phase, error=str(e))
        except Exception as e:
            self.logger.log_error(e, context="delete_pod", exc_info=True,
                                  namespace=ref.namespace, pod_name=ref.name)
            result = RemediationResult(ref, Outcome.DELETE_FAILED, phase=snapshot.phase, error=str(e))
        else:
            result = RemediationResult(ref, Outcome.DELETED, phase=snapshot.phase)
        self.logger.log_outcome(result, owner_summary=snapshot.owner_summary)
        return result

    def remediate(self, candidates: Iterable[PodRef], dry_run: bool = False) -> List[RemediationResult]:
        refs = list(candidates)
        if self.max_workers > 1 and len(refs) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                return list(pool.map(lambda ref: self.remediate_pod(ref, dry_run), refs))
        return [self.remediate_pod(ref, dry_run) for ref in refs]
