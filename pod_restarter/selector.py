"""
Candidate selection: Pending pods that carry a qualifying error event
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Tuple

from pod_restarter.event_matcher import find_match
from pod_restarter.exceptions import DirectoryUnavailable
from pod_restarter.logger import RestarterLogger
from pod_restarter.models import CandidateSet, EventRecord, MatchCriterion, PodRef


class CandidateSelector:
    def __init__(self, k8s_client, criterion: MatchCriterion,
                 logger: Optional[RestarterLogger] = None, max_workers: int = 1):
        self.k8s_client = k8s_client
        self.criterion = criterion
        self.logger = logger or RestarterLogger()
        self.max_workers = max_workers

    def _evaluate(self, ref: PodRef, criterion: MatchCriterion) -> Optional[EventRecord]:
        """Return the triggering event for a pod, or None"""
        try:
            events = self.k8s_client.list_events(ref)
        except DirectoryUnavailable as e:
            # A failed lookup is not evidence of a match
            self.logger.log_error(e, context="list_events", namespace=ref.namespace, pod_name=ref.name)
            return None
        except Exception as e:
            self.logger.log_error(e, context="list_events", exc_info=True,
                                  namespace=ref.namespace, pod_name=ref.name)
            return None

        event = find_match(events, criterion)
        if event is not None:
            self.logger.log_pod_matched(ref, event)
        return event

    def select(self, namespace: str = "", criterion: Optional[MatchCriterion] = None) -> Tuple[int, CandidateSet]:
        """Select candidates for this cycle.

        Returns the number of Pending pods seen and the candidate set.
        The criterion given at construction is used unless one is passed.
        Raises DirectoryUnavailable when the Pending pods cannot be listed.
        """
        pending = sorted(
            self.k8s_client.list_pending_pods(namespace),
            key=lambda ref: (ref.namespace, ref.name),
        )
        criterion = criterion or self.criterion
        for ref in pending:
            self.logger.log_pod_pending(ref)

        if self.max_workers > 1 and len(pending) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                found = list(pool.map(lambda ref: self._evaluate(ref, criterion), pending))
        else:
            found = [self._evaluate(ref, criterion) for ref in pending]

        candidates = {
            ref: event for ref, event in zip(pending, found) if event is not None
        }
        self.logger.log_selection_summary(len(candidates), len(pending), criterion)
        return len(pending), candidates
