"""
Matching of pod events against the configured error criterion
"""

from typing import Iterable, Optional

from pod_restarter.models import EventRecord, MatchCriterion


def find_match(events: Iterable[EventRecord], criterion: MatchCriterion) -> Optional[EventRecord]:
    """Return the first event with the exact reason and a message containing the substring"""
    for event in events:
        if event.reason == criterion.reason and criterion.message_substring in event.message:
            return event
    return None


def matches(events: Iterable[EventRecord], criterion: MatchCriterion) -> bool:
    return find_match(events, criterion) is not None
