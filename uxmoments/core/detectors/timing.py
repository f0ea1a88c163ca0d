# ==============================================================================
# Hesitation Detector
# ==============================================================================
"""
Detects long pauses between two deliberate interactions.
"""

from collections.abc import Sequence

from uxmoments.core.context import context_around
from uxmoments.core.detectors.base import PatternDetector, ScanState
from uxmoments.core.models import (
    EventKind,
    HesitationMoment,
    Moment,
    NormalizedEvent,
    PatternKind,
)

HESITATION_MIN_MS = 10000
# Longer gaps are treated as the user having left, not hesitating
HESITATION_MAX_MS = 300000

_INTERACTION_KINDS = (EventKind.MOUSE_INTERACTION, EventKind.INPUT)


class HesitationDetector(PatternDetector):
    """Gap of 10 s to 5 min between consecutive interaction or input events."""

    pattern = PatternKind.HESITATION

    def observe(
        self,
        event: NormalizedEvent,
        index: int,
        events: Sequence[NormalizedEvent],
        scan: ScanState,
    ) -> list[Moment]:
        if index == 0:
            return []
        previous = events[index - 1]
        if event.kind not in _INTERACTION_KINDS or previous.kind not in _INTERACTION_KINDS:
            return []

        gap = event.timestamp - previous.timestamp
        if not HESITATION_MIN_MS < gap < HESITATION_MAX_MS:
            return []
        return [
            HesitationMoment(
                timestamp=event.timestamp,
                session_id=scan.session_id,
                url=scan.url,
                duration_ms=gap,
                before_event=previous,
                after_event=event,
                context=context_around(events, index, 5),
            )
        ]
