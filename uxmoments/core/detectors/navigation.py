# ==============================================================================
# Navigation Loop Detector
# ==============================================================================
"""
Detects users returning to the same page repeatedly in a short time.
"""

from collections import deque
from collections.abc import Sequence

from uxmoments.core.detectors.base import PatternDetector, ScanState
from uxmoments.core.models import (
    EventKind,
    Moment,
    NavigationLoopMoment,
    NormalizedEvent,
    PatternKind,
    Session,
)

NAVIGATION_LOOP_THRESHOLD = 3
NAVIGATION_LOOP_WINDOW_MS = 120000


class NavigationLoopDetector(PatternDetector):
    """Three or more navigations to the same URL within two minutes."""

    pattern = PatternKind.NAVIGATION_LOOP

    def __init__(self):
        self._navigations: deque[tuple[int, str]] = deque()

    def reset(self, session: Session) -> None:
        self._navigations.clear()

    def observe(
        self,
        event: NormalizedEvent,
        index: int,
        events: Sequence[NormalizedEvent],
        scan: ScanState,
    ) -> list[Moment]:
        if event.kind != EventKind.NAVIGATE or not event.url:
            return []

        while (
            self._navigations
            and self._navigations[0][0] <= event.timestamp - NAVIGATION_LOOP_WINDOW_MS
        ):
            self._navigations.popleft()
        self._navigations.append((event.timestamp, event.url))

        frequency = sum(1 for _, url in self._navigations if url == event.url)
        if frequency < NAVIGATION_LOOP_THRESHOLD:
            return []
        return [
            NavigationLoopMoment(
                timestamp=event.timestamp,
                session_id=scan.session_id,
                url=event.url,
                frequency=frequency,
                time_window=NAVIGATION_LOOP_WINDOW_MS,
            )
        ]
