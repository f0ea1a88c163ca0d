# ==============================================================================
# Scroll Pattern Detectors
# ==============================================================================
"""
Detectors for scroll-driven friction:
- RapidScrollingDetector: bursts of scrolling, usually searching for something
- HorizontalScrollMobileDetector: sideways scrolling on a narrow viewport
"""

from collections import deque
from collections.abc import Sequence

from uxmoments.core.context import context_around
from uxmoments.core.detectors.base import PatternDetector, ScanState
from uxmoments.core.models import (
    EventKind,
    HorizontalScrollMobileMoment,
    Moment,
    NormalizedEvent,
    PatternKind,
    RapidScrollingMoment,
    ScrollDetails,
    Session,
)

SCROLL_DETECTION_WINDOW_MS = 5000
RAPID_SCROLL_THRESHOLD = 8
# Entries kept after a detection, so one burst is not reported on every event
SCROLL_ENTRIES_KEPT_AFTER_TRIGGER = 2

MOBILE_VIEWPORT_MAX_WIDTH = 768


class RapidScrollingDetector(PatternDetector):
    """Eight or more scroll events within five seconds."""

    pattern = PatternKind.RAPID_SCROLLING

    def __init__(self):
        self._scrolls: deque[int] = deque()

    def reset(self, session: Session) -> None:
        self._scrolls.clear()

    def observe(
        self,
        event: NormalizedEvent,
        index: int,
        events: Sequence[NormalizedEvent],
        scan: ScanState,
    ) -> list[Moment]:
        if event.kind != EventKind.SCROLL:
            return []

        self._scrolls.append(event.timestamp)
        while self._scrolls and self._scrolls[0] <= event.timestamp - SCROLL_DETECTION_WINDOW_MS:
            self._scrolls.popleft()

        if len(self._scrolls) < RAPID_SCROLL_THRESHOLD:
            return []

        moment = RapidScrollingMoment(
            timestamp=event.timestamp,
            session_id=scan.session_id,
            url=scan.url,
            scroll_count=len(self._scrolls),
            duration=event.timestamp - self._scrolls[0],
            context=context_around(events, index, 5),
        )
        kept = list(self._scrolls)[-SCROLL_ENTRIES_KEPT_AFTER_TRIGGER:]
        self._scrolls = deque(kept)
        return [moment]


class HorizontalScrollMobileDetector(PatternDetector):
    """Horizontal scroll offset on a known viewport narrower than 768 px."""

    pattern = PatternKind.HORIZONTAL_SCROLL_MOBILE

    def observe(
        self,
        event: NormalizedEvent,
        index: int,
        events: Sequence[NormalizedEvent],
        scan: ScanState,
    ) -> list[Moment]:
        if event.kind != EventKind.SCROLL or not isinstance(event.details, ScrollDetails):
            return []
        viewport = scan.viewport
        if not 0 < viewport.width < MOBILE_VIEWPORT_MAX_WIDTH or event.details.x <= 0:
            return []
        return [
            HorizontalScrollMobileMoment(
                timestamp=event.timestamp,
                session_id=scan.session_id,
                url=scan.url,
                viewport=viewport,
                scroll_x=event.details.x,
            )
        ]
