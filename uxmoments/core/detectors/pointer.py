# ==============================================================================
# Mouse Hovering Detector
# ==============================================================================
"""
Detects the pointer settling in one place for a while, typically while the
user reads or looks for something they cannot find.
"""

from collections import deque
from collections.abc import Sequence

from uxmoments.core.context import context_around
from uxmoments.core.detectors.base import PatternDetector, ScanState
from uxmoments.core.models import (
    EventKind,
    Moment,
    MouseHoveringMoment,
    MouseMoveDetails,
    NormalizedEvent,
    PatternKind,
    Point,
    Session,
)

HOVER_IDLE_MS = 3000
HOVER_SAMPLE_COUNT = 3
HOVER_RADIUS_PX = 30


def first_position(event: NormalizedEvent) -> Point:
    """First pointer position of a MouseMove sample, (0, 0) when it has none."""
    details = event.details
    if isinstance(details, MouseMoveDetails) and details.positions:
        first = details.positions[0]
        return Point(x=first.x, y=first.y)
    return Point()


class MouseHoveringDetector(PatternDetector):
    """
    A mouse move arriving more than 3 s after the previous one, where the
    last three samples (the current one included) stayed within 30 px of
    each other per axis.

    A sample at (0, 0) means the position is unknown and suppresses
    detection.
    """

    pattern = PatternKind.MOUSE_HOVERING

    def __init__(self):
        self._moves: deque[NormalizedEvent] = deque(maxlen=HOVER_SAMPLE_COUNT)
        self._last_move_time: int | None = None

    def reset(self, session: Session) -> None:
        self._moves.clear()
        self._last_move_time = None

    def observe(
        self,
        event: NormalizedEvent,
        index: int,
        events: Sequence[NormalizedEvent],
        scan: ScanState,
    ) -> list[Moment]:
        if event.kind != EventKind.MOUSE_MOVE:
            return []

        self._moves.append(event)
        previous_move_time = self._last_move_time
        self._last_move_time = event.timestamp

        if len(self._moves) < HOVER_SAMPLE_COUNT or previous_move_time is None:
            return []
        if event.timestamp - previous_move_time <= HOVER_IDLE_MS:
            return []

        points = [first_position(move) for move in self._moves]
        if not self._is_steady(points):
            return []
        return [
            MouseHoveringMoment(
                timestamp=event.timestamp,
                session_id=scan.session_id,
                url=scan.url,
                duration=event.timestamp - self._moves[0].timestamp,
                position=points[-1],
                context=context_around(events, index, 3),
            )
        ]

    @staticmethod
    def _is_steady(points: list[Point]) -> bool:
        if any(p.x == 0 and p.y == 0 for p in points):
            return False
        return all(
            abs(a.x - b.x) < HOVER_RADIUS_PX and abs(a.y - b.y) < HOVER_RADIUS_PX
            for a, b in zip(points, points[1:])
        )
