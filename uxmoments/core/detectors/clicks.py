# ==============================================================================
# Click Pattern Detectors
# ==============================================================================
"""
Detectors for click-driven friction:
- RageClickDetector: rapid repeated clicks on the same spot
- DeadClickDetector: clicks on elements that are not interactive
- MultipleSubmissionsDetector: submit buttons clicked over and over
"""

from collections import deque
from collections.abc import Sequence

from uxmoments.core.context import context_around
from uxmoments.core.detectors.base import PatternDetector, ScanState
from uxmoments.core.models import (
    DeadClickMoment,
    ElementRef,
    Moment,
    MultipleSubmissionsMoment,
    NormalizedEvent,
    PatternKind,
    RageClickMoment,
    Session,
)

RAGE_CLICK_WINDOW_MS = 1000
RAGE_CLICK_THRESHOLD = 3
RAGE_CLICK_RADIUS_PX = 20

INTERACTIVE_TAGS = frozenset({"BUTTON", "A", "INPUT", "SELECT", "TEXTAREA", "LABEL"})
BUTTON_CLASS_FRAGMENTS = ("btn", "button")

SUBMISSION_WINDOW_MS = 10000
SUBMISSION_LOOKBACK_EVENTS = 20
SUBMISSION_THRESHOLD = 2
SUBMIT_CLASS_FRAGMENTS = ("submit", "send")


def within_axes(a: ElementRef, b: ElementRef, threshold: float) -> bool:
    """True when both the x and y distances are under threshold (not Euclidean)."""
    ax, ay = a.point
    bx, by = b.point
    return abs(ax - bx) < threshold and abs(ay - by) < threshold


def is_submit_element(element: ElementRef | None) -> bool:
    """A submit button, or anything whose class looks like submit/send."""
    if element is None:
        return False
    if element.tag == "BUTTON" and element.attribute("type") == "submit":
        return True
    return element.class_contains(*SUBMIT_CLASS_FRAGMENTS)


def is_interactive_element(element: ElementRef) -> bool:
    """Whether a click on this element is expected to do something."""
    if element.tag in INTERACTIVE_TAGS:
        return True
    if element.class_contains(*BUTTON_CLASS_FRAGMENTS):
        return True
    if element.attribute("role") == "button":
        return True
    return bool(element.attribute("onclick"))


class RageClickDetector(PatternDetector):
    """
    Three or more clicks within one second, clustered within 20 px per axis.

    Click and MouseDown interactions both count. The click queue is cleared
    after each detection, so a later click starts a new cluster.
    """

    pattern = PatternKind.RAGE_CLICK

    def __init__(self):
        self._clicks: deque[NormalizedEvent] = deque()

    def reset(self, session: Session) -> None:
        self._clicks.clear()

    def observe(
        self,
        event: NormalizedEvent,
        index: int,
        events: Sequence[NormalizedEvent],
        scan: ScanState,
    ) -> list[Moment]:
        if not event.is_interaction("Click", "MouseDown"):
            return []

        while self._clicks and event.timestamp - self._clicks[0].timestamp >= RAGE_CLICK_WINDOW_MS:
            self._clicks.popleft()
        self._clicks.append(event)

        if event.element is None or len(self._clicks) < RAGE_CLICK_THRESHOLD:
            return []

        same_area = sum(
            1
            for click in self._clicks
            if click.element is not None
            and within_axes(click.element, event.element, RAGE_CLICK_RADIUS_PX)
        )
        if same_area < RAGE_CLICK_THRESHOLD:
            return []

        self._clicks.clear()
        return [
            RageClickMoment(
                timestamp=event.timestamp,
                session_id=scan.session_id,
                url=scan.url,
                click_count=same_area,
                element=event.element,
                context=context_around(events, index, 5),
            )
        ]


class DeadClickDetector(PatternDetector):
    """A click on an element with no sign of being interactive."""

    pattern = PatternKind.DEAD_CLICK

    def observe(
        self,
        event: NormalizedEvent,
        index: int,
        events: Sequence[NormalizedEvent],
        scan: ScanState,
    ) -> list[Moment]:
        if not event.is_interaction("Click") or event.element is None:
            return []
        if is_interactive_element(event.element):
            return []
        return [
            DeadClickMoment(
                timestamp=event.timestamp,
                session_id=scan.session_id,
                url=scan.url,
                element=event.element,
                context=context_around(events, index, 3),
            )
        ]


class MultipleSubmissionsDetector(PatternDetector):
    """
    A submit-style click preceded by two or more submit-style clicks within
    10 seconds and within the previous 20 events.
    """

    pattern = PatternKind.MULTIPLE_SUBMISSIONS

    def __init__(self):
        # (index, timestamp) of prior submit-style clicks
        self._submits: deque[tuple[int, int]] = deque()

    def reset(self, session: Session) -> None:
        self._submits.clear()

    def observe(
        self,
        event: NormalizedEvent,
        index: int,
        events: Sequence[NormalizedEvent],
        scan: ScanState,
    ) -> list[Moment]:
        if not event.is_interaction("Click") or not is_submit_element(event.element):
            return []

        while self._submits and (
            self._submits[0][0] < index - SUBMISSION_LOOKBACK_EVENTS
            or self._submits[0][1] <= event.timestamp - SUBMISSION_WINDOW_MS
        ):
            self._submits.popleft()

        prior = len(self._submits)
        self._submits.append((index, event.timestamp))

        if prior < SUBMISSION_THRESHOLD:
            return []
        return [
            MultipleSubmissionsMoment(
                timestamp=event.timestamp,
                session_id=scan.session_id,
                url=scan.url,
                count=prior + 1,
                element=event.element,
                context=context_around(events, index, 10),
            )
        ]
