# ==============================================================================
# Form Abandonment Detector
# ==============================================================================
"""
Detects forms that were filled in and then left without being submitted.
"""

from collections.abc import Sequence

from uxmoments.core.context import context_around
from uxmoments.core.detectors.base import PatternDetector, ScanState
from uxmoments.core.models import (
    EventKind,
    FormAbandonmentMoment,
    InputDetails,
    Moment,
    NormalizedEvent,
    PatternKind,
    Session,
)

FORM_ABANDONMENT_MIN_INPUTS = 2
SUBMIT_LOOKBACK_EVENTS = 10


class FormAbandonmentDetector(PatternDetector):
    """
    Two or more inputs into a form, then navigation (or end of session)
    without a submit click among the preceding 10 events.

    Only inputs whose element carries a ``form`` attribute count. A submit
    click is a BUTTON with type=submit, or any clicked element bound to the
    same form id. Tracking resets at every navigation.
    """

    pattern = PatternKind.FORM_ABANDONMENT

    def __init__(self):
        self._form_id: str | None = None
        self._form_url = ""
        self._input_count = 0
        self._last_value: str | None = None
        self._events: Sequence[NormalizedEvent] = ()

    def reset(self, session: Session) -> None:
        self._clear()
        self._events = session.events

    def _clear(self) -> None:
        self._form_id = None
        self._form_url = ""
        self._input_count = 0
        self._last_value = None

    def observe(
        self,
        event: NormalizedEvent,
        index: int,
        events: Sequence[NormalizedEvent],
        scan: ScanState,
    ) -> list[Moment]:
        if event.kind == EventKind.INPUT:
            form_id = event.element.attribute("form") if event.element else None
            if form_id:
                self._form_id = form_id
                self._form_url = scan.url
                self._input_count += 1
                if isinstance(event.details, InputDetails):
                    self._last_value = event.details.value
            return []

        if event.kind != EventKind.NAVIGATE or self._form_id is None:
            return []

        moments = []
        if self._is_abandoned(events[max(0, index - SUBMIT_LOOKBACK_EVENTS) : index]):
            moments.append(self._moment(event.timestamp, scan, context_around(events, index, 10)))
        self._clear()
        return moments

    def finish(self, scan: ScanState) -> list[Moment]:
        if self._form_id is None or not self._events:
            return []
        events = self._events
        if not self._is_abandoned(events[-SUBMIT_LOOKBACK_EVENTS:]):
            return []
        last = len(events) - 1
        return [self._moment(events[last].timestamp, scan, context_around(events, last, 10))]

    def _is_abandoned(self, lookback: Sequence[NormalizedEvent]) -> bool:
        if self._input_count < FORM_ABANDONMENT_MIN_INPUTS:
            return False
        return not any(self._is_submission(e) for e in lookback)

    def _is_submission(self, event: NormalizedEvent) -> bool:
        if not event.is_interaction("Click") or event.element is None:
            return False
        element = event.element
        if element.tag == "BUTTON" and element.attribute("type") == "submit":
            return True
        return element.attribute("form") == self._form_id

    def _moment(self, timestamp: int, scan: ScanState, context) -> FormAbandonmentMoment:
        return FormAbandonmentMoment(
            timestamp=timestamp,
            session_id=scan.session_id,
            # the page holding the form, not the navigation target
            url=self._form_url,
            form_id=self._form_id,
            interaction_count=self._input_count,
            last_value=self._last_value,
            form_completed=False,
            context=context,
        )
