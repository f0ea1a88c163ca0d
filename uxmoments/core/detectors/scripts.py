# ==============================================================================
# JavaScript Error Detector
# ==============================================================================
"""
Reports script errors captured in the recording.
"""

from collections.abc import Sequence

from uxmoments.core.detectors.base import PatternDetector, ScanState
from uxmoments.core.models import (
    ErrorDetails,
    EventKind,
    JSErrorMoment,
    Moment,
    NormalizedEvent,
    PatternKind,
)


class JSErrorDetector(PatternDetector):
    pattern = PatternKind.JS_ERROR

    def observe(
        self,
        event: NormalizedEvent,
        index: int,
        events: Sequence[NormalizedEvent],
        scan: ScanState,
    ) -> list[Moment]:
        if event.kind != EventKind.ERROR:
            return []
        error = event.details.error if isinstance(event.details, ErrorDetails) else None
        return [
            JSErrorMoment(
                timestamp=event.timestamp,
                session_id=scan.session_id,
                url=scan.url,
                error=error,
            )
        ]
