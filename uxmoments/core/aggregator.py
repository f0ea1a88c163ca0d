# ==============================================================================
# Session Aggregator
# ==============================================================================
"""
Session-level moments computed once per session after the detector pass:
- ShortSession: the user left quickly after seeing few pages
- SessionMetrics: overall counts, emitted for every session
"""

from uxmoments.core.models import (
    EventKind,
    Moment,
    Session,
    SessionMetricsMoment,
    ShortSessionMoment,
)

SHORT_SESSION_MAX_MS = 10000
SHORT_SESSION_MAX_PAGES = 2


def session_moments(session: Session, url: str = "") -> list[Moment]:
    """
    Build the session-level moments for a session.

    Args:
        session: Session whose events were scanned
        url: Page URL in effect at the end of the scan

    Returns:
        [ShortSession] (when applicable) followed by exactly one SessionMetrics
    """
    events = session.events
    metadata = session.metadata
    navigations = sum(1 for e in events if e.kind == EventKind.NAVIGATE)

    moments: list[Moment] = []
    if events and metadata.duration < SHORT_SESSION_MAX_MS and navigations <= SHORT_SESSION_MAX_PAGES:
        moments.append(
            ShortSessionMoment(
                timestamp=metadata.start_time,
                session_id=session.session_id,
                url=url,
                duration_ms=metadata.duration,
                page_count=navigations,
            )
        )

    moments.append(
        SessionMetricsMoment(
            timestamp=metadata.start_time,
            session_id=session.session_id,
            url=metadata.url,
            duration=metadata.duration,
            click_count=sum(1 for e in events if e.is_interaction("Click")),
            input_count=sum(1 for e in events if e.kind == EventKind.INPUT),
            page_view_count=navigations,
            error_count=sum(1 for e in events if e.kind == EventKind.ERROR),
        )
    )
    return moments
