# ==============================================================================
# Analytics Sessionizer
# ==============================================================================
"""
Groups external analytics events into per-visitor sessions.

A visitor is identified by the ``distinct_id`` attribute; events without one
belong to a shared "anonymous" visitor. A new session starts when the gap
since the visitor's previous event reaches the inactivity timeout.

Session ids are "{distinct_id}_{session_num}" with 1-based numbering per
visitor.
"""

import logging
from collections.abc import Sequence
from typing import Any

from uxmoments.core.correlation import normalize_external_events
from uxmoments.core.models import AnalyticsSession, ExternalEvent

logger = logging.getLogger(__name__)

ANONYMOUS_VISITOR = "anonymous"


class Sessionizer:
    """
    Inactivity-timeout session grouping.

    Works on ExternalEvent objects only; no I/O.
    """

    def __init__(self, timeout_minutes: int = 30):
        """
        Args:
            timeout_minutes: Inactivity timeout in minutes. A gap of at
                             least this long starts a new session.
        """
        self.timeout_ms = timeout_minutes * 60 * 1000

    def is_session_expired(self, last_activity: int | None, event_timestamp: int) -> bool:
        if last_activity is None:
            return True
        return event_timestamp - last_activity >= self.timeout_ms

    def group(self, events: Sequence[ExternalEvent]) -> list[AnalyticsSession]:
        """
        Group events into sessions.

        Returns:
            Sessions ordered by start time (ties by session id)
        """
        ordered = sorted(events, key=lambda e: e.timestamp)

        current: dict[str, list[ExternalEvent]] = {}
        session_nums: dict[str, int] = {}
        closed: list[AnalyticsSession] = []

        for event in ordered:
            visitor = event.distinct_id or ANONYMOUS_VISITOR
            session_events = current.get(visitor)
            last_activity = session_events[-1].timestamp if session_events else None

            if self.is_session_expired(last_activity, event.timestamp):
                if session_events:
                    closed.append(self._build(visitor, session_nums[visitor], session_events))
                session_nums[visitor] = session_nums.get(visitor, 0) + 1
                session_events = current[visitor] = []
            session_events.append(event)

        for visitor, session_events in current.items():
            closed.append(self._build(visitor, session_nums[visitor], session_events))

        closed.sort(key=lambda s: (s.start_time, s.session_id))
        return closed

    @staticmethod
    def _build(visitor: str, session_num: int, events: list[ExternalEvent]) -> AnalyticsSession:
        return AnalyticsSession(
            session_id=f"{visitor}_{session_num}",
            distinct_id=visitor,
            start_time=events[0].timestamp,
            end_time=events[-1].timestamp,
            events=events,
        )


def group_external_events(
    events: Sequence[Any],
    timeout_minutes: int = 30,
    log: logging.Logger | None = None,
) -> list[AnalyticsSession]:
    """
    Group external events (ExternalEvents or raw mappings) into sessions.

    Raises:
        InvalidInputError: If events is not a list or tuple
    """
    log = log or logger
    normalized = normalize_external_events(events, log=log)
    if not normalized:
        log.warning("No events provided for session grouping")
        return []

    sessions = Sessionizer(timeout_minutes).group(normalized)
    log.info("Grouped %d events into %d sessions", len(normalized), len(sessions))
    return sessions
