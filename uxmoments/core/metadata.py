# ==============================================================================
# Session Metadata Builder
# ==============================================================================
"""
Derives whole-session facts (start, end, duration, URL, user agent) from a
normalized event list, and assembles Session objects from raw records.
"""

import logging
from collections.abc import Sequence
from typing import Any

from uxmoments.core.models import EventKind, NormalizedEvent, Session, SessionMetadata
from uxmoments.core.normalizer import extract_page_defaults, normalize

logger = logging.getLogger(__name__)

URL_BEARING_KINDS = (EventKind.NAVIGATE, EventKind.PAGE_META)


def build_metadata(events: Sequence[NormalizedEvent]) -> SessionMetadata:
    """
    Build session metadata from ordered events.

    Args:
        events: Events sorted ascending by timestamp

    Returns:
        SessionMetadata. All fields are zero/empty for an empty list.
        The URL is the most recent Navigate/PageMeta URL, or "" if none.
    """
    if not events:
        return SessionMetadata()

    start_time = events[0].timestamp
    end_time = events[-1].timestamp

    url = ""
    for event in reversed(events):
        if event.kind in URL_BEARING_KINDS and event.url:
            url = event.url
            break

    _, user_agent = extract_page_defaults(events)

    return SessionMetadata(
        start_time=start_time,
        end_time=end_time,
        duration=end_time - start_time,
        url=url,
        user_agent=user_agent,
    )


def build_session(
    session_id: str,
    raw_records: Sequence[Any],
    log: logging.Logger | None = None,
) -> Session:
    """
    Normalize raw records and wrap them in a Session with metadata.

    Raises:
        InvalidInputError: If raw_records is not a list
    """
    events = normalize(raw_records, log=log)
    return Session(session_id=session_id, events=events, metadata=build_metadata(events))
