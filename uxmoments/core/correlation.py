# ==============================================================================
# Temporal Join Engine
# ==============================================================================
"""
Joins detected moments with external analytics events by time proximity.

For every moment, each external event closer than WINDOW_MS is attached,
nearest first, with a relevance score that falls linearly from 1.0 at the
moment's timestamp to 0.0 at the window edge.

External events are sorted once; each moment locates its window with a
binary search, so the join is O((M + E) log E + matches).
"""

import logging
from bisect import bisect_left, bisect_right
from collections.abc import Iterable, Mapping, Sequence
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from pydantic import ValidationError

from uxmoments.core.errors import InvalidInputError
from uxmoments.core.models import (
    CorrelatedMoment,
    ExternalEvent,
    Moment,
    ScoredExternalEvent,
)

logger = logging.getLogger(__name__)

WINDOW_MS = 30000
SCORE_PRECISION = Decimal("0.01")


def relevance_score(distance_ms: int, window_ms: int = WINDOW_MS) -> float:
    """Linear proximity score in [0, 1], rounded half up to two decimals."""
    score = min(1.0, max(0.0, 1 - distance_ms / window_ms))
    # Exact binary value, so 0.625 goes to 0.63 and not to the even 0.62
    return float(Decimal(score).quantize(SCORE_PRECISION, rounding=ROUND_HALF_UP))


def normalize_external_events(
    external_events: Sequence[Any],
    log: logging.Logger | None = None,
) -> list[ExternalEvent]:
    """
    Coerce external events to ExternalEvent with epoch-ms timestamps.

    Accepts ExternalEvent instances, mappings shaped like ExternalEvent
    (``timestamp``, ``kind``, ``attributes``) and PostHog export records
    (``timestamp``, ``event``, ``properties``). Unusable records are logged
    and skipped.

    Raises:
        InvalidInputError: If external_events is not a list or tuple
    """
    log = log or logger
    if not isinstance(external_events, (list, tuple)):
        raise InvalidInputError(
            f"external events must be a list, got {type(external_events).__name__}"
        )

    normalized = []
    for index, event in enumerate(external_events):
        try:
            normalized.append(_to_external_event(event))
        except (ValidationError, ValueError, TypeError, KeyError) as e:
            log.warning("Skipping external event %d: %s", index, e)
    return normalized


def _to_external_event(event: Any) -> ExternalEvent:
    if isinstance(event, ExternalEvent):
        return event
    if not isinstance(event, Mapping):
        raise TypeError(f"expected a mapping, got {type(event).__name__}")
    if "kind" in event:
        return ExternalEvent.model_validate(event)
    return ExternalEvent.from_posthog(event)


def correlate(
    moments: Iterable[Moment],
    external_events: Sequence[Any],
    log: logging.Logger | None = None,
) -> list[CorrelatedMoment]:
    """
    Attach nearby external events to each moment.

    Args:
        moments: Detected moments (any order; output keeps it)
        external_events: ExternalEvents or raw mappings (not modified)
        log: Optional logger override

    Returns:
        One CorrelatedMoment per input moment. Attached events satisfy
        |event.timestamp - moment.timestamp| < WINDOW_MS and are ordered by
        distance, then timestamp, then input order.
    """
    log = log or logger
    events = normalize_external_events(external_events, log=log)

    # (timestamp, input index) keeps the order fully deterministic
    ordered = sorted(range(len(events)), key=lambda i: (events[i].timestamp, i))
    timestamps = [events[i].timestamp for i in ordered]

    correlated = []
    attached = 0
    for moment in moments:
        lo = bisect_right(timestamps, moment.timestamp - WINDOW_MS)
        hi = bisect_left(timestamps, moment.timestamp + WINDOW_MS)

        window = ordered[lo:hi]
        window.sort(
            key=lambda i: (
                abs(events[i].timestamp - moment.timestamp),
                events[i].timestamp,
                i,
            )
        )
        nearby = [
            ScoredExternalEvent(
                timestamp=events[i].timestamp,
                kind=events[i].kind,
                attributes=events[i].attributes,
                relevance_score=relevance_score(abs(events[i].timestamp - moment.timestamp)),
            )
            for i in window
        ]
        attached += len(nearby)
        correlated.append(CorrelatedMoment(moment=moment, nearby_external_events=nearby))

    log.debug(
        "Correlated %d moments with %d external events (%d attachments)",
        len(correlated),
        len(events),
        attached,
    )
    return correlated
