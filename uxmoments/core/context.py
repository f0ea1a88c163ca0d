# ==============================================================================
# Evidence Context Windows
# ==============================================================================
"""
Bounded windows of surrounding events attached to moments as evidence.
"""

from collections.abc import Sequence

from uxmoments.core.models import MouseMoveDetails, NormalizedEvent

# Default number of events taken on each side of a moment
EVENT_CONTEXT_WINDOW_SIZE = 5

# Mouse-move samples kept per context event
MAX_CONTEXT_POSITIONS = 3


def context_around(
    events: Sequence[NormalizedEvent],
    index: int,
    window: int = EVENT_CONTEXT_WINDOW_SIZE,
) -> list[NormalizedEvent]:
    """
    Get the events surrounding ``events[index]``.

    Args:
        events: Ordered session events (not modified)
        index: Index of the event the moment was detected on
        window: Number of events to include before and after

    Returns:
        New list of up to 2 * window + 1 events. Mouse-move position lists
        are truncated to MAX_CONTEXT_POSITIONS samples. Empty if index is
        out of range.
    """
    if not events or index < 0 or index >= len(events):
        return []

    start = max(0, index - window)
    end = min(len(events) - 1, index + window)
    return [_simplify(e) for e in events[start : end + 1]]


def _simplify(event: NormalizedEvent) -> NormalizedEvent:
    details = event.details
    if isinstance(details, MouseMoveDetails) and len(details.positions) > MAX_CONTEXT_POSITIONS:
        trimmed = details.model_copy(update={"positions": details.positions[:MAX_CONTEXT_POSITIONS]})
        return event.model_copy(update={"details": trimmed})
    return event
