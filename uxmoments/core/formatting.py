# ==============================================================================
# Formatting Helpers
# ==============================================================================
"""
Human-readable renderings of durations, elements, events and moments.

Used by the CLI summary view. Nothing here affects detection.
"""

import re
from collections import Counter
from collections.abc import Iterable

from uxmoments.core.models import (
    CorrelatedMoment,
    DeadClickMoment,
    ElementRef,
    FormAbandonmentMoment,
    HesitationMoment,
    HorizontalScrollMobileMoment,
    JSErrorMoment,
    Moment,
    MouseHoveringMoment,
    MultipleSubmissionsMoment,
    NavigationLoopMoment,
    NormalizedEvent,
    RageClickMoment,
    RapidScrollingMoment,
    SessionMetricsMoment,
    ShortSessionMoment,
)

MOMENT_EXPLANATIONS = {
    "RageClick": "Multiple rapid clicks in the same area",
    "DeadClick": "Clicks on non-interactive elements",
    "Hesitation": "Long pauses during active interaction",
    "FormAbandonment": "Form filled in but left without submitting",
    "NavigationLoop": "Same page visited repeatedly in a short time",
    "RapidScrolling": "Quick scrolling, possibly searching for something",
    "MouseHovering": "Mouse resting in the same area for a while",
    "MultipleSubmissions": "Submit button clicked several times",
    "HorizontalScrollMobile": "Horizontal scrolling on a mobile-sized viewport",
    "JSError": "JavaScript error during the session",
    "ShortSession": "Brief session with few page views",
    "SessionMetrics": "Overall session statistics",
}

_WHITESPACE = re.compile(r"\s+")


def format_duration(ms: int | float) -> str:
    """Format a duration: "850ms", "12.5s" or "3m 4s"."""
    if ms < 1000:
        return f"{int(ms)}ms"
    if ms < 60000:
        return f"{ms / 1000:.1f}s"
    return f"{int(ms // 60000)}m {int((ms % 60000) // 1000)}s"


def format_time_diff(ms: int | float) -> str:
    """Format a signed offset: "+250ms", "-1.5s"."""
    sign = "+" if ms >= 0 else "-"
    abs_ms = abs(ms)
    if abs_ms < 1000:
        return f"{sign}{int(abs_ms)}ms"
    return f"{sign}{abs_ms / 1000:.1f}s"


def truncate(text: str | None, max_length: int) -> str:
    """Cut text to max_length characters, adding "..." when shortened."""
    if not text:
        return ""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


def format_element(element: ElementRef | None) -> str:
    """CSS-like description, e.g. 'BUTTON#buy.btn.primary "Buy now"'."""
    if element is None:
        return "Unknown element"

    description = element.tag or "Unknown"
    if element.id:
        description += f"#{element.id}"
    if element.class_name:
        description += "." + _WHITESPACE.sub(".", element.class_name.strip())
    if element.text_content:
        description += f' "{truncate(element.text_content, 30)}"'
    return description


def format_event(event: NormalizedEvent) -> str:
    """Short description such as 'MouseInteraction:Click on BUTTON#buy'."""
    description = event.kind.value
    if event.interaction_type:
        description += f":{event.interaction_type}"
    if event.element is not None:
        description += f" on {format_element(event.element)}"
    return description


def describe_moment(moment: Moment) -> str:
    """One-line description of a moment's type-specific facts."""
    match moment:
        case RageClickMoment():
            return f"{moment.click_count} rapid clicks on {format_element(moment.element)}"
        case DeadClickMoment():
            return f"Click on non-interactive {format_element(moment.element)}"
        case HesitationMoment():
            return (
                f"Paused {format_duration(moment.duration_ms)} between "
                f"{format_event(moment.before_event)} and {format_event(moment.after_event)}"
            )
        case FormAbandonmentMoment():
            return f"Form {moment.form_id} left after {moment.interaction_count} inputs"
        case NavigationLoopMoment():
            return (
                f"Visited {moment.frequency} times within "
                f"{format_duration(moment.time_window)}"
            )
        case RapidScrollingMoment():
            return f"{moment.scroll_count} scrolls in {format_duration(moment.duration)}"
        case MouseHoveringMoment():
            return (
                f"Hovered {format_duration(moment.duration)} near "
                f"({moment.position.x:.0f}, {moment.position.y:.0f})"
            )
        case MultipleSubmissionsMoment():
            return f"Submitted {moment.count} times via {format_element(moment.element)}"
        case HorizontalScrollMobileMoment():
            return (
                f"Scrolled {moment.scroll_x:.0f}px sideways at "
                f"{moment.viewport.width}x{moment.viewport.height}"
            )
        case JSErrorMoment():
            return f"Error: {truncate(str(moment.error), 80)}"
        case ShortSessionMoment():
            return (
                f"Session lasted {format_duration(moment.duration_ms)} "
                f"over {moment.page_count} pages"
            )
        case SessionMetricsMoment():
            return (
                f"{format_duration(moment.duration)}, {moment.click_count} clicks, "
                f"{moment.input_count} inputs, {moment.page_view_count} page views, "
                f"{moment.error_count} errors"
            )
    return MOMENT_EXPLANATIONS.get(moment.type.value, moment.type.value)


def summarize_moments(correlated: Iterable[CorrelatedMoment]) -> dict:
    """
    Aggregate correlated moments for display.

    Returns:
        Dict with:
        - by_type: {pattern: count}, most frequent first
        - by_url: {url: [distinct patterns in first-seen order]}
        - external_matches: total number of attached external events
    """
    by_type: Counter[str] = Counter()
    by_url: dict[str, list[str]] = {}
    external_matches = 0

    for item in correlated:
        pattern = item.moment.type.value
        by_type[pattern] += 1
        external_matches += len(item.nearby_external_events)
        if item.moment.url:
            patterns = by_url.setdefault(item.moment.url, [])
            if pattern not in patterns:
                patterns.append(pattern)

    return {
        "by_type": dict(by_type.most_common()),
        "by_url": by_url,
        "external_matches": external_matches,
    }
