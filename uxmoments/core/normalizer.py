# ==============================================================================
# Event Normalizer
# ==============================================================================
"""
Maps heterogeneous raw interaction records into NormalizedEvent objects.

Raw records follow the rrweb recording format:
    {"type": <int record type>, "timestamp": <epoch ms>, "data": {...}}

Records may also name a normalized kind directly ("type": "Navigate"), which
is how navigation is usually injected by recorders that do not emit it.

Recovery rules:
- Top-level input that is not a list raises InvalidInputError
- A record without a usable timestamp is skipped (logged)
- A record whose payload cannot be interpreted becomes an Unknown event
  with empty details
"""

import json
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from uxmoments.core.errors import InvalidInputError, MalformedRecordWarning
from uxmoments.core.models import (
    CustomDetails,
    ElementRef,
    ErrorDetails,
    EventKind,
    InputDetails,
    MouseInteractionDetails,
    MouseMoveDetails,
    NavigateDetails,
    NormalizedEvent,
    PageMetaDetails,
    PointerPosition,
    Position,
    ScrollDetails,
    UnknownDetails,
    Viewport,
    to_epoch_ms,
)

logger = logging.getLogger(__name__)


# ==============================================================================
# rrweb Constants
# ==============================================================================

# Top-level record types
DOM_CONTENT_LOADED = 0
LOAD = 1
FULL_SNAPSHOT = 2
INCREMENTAL_SNAPSHOT = 3
META = 4
CUSTOM = 5
PLUGIN = 6

RECORD_TYPE_NAMES = {
    DOM_CONTENT_LOADED: "DomContentLoaded",
    LOAD: "Load",
    FULL_SNAPSHOT: "FullSnapshot",
    INCREMENTAL_SNAPSHOT: "IncrementalSnapshot",
    META: "Meta",
    CUSTOM: "Custom",
    PLUGIN: "Plugin",
}

# Incremental snapshot sources
SOURCE_NAMES = {
    0: "Mutation",
    1: "MouseMove",
    2: "MouseInteraction",
    3: "Scroll",
    4: "ViewportResize",
    5: "Input",
    6: "TouchMove",
    7: "MediaInteraction",
    8: "StyleSheetRule",
    9: "CanvasMutation",
    10: "Font",
    11: "Log",
    12: "Drag",
    13: "StyleDeclaration",
    14: "Selection",
}

MOUSE_INTERACTION_NAMES = {
    0: "MouseDown",
    1: "MouseUp",
    2: "Click",
    3: "ContextMenu",
    4: "DblClick",
    5: "Focus",
    6: "Blur",
    7: "TouchStart",
    8: "TouchMove_Departed",
    9: "TouchEnd",
}

NAVIGATION_TAGS = frozenset({"navigate", "navigation", "$pageview"})
ERROR_TAGS = frozenset({"error", "$exception"})


# ==============================================================================
# Public API
# ==============================================================================


def normalize(raw_records: Sequence[Any], log: logging.Logger | None = None) -> list[NormalizedEvent]:
    """
    Normalize raw interaction records into an ordered event list.

    Args:
        raw_records: List of raw records (dicts with type, timestamp, data)
        log: Optional logger override. Defaults to this module's logger.

    Returns:
        New list of NormalizedEvent sorted ascending by timestamp.
        Ties keep their input order.

    Raises:
        InvalidInputError: If raw_records is not a list or tuple
    """
    log = log or logger
    if not isinstance(raw_records, (list, tuple)):
        raise InvalidInputError(
            f"raw records must be a list, got {type(raw_records).__name__}"
        )

    events: list[NormalizedEvent] = []
    skipped = 0
    for index, record in enumerate(raw_records):
        try:
            events.append(normalize_record(record, index))
        except MalformedRecordWarning as warning:
            skipped += 1
            log.warning("Skipping malformed record: %s", warning)

    # sorted() is stable, so equal timestamps keep input order
    events = sorted(events, key=lambda e: e.timestamp)

    if skipped:
        log.info("Normalized %d records (%d skipped)", len(events), skipped)
    else:
        log.debug("Normalized %d records", len(events))
    return events


def normalize_record(record: Any, index: int | None = None) -> NormalizedEvent:
    """
    Normalize a single raw record.

    Raises:
        MalformedRecordWarning: If the record is not a mapping or has no
            usable timestamp. Payload problems never raise; they produce
            an Unknown event instead.
    """
    if not isinstance(record, Mapping):
        raise MalformedRecordWarning(
            f"expected a mapping, got {type(record).__name__}", index
        )

    try:
        timestamp = to_epoch_ms(record.get("timestamp"))
    except (ValueError, OverflowError) as e:
        raise MalformedRecordWarning(f"unusable timestamp ({e})", index) from e

    data = _parse_payload(record.get("data", {}))
    if data is None:
        return NormalizedEvent(timestamp=timestamp, kind=EventKind.UNKNOWN)

    try:
        return _map_record(record.get("type"), timestamp, data)
    except (ValidationError, ValueError, TypeError, AttributeError, KeyError) as e:
        logger.debug("Record %s has an unrecognized payload shape: %s", index, e)
        return NormalizedEvent(timestamp=timestamp, kind=EventKind.UNKNOWN)


def extract_page_defaults(events: Sequence[NormalizedEvent]) -> tuple[str, str]:
    """
    Get (url, user_agent) from the first PageMeta event.

    Returns empty strings when no PageMeta event carries them.
    """
    for event in events:
        if event.kind == EventKind.PAGE_META:
            return event.url or "", event.details.user_agent or ""
    return "", ""


# ==============================================================================
# Record Mapping
# ==============================================================================


def _parse_payload(data: Any) -> dict | None:
    """Return the payload as a dict, or None if it cannot be parsed."""
    if data is None:
        return {}
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except json.JSONDecodeError:
            return None
    if not isinstance(data, Mapping):
        return None
    return dict(data)


def _map_record(record_type: Any, timestamp: int, data: dict) -> NormalizedEvent:
    if isinstance(record_type, str) and not record_type.isdigit():
        return _map_named(record_type, timestamp, data)

    record_type = int(record_type)
    if record_type == INCREMENTAL_SNAPSHOT:
        return _map_incremental(timestamp, data)
    if record_type == META:
        href = _str_or_none(data.get("href"))
        return NormalizedEvent(
            timestamp=timestamp,
            kind=EventKind.PAGE_META,
            url=href,
            details=PageMetaDetails(
                href=href,
                width=_int_or_none(data.get("width")),
                height=_int_or_none(data.get("height")),
                user_agent=_str_or_none(data.get("userAgent")),
            ),
        )
    if record_type == CUSTOM:
        return _map_custom(timestamp, data)

    return NormalizedEvent(
        timestamp=timestamp,
        kind=EventKind.UNKNOWN,
        details=UnknownDetails(record_type=RECORD_TYPE_NAMES.get(record_type, str(record_type))),
    )


def _map_named(kind_name: str, timestamp: int, data: dict) -> NormalizedEvent:
    """Map a record that names its normalized kind directly."""
    kind = EventKind(kind_name)
    element = _element(data.get("element") or data.get("target"), data)
    url = None
    if kind in (EventKind.NAVIGATE, EventKind.PAGE_META):
        url = _str_or_none(data.get("href") or data.get("url"))

    payload = {k: v for k, v in data.items() if k not in ("element", "target")}
    if kind == EventKind.NAVIGATE:
        details = NavigateDetails(href=url)
    elif kind == EventKind.PAGE_META:
        details = PageMetaDetails.model_validate({**payload, "href": url})
    elif kind == EventKind.CUSTOM:
        details = CustomDetails(tag=_str_or_none(data.get("tag")), payload=data.get("payload") or {})
    elif kind == EventKind.UNKNOWN:
        details = UnknownDetails(data=payload)
    else:
        details = {
            EventKind.MOUSE_INTERACTION: MouseInteractionDetails,
            EventKind.INPUT: InputDetails,
            EventKind.SCROLL: ScrollDetails,
            EventKind.MOUSE_MOVE: MouseMoveDetails,
            EventKind.VIEWPORT: Viewport,
            EventKind.ERROR: ErrorDetails,
        }[kind].model_validate(payload)

    if kind not in (EventKind.MOUSE_INTERACTION, EventKind.INPUT):
        element = None
    return NormalizedEvent(
        timestamp=timestamp, kind=kind, details=details, url=url, element=element
    )


def _map_incremental(timestamp: int, data: dict) -> NormalizedEvent:
    source = data.get("source")
    source_name = SOURCE_NAMES.get(source, "Unknown")

    if data.get("error"):
        return NormalizedEvent(
            timestamp=timestamp, kind=EventKind.ERROR, details=ErrorDetails(error=data["error"])
        )

    if source_name in ("MouseMove", "TouchMove"):
        positions = [
            PointerPosition(
                x=_number(p.get("x")),
                y=_number(p.get("y")),
                time_offset=int(_number(p.get("timeOffset"))),
            )
            for p in data.get("positions") or []
            if isinstance(p, Mapping)
        ]
        return NormalizedEvent(
            timestamp=timestamp,
            kind=EventKind.MOUSE_MOVE,
            details=MouseMoveDetails(positions=positions),
        )

    if source_name == "MouseInteraction":
        return NormalizedEvent(
            timestamp=timestamp,
            kind=EventKind.MOUSE_INTERACTION,
            details=MouseInteractionDetails(
                interaction_type=MOUSE_INTERACTION_NAMES.get(data.get("type"), "Unknown")
            ),
            element=_element(data.get("target"), data),
        )

    if source_name == "Scroll":
        return NormalizedEvent(
            timestamp=timestamp,
            kind=EventKind.SCROLL,
            details=ScrollDetails(x=_number(data.get("x")), y=_number(data.get("y"))),
        )

    if source_name == "ViewportResize":
        return NormalizedEvent(
            timestamp=timestamp,
            kind=EventKind.VIEWPORT,
            details=Viewport(
                width=int(_number(data.get("width"))), height=int(_number(data.get("height")))
            ),
        )

    if source_name == "Input":
        value = data.get("text")
        if value is None:
            value = data.get("value")
        checked = data.get("isChecked")
        return NormalizedEvent(
            timestamp=timestamp,
            kind=EventKind.INPUT,
            details=InputDetails(
                value=None if value is None else str(value),
                is_checked=checked if isinstance(checked, bool) else None,
            ),
            element=_element(data.get("target"), None),
        )

    return NormalizedEvent(
        timestamp=timestamp,
        kind=EventKind.UNKNOWN,
        details=UnknownDetails(record_type=f"IncrementalSnapshot:{source_name}"),
    )


def _map_custom(timestamp: int, data: dict) -> NormalizedEvent:
    tag = _str_or_none(data.get("tag"))
    payload = data.get("payload")
    payload = dict(payload) if isinstance(payload, Mapping) else {}

    if tag and tag.lower() in NAVIGATION_TAGS:
        href = _str_or_none(payload.get("href") or payload.get("url"))
        return NormalizedEvent(
            timestamp=timestamp,
            kind=EventKind.NAVIGATE,
            url=href,
            details=NavigateDetails(href=href),
        )

    if tag and tag.lower() in ERROR_TAGS:
        error = payload.get("error") or payload.get("message") or payload
        return NormalizedEvent(
            timestamp=timestamp, kind=EventKind.ERROR, details=ErrorDetails(error=error)
        )

    return NormalizedEvent(
        timestamp=timestamp, kind=EventKind.CUSTOM, details=CustomDetails(tag=tag, payload=payload)
    )


def _element(target: Any, pointer: Mapping | None) -> ElementRef | None:
    """Build an ElementRef from an rrweb target node, if present."""
    if not isinstance(target, Mapping):
        return None

    attributes = target.get("attributes")
    if isinstance(attributes, Mapping):
        attributes = {str(k): str(v) for k, v in attributes.items() if v is not None}
    else:
        attributes = None

    position = None
    if pointer is not None:
        source = target.get("position") if isinstance(target.get("position"), Mapping) else {}
        position = Position(
            x=_number(pointer.get("x", source.get("x"))),
            y=_number(pointer.get("y", source.get("y"))),
            width=_number(target.get("width", source.get("width"))),
            height=_number(target.get("height", source.get("height"))),
        )

    return ElementRef(
        tag=str(target.get("tagName") or target.get("tag") or "").upper(),
        id=_str_or_none(target.get("id")),
        class_name=_str_or_none(target.get("className")),
        text_content=_str_or_none(target.get("textContent")),
        attributes=attributes,
        position=position,
    )


def _number(value: Any) -> float:
    """Coerce to float, reading missing or invalid values as 0."""
    if isinstance(value, bool) or value is None:
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _int_or_none(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _str_or_none(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)
