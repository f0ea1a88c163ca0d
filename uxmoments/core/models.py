# ==============================================================================
# Domain Models
# ==============================================================================
"""
Pydantic models for interaction events, sessions, moments and external events.

These models are used for:
- Representing normalized interaction events (one tagged details model per kind)
- Carrying detected moments and their evidence
- Joining moments with external analytics events

All models are frozen once built and serialize to JSON-compatible dicts with
camelCase keys via ``to_record()``. This module has no dependencies beyond
Pydantic.
"""

import math
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal, Mapping, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializeAsAny,
    TypeAdapter,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


class DomainModel(BaseModel):
    """Base for all models: frozen, snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def to_record(self) -> dict:
        """Serialize to a JSON-compatible dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ==============================================================================
# Timestamps
# ==============================================================================

_DATETIME = TypeAdapter(datetime)


def to_epoch_ms(value: Any) -> int:
    """
    Normalize a timestamp to integer epoch milliseconds.

    Integers and floats are taken to be epoch milliseconds already. Numeric
    strings are parsed as numbers. Other strings are parsed as ISO-8601.
    Naive datetimes are treated as UTC.

    Raises:
        ValueError: If the value cannot be interpreted as a timestamp
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f"unsupported timestamp: {value!r}")

    if isinstance(value, str):
        text = value.strip()
        try:
            value = float(text)
        except ValueError:
            value = _DATETIME.validate_python(text)

    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            raise ValueError(f"non-finite timestamp: {value!r}")
        return int(round(value))

    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return int(round(value.timestamp() * 1000))

    raise ValueError(f"unsupported timestamp: {value!r}")


# ==============================================================================
# Interaction Events
# ==============================================================================


class EventKind(str, Enum):
    """Kinds of normalized interaction events."""

    PAGE_META = "PageMeta"
    NAVIGATE = "Navigate"
    MOUSE_INTERACTION = "MouseInteraction"
    INPUT = "Input"
    SCROLL = "Scroll"
    MOUSE_MOVE = "MouseMove"
    VIEWPORT = "Viewport"
    ERROR = "Error"
    CUSTOM = "Custom"
    UNKNOWN = "Unknown"


class Position(DomainModel):
    """Position and size of a DOM element, in CSS pixels."""

    x: float = 0
    y: float = 0
    width: float = 0
    height: float = 0


class ElementRef(DomainModel):
    """
    The DOM node involved in an interaction.

    Attributes:
        tag: Upper-cased HTML tag name (e.g. "BUTTON")
        id: Element id attribute
        class_name: Raw class attribute
        text_content: Visible text of the element
        attributes: Element attributes as strings
        position: Pointer position and element size at interaction time
    """

    tag: str = ""
    id: str | None = None
    class_name: str | None = None
    text_content: str | None = None
    attributes: dict[str, str] | None = None
    position: Position | None = None

    def attribute(self, name: str) -> str | None:
        """Get an attribute value, or None when absent."""
        if not self.attributes:
            return None
        return self.attributes.get(name)

    def class_contains(self, *fragments: str) -> bool:
        """True if the class attribute contains any of the given fragments."""
        if not self.class_name:
            return False
        return any(fragment in self.class_name for fragment in fragments)

    @property
    def point(self) -> tuple[float, float]:
        """(x, y) of the interaction, reading missing values as 0."""
        if self.position is None:
            return 0.0, 0.0
        return self.position.x or 0.0, self.position.y or 0.0


class PageMetaDetails(DomainModel):
    href: str | None = None
    width: int | None = None
    height: int | None = None
    user_agent: str | None = None


class NavigateDetails(DomainModel):
    href: str | None = None


class MouseInteractionDetails(DomainModel):
    interaction_type: str = "Unknown"


class InputDetails(DomainModel):
    value: str | None = None
    is_checked: bool | None = None


class ScrollDetails(DomainModel):
    x: float = 0
    y: float = 0


class PointerPosition(DomainModel):
    x: float = 0
    y: float = 0
    time_offset: int = 0


class MouseMoveDetails(DomainModel):
    positions: list[PointerPosition] = Field(default_factory=list)


class Viewport(DomainModel):
    """Viewport dimensions in CSS pixels. Width 0 means unknown."""

    width: int = 0
    height: int = 0


class ErrorDetails(DomainModel):
    error: Any = None


class CustomDetails(DomainModel):
    tag: str | None = None
    payload: dict[str, Any] = Field(default_factory=dict)


class UnknownDetails(DomainModel):
    record_type: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)


EventDetails = Union[
    PageMetaDetails,
    NavigateDetails,
    MouseInteractionDetails,
    InputDetails,
    ScrollDetails,
    MouseMoveDetails,
    Viewport,
    ErrorDetails,
    CustomDetails,
    UnknownDetails,
]

DETAILS_BY_KIND: dict[EventKind, type[DomainModel]] = {
    EventKind.PAGE_META: PageMetaDetails,
    EventKind.NAVIGATE: NavigateDetails,
    EventKind.MOUSE_INTERACTION: MouseInteractionDetails,
    EventKind.INPUT: InputDetails,
    EventKind.SCROLL: ScrollDetails,
    EventKind.MOUSE_MOVE: MouseMoveDetails,
    EventKind.VIEWPORT: Viewport,
    EventKind.ERROR: ErrorDetails,
    EventKind.CUSTOM: CustomDetails,
    EventKind.UNKNOWN: UnknownDetails,
}


class NormalizedEvent(DomainModel):
    """
    A single interaction event in the normalized representation.

    The type of ``details`` is determined by ``kind`` (see DETAILS_BY_KIND);
    a mismatched pair is rejected at construction time.

    Attributes:
        timestamp: Epoch milliseconds
        kind: Event kind
        details: Kind-specific payload
        url: Page URL carried by the event (PageMeta and Navigate only)
        element: DOM element involved (MouseInteraction and Input only)
    """

    timestamp: int = Field(..., description="Unix timestamp in milliseconds")
    kind: EventKind = Field(..., description="Event kind")
    details: EventDetails = Field(..., description="Kind-specific payload")
    url: str | None = None
    element: ElementRef | None = None

    @model_validator(mode="before")
    @classmethod
    def _details_for_kind(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "kind" not in data:
            return data
        details_cls = DETAILS_BY_KIND[EventKind(data["kind"])]
        details = data.get("details")
        if details is None:
            return {**data, "details": details_cls()}
        if isinstance(details, dict):
            return {**data, "details": details_cls.model_validate(details)}
        return data

    @model_validator(mode="after")
    def _check_details_kind(self) -> "NormalizedEvent":
        expected = DETAILS_BY_KIND[self.kind]
        if type(self.details) is not expected:
            raise ValueError(
                f"{self.kind.value} event requires {expected.__name__}, "
                f"got {type(self.details).__name__}"
            )
        return self

    @property
    def interaction_type(self) -> str | None:
        """Mouse interaction type, or None for other kinds."""
        if isinstance(self.details, MouseInteractionDetails):
            return self.details.interaction_type
        return None

    def is_interaction(self, *interaction_types: str) -> bool:
        """True for a MouseInteraction event of one of the given types."""
        return self.interaction_type in interaction_types


# ==============================================================================
# Sessions
# ==============================================================================


class SessionMetadata(DomainModel):
    """
    Whole-session facts derived from the event list.

    Attributes:
        start_time: Timestamp of the first event (0 if empty)
        end_time: Timestamp of the last event (0 if empty)
        duration: end_time - start_time in milliseconds
        url: Most recent page URL seen in the session, or ""
        user_agent: User agent from the first page metadata event, or ""
    """

    start_time: int = 0
    end_time: int = 0
    duration: int = 0
    url: str = ""
    user_agent: str = ""


class Session(DomainModel):
    """One continuous, ordered sequence of interaction events."""

    session_id: str = Field(..., description="Session identifier")
    events: list[NormalizedEvent] = Field(
        default_factory=list, description="Events ordered by timestamp"
    )
    metadata: SessionMetadata = Field(default_factory=SessionMetadata)

    @property
    def event_count(self) -> int:
        """Total number of events in session."""
        return len(self.events)


# ==============================================================================
# Moments
# ==============================================================================


class PatternKind(str, Enum):
    """Behavioral patterns the engine can detect."""

    RAGE_CLICK = "RageClick"
    DEAD_CLICK = "DeadClick"
    HESITATION = "Hesitation"
    FORM_ABANDONMENT = "FormAbandonment"
    NAVIGATION_LOOP = "NavigationLoop"
    RAPID_SCROLLING = "RapidScrolling"
    MOUSE_HOVERING = "MouseHovering"
    MULTIPLE_SUBMISSIONS = "MultipleSubmissions"
    HORIZONTAL_SCROLL_MOBILE = "HorizontalScrollMobile"
    JS_ERROR = "JSError"
    SHORT_SESSION = "ShortSession"
    SESSION_METRICS = "SessionMetrics"


class Moment(DomainModel):
    """
    A detected occurrence of a behavioral pattern within a session.

    Attributes:
        type: Pattern that was detected
        timestamp: When the pattern was recognized (epoch ms)
        session_id: Session the moment belongs to
        url: Page URL at the time of the moment
        context: Bounded window of surrounding events, for evidence
    """

    type: PatternKind
    timestamp: int
    session_id: str
    url: str = ""
    context: list[NormalizedEvent] | None = None


class Point(DomainModel):
    x: float = 0
    y: float = 0


class RageClickMoment(Moment):
    type: Literal[PatternKind.RAGE_CLICK] = PatternKind.RAGE_CLICK
    click_count: int
    element: ElementRef | None = None


class DeadClickMoment(Moment):
    type: Literal[PatternKind.DEAD_CLICK] = PatternKind.DEAD_CLICK
    element: ElementRef


class HesitationMoment(Moment):
    type: Literal[PatternKind.HESITATION] = PatternKind.HESITATION
    duration_ms: int
    before_event: NormalizedEvent
    after_event: NormalizedEvent


class FormAbandonmentMoment(Moment):
    type: Literal[PatternKind.FORM_ABANDONMENT] = PatternKind.FORM_ABANDONMENT
    form_id: str
    interaction_count: int
    last_value: str | None = None
    form_completed: bool = False


class NavigationLoopMoment(Moment):
    type: Literal[PatternKind.NAVIGATION_LOOP] = PatternKind.NAVIGATION_LOOP
    frequency: int
    time_window: int


class RapidScrollingMoment(Moment):
    type: Literal[PatternKind.RAPID_SCROLLING] = PatternKind.RAPID_SCROLLING
    scroll_count: int
    duration: int


class MouseHoveringMoment(Moment):
    type: Literal[PatternKind.MOUSE_HOVERING] = PatternKind.MOUSE_HOVERING
    duration: int
    position: Point


class MultipleSubmissionsMoment(Moment):
    type: Literal[PatternKind.MULTIPLE_SUBMISSIONS] = PatternKind.MULTIPLE_SUBMISSIONS
    count: int
    element: ElementRef | None = None


class HorizontalScrollMobileMoment(Moment):
    type: Literal[PatternKind.HORIZONTAL_SCROLL_MOBILE] = PatternKind.HORIZONTAL_SCROLL_MOBILE
    viewport: Viewport
    scroll_x: float


class JSErrorMoment(Moment):
    type: Literal[PatternKind.JS_ERROR] = PatternKind.JS_ERROR
    error: Any = None


class ShortSessionMoment(Moment):
    type: Literal[PatternKind.SHORT_SESSION] = PatternKind.SHORT_SESSION
    duration_ms: int
    page_count: int


class SessionMetricsMoment(Moment):
    type: Literal[PatternKind.SESSION_METRICS] = PatternKind.SESSION_METRICS
    duration: int = 0
    click_count: int = 0
    input_count: int = 0
    page_view_count: int = 0
    error_count: int = 0


# ==============================================================================
# External Events and Correlation
# ==============================================================================


class ExternalEvent(DomainModel):
    """
    An event captured by an independent analytics system.

    The timestamp is normalized to epoch milliseconds on construction, so
    ISO-8601 strings and datetimes are accepted.

    Attributes:
        timestamp: Epoch milliseconds
        kind: Event name (e.g. "$pageview")
        attributes: Opaque event properties
    """

    timestamp: int = Field(..., description="Unix timestamp in milliseconds")
    kind: str = Field(..., description="Event name")
    attributes: dict[str, Any] = Field(default_factory=dict)

    @field_validator("timestamp", mode="before")
    @classmethod
    def _normalize_timestamp(cls, value: Any) -> int:
        return to_epoch_ms(value)

    @property
    def distinct_id(self) -> str | None:
        """Visitor identifier from the attributes, if any."""
        value = self.attributes.get("distinct_id")
        return str(value) if value is not None else None

    @classmethod
    def from_posthog(cls, record: Mapping[str, Any]) -> "ExternalEvent":
        """Build from a PostHog event export record."""
        attributes = dict(record.get("properties") or {})
        for key in ("id", "distinct_id", "elements_chain"):
            if record.get(key) is not None:
                attributes.setdefault(key, record[key])
        return cls(
            timestamp=record["timestamp"],
            kind=str(record.get("event") or "unknown"),
            attributes=attributes,
        )


class ScoredExternalEvent(ExternalEvent):
    """An external event attached to a moment, with its temporal relevance."""

    relevance_score: float = Field(..., ge=0.0, le=1.0)


class CorrelatedMoment(DomainModel):
    """A moment together with the external events that happened near it."""

    moment: SerializeAsAny[Moment]
    nearby_external_events: list[ScoredExternalEvent] = Field(default_factory=list)

    def to_record(self) -> dict:
        """Flatten to the moment's fields plus ``nearbyExternalEvents``."""
        record = self.moment.to_record()
        record["nearbyExternalEvents"] = [e.to_record() for e in self.nearby_external_events]
        return record


class AnalyticsSession(DomainModel):
    """A run of one visitor's external events without an inactivity gap."""

    session_id: str
    distinct_id: str
    start_time: int
    end_time: int
    events: list[ExternalEvent] = Field(default_factory=list)

    @property
    def duration_ms(self) -> int:
        return self.end_time - self.start_time

    @property
    def event_count(self) -> int:
        return len(self.events)
