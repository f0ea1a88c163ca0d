# ==============================================================================
# Pattern Detector Abstract Base Class
# ==============================================================================
"""
Common interface for behavioral pattern detectors.

Each detector is an isolated object holding only its own rolling buffers and
counters. The engine drives all detectors through one shared forward pass
over a session's events, calling observe() for every event in a fixed order.
New patterns are added by writing a new detector; existing ones are untouched.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import ClassVar

from uxmoments.core.models import (
    EventKind,
    Moment,
    NormalizedEvent,
    PageMetaDetails,
    PatternKind,
    Session,
    Viewport,
)


@dataclass
class ScanState:
    """
    Scan-wide state shared read-only with detectors.

    Owned and advanced by the engine before detectors observe each event.

    Attributes:
        session: Session being scanned
        url: Page URL in effect at the current event
        viewport: Last known viewport (width 0 when unknown)
    """

    session: Session
    url: str = ""
    viewport: Viewport = field(default_factory=Viewport)

    @classmethod
    def start(cls, session: Session) -> "ScanState":
        """Initial state: URL of the first URL-bearing event, viewport unknown."""
        url = next(
            (
                e.url
                for e in session.events
                if e.kind in (EventKind.NAVIGATE, EventKind.PAGE_META) and e.url
            ),
            "",
        )
        return cls(session=session, url=url)

    @property
    def session_id(self) -> str:
        return self.session.session_id

    def advance(self, event: NormalizedEvent) -> None:
        """Apply the URL and viewport changes carried by an event."""
        if event.kind in (EventKind.NAVIGATE, EventKind.PAGE_META) and event.url:
            self.url = event.url

        details = event.details
        if isinstance(details, PageMetaDetails) and details.width and details.height:
            self.viewport = Viewport(width=details.width, height=details.height)
        elif isinstance(details, Viewport) and details.width:
            self.viewport = details


class PatternDetector(ABC):
    """
    Stateful detector for one behavioral pattern.

    Implementations keep private per-session state, which reset() clears.
    They must never raise on missing element or position fields.
    """

    pattern: ClassVar[PatternKind]

    def reset(self, session: Session) -> None:
        """
        Clear per-session state.

        Args:
            session: The session about to be scanned
        """

    @abstractmethod
    def observe(
        self,
        event: NormalizedEvent,
        index: int,
        events: Sequence[NormalizedEvent],
        scan: ScanState,
    ) -> list[Moment]:
        """
        Process the next event of the pass.

        Args:
            event: Current event (events[index])
            index: Position of the event in the session
            events: All session events, for bounded lookback/context only
            scan: Scan-wide state (current URL, viewport)

        Returns:
            Moments recognized at this event (usually empty)
        """
        ...

    def finish(self, scan: ScanState) -> list[Moment]:
        """
        Called once after the last event.

        Returns:
            Moments that can only be decided at end of session
        """
        return []
