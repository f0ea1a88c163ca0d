# ==============================================================================
# Input Source Abstract Base Classes
# ==============================================================================
"""
Abstract interfaces for loading recorded sessions and external events.

The engine never reads input itself; callers load through a source and pass
plain data in. Implementations live in uxmoments.infrastructure.
"""

from abc import ABC, abstractmethod
from typing import Any

from uxmoments.core.models import ExternalEvent


class RecordingSource(ABC):
    """Source of recorded interaction sessions."""

    @abstractmethod
    def load_sessions(self) -> dict[str, list[Any]]:
        """
        Load all sessions.

        Returns:
            Dict mapping session id to its raw interaction records, in
            source order

        Raises:
            FileNotFoundError: If the underlying input does not exist
            InvalidInputError: If the input has the wrong overall shape
        """
        ...


class ExternalEventSource(ABC):
    """Source of external analytics events."""

    @abstractmethod
    def load_events(self) -> list[ExternalEvent]:
        """
        Load all external events.

        Returns:
            Events with epoch-ms timestamps, unusable records skipped

        Raises:
            FileNotFoundError: If the underlying input does not exist
            InvalidInputError: If the input has the wrong overall shape
        """
        ...
