# ==============================================================================
# JSON File Sources
# ==============================================================================
"""
Sources backed by exported JSON files.

Recordings file:
    {"sessions": [{"sessionId": "...", "records": [{"events": [...]}, ...]}]}

Analytics file (PostHog export): either a list of event records or an
object with a "results" list.
"""

import json
import logging
from pathlib import Path
from typing import Any

from uxmoments.base.sources import ExternalEventSource, RecordingSource
from uxmoments.core.correlation import normalize_external_events
from uxmoments.core.errors import InvalidInputError
from uxmoments.core.models import ExternalEvent

logger = logging.getLogger(__name__)


def read_json(path: str | Path) -> Any:
    """
    Read and parse a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist
        InvalidInputError: If the file is not valid UTF-8 JSON
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    try:
        with path.open(encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidInputError(f"{path} is not valid JSON: {e}") from e
    except UnicodeDecodeError as e:
        raise InvalidInputError(f"{path} is not UTF-8 encoded: {e}") from e


class JsonRecordingSource(RecordingSource):
    """
    Loads recorded sessions from a JSON export.

    Usage:
        source = JsonRecordingSource("RRweb data.json")
        sessions = source.load_sessions()
    """

    def __init__(
        self,
        path: str | Path,
        max_records_per_session: int | None = None,
        log: logging.Logger | None = None,
    ):
        """
        Args:
            path: Path to the recordings file
            max_records_per_session: Keep at most this many records per
                                     session (None for no limit)
            log: Optional logger override
        """
        self.path = Path(path)
        self.max_records_per_session = max_records_per_session
        self._log = log or logger

    def load_sessions(self) -> dict[str, list[Any]]:
        data = read_json(self.path)
        if not isinstance(data, dict) or not isinstance(data.get("sessions"), list):
            raise InvalidInputError(f"{self.path}: expected an object with a 'sessions' list")

        sessions: dict[str, list[Any]] = {}
        for index, entry in enumerate(data["sessions"]):
            if not isinstance(entry, dict):
                self._log.warning("Skipping session %d: not an object", index)
                continue
            session_id = str(entry.get("sessionId") or entry.get("session_id") or f"session_{index}")
            sessions.setdefault(session_id, []).extend(self._flatten(entry.get("records")))

        # Entries sharing an id are merged before the cap applies
        limit = self.max_records_per_session
        if limit is not None:
            for session_id, records in sessions.items():
                if len(records) > limit:
                    self._log.warning(
                        "Session %s has %d records, keeping the first %d",
                        session_id,
                        len(records),
                        limit,
                    )
                    del records[limit:]

        self._log.info("Loaded %d sessions from %s", len(sessions), self.path)
        return sessions

    @staticmethod
    def _flatten(records: Any) -> list[Any]:
        """Concatenate the event lists of a session's recording chunks."""
        if not isinstance(records, list):
            return []
        events: list[Any] = []
        for chunk in records:
            if isinstance(chunk, dict) and isinstance(chunk.get("events"), list):
                events.extend(chunk["events"])
        return events


class JsonExternalEventSource(ExternalEventSource):
    """Loads external analytics events from a JSON export."""

    def __init__(self, path: str | Path, log: logging.Logger | None = None):
        self.path = Path(path)
        self._log = log or logger

    def load_events(self) -> list[ExternalEvent]:
        data = read_json(self.path)
        if isinstance(data, dict) and isinstance(data.get("results"), list):
            data = data["results"]
        if not isinstance(data, list):
            raise InvalidInputError(
                f"{self.path}: expected a list of events or an object with 'results'"
            )

        events = normalize_external_events(data, log=self._log)
        self._log.info("Loaded %d external events from %s", len(events), self.path)
        return events
