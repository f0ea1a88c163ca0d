# ==============================================================================
# Moment Detection Engine
# ==============================================================================
"""
Orchestrates the detection pipeline for recorded sessions.

Pipeline per session:
    raw records -> normalize -> metadata -> detector pass -> session
    moments -> temporal join with external events

The detector pass is a single forward scan. Every detector sees every event
in a fixed order, with scan-wide state (current URL, viewport) advanced by
the engine beforehand. Each session gets fresh detector instances, so
sessions never share state and may be processed in parallel by the caller.
"""

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from uxmoments.core.aggregator import session_moments
from uxmoments.core.correlation import correlate
from uxmoments.core.detectors import DEFAULT_DETECTORS, PatternDetector, ScanState
from uxmoments.core.errors import MalformedRecordWarning
from uxmoments.core.metadata import build_session
from uxmoments.core.models import CorrelatedMoment, Moment, Session

logger = logging.getLogger(__name__)

DetectorFactory = Callable[[], PatternDetector]


class MomentEngine:
    """
    Detects key moments in sessions and correlates them with external events.

    Usage:
        engine = MomentEngine()
        correlated = engine.analyze("session-1", raw_records, external_events)
    """

    def __init__(
        self,
        detectors: Sequence[DetectorFactory] | None = None,
        log: logging.Logger | None = None,
    ):
        """
        Initialize the engine.

        Args:
            detectors: Detector factories (usually classes) in run order.
                       Defaults to DEFAULT_DETECTORS.
            log: Optional logger override. Defaults to this module's logger.
        """
        self._factories = tuple(detectors) if detectors is not None else DEFAULT_DETECTORS
        self._log = log or logger

    def detect(self, session: Session) -> list[Moment]:
        """
        Run all detectors over a session in one pass.

        Args:
            session: Session with events sorted by timestamp

        Returns:
            Pattern moments in event order, followed by the session-level
            moments (ShortSession when applicable, then SessionMetrics)
        """
        detectors = [factory() for factory in self._factories]
        for detector in detectors:
            detector.reset(session)

        events = session.events
        scan = ScanState.start(session)
        moments: list[Moment] = []

        for index, event in enumerate(events):
            scan.advance(event)
            for detector in detectors:
                moments.extend(self._observe(detector, event, index, events, scan))

        for detector in detectors:
            try:
                moments.extend(detector.finish(scan))
            except Exception as e:
                self._log_failure(detector, MalformedRecordWarning(f"finish failed: {e}"))

        moments.extend(session_moments(session, scan.url))

        self._log.info(
            "Session %s: %d events, %d moments", session.session_id, len(events), len(moments)
        )
        for moment in moments:
            self._log.debug("  %s at %d (%s)", moment.type.value, moment.timestamp, moment.url)
        return moments

    def _observe(self, detector, event, index, events, scan) -> list[Moment]:
        try:
            return detector.observe(event, index, events, scan)
        except Exception as e:
            self._log_failure(detector, MalformedRecordWarning(f"{type(e).__name__}: {e}", index))
            return []

    def _log_failure(self, detector: PatternDetector, warning: MalformedRecordWarning) -> None:
        self._log.warning("%s skipped an event: %s", type(detector).__name__, warning)

    def analyze(
        self,
        session_id: str,
        raw_records: Sequence[Any],
        external_events: Sequence[Any] = (),
    ) -> list[CorrelatedMoment]:
        """
        Full pipeline for one session.

        Raises:
            InvalidInputError: If raw_records or external_events is not a list
        """
        session = build_session(session_id, raw_records, log=self._log)
        return correlate(self.detect(session), external_events, log=self._log)

    def analyze_sessions(
        self,
        sessions: Mapping[str, Sequence[Any]] | Iterable[Session],
        external_events: Sequence[Any] = (),
    ) -> list[CorrelatedMoment]:
        """
        Analyze several sessions sequentially.

        Args:
            sessions: Either a mapping of session id to raw records, or
                      already-built Session objects
            external_events: Shared external events for the join

        Returns:
            Correlated moments of all sessions, in session order
        """
        if isinstance(sessions, Mapping):
            built = [
                build_session(session_id, records, log=self._log)
                for session_id, records in sessions.items()
            ]
        else:
            built = list(sessions)

        moments: list[Moment] = []
        for session in built:
            moments.extend(self.detect(session))

        self._log.info("Detected %d moments across %d sessions", len(moments), len(built))
        return correlate(moments, external_events, log=self._log)


def extract_key_moments(
    sessions: Iterable[Session],
    log: logging.Logger | None = None,
) -> list[Moment]:
    """Detect moments in built sessions with the default detectors."""
    engine = MomentEngine(log=log)
    moments: list[Moment] = []
    for session in sessions:
        moments.extend(engine.detect(session))
    return moments


def sync_with_external_events(
    sessions: Iterable[Session],
    external_events: Sequence[Any],
    log: logging.Logger | None = None,
) -> list[CorrelatedMoment]:
    """Detect moments in built sessions and join them with external events."""
    return correlate(extract_key_moments(sessions, log=log), external_events, log=log)
