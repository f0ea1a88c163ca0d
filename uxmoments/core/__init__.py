# ==============================================================================
# Core Domain Logic
# ==============================================================================
"""
Pure detection and correlation logic with no I/O.

This module contains:
- Domain models (NormalizedEvent, Session, Moment, ExternalEvent)
- Event normalization and session metadata
- Pattern detectors and the single-pass detection engine
- The temporal join with external analytics events
- Analytics sessionizing and display formatting

All code here is framework-agnostic and easily unit-testable.
"""

from uxmoments.core.correlation import WINDOW_MS, correlate, normalize_external_events
from uxmoments.core.engine import MomentEngine, extract_key_moments, sync_with_external_events
from uxmoments.core.errors import InvalidInputError, MalformedRecordWarning, UXMomentsError
from uxmoments.core.metadata import build_metadata, build_session
from uxmoments.core.models import (
    CorrelatedMoment,
    EventKind,
    ExternalEvent,
    Moment,
    NormalizedEvent,
    PatternKind,
    Session,
    SessionMetadata,
)
from uxmoments.core.normalizer import normalize
from uxmoments.core.sessionizer import Sessionizer, group_external_events

__all__ = [
    # Engine
    "MomentEngine",
    "extract_key_moments",
    "sync_with_external_events",
    # Correlation
    "WINDOW_MS",
    "correlate",
    "normalize_external_events",
    # Normalization
    "build_metadata",
    "build_session",
    "normalize",
    # Sessionizing
    "Sessionizer",
    "group_external_events",
    # Errors
    "InvalidInputError",
    "MalformedRecordWarning",
    "UXMomentsError",
    # Models
    "CorrelatedMoment",
    "EventKind",
    "ExternalEvent",
    "Moment",
    "NormalizedEvent",
    "PatternKind",
    "Session",
    "SessionMetadata",
]
