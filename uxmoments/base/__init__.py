# ==============================================================================
# Base Abstract Classes
# ==============================================================================
"""
Abstract base classes for the input side of the pipeline.

Detectors have their own interface in uxmoments.core.detectors.base.
"""

from uxmoments.base.sources import ExternalEventSource, RecordingSource

__all__ = [
    "ExternalEventSource",
    "RecordingSource",
]
