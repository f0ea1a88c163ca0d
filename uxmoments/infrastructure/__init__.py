# ==============================================================================
# Infrastructure Adapters
# ==============================================================================
"""
Concrete input sources (ports-and-adapters architecture).

- files.py - JSON file exports of recordings and analytics events
"""

from uxmoments.infrastructure.files import (
    JsonExternalEventSource,
    JsonRecordingSource,
    read_json,
)

__all__ = [
    "JsonExternalEventSource",
    "JsonRecordingSource",
    "read_json",
]
