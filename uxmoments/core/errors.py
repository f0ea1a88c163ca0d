# ==============================================================================
# Error Taxonomy
# ==============================================================================
"""
Exceptions raised by the moment detection engine.

- InvalidInputError: the top-level input has the wrong shape entirely.
  Not recoverable; the caller must fix the input.
- MalformedRecordWarning: a single record or event could not be used.
  Raised internally and always absorbed at the record or detector boundary,
  where it is logged and the record is skipped or mapped to Unknown.

An empty session is not an error: it yields no pattern moments and a
zero-valued SessionMetrics moment.
"""


class UXMomentsError(Exception):
    """Base class for all uxmoments errors."""


class InvalidInputError(UXMomentsError, ValueError):
    """Top-level input is structurally invalid (e.g. not a list)."""


class MalformedRecordWarning(UXMomentsError, UserWarning):
    """A single record could not be interpreted.

    Attributes:
        index: Position of the record in its input list, when known
        reason: Human-readable explanation
    """

    def __init__(self, reason: str, index: int | None = None):
        self.reason = reason
        self.index = index
        location = f"record {index}: " if index is not None else ""
        super().__init__(f"{location}{reason}")
