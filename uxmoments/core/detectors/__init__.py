"""
Pattern detectors.

DEFAULT_DETECTORS lists the detector classes in the order the engine runs
them for every event.
"""

from uxmoments.core.detectors.base import PatternDetector, ScanState
from uxmoments.core.detectors.clicks import (
    DeadClickDetector,
    MultipleSubmissionsDetector,
    RageClickDetector,
)
from uxmoments.core.detectors.forms import FormAbandonmentDetector
from uxmoments.core.detectors.navigation import NavigationLoopDetector
from uxmoments.core.detectors.pointer import MouseHoveringDetector
from uxmoments.core.detectors.scripts import JSErrorDetector
from uxmoments.core.detectors.scrolling import (
    HorizontalScrollMobileDetector,
    RapidScrollingDetector,
)
from uxmoments.core.detectors.timing import HesitationDetector

DEFAULT_DETECTORS: tuple[type[PatternDetector], ...] = (
    NavigationLoopDetector,
    JSErrorDetector,
    RageClickDetector,
    DeadClickDetector,
    FormAbandonmentDetector,
    RapidScrollingDetector,
    MouseHoveringDetector,
    HesitationDetector,
    MultipleSubmissionsDetector,
    HorizontalScrollMobileDetector,
)

__all__ = [
    "DEFAULT_DETECTORS",
    "DeadClickDetector",
    "FormAbandonmentDetector",
    "HesitationDetector",
    "HorizontalScrollMobileDetector",
    "JSErrorDetector",
    "MouseHoveringDetector",
    "MultipleSubmissionsDetector",
    "NavigationLoopDetector",
    "PatternDetector",
    "RageClickDetector",
    "RapidScrollingDetector",
    "ScanState",
]
