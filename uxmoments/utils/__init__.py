"""
Configuration and version lookup for uxmoments.
"""

from uxmoments.utils.config import AnalysisSettings, Settings, get_settings
from uxmoments.utils.versions import (
    dependency_versions,
    get_package_version,
    get_uxmoments_version,
)

__all__ = [
    "AnalysisSettings",
    "Settings",
    "dependency_versions",
    "get_package_version",
    "get_settings",
    "get_uxmoments_version",
]
