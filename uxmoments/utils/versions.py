# ==============================================================================
# Version Utilities
# ==============================================================================
"""
Installed versions of ux-moments and the libraries it runs on.
"""

from importlib.metadata import PackageNotFoundError, version

DISTRIBUTION = "ux-moments"
FALLBACK_VERSION = "0.1.0"

# Distributions reported by `uxmoments version`
RUNTIME_DEPENDENCIES = ("pydantic", "pydantic-settings", "typer")


def get_uxmoments_version() -> str:
    """Version of the installed ux-moments distribution (source checkouts report 0.1.0)."""
    try:
        return version(DISTRIBUTION)
    except PackageNotFoundError:
        return FALLBACK_VERSION


def get_package_version(package_name: str) -> str:
    """Version of an installed distribution, or "unknown"."""
    try:
        return version(package_name)
    except PackageNotFoundError:
        return "unknown"


def dependency_versions() -> dict[str, str]:
    return {name: get_package_version(name) for name in RUNTIME_DEPENDENCIES}
