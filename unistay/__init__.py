# =============================================================================
# UniStay Chat Service Main Package - Dynamic Version Loading
# =============================================================================
"""
UniStay Chat Service - Main Package

Version is loaded dynamically from pyproject.toml via importlib.metadata.

Single Source of Truth: pyproject.toml [project] version
"""

from __future__ import annotations

from importlib.metadata import version, PackageNotFoundError


def _get_version() -> str:
    """
    Get package version from installed metadata.

    Returns:
        Version string (e.g., "0.3.0")
    """
    try:
        return version("unistay-chat")
    except PackageNotFoundError:
        # Running from a source checkout without an install
        return "0.0.0-dev"


__version__: str = _get_version()
__description__: str = "UniStay - real-time group chat for the rental marketplace"
__author__: str = "UniStay Team"

# =============================================================================
# EXPORTS
# =============================================================================
__all__ = [
    "__version__",
    "__description__",
    "__author__",
]
