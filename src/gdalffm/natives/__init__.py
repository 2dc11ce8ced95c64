# gdal-natives-builder/src/gdalffm/natives/__init__.py
"""
This package contains the core logic for composing GDAL native resources
into per-platform bundle archives and validating them before publication.
"""

from .models import (
    DEFAULT_CLASSIFIERS,
    DEFAULT_SWISS_REQUIREMENTS,
    BundleConfig,
    Requirement,
)
from .packaging.orchestrator import BuildOrchestrator

__all__ = [
    "DEFAULT_CLASSIFIERS",
    "DEFAULT_SWISS_REQUIREMENTS",
    "BuildOrchestrator",
    "BundleConfig",
    "Requirement",
]
