"""
Core module containing configuration and the exception hierarchy.
"""

from astfeatures.core.config import (
    Config,
    ExtractionConfig,
    FrontendConfig,
    GraphConfig,
    StorageConfig,
)
from astfeatures.core.exceptions import (
    AstFeaturesError,
    FrontendError,
    CompilationError,
    TreeShapeError,
    LanguageNotSupportedError,
    GraphConstructionError,
    StructuralAccessError,
    StorageError,
)

__all__ = [
    "Config",
    "ExtractionConfig",
    "FrontendConfig",
    "GraphConfig",
    "StorageConfig",
    "AstFeaturesError",
    "FrontendError",
    "CompilationError",
    "TreeShapeError",
    "LanguageNotSupportedError",
    "GraphConstructionError",
    "StructuralAccessError",
    "StorageError",
]
