"""
Utility functions and helpers.

Provides common utilities used across the codebase.
"""

from astfeatures.utils.logging_config import setup_logging
from astfeatures.utils.validation import validate_file, validate_directory

__all__ = [
    "setup_logging",
    "validate_file",
    "validate_directory",
]
