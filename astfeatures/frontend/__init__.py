"""
Language front-ends.

Front-ends turn source text into resolved syntax trees. Importing
this package registers every bundled front-end.
"""

from astfeatures.frontend.registry import BaseFrontend, Compilation, FrontendRegistry

# Language front-ends - importing registers them with the registry
from astfeatures.frontend import java

__all__ = [
    "BaseFrontend",
    "Compilation",
    "FrontendRegistry",
    "java",
]
