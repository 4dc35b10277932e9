"""
Java front-end.

Importing this package registers JavaFrontend with the registry.
"""

from astfeatures.frontend.java.enter import DefaultConstructors, add_default_constructors
from astfeatures.frontend.java.frontend import Diagnostic, JavaFrontend
from astfeatures.frontend.java.grammar import JAVA_GRAMMAR
from astfeatures.frontend.java.lowering import JavaLowering

__all__ = [
    "DefaultConstructors",
    "add_default_constructors",
    "Diagnostic",
    "JavaFrontend",
    "JAVA_GRAMMAR",
    "JavaLowering",
]
