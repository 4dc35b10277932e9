"""
Front-end registry.

Provides a plugin-based architecture where language front-ends can be
registered and retrieved dynamically. A front-end turns source text
into a resolved syntax tree that the scanner can walk.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Type

from astfeatures.core.exceptions import LanguageNotSupportedError
from astfeatures.tree.model import TreeNode

logger = logging.getLogger(__name__)


@dataclass
class Compilation:
    """Result of compiling one source file."""

    compilation_unit: TreeNode
    source: str
    file_name: str
    language: str


class BaseFrontend:
    """
    Abstract base class for language front-ends.

    Each language plugin must implement this interface.
    """

    LANGUAGE: str = "unknown"
    SUPPORTED_EXTENSIONS: List[str] = []

    def compile(self, source: str, file_name: str = "Test.java") -> Compilation:
        """
        Compile a single source file into a resolved tree.

        Args:
            source: Source code content.
            file_name: Name reported in diagnostics.

        Returns:
            Compilation holding the root of the tree and the source.
        """
        raise NotImplementedError("Subclasses must implement compile")


class FrontendRegistry:
    """
    Central registry for language front-ends.

    Manages the registration and retrieval of front-end plugins.
    """

    _frontends: Dict[str, Type[BaseFrontend]] = {}
    _instances: Dict[str, BaseFrontend] = {}

    @classmethod
    def register(cls, frontend_class: Type[BaseFrontend]) -> Type[BaseFrontend]:
        """
        Register a language front-end.

        Can be used as a decorator:
            @FrontendRegistry.register
            class JavaFrontend(BaseFrontend):
                ...
        """
        language = frontend_class.LANGUAGE
        if language in cls._frontends:
            logger.warning(
                f"Overwriting existing front-end for {language}: "
                f"{cls._frontends[language].__name__} -> {frontend_class.__name__}"
            )

        cls._frontends[language] = frontend_class
        cls._instances.pop(language, None)
        logger.debug(f"Registered front-end for {language}: {frontend_class.__name__}")
        return frontend_class

    @classmethod
    def get_frontend(cls, language: str) -> BaseFrontend:
        """
        Get a front-end instance for a language.

        Lazily instantiates front-ends on first request.

        Raises:
            LanguageNotSupportedError: If no front-end is registered.
        """
        if language not in cls._frontends:
            raise LanguageNotSupportedError(language)

        if language not in cls._instances:
            cls._instances[language] = cls._frontends[language]()

        return cls._instances[language]

    @classmethod
    def has_frontend(cls, language: str) -> bool:
        """Check if a front-end exists for a language."""
        return language in cls._frontends

    @classmethod
    def list_languages(cls) -> List[str]:
        """List all languages with registered front-ends."""
        return list(cls._frontends.keys())

    @classmethod
    def language_for_extension(cls, extension: str) -> Optional[str]:
        """Find the language whose front-end handles a file extension."""
        for language, frontend_class in cls._frontends.items():
            if extension.lower() in frontend_class.SUPPORTED_EXTENSIONS:
                return language
        return None

    @classmethod
    def unregister(cls, language: str) -> None:
        """Remove a front-end (mainly for testing)."""
        cls._frontends.pop(language, None)
        cls._instances.pop(language, None)
