"""
Helpers for tests that compile small Java snippets.
"""

from dataclasses import dataclass

from astfeatures.frontend.registry import Compilation, FrontendRegistry
from astfeatures.tree.model import TreeNode


@dataclass(frozen=True)
class SourceSpan:
    """Character offsets of a piece of source text."""

    start: int
    end: int


class TestCompilation:
    """
    An in-memory compilation of a source snippet.

    Example:
        compilation = TestCompilation.compile("Test.java", "class Test {", "}")
        span = compilation.source_span("Test", followed_by=" {")
    """

    __test__ = False

    def __init__(self, compilation: Compilation):
        self.compilation = compilation

    @classmethod
    def compile(cls, file_name: str, *lines: str, language: str = "java") -> "TestCompilation":
        """Join lines with newlines and compile them."""
        source = "\n".join(lines)
        frontend = FrontendRegistry.get_frontend(language)
        return cls(frontend.compile(source, file_name))

    @property
    def compilation_unit(self) -> TreeNode:
        return self.compilation.compilation_unit

    @property
    def source(self) -> str:
        return self.compilation.source

    def source_span(self, target: str, followed_by: str = "", prefix: str = "") -> SourceSpan:
        """
        Locate the first occurrence of target, surrounded by the given context.

        Raises:
            AssertionError: If the text does not occur in the source.
        """
        index = self.source.find(prefix + target + followed_by)
        if index < 0:
            raise AssertionError(
                f"Source does not contain '{target}' "
                f"(prefix '{prefix}', followed by '{followed_by}')"
            )
        start = index + len(prefix)
        return SourceSpan(start, start + len(target))
