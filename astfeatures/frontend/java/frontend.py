"""
Java front-end.

Parses Java source with tree-sitter, rejects sources with syntax
errors, lowers the parse tree into the javac vocabulary and enters
implicit default constructors.
"""

import logging
from dataclasses import dataclass
from typing import List

import tree_sitter_java as ts_java
from tree_sitter import Language, Parser

from astfeatures.core.exceptions import CompilationError
from astfeatures.frontend.java.enter import DefaultConstructors
from astfeatures.frontend.java.grammar import JAVA_GRAMMAR
from astfeatures.frontend.java.lowering import JavaLowering
from astfeatures.frontend.registry import BaseFrontend, Compilation, FrontendRegistry

logger = logging.getLogger(__name__)


@dataclass
class Diagnostic:
    """A syntax problem found while parsing."""

    line: int
    column: int
    message: str

    def __str__(self) -> str:
        return f"{self.line}:{self.column}: {self.message}"


@FrontendRegistry.register
class JavaFrontend(BaseFrontend):
    """
    Tree-sitter based front-end for Java source code.

    Produces COMPILATION_UNIT trees whose kinds and child slots follow
    the javac tree API.
    """

    LANGUAGE = "java"
    SUPPORTED_EXTENSIONS = [".java"]

    def __init__(self):
        self._language = Language(ts_java.language())
        self._parser = Parser(self._language)
        self._enter = DefaultConstructors(JAVA_GRAMMAR)

    def compile(self, source: str, file_name: str = "Test.java") -> Compilation:
        """
        Compile Java source into a resolved tree.

        Raises:
            CompilationError: If the parser reports any syntax error.
            TreeShapeError: If lowering builds a node its schema rejects.
        """
        content = source.encode("utf-8")
        tree = self._parser.parse(content)

        diagnostics = self._collect_diagnostics(tree.root_node, content)
        if diagnostics:
            logger.debug(f"{file_name}: {len(diagnostics)} syntax diagnostics")
            raise CompilationError(file_name, diagnostics)

        unit = JavaLowering(content, JAVA_GRAMMAR).compilation_unit(tree.root_node)
        self._enter.enter(unit)

        logger.debug(f"Compiled {file_name}")
        return Compilation(
            compilation_unit=unit,
            source=source,
            file_name=file_name,
            language=self.LANGUAGE,
        )

    def _collect_diagnostics(self, root, content: bytes) -> List[Diagnostic]:
        if not root.has_error:
            return []

        diagnostics = []
        stack = [root]
        while stack:
            node = stack.pop()
            if node.is_missing:
                diagnostics.append(self._diagnostic(node, content, f"missing '{node.type}'"))
            elif node.type == "ERROR":
                diagnostics.append(self._diagnostic(node, content, "syntax error"))
            elif node.has_error:
                stack.extend(reversed(node.children))

        diagnostics.sort(key=lambda d: (d.line, d.column))
        return diagnostics

    def _diagnostic(self, node, content: bytes, message: str) -> Diagnostic:
        row, byte_column = node.start_point
        line_start = content.rfind(b"\n", 0, node.start_byte) + 1
        column = len(content[line_start:line_start + byte_column].decode("utf-8", errors="replace"))
        return Diagnostic(line=row + 1, column=column + 1, message=message)
