"""
Custom exceptions for the AST feature graph extractor.

Provides a hierarchy of exceptions for the front-end, graph
construction and storage stages, enabling precise error handling
and clear failure reporting.
"""


class AstFeaturesError(Exception):
    """Base exception for all extraction errors."""

    def __init__(self, message: str, stage: str = None, details: dict = None):
        super().__init__(message)
        self.stage = stage
        self.details = details or {}

    def __str__(self):
        base_msg = super().__str__()
        if self.stage:
            return f"[{self.stage}] {base_msg}"
        return base_msg


class FrontendError(AstFeaturesError):
    """Raised when a source file cannot be turned into a syntax tree."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, stage="Frontend", details=details)


class CompilationError(FrontendError):
    """Raised when the front-end reports any diagnostic for a source file."""

    def __init__(self, file_name: str, diagnostics: list):
        self.file_name = file_name
        self.diagnostics = list(diagnostics)
        summary = "; ".join(str(d) for d in self.diagnostics[:5])
        if len(self.diagnostics) > 5:
            summary += f"; ... ({len(self.diagnostics) - 5} more)"
        super().__init__(
            f"Compilation failed for {file_name}: {summary}",
            details={"file": file_name, "diagnostics": [str(d) for d in self.diagnostics]},
        )


class TreeShapeError(FrontendError):
    """Raised when a tree node is built with slots its schema does not allow."""

    def __init__(self, kind: str, reason: str):
        super().__init__(
            f"Invalid {kind} node: {reason}",
            details={"kind": kind, "reason": reason},
        )


class LanguageNotSupportedError(FrontendError):
    """Raised when no front-end is registered for a language."""

    def __init__(self, language: str):
        super().__init__(
            f"No front-end available for language: {language}",
            details={"language": language}
        )


class GraphConstructionError(AstFeaturesError):
    """Raised when graph construction fails."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, stage="GraphConstruction", details=details)


class StructuralAccessError(GraphConstructionError):
    """Raised when a child slot cannot be read from a tree node."""

    def __init__(self, kind: str, slot: str = None):
        if slot is None:
            message = f"Node {kind} has no schema"
        else:
            message = f"Node of kind {kind} has no child slot '{slot}'"
        super().__init__(message, details={"kind": kind, "slot": slot})


class StorageError(AstFeaturesError):
    """Raised when storage operations fail."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, stage="Storage", details=details)
