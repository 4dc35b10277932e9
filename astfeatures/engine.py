"""
Main engine for the AST feature graph extractor.

Provides a high-level interface for turning source files and
directories into feature graphs.
"""

import fnmatch
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from astfeatures.core.config import Config, ExtractionConfig
from astfeatures.core.exceptions import AstFeaturesError, FrontendError
from astfeatures.frontend import FrontendRegistry
from astfeatures.frontend.registry import Compilation
from astfeatures.graph.feature_graph import FeatureGraph
from astfeatures.graph.scanner import AstScanner
from astfeatures.utils.validation import validate_directory, validate_file

logger = logging.getLogger(__name__)


@dataclass
class ExtractionSummary:
    """Outcome of extracting every source file under a directory."""

    source_dir: str
    output_dir: str
    written: List[str] = field(default_factory=list)
    failures: Dict[str, str] = field(default_factory=dict)
    skipped: List[str] = field(default_factory=list)
    total_nodes: int = 0
    total_edges: int = 0

    @property
    def succeeded(self) -> int:
        return len(self.written)

    @property
    def failed(self) -> int:
        return len(self.failures)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "source_dir": self.source_dir,
            "output_dir": self.output_dir,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "written": self.written,
            "failures": self.failures,
            "skipped": self.skipped,
            "total_nodes": self.total_nodes,
            "total_edges": self.total_edges,
        }


class FeatureExtractor:
    """
    Extracts feature graphs from source code.

    Compiles sources with the front-end registered for their language
    and scans the resulting trees into FeatureGraph instances.
    """

    def __init__(self, config: ExtractionConfig = None):
        self.config = config or Config.get()

    def language_for(self, file_name: str) -> str:
        """Pick the language of a file from its extension."""
        extension = Path(file_name).suffix.lower()
        language = self.config.frontend.language_extensions.get(extension)
        if language is None:
            language = FrontendRegistry.language_for_extension(extension)
        return language or self.config.frontend.default_language

    def compile(self, source: str, file_name: str = "Test.java", language: str = None) -> Compilation:
        """
        Compile source text into a resolved tree.

        Raises:
            LanguageNotSupportedError: If no front-end handles the language.
            CompilationError: If the source has syntax errors.
        """
        frontend = FrontendRegistry.get_frontend(language or self.language_for(file_name))
        return frontend.compile(source, file_name)

    def extract_source(
        self,
        source: str,
        file_name: str = "Test.java",
        language: str = None,
    ) -> FeatureGraph:
        """
        Build the feature graph of source text.

        Args:
            source: Source code content.
            file_name: Name recorded in the graph and in diagnostics.
            language: Language override; detected from file_name otherwise.

        Returns:
            FeatureGraph rooted at the compilation unit.
        """
        compilation = self.compile(source, file_name, language)
        graph = FeatureGraph(
            source_file=file_name,
            source=compilation.source,
            compute_line_numbers=self.config.graph.compute_line_numbers,
        )
        AstScanner.add_to_graph(compilation.compilation_unit, graph)
        logger.debug(f"{file_name}: {graph.node_count} nodes, {graph.edge_count} edges")
        return graph

    def extract_file(self, path: Path, output_path: Optional[Path] = None) -> FeatureGraph:
        """
        Build the feature graph of a source file, optionally saving it.

        Raises:
            FrontendError: If the file cannot be read or is too large.
        """
        path = Path(path)
        is_valid, error = validate_file(str(path))
        if not is_valid:
            raise FrontendError(error, details={"path": str(path)})

        size = path.stat().st_size
        if size > self.config.frontend.max_file_size:
            raise FrontendError(
                f"File too large: {path} ({size / 1024:.1f} KB)",
                details={"path": str(path), "size": size},
            )

        try:
            source = path.read_text(encoding=self.config.frontend.encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise FrontendError(f"Failed to read {path}: {e}", details={"path": str(path)}) from e

        graph = self.extract_source(source, file_name=str(path))

        if output_path is not None:
            graph.save(Path(output_path), compress=self.config.storage.enable_compression or None)

        return graph

    def extract_directory(self, path: Path, output_dir: Optional[Path] = None) -> ExtractionSummary:
        """
        Extract a graph for every source file under a directory.

        Failures on individual files are recorded in the summary and
        do not stop the batch.

        Args:
            path: Directory to walk.
            output_dir: Where graphs are written, mirroring the source
                layout. Defaults to the configured output directory.
        """
        path = Path(path)
        is_valid, error = validate_directory(str(path))
        if not is_valid:
            raise FrontendError(error, details={"path": str(path)})

        output_dir = Path(output_dir or self.config.storage.output_dir)
        summary = ExtractionSummary(source_dir=str(path), output_dir=str(output_dir))

        files = self._discover_files(path, summary)
        logger.info(f"Extracting {len(files)} files from {path}")

        for file_path in files:
            relative = file_path.relative_to(path)
            output_path = output_dir / relative.with_name(relative.name + ".json")
            try:
                graph = self.extract_file(file_path, output_path)
            except AstFeaturesError as e:
                logger.warning(f"Failed to extract {relative}: {e}")
                summary.failures[str(relative)] = str(e)
                continue

            summary.written.append(str(relative))
            summary.total_nodes += graph.node_count
            summary.total_edges += graph.edge_count

        logger.info(
            f"Extraction complete: {summary.succeeded} succeeded, "
            f"{summary.failed} failed, {len(summary.skipped)} skipped"
        )
        return summary

    def _discover_files(self, root_path: Path, summary: ExtractionSummary) -> List[Path]:
        """Find source files with a known extension, honoring ignore patterns and size limits."""
        files = []
        patterns = self.config.frontend.ignore_patterns
        extensions = set(self.config.frontend.language_extensions)

        for root, dirs, filenames in os.walk(root_path):
            current_path = Path(root)

            dirs[:] = sorted(
                d for d in dirs
                if not self._should_ignore(current_path / d, root_path, patterns)
            )

            for filename in sorted(filenames):
                file_path = current_path / filename
                if file_path.suffix.lower() not in extensions:
                    continue
                if self._should_ignore(file_path, root_path, patterns):
                    continue

                try:
                    size = file_path.stat().st_size
                except OSError as e:
                    logger.warning(f"Error accessing file {file_path}: {e}")
                    continue

                if size > self.config.frontend.max_file_size:
                    logger.debug(f"Skipping large file: {file_path} ({size / 1024:.1f} KB)")
                    summary.skipped.append(str(file_path.relative_to(root_path)))
                    continue

                files.append(file_path)

        return files

    def _should_ignore(self, path: Path, root_path: Path, patterns: List[str]) -> bool:
        relative = path.relative_to(root_path)
        for pattern in patterns:
            if fnmatch.fnmatch(path.name, pattern):
                return True
            if fnmatch.fnmatch(str(relative), pattern):
                return True
            if any(fnmatch.fnmatch(part, pattern) for part in relative.parts):
                return True
        return False


def extract_graph(source: str, file_name: str = "Test.java", config: ExtractionConfig = None) -> FeatureGraph:
    """Convenience function to build the feature graph of source text."""
    return FeatureExtractor(config).extract_source(source, file_name)
