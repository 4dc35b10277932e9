"""
Configuration management for the AST feature graph extractor.

Provides centralized configuration for the front-end, graph and
storage stages with sensible defaults and validation.
"""

import os
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv


@dataclass
class FrontendConfig:
    """Configuration for source parsing."""

    # Source file extension to language mapping
    language_extensions: Dict[str, str] = field(default_factory=lambda: {
        ".java": "java",
    })

    # Language used when a file extension is not recognised
    default_language: str = "java"

    # Encoding used to read source files
    encoding: str = "utf-8"

    # Maximum file size to process (in bytes)
    max_file_size: int = 1024 * 1024  # 1MB

    # Patterns to ignore during directory extraction
    ignore_patterns: List[str] = field(default_factory=lambda: [
        ".git", ".svn", ".hg", ".idea", ".vscode", ".DS_Store",
        "build", "target", "out", "bin", "node_modules",
    ])


@dataclass
class GraphConfig:
    """Configuration for feature graph construction."""

    # Annotate nodes with 1-based line numbers derived from the source
    compute_line_numbers: bool = True


@dataclass
class StorageConfig:
    """Configuration for graph storage."""

    # Base directory for extracted graphs
    output_dir: str = "./data/graphs"

    # Write graphs as gzip-compressed JSON
    enable_compression: bool = False


@dataclass
class ExtractionConfig:
    """Master configuration combining all stage configurations."""

    frontend: FrontendConfig = field(default_factory=FrontendConfig)
    graph: GraphConfig = field(default_factory=GraphConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)

    # Enable verbose logging
    verbose: bool = False

    # Optional file to mirror log output to
    log_file: Optional[str] = None


class Config:
    """
    Central configuration manager providing access to all settings.

    Supports loading from environment variables and configuration files.
    """

    _instance: Optional["Config"] = None
    _config: ExtractionConfig = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._config = ExtractionConfig()
        return cls._instance

    @classmethod
    def get(cls) -> ExtractionConfig:
        """Get the current extraction configuration."""
        if cls._instance is None:
            cls()
        return cls._instance._config

    @classmethod
    def reset(cls) -> ExtractionConfig:
        """Restore the default configuration (mainly for testing)."""
        instance = cls()
        instance._config = ExtractionConfig()
        return instance._config

    @classmethod
    def load_from_file(cls, config_path: str) -> ExtractionConfig:
        """
        Load configuration from a JSON file.

        Args:
            config_path: Path to the configuration file.

        Returns:
            Loaded ExtractionConfig instance.
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "r") as f:
            data = json.load(f)

        instance = cls()
        instance._config = cls._dict_to_config(data)
        return instance._config

    @classmethod
    def load_from_env(cls, dotenv_path: Optional[str] = None) -> ExtractionConfig:
        """
        Load configuration from environment variables.

        Environment variables are prefixed with ASTF_ and may also be
        supplied through a .env file.

        Returns:
            ExtractionConfig with environment overrides applied.
        """
        load_dotenv(dotenv_path)

        instance = cls()
        config = instance._config

        if os.getenv("ASTF_DEFAULT_LANGUAGE"):
            config.frontend.default_language = os.getenv("ASTF_DEFAULT_LANGUAGE")

        if os.getenv("ASTF_ENCODING"):
            config.frontend.encoding = os.getenv("ASTF_ENCODING")

        if os.getenv("ASTF_MAX_FILE_SIZE"):
            config.frontend.max_file_size = int(os.getenv("ASTF_MAX_FILE_SIZE"))

        if os.getenv("ASTF_OUTPUT_DIR"):
            config.storage.output_dir = os.getenv("ASTF_OUTPUT_DIR")

        if os.getenv("ASTF_COMPRESS"):
            config.storage.enable_compression = (
                os.getenv("ASTF_COMPRESS").lower() in ("true", "1", "yes")
            )

        if os.getenv("ASTF_LINE_NUMBERS"):
            config.graph.compute_line_numbers = (
                os.getenv("ASTF_LINE_NUMBERS").lower() in ("true", "1", "yes")
            )

        if os.getenv("ASTF_VERBOSE"):
            config.verbose = os.getenv("ASTF_VERBOSE").lower() in ("true", "1", "yes")

        if os.getenv("ASTF_LOG_FILE"):
            config.log_file = os.getenv("ASTF_LOG_FILE")

        return config

    @staticmethod
    def _dict_to_config(data: dict) -> ExtractionConfig:
        """Convert a dictionary to ExtractionConfig."""
        config = ExtractionConfig()

        if "frontend" in data:
            config.frontend = FrontendConfig(**data["frontend"])

        if "graph" in data:
            config.graph = GraphConfig(**data["graph"])

        if "storage" in data:
            config.storage = StorageConfig(**data["storage"])

        if "verbose" in data:
            config.verbose = data["verbose"]

        if "log_file" in data:
            config.log_file = data["log_file"]

        return config

    @classmethod
    def save_to_file(cls, config_path: str) -> None:
        """
        Save current configuration to a JSON file.

        Args:
            config_path: Path to save the configuration file.
        """
        config_path = Path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        config = cls.get()
        data = cls._config_to_dict(config)

        with open(config_path, "w") as f:
            json.dump(data, f, indent=2)

    @staticmethod
    def _config_to_dict(config: ExtractionConfig) -> dict:
        """Convert ExtractionConfig to a dictionary."""
        return {
            "frontend": {
                "language_extensions": config.frontend.language_extensions,
                "default_language": config.frontend.default_language,
                "encoding": config.frontend.encoding,
                "max_file_size": config.frontend.max_file_size,
                "ignore_patterns": config.frontend.ignore_patterns,
            },
            "graph": {
                "compute_line_numbers": config.graph.compute_line_numbers,
            },
            "storage": {
                "output_dir": config.storage.output_dir,
                "enable_compression": config.storage.enable_compression,
            },
            "verbose": config.verbose,
            "log_file": config.log_file,
        }
