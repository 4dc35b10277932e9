#!/usr/bin/env python3
"""
AST Feature Graph Extractor - Main Entry Point

Converts Java sources into feature graphs of syntax nodes and
child-group holder nodes for machine learning pipelines.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from astfeatures.cli import main

if __name__ == "__main__":
    main()
