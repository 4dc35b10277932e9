"""
AST Feature Graph Extractor.

Converts resolved syntax trees into feature graphs of AST_ELEMENT
nodes and FAKE_AST child-group holder nodes for machine learning
pipelines.
"""

__version__ = "1.0.0"
__author__ = "AST Feature Graph"
