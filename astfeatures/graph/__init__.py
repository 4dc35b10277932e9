"""
Feature graph construction.

Provides the graph sink interface, the networkx-backed feature graph
and the scanner that fills it from a syntax tree.
"""

from astfeatures.graph.feature_graph import (
    EdgeType,
    FeatureEdge,
    FeatureGraph,
    FeatureNode,
    GraphSink,
    NodeType,
)
from astfeatures.graph.naming import accessor_to_label
from astfeatures.graph.scanner import AstScanner, is_in_source, scan

__all__ = [
    "EdgeType",
    "FeatureEdge",
    "FeatureGraph",
    "FeatureNode",
    "GraphSink",
    "NodeType",
    "accessor_to_label",
    "AstScanner",
    "is_in_source",
    "scan",
]
