"""
Syntax tree model shared by front-ends and the graph scanner.
"""

from astfeatures.tree.model import (
    NOPOS,
    ChildSlot,
    Grammar,
    NodeSchema,
    SlotArity,
    TreeNode,
    walk,
)

__all__ = [
    "NOPOS",
    "ChildSlot",
    "Grammar",
    "NodeSchema",
    "SlotArity",
    "TreeNode",
    "walk",
]
