"""
Tree to graph scanner.

Walks a resolved syntax tree depth first and emits one AST_ELEMENT
node per tree node, plus one FAKE_AST holder node per non-empty child
slot, into a graph sink.
"""

import logging
from typing import List, Optional

from astfeatures.core.exceptions import GraphConstructionError, StructuralAccessError
from astfeatures.graph.feature_graph import EdgeType, FeatureNode, GraphSink
from astfeatures.graph.naming import accessor_to_label
from astfeatures.tree.model import NodeSchema, TreeNode

logger = logging.getLogger(__name__)


def _schema_of(node: TreeNode) -> NodeSchema:
    if node.schema is None:
        raise StructuralAccessError(f"at {node.start}..{node.end}")
    return node.schema


def is_in_source(child: TreeNode) -> bool:
    """
    Check whether a child corresponds to something the programmer wrote.

    Only method declarations flagged as synthetic or as a generated
    default constructor are excluded.
    """
    if _schema_of(child).method_declaration:
        return not child.synthetic and not child.generated_constructor
    return True


class AstScanner:
    """
    Adds the abstract syntax structure of a tree to a graph sink.

    The scanner holds no state beyond the sink, so a sink must only
    be used by one scan at a time.
    """

    def __init__(self, sink: GraphSink):
        self._sink = sink

    @classmethod
    def add_to_graph(cls, root: TreeNode, sink: GraphSink) -> None:
        """
        Scan a whole tree into the sink, registering its node as the root.

        Raises:
            StructuralAccessError: If a node has no schema or a child slot
                of some node cannot be read.
            GraphConstructionError: If the sink already holds a graph.
        """
        if sink.root is not None:
            raise GraphConstructionError(
                "Sink already holds a scanned tree",
                details={"root": sink.root.id},
            )

        scanner = cls(sink)
        scanner._scan(root, None)
        logger.debug(f"Scanned {root.kind} tree into {type(sink).__name__}")

    def _scan(self, node: TreeNode, parent: Optional[FeatureNode]) -> None:
        schema = _schema_of(node)
        new_node = self._sink.create_element_node(schema.kind, node)
        if parent is not None:
            self._sink.add_edge(parent, new_node, EdgeType.AST_CHILD)
        else:
            self._sink.set_root(new_node)

        for slot in schema.slots:
            # alias slots re-expose a subtree reachable through another slot
            if not slot.traversed:
                continue

            result = node.child(slot.name)

            to_process: List[TreeNode] = []
            if isinstance(result, TreeNode):
                if is_in_source(result):
                    to_process.append(result)
            elif isinstance(result, (list, tuple)):
                for item in result:
                    if isinstance(item, TreeNode) and is_in_source(item):
                        to_process.append(item)

            if to_process:
                first_child = to_process[0]
                last_child = to_process[-1]
                holder_node = self._sink.create_holder_node(
                    accessor_to_label(slot.name),
                    first_child.start,
                    last_child.end,
                )
                self._sink.add_edge(new_node, holder_node, EdgeType.AST_CHILD)
                for child in to_process:
                    self._scan(child, holder_node)


def scan(root: TreeNode, sink: GraphSink) -> None:
    """Convenience function to scan a tree into a sink."""
    AstScanner.add_to_graph(root, sink)
