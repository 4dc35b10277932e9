"""
Feature graph data structures.

Defines the graph sink interface used by the scanner and the
networkx-backed FeatureGraph that allocates node identities, keeps
child order and persists graphs as JSON.
"""

import bisect
import gzip
import json
import logging
from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

import networkx as nx

from astfeatures.core.exceptions import GraphConstructionError, StorageError
from astfeatures.tree.model import NOPOS, TreeNode

logger = logging.getLogger(__name__)


class NodeType(Enum):
    """Type of a feature graph node."""
    AST_ELEMENT = "AST_ELEMENT"
    FAKE_AST = "FAKE_AST"


class EdgeType(Enum):
    """Type of a feature graph edge."""
    AST_CHILD = "AST_CHILD"


@dataclass
class FeatureNode:
    """
    Node in the feature graph.

    AST_ELEMENT nodes carry the kind of the tree node they were made
    from; FAKE_AST nodes carry the label of the child group they hold.
    """

    id: int
    type: NodeType
    contents: str
    start_position: int = NOPOS
    end_position: int = NOPOS
    start_line: int = NOPOS
    end_line: int = NOPOS

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "type": self.type.value,
            "contents": self.contents,
            "start_position": self.start_position,
            "end_position": self.end_position,
            "start_line": self.start_line,
            "end_line": self.end_line,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FeatureNode":
        """Create from dictionary."""
        return cls(
            id=data["id"],
            type=NodeType(data["type"]),
            contents=data["contents"],
            start_position=data.get("start_position", NOPOS),
            end_position=data.get("end_position", NOPOS),
            start_line=data.get("start_line", NOPOS),
            end_line=data.get("end_line", NOPOS),
        )


@dataclass
class FeatureEdge:
    """Directed edge in the feature graph."""

    source_id: int
    destination_id: int
    type: EdgeType = EdgeType.AST_CHILD

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "source_id": self.source_id,
            "destination_id": self.destination_id,
            "type": self.type.value,
        }


class GraphSink(ABC):
    """
    Destination for the nodes and edges emitted by the scanner.

    Implementations own node identity and storage.
    """

    @abstractmethod
    def create_element_node(self, kind: str, tree_node: TreeNode) -> FeatureNode:
        """Create the node standing for one tree node."""

    @abstractmethod
    def create_holder_node(self, label: str, start: int, end: int) -> FeatureNode:
        """Create a node grouping the children found in one slot."""

    @abstractmethod
    def add_edge(
        self,
        parent: FeatureNode,
        child: FeatureNode,
        edge_type: EdgeType = EdgeType.AST_CHILD,
    ) -> None:
        """Link a parent node to a child node."""

    @abstractmethod
    def set_root(self, node: FeatureNode) -> None:
        """Designate the root node. Called at most once."""

    @property
    def root(self) -> Optional[FeatureNode]:
        """The root node, if one has been set."""
        return None


class FeatureGraph(GraphSink):
    """
    Feature graph of a single source file.

    Wraps a NetworkX directed graph whose successor order follows
    edge creation order, so the children of a node come back in the
    order the scanner emitted them.
    """

    def __init__(
        self,
        source_file: str = "",
        source: Optional[str] = None,
        compute_line_numbers: bool = True,
    ):
        self.source_file = source_file
        self._graph = nx.DiGraph()
        self._nodes: Dict[int, FeatureNode] = {}
        self._tree_nodes: Dict[int, TreeNode] = {}
        self._node_for_tree: Dict[int, int] = {}
        self._root_id: Optional[int] = None
        self._next_id = 0
        self._line_starts: Optional[List[int]] = None
        if source is not None and compute_line_numbers:
            self._line_starts = [0]
            self._line_starts.extend(
                index + 1 for index, char in enumerate(source) if char == "\n"
            )

    @property
    def node_count(self) -> int:
        """Number of nodes in the graph."""
        return len(self._nodes)

    @property
    def edge_count(self) -> int:
        """Number of edges in the graph."""
        return self._graph.number_of_edges()

    @property
    def root(self) -> Optional[FeatureNode]:
        """The root node, once it has been set."""
        if self._root_id is None:
            return None
        return self._nodes[self._root_id]

    def _line_of(self, position: int) -> int:
        if self._line_starts is None or position < 0:
            return NOPOS
        return bisect.bisect_right(self._line_starts, position)

    def _add_node(self, node_type: NodeType, contents: str, start: int, end: int) -> FeatureNode:
        node = FeatureNode(
            id=self._next_id,
            type=node_type,
            contents=contents,
            start_position=start,
            end_position=end,
            start_line=self._line_of(start),
            end_line=self._line_of(end),
        )
        self._next_id += 1
        self._nodes[node.id] = node
        self._graph.add_node(node.id, type=node_type.value, contents=contents)
        return node

    def create_element_node(self, kind: str, tree_node: TreeNode) -> FeatureNode:
        node = self._add_node(NodeType.AST_ELEMENT, kind, tree_node.start, tree_node.end)
        self._tree_nodes[node.id] = tree_node
        self._node_for_tree[id(tree_node)] = node.id
        return node

    def create_holder_node(self, label: str, start: int, end: int) -> FeatureNode:
        return self._add_node(NodeType.FAKE_AST, label, start, end)

    def add_edge(
        self,
        parent: FeatureNode,
        child: FeatureNode,
        edge_type: EdgeType = EdgeType.AST_CHILD,
    ) -> None:
        if parent.id not in self._nodes:
            raise GraphConstructionError(f"Source node not found: {parent.id}")
        if child.id not in self._nodes:
            raise GraphConstructionError(f"Destination node not found: {child.id}")
        self._graph.add_edge(parent.id, child.id, type=edge_type.value)

    def set_root(self, node: FeatureNode) -> None:
        if self._root_id is not None:
            raise GraphConstructionError(
                f"Root already set to node {self._root_id}",
                details={"root": self._root_id, "node": node.id},
            )
        if node.id not in self._nodes:
            raise GraphConstructionError(f"Root node not found: {node.id}")
        self._root_id = node.id

    def get_node(self, node_id: int) -> Optional[FeatureNode]:
        """Get a node by ID."""
        return self._nodes.get(node_id)

    def get_children(self, node: FeatureNode) -> List[FeatureNode]:
        """Get the children of a node in emission order."""
        return [self._nodes[child_id] for child_id in self._graph.successors(node.id)]

    def get_parent(self, node: FeatureNode) -> Optional[FeatureNode]:
        """Get the parent of a node, or None for the root."""
        for parent_id in self._graph.predecessors(node.id):
            return self._nodes[parent_id]
        return None

    def get_tree_node(self, node: FeatureNode) -> Optional[TreeNode]:
        """Get the tree node an AST_ELEMENT node was created from."""
        return self._tree_nodes.get(node.id)

    def find_node(self, tree_node: TreeNode) -> Optional[FeatureNode]:
        """Get the AST_ELEMENT node created for a tree node."""
        node_id = self._node_for_tree.get(id(tree_node))
        if node_id is None or self._tree_nodes.get(node_id) is not tree_node:
            return None
        return self._nodes[node_id]

    def nodes(self) -> Iterator[FeatureNode]:
        """Iterate over all nodes in creation order."""
        yield from self._nodes.values()

    def edges(self) -> Iterator[FeatureEdge]:
        """Iterate over all edges."""
        for source_id, destination_id, data in self._graph.edges(data=True):
            yield FeatureEdge(
                source_id=source_id,
                destination_id=destination_id,
                type=EdgeType(data["type"]),
            )

    def nodes_by_type(self, node_type: NodeType) -> List[FeatureNode]:
        """Get all nodes of a specific type."""
        return [node for node in self._nodes.values() if node.type == node_type]

    def nodes_by_contents(self, contents: str) -> List[FeatureNode]:
        """Get all nodes with the given kind or label."""
        return [node for node in self._nodes.values() if node.contents == contents]

    def get_type_distribution(self) -> Dict[str, Dict[str, int]]:
        """Get distribution of node types and node contents."""
        return {
            "types": dict(Counter(node.type.value for node in self._nodes.values())),
            "contents": dict(Counter(node.contents for node in self._nodes.values())),
        }

    def get_statistics(self) -> Dict[str, Any]:
        """Get graph statistics."""
        if self.node_count == 0:
            return {
                "node_count": 0,
                "edge_count": 0,
                "depth": 0,
                "type_distribution": {"types": {}, "contents": {}},
                "is_tree": False,
            }

        depth = 0
        if self._root_id is not None:
            lengths = nx.single_source_shortest_path_length(self._graph, self._root_id)
            depth = max(lengths.values())

        return {
            "node_count": self.node_count,
            "edge_count": self.edge_count,
            "depth": depth,
            "type_distribution": self.get_type_distribution(),
            "is_tree": nx.is_arborescence(self._graph),
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert graph to dictionary for serialization."""
        return {
            "source_file": self.source_file,
            "root_id": self._root_id,
            "nodes": [node.to_dict() for node in self._nodes.values()],
            "edges": [edge.to_dict() for edge in self.edges()],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FeatureGraph":
        """
        Rebuild a graph from its dictionary form.

        Tree node associations are not persisted, so get_tree_node
        returns None on a loaded graph.
        """
        graph = cls(source_file=data.get("source_file", ""))
        try:
            for node_data in data.get("nodes", []):
                node = FeatureNode.from_dict(node_data)
                graph._nodes[node.id] = node
                graph._graph.add_node(node.id, type=node.type.value, contents=node.contents)
                graph._next_id = max(graph._next_id, node.id + 1)

            for edge_data in data.get("edges", []):
                graph.add_edge(
                    graph._nodes[edge_data["source_id"]],
                    graph._nodes[edge_data["destination_id"]],
                    EdgeType(edge_data.get("type", EdgeType.AST_CHILD.value)),
                )

            if data.get("root_id") is not None:
                graph.set_root(graph._nodes[data["root_id"]])
        except (KeyError, ValueError, GraphConstructionError) as e:
            raise StorageError(f"Malformed graph data: {e}") from e
        return graph

    def save(self, path: Path, compress: Optional[bool] = None) -> Path:
        """
        Save graph to file.

        Args:
            path: Path to save the graph.
            compress: Write gzip-compressed JSON. Defaults to True when
                the path ends in .gz.

        Returns:
            The path written.
        """
        path = Path(path)
        if compress is None:
            compress = path.suffix == ".gz"
        elif compress and path.suffix != ".gz":
            path = path.with_name(path.name + ".gz")
        path.parent.mkdir(parents=True, exist_ok=True)

        data = self.to_dict()

        if compress:
            with gzip.open(path, "wt", encoding="utf-8") as f:
                json.dump(data, f)
        else:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)

        logger.debug(f"Graph saved to {path}")
        return path

    @classmethod
    def load(cls, path: Path) -> "FeatureGraph":
        """
        Load graph from file.

        Args:
            path: Path to the graph file.

        Returns:
            Loaded FeatureGraph.
        """
        path = Path(path)
        if not path.exists():
            raise StorageError(f"Graph file not found: {path}", details={"path": str(path)})

        try:
            if path.suffix == ".gz":
                with gzip.open(path, "rt", encoding="utf-8") as f:
                    data = json.load(f)
            else:
                with open(path, "r", encoding="utf-8") as f:
                    data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Failed to read graph {path}: {e}", details={"path": str(path)}) from e

        graph = cls.from_dict(data)
        logger.debug(f"Graph loaded from {path}")
        return graph

    def get_networkx_graph(self) -> nx.DiGraph:
        """Get the underlying NetworkX graph."""
        return self._graph
