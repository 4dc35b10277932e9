"""
Syntax tree data structures.

Every tree node is tagged with a NodeSchema that statically declares
its kind and the named child slots it carries. Child slots hold a
single node, an optional node or an ordered list of nodes; scalar
data such as names, operators and literal values lives in the
attributes dictionary and never contributes graph structure.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from astfeatures.core.exceptions import StructuralAccessError, TreeShapeError

# Position of nodes that do not correspond to any source text.
NOPOS = -1


class SlotArity(Enum):
    """Number of children a slot can hold."""
    SINGLE = "single"
    OPTIONAL = "optional"
    LIST = "list"


@dataclass(frozen=True)
class ChildSlot:
    """
    Named child slot of a node kind.

    A slot with alias_of set re-exposes a subtree that is already
    reachable through the named slot and is never traversed.
    """

    name: str
    arity: SlotArity = SlotArity.SINGLE
    alias_of: Optional[str] = None

    @property
    def traversed(self) -> bool:
        return self.alias_of is None

    def empty_value(self) -> Any:
        return [] if self.arity == SlotArity.LIST else None


@dataclass(frozen=True)
class NodeSchema:
    """Statically declared shape of one node kind."""

    kind: str
    slots: Tuple[ChildSlot, ...] = ()
    method_declaration: bool = False

    def slot(self, name: str) -> Optional[ChildSlot]:
        for slot in self.slots:
            if slot.name == name:
                return slot
        return None

    @property
    def slot_names(self) -> List[str]:
        return [slot.name for slot in self.slots]


@dataclass(eq=False)
class TreeNode:
    """
    Node of a resolved syntax tree.

    Nodes compare by identity, so the same construct appearing twice
    in a file yields two distinct nodes.
    """

    schema: NodeSchema
    start: int = NOPOS
    end: int = NOPOS
    children: Dict[str, Any] = field(default_factory=dict)
    attributes: Dict[str, Any] = field(default_factory=dict)
    synthetic: bool = False
    generated_constructor: bool = False

    @property
    def kind(self) -> str:
        return self.schema.kind

    def child(self, name: str) -> Any:
        """
        Read a declared child slot.

        Raises:
            StructuralAccessError: If the node's kind declares no such slot.
        """
        slot = self.schema.slot(name)
        if slot is None:
            raise StructuralAccessError(self.kind, name)
        if name not in self.children:
            return slot.empty_value()
        return self.children[name]

    def iter_children(self) -> Iterator["TreeNode"]:
        """Iterate over direct children in slot order, skipping alias slots."""
        for slot in self.schema.slots:
            if not slot.traversed:
                continue
            value = self.child(slot.name)
            if isinstance(value, TreeNode):
                yield value
            elif isinstance(value, (list, tuple)):
                for item in value:
                    if isinstance(item, TreeNode):
                        yield item

    def __repr__(self) -> str:
        return f"TreeNode({self.kind}, {self.start}, {self.end})"


def walk(root: TreeNode) -> Iterator[TreeNode]:
    """Iterate over a tree in pre-order without recursion."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(list(node.iter_children())))


class Grammar:
    """
    Closed set of node schemas for one source language.

    Front-ends build nodes through the grammar so that every node
    carries a declared schema and only the slots that schema allows.
    """

    def __init__(self, name: str, schemas: Iterable[NodeSchema]):
        self.name = name
        self._schemas: Dict[str, NodeSchema] = {}
        for schema in schemas:
            if schema.kind in self._schemas:
                raise ValueError(f"Duplicate schema for kind {schema.kind}")
            self._schemas[schema.kind] = schema

    def __contains__(self, kind: str) -> bool:
        return kind in self._schemas

    @property
    def kinds(self) -> List[str]:
        return sorted(self._schemas)

    def schema_for(self, kind: str) -> NodeSchema:
        if kind not in self._schemas:
            raise TreeShapeError(kind, f"kind is not part of the {self.name} grammar")
        return self._schemas[kind]

    def node(
        self,
        kind: str,
        start: int = NOPOS,
        end: int = NOPOS,
        attributes: Optional[Dict[str, Any]] = None,
        synthetic: bool = False,
        generated_constructor: bool = False,
        **children: Any,
    ) -> TreeNode:
        """
        Build a node of the given kind, checking its children against the schema.

        Raises:
            TreeShapeError: If a slot is unknown, a single slot is empty,
                or a slot holds a value of the wrong shape.
        """
        schema = self.schema_for(kind)

        for name in children:
            if schema.slot(name) is None:
                raise TreeShapeError(kind, f"unknown slot '{name}'")

        values: Dict[str, Any] = {}
        for slot in schema.slots:
            value = children.get(slot.name, slot.empty_value())
            if slot.arity == SlotArity.LIST:
                if value is None:
                    value = []
                if not isinstance(value, (list, tuple)):
                    raise TreeShapeError(kind, f"slot '{slot.name}' expects a list")
                value = list(value)
                if not all(isinstance(item, TreeNode) for item in value):
                    raise TreeShapeError(kind, f"slot '{slot.name}' holds a non-tree value")
            else:
                if value is None and slot.arity == SlotArity.SINGLE:
                    raise TreeShapeError(kind, f"slot '{slot.name}' is required")
                if value is not None and not isinstance(value, TreeNode):
                    raise TreeShapeError(kind, f"slot '{slot.name}' holds a non-tree value")
            values[slot.name] = value

        return TreeNode(
            schema=schema,
            start=start,
            end=end,
            children=values,
            attributes=dict(attributes or {}),
            synthetic=synthetic,
            generated_constructor=generated_constructor,
        )
