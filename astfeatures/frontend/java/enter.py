"""
Enter phase for lowered Java trees.

Adds the members the compiler declares implicitly. Only default
constructors are produced: a class, enum or anonymous class without
a constructor gets a no-argument one, and a record without a
canonical constructor gets one taking its components.
"""

import logging
from typing import List

from astfeatures.frontend.java.grammar import JAVA_GRAMMAR
from astfeatures.tree.model import NOPOS, Grammar, TreeNode, walk

logger = logging.getLogger(__name__)

CONSTRUCTOR_NAME = "<init>"

_CONSTRUCTED_KINDS = ("CLASS", "ENUM", "RECORD")


def _is_constructor(member: TreeNode) -> bool:
    return member.kind == "METHOD" and member.attributes.get("name") == CONSTRUCTOR_NAME


class DefaultConstructors:
    """Inserts implicit default constructors into class bodies."""

    def __init__(self, grammar: Grammar = JAVA_GRAMMAR):
        self._grammar = grammar

    def enter(self, unit: TreeNode) -> int:
        """
        Add default constructors to every class in a compilation unit.

        Returns:
            Number of constructors added.
        """
        # collect first so the walk never sees the nodes being added
        classes = [node for node in walk(unit) if node.kind in _CONSTRUCTED_KINDS]

        added = 0
        for class_node in classes:
            members: List[TreeNode] = class_node.children["getMembers"]
            if self._needs_constructor(class_node, members):
                members.insert(0, self._default_constructor(class_node, members))
                added += 1

        logger.debug(f"Entered {added} default constructors")
        return added

    def _needs_constructor(self, class_node: TreeNode, members: List[TreeNode]) -> bool:
        constructors = [member for member in members if _is_constructor(member)]
        if class_node.kind != "RECORD":
            return not constructors

        components = [m for m in members if m.attributes.get("record_component")]
        for constructor in constructors:
            if constructor.attributes.get("compact"):
                return False
            if len(constructor.children["getParameters"]) == len(components):
                return False
        return True

    def _at(self, kind: str, class_node: TreeNode, **kwargs) -> TreeNode:
        position = class_node.start
        return self._grammar.node(kind, position, position, **kwargs)

    def _no_modifiers(self) -> TreeNode:
        return self._grammar.node("MODIFIERS", NOPOS, NOPOS, attributes={"flags": []})

    def _default_constructor(self, class_node: TreeNode, members: List[TreeNode]) -> TreeNode:
        parameters = []
        statements = []
        if class_node.kind == "RECORD":
            for component in members:
                if component.attributes.get("record_component"):
                    parameters.append(self._at(
                        "VARIABLE",
                        class_node,
                        attributes={"name": component.attributes.get("name", "")},
                        getModifiers=self._no_modifiers(),
                        getType=component.children.get("getType"),
                    ))
        elif class_node.kind == "CLASS":
            super_call = self._at(
                "METHOD_INVOCATION",
                class_node,
                getMethodSelect=self._at("IDENTIFIER", class_node, attributes={"name": "super"}),
            )
            statements.append(self._at("EXPRESSION_STATEMENT", class_node, getExpression=super_call))

        return self._at(
            "METHOD",
            class_node,
            attributes={"name": CONSTRUCTOR_NAME, "compact": False},
            generated_constructor=True,
            getModifiers=self._no_modifiers(),
            getParameters=parameters,
            getBody=self._at("BLOCK", class_node, attributes={"static": False}, getStatements=statements),
        )


def add_default_constructors(unit: TreeNode) -> int:
    """Convenience function to run the enter phase on a compilation unit."""
    return DefaultConstructors().enter(unit)
