"""
Java tree lowering.

Turns a tree-sitter-java concrete syntax tree into TreeNode trees in
the javac vocabulary: punctuation disappears, declarations with
several declarators become several VARIABLE nodes, method selections
become MEMBER_SELECT chains and constructs without a dedicated kind
fall back to OTHER. Positions are character offsets into the source.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple, Union

from astfeatures.frontend.java.grammar import (
    BINARY_OPERATORS,
    COMPOUND_ASSIGNMENT_OPERATORS,
    JAVA_GRAMMAR,
    UNARY_OPERATORS,
)
from astfeatures.tree.model import NOPOS, Grammar, TreeNode

logger = logging.getLogger(__name__)

COMMENT_TYPES = ("line_comment", "block_comment", "comment")
ANNOTATION_TYPES = ("marker_annotation", "annotation")

CLASS_DECLARATIONS = {
    "class_declaration": "CLASS",
    "interface_declaration": "INTERFACE",
    "enum_declaration": "ENUM",
    "record_declaration": "RECORD",
    "annotation_type_declaration": "ANNOTATION_TYPE",
}

METHOD_DECLARATIONS = (
    "method_declaration",
    "constructor_declaration",
    "compact_constructor_declaration",
    "annotation_type_element_declaration",
)

VARIABLE_DECLARATIONS = (
    "field_declaration",
    "constant_declaration",
    "local_variable_declaration",
)

INTEGER_LITERALS = (
    "decimal_integer_literal",
    "hex_integer_literal",
    "octal_integer_literal",
    "binary_integer_literal",
)

FLOATING_POINT_LITERALS = (
    "decimal_floating_point_literal",
    "hex_floating_point_literal",
)

PRIMITIVE_TYPES = ("integral_type", "floating_point_type", "boolean_type", "void_type")

Span = Tuple[int, int]


def _named(node) -> List[Any]:
    """Named children of a tree-sitter node, without comments."""
    if node is None:
        return []
    return [child for child in node.named_children if child.type not in COMMENT_TYPES]


def _first_named(node):
    named = _named(node)
    return named[0] if named else None


def _child_of_type(node, node_type: str):
    if node is None:
        return None
    for child in node.children:
        if child.type == node_type:
            return child
    return None


def _bracket_count(node) -> int:
    if node is None:
        return 0
    return sum(1 for child in node.children if child.type == "[")


class _OffsetMap:
    """Maps UTF-8 byte offsets reported by tree-sitter to character offsets."""

    def __init__(self, content: bytes):
        self._offsets: Optional[List[int]] = None
        if content.isascii():
            return

        offsets = [0] * (len(content) + 1)
        byte_pos = 0
        text = content.decode("utf-8")
        for char_index, char in enumerate(text):
            width = len(char.encode("utf-8"))
            for k in range(width):
                offsets[byte_pos + k] = char_index
            byte_pos += width
        offsets[len(content)] = len(text)
        self._offsets = offsets

    def char(self, byte_offset: int) -> int:
        if self._offsets is None:
            return byte_offset
        return self._offsets[byte_offset]


class JavaLowering:
    """
    Lowers one tree-sitter-java parse tree.

    A lowering instance is bound to the source bytes of one file.
    """

    def __init__(self, content: bytes, grammar: Grammar = JAVA_GRAMMAR):
        self._content = content
        self._grammar = grammar
        self._offsets = _OffsetMap(content)
        self._handlers = {
            "identifier": self._identifier,
            "type_identifier": self._identifier,
            "this": self._identifier,
            "super": self._identifier,
            "scoped_identifier": self._scoped_identifier,
            "scoped_type_identifier": self._scoped_type_identifier,
            "field_access": self._field_access,
            "class_literal": self._class_literal,
            "true": self._literal,
            "false": self._literal,
            "null_literal": self._literal,
            "character_literal": self._literal,
            "string_literal": self._literal,
            "text_block": self._literal,
            "parenthesized_expression": self._parenthesized,
            "binary_expression": self._binary,
            "unary_expression": self._unary,
            "update_expression": self._update,
            "assignment_expression": self._assignment,
            "ternary_expression": self._ternary,
            "cast_expression": self._cast,
            "instanceof_expression": self._instanceof,
            "lambda_expression": self._lambda,
            "method_invocation": self._method_invocation,
            "object_creation_expression": self._new_class,
            "array_creation_expression": self._new_array,
            "array_initializer": self._array_initializer,
            "array_access": self._array_access,
            "method_reference": self._method_reference,
            "switch_expression": lambda node: self._switch(node, "SWITCH_EXPRESSION"),
            "generic_type": self._generic_type,
            "array_type": self._array_type,
            "wildcard": self._wildcard,
            "annotated_type": self._annotated_type,
            "marker_annotation": self._annotation,
            "annotation": self._annotation,
            "block": self._block,
            "constructor_body": self._block,
            "expression_statement": self._expression_statement,
            "if_statement": self._if,
            "while_statement": self._while,
            "do_statement": self._do,
            "for_statement": self._for,
            "enhanced_for_statement": self._enhanced_for,
            "labeled_statement": self._labeled,
            "break_statement": lambda node: self._jump(node, "BREAK"),
            "continue_statement": lambda node: self._jump(node, "CONTINUE"),
            "return_statement": self._return,
            "throw_statement": self._throw,
            "yield_statement": self._yield,
            "assert_statement": self._assert,
            "synchronized_statement": self._synchronized,
            "try_statement": self._try,
            "try_with_resources_statement": self._try,
            "explicit_constructor_invocation": self._constructor_call,
        }
        for node_type in INTEGER_LITERALS + FLOATING_POINT_LITERALS:
            self._handlers[node_type] = self._literal
        for node_type in PRIMITIVE_TYPES:
            self._handlers[node_type] = self._primitive_type
        for node_type in CLASS_DECLARATIONS:
            self._handlers[node_type] = self._class
        for node_type in METHOD_DECLARATIONS:
            self._handlers[node_type] = self._method

    # positions

    def _start(self, node) -> int:
        return self._offsets.char(node.start_byte)

    def _end(self, node) -> int:
        return self._offsets.char(node.end_byte)

    def _text(self, node) -> str:
        if node is None:
            return ""
        return self._content[node.start_byte:node.end_byte].decode("utf-8")

    def _make(
        self,
        kind: str,
        where: Union[Span, Any],
        attributes: Optional[Dict[str, Any]] = None,
        **children: Any,
    ) -> TreeNode:
        if isinstance(where, tuple):
            start, end = where
        else:
            start, end = self._start(where), self._end(where)
        return self._grammar.node(kind, start, end, attributes=attributes, **children)

    # entry points

    def compilation_unit(self, root) -> TreeNode:
        """Lower the program node of a parse tree."""
        package = None
        imports = []
        type_decls = []
        for child in _named(root):
            if child.type == "package_declaration":
                package = self._package(child)
            elif child.type == "import_declaration":
                imports.append(self._import(child))
            else:
                type_decls.extend(self._member(child))

        return self._make(
            "COMPILATION_UNIT",
            (0, self._offsets.char(len(self._content))),
            getPackage=package,
            getPackageName=package.child("getPackageName") if package is not None else None,
            getImports=imports,
            getTypeDecls=type_decls,
        )

    def lower(self, node) -> Optional[TreeNode]:
        """Lower a single tree-sitter node."""
        if node is None:
            return None
        if node.type == ";":
            return self._make("EMPTY_STATEMENT", node)
        handler = self._handlers.get(node.type, self._other)
        return handler(node)

    def _other(self, node) -> TreeNode:
        logger.debug(f"No dedicated kind for {node.type}, lowering to OTHER")
        return self._make(
            "OTHER",
            node,
            attributes={"syntax_type": node.type},
            getChildren=[self.lower(child) for child in _named(node)],
        )

    # declarations

    def _package(self, node) -> TreeNode:
        named = _named(node)
        annotations = [self._annotation(c) for c in named if c.type in ANNOTATION_TYPES]
        names = [c for c in named if c.type not in ANNOTATION_TYPES]
        return self._make(
            "PACKAGE",
            node,
            getAnnotations=annotations,
            getPackageName=self.lower(names[0]) if names else None,
        )

    def _import(self, node) -> TreeNode:
        named = _named(node)
        is_static = any(child.type == "static" for child in node.children)
        names = [c for c in named if c.type != "asterisk"]
        qualified = self.lower(names[0]) if names else None
        asterisk = _child_of_type(node, "asterisk")
        if asterisk is not None and qualified is not None:
            qualified = self._make(
                "MEMBER_SELECT",
                (qualified.start, self._end(asterisk)),
                attributes={"identifier": "*"},
                getExpression=qualified,
            )
        return self._make(
            "IMPORT",
            node,
            attributes={"static": is_static},
            getQualifiedIdentifier=qualified,
        )

    def _member(self, node) -> List[TreeNode]:
        """Lower a class body or compilation unit member, which may expand to several nodes."""
        if node.type in VARIABLE_DECLARATIONS:
            return self._variables(node)
        if node.type == "static_initializer":
            return [self._block(_child_of_type(node, "block"), where=node, static=True)]
        return [self._statement(node)]

    def _modifiers(self, node) -> TreeNode:
        modifiers = _child_of_type(node, "modifiers")
        if modifiers is None:
            return self._grammar.node("MODIFIERS", NOPOS, NOPOS, attributes={"flags": []})

        annotations = [self._annotation(c) for c in _named(modifiers) if c.type in ANNOTATION_TYPES]
        flags = [
            self._text(child)
            for child in modifiers.children
            if child.type not in ANNOTATION_TYPES and child.type not in COMMENT_TYPES
        ]
        return self._make(
            "MODIFIERS",
            modifiers,
            attributes={"flags": flags},
            getAnnotations=annotations,
        )

    def _annotation(self, node) -> TreeNode:
        arguments = []
        argument_list = node.child_by_field_name("arguments")
        for argument in _named(argument_list):
            if argument.type == "element_value_pair":
                key = argument.child_by_field_name("key")
                arguments.append(self._make(
                    "ASSIGNMENT",
                    argument,
                    getVariable=self._identifier(key),
                    getExpression=self._element_value(argument.child_by_field_name("value")),
                ))
            else:
                arguments.append(self._element_value(argument))

        return self._make(
            "ANNOTATION",
            node,
            getAnnotationType=self.lower(node.child_by_field_name("name")),
            getArguments=arguments,
        )

    def _element_value(self, node) -> Optional[TreeNode]:
        if node is not None and node.type == "element_value_array_initializer":
            return self._make(
                "NEW_ARRAY",
                node,
                getInitializers=[self._element_value(c) for c in _named(node)],
            )
        return self.lower(node)

    def _type_parameters(self, node) -> List[TreeNode]:
        parameters = node.child_by_field_name("type_parameters")
        if parameters is None:
            parameters = _child_of_type(node, "type_parameters")
        result = []
        for parameter in _named(parameters):
            if parameter.type != "type_parameter":
                continue
            named = _named(parameter)
            annotations = [self._annotation(c) for c in named if c.type in ANNOTATION_TYPES]
            name = next(
                (c for c in named if c.type in ("type_identifier", "identifier")),
                None,
            )
            bound = _child_of_type(parameter, "type_bound")
            result.append(self._make(
                "TYPE_PARAMETER",
                parameter,
                attributes={"name": self._text(name)},
                getAnnotations=annotations,
                getBounds=[self.lower(c) for c in _named(bound)],
            ))
        return result

    def _type_list(self, node) -> List[TreeNode]:
        type_list = _child_of_type(node, "type_list")
        items = _named(type_list) if type_list is not None else _named(node)
        return [self.lower(item) for item in items]

    def _class(self, node) -> TreeNode:
        kind = CLASS_DECLARATIONS[node.type]

        extends = None
        superclass = node.child_by_field_name("superclass")
        if superclass is not None:
            extends = self.lower(_first_named(superclass))

        # interfaces list the types they extend as implemented types, as javac does
        implements = []
        interfaces = node.child_by_field_name("interfaces")
        if interfaces is not None:
            implements.extend(self._type_list(interfaces))
        extends_interfaces = _child_of_type(node, "extends_interfaces")
        if extends_interfaces is not None:
            implements.extend(self._type_list(extends_interfaces))

        members = []
        if kind == "RECORD":
            for component in _named(node.child_by_field_name("parameters")):
                if component.type in ("formal_parameter", "spread_parameter"):
                    variable = self._parameter(component)
                    variable.attributes["record_component"] = True
                    members.append(variable)

        body = node.child_by_field_name("body")
        if body is not None:
            members.extend(self._class_body(body))

        return self._make(
            kind,
            node,
            attributes={"name": self._text(node.child_by_field_name("name"))},
            getModifiers=self._modifiers(node),
            getTypeParameters=self._type_parameters(node),
            getExtendsClause=extends,
            getImplementsClause=implements,
            getMembers=members,
        )

    def _class_body(self, body) -> List[TreeNode]:
        members = []
        for child in _named(body):
            if child.type == "enum_constant":
                members.append(self._enum_constant(child))
            elif child.type == "enum_body_declarations":
                members.extend(self._class_body(child))
            else:
                members.extend(self._member(child))
        return members

    def _anonymous_class(self, body) -> TreeNode:
        return self._make(
            "CLASS",
            body,
            attributes={"name": "", "anonymous": True},
            getModifiers=self._grammar.node("MODIFIERS", NOPOS, NOPOS, attributes={"flags": []}),
            getMembers=self._class_body(body),
        )

    def _enum_constant(self, node) -> TreeNode:
        body = node.child_by_field_name("body")
        initializer = self._make(
            "NEW_CLASS",
            node,
            getArguments=self._arguments(node.child_by_field_name("arguments")),
            getClassBody=self._anonymous_class(body) if body is not None else None,
        )
        return self._make(
            "VARIABLE",
            node,
            attributes={"name": self._text(node.child_by_field_name("name")), "enum_constant": True},
            getModifiers=self._modifiers(node),
            getInitializer=initializer,
        )

    def _method(self, node) -> TreeNode:
        constructor = node.type in ("constructor_declaration", "compact_constructor_declaration")
        name_node = node.child_by_field_name("name")

        return_type = None
        if not constructor:
            return_type = self._wrap_dimensions(
                self.lower(node.child_by_field_name("type")),
                node.child_by_field_name("dimensions"),
            )

        receiver = None
        parameters = []
        for parameter in _named(node.child_by_field_name("parameters")):
            if parameter.type == "receiver_parameter":
                receiver = self._receiver_parameter(parameter)
            elif parameter.type in ("formal_parameter", "spread_parameter"):
                parameters.append(self._parameter(parameter))

        throws = _child_of_type(node, "throws")
        body = node.child_by_field_name("body")

        default_value = None
        if node.type == "annotation_type_element_declaration":
            default_value = self._element_value(node.child_by_field_name("value"))

        return self._make(
            "METHOD",
            node,
            attributes={
                "name": "<init>" if constructor else self._text(name_node),
                "compact": node.type == "compact_constructor_declaration",
            },
            getModifiers=self._modifiers(node),
            getTypeParameters=self._type_parameters(node),
            getReturnType=return_type,
            getReceiverParameter=receiver,
            getParameters=parameters,
            getThrows=[self.lower(c) for c in _named(throws)],
            getBody=self._block(body) if body is not None else None,
            getDefaultValue=default_value,
        )

    def _parameter(self, node) -> TreeNode:
        if node.type == "spread_parameter":
            declarator = _child_of_type(node, "variable_declarator")
            name_node = declarator.child_by_field_name("name") if declarator is not None else None
            type_node = next(
                (
                    c for c in _named(node)
                    if c.type not in ("modifiers", "variable_declarator")
                    and c.type not in ANNOTATION_TYPES
                ),
                None,
            )
            element = self.lower(type_node)
            var_type = None
            if element is not None:
                ellipsis = _child_of_type(node, "...")
                end = self._end(ellipsis) if ellipsis is not None else element.end
                var_type = self._make("ARRAY_TYPE", (element.start, end), getType=element)
            return self._make(
                "VARIABLE",
                node,
                attributes={"name": self._text(name_node), "varargs": True},
                getModifiers=self._modifiers(node),
                getType=var_type,
            )

        return self._make(
            "VARIABLE",
            node,
            attributes={"name": self._text(node.child_by_field_name("name"))},
            getModifiers=self._modifiers(node),
            getType=self._wrap_dimensions(
                self.lower(node.child_by_field_name("type")),
                node.child_by_field_name("dimensions"),
            ),
        )

    def _receiver_parameter(self, node) -> TreeNode:
        type_node = next(
            (c for c in _named(node) if c.type not in ANNOTATION_TYPES + ("identifier", "this")),
            None,
        )
        return self._make(
            "VARIABLE",
            node,
            attributes={"name": "this", "receiver": True},
            getModifiers=self._modifiers(node),
            getType=self.lower(type_node),
        )

    def _implicit_parameter(self, node) -> TreeNode:
        return self._make(
            "VARIABLE",
            node,
            attributes={"name": self._text(node)},
            getModifiers=self._grammar.node("MODIFIERS", NOPOS, NOPOS, attributes={"flags": []}),
        )

    def _variables(self, node) -> List[TreeNode]:
        type_node = node.child_by_field_name("type")
        variables = []
        for declarator in node.children_by_field_name("declarator"):
            variables.append(self._make(
                "VARIABLE",
                (self._start(node), self._end(declarator)),
                attributes={"name": self._text(declarator.child_by_field_name("name"))},
                getModifiers=self._modifiers(node),
                getType=self._wrap_dimensions(
                    self.lower(type_node),
                    declarator.child_by_field_name("dimensions"),
                ),
                getInitializer=self._initializer(declarator.child_by_field_name("value")),
            ))
        return variables

    def _initializer(self, node) -> Optional[TreeNode]:
        if node is not None and node.type == "array_initializer":
            return self._array_initializer(node)
        return self.lower(node)

    # statements

    def _statement(self, node) -> Optional[TreeNode]:
        if node is not None and node.type == "switch_expression":
            return self._switch(node, "SWITCH")
        return self.lower(node)

    def _statement_list(self, children) -> List[TreeNode]:
        statements = []
        for child in children:
            if child.type == ";":
                statements.append(self._make("EMPTY_STATEMENT", child))
            elif child.is_named and child.type not in COMMENT_TYPES:
                statements.extend(self._member(child))
        return statements

    def _block(self, node, where=None, static: bool = False) -> TreeNode:
        return self._make(
            "BLOCK",
            where if where is not None else node,
            attributes={"static": static},
            getStatements=self._statement_list(node.children),
        )

    def _expression_statement(self, node) -> TreeNode:
        return self._make(
            "EXPRESSION_STATEMENT",
            node,
            getExpression=self.lower(_first_named(node)),
        )

    def _wrap_expression(self, node) -> TreeNode:
        return self._make("EXPRESSION_STATEMENT", node, getExpression=self.lower(node))

    def _constructor_call(self, node) -> TreeNode:
        constructor = node.child_by_field_name("constructor")
        target = node.child_by_field_name("object")
        select = self._identifier(constructor)
        if target is not None:
            select = self._make(
                "MEMBER_SELECT",
                (self._start(target), self._end(constructor)),
                attributes={"identifier": self._text(constructor)},
                getExpression=self.lower(target),
            )
        arguments = node.child_by_field_name("arguments")
        invocation = self._make(
            "METHOD_INVOCATION",
            (self._start(node), self._end(arguments) if arguments is not None else self._end(node)),
            getTypeArguments=self._type_arguments(node.child_by_field_name("type_arguments")),
            getMethodSelect=select,
            getArguments=self._arguments(arguments),
        )
        return self._make("EXPRESSION_STATEMENT", node, getExpression=invocation)

    def _if(self, node) -> TreeNode:
        return self._make(
            "IF",
            node,
            getCondition=self.lower(node.child_by_field_name("condition")),
            getThenStatement=self._statement(node.child_by_field_name("consequence")),
            getElseStatement=self._statement(node.child_by_field_name("alternative")),
        )

    def _while(self, node) -> TreeNode:
        return self._make(
            "WHILE_LOOP",
            node,
            getCondition=self.lower(node.child_by_field_name("condition")),
            getStatement=self._statement(node.child_by_field_name("body")),
        )

    def _do(self, node) -> TreeNode:
        return self._make(
            "DO_WHILE_LOOP",
            node,
            getStatement=self._statement(node.child_by_field_name("body")),
            getCondition=self.lower(node.child_by_field_name("condition")),
        )

    def _for(self, node) -> TreeNode:
        initializers = []
        for init in node.children_by_field_name("init"):
            if init.type == "local_variable_declaration":
                initializers.extend(self._variables(init))
            else:
                initializers.append(self._wrap_expression(init))

        return self._make(
            "FOR_LOOP",
            node,
            getInitializer=initializers,
            getCondition=self.lower(node.child_by_field_name("condition")),
            getUpdate=[self._wrap_expression(u) for u in node.children_by_field_name("update")],
            getStatement=self._statement(node.child_by_field_name("body")),
        )

    def _enhanced_for(self, node) -> TreeNode:
        type_node = node.child_by_field_name("type")
        name_node = node.child_by_field_name("name")
        modifiers = _child_of_type(node, "modifiers")
        first = modifiers if modifiers is not None else type_node
        variable = self._make(
            "VARIABLE",
            (self._start(first), self._end(name_node)),
            attributes={"name": self._text(name_node)},
            getModifiers=self._modifiers(node),
            getType=self._wrap_dimensions(
                self.lower(type_node),
                node.child_by_field_name("dimensions"),
            ),
        )
        return self._make(
            "ENHANCED_FOR_LOOP",
            node,
            getVariable=variable,
            getExpression=self.lower(node.child_by_field_name("value")),
            getStatement=self._statement(node.child_by_field_name("body")),
        )

    def _labeled(self, node) -> TreeNode:
        label = _child_of_type(node, "identifier")
        statement = None
        seen_colon = False
        for child in node.children:
            if seen_colon and child.type not in COMMENT_TYPES:
                statement = child
                break
            seen_colon = seen_colon or child.type == ":"
        return self._make(
            "LABELED_STATEMENT",
            node,
            attributes={"label": self._text(label)},
            getStatement=self._statement(statement),
        )

    def _jump(self, node, kind: str) -> TreeNode:
        label = _child_of_type(node, "identifier")
        return self._make(
            kind,
            node,
            attributes={"label": self._text(label) if label is not None else None},
        )

    def _return(self, node) -> TreeNode:
        return self._make("RETURN", node, getExpression=self.lower(_first_named(node)))

    def _throw(self, node) -> TreeNode:
        return self._make("THROW", node, getExpression=self.lower(_first_named(node)))

    def _yield(self, node) -> TreeNode:
        return self._make("YIELD", node, getValue=self.lower(_first_named(node)))

    def _assert(self, node) -> TreeNode:
        named = _named(node)
        return self._make(
            "ASSERT",
            node,
            getCondition=self.lower(named[0]) if named else None,
            getDetail=self.lower(named[1]) if len(named) > 1 else None,
        )

    def _synchronized(self, node) -> TreeNode:
        return self._make(
            "SYNCHRONIZED",
            node,
            getExpression=self.lower(_child_of_type(node, "parenthesized_expression")),
            getBlock=self._block(node.child_by_field_name("body")),
        )

    def _try(self, node) -> TreeNode:
        resources = []
        specification = node.child_by_field_name("resources")
        for resource in _named(specification):
            if resource.type == "resource":
                resources.append(self._resource(resource))

        catches = [self._catch(c) for c in _named(node) if c.type == "catch_clause"]

        finally_block = None
        finally_clause = _child_of_type(node, "finally_clause")
        if finally_clause is not None:
            finally_block = self._block(_child_of_type(finally_clause, "block"))

        return self._make(
            "TRY",
            node,
            getResources=resources,
            getBlock=self._block(node.child_by_field_name("body")),
            getCatches=catches,
            getFinallyBlock=finally_block,
        )

    def _resource(self, node) -> TreeNode:
        type_node = node.child_by_field_name("type")
        if type_node is None:
            return self.lower(_first_named(node))
        return self._make(
            "VARIABLE",
            node,
            attributes={"name": self._text(node.child_by_field_name("name"))},
            getModifiers=self._modifiers(node),
            getType=self.lower(type_node),
            getInitializer=self.lower(node.child_by_field_name("value")),
        )

    def _catch(self, node) -> TreeNode:
        parameter = _child_of_type(node, "catch_formal_parameter")
        catch_type = _child_of_type(parameter, "catch_type")
        alternatives = [self.lower(c) for c in _named(catch_type)]
        if len(alternatives) == 1:
            var_type = alternatives[0]
        else:
            var_type = self._make("UNION_TYPE", catch_type, getTypeAlternatives=alternatives)

        variable = self._make(
            "VARIABLE",
            parameter,
            attributes={"name": self._text(parameter.child_by_field_name("name"))},
            getModifiers=self._modifiers(parameter),
            getType=var_type,
        )
        return self._make(
            "CATCH",
            node,
            getParameter=variable,
            getBlock=self._block(node.child_by_field_name("body")),
        )

    def _switch(self, node, kind: str) -> TreeNode:
        cases = []
        for group in _named(node.child_by_field_name("body")):
            if group.type == "switch_block_statement_group":
                cases.extend(self._case_group(group))
            elif group.type == "switch_rule":
                cases.append(self._case_rule(group))

        return self._make(
            kind,
            node,
            getExpression=self.lower(node.child_by_field_name("condition")),
            getCases=cases,
        )

    def _case_label(self, label) -> Tuple[Dict[str, Any], List[TreeNode]]:
        is_default = self._text(label).startswith("default")
        expressions = [] if is_default else [self.lower(c) for c in _named(label)]
        return {"default": is_default}, expressions

    def _case_group(self, group) -> List[TreeNode]:
        """
        Lower `case A: case B: stmts`; each label becomes a CASE and the
        statements belong to the last one.
        """
        labels = [c for c in group.children if c.type == "switch_label"]
        statements = self._statement_list(
            c for c in group.children if c.type not in ("switch_label", ":")
        )

        cases = []
        for index, label in enumerate(labels):
            last = index == len(labels) - 1
            attributes, expressions = self._case_label(label)
            end = statements[-1].end if last and statements else self._end(label)
            cases.append(self._make(
                "CASE",
                (self._start(label), end),
                attributes=attributes,
                getExpressions=expressions,
                getStatements=statements if last else [],
            ))
        return cases

    def _case_rule(self, rule) -> TreeNode:
        attributes, expressions = self._case_label(_child_of_type(rule, "switch_label"))
        attributes["rule"] = True
        bodies = [c for c in _named(rule) if c.type != "switch_label"]
        body = bodies[0] if bodies else None
        if body is not None and body.type == "expression_statement":
            lowered = self.lower(_first_named(body))
        else:
            lowered = self._statement(body)
        return self._make(
            "CASE",
            rule,
            attributes=attributes,
            getExpressions=expressions,
            getBody=lowered,
        )

    # expressions

    def _identifier(self, node) -> TreeNode:
        return self._make("IDENTIFIER", node, attributes={"name": self._text(node)})

    def _select(self, node, target, identifier: str) -> TreeNode:
        return self._make(
            "MEMBER_SELECT",
            node,
            attributes={"identifier": identifier},
            getExpression=self.lower(target),
        )

    def _scoped_identifier(self, node) -> TreeNode:
        return self._select(
            node,
            node.child_by_field_name("scope"),
            self._text(node.child_by_field_name("name")),
        )

    def _scoped_type_identifier(self, node) -> TreeNode:
        named = [c for c in _named(node) if c.type not in ANNOTATION_TYPES]
        return self._select(node, named[0], self._text(named[-1]))

    def _field_access(self, node) -> TreeNode:
        return self._select(
            node,
            node.child_by_field_name("object"),
            self._text(node.child_by_field_name("field")),
        )

    def _class_literal(self, node) -> TreeNode:
        return self._select(node, _first_named(node), "class")

    def _literal(self, node) -> TreeNode:
        text = self._text(node)
        if node.type in INTEGER_LITERALS:
            kind = "LONG_LITERAL" if text[-1] in "lL" else "INT_LITERAL"
        elif node.type in FLOATING_POINT_LITERALS:
            kind = "FLOAT_LITERAL" if text[-1] in "fF" else "DOUBLE_LITERAL"
        elif node.type in ("true", "false"):
            kind = "BOOLEAN_LITERAL"
        elif node.type == "character_literal":
            kind = "CHAR_LITERAL"
        elif node.type == "null_literal":
            kind = "NULL_LITERAL"
        else:
            kind = "STRING_LITERAL"
        return self._make(kind, node, attributes={"value": text})

    def _parenthesized(self, node) -> TreeNode:
        return self._make("PARENTHESIZED", node, getExpression=self.lower(_first_named(node)))

    def _binary(self, node) -> TreeNode:
        operator = self._text(node.child_by_field_name("operator"))
        return self._make(
            BINARY_OPERATORS[operator],
            node,
            getLeftOperand=self.lower(node.child_by_field_name("left")),
            getRightOperand=self.lower(node.child_by_field_name("right")),
        )

    def _unary(self, node) -> TreeNode:
        operator = self._text(node.child_by_field_name("operator"))
        return self._make(
            UNARY_OPERATORS[operator],
            node,
            getExpression=self.lower(node.child_by_field_name("operand")),
        )

    def _update(self, node) -> TreeNode:
        first = node.children[0]
        if first.type in ("++", "--"):
            kind = "PREFIX_INCREMENT" if first.type == "++" else "PREFIX_DECREMENT"
        else:
            last = node.children[-1]
            kind = "POSTFIX_INCREMENT" if last.type == "++" else "POSTFIX_DECREMENT"
        return self._make(kind, node, getExpression=self.lower(_first_named(node)))

    def _assignment(self, node) -> TreeNode:
        operator = self._text(node.child_by_field_name("operator"))
        kind = "ASSIGNMENT" if operator == "=" else COMPOUND_ASSIGNMENT_OPERATORS[operator]
        return self._make(
            kind,
            node,
            getVariable=self.lower(node.child_by_field_name("left")),
            getExpression=self._initializer(node.child_by_field_name("right")),
        )

    def _ternary(self, node) -> TreeNode:
        return self._make(
            "CONDITIONAL_EXPRESSION",
            node,
            getCondition=self.lower(node.child_by_field_name("condition")),
            getTrueExpression=self.lower(node.child_by_field_name("consequence")),
            getFalseExpression=self.lower(node.child_by_field_name("alternative")),
        )

    def _cast(self, node) -> TreeNode:
        types = [self.lower(t) for t in node.children_by_field_name("type")]
        if len(types) == 1:
            cast_type = types[0]
        else:
            cast_type = self._make(
                "INTERSECTION_TYPE",
                (types[0].start, types[-1].end),
                getBounds=types,
            )
        return self._make(
            "TYPE_CAST",
            node,
            getType=cast_type,
            getExpression=self.lower(node.child_by_field_name("value")),
        )

    def _instanceof(self, node) -> TreeNode:
        right = node.child_by_field_name("right")
        name = node.child_by_field_name("name")
        pattern = node.child_by_field_name("pattern")

        test_type = None
        test_pattern = None
        if name is not None and right is not None:
            span = (self._start(right), self._end(name))
            binding = self._make(
                "VARIABLE",
                span,
                attributes={"name": self._text(name)},
                getModifiers=self._grammar.node("MODIFIERS", NOPOS, NOPOS, attributes={"flags": []}),
                getType=self.lower(right),
            )
            test_pattern = self._make("BINDING_PATTERN", span, getVariable=binding)
        elif pattern is not None:
            test_pattern = self.lower(pattern)
        else:
            test_type = self.lower(right)

        return self._make(
            "INSTANCE_OF",
            node,
            getExpression=self.lower(node.child_by_field_name("left")),
            getType=test_type,
            getPattern=test_pattern,
        )

    def _lambda(self, node) -> TreeNode:
        parameters_node = node.child_by_field_name("parameters")
        if parameters_node is None:
            parameters = []
        elif parameters_node.type == "identifier":
            parameters = [self._implicit_parameter(parameters_node)]
        elif parameters_node.type == "inferred_parameters":
            parameters = [self._implicit_parameter(c) for c in _named(parameters_node)]
        else:
            parameters = [
                self._parameter(c)
                for c in _named(parameters_node)
                if c.type in ("formal_parameter", "spread_parameter")
            ]

        body = node.child_by_field_name("body")
        return self._make(
            "LAMBDA_EXPRESSION",
            node,
            attributes={"body_kind": "STATEMENT" if body.type == "block" else "EXPRESSION"},
            getParameters=parameters,
            getBody=self.lower(body),
        )

    def _arguments(self, node) -> List[TreeNode]:
        return [self.lower(c) for c in _named(node)]

    def _type_arguments(self, node) -> List[TreeNode]:
        return [self.lower(c) for c in _named(node)]

    def _method_invocation(self, node) -> TreeNode:
        name = node.child_by_field_name("name")
        target = node.child_by_field_name("object")
        if target is not None:
            select = self._make(
                "MEMBER_SELECT",
                (self._start(target), self._end(name)),
                attributes={"identifier": self._text(name)},
                getExpression=self.lower(target),
            )
        else:
            select = self._identifier(name)

        return self._make(
            "METHOD_INVOCATION",
            node,
            getTypeArguments=self._type_arguments(node.child_by_field_name("type_arguments")),
            getMethodSelect=select,
            getArguments=self._arguments(node.child_by_field_name("arguments")),
        )

    def _new_class(self, node) -> TreeNode:
        first = node.children[0]
        enclosing = self.lower(first) if first.is_named and first.type not in COMMENT_TYPES else None
        body = _child_of_type(node, "class_body")
        return self._make(
            "NEW_CLASS",
            node,
            getEnclosingExpression=enclosing,
            getTypeArguments=self._type_arguments(node.child_by_field_name("type_arguments")),
            getIdentifier=self.lower(node.child_by_field_name("type")),
            getArguments=self._arguments(node.child_by_field_name("arguments")),
            getClassBody=self._anonymous_class(body) if body is not None else None,
        )

    def _new_array(self, node) -> TreeNode:
        dimensions = node.children_by_field_name("dimensions")
        value = node.child_by_field_name("value")

        extra = sum(_bracket_count(d) for d in dimensions if d.type == "dimensions")
        if value is not None:
            # new int[][] {...} creates an array of int[]
            extra -= 1
        element = self.lower(node.child_by_field_name("type"))
        for _ in range(max(extra, 0)):
            element = self._make("ARRAY_TYPE", (element.start, element.end), getType=element)

        return self._make(
            "NEW_ARRAY",
            node,
            getType=element,
            getDimensions=[
                self.lower(_first_named(d)) for d in dimensions if d.type == "dimensions_expr"
            ],
            getInitializers=[self._initializer(c) for c in _named(value)],
        )

    def _array_initializer(self, node) -> TreeNode:
        return self._make(
            "NEW_ARRAY",
            node,
            getInitializers=[self._initializer(c) for c in _named(node)],
        )

    def _array_access(self, node) -> TreeNode:
        return self._make(
            "ARRAY_ACCESS",
            node,
            getExpression=self.lower(node.child_by_field_name("array")),
            getIndex=self.lower(node.child_by_field_name("index")),
        )

    def _method_reference(self, node) -> TreeNode:
        named = _named(node)
        if any(child.type == "new" for child in node.children):
            name = "new"
        else:
            name = self._text(named[-1]) if len(named) > 1 else ""
        return self._make(
            "MEMBER_REFERENCE",
            node,
            attributes={"name": name},
            getQualifierExpression=self.lower(named[0]) if named else None,
            getTypeArguments=self._type_arguments(_child_of_type(node, "type_arguments")),
        )

    # types

    def _primitive_type(self, node) -> TreeNode:
        return self._make(
            "PRIMITIVE_TYPE",
            node,
            attributes={"type_kind": self._text(node).upper()},
        )

    def _wrap_dimensions(self, element: Optional[TreeNode], dimensions) -> Optional[TreeNode]:
        if element is None or dimensions is None:
            return element
        end = self._end(dimensions)
        for _ in range(_bracket_count(dimensions)):
            element = self._make("ARRAY_TYPE", (element.start, end), getType=element)
        return element

    def _array_type(self, node) -> TreeNode:
        return self._wrap_dimensions(
            self.lower(node.child_by_field_name("element")),
            node.child_by_field_name("dimensions"),
        )

    def _generic_type(self, node) -> TreeNode:
        named = _named(node)
        return self._make(
            "PARAMETERIZED_TYPE",
            node,
            getType=self.lower(named[0]) if named else None,
            getTypeArguments=self._type_arguments(_child_of_type(node, "type_arguments")),
        )

    def _wildcard(self, node) -> TreeNode:
        kind = "UNBOUNDED_WILDCARD"
        for child in node.children:
            if child.type == "extends":
                kind = "EXTENDS_WILDCARD"
            elif child.type == "super":
                kind = "SUPER_WILDCARD"

        bound = None
        if kind != "UNBOUNDED_WILDCARD":
            candidates = [
                c for c in _named(node)
                if c.type not in ANNOTATION_TYPES and c.type != "super"
            ]
            bound = self.lower(candidates[-1]) if candidates else None
        return self._make(kind, node, getBound=bound)

    def _annotated_type(self, node) -> TreeNode:
        named = _named(node)
        annotations = [self._annotation(c) for c in named if c.type in ANNOTATION_TYPES]
        underlying = [c for c in named if c.type not in ANNOTATION_TYPES]
        return self._make(
            "ANNOTATED_TYPE",
            node,
            getAnnotations=annotations,
            getUnderlyingType=self.lower(underlying[0]) if underlying else None,
        )
