"""
Java node schemas.

Kinds and slot names follow the javac tree API, so holder labels
match the accessor names of com.sun.source.tree (getCondition becomes
CONDITION). Slots are listed in source order.
"""

from astfeatures.tree.model import ChildSlot, Grammar, NodeSchema, SlotArity


def _single(name: str) -> ChildSlot:
    return ChildSlot(name, SlotArity.SINGLE)


def _optional(name: str) -> ChildSlot:
    return ChildSlot(name, SlotArity.OPTIONAL)


def _list(name: str) -> ChildSlot:
    return ChildSlot(name, SlotArity.LIST)


BINARY_OPERATORS = {
    "+": "PLUS",
    "-": "MINUS",
    "*": "MULTIPLY",
    "/": "DIVIDE",
    "%": "REMAINDER",
    "<": "LESS_THAN",
    ">": "GREATER_THAN",
    "<=": "LESS_THAN_EQUAL",
    ">=": "GREATER_THAN_EQUAL",
    "==": "EQUAL_TO",
    "!=": "NOT_EQUAL_TO",
    "&&": "CONDITIONAL_AND",
    "||": "CONDITIONAL_OR",
    "&": "AND",
    "|": "OR",
    "^": "XOR",
    "<<": "LEFT_SHIFT",
    ">>": "RIGHT_SHIFT",
    ">>>": "UNSIGNED_RIGHT_SHIFT",
}

COMPOUND_ASSIGNMENT_OPERATORS = {
    "+=": "PLUS_ASSIGNMENT",
    "-=": "MINUS_ASSIGNMENT",
    "*=": "MULTIPLY_ASSIGNMENT",
    "/=": "DIVIDE_ASSIGNMENT",
    "%=": "REMAINDER_ASSIGNMENT",
    "&=": "AND_ASSIGNMENT",
    "|=": "OR_ASSIGNMENT",
    "^=": "XOR_ASSIGNMENT",
    "<<=": "LEFT_SHIFT_ASSIGNMENT",
    ">>=": "RIGHT_SHIFT_ASSIGNMENT",
    ">>>=": "UNSIGNED_RIGHT_SHIFT_ASSIGNMENT",
}

UNARY_OPERATORS = {
    "+": "UNARY_PLUS",
    "-": "UNARY_MINUS",
    "!": "LOGICAL_COMPLEMENT",
    "~": "BITWISE_COMPLEMENT",
}

LITERAL_KINDS = (
    "INT_LITERAL",
    "LONG_LITERAL",
    "FLOAT_LITERAL",
    "DOUBLE_LITERAL",
    "BOOLEAN_LITERAL",
    "CHAR_LITERAL",
    "STRING_LITERAL",
    "NULL_LITERAL",
)

CLASS_KINDS = ("CLASS", "INTERFACE", "ENUM", "RECORD", "ANNOTATION_TYPE")

_CLASS_SLOTS = (
    _single("getModifiers"),
    _list("getTypeParameters"),
    _optional("getExtendsClause"),
    _list("getImplementsClause"),
    _list("getMembers"),
)


def _schemas():
    yield NodeSchema("COMPILATION_UNIT", (
        _optional("getPackage"),
        # The package name is also the child of the PACKAGE node.
        ChildSlot("getPackageName", SlotArity.OPTIONAL, alias_of="getPackage"),
        _list("getImports"),
        _list("getTypeDecls"),
    ))
    yield NodeSchema("PACKAGE", (_list("getAnnotations"), _single("getPackageName")))
    yield NodeSchema("IMPORT", (_single("getQualifiedIdentifier"),))

    for kind in CLASS_KINDS:
        yield NodeSchema(kind, _CLASS_SLOTS)

    yield NodeSchema("MODIFIERS", (_list("getAnnotations"),))
    yield NodeSchema("METHOD", (
        _single("getModifiers"),
        _list("getTypeParameters"),
        _optional("getReturnType"),
        _optional("getReceiverParameter"),
        _list("getParameters"),
        _list("getThrows"),
        _optional("getBody"),
        _optional("getDefaultValue"),
    ), method_declaration=True)
    yield NodeSchema("VARIABLE", (
        _single("getModifiers"),
        _optional("getType"),
        _optional("getInitializer"),
    ))
    yield NodeSchema("TYPE_PARAMETER", (_list("getAnnotations"), _list("getBounds")))

    # statements
    yield NodeSchema("BLOCK", (_list("getStatements"),))
    yield NodeSchema("EMPTY_STATEMENT")
    yield NodeSchema("EXPRESSION_STATEMENT", (_single("getExpression"),))
    yield NodeSchema("IF", (
        _single("getCondition"),
        _single("getThenStatement"),
        _optional("getElseStatement"),
    ))
    yield NodeSchema("WHILE_LOOP", (_single("getCondition"), _single("getStatement")))
    yield NodeSchema("DO_WHILE_LOOP", (_single("getStatement"), _single("getCondition")))
    yield NodeSchema("FOR_LOOP", (
        _list("getInitializer"),
        _optional("getCondition"),
        _list("getUpdate"),
        _single("getStatement"),
    ))
    yield NodeSchema("ENHANCED_FOR_LOOP", (
        _single("getVariable"),
        _single("getExpression"),
        _single("getStatement"),
    ))
    yield NodeSchema("LABELED_STATEMENT", (_single("getStatement"),))
    yield NodeSchema("BREAK")
    yield NodeSchema("CONTINUE")
    yield NodeSchema("RETURN", (_optional("getExpression"),))
    yield NodeSchema("THROW", (_single("getExpression"),))
    yield NodeSchema("YIELD", (_single("getValue"),))
    yield NodeSchema("ASSERT", (_single("getCondition"), _optional("getDetail")))
    yield NodeSchema("SYNCHRONIZED", (_single("getExpression"), _single("getBlock")))
    yield NodeSchema("TRY", (
        _list("getResources"),
        _single("getBlock"),
        _list("getCatches"),
        _optional("getFinallyBlock"),
    ))
    yield NodeSchema("CATCH", (_single("getParameter"), _single("getBlock")))
    yield NodeSchema("SWITCH", (_single("getExpression"), _list("getCases")))
    yield NodeSchema("SWITCH_EXPRESSION", (_single("getExpression"), _list("getCases")))
    yield NodeSchema("CASE", (
        _list("getExpressions"),
        _list("getStatements"),
        _optional("getBody"),
    ))

    # expressions
    yield NodeSchema("IDENTIFIER")
    yield NodeSchema("MEMBER_SELECT", (_single("getExpression"),))
    for kind in LITERAL_KINDS:
        yield NodeSchema(kind)
    yield NodeSchema("PARENTHESIZED", (_single("getExpression"),))
    for kind in BINARY_OPERATORS.values():
        yield NodeSchema(kind, (_single("getLeftOperand"), _single("getRightOperand")))
    for kind in UNARY_OPERATORS.values():
        yield NodeSchema(kind, (_single("getExpression"),))
    for kind in (
        "PREFIX_INCREMENT",
        "PREFIX_DECREMENT",
        "POSTFIX_INCREMENT",
        "POSTFIX_DECREMENT",
    ):
        yield NodeSchema(kind, (_single("getExpression"),))
    yield NodeSchema("ASSIGNMENT", (_single("getVariable"), _single("getExpression")))
    for kind in COMPOUND_ASSIGNMENT_OPERATORS.values():
        yield NodeSchema(kind, (_single("getVariable"), _single("getExpression")))
    yield NodeSchema("CONDITIONAL_EXPRESSION", (
        _single("getCondition"),
        _single("getTrueExpression"),
        _single("getFalseExpression"),
    ))
    yield NodeSchema("TYPE_CAST", (_single("getType"), _single("getExpression")))
    yield NodeSchema("INSTANCE_OF", (
        _single("getExpression"),
        _optional("getType"),
        _optional("getPattern"),
    ))
    yield NodeSchema("BINDING_PATTERN", (_single("getVariable"),))
    yield NodeSchema("ARRAY_ACCESS", (_single("getExpression"), _single("getIndex")))
    yield NodeSchema("METHOD_INVOCATION", (
        _list("getTypeArguments"),
        _single("getMethodSelect"),
        _list("getArguments"),
    ))
    yield NodeSchema("NEW_CLASS", (
        _optional("getEnclosingExpression"),
        _list("getTypeArguments"),
        _optional("getIdentifier"),
        _list("getArguments"),
        _optional("getClassBody"),
    ))
    yield NodeSchema("NEW_ARRAY", (
        _optional("getType"),
        _list("getDimensions"),
        _list("getInitializers"),
    ))
    yield NodeSchema("LAMBDA_EXPRESSION", (_list("getParameters"), _single("getBody")))
    yield NodeSchema("MEMBER_REFERENCE", (
        _single("getQualifierExpression"),
        _list("getTypeArguments"),
    ))
    yield NodeSchema("ANNOTATION", (_single("getAnnotationType"), _list("getArguments")))

    # types
    yield NodeSchema("PRIMITIVE_TYPE")
    yield NodeSchema("ARRAY_TYPE", (_single("getType"),))
    yield NodeSchema("PARAMETERIZED_TYPE", (_single("getType"), _list("getTypeArguments")))
    yield NodeSchema("UNION_TYPE", (_list("getTypeAlternatives"),))
    yield NodeSchema("INTERSECTION_TYPE", (_list("getBounds"),))
    yield NodeSchema("ANNOTATED_TYPE", (_list("getAnnotations"), _single("getUnderlyingType")))
    yield NodeSchema("UNBOUNDED_WILDCARD", (_optional("getBound"),))
    yield NodeSchema("EXTENDS_WILDCARD", (_single("getBound"),))
    yield NodeSchema("SUPER_WILDCARD", (_single("getBound"),))

    # constructs without a dedicated kind
    yield NodeSchema("OTHER", (_list("getChildren"),))


JAVA_GRAMMAR = Grammar("java", _schemas())
