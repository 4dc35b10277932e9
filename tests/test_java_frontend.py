"""
Tests for the Java front-end.

Compiles small Java snippets and checks both the lowered trees and
the feature graphs scanned from them.
"""

import pytest

from astfeatures.core.exceptions import CompilationError, LanguageNotSupportedError
from astfeatures.frontend import BaseFrontend, FrontendRegistry
from astfeatures.frontend.java import JavaFrontend
from astfeatures.graph.feature_graph import FeatureGraph, NodeType
from astfeatures.graph.scanner import AstScanner
from astfeatures.testing import SourceSpan, TestCompilation
from astfeatures.tree.model import NOPOS, walk


def find_all(root, kind):
    return [node for node in walk(root) if node.kind == kind]


def find_first(root, kind):
    return find_all(root, kind)[0]


def scan_tree(compilation, root=None):
    graph = FeatureGraph(source_file=compilation.compilation.file_name, source=compilation.source)
    AstScanner.add_to_graph(root or compilation.compilation_unit, graph)
    return graph


def labels(graph, node):
    return [child.contents for child in graph.get_children(node)]


def span_of(node):
    return SourceSpan(node.start_position, node.end_position)


class TestFrontendRegistry:
    """Front-end registration and lookup."""

    def test_java_registered(self):
        assert FrontendRegistry.has_frontend("java")
        assert "java" in FrontendRegistry.list_languages()
        assert isinstance(FrontendRegistry.get_frontend("java"), JavaFrontend)

    def test_instances_are_cached(self):
        assert FrontendRegistry.get_frontend("java") is FrontendRegistry.get_frontend("java")

    def test_language_for_extension(self):
        assert FrontendRegistry.language_for_extension(".java") == "java"
        assert FrontendRegistry.language_for_extension(".JAVA") == "java"
        assert FrontendRegistry.language_for_extension(".cobol") is None

    def test_unknown_language(self):
        with pytest.raises(LanguageNotSupportedError):
            FrontendRegistry.get_frontend("cobol")

    def test_register_decorator(self):
        @FrontendRegistry.register
        class DummyFrontend(BaseFrontend):
            LANGUAGE = "dummy"
            SUPPORTED_EXTENSIONS = [".dummy"]

        try:
            assert FrontendRegistry.get_frontend("dummy").LANGUAGE == "dummy"
            with pytest.raises(NotImplementedError):
                FrontendRegistry.get_frontend("dummy").compile("", "a.dummy")
        finally:
            FrontendRegistry.unregister("dummy")

        assert not FrontendRegistry.has_frontend("dummy")


class TestTestCompilation:
    """The snippet compilation helper."""

    @pytest.fixture
    def compilation(self):
        return TestCompilation.compile(
            "Test.java",
            "class Test {",
            "  int x = 1;",
            "  int y = x;",
            "}",
        )

    def test_lines_joined(self, compilation):
        assert compilation.source == "class Test {\n  int x = 1;\n  int y = x;\n}"
        assert compilation.compilation.file_name == "Test.java"
        assert compilation.compilation.language == "java"

    def test_source_span(self, compilation):
        assert compilation.source_span("Test") == SourceSpan(6, 10)

    def test_source_span_with_context(self, compilation):
        span = compilation.source_span("x", prefix="= ")

        assert compilation.source[span.start:span.end] == "x"
        assert span.start == compilation.source.index("= x;") + 2

    def test_source_span_followed_by(self, compilation):
        span = compilation.source_span("x", followed_by=" = 1")

        assert span.start == compilation.source.index("x = 1")
        assert span.end == span.start + 1

    def test_source_span_missing(self, compilation):
        with pytest.raises(AssertionError):
            compilation.source_span("z", followed_by=" = 3")


class TestCompilationErrors:
    """Sources with syntax errors are rejected."""

    def test_syntax_error(self):
        with pytest.raises(CompilationError) as info:
            TestCompilation.compile(
                "Broken.java",
                "class Broken {",
                "  void f() { int x = ; }",
                "}",
            )

        assert info.value.file_name == "Broken.java"
        assert info.value.diagnostics
        assert any(diagnostic.line == 2 for diagnostic in info.value.diagnostics)

    def test_missing_brace(self):
        with pytest.raises(CompilationError):
            TestCompilation.compile("Broken.java", "class Broken {")


class TestIfStatement:
    """The feature graph of `if (x) { y(); }`."""

    @pytest.fixture
    def compilation(self):
        return TestCompilation.compile(
            "Test.java",
            "class Test {",
            "  void f(boolean x) {",
            "    if (x) { y(); }",
            "  }",
            "  void y() {}",
            "}",
        )

    @pytest.fixture
    def graph(self, compilation):
        return scan_tree(compilation, find_first(compilation.compilation_unit, "IF"))

    def test_holders(self, graph):
        assert graph.root.contents == "IF"
        assert labels(graph, graph.root) == ["CONDITION", "THEN_STATEMENT"]
        assert graph.nodes_by_contents("ELSE_STATEMENT") == []

    def test_condition(self, compilation, graph):
        condition, _ = graph.get_children(graph.root)
        (parenthesized,) = graph.get_children(condition)

        assert parenthesized.contents == "PARENTHESIZED"
        assert span_of(condition) == compilation.source_span("(x)")

        (expression,) = graph.get_children(parenthesized)
        (identifier,) = graph.get_children(expression)
        assert identifier.contents == "IDENTIFIER"
        assert span_of(identifier) == compilation.source_span("x", followed_by=")", prefix="(")

    def test_then_statement(self, compilation, graph):
        _, then = graph.get_children(graph.root)
        (block,) = graph.get_children(then)

        assert block.contents == "BLOCK"
        assert span_of(block) == compilation.source_span("{ y(); }")

        (statements,) = graph.get_children(block)
        assert statements.contents == "STATEMENTS"
        assert labels(graph, statements) == ["EXPRESSION_STATEMENT"]
        assert span_of(statements) == compilation.source_span("y();")

    def test_line_numbers(self, graph):
        assert graph.root.start_line == 3
        assert graph.root.end_line == 3


class TestBlock:
    """A block with three statements."""

    def test_statements_holder(self):
        compilation = TestCompilation.compile(
            "Test.java",
            "class Test {",
            "  void f() {",
            "    a();",
            "    b();",
            "    c();",
            "  }",
            "  void a() {}",
            "  void b() {}",
            "  void c() {}",
            "}",
        )
        method = next(
            m for m in find_all(compilation.compilation_unit, "METHOD")
            if m.attributes["name"] == "f"
        )
        block = method.child("getBody")
        graph = scan_tree(compilation, block)

        (holder,) = graph.get_children(graph.root)
        assert holder.contents == "STATEMENTS"
        assert len(graph.get_children(holder)) == 3
        assert holder.start_position == compilation.source_span("a();").start
        assert holder.end_position == compilation.source_span("c();").end

        names = [
            graph.get_tree_node(child).child("getExpression").child("getMethodSelect").attributes["name"]
            for child in graph.get_children(holder)
        ]
        assert names == ["a", "b", "c"]


class TestDefaultConstructors:
    """Implicit constructors entered by the front-end."""

    def test_class_gets_default_constructor(self):
        compilation = TestCompilation.compile(
            "Test.java",
            "public class Test {",
            "  void m() {}",
            "}",
        )
        class_node = find_first(compilation.compilation_unit, "CLASS")
        members = class_node.child("getMembers")

        assert len(members) == 2
        constructor = members[0]
        assert constructor.kind == "METHOD"
        assert constructor.generated_constructor
        assert constructor.attributes["name"] == "<init>"
        assert constructor.start == constructor.end == class_node.start

    def test_generated_constructor_not_in_graph(self):
        compilation = TestCompilation.compile(
            "Test.java",
            "class Test {",
            "  void m() {}",
            "}",
        )
        graph = scan_tree(compilation)

        (method,) = graph.nodes_by_contents("METHOD")
        assert graph.get_tree_node(method).attributes["name"] == "m"

        members = graph.get_parent(method)
        assert members.contents == "MEMBERS"
        assert span_of(members) == compilation.source_span("void m() {}")

    def test_explicit_constructor_kept(self):
        compilation = TestCompilation.compile(
            "Test.java",
            "class Test {",
            "  Test(int a) {}",
            "}",
        )
        graph = scan_tree(compilation)

        (constructor,) = graph.nodes_by_contents("METHOD")
        tree_node = graph.get_tree_node(constructor)
        assert tree_node.attributes["name"] == "<init>"
        assert not tree_node.generated_constructor

    def test_empty_class_has_no_members_holder(self):
        compilation = TestCompilation.compile("Test.java", "class Test {}")
        graph = scan_tree(compilation)

        class_node = graph.nodes_by_contents("CLASS")[0]
        assert labels(graph, class_node) == ["MODIFIERS"]
        assert graph.nodes_by_contents("MEMBERS") == []

    def test_absent_modifiers_have_no_position(self):
        compilation = TestCompilation.compile("Test.java", "class Test {}")
        graph = scan_tree(compilation)

        modifiers = graph.nodes_by_contents("MODIFIERS")
        assert [node.type for node in modifiers] == [NodeType.FAKE_AST, NodeType.AST_ELEMENT]
        assert all(node.start_position == NOPOS for node in modifiers)

    def test_interface_has_no_constructor(self):
        compilation = TestCompilation.compile(
            "Shape.java",
            "interface Shape {",
            "  double area();",
            "}",
        )
        interface = find_first(compilation.compilation_unit, "INTERFACE")
        (method,) = interface.child("getMembers")

        assert method.attributes["name"] == "area"
        assert method.child("getBody") is None

    def test_enum_constructor(self):
        compilation = TestCompilation.compile(
            "Color.java",
            "enum Color { RED, GREEN; }",
        )
        members = find_first(compilation.compilation_unit, "ENUM").child("getMembers")

        assert [member.kind for member in members] == ["METHOD", "VARIABLE", "VARIABLE"]
        assert members[0].generated_constructor
        assert members[1].attributes["enum_constant"]

    def test_record_canonical_constructor(self):
        compilation = TestCompilation.compile(
            "Point.java",
            "record Point(int x, int y) {}",
        )
        members = find_first(compilation.compilation_unit, "RECORD").child("getMembers")

        constructor = members[0]
        assert constructor.generated_constructor
        assert [p.attributes["name"] for p in constructor.child("getParameters")] == ["x", "y"]

    def test_record_compact_constructor(self):
        compilation = TestCompilation.compile(
            "Point.java",
            "record Point(int x) {",
            "  Point {",
            "    assert x > 0;",
            "  }",
            "}",
        )
        members = find_first(compilation.compilation_unit, "RECORD").child("getMembers")

        assert not any(member.generated_constructor for member in members)

    def test_anonymous_class_constructor(self):
        compilation = TestCompilation.compile(
            "Test.java",
            "class Test {",
            "  Runnable r = new Runnable() {",
            "    public void run() {}",
            "  };",
            "}",
        )
        new_class = find_first(compilation.compilation_unit, "NEW_CLASS")
        body = new_class.child("getClassBody")

        assert body.attributes["anonymous"]
        assert body.child("getMembers")[0].generated_constructor


class TestCompilationUnit:
    """Top-level structure of a scanned file."""

    @pytest.fixture
    def compilation(self):
        return TestCompilation.compile(
            "Test.java",
            "package com.example;",
            "",
            "import java.util.List;",
            "import static java.util.Collections.*;",
            "",
            "class Test {}",
        )

    def test_root_holders(self, compilation):
        graph = scan_tree(compilation)

        assert graph.root.contents == "COMPILATION_UNIT"
        assert labels(graph, graph.root) == ["PACKAGE", "IMPORTS", "TYPE_DECLS"]

    def test_package_name_scanned_once(self, compilation):
        graph = scan_tree(compilation)

        assert len(graph.nodes_by_contents("PACKAGE_NAME")) == 1
        assert graph.get_statistics()["is_tree"]

    def test_imports(self, compilation):
        imports = find_all(compilation.compilation_unit, "IMPORT")

        assert [i.attributes["static"] for i in imports] == [False, True]
        wildcard = imports[1].child("getQualifiedIdentifier")
        assert wildcard.kind == "MEMBER_SELECT"
        assert wildcard.attributes["identifier"] == "*"


RICH_SOURCE = (
    "package demo;",
    "",
    "import java.util.ArrayList;",
    "import java.util.List;",
    "",
    "/** A small class using most statement and expression forms. */",
    "public class Box<T extends Comparable<T>> implements Runnable {",
    "  private static int count;",
    "  private T value;",
    "  private final List<String> names = new ArrayList<>();",
    "  int[] values = {1, 2, 3};",
    "",
    "  static {",
    "    count = 0;",
    "  }",
    "",
    "  Box(T value) {",
    "    super();",
    "    this.value = value;",
    "  }",
    "",
    "  @Override",
    "  public void run() {",
    "    int total = 0;",
    "    outer:",
    "    for (int i = 0; i < 3; i++) {",
    "      for (int j : values) {",
    "        if (j == i) continue outer;",
    "        total += j;",
    "      }",
    "    }",
    "    while (total > 10) { total--; }",
    "    do { total++; } while (total < 5);",
    "    long big = (long) total * 10L;",
    "    double ratio = total > 0 ? 1.5f : 2.0;",
    "    char c = 'c';",
    "    boolean flag = !names.isEmpty() && value != null;",
    "    int[][] grid = new int[2][3];",
    "    String[] copy = new String[] {\"a\", \"b\"};",
    "    grid[0][1] = values[2];",
    "    java.util.function.Function<Integer, Integer> inc = v -> v + 1;",
    "    java.util.function.BinaryOperator<Integer> add = (a, b) -> a + b;",
    "    java.util.function.Supplier<String> text = this::toString;",
    "    Runnable noop = () -> {};",
    "    Object o = value;",
    "    if (o instanceof String s && !s.isEmpty()) {",
    "      names.add(s);",
    "    } else {",
    "      names.clear();",
    "    }",
    "    switch (total) {",
    "      case 1:",
    "      case 2:",
    "        total = -total;",
    "        break;",
    "      default:",
    "        total = 0;",
    "    }",
    "    String label = switch (total) {",
    "      case 0 -> \"zero\";",
    "      default -> {",
    "        yield \"many\";",
    "      }",
    "    };",
    "    try (java.io.StringReader reader = new java.io.StringReader(label)) {",
    "      reader.read();",
    "    } catch (java.io.IOException | RuntimeException e) {",
    "      throw new IllegalStateException(e);",
    "    } finally {",
    "      count++;",
    "    }",
    "    synchronized (this) {",
    "      count += 1;",
    "    }",
    "    assert total >= 0 : \"negative\";",
    "  }",
    "",
    "  @SuppressWarnings(\"unchecked\")",
    "  <R> R convert(Object input) throws Exception {",
    "    return (R) input;",
    "  }",
    "",
    "  enum Mode {",
    "    ON(1), OFF(0);",
    "    private final int code;",
    "    Mode(int code) { this.code = code; }",
    "  }",
    "",
    "  interface Visitor<R> {",
    "    R visit(Box<?> box);",
    "    default void done() {}",
    "  }",
    "}",
)


class TestRichSource:
    """A file exercising most Java constructs."""

    @pytest.fixture(scope="class")
    def compilation(self):
        return TestCompilation.compile("Box.java", *RICH_SOURCE)

    @pytest.fixture(scope="class")
    def graph(self, compilation):
        return scan_tree(compilation)

    def test_kinds_present(self, graph):
        kinds = {node.contents for node in graph.nodes_by_type(NodeType.AST_ELEMENT)}
        expected = {
            "COMPILATION_UNIT", "PACKAGE", "IMPORT", "CLASS", "ENUM", "INTERFACE",
            "METHOD", "VARIABLE", "BLOCK", "IF", "FOR_LOOP", "ENHANCED_FOR_LOOP",
            "WHILE_LOOP", "DO_WHILE_LOOP", "LABELED_STATEMENT", "CONTINUE", "BREAK",
            "SWITCH", "SWITCH_EXPRESSION", "CASE", "YIELD", "TRY", "CATCH",
            "UNION_TYPE", "THROW", "SYNCHRONIZED", "ASSERT", "RETURN",
            "LAMBDA_EXPRESSION", "MEMBER_REFERENCE", "NEW_ARRAY", "NEW_CLASS",
            "ARRAY_ACCESS", "ARRAY_TYPE", "CONDITIONAL_EXPRESSION", "TYPE_CAST",
            "INSTANCE_OF", "BINDING_PATTERN", "PLUS_ASSIGNMENT", "POSTFIX_INCREMENT",
            "POSTFIX_DECREMENT", "UNARY_MINUS", "LOGICAL_COMPLEMENT", "CONDITIONAL_AND",
            "ANNOTATION", "TYPE_PARAMETER", "PARAMETERIZED_TYPE", "UNBOUNDED_WILDCARD",
            "PRIMITIVE_TYPE", "MEMBER_SELECT", "METHOD_INVOCATION", "PARENTHESIZED",
            "INT_LITERAL", "LONG_LITERAL", "FLOAT_LITERAL", "DOUBLE_LITERAL",
            "CHAR_LITERAL", "STRING_LITERAL", "NULL_LITERAL",
        }
        assert expected <= kinds

    def test_is_tree(self, graph):
        assert graph.get_statistics()["is_tree"]

    def test_holders_have_children(self, graph):
        for holder in graph.nodes_by_type(NodeType.FAKE_AST):
            children = graph.get_children(holder)
            assert children
            assert holder.start_position == children[0].start_position
            assert holder.end_position == children[-1].end_position

    def test_element_spans_inside_source(self, compilation, graph):
        length = len(compilation.source)
        for node in graph.nodes_by_type(NodeType.AST_ELEMENT):
            if node.start_position == NOPOS:
                continue
            assert 0 <= node.start_position <= node.end_position <= length

    def test_no_generated_constructor_nodes(self, graph):
        for node in graph.nodes_by_contents("METHOD"):
            assert not graph.get_tree_node(node).generated_constructor

    def test_switch_group_cases(self, compilation):
        switch = find_first(compilation.compilation_unit, "SWITCH")
        cases = switch.child("getCases")

        assert len(cases) == 3
        assert cases[0].child("getStatements") == []
        assert len(cases[1].child("getStatements")) == 2
        assert cases[2].attributes["default"]

    def test_field_declarations(self, compilation):
        class_node = find_first(compilation.compilation_unit, "CLASS")
        fields = [m for m in class_node.child("getMembers") if m.kind == "VARIABLE"]

        assert [f.attributes["name"] for f in fields] == ["count", "value", "names", "values"]
        assert fields[3].child("getInitializer").kind == "NEW_ARRAY"

    def test_deterministic(self, compilation):
        assert scan_tree(compilation).to_dict() == scan_tree(compilation).to_dict()


class TestNonAsciiSource:
    """Positions are character offsets, not byte offsets."""

    def test_offsets(self):
        compilation = TestCompilation.compile(
            "Test.java",
            "class Test {",
            "  String s = \"héllo wörld\";",
            "  int x = 1;",
            "}",
        )
        literal = find_first(compilation.compilation_unit, "INT_LITERAL")

        assert SourceSpan(literal.start, literal.end) == compilation.source_span("1", followed_by=";")
