"""
Node and Render Tests

Immutable nodes, symbol semantics and s-expression serialization.
"""

import math

import pytest

from asta.ast import Node, SourceRange, Symbol, Token, inspect_literal, render, render_pretty


class TestSymbol:
    """Ruby symbol values"""

    def test_symbol_never_equals_plain_string(self):
        """:a and "a" are different values"""
        assert Symbol("a") != "a"
        assert "a" != Symbol("a")
        assert Symbol("a") == Symbol("a")

    def test_symbol_hash_differs_from_string(self):
        """Symbols and strings do not collide as dict keys"""
        table = {Symbol("a"): "symbol", "a": "string"}

        assert table[Symbol("a")] == "symbol"
        assert table["a"] == "string"

    def test_repr(self):
        assert repr(Symbol("even?")) == "Symbol('even?')"


class TestNode:
    """Node data model"""

    def test_children_normalized_to_tuple(self):
        node = Node("send", [None, Symbol("puts")])

        assert node.children == (None, Symbol("puts"))

    def test_immutable(self):
        node = Node("int", (1,))

        with pytest.raises(AttributeError):
            node.type = "float"  # type: ignore[misc]

    def test_concat_returns_new_node(self):
        """concat never mutates the receiver"""
        base = Node("const", (None, Symbol("A")))
        extended = base.concat(Token("$(...)"))

        assert base.children == (None, Symbol("A"))
        assert extended.children == (None, Symbol("A"), Token("$(...)"))

    def test_updated(self):
        node = Node("lvar", (Symbol("a"),))

        assert node.updated(type="ivar") == Node("ivar", (Symbol("a"),))
        assert node.updated(children=(Symbol("b"),)) == Node("lvar", (Symbol("b"),))

    def test_location_is_not_part_of_equality(self):
        """Parsed and hand-built nodes compare equal"""
        location = SourceRange(0, 1, 1, 0, 1, 1, source="1")
        parsed = Node("int", (1,), location=location)

        assert parsed == Node("int", (1,))
        assert hash(parsed) == hash(Node("int", (1,)))
        assert parsed.source == "1"
        assert Node("int", (1,)).source is None

    def test_shared_children(self):
        """One node can be the child of several parents"""
        shared = Node("int", (1,))
        first = Node("array", (shared,))
        second = Node("lvasgn", (Symbol("a"), shared))

        assert first.children[0] is second.children[1]

    def test_each_node_pre_order(self):
        tree = Node(
            "send",
            (Node("lvar", (Symbol("a"),)), Symbol("+"), Node("int", (1,))),
        )

        assert [node.type for node in tree.each_node()] == ["send", "lvar", "int"]

    def test_str_renders(self):
        assert str(Node("send", (None, Symbol("puts")))) == "(send nil :puts)"


class TestInspectLiteral:
    """Primitive literal rendering"""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, "nil"),
            (True, "true"),
            (False, "false"),
            (1, "1"),
            (-42, "-42"),
            (1.5, "1.5"),
            (Symbol("a"), ":a"),
            (Symbol("@a"), ":@a"),
            (Symbol("@@a"), ":@@a"),
            (Symbol("$a"), ":$a"),
            (Symbol("even?"), ":even?"),
            (Symbol("b="), ":b="),
            (Symbol("[]"), ":[]"),
            (Symbol("+"), ":+"),
            (Symbol("<=>"), ":<=>"),
            (Symbol("a b"), ':"a b"'),
            ("abc", '"abc"'),
            ('say "hi"', '"say \\"hi\\""'),
            ("line\n", '"line\\n"'),
            ("#{x}", '"\\#{x}"'),
        ],
    )
    def test_literals(self, value, expected):
        assert inspect_literal(value) == expected

    def test_special_floats(self):
        assert inspect_literal(math.inf) == "Infinity"
        assert inspect_literal(-math.inf) == "-Infinity"
        assert inspect_literal(math.nan) == "NaN"

    def test_unrenderable_value(self):
        """Values without a Ruby literal form raise TypeError"""
        with pytest.raises(TypeError):
            inspect_literal(object())


class TestRender:
    """Single-line and pretty rendering"""

    def test_qualified_constant_assignment(self):
        tree = Node(
            "casgn",
            (
                Node("const", (Node("const", (None, Symbol("A"))), Symbol("B"))),
                Symbol("C"),
                Node("int", (1,)),
            ),
        )

        assert render(tree) == "(casgn (const (const nil :A) :B) :C (int 1))"

    def test_render_is_idempotent(self):
        tree = Node("lvasgn", (Symbol("a"), Token("$(...)")))

        assert render(tree) == render(tree) == "(lvasgn :a $(...))"

    def test_childless_node(self):
        assert render(Node("nil")) == "(nil)"

    def test_render_pretty_nests_child_nodes(self):
        tree = Node("const", (Node("const", (Node("const", (None, Symbol("A"))), Symbol("B"))), Symbol("C")))

        assert render_pretty(tree) == "(const\n  (const\n    (const nil :A) :B) :C)"
        assert tree.to_sexp() == render_pretty(tree)

    def test_render_pretty_keeps_tokens_inline(self):
        tree = Node("const", (Node("const", (None, Symbol("A"))), Symbol("B"), Token("$(...)")))

        assert render_pretty(tree) == "(const\n  (const nil :A) :B $(...))"

    def test_render_primitive(self):
        assert render(None) == "nil"
        assert render(Symbol("a")) == ":a"
