"""
Node Pattern Matcher Tests

Engine semantics over hand-built trees.
"""

import pytest

from asta.ast import Node, Symbol
from asta.errors import PatternCompileError
from asta.pattern import NodePattern, PatternMatch


def int_node(value):
    return Node("int", (value,))


def lvasgn(name, value):
    return Node("lvasgn", (Symbol(name), value))


PUTS_HI = Node("send", (None, Symbol("puts"), Node("str", ("hi",))))
ADDITION = Node("send", (int_node(1), Symbol("+"), int_node(2)))


class TestSequenceMatching:
    """Sequences, wildcards and literals"""

    def test_node_type_only(self):
        assert NodePattern("int").match(int_node(1)) is True
        assert NodePattern("int").match(Node("float", (1.0,))) is None

    def test_sequence_with_literals(self):
        assert NodePattern("(lvasgn :a (int 1))").match(lvasgn("a", int_node(1))) is True
        assert NodePattern("(lvasgn :b (int 1))").match(lvasgn("a", int_node(1))) is None

    def test_arity_is_exact_without_rest(self):
        assert NodePattern("(send _ _)").match(ADDITION) is None
        assert NodePattern("(send _ _ _)").match(ADDITION) is True

    def test_wildcard_head(self):
        assert NodePattern("(_ _ :+ _)").match(ADDITION) is True

    def test_symbol_does_not_match_string(self):
        assert NodePattern('(str "hi")').match(Node("str", ("hi",))) is True
        assert NodePattern("(str :hi)").match(Node("str", ("hi",))) is None

    def test_nil_predicate(self):
        assert NodePattern("(send nil? :puts _)").match(PUTS_HI) is True
        with_receiver = Node("send", (int_node(1), Symbol("puts"), int_node(2)))
        assert NodePattern("(send nil? :puts _)").match(with_receiver) is None

    def test_nil_node_type_is_not_absent_value(self):
        """`nil` is the (nil) node type; `nil?` tests for an absent child"""
        assert NodePattern("(send nil :puts _)").match(PUTS_HI) is None
        assert NodePattern("nil").match(Node("nil")) is True

    def test_type_predicate(self):
        assert NodePattern("(send int_type? :+ _)").match(ADDITION) is True
        assert NodePattern("(send str_type? :+ _)").match(ADDITION) is None

    def test_non_node_value(self):
        assert NodePattern("(int _)").match(1) is None


class TestCaptures:
    """Capture result convention"""

    def test_single_capture_returns_value(self):
        assert NodePattern("(lvasgn :a $_)").match(lvasgn("a", int_node(1))) == int_node(1)

    def test_capture_children_wildcard(self):
        assert NodePattern("(lvasgn :a $(...))").match(lvasgn("a", int_node(1))) == int_node(1)

    def test_multiple_captures_return_tuple(self):
        assert NodePattern("(send $_ $_ $_)").match(ADDITION) == (int_node(1), Symbol("+"), int_node(2))

    def test_captured_rest(self):
        assert NodePattern("(send _ $...)").match(ADDITION) == (Symbol("+"), int_node(2))

    def test_rest_in_middle(self):
        assert NodePattern("(send ... $_)").match(ADDITION) == int_node(2)

    def test_nested_capture_order(self):
        """Outer captures come before captures nested inside them"""
        result = NodePattern("(lvasgn _ $(int $_))").match(lvasgn("a", int_node(7)))

        assert result == (int_node(7), 7)

    def test_captured_nil_distinguishable_from_no_match(self):
        pattern = NodePattern("(send $_ :puts _)")

        assert pattern.captures(PUTS_HI) == [None]
        assert pattern.captures(ADDITION) is None

    def test_capture_count(self):
        assert NodePattern("(send $_ $... )").capture_count == 2


class TestCombinators:
    """Union, intersection, negation and unification"""

    def test_union(self):
        pattern = NodePattern("(send _ {:+ :-} _)")

        assert pattern.match(ADDITION) is True
        assert pattern.match(Node("send", (int_node(1), Symbol("*"), int_node(2)))) is None

    def test_union_with_captures(self):
        pattern = NodePattern("{(int $_) (float $_)}")

        assert pattern.match(int_node(3)) == 3
        assert pattern.match(Node("float", (1.5,))) == 1.5

    def test_intersection(self):
        assert NodePattern("[int (int 1)]").match(int_node(1)) is True
        assert NodePattern("[int (int 2)]").match(int_node(1)) is None

    def test_negation(self):
        assert NodePattern("(send !nil? :+ _)").match(ADDITION) is True
        assert NodePattern("!int").match(int_node(1)) is None

    def test_unification(self):
        pattern = NodePattern("(send _x :+ _x)")

        assert pattern.match(Node("send", (int_node(1), Symbol("+"), int_node(1)))) is True
        assert pattern.match(ADDITION) is None

    def test_literal_booleans_are_not_integers(self):
        assert NodePattern("(int 1)").match(Node("int", (True,))) is None


class TestFunctions:
    """Bound function table"""

    def test_function_called_with_value(self):
        pattern = NodePattern("(int #even?)", functions={"even?": lambda value: value % 2 == 0})

        assert pattern.match(int_node(2)) is True
        assert pattern.match(int_node(3)) is None

    def test_function_arguments(self):
        functions = {"between": lambda value, low, high: low <= value <= high}
        pattern = NodePattern("(int #between(1 5))", functions=functions)

        assert pattern.match(int_node(3)) is True
        assert pattern.match(int_node(9)) is None

    def test_missing_function(self):
        with pytest.raises(PatternCompileError) as exc_info:
            NodePattern("(int #a)")

        assert exc_info.value.context["missing"] == ["a"]

    def test_unreferenced_functions_allowed(self):
        assert NodePattern("(int _)", functions={"a": bool}).match(int_node(1)) is True

    def test_function_table_is_read_only(self):
        pattern = NodePattern("(int #a)", functions={"a": bool})

        with pytest.raises(TypeError):
            pattern.functions["b"] = bool  # type: ignore[index]

    def test_function_errors_propagate(self):
        def broken(value):
            raise RuntimeError("boom")

        pattern = NodePattern("(int #a)", functions={"a": broken})

        with pytest.raises(RuntimeError):
            pattern.match(int_node(1))


class TestSearch:
    """Tree search"""

    def test_search_yields_every_match(self):
        tree = Node("begin", (lvasgn("a", int_node(1)), lvasgn("b", int_node(2))))

        matches = list(NodePattern("(lvasgn $_ _)").search(tree))

        assert [m.value for m in matches] == [Symbol("a"), Symbol("b")]
        assert all(isinstance(m, PatternMatch) for m in matches)

    def test_to_dict(self):
        match = PatternMatch(node=int_node(1), captures=(1,))

        assert match.to_dict() == {
            "node": "(int 1)",
            "captures": ["1"],
            "start_line": None,
            "end_line": None,
            "source": None,
        }

    def test_repr(self):
        assert repr(NodePattern("(int _)")) == "NodePattern('(int _)')"
