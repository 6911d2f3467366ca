"""
Shorthand Block Lint Rule

A lint rule written against the builder: flags `[1, 2, 3].map { |v| v.even? }`,
which can be written `[1, 2, 3].map(&:even?)`.
"""

from dataclasses import dataclass

import pytest

import asta
from asta import Node, Symbol


@dataclass(frozen=True)
class Offense:
    """Reported rule violation"""

    message: str
    start_line: int
    start_column: int
    source: str
    replacement: str


class ShortHandBlockRule:
    """
    Detect blocks that only call one method on their single argument.

    The builder below produces:

        (block $(send ... _) (args $(...)) (send $(...) $_))
    """

    MESSAGE = "Use shorthand block syntax"

    CAPTURE_NAMES = ("caller", "block_argument", "called_variable", "called_method")

    PATTERN = asta.build(
        lambda b: b.node(
            "block",
            # Calling object and method
            b.capture(b.node("send", b.token("..."), b.token("_"))),
            # Block argument names
            b.node("args", b.capture_children()),
            # Receiver and method called inside the block
            b.node("send", b.capture_children(), b.token("$_")),
        )
    ).compile()

    def named_captures(self, node: Node) -> dict | None:
        captures = self.PATTERN.captures(node)
        if captures is None:
            return None
        return dict(zip(self.CAPTURE_NAMES, captures))

    def check(self, source: str) -> list[Offense]:
        offenses = []
        for match in self.PATTERN.search(asta.parse_source(source)):
            captures = dict(zip(self.CAPTURE_NAMES, match.captures))

            block_variable = captures["block_argument"].children[0]
            called_variable = captures["called_variable"].children[0]
            if block_variable != called_variable:
                continue

            location = match.node.location
            offenses.append(
                Offense(
                    message=self.MESSAGE,
                    start_line=location.start_line,
                    start_column=location.start_column,
                    source=match.node.source,
                    replacement=f"{captures['caller'].source}(&:{captures['called_method']})",
                )
            )
        return offenses


@pytest.fixture
def rule():
    return ShortHandBlockRule()


class TestPattern:
    """Builder output for the rule"""

    def test_pattern_text(self):
        assert ShortHandBlockRule.PATTERN.pattern == "(block $(send ... _) (args $(...)) (send $(...) $_))"

    def test_named_captures(self, rule):
        node = asta.parse_source("[1, 2, 3].map { |v| v.even? }")

        captures = rule.named_captures(node)

        assert str(captures["caller"]) == "(send (array (int 1) (int 2) (int 3)) :map)"
        assert str(captures["block_argument"]) == "(arg :v)"
        assert str(captures["called_variable"]) == "(lvar :v)"
        assert captures["called_method"] == Symbol("even?")


class TestValidCode:
    """No offenses"""

    def test_shorthand_block(self, rule):
        assert rule.check("[1, 2, 3].map(&:even?)\n") == []

    def test_block_doing_more_than_one_call(self, rule):
        assert rule.check("[1, 2, 3].map { |v| v + 2 }\n") == []

    def test_block_calling_other_receiver(self, rule):
        assert rule.check("w = 1\n[1, 2, 3].map { |v| w.even? }\n") == []


class TestInvalidCode:
    """Offenses"""

    def test_single_line_block(self, rule):
        offenses = rule.check("[1, 2, 3].map { |v| v.even? }\n")

        assert len(offenses) == 1
        offense = offenses[0]
        assert offense.message == "Use shorthand block syntax"
        assert offense.start_line == 1
        assert offense.start_column == 0
        assert offense.source == "[1, 2, 3].map { |v| v.even? }"
        assert offense.replacement == "[1, 2, 3].map(&:even?)"

    def test_multi_line_block(self, rule):
        offenses = rule.check("[1, 2, 3].map do |v|\n  v.even?\nend\n")

        assert len(offenses) == 1
        assert offenses[0].source.splitlines()[0] == "[1, 2, 3].map do |v|"
        assert offenses[0].replacement == "[1, 2, 3].map(&:even?)"

    def test_nested_offense_location(self, rule):
        offenses = rule.check("def f(items)\n  items.select { |item| item.valid? }\nend\n")

        assert len(offenses) == 1
        assert offenses[0].start_line == 2
        assert offenses[0].start_column == 2
        assert offenses[0].replacement == "items.select(&:valid?)"
