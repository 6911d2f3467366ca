"""
Node Pattern Matcher

Compiled node pattern bound to a table of caller-supplied functions.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from asta.ast.node import Node
from asta.ast.render import render
from asta.errors import PatternCompileError
from asta.pattern.parser import parse_pattern
from asta.pattern.pattern_ir import FunctionCall, MatchState


def collapse_captures(captures: list[Any] | tuple[Any, ...]) -> Any:
    """Match result convention: True without captures, the value for one, a tuple for more."""
    if not captures:
        return True
    if len(captures) == 1:
        return captures[0]
    return tuple(captures)


def _render_capture(capture: Any) -> Any:
    # `$...` captures a tuple of values
    if isinstance(capture, tuple):
        return [render(item) for item in capture]
    return render(capture)


@dataclass(frozen=True)
class PatternMatch:
    """
    Pattern match result

    A node that matched during a tree search, with its captures.
    """

    node: Node
    captures: tuple[Any, ...] = ()

    @property
    def value(self) -> Any:
        return collapse_captures(self.captures)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict"""
        location = self.node.location
        return {
            "node": render(self.node),
            "captures": [_render_capture(capture) for capture in self.captures],
            "start_line": location.start_line if location else None,
            "end_line": location.end_line if location else None,
            "source": self.node.source,
        }


class NodePattern:
    """
    Compiled node pattern

    `#name` references resolve against the injected `functions` table, so
    each compiled pattern carries its own predicates.

    Usage:
        >>> pattern = NodePattern("(lvasgn :a $_)")
        >>> pattern.match(Node("lvasgn", (Symbol("a"), Node("int", (1,)))))
        Node(type='int', children=(1,))
    """

    def __init__(
        self,
        pattern: str,
        functions: Mapping[str, Callable[..., Any]] | None = None,
    ) -> None:
        self.pattern = pattern
        self.functions: Mapping[str, Callable[..., Any]] = MappingProxyType(dict(functions or {}))
        self.root = parse_pattern(pattern)

        referenced = {element.name for element in self.root.walk() if isinstance(element, FunctionCall)}
        missing = sorted(referenced - set(self.functions))
        if missing:
            names = ", ".join(f"#{name}" for name in missing)
            raise PatternCompileError(
                f"Undefined function(s) {names}",
                pattern=pattern,
                missing=missing,
            )

    @property
    def capture_count(self) -> int:
        return self.root.capture_count

    def captures(self, node: Any) -> list[Any] | None:
        """
        Capture list for `node`

        Returns:
            Captures in pattern order, or None when the pattern does not apply
        """
        state = MatchState(functions=self.functions)
        if not self.root.match(node, state):
            return None
        return list(state.captures)

    def match(self, node: Any) -> Any:
        """
        Match `node`

        Returns:
            None on no match, otherwise see `collapse_captures`
        """
        captures = self.captures(node)
        if captures is None:
            return None
        return collapse_captures(captures)

    def search(self, tree: Node) -> Iterator[PatternMatch]:
        """Every node in `tree` the pattern matches, depth-first pre-order."""
        for node in tree.each_node():
            captures = self.captures(node)
            if captures is not None:
                yield PatternMatch(node=node, captures=tuple(captures))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.pattern!r})"
