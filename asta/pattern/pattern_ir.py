"""
Node Pattern IR

Immutable intermediate representation of a compiled node pattern. Every
element matches a single value (a node, a node type in head position, or a
primitive child) against a `MatchState` that collects captures.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from asta.ast.node import Node, Symbol


class NodeTypeName(Symbol):
    """Node type presented to the head element of a sequence."""

    __slots__ = ()


@dataclass
class MatchState:
    """Mutable per-match state: captures in pattern order plus unification bindings."""

    functions: Mapping[str, Callable[..., Any]]
    captures: list[Any] = field(default_factory=list)
    bindings: dict[str, Any] = field(default_factory=dict)

    def mark(self) -> tuple[int, dict[str, Any]]:
        return len(self.captures), dict(self.bindings)

    def reset(self, mark: tuple[int, dict[str, Any]]) -> None:
        size, bindings = mark
        del self.captures[size:]
        self.bindings = dict(bindings)


class PatternElement:
    """Base class for pattern IR elements."""

    def match(self, value: Any, state: MatchState) -> bool:
        raise NotImplementedError

    @property
    def capture_count(self) -> int:
        return 0

    def children(self) -> tuple[PatternElement, ...]:
        return ()

    def walk(self) -> Iterator[PatternElement]:
        yield self
        for child in self.children():
            yield from child.walk()


@dataclass(frozen=True)
class Wildcard(PatternElement):
    """`_`: any single value."""

    def match(self, value: Any, state: MatchState) -> bool:
        return True


@dataclass(frozen=True)
class Unify(PatternElement):
    """`_name`: any value, equal across every use of the same name."""

    name: str

    def match(self, value: Any, state: MatchState) -> bool:
        if self.name in state.bindings:
            return literal_equals(state.bindings[self.name], value)
        state.bindings[self.name] = value
        return True


@dataclass(frozen=True)
class Literal(PatternElement):
    """`:sym`, `"str"`, `1`, `1.5`."""

    value: Any

    def match(self, value: Any, state: MatchState) -> bool:
        return literal_equals(self.value, value)


@dataclass(frozen=True)
class NodeType(PatternElement):
    """`send`: a node of that type, or the type itself in head position."""

    name: str

    def match(self, value: Any, state: MatchState) -> bool:
        if isinstance(value, Node):
            return value.type == self.name
        if isinstance(value, NodeTypeName):
            return str(value) == self.name
        return False


def _is_nil(value: Any) -> bool:
    return value is None


BUILTIN_PREDICATES: dict[str, Callable[[Any], bool]] = {
    "nil?": _is_nil,
}


def resolve_predicate(name: str) -> Callable[[Any], bool] | None:
    """Builtin for `name`: a fixed predicate, or `<type>_type?` node type test."""
    if name in BUILTIN_PREDICATES:
        return BUILTIN_PREDICATES[name]
    if name.endswith("_type?") and len(name) > len("_type?"):
        node_type = name[: -len("_type?")]
        return lambda value: isinstance(value, Node) and value.type == node_type
    return None


@dataclass(frozen=True)
class Predicate(PatternElement):
    """`nil?`, `send_type?`: builtin value test."""

    name: str

    def match(self, value: Any, state: MatchState) -> bool:
        predicate = resolve_predicate(self.name)
        return bool(predicate and predicate(value))


@dataclass(frozen=True)
class FunctionCall(PatternElement):
    """`#name` or `#name(arg ...)`: bound function called with the value."""

    name: str
    args: tuple[Any, ...] = ()

    def match(self, value: Any, state: MatchState) -> bool:
        return bool(state.functions[self.name](value, *self.args))


@dataclass(frozen=True)
class Capture(PatternElement):
    """`$element`: records the matched value."""

    element: PatternElement

    def match(self, value: Any, state: MatchState) -> bool:
        # Outer captures come before the captures nested inside them
        mark = state.mark()
        slot = len(state.captures)
        state.captures.append(None)
        if self.element.match(value, state):
            state.captures[slot] = value
            return True
        state.reset(mark)
        return False

    @property
    def capture_count(self) -> int:
        return 1 + self.element.capture_count

    def children(self) -> tuple[PatternElement, ...]:
        return (self.element,)


@dataclass(frozen=True)
class Negation(PatternElement):
    """`!element`"""

    element: PatternElement

    def match(self, value: Any, state: MatchState) -> bool:
        mark = state.mark()
        matched = self.element.match(value, state)
        state.reset(mark)
        return not matched

    def children(self) -> tuple[PatternElement, ...]:
        return (self.element,)


@dataclass(frozen=True)
class Union(PatternElement):
    """`{a b}`: first alternative that matches."""

    alternatives: tuple[PatternElement, ...]

    def match(self, value: Any, state: MatchState) -> bool:
        for alternative in self.alternatives:
            mark = state.mark()
            if alternative.match(value, state):
                return True
            state.reset(mark)
        return False

    @property
    def capture_count(self) -> int:
        return self.alternatives[0].capture_count

    def children(self) -> tuple[PatternElement, ...]:
        return self.alternatives


@dataclass(frozen=True)
class Intersection(PatternElement):
    """`[a b]`: every element matches the same value."""

    elements: tuple[PatternElement, ...]

    def match(self, value: Any, state: MatchState) -> bool:
        mark = state.mark()
        for element in self.elements:
            if not element.match(value, state):
                state.reset(mark)
                return False
        return True

    @property
    def capture_count(self) -> int:
        return sum(element.capture_count for element in self.elements)

    def children(self) -> tuple[PatternElement, ...]:
        return self.elements


@dataclass(frozen=True)
class Rest(PatternElement):
    """`...` or `$...`: zero or more values inside a sequence."""

    captured: bool = False

    def match(self, value: Any, state: MatchState) -> bool:
        raise TypeError("Rest only matches inside a sequence")

    @property
    def capture_count(self) -> int:
        return 1 if self.captured else 0


@dataclass(frozen=True)
class Sequence(PatternElement):
    """`(head child ...)`: a node whose type and children match in order."""

    elements: tuple[PatternElement, ...]

    def match(self, value: Any, state: MatchState) -> bool:
        if not isinstance(value, Node):
            return False
        items = (NodeTypeName(value.type), *value.children)
        return self._match_from(0, items, 0, state)

    def _match_from(self, index: int, items: tuple[Any, ...], position: int, state: MatchState) -> bool:
        if index == len(self.elements):
            return position == len(items)

        element = self.elements[index]

        if isinstance(element, Rest):
            required = sum(1 for e in self.elements[index + 1 :] if not isinstance(e, Rest))
            for end in range(position, len(items) - required + 1):
                mark = state.mark()
                if element.captured:
                    state.captures.append(tuple(items[position:end]))
                if self._match_from(index + 1, items, end, state):
                    return True
                state.reset(mark)
            return False

        if position >= len(items):
            return False

        mark = state.mark()
        if element.match(items[position], state) and self._match_from(index + 1, items, position + 1, state):
            return True
        state.reset(mark)
        return False

    @property
    def capture_count(self) -> int:
        return sum(element.capture_count for element in self.elements)

    def children(self) -> tuple[PatternElement, ...]:
        return self.elements


def literal_equals(expected: Any, actual: Any) -> bool:
    """Ruby-flavoured equality: symbols never equal strings, booleans never equal numbers."""
    if isinstance(expected, Symbol) or isinstance(actual, Symbol):
        return isinstance(expected, Symbol) and isinstance(actual, Symbol) and str(expected) == str(actual)
    if isinstance(expected, bool) or isinstance(actual, bool):
        return expected is actual
    if isinstance(expected, str) or isinstance(actual, str):
        return isinstance(expected, str) and isinstance(actual, str) and expected == actual
    return bool(expected == actual)
