"""
Immutable s-expression nodes.

Nodes follow the shape Ruby's parser gem emits: a type name plus an ordered
tuple of children, where each child is another node, a literal `Token`, or
a primitive (`Symbol`, `str`, `int`, `float`, `bool`, `None`).
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any


class Symbol(str):
    """Ruby symbol literal.

    Symbols never compare equal to plain strings: `:a` and `"a"` are
    different values in a Ruby tree.
    """

    __slots__ = ()

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Symbol):
            return str.__eq__(self, other)
        if isinstance(other, str):
            return False
        return NotImplemented

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self) -> int:
        return hash((Symbol, str(self)))

    def __repr__(self) -> str:
        return f"Symbol({str.__repr__(self)})"


@dataclass(frozen=True)
class SourceRange:
    """Where a parsed node came from in its source text."""

    start_byte: int
    end_byte: int
    start_line: int  # 1-based
    start_column: int
    end_line: int
    end_column: int
    source: str = ""


@dataclass(frozen=True)
class Node:
    """
    Immutable tree node.

    Equality and hashing consider `type` and `children` only, so a parsed
    node equals a hand-built node with the same structure.
    """

    type: str
    children: tuple[Any, ...] = ()
    location: SourceRange | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if type(self.type) is not str:
            object.__setattr__(self, "type", str(self.type))
        if not isinstance(self.children, tuple):
            object.__setattr__(self, "children", tuple(self.children))

    @property
    def source(self) -> str | None:
        """Source snippet of a parsed node, None for hand-built nodes."""
        return self.location.source if self.location else None

    def concat(self, *items: Any) -> Node:
        """New node with `items` appended to the children."""
        return Node(self.type, self.children + items)

    def updated(
        self,
        type: str | None = None,
        children: tuple[Any, ...] | None = None,
    ) -> Node:
        return Node(
            type if type is not None else self.type,
            children if children is not None else self.children,
            location=self.location,
        )

    def each_node(self) -> Iterator[Node]:
        """Yield this node and every descendant node, depth-first pre-order."""
        stack: list[Node] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(child for child in reversed(node.children) if isinstance(child, Node))

    def to_sexp(self) -> str:
        """Indented multi-line form, one nested node per line."""
        from asta.ast.render import render_pretty

        return render_pretty(self)

    def __str__(self) -> str:
        from asta.ast.render import render

        return render(self)
