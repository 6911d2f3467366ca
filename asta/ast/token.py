"""
Literal pattern token.

A raw fragment of node-pattern text (`...`, `_`, `$(...)`, `#a`) that
renders verbatim inside a tree's textual form instead of being quoted as a
string literal.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Token:
    """Raw pattern fragment, rendered without quotes or escaping."""

    text: str

    def __post_init__(self) -> None:
        if not isinstance(self.text, str):
            object.__setattr__(self, "text", str(self.text))

    def render(self) -> str:
        return self.text

    def __str__(self) -> str:
        return self.text
