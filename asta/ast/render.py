"""
Tree serialization.

Renders nodes to node-pattern text. Each child kind renders by its own rule:
nodes recurse, tokens pass through verbatim, and primitives print as Ruby
literals (`nil`, `:sym`, `"str"`, `1`, `1.5`).
"""

from __future__ import annotations

import math
import re
from typing import Any

from asta.ast.node import Node, Symbol
from asta.ast.token import Token

_BARE_SYMBOL = re.compile(
    r"""
    (?:@@?|\$)?[^\W\d]\w*          # identifiers, ivars, cvars, gvars
    | [^\W\d]\w*[?!=]              # predicate, bang and setter names
    | \$(?:[~*$?!@/\\;,.=:<>"&`'+]|\d+|-\w)  # special globals
    | \[\]=? | \*\*? | <=> | ===? | =~ | !~ | !=
    | << | >> | <= | >= | [-+]@? | [/%<>!~^&|`]
    """,
    re.VERBOSE,
)

_STRING_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
    "\f": "\\f",
    "\v": "\\v",
    "\a": "\\a",
    "\b": "\\b",
    "\x1b": "\\e",
}


def inspect_string(value: str) -> str:
    """Double-quoted Ruby string literal for `value`."""
    out: list[str] = []
    for index, char in enumerate(value):
        if char in _STRING_ESCAPES:
            out.append(_STRING_ESCAPES[char])
        elif char == "#" and value[index + 1 : index + 2] in ("{", "$", "@"):
            out.append("\\#")
        elif not char.isprintable():
            out.append(f"\\u{ord(char):04X}" if ord(char) <= 0xFFFF else f"\\u{{{ord(char):X}}}")
        else:
            out.append(char)
    return '"' + "".join(out) + '"'


def inspect_symbol(value: Symbol) -> str:
    if _BARE_SYMBOL.fullmatch(value):
        return f":{value}"
    return ":" + inspect_string(str(value))


def inspect_literal(value: Any) -> str:
    """Ruby literal text for a primitive child value.

    Raises:
        TypeError: If the value has no Ruby literal form
    """
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Symbol):
        return inspect_symbol(value)
    if isinstance(value, str):
        return inspect_string(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        return repr(value)
    raise TypeError(f"Cannot render {type(value).__name__} as a pattern literal: {value!r}")


def render(value: Any) -> str:
    """Single-line s-expression text for a node, token or primitive."""
    if isinstance(value, Node):
        parts = [value.type]
        parts.extend(render(child) for child in value.children)
        return f"({' '.join(parts)})"
    if isinstance(value, Token):
        return value.render()
    return inspect_literal(value)


def render_pretty(value: Any, indent: int = 0) -> str:
    """Indented form used by Ruby's parser gem: nested nodes start new lines."""
    if not isinstance(value, Node):
        return render(value)

    text = "  " * indent + "(" + value.type
    for child in value.children:
        if isinstance(child, Node):
            text += "\n" + render_pretty(child, indent + 1)
        else:
            text += " " + render(child)
    return text + ")"
