"""
Node Pattern Lexer

Splits node-pattern text into lexemes: brackets, captures (`$`), rest
(`...`), wildcards (`_`, `_name`), literals, node types, builtin
predicates (`nil?`) and function references (`#name`).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

from asta.ast.node import Symbol
from asta.errors import PatternCompileError


class LexemeKind(Enum):
    """Lexeme kinds"""

    LPAREN = auto()
    RPAREN = auto()
    LBRACE = auto()
    RBRACE = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    CAPTURE = auto()  # $
    NEGATION = auto()  # !
    REST = auto()  # ...
    WILDCARD = auto()  # _
    UNIFY = auto()  # _name
    SYMBOL = auto()  # :name
    STRING = auto()  # "text"
    NUMBER = auto()  # 1, -2, 1.5
    NODE_TYPE = auto()  # send
    PREDICATE = auto()  # nil?
    FUNCTION = auto()  # #name


@dataclass(frozen=True)
class Lexeme:
    """A single lexeme and where it starts in the pattern."""

    kind: LexemeKind
    text: str
    position: int
    value: Any = None

    @property
    def end(self) -> int:
        return self.position + len(self.text)


_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "f": "\f",
    "v": "\v",
    "a": "\a",
    "b": "\b",
    "e": "\x1b",
    "s": " ",
    "0": "\0",
}

_ESCAPE = re.compile(r"\\(u\{[0-9A-Fa-f]+\}|u[0-9A-Fa-f]{4}|x[0-9A-Fa-f]{1,2}|.)", re.DOTALL)

_OPERATOR_SYMBOL = (
    r"\$(?:[~*$?!@/\\;,.=:<>\"&`'+]|\d+|-\w)"
    r"|\[\]=?|\*\*|<=>|===?|=~|!~|!=|<<|>>|<=|>=|[-+]@|[-+*/%<>!~^&|`]"
)

_LEXEME = re.compile(
    r"""
    (?P<SPACE>\s+)
    | (?P<COMMENT>\#(?=\s)[^\n]*)
    | (?P<REST>\.\.\.)
    | (?P<LPAREN>\() | (?P<RPAREN>\))
    | (?P<LBRACE>\{) | (?P<RBRACE>\})
    | (?P<LBRACKET>\[) | (?P<RBRACKET>\])
    | (?P<CAPTURE>\$)
    | (?P<NEGATION>!)
    | (?P<QSYMBOL>:"(?:\\.|[^"\\])*")
    | (?P<SYMBOL>:(?:(?:@@?|\$)?[^\W\d]\w*[?!=]?|"""
    + _OPERATOR_SYMBOL
    + r"""))
    | (?P<STRING>"(?:\\.|[^"\\])*")
    | (?P<FLOAT>-?\d+(?:\.\d+(?:[eE][-+]?\d+)?|[eE][-+]?\d+))
    | (?P<INTEGER>-?\d+)
    | (?P<FUNCTION>\#[^\W\d]\w*[?!]?)
    | (?P<UNIFY>_\w+)
    | (?P<WILDCARD>_)
    | (?P<PREDICATE>[a-z][\w-]*\?)
    | (?P<NODE_TYPE>[a-z][\w-]*)
    """,
    re.VERBOSE | re.DOTALL,
)


def unescape(body: str) -> str:
    """Decode Ruby double-quoted escapes in a literal body."""

    def replace(match: re.Match[str]) -> str:
        escape = match.group(1)
        if escape.startswith("u{"):
            return chr(int(escape[2:-1], 16))
        if escape.startswith("u") and len(escape) == 5:
            return chr(int(escape[1:], 16))
        if escape.startswith("x") and len(escape) > 1:
            return chr(int(escape[1:], 16))
        return _SIMPLE_ESCAPES.get(escape, escape)

    return _ESCAPE.sub(replace, body)


def tokenize(pattern: str) -> list[Lexeme]:
    """
    Tokenize node-pattern text.

    Args:
        pattern: Pattern text

    Returns:
        Lexemes in source order, whitespace and comments dropped

    Raises:
        PatternCompileError: On characters that start no lexeme
    """
    lexemes: list[Lexeme] = []
    position = 0

    while position < len(pattern):
        match = _LEXEME.match(pattern, position)
        if not match:
            raise PatternCompileError(
                f"Unexpected character {pattern[position]!r} at {position}",
                pattern=pattern,
                position=position,
            )

        group = match.lastgroup
        text = match.group(0)
        position = match.end()

        if group in ("SPACE", "COMMENT"):
            continue

        if group == "QSYMBOL":
            lexemes.append(Lexeme(LexemeKind.SYMBOL, text, match.start(), Symbol(unescape(text[2:-1]))))
        elif group == "SYMBOL":
            lexemes.append(Lexeme(LexemeKind.SYMBOL, text, match.start(), Symbol(text[1:])))
        elif group == "STRING":
            lexemes.append(Lexeme(LexemeKind.STRING, text, match.start(), unescape(text[1:-1])))
        elif group == "FLOAT":
            lexemes.append(Lexeme(LexemeKind.NUMBER, text, match.start(), float(text)))
        elif group == "INTEGER":
            lexemes.append(Lexeme(LexemeKind.NUMBER, text, match.start(), int(text)))
        elif group == "FUNCTION":
            if any(char.isdigit() for char in text):
                raise PatternCompileError(
                    f"Function name {text!r} may not contain digits",
                    pattern=pattern,
                    position=match.start(),
                )
            lexemes.append(Lexeme(LexemeKind.FUNCTION, text, match.start(), text[1:]))
        elif group in ("PREDICATE", "NODE_TYPE"):
            # `block-pass` and `block_pass` name the same node type
            lexemes.append(Lexeme(LexemeKind[group], text, match.start(), text.replace("-", "_")))
        elif group == "UNIFY":
            lexemes.append(Lexeme(LexemeKind.UNIFY, text, match.start(), text[1:]))
        else:
            lexemes.append(Lexeme(LexemeKind[group], text, match.start()))

    return lexemes
