"""
Node Pattern Parser

Recursive-descent compiler from pattern lexemes to the immutable pattern IR.
"""

from __future__ import annotations

from functools import lru_cache

from asta.config import DEFAULT_PATTERN_CONFIG
from asta.errors import PatternCompileError
from asta.pattern.lexer import Lexeme, LexemeKind, tokenize
from asta.pattern.pattern_ir import (
    Capture,
    FunctionCall,
    Intersection,
    Literal,
    Negation,
    NodeType,
    PatternElement,
    Predicate,
    Rest,
    Sequence,
    Union,
    Unify,
    Wildcard,
    resolve_predicate,
)

_LITERAL_KINDS = (LexemeKind.SYMBOL, LexemeKind.STRING, LexemeKind.NUMBER)

_CLOSERS = {
    LexemeKind.LPAREN: LexemeKind.RPAREN,
    LexemeKind.LBRACE: LexemeKind.RBRACE,
    LexemeKind.LBRACKET: LexemeKind.RBRACKET,
}

_GROUP_NAMES = {
    LexemeKind.LPAREN: "sequence '()'",
    LexemeKind.LBRACE: "union '{}'",
    LexemeKind.LBRACKET: "intersection '[]'",
}


class PatternParser:
    """
    Pattern parser

    Usage:
        >>> PatternParser("(lvasgn :a $_)").parse()
        Sequence(elements=(NodeType(name='lvasgn'), Literal(value=Symbol('a')), Capture(element=Wildcard())))
    """

    def __init__(self, pattern: str) -> None:
        self.pattern = pattern
        self._lexemes = tokenize(pattern)
        self._index = 0

    def parse(self) -> PatternElement:
        if not self._lexemes:
            raise self._error("Empty pattern", 0)

        root = self._element(in_sequence=False)

        if self._peek() is not None:
            lexeme = self._lexemes[self._index]
            raise self._error(f"Unexpected {lexeme.text!r} after pattern end", lexeme.position)

        return root

    # =========================================================================
    # Lexeme access
    # =========================================================================

    def _peek(self) -> Lexeme | None:
        if self._index < len(self._lexemes):
            return self._lexemes[self._index]
        return None

    def _next(self) -> Lexeme:
        lexeme = self._peek()
        if lexeme is None:
            raise self._error("Unexpected end of pattern", len(self.pattern))
        self._index += 1
        return lexeme

    def _error(self, message: str, position: int) -> PatternCompileError:
        return PatternCompileError(message, pattern=self.pattern, position=position)

    # =========================================================================
    # Grammar
    # =========================================================================

    def _element(self, in_sequence: bool) -> PatternElement:
        lexeme = self._next()
        kind = lexeme.kind

        if kind == LexemeKind.CAPTURE:
            following = self._peek()
            if following is not None and following.kind == LexemeKind.REST:
                self._next()
                if not in_sequence:
                    raise self._error("'$...' is only valid inside a sequence", lexeme.position)
                return Rest(captured=True)
            return Capture(self._element(in_sequence=False))

        if kind == LexemeKind.NEGATION:
            element = self._element(in_sequence=False)
            if element.capture_count:
                raise self._error("Captures are not allowed inside a negation", lexeme.position)
            return Negation(element)

        if kind == LexemeKind.REST:
            if not in_sequence:
                raise self._error("'...' is only valid inside a sequence", lexeme.position)
            return Rest()

        if kind == LexemeKind.LPAREN:
            elements = self._group(lexeme, in_sequence=True)
            return Sequence(elements)

        if kind == LexemeKind.LBRACE:
            alternatives = self._group(lexeme, in_sequence=False)
            counts = {alternative.capture_count for alternative in alternatives}
            if len(counts) > 1:
                raise self._error(
                    "Union branches must capture the same number of values",
                    lexeme.position,
                )
            return Union(alternatives)

        if kind == LexemeKind.LBRACKET:
            return Intersection(self._group(lexeme, in_sequence=False))

        if kind == LexemeKind.WILDCARD:
            return Wildcard()

        if kind == LexemeKind.UNIFY:
            return Unify(lexeme.value)

        if kind in _LITERAL_KINDS:
            return Literal(lexeme.value)

        if kind == LexemeKind.NODE_TYPE:
            return NodeType(lexeme.value)

        if kind == LexemeKind.PREDICATE:
            if resolve_predicate(lexeme.value) is None:
                raise self._error(f"Unknown predicate {lexeme.text!r}", lexeme.position)
            return Predicate(lexeme.value)

        if kind == LexemeKind.FUNCTION:
            return FunctionCall(lexeme.value, self._function_args(lexeme))

        raise self._error(f"Unexpected {lexeme.text!r}", lexeme.position)

    def _group(self, opener: Lexeme, in_sequence: bool) -> tuple[PatternElement, ...]:
        closer = _CLOSERS[opener.kind]
        elements: list[PatternElement] = []

        while True:
            lexeme = self._peek()
            if lexeme is None:
                raise self._error(f"Unclosed {opener.text!r}", opener.position)
            if lexeme.kind == closer:
                self._next()
                break
            elements.append(self._element(in_sequence=in_sequence))

        if not elements:
            raise self._error(f"Empty {_GROUP_NAMES[opener.kind]}", opener.position)

        return tuple(elements)

    def _function_args(self, function: Lexeme) -> tuple[object, ...]:
        lexeme = self._peek()
        # Arguments only when `(` directly follows the name: `#name(1 :a)`
        if lexeme is None or lexeme.kind != LexemeKind.LPAREN or lexeme.position != function.end:
            return ()

        self._next()
        args: list[object] = []
        while True:
            lexeme = self._next()
            if lexeme.kind == LexemeKind.RPAREN:
                return tuple(args)
            if lexeme.kind not in _LITERAL_KINDS:
                raise self._error(
                    f"Function arguments must be literals, got {lexeme.text!r}",
                    lexeme.position,
                )
            args.append(lexeme.value)


@lru_cache(maxsize=DEFAULT_PATTERN_CONFIG.PATTERN_CACHE_SIZE)
def parse_pattern(pattern: str) -> PatternElement:
    """Parse pattern text to IR; results are cached by text."""
    return PatternParser(pattern).parse()
