"""
Node Pattern Module

Lexer, IR and matcher for the node-pattern language (`(send nil? :puts $_)`).
"""

from asta.pattern.lexer import Lexeme, LexemeKind, tokenize
from asta.pattern.matcher import NodePattern, PatternMatch, collapse_captures
from asta.pattern.parser import PatternParser, parse_pattern
from asta.pattern.pattern_ir import MatchState, PatternElement

__all__ = [
    "Lexeme",
    "LexemeKind",
    "MatchState",
    "NodePattern",
    "PatternElement",
    "PatternMatch",
    "PatternParser",
    "collapse_captures",
    "parse_pattern",
    "tokenize",
]
