"""
Matcher Compiler

Boundary between rendered trees and the node-pattern engine: render,
normalize the nil spelling, compile with the builder's predicates bound,
and run matches against trees or Ruby source.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from asta.ast.node import Node
from asta.ast.render import render
from asta.config import DEFAULT_PATTERN_CONFIG
from asta.logging import get_logger
from asta.parsing import get_parser
from asta.pattern.matcher import NodePattern

if TYPE_CHECKING:
    from asta.parsing.ruby_parser import RubyParser

logger = get_logger("compiler")

_QUOTED = r'"(?:\\.|[^"\\])*"'

# Strings and symbols pass through untouched; `(nil` is the node type in head position
_NIL_KEYWORD = re.compile(
    rf"{_QUOTED}"
    rf"|:(?:{_QUOTED}|[@$]*\w+[?!=]?)"
    rf"|(?<![\w@#(]){re.escape(DEFAULT_PATTERN_CONFIG.NIL_KEYWORD)}(?![\w?!])"
)


def normalize_nil(text: str) -> str:
    """
    Rewrite bare `nil` children to `nil?`.

    Rendered trees spell an absent child `nil`, which the engine would read
    as a `(nil)` node type; `nil?` is the engine's absent-value predicate.
    """

    def replace(match: re.Match[str]) -> str:
        if match.group(0) == DEFAULT_PATTERN_CONFIG.NIL_KEYWORD:
            return DEFAULT_PATTERN_CONFIG.NIL_PREDICATE
        return match.group(0)

    return _NIL_KEYWORD.sub(replace, text)


def compile(tree: Any, predicates: Mapping[str, Callable[[Any], bool]] | None = None) -> NodePattern:
    """
    Compile a tree into a matcher.

    Args:
        tree: Root node (or token) to render as pattern text
        predicates: Name to function table bound onto the matcher

    Returns:
        Compiled NodePattern

    Raises:
        PatternCompileError: Rendered text is not a valid pattern
    """
    text = normalize_nil(render(tree))
    pattern = NodePattern(text, functions=predicates)
    logger.debug(f"Compiled pattern {text!r} with {len(pattern.functions)} predicate(s)")
    return pattern


def match(target: Any, candidate: Any, *, parser: RubyParser | None = None) -> Any:
    """
    Match a candidate against a compiled pattern or a builder.

    Args:
        target: NodePattern, or anything with `compile()` returning one
        candidate: Ruby source (parsed first) or a Node
        parser: Parser for string candidates (defaults to the shared parser)

    Returns:
        None on no match, True without captures, the single capture, or a
        tuple of captures in capture order
    """
    pattern = target if isinstance(target, NodePattern) else target.compile()

    if isinstance(candidate, str):
        candidate = (parser or get_parser()).parse(candidate)
    elif not isinstance(candidate, Node):
        raise TypeError(f"Cannot match against {type(candidate).__name__}; expected source text or a Node")

    return pattern.match(candidate)
