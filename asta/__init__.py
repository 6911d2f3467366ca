"""asta - AST builder and node-pattern matcher for Ruby syntax trees.

Build s-expression patterns with a small construction API, compile them and
match them against parsed Ruby source.

Quick Start:
    >>> import re
    >>> import asta
    >>>
    >>> # Build a pattern with the builder passed explicitly
    >>> builder = asta.build(lambda b: b.assign("value", b.node("str", b.capture_matching(re.compile("abc")))))
    >>> builder.render()
    '(lvasgn :value (str $#a))'
    >>>
    >>> # Match against source text or a parsed tree
    >>> builder.match('value = "abc123"')
    'abc123'

Parsed Source:
    >>> asta.build("A::B::C = 1").render()
    '(casgn (const (const nil :A) :B) :C (int 1))'
"""

from collections.abc import Callable
from typing import Any

__version__ = "0.1.0"  # Keep in sync with pyproject.toml

# =============================================================================
# Core API
# =============================================================================

from asta.ast import Node, SourceRange, Symbol, Token, render, render_pretty
from asta.builder import Builder
from asta.compiler import compile, match, normalize_nil

# =============================================================================
# Error Handling & Logging
# =============================================================================
from asta.errors import (
    AstaError,
    InvalidIdentifier,
    MalformedSource,
    PatternCompileError,
    PredicateLimitExceeded,
    UnsupportedSyntax,
)
from asta.logging import get_logger, setup_logger

# =============================================================================
# Collaborators
# =============================================================================
from asta.parsing import RubyParser, get_parser, parse_source
from asta.pattern import NodePattern, PatternMatch


def build(
    source: str | Callable[[Builder], Any] | None = None,
    construct: Callable[[Builder], Any] | None = None,
) -> Builder:
    """
    Create a builder from Ruby source or a construction function.

    Args:
        source: Ruby source to parse, or the construction function itself
        construct: Function called with the builder, returning the root tree

    Returns:
        Builder
    """
    if callable(source):
        return Builder(construct=source)
    return Builder(source, construct)


__all__ = [
    # Version
    "__version__",
    # Core API
    "build",
    "Builder",
    "Node",
    "SourceRange",
    "Symbol",
    "Token",
    "render",
    "render_pretty",
    "compile",
    "match",
    "normalize_nil",
    # Collaborators
    "NodePattern",
    "PatternMatch",
    "RubyParser",
    "get_parser",
    "parse_source",
    # Errors
    "AstaError",
    "MalformedSource",
    "UnsupportedSyntax",
    "PatternCompileError",
    "InvalidIdentifier",
    "PredicateLimitExceeded",
    # Logging
    "get_logger",
    "setup_logger",
]
