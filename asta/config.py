"""asta Configuration.

Central defaults for the parser adapter, the pattern engine and the builder.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ParserConfig:
    """Ruby parser adapter configuration.

    RUBY_VERSION is informational: tree-sitter-ruby parses a single dialect,
    so the version is only reported alongside parse failures.
    """

    RUBY_VERSION: str = "3.3"
    MAX_DEPTH: int = 200  # Nesting guard; stays below the interpreter recursion limit


@dataclass(frozen=True)
class PatternConfig:
    """Pattern engine configuration."""

    # Rendered trees spell an absent child `nil`; the engine reads `nil` as a node type
    NIL_KEYWORD: str = "nil"
    NIL_PREDICATE: str = "nil?"
    PATTERN_CACHE_SIZE: int = 256


@dataclass(frozen=True)
class BuilderConfig:
    """Builder token configuration."""

    CAPTURE_PREFIX: str = "$"
    PREDICATE_PREFIX: str = "#"
    # Predicate names run a..z, aa..zz; the pattern lexer rejects digits after `#`
    LAST_PREDICATE_NAME: str = "zz"


# Default configurations
DEFAULT_PARSER_CONFIG = ParserConfig()
DEFAULT_PATTERN_CONFIG = PatternConfig()
DEFAULT_BUILDER_CONFIG = BuilderConfig()
