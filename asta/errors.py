"""
Standardized Error Handling for asta

Provides hierarchical exception classes with error codes and context.
"""

from typing import Any


class AstaError(Exception):
    """Base exception for all asta errors.

    Includes error code for programmatic handling and context for debugging.

    Example:
        raise AstaError(
            code="MALFORMED_SOURCE",
            message="Source could not be parsed",
            source="a = ",
        )
    """

    def __init__(self, code: str, message: str, **context: Any) -> None:
        self.code = code
        self.message = message
        self.context = context
        super().__init__(f"[{code}] {message}")

    def __repr__(self) -> str:
        ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r}, {ctx_str})"


# ==============================================================================
# Source Errors
# ==============================================================================


class MalformedSource(AstaError):
    """The Ruby parser produced no tree for the given source."""

    def __init__(
        self,
        source: str,
        message: str | None = None,
        code: str = "MALFORMED_SOURCE",
        **context: Any,
    ) -> None:
        self.source = source
        message = message or f"The following source is invalid:\n  {source!r}"
        super().__init__(code=code, message=message, source=source, **context)


class UnsupportedSyntax(MalformedSource):
    """Valid Ruby the parser adapter does not translate into nodes."""

    def __init__(self, source: str, node_type: str, **context: Any) -> None:
        self.node_type = node_type
        super().__init__(
            source,
            f"Unsupported Ruby syntax {node_type!r}",
            code="UNSUPPORTED_SYNTAX",
            node_type=node_type,
            **context,
        )


# ==============================================================================
# Pattern Errors
# ==============================================================================


class PatternCompileError(AstaError):
    """Pattern text is not valid for the node-pattern engine."""

    def __init__(self, message: str, pattern: str = "", position: int | None = None, **context: Any) -> None:
        self.pattern = pattern
        self.position = position
        super().__init__(
            code="PATTERN_COMPILE_ERROR",
            message=message,
            pattern=pattern,
            position=position,
            **context,
        )


# ==============================================================================
# Builder Errors
# ==============================================================================


class InvalidIdentifier(AstaError):
    """Assignment designator does not look like any Ruby variable or constant."""

    def __init__(self, identifier: str, **context: Any) -> None:
        self.identifier = identifier
        super().__init__(
            code="INVALID_IDENTIFIER",
            message=f"Cannot classify assignment target {identifier!r}",
            identifier=identifier,
            **context,
        )


class PredicateLimitExceeded(AstaError):
    """A builder allocated every available predicate name."""

    def __init__(self, limit: int, **context: Any) -> None:
        self.limit = limit
        super().__init__(
            code="PREDICATE_LIMIT",
            message=f"No predicate names left after {limit} registrations",
            limit=limit,
            **context,
        )


# ==============================================================================
# Exports
# ==============================================================================

__all__ = [
    # Base
    "AstaError",
    # Source
    "MalformedSource",
    "UnsupportedSyntax",
    # Pattern
    "PatternCompileError",
    # Builder
    "InvalidIdentifier",
    "PredicateLimitExceeded",
]
