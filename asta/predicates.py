"""
Dynamic predicate registry.

Patterns reference caller-supplied predicates by name (`#a`). The registry
hands out names from a fixed letter-only sequence and keeps the name to
function table that gets injected into the compiled pattern.
"""

from __future__ import annotations

import re
import string
from collections.abc import Callable, Iterator, Mapping
from itertools import product
from types import MappingProxyType
from typing import Any

from asta.config import DEFAULT_BUILDER_CONFIG
from asta.errors import PredicateLimitExceeded
from asta.logging import get_logger

logger = get_logger("predicates")


def letter_names(last: str = DEFAULT_BUILDER_CONFIG.LAST_PREDICATE_NAME) -> tuple[str, ...]:
    """Names `a`, `b`, ..., `z`, `aa`, `ab`, ... up to and including `last`."""
    names: list[str] = []
    for length in range(1, len(last) + 1):
        for letters in product(string.ascii_lowercase, repeat=length):
            name = "".join(letters)
            names.append(name)
            if name == last:
                return tuple(names)
    raise ValueError(f"Invalid last predicate name: {last!r}")


PREDICATE_NAMES = letter_names()


def case_predicate(value: Any) -> Callable[[Any], bool]:
    """
    Predicate testing candidates the way Ruby's `case`/`===` would.

    Args:
        value: A function, compiled regex, class, range/set, or plain value

    Returns:
        One-argument predicate
    """
    if isinstance(value, type):
        return lambda candidate: isinstance(candidate, value)

    if callable(value):
        return value

    if isinstance(value, re.Pattern):
        return lambda candidate: isinstance(candidate, str) and value.search(candidate) is not None

    if isinstance(value, (range, set, frozenset)):

        def contains(candidate: Any) -> bool:
            try:
                return candidate in value
            except TypeError:
                return False

        return contains

    return lambda candidate: candidate == value


class PredicateRegistry(Mapping[str, Callable[[Any], bool]]):
    """
    Insertion-ordered name to predicate table.

    Names are allocated in sequence and never reused; the table only grows.
    """

    def __init__(self, names: tuple[str, ...] = PREDICATE_NAMES) -> None:
        self._names = names
        self._functions: dict[str, Callable[[Any], bool]] = {}

    def register(self, value: Any) -> str:
        """Store `value` as a predicate under the next free name and return the name."""
        if len(self._functions) >= len(self._names):
            raise PredicateLimitExceeded(len(self._names))

        name = self._names[len(self._functions)]
        self._functions[name] = case_predicate(value)
        logger.debug(f"Registered predicate #{name} for {type(value).__name__}")
        return name

    def as_mapping(self) -> Mapping[str, Callable[[Any], bool]]:
        """Read-only snapshot for binding onto a compiled pattern."""
        return MappingProxyType(dict(self._functions))

    def __getitem__(self, name: str) -> Callable[[Any], bool]:
        return self._functions[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._functions)

    def __len__(self) -> int:
        return len(self._functions)
