"""
Pattern Builder

Construction surface for node-pattern trees. A builder holds one root tree,
parsed from Ruby source or produced by a construction function, plus the
predicates registered while building it.

Example:
    >>> builder = Builder(construct=lambda b: b.assign("a", b.capture_children()))
    >>> builder.render()
    '(lvasgn :a $(...))'
    >>> builder.match("a = 1")
    Node(type='int', children=(1,))
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from asta import compiler
from asta.ast.node import Node, Symbol
from asta.ast.render import render
from asta.ast.token import Token
from asta.config import DEFAULT_BUILDER_CONFIG, BuilderConfig
from asta.errors import InvalidIdentifier
from asta.parsing import get_parser
from asta.predicates import PredicateRegistry

if TYPE_CHECKING:
    from asta.parsing.ruby_parser import RubyParser
    from asta.pattern.matcher import NodePattern

_SPECIAL_GLOBAL = r"[~*$?!@/\\;,.=:<>\"&`'+]|\d+|-\w"

# Checked in order: `@@` before `@`
_ASSIGNMENT_KINDS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("cvasgn", re.compile(r"@@")),
    ("ivasgn", re.compile(r"@")),
    ("gvasgn", re.compile(r"\$")),
    ("casgn", re.compile(r"[A-Z]")),
    ("lvasgn", re.compile(r"")),
)

_VALID_NAMES = {
    "cvasgn": re.compile(r"@@[^\W\d]\w*\Z"),
    "ivasgn": re.compile(r"@[^\W\d]\w*\Z"),
    "gvasgn": re.compile(rf"\$(?:[^\W\d]\w*|{_SPECIAL_GLOBAL})\Z"),
    "casgn": re.compile(r"[A-Z]\w*\Z"),
    "lvasgn": re.compile(r"[^\W\dA-Z]\w*\Z"),
}


class Builder:
    """
    Node-pattern tree builder.

    Either `source` (Ruby text, parsed into the root tree) or `construct`
    (called with the builder, returns the root tree) must be given.

    Not safe for concurrent predicate registration: the name counter is
    per-instance and unsynchronized.
    """

    def __init__(
        self,
        source: str | None = None,
        construct: Callable[[Builder], Any] | None = None,
        *,
        parser: RubyParser | None = None,
        config: BuilderConfig | None = None,
    ) -> None:
        self.config = config or DEFAULT_BUILDER_CONFIG
        self._parser = parser
        self._predicates = PredicateRegistry()

        if source is not None:
            self._tree: Any = self.parse(source)
        elif construct is not None:
            self._tree = construct(self)
        else:
            raise ValueError("Builder needs either source text or a construct function")

    # =========================================================================
    # Construction
    # =========================================================================

    def node(self, type: str, *children: Any) -> Node:
        """Node with `children` as given; no arity or type validation."""
        return Node(type, children)

    def token(self, text: str) -> Token:
        """Raw pattern fragment such as `...`, `_` or `(...)`."""
        return Token(text)

    def sym(self, name: str) -> Symbol:
        return Symbol(name)

    def parse(self, source: str) -> Node:
        """
        Parse Ruby source into a tree.

        Raises:
            MalformedSource: Empty input or input the parser rejects
        """
        parser = self._parser or get_parser()
        return parser.parse(source)

    def expand(self, *items: Any) -> Node:
        """
        Parse string items and append everything after the first as children.

        `expand("A::B::C", capture_children())` renders
        `(const (const (const nil :A) :B) :C $(...))`.
        """
        if not items:
            raise ValueError("expand() needs at least one item")

        expanded = [self.parse(item) if isinstance(item, str) else item for item in items]
        base, *rest = expanded

        if not isinstance(base, Node):
            raise TypeError(f"expand() base must be a Node, got {type(base).__name__}")

        return base.concat(*rest)

    def capture(self, item: Any) -> Token:
        return Token(f"{self.config.CAPTURE_PREFIX}{render(item)}")

    def capture_children(self) -> Token:
        return self.capture(self.token("(...)"))

    def top_level_call(self, name: Any, *args: Any) -> Node:
        """`(send nil :name args...)`: a call without an explicit receiver."""
        return Node("send", (None, _method_name(name), *args))

    def method_call(self, receiver: Any, *args: Any) -> Node:
        """`(send receiver args...)`; a plain string method name becomes a symbol."""
        if args:
            args = (_method_name(args[0]), *args[1:])
        return Node("send", (receiver, *args))

    def assign(self, designator: Any, value: Any) -> Node:
        """
        Assignment node classified by the designator's lexical form.

        `@@a` -> cvasgn, `@a` -> ivasgn, `$a` -> gvasgn, `A` -> casgn,
        anything else -> lvasgn. A node designator is a constant path:
        `(const scope :C)` becomes `(casgn scope :C value)`.
        This is the shape parsed `A::B::C = 1` has, rather than nesting the
        whole constant as `(casgn nil (const ...) value)`; other nodes still
        nest that way.

        Raises:
            InvalidIdentifier: Empty or malformed names
        """
        if isinstance(designator, Node):
            if designator.type == "const" and len(designator.children) == 2:
                scope, name = designator.children
                return Node("casgn", (scope, name, value))
            return Node("casgn", (None, designator, value))

        if not isinstance(designator, str):
            raise InvalidIdentifier(repr(designator))

        name = str(designator)
        kind = next(kind for kind, prefix in _ASSIGNMENT_KINDS if prefix.match(name))
        if not name or not _VALID_NAMES[kind].match(name):
            raise InvalidIdentifier(name)

        if kind == "casgn":
            return Node("casgn", (None, Symbol(name), value))
        return Node(kind, (Symbol(name), value))

    # =========================================================================
    # Dynamic predicates
    # =========================================================================

    def matching(self, value: Any) -> Token:
        """
        Register `value` as a named predicate and return its `#name` reference.

        Functions are called with the candidate; other values test it the way
        Ruby's `===` would (regex search, class membership, equality, ...).
        """
        name = self._predicates.register(value)
        return Token(f"{self.config.PREDICATE_PREFIX}{name}")

    def capture_matching(self, value: Any) -> Token:
        return self.capture(self.matching(value))

    @property
    def predicates(self) -> Mapping[str, Callable[[Any], bool]]:
        return self._predicates.as_mapping()

    # =========================================================================
    # Output
    # =========================================================================

    @property
    def tree(self) -> Any:
        return self._tree

    def render(self) -> str:
        return render(self._tree)

    def compile(self) -> NodePattern:
        return compiler.compile(self._tree, self._predicates.as_mapping())

    def match(self, candidate: Any) -> Any:
        """
        Match `candidate` (Ruby source or a Node) against this builder's tree.

        Returns:
            None on no match, True without captures, the single capture, or
            a tuple of captures
        """
        return compiler.match(self, candidate, parser=self._parser)

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.render()!r})"


def _method_name(name: Any) -> Any:
    if type(name) is str:
        return Symbol(name)
    return name
