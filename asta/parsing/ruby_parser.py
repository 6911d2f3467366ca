"""
Tree-sitter Ruby Parser

Parses Ruby with tree-sitter and translates the concrete syntax tree into
the node shapes Ruby's parser gem emits (`(lvasgn :a (int 1))`), keeping
source locations on every translated node.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from contextlib import contextmanager

try:
    import tree_sitter_ruby
    from tree_sitter import Language, Parser
    from tree_sitter import Node as TSNode
except ImportError as e:
    raise ImportError("tree-sitter-ruby is required. Install with: pip install tree-sitter tree-sitter-ruby") from e

from asta.ast.node import Node, SourceRange, Symbol
from asta.config import DEFAULT_PARSER_CONFIG, ParserConfig
from asta.errors import MalformedSource, UnsupportedSyntax
from asta.logging import get_logger
from asta.pattern.lexer import unescape

logger = get_logger("parsing")

# Never part of the translated tree
_IGNORED = frozenset({"comment", "empty_statement"})

# Wrappers whose named children are plain statements
_CONTAINERS = frozenset({"then", "else", "do", "block_body", "body_statement"})

_TRAILING_FLAGS = re.compile(r"[a-z]*\Z")


def _key(ts: TSNode) -> tuple[int, int, str]:
    return ts.start_byte, ts.end_byte, ts.type


def _parse_integer(text: str) -> int:
    digits = text.replace("_", "").lower()
    sign = -1 if digits.startswith("-") else 1
    digits = digits.lstrip("+-")

    if digits.startswith("0d"):
        value = int(digits[2:], 10)
    elif digits.startswith(("0x", "0b", "0o")):
        value = int(digits, 0)
    elif len(digits) > 1 and digits.startswith("0"):
        value = int(digits[1:], 8)
    else:
        value = int(digits)

    return sign * value


class RubyParser:
    """
    Ruby parser backed by tree-sitter-ruby.

    Usage:
        >>> parser = RubyParser()
        >>> str(parser.parse("A::B::C = 1"))
        '(casgn (const (const nil :A) :B) :C (int 1))'
    """

    LANGUAGE: str = "ruby"

    def __init__(self, config: ParserConfig | None = None) -> None:
        self.config = config or DEFAULT_PARSER_CONFIG
        self._parser = Parser(Language(tree_sitter_ruby.language()))

    @property
    def ruby_version(self) -> str:
        return self.config.RUBY_VERSION

    def parse(self, source: str) -> Node:
        """
        Parse Ruby source into a node tree.

        Args:
            source: Ruby source text

        Returns:
            Root node; several top-level statements are wrapped in `begin`

        Raises:
            MalformedSource: Empty input, input with syntax errors, or text
                that cannot be encoded as UTF-8
            UnsupportedSyntax: Valid Ruby outside the translated subset
        """
        try:
            source_bytes = source.encode("utf-8")
        except UnicodeEncodeError as e:
            raise MalformedSource(source, ruby_version=self.ruby_version) from e

        tree = self._parser.parse(source_bytes)
        root = tree.root_node

        if root is None or root.has_error:
            raise MalformedSource(source, ruby_version=self.ruby_version)

        node = _Translator(source, source_bytes, self.config).translate(root)

        if node is None:
            raise MalformedSource(source, ruby_version=self.ruby_version)

        logger.debug(f"Parsed {len(source_bytes)} bytes into ({node.type} ...)")
        return node


class _Translator:
    """Single-use tree-sitter to parser-gem translation with local variable scopes."""

    def __init__(self, source: str, source_bytes: bytes, config: ParserConfig) -> None:
        self._source = source
        self._bytes = source_bytes
        self._config = config
        self._scopes: list[set[str]] = [set()]
        self._depth = 0

    def translate(self, root: TSNode) -> Node | None:
        return self.compound(self.statements(root))

    # =========================================================================
    # Helpers
    # =========================================================================

    def text(self, ts: TSNode) -> str:
        return self._bytes[ts.start_byte : ts.end_byte].decode("utf-8")

    def span(self, first: TSNode, last: TSNode) -> SourceRange:
        return SourceRange(
            start_byte=first.start_byte,
            end_byte=last.end_byte,
            start_line=first.start_point[0] + 1,
            start_column=first.start_point[1],
            end_line=last.end_point[0] + 1,
            end_column=last.end_point[1],
            source=self._bytes[first.start_byte : last.end_byte].decode("utf-8"),
        )

    def node(self, ts: TSNode, type: str, *children: object) -> Node:
        return Node(type, children, location=self.span(ts, ts))

    def named(self, ts: TSNode) -> list[TSNode]:
        return [child for child in ts.named_children if child.type not in _IGNORED]

    def unsupported(self, ts: TSNode) -> UnsupportedSyntax:
        return UnsupportedSyntax(
            self._source,
            ts.type,
            line=ts.start_point[0] + 1,
            ruby_version=self._config.RUBY_VERSION,
        )

    def visit(self, ts: TSNode) -> Node:
        if ts.is_missing:
            raise MalformedSource(self._source, ruby_version=self._config.RUBY_VERSION)

        handler = getattr(self, f"_on_{ts.type}", None)
        if handler is None:
            raise self.unsupported(ts)

        self._depth += 1
        if self._depth > self._config.MAX_DEPTH:
            raise RecursionError(f"Ruby syntax tree exceeded maximum depth of {self._config.MAX_DEPTH}")
        try:
            return handler(ts)
        finally:
            self._depth -= 1

    def visit_optional(self, ts: TSNode | None) -> Node | None:
        return None if ts is None else self.visit(ts)

    def statements(self, ts: TSNode) -> list[TSNode]:
        result: list[TSNode] = []
        for child in self.named(ts):
            if child.type in _CONTAINERS:
                result.extend(self.statements(child))
            else:
                result.append(child)
        return result

    def compound(self, statements: list[TSNode]) -> Node | None:
        body = [self.visit(statement) for statement in statements]
        if not body:
            return None
        if len(body) == 1:
            return body[0]
        return Node("begin", tuple(body), location=self.span(statements[0], statements[-1]))

    def clause(self, ts: TSNode | None) -> Node | None:
        if ts is None:
            return None
        if ts.type in _CONTAINERS:
            return self.compound(self.statements(ts))
        return self.visit(ts)

    def body_of(self, ts: TSNode, *exclude_fields: str) -> Node | None:
        body = ts.child_by_field_name("body")
        if body is not None:
            return self.clause(body)

        excluded = {_key(child) for name in exclude_fields for child in ts.children_by_field_name(name)}
        statements: list[TSNode] = []
        for child in self.named(ts):
            if _key(child) in excluded:
                continue
            if child.type in _CONTAINERS:
                statements.extend(self.statements(child))
            else:
                statements.append(child)
        return self.compound(statements)

    def operator_text(self, ts: TSNode) -> str:
        operator = ts.child_by_field_name("operator")
        if operator is not None:
            return self.text(operator)
        for child in ts.children:
            if not child.is_named:
                return self.text(child)
        raise self.unsupported(ts)

    # =========================================================================
    # Scopes
    # =========================================================================

    def declare(self, name: str) -> None:
        self._scopes[-1].add(name)

    def is_local(self, name: str) -> bool:
        return name in self._scopes[-1]

    @contextmanager
    def scope(self, inherit: bool) -> Iterator[None]:
        # Blocks see enclosing locals; def/class/module bodies start empty
        self._scopes.append(set(self._scopes[-1]) if inherit else set())
        try:
            yield
        finally:
            self._scopes.pop()

    # =========================================================================
    # Literals
    # =========================================================================

    def _on_integer(self, ts: TSNode) -> Node:
        return self.node(ts, "int", _parse_integer(self.text(ts)))

    def _on_float(self, ts: TSNode) -> Node:
        return self.node(ts, "float", float(self.text(ts).replace("_", "")))

    def _on_nil(self, ts: TSNode) -> Node:
        return self.node(ts, "nil")

    def _on_true(self, ts: TSNode) -> Node:
        return self.node(ts, "true")

    def _on_false(self, ts: TSNode) -> Node:
        return self.node(ts, "false")

    def _on_self(self, ts: TSNode) -> Node:
        return self.node(ts, "self")

    def string_parts(self, ts: TSNode) -> list[str | Node]:
        parts: list[str | Node] = []

        def append_text(text: str) -> None:
            if parts and isinstance(parts[-1], str):
                parts[-1] += text
            else:
                parts.append(text)

        for child in self.named(ts):
            if child.type == "string_content":
                append_text(self.text(child))
            elif child.type == "escape_sequence":
                append_text(unescape(self.text(child)))
            elif child.type == "interpolation":
                statements = [self.visit(s) for s in self.statements(child)]
                parts.append(self.node(child, "begin", *statements))
            else:
                raise self.unsupported(child)

        return parts

    def string_node(self, ts: TSNode, plain: str, dynamic: str, symbol: bool = False) -> Node:
        parts = self.string_parts(ts)
        wrap = Symbol if symbol else str

        if not parts:
            return self.node(ts, plain, wrap(""))
        if len(parts) == 1 and isinstance(parts[0], str):
            return self.node(ts, plain, wrap(parts[0]))

        children = [Node("str", (part,)) if isinstance(part, str) else part for part in parts]
        return self.node(ts, dynamic, *children)

    def _on_string(self, ts: TSNode) -> Node:
        return self.string_node(ts, "str", "dstr")

    def _on_bare_string(self, ts: TSNode) -> Node:
        return self.string_node(ts, "str", "dstr")

    def _on_chained_string(self, ts: TSNode) -> Node:
        return self.node(ts, "dstr", *[self.visit(child) for child in self.named(ts)])

    def _on_character(self, ts: TSNode) -> Node:
        return self.node(ts, "str", unescape(self.text(ts)[1:]))

    def _on_simple_symbol(self, ts: TSNode) -> Node:
        return self.node(ts, "sym", Symbol(self.text(ts)[1:]))

    def _on_hash_key_symbol(self, ts: TSNode) -> Node:
        return self.node(ts, "sym", Symbol(self.text(ts)))

    def _on_delimited_symbol(self, ts: TSNode) -> Node:
        return self.string_node(ts, "sym", "dsym", symbol=True)

    def _on_bare_symbol(self, ts: TSNode) -> Node:
        return self.string_node(ts, "sym", "dsym", symbol=True)

    def _on_regex(self, ts: TSNode) -> Node:
        parts = self.string_parts(ts)
        flags = _TRAILING_FLAGS.search(self.text(ts)).group(0)  # type: ignore[union-attr]
        children = [Node("str", (part,)) if isinstance(part, str) else part for part in parts]
        options = Node("regopt", tuple(Symbol(flag) for flag in sorted(set(flags))))
        return self.node(ts, "regexp", *children, options)

    def _on_array(self, ts: TSNode) -> Node:
        return self.node(ts, "array", *[self.visit(child) for child in self.named(ts)])

    _on_string_array = _on_array
    _on_symbol_array = _on_array

    def _on_hash(self, ts: TSNode) -> Node:
        return self.node(ts, "hash", *[self.visit(child) for child in self.named(ts)])

    def _on_pair(self, ts: TSNode) -> Node:
        key = ts.child_by_field_name("key")
        value = ts.child_by_field_name("value")
        if key is None:
            raise self.unsupported(ts)

        key_node = self.visit(key)
        if key.type == "string" and key_node.type == "str":
            # `"a": 1` is a symbol key, `"a" => 1` a string key
            separator_end = value.start_byte if value is not None else ts.end_byte
            if b"=>" not in self._bytes[key.end_byte : separator_end]:
                key_node = Node("sym", (Symbol(key_node.children[0]),), location=key_node.location)

        if value is None:
            # `{x:}` shorthand reads the local or calls the method `x`
            name = str(key_node.children[0])
            if self.is_local(name):
                value_node = Node("lvar", (Symbol(name),), location=key_node.location)
            else:
                value_node = Node("send", (None, Symbol(name)), location=key_node.location)
        else:
            value_node = self.visit(value)

        return self.node(ts, "pair", key_node, value_node)

    def _on_splat_argument(self, ts: TSNode) -> Node:
        return self.node(ts, "splat", *[self.visit(child) for child in self.named(ts)])

    def _on_hash_splat_argument(self, ts: TSNode) -> Node:
        return self.node(ts, "kwsplat", *[self.visit(child) for child in self.named(ts)])

    def _on_block_argument(self, ts: TSNode) -> Node:
        children = self.named(ts)
        return self.node(ts, "block_pass", self.visit(children[0]) if children else None)

    def _on_forward_argument(self, ts: TSNode) -> Node:
        return self.node(ts, "forwarded_args")

    def _on_range(self, ts: TSNode) -> Node:
        operator = next((child.type for child in ts.children if child.type in ("..", "...")), "..")
        return self.node(
            ts,
            "erange" if operator == "..." else "irange",
            self.visit_optional(ts.child_by_field_name("begin")),
            self.visit_optional(ts.child_by_field_name("end")),
        )

    def _on_parenthesized_statements(self, ts: TSNode) -> Node:
        return self.node(ts, "begin", *[self.visit(s) for s in self.statements(ts)])

    def _on_begin(self, ts: TSNode) -> Node:
        return self.node(ts, "kwbegin", *[self.visit(s) for s in self.statements(ts)])

    # =========================================================================
    # Variables
    # =========================================================================

    def _on_identifier(self, ts: TSNode) -> Node:
        name = self.text(ts)
        if self.is_local(name):
            return self.node(ts, "lvar", Symbol(name))
        return self.node(ts, "send", None, Symbol(name))

    def _on_instance_variable(self, ts: TSNode) -> Node:
        return self.node(ts, "ivar", Symbol(self.text(ts)))

    def _on_class_variable(self, ts: TSNode) -> Node:
        return self.node(ts, "cvar", Symbol(self.text(ts)))

    def _on_global_variable(self, ts: TSNode) -> Node:
        return self.node(ts, "gvar", Symbol(self.text(ts)))

    def _on_constant(self, ts: TSNode) -> Node:
        return self.node(ts, "const", None, Symbol(self.text(ts)))

    def _on_super(self, ts: TSNode) -> Node:
        return self.node(ts, "zsuper")

    def _on_scope_resolution(self, ts: TSNode) -> Node:
        scope = ts.child_by_field_name("scope")
        name = ts.child_by_field_name("name")
        if name is None:
            raise self.unsupported(ts)

        scope_node = self.visit(scope) if scope is not None else Node("cbase")
        if name.type == "constant":
            return self.node(ts, "const", scope_node, Symbol(self.text(name)))
        return self.node(ts, "send", scope_node, Symbol(self.text(name)))

    # =========================================================================
    # Assignment
    # =========================================================================

    def target(self, ts: TSNode, operator_assignment: bool = False) -> Node:
        """Assignment target without its value: `(lvasgn :a)`, `(send recv :b=)`."""
        kind = ts.type

        if kind == "identifier":
            name = self.text(ts)
            self.declare(name)
            return self.node(ts, "lvasgn", Symbol(name))
        if kind == "instance_variable":
            return self.node(ts, "ivasgn", Symbol(self.text(ts)))
        if kind == "class_variable":
            return self.node(ts, "cvasgn", Symbol(self.text(ts)))
        if kind == "global_variable":
            return self.node(ts, "gvasgn", Symbol(self.text(ts)))
        if kind == "constant":
            return self.node(ts, "casgn", None, Symbol(self.text(ts)))
        if kind == "scope_resolution":
            scope = ts.child_by_field_name("scope")
            name = ts.child_by_field_name("name")
            scope_node = self.visit(scope) if scope is not None else Node("cbase")
            return self.node(ts, "casgn", scope_node, Symbol(self.text(name)))
        if kind == "call":
            receiver = self.visit(ts.child_by_field_name("receiver"))
            method = self.text(ts.child_by_field_name("method"))
            send_type = "csend" if self.call_operator(ts) == "&." else "send"
            return self.node(ts, send_type, receiver, Symbol(method if operator_assignment else f"{method}="))
        if kind == "element_reference":
            obj = ts.child_by_field_name("object")
            args = self.arguments([child for child in self.named(ts) if _key(child) != _key(obj)])
            return self.node(ts, "send", self.visit(obj), Symbol("[]" if operator_assignment else "[]="), *args)
        if kind == "rest_assignment":
            inner = self.named(ts)
            return self.node(ts, "splat", *[self.target(child) for child in inner])
        if kind in ("left_assignment_list", "destructured_left_assignment"):
            return self.node(ts, "mlhs", *[self.target(child) for child in self.named(ts)])

        raise self.unsupported(ts)

    def assignment_value(self, ts: TSNode) -> Node:
        if ts.type == "right_assignment_list":
            return self.node(ts, "array", *[self.visit(child) for child in self.named(ts)])
        if ts.type == "splat_argument":
            return self.node(ts, "array", self.visit(ts))
        return self.visit(ts)

    def _on_assignment(self, ts: TSNode) -> Node:
        left = ts.child_by_field_name("left")
        right = ts.child_by_field_name("right")
        if left is None or right is None:
            raise self.unsupported(ts)

        # Target first: `a = a` reads the freshly declared local
        target = self.target(left)
        value = self.assignment_value(right)

        if target.type == "mlhs":
            return self.node(ts, "masgn", target, value)
        return self.node(ts, target.type, *target.children, value)

    def _on_operator_assignment(self, ts: TSNode) -> Node:
        left = ts.child_by_field_name("left")
        right = ts.child_by_field_name("right")
        if left is None or right is None:
            raise self.unsupported(ts)

        operator = self.operator_text(ts)
        target = self.target(left, operator_assignment=True)
        value = self.visit(right)

        if operator == "||=":
            return self.node(ts, "or_asgn", target, value)
        if operator == "&&=":
            return self.node(ts, "and_asgn", target, value)
        return self.node(ts, "op_asgn", target, Symbol(operator[:-1]), value)

    # =========================================================================
    # Calls
    # =========================================================================

    def call_operator(self, ts: TSNode) -> str:
        operator = ts.child_by_field_name("operator")
        if operator is not None:
            return self.text(operator)
        for child in ts.children:
            if child.type in (".", "&.", "::"):
                return child.type
        return "."

    def arguments(self, children: list[TSNode]) -> list[Node]:
        """Positional arguments, with keyword pairs folded into a trailing `hash`."""
        positional: list[Node] = []
        keywords: list[TSNode] = []
        block_pass: Node | None = None

        for child in children:
            if child.type in ("pair", "hash_splat_argument"):
                keywords.append(child)
            elif child.type == "block_argument":
                block_pass = self.visit(child)
            else:
                positional.append(self.visit(child))

        if keywords:
            pairs = [self.visit(child) for child in keywords]
            positional.append(Node("hash", tuple(pairs), location=self.span(keywords[0], keywords[-1])))
        if block_pass is not None:
            positional.append(block_pass)
        return positional

    def _on_call(self, ts: TSNode) -> Node:
        receiver = ts.child_by_field_name("receiver")
        method = ts.child_by_field_name("method")
        arguments = ts.child_by_field_name("arguments")
        block = ts.child_by_field_name("block")

        receiver_node = self.visit_optional(receiver)
        args = self.arguments(self.named(arguments)) if arguments is not None else []

        # Without the block: `[1].map` for `[1].map { ... }`
        last = next((part for part in (arguments, method, receiver) if part is not None), ts)
        location = self.span(ts, last)

        if method is not None and method.type == "super":
            send = Node("super", tuple(args), location=location)
        else:
            name = self.text(method) if method is not None else "call"
            send_type = "csend" if self.call_operator(ts) == "&." else "send"
            send = Node(send_type, (receiver_node, Symbol(name), *args), location=location)

        if block is None:
            return send
        return self.block(ts, send, block)

    def block(self, ts: TSNode, send: Node, block: TSNode) -> Node:
        with self.scope(inherit=True):
            parameters = block.child_by_field_name("parameters")
            args = self.parameters(parameters) if parameters is not None else Node("args")
            body = self.body_of(block, "parameters")
        return self.node(ts, "block", send, args, body)

    def _on_lambda(self, ts: TSNode) -> Node:
        with self.scope(inherit=True):
            parameters = ts.child_by_field_name("parameters")
            args = self.parameters(parameters) if parameters is not None else Node("args")
            body_ts = ts.child_by_field_name("body")
            body = self.body_of(body_ts, "parameters") if body_ts is not None else None
        return self.node(ts, "block", Node("lambda"), args, body)

    def _on_element_reference(self, ts: TSNode) -> Node:
        obj = ts.child_by_field_name("object")
        if obj is None:
            raise self.unsupported(ts)
        args = self.arguments([child for child in self.named(ts) if _key(child) != _key(obj)])
        return self.node(ts, "send", self.visit(obj), Symbol("[]"), *args)

    def _on_binary(self, ts: TSNode) -> Node:
        left = self.visit(ts.child_by_field_name("left"))
        operator = self.operator_text(ts)
        right = self.visit(ts.child_by_field_name("right"))

        if operator in ("&&", "and"):
            return self.node(ts, "and", left, right)
        if operator in ("||", "or"):
            return self.node(ts, "or", left, right)
        return self.node(ts, "send", left, Symbol(operator), right)

    def _on_unary(self, ts: TSNode) -> Node:
        operator = self.operator_text(ts)
        operand = ts.child_by_field_name("operand")
        if operand is None:
            operand = self.named(ts)[-1]

        if operator in ("!", "not"):
            return self.node(ts, "send", self.visit(operand), Symbol("!"))
        if operator == "defined?":
            return self.node(ts, "defined?", self.visit(operand))
        if operator == "-" and operand.type in ("integer", "float"):
            literal = self.visit(operand)
            return self.node(ts, literal.type, -literal.children[0])
        if operator in ("-", "+"):
            return self.node(ts, "send", self.visit(operand), Symbol(f"{operator}@"))
        return self.node(ts, "send", self.visit(operand), Symbol(operator))

    # =========================================================================
    # Control flow
    # =========================================================================

    def _on_if(self, ts: TSNode) -> Node:
        return self.node(
            ts,
            "if",
            self.visit(ts.child_by_field_name("condition")),
            self.clause(ts.child_by_field_name("consequence")),
            self.clause(ts.child_by_field_name("alternative")),
        )

    _on_elsif = _on_if

    def _on_unless(self, ts: TSNode) -> Node:
        return self.node(
            ts,
            "if",
            self.visit(ts.child_by_field_name("condition")),
            self.clause(ts.child_by_field_name("alternative")),
            self.clause(ts.child_by_field_name("consequence")),
        )

    def _on_conditional(self, ts: TSNode) -> Node:
        return self._on_if(ts)

    def _on_if_modifier(self, ts: TSNode) -> Node:
        body = self.visit(ts.child_by_field_name("body"))
        condition = self.visit(ts.child_by_field_name("condition"))
        return self.node(ts, "if", condition, body, None)

    def _on_unless_modifier(self, ts: TSNode) -> Node:
        body = self.visit(ts.child_by_field_name("body"))
        condition = self.visit(ts.child_by_field_name("condition"))
        return self.node(ts, "if", condition, None, body)

    def _on_while(self, ts: TSNode) -> Node:
        condition = self.visit(ts.child_by_field_name("condition"))
        return self.node(ts, "while", condition, self.clause(ts.child_by_field_name("body")))

    def _on_until(self, ts: TSNode) -> Node:
        condition = self.visit(ts.child_by_field_name("condition"))
        return self.node(ts, "until", condition, self.clause(ts.child_by_field_name("body")))

    def _on_while_modifier(self, ts: TSNode) -> Node:
        body_ts = ts.child_by_field_name("body")
        body = self.visit(body_ts)
        condition = self.visit(ts.child_by_field_name("condition"))
        return self.node(ts, "while_post" if body_ts.type == "begin" else "while", condition, body)

    def _on_until_modifier(self, ts: TSNode) -> Node:
        body_ts = ts.child_by_field_name("body")
        body = self.visit(body_ts)
        condition = self.visit(ts.child_by_field_name("condition"))
        return self.node(ts, "until_post" if body_ts.type == "begin" else "until", condition, body)

    def _on_case(self, ts: TSNode) -> Node:
        children = self.named(ts)
        whens = [self.visit(child) for child in children if child.type == "when"]
        else_clause = next((child for child in children if child.type == "else"), None)
        return self.node(
            ts,
            "case",
            self.visit_optional(ts.child_by_field_name("value")),
            *whens,
            self.clause(else_clause),
        )

    def _on_when(self, ts: TSNode) -> Node:
        patterns = [self.visit(pattern) for pattern in ts.children_by_field_name("pattern")]
        return self.node(ts, "when", *patterns, self.clause(ts.child_by_field_name("body")))

    def _on_pattern(self, ts: TSNode) -> Node:
        children = self.named(ts)
        if len(children) != 1:
            raise self.unsupported(ts)
        return self.visit(children[0])

    def flow(self, ts: TSNode, type: str) -> Node:
        args: list[Node] = []
        for child in self.named(ts):
            if child.type == "argument_list":
                args.extend(self.arguments(self.named(child)))
            else:
                args.append(self.visit(child))
        return self.node(ts, type, *args)

    def _on_return(self, ts: TSNode) -> Node:
        return self.flow(ts, "return")

    def _on_break(self, ts: TSNode) -> Node:
        return self.flow(ts, "break")

    def _on_next(self, ts: TSNode) -> Node:
        return self.flow(ts, "next")

    def _on_yield(self, ts: TSNode) -> Node:
        return self.flow(ts, "yield")

    def _on_redo(self, ts: TSNode) -> Node:
        return self.node(ts, "redo")

    def _on_retry(self, ts: TSNode) -> Node:
        return self.node(ts, "retry")

    # =========================================================================
    # Definitions
    # =========================================================================

    def parameters(self, ts: TSNode) -> Node:
        block_locals = {_key(child) for child in ts.children_by_field_name("locals")}
        args: list[Node] = []
        for child in self.named(ts):
            if _key(child) in block_locals:
                name = self.text(child)
                self.declare(name)
                args.append(self.node(child, "shadowarg", Symbol(name)))
            else:
                args.append(self.parameter(child))
        return self.node(ts, "args", *args)

    def parameter(self, ts: TSNode) -> Node:
        kind = ts.type

        if kind == "identifier":
            name = self.text(ts)
            self.declare(name)
            return self.node(ts, "arg", Symbol(name))
        if kind == "destructured_parameter":
            return self.node(ts, "mlhs", *[self.parameter(child) for child in self.named(ts)])
        if kind == "forward_parameter":
            return self.node(ts, "forward_arg")
        if kind == "hash_splat_nil":
            return self.node(ts, "kwnilarg")

        name_ts = ts.child_by_field_name("name")
        name = Symbol(self.text(name_ts)) if name_ts is not None else None
        if name is not None:
            self.declare(str(name))
        named = (name,) if name is not None else ()

        if kind == "optional_parameter":
            return self.node(ts, "optarg", name, self.visit(ts.child_by_field_name("value")))
        if kind == "keyword_parameter":
            value = ts.child_by_field_name("value")
            if value is None:
                return self.node(ts, "kwarg", name)
            return self.node(ts, "kwoptarg", name, self.visit(value))
        if kind == "splat_parameter":
            return self.node(ts, "restarg", *named)
        if kind == "hash_splat_parameter":
            return self.node(ts, "kwrestarg", *named)
        if kind == "block_parameter":
            return self.node(ts, "blockarg", name)

        raise self.unsupported(ts)

    def _on_method(self, ts: TSNode) -> Node:
        name = self.text(ts.child_by_field_name("name"))
        with self.scope(inherit=False):
            parameters = ts.child_by_field_name("parameters")
            args = self.parameters(parameters) if parameters is not None else Node("args")
            body = self.body_of(ts, "name", "parameters")
        return self.node(ts, "def", Symbol(name), args, body)

    def _on_singleton_method(self, ts: TSNode) -> Node:
        obj = self.visit(ts.child_by_field_name("object"))
        name = self.text(ts.child_by_field_name("name"))
        with self.scope(inherit=False):
            parameters = ts.child_by_field_name("parameters")
            args = self.parameters(parameters) if parameters is not None else Node("args")
            body = self.body_of(ts, "object", "name", "parameters")
        return self.node(ts, "defs", obj, Symbol(name), args, body)

    def _on_class(self, ts: TSNode) -> Node:
        name = self.visit(ts.child_by_field_name("name"))
        superclass = ts.child_by_field_name("superclass")
        superclass_node = None
        if superclass is not None:
            inner = self.named(superclass)
            superclass_node = self.visit(inner[0]) if inner else None
        with self.scope(inherit=False):
            body = self.body_of(ts, "name", "superclass")
        return self.node(ts, "class", name, superclass_node, body)

    def _on_module(self, ts: TSNode) -> Node:
        name = self.visit(ts.child_by_field_name("name"))
        with self.scope(inherit=False):
            body = self.body_of(ts, "name")
        return self.node(ts, "module", name, body)

    def _on_singleton_class(self, ts: TSNode) -> Node:
        value = self.visit(ts.child_by_field_name("value"))
        with self.scope(inherit=False):
            body = self.body_of(ts, "value")
        return self.node(ts, "sclass", value, body)
