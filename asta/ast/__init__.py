"""
Tree data model and serialization.
"""

from asta.ast.node import Node, SourceRange, Symbol
from asta.ast.render import inspect_literal, render, render_pretty
from asta.ast.token import Token

__all__ = [
    "Node",
    "SourceRange",
    "Symbol",
    "Token",
    "inspect_literal",
    "render",
    "render_pretty",
]
