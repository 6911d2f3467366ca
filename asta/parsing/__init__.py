"""
Ruby Parsing

tree-sitter-ruby adapter producing parser-gem shaped `Node` trees.
"""

from asta.ast.node import Node
from asta.parsing.ruby_parser import RubyParser

# Global parser instance
_parser: RubyParser | None = None


def get_parser() -> RubyParser:
    """Get global Ruby parser instance"""
    global _parser
    if _parser is None:
        _parser = RubyParser()
    return _parser


def parse_source(source: str) -> Node:
    """Parse Ruby source with the global parser"""
    return get_parser().parse(source)


__all__ = ["RubyParser", "get_parser", "parse_source"]
