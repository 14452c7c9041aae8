from .dump import dump_tree
from .node_types import KIND_NAMES, Node, NodeKind, ParseResult, SourceRange, SyntaxTree
from .parser import RubyParser

__all__ = [
    "KIND_NAMES",
    "Node",
    "NodeKind",
    "ParseResult",
    "RubyParser",
    "SourceRange",
    "SyntaxTree",
    "dump_tree",
]
