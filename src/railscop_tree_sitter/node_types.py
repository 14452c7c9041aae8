from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Optional


class NodeKind(str, Enum):
    """Closed set of node kinds produced by the Ruby frontend."""

    PROGRAM = "program"
    BEGIN = "begin"
    SEND = "send"
    CSEND = "csend"
    BLOCK = "block"
    DEF = "def"
    DEFS = "defs"
    CLASS = "class"
    MODULE = "module"
    SCLASS = "sclass"
    ARGS = "args"
    ARG = "arg"
    PAIR = "pair"
    HASH = "hash"
    ARRAY = "array"
    SYM = "sym"
    DSYM = "dsym"
    STR = "str"
    DSTR = "dstr"
    INT = "int"
    FLOAT = "float"
    TRUE = "true"
    FALSE = "false"
    NIL = "nil"
    SELF = "self"
    CONST = "const"
    CBASE = "cbase"
    IDENT = "ident"
    IVAR = "ivar"
    SPLAT = "splat"
    KWSPLAT = "kwsplat"
    BLOCK_PASS = "block_pass"
    OTHER = "other"


KIND_NAMES = {kind.value: kind for kind in NodeKind}


@dataclass(frozen=True)
class SourceRange:
    """Character range in the decoded source. Lines are 1-based, columns 0-based."""

    start: int
    end: int
    line: int
    column: int
    end_line: int

    @property
    def is_multiline(self) -> bool:
        return self.end_line > self.line

    def overlaps(self, other: "SourceRange") -> bool:
        return self.start < other.end and other.start < self.end


@dataclass(frozen=True)
class Node:
    """Immutable element of a SyntaxTree.

    Parent links are not stored on the node; ask the owning tree instead.
    """

    kind: NodeKind
    range: SourceRange
    children: tuple[Optional["Node"], ...] = ()
    value: Any = None
    index: int = -1
    type_name: str = ""

    @property
    def is_leaf(self) -> bool:
        return not self.children and self.value is not None

    @property
    def elements(self) -> tuple[Any, ...]:
        """What a pattern sequence is matched against."""
        if self.is_leaf:
            return (self.value,)
        return self.children

    def child_nodes(self) -> Iterator["Node"]:
        for child in self.children:
            if child is not None:
                yield child

    # Accessors for the common shapes
    @property
    def method_name(self) -> str | None:
        if self.kind in (NodeKind.SEND, NodeKind.CSEND, NodeKind.DEFS):
            return self.children[1].value
        if self.kind == NodeKind.DEF:
            return self.children[0].value
        return None

    @property
    def parent_class(self) -> Optional["Node"]:
        if self.kind == NodeKind.CLASS:
            return self.children[1]
        return None

    @property
    def key(self) -> Optional["Node"]:
        return self.children[0] if self.kind == NodeKind.PAIR else None

    def const_name(self) -> str | None:
        """Rendered constant path, `Foo::Bar`. A leading `::` is dropped."""
        if self.kind != NodeKind.CONST:
            return None
        if self.is_leaf:
            return self.value
        scope, name = self.children
        if scope is None or scope.kind == NodeKind.CBASE:
            return name.const_name()
        prefix = scope.const_name()
        if prefix is None:
            return None
        return f"{prefix}::{name.const_name()}"

    def __repr__(self) -> str:
        if self.is_leaf:
            return f"<{self.kind.value} {self.value!r} @{self.range.line}:{self.range.column}>"
        return f"<{self.kind.value} @{self.range.line}:{self.range.column}>"


@dataclass
class SyntaxTree:
    """Arena of nodes for one parsed file plus parent indices."""

    source: str
    nodes: list[Node]
    parents: list[int]

    @property
    def root(self) -> Node:
        return self.nodes[-1]

    def node(self, index: int) -> Node:
        return self.nodes[index]

    def parent(self, node: Node) -> Node | None:
        index = self.parents[node.index]
        return None if index < 0 else self.nodes[index]

    def ancestors(self, node: Node) -> Iterator[Node]:
        """Yield ancestors nearest first."""
        index = self.parents[node.index]
        # Each step moves strictly up, so the walk ends within len(nodes) steps
        for _ in range(len(self.nodes)):
            if index < 0:
                return
            yield self.nodes[index]
            index = self.parents[index]

    def find_ancestor(self, node: Node, kind: NodeKind) -> Node | None:
        for ancestor in self.ancestors(node):
            if ancestor.kind == kind:
                return ancestor
        return None

    def source_of(self, node: Node | SourceRange) -> str:
        rng = node.range if isinstance(node, Node) else node
        return self.source[rng.start : rng.end]

    def walk(self, node: Node | None = None) -> Iterator[Node]:
        """Depth-first, pre-order traversal in document order."""
        stack = [self.root if node is None else node]
        while stack:
            current = stack.pop()
            yield current
            stack.extend(reversed(list(current.child_nodes())))


@dataclass
class ParseResult:
    """Result of a tree-sitter parse operation"""

    tree: SyntaxTree
    source: str
    errors: list[str] = field(default_factory=list)
