"""Node pattern compiler.

A small s-expression language for matching node shapes:

    (send nil :enum (hash $...))
    (pair $_ ${array hash})

Terms:

- ``(kind a b ...)`` node of ``kind`` whose elements match ``a b ...``; a leaf
  node's only element is its literal value
- ``kind`` node of that kind, elements unchecked
- ``_`` anything, including an absent child
- ``nil`` / ``nil?`` an absent child (use ``(nil)`` for the ``nil`` literal)
- ``...`` zero or more elements, once per sequence
- ``{a b}`` any of the branches
- ``:name`` a symbol, method name or constant name; ``"text"`` a string;
  ``42`` an integer
- ``$term`` capture what ``term`` matched; ``$...`` captures a tuple

Patterns are compiled once into closures; matching never raises.
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, Iterator

from railscop_tree_sitter import KIND_NAMES, Node, NodeKind, SyntaxTree

from .errors import PatternSyntaxError

Matcher = Callable[[Any, list], bool]

TOKEN_RE = re.compile(
    r"""
    (?P<space>\s+)
  | (?P<rest>\.\.\.)
  | (?P<punct>[(){}$])
  | (?P<symbol>:[A-Za-z_][A-Za-z0-9_]*[?!=]?)
  | (?P<string>"(?:[^"\\]|\\.)*")
  | (?P<number>-?\d+)
  | (?P<word>[a-z_][a-z0-9_]*\??)
    """,
    re.VERBOSE,
)

ABSENT_WORDS = ("nil", "nil?")

# Leaf kinds each literal form can stand for
SYMBOL_KINDS = frozenset({NodeKind.SYM, NodeKind.IDENT, NodeKind.CONST})
STRING_KINDS = frozenset({NodeKind.STR})
INTEGER_KINDS = frozenset({NodeKind.INT})


@dataclass(frozen=True)
class MatchResult:
    """Captured elements of a successful match, in pattern order."""

    captures: tuple[Any, ...]

    def __bool__(self) -> bool:
        return True

    def __len__(self) -> int:
        return len(self.captures)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.captures)

    def __getitem__(self, index):
        return self.captures[index]


@dataclass(frozen=True)
class _Term:
    matcher: Matcher
    captures: int
    variadic: bool = False
    captured: bool = False


class NodePattern:
    """A compiled pattern. Build with `compile_pattern`."""

    def __init__(self, source: str, term: _Term):
        self.source = source
        self._matcher = term.matcher
        self.capture_count = term.captures

    def match(self, node: Node | None) -> MatchResult | None:
        captures: list = []
        if not self._matcher(node, captures):
            return None
        return MatchResult(tuple(captures))

    def matches(self, node: Node | None) -> bool:
        return self._matcher(node, [])

    def find_all(self, tree: SyntaxTree) -> Iterator[tuple[Node, MatchResult]]:
        """Yield every node in the tree that matches, in document order."""
        for node in tree.walk():
            result = self.match(node)
            if result is not None:
                yield node, result

    def __repr__(self) -> str:
        return f"NodePattern({self.source!r})"


def tokenize(source: str) -> list[str]:
    tokens = []
    position = 0
    while position < len(source):
        m = TOKEN_RE.match(source, position)
        if m is None:
            raise PatternSyntaxError(f"unexpected character {source[position]!r}", source, position)
        if m.lastgroup != "space":
            tokens.append(m.group())
        position = m.end()
    return tokens


class _Compiler:
    def __init__(self, source: str):
        self.source = source
        self.tokens = tokenize(source)
        self.position = 0

    def error(self, message: str) -> PatternSyntaxError:
        return PatternSyntaxError(message, self.source, self.position)

    def peek(self) -> str | None:
        return self.tokens[self.position] if self.position < len(self.tokens) else None

    def take(self) -> str:
        token = self.peek()
        if token is None:
            raise self.error("unexpected end of pattern")
        self.position += 1
        return token

    def compile(self) -> _Term:
        if not self.tokens:
            raise self.error("empty pattern")
        term = self.term()
        if term.variadic:
            raise self.error("`...` is only allowed inside a sequence")
        if self.peek() is not None:
            raise self.error(f"unexpected {self.peek()!r} after pattern")
        return term

    def term(self) -> _Term:
        token = self.take()
        if token == "$":
            return self.capture(self.term())
        if token == "(":
            return self.sequence()
        if token == "{":
            return self.union()
        if token == "...":
            return _Term(lambda element, captures: True, 0, variadic=True)
        if token in (")", "}"):
            raise self.error(f"unbalanced {token!r}")
        if token == "_":
            return _Term(lambda element, captures: True, 0)
        if token in ABSENT_WORDS:
            return _Term(lambda element, captures: element is None, 0)
        if token.startswith(":"):
            return self.literal(token[1:], SYMBOL_KINDS)
        if token.startswith('"'):
            return self.literal(re.sub(r"\\(.)", r"\1", token[1:-1]), STRING_KINDS)
        if token.lstrip("-").isdigit():
            return self.literal(int(token), INTEGER_KINDS)
        kind = KIND_NAMES.get(token)
        if kind is None:
            raise self.error(f"unknown node kind {token!r}")
        return _Term(lambda element, captures: isinstance(element, Node) and element.kind == kind, 0)

    def literal(self, value: Any, kinds: frozenset[NodeKind]) -> _Term:
        def match(element, captures):
            if isinstance(element, Node):
                return element.kind in kinds and element.is_leaf and element.value == value
            return type(element) is type(value) and element == value

        return _Term(match, 0)

    def capture(self, inner: _Term) -> _Term:
        if inner.captured and inner.variadic:
            raise self.error("`...` captured twice")

        def match(element, captures):
            slot = len(captures)
            captures.append(None)
            if not inner.matcher(element, captures):
                del captures[slot:]
                return False
            captures[slot] = element
            return True

        return _Term(match, inner.captures + 1, variadic=inner.variadic, captured=True)

    def union(self) -> _Term:
        branches: list[_Term] = []
        while self.peek() != "}":
            if self.peek() is None:
                raise self.error("unclosed '{'")
            branch = self.term()
            if branch.variadic:
                raise self.error("`...` is not allowed in a union")
            branches.append(branch)
        self.take()
        if not branches:
            raise self.error("empty union")
        counts = {branch.captures for branch in branches}
        if len(counts) > 1:
            raise self.error("union branches capture different numbers of elements")

        def match(element, captures):
            for branch in branches:
                mark = len(captures)
                if branch.matcher(element, captures):
                    return True
                del captures[mark:]
            return False

        return _Term(match, branches[0].captures)

    def sequence(self) -> _Term:
        kind_token = self.peek()
        if kind_token is None or kind_token in ("(", ")", "}", "$", "..."):
            raise self.error("a sequence must start with a node kind")
        if kind_token in KIND_NAMES:
            # `(nil)` is the nil literal, not an absent child
            kind = KIND_NAMES[self.take()]
            kind_term = _Term(lambda element, captures: element.kind == kind, 0)
        else:
            kind_term = self.term()

        terms: list[_Term] = []
        while self.peek() != ")":
            if self.peek() is None:
                raise self.error("unclosed '('")
            terms.append(self.term())
        self.take()

        variadic = [index for index, term in enumerate(terms) if term.variadic]
        if len(variadic) > 1:
            raise self.error("`...` may appear only once in a sequence")

        head = terms if not variadic else terms[: variadic[0]]
        rest = terms[variadic[0]] if variadic else None
        tail = terms[variadic[0] + 1 :] if variadic else []
        fixed = len(head) + len(tail)

        def match(element, captures):
            if not isinstance(element, Node) or not kind_term.matcher(element, captures):
                return False
            elements = element.elements
            if rest is None and len(elements) != fixed:
                return False
            if len(elements) < fixed:
                return False
            for term, item in zip(head, elements):
                if not term.matcher(item, captures):
                    return False
            if rest is not None:
                middle = tuple(elements[len(head) : len(elements) - len(tail)])
                rest.matcher(middle, captures)
            for term, item in zip(tail, elements[len(elements) - len(tail) :]):
                if not term.matcher(item, captures):
                    return False
            return True

        captures = kind_term.captures + sum(term.captures for term in terms)
        return _Term(match, captures)


@lru_cache(maxsize=None)
def compile_pattern(source: str) -> NodePattern:
    """Compile a pattern, raising PatternSyntaxError when it is malformed."""
    return NodePattern(source, _Compiler(source).compile())
