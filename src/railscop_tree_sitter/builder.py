"""Convert a tree-sitter-ruby tree into the railscop Node model.

The converted tree keeps the shapes rules care about stable:

- calls become `send(receiver|None, ident(name), *args)`; a call with a block is
  wrapped as `block(send, args|None, body|None)`
- bare keyword arguments are grouped into one synthetic `hash`
- `%i[]`/`%w[]` are plain `array` nodes
- absent optional children are `None`
"""

from bisect import bisect_right
from typing import Callable

from tree_sitter import Node as TSNode

from .node_types import Node, NodeKind, SourceRange, SyntaxTree

STRING_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "0": "\0",
    "s": " ",
    "e": "\x1b",
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "v": "\v",
}

PARAMETER_LISTS = ("method_parameters", "block_parameters", "lambda_parameters")
LITERAL_LEAVES = {
    "true": NodeKind.TRUE,
    "false": NodeKind.FALSE,
    "nil": NodeKind.NIL,
    "self": NodeKind.SELF,
}


class _Offsets:
    """Maps tree-sitter byte offsets to character offsets and lines."""

    def __init__(self, source: str, data: bytes):
        self._identity = len(source) == len(data)
        self._byte_to_char: list[int] = []
        if not self._identity:
            table = []
            for index, char in enumerate(source):
                table.extend([index] * len(char.encode("utf-8")))
            table.append(len(source))
            self._byte_to_char = table

        self._line_starts = [0]
        for index, char in enumerate(source):
            if char == "\n":
                self._line_starts.append(index + 1)

    def char(self, byte_offset: int) -> int:
        if self._identity:
            return byte_offset
        return self._byte_to_char[byte_offset]

    def line_col(self, offset: int) -> tuple[int, int]:
        line = bisect_right(self._line_starts, offset)
        return line, offset - self._line_starts[line - 1]

    def range(self, start_byte: int, end_byte: int) -> SourceRange:
        start = self.char(start_byte)
        end = self.char(end_byte)
        line, column = self.line_col(start)
        end_line, _ = self.line_col(max(start, end - 1))
        return SourceRange(start=start, end=end, line=line, column=column, end_line=end_line)


class TreeBuilder:
    """Builds one SyntaxTree from one tree-sitter tree."""

    def __init__(self, source: str, data: bytes):
        self.source = source
        self.data = data
        self.offsets = _Offsets(source, data)
        self.nodes: list[Node] = []
        self.parents: list[int] = []
        self._handlers: dict[str, Callable[[TSNode], Node | None]] = {
            "program": self._program,
            "body_statement": self._statements,
            "block_body": self._statements,
            "parenthesized_statements": self._statements,
            "begin": self._statements,
            "call": self._call,
            "method_call": self._call,
            "method": self._method,
            "singleton_method": self._singleton_method,
            "class": self._class,
            "module": self._module,
            "singleton_class": self._singleton_class,
            "pair": self._pair,
            "hash": self._hash,
            "array": self._array,
            "string_array": self._array,
            "symbol_array": self._array,
            "simple_symbol": self._simple_symbol,
            "hash_key_symbol": self._bare_symbol,
            "bare_symbol": self._bare_symbol,
            "delimited_symbol": self._delimited_symbol,
            "string": self._string,
            "bare_string": self._string,
            "character": self._character,
            "integer": self._integer,
            "float": self._float,
            "constant": self._constant,
            "scope_resolution": self._scope_resolution,
            "identifier": self._identifier,
            "instance_variable": self._instance_variable,
            "splat_argument": self._wrapper(NodeKind.SPLAT),
            "hash_splat_argument": self._wrapper(NodeKind.KWSPLAT),
            "block_argument": self._wrapper(NodeKind.BLOCK_PASS),
        }
        for name in PARAMETER_LISTS:
            self._handlers[name] = self._parameters

    def build(self, root: TSNode) -> SyntaxTree:
        node = self.convert(root)
        if node is None or node.index != len(self.nodes) - 1:
            # The root must sit in the last arena slot
            node = self._make(NodeKind.PROGRAM, self._ts_range(root), (node,) if node else ())
        return SyntaxTree(source=self.source, nodes=self.nodes, parents=self.parents)

    def convert(self, ts: TSNode | None) -> Node | None:
        if ts is None or ts.type == "comment":
            return None
        if ts.type in LITERAL_LEAVES:
            return self._make(LITERAL_LEAVES[ts.type], self._ts_range(ts), type_name=ts.type)
        handler = self._handlers.get(ts.type)
        if handler is not None:
            return handler(ts)
        return self._generic(ts)

    # Arena helpers
    def _make(
        self,
        kind: NodeKind,
        rng: SourceRange,
        children: tuple[Node | None, ...] = (),
        value=None,
        type_name: str = "",
    ) -> Node:
        index = len(self.nodes)
        node = Node(
            kind=kind,
            range=rng,
            children=tuple(children),
            value=value,
            index=index,
            type_name=type_name or kind.value,
        )
        self.nodes.append(node)
        self.parents.append(-1)
        for child in node.child_nodes():
            self.parents[child.index] = index
        return node

    def _ts_range(self, ts: TSNode) -> SourceRange:
        return self.offsets.range(ts.start_byte, ts.end_byte)

    def _text(self, ts: TSNode) -> str:
        return self.data[ts.start_byte : ts.end_byte].decode("utf-8", errors="replace")

    def _named(self, ts: TSNode) -> list[TSNode]:
        return [child for child in ts.named_children if child.type != "comment"]

    def _convert_all(self, items: list[TSNode]) -> tuple[Node | None, ...]:
        converted = (self.convert(item) for item in items)
        return tuple(node for node in converted if node is not None)

    def _body(self, ts: TSNode, exclude: set[str]) -> Node | None:
        """Body of a def/class/module, from the `body` field or the leftover children."""
        body = ts.child_by_field_name("body")
        if body is not None:
            return self.convert(body)
        leftovers = [
            child
            for index, child in enumerate(ts.children)
            if child.is_named and child.type != "comment" and ts.field_name_for_child(index) not in exclude
        ]
        if not leftovers:
            return None
        if len(leftovers) == 1:
            return self.convert(leftovers[0])
        rng = self.offsets.range(leftovers[0].start_byte, leftovers[-1].end_byte)
        return self._make(NodeKind.BEGIN, rng, self._convert_all(leftovers), type_name="body_statement")

    # Handlers
    def _program(self, ts: TSNode) -> Node:
        return self._make(NodeKind.PROGRAM, self._ts_range(ts), self._convert_all(self._named(ts)), type_name=ts.type)

    def _statements(self, ts: TSNode) -> Node:
        return self._make(NodeKind.BEGIN, self._ts_range(ts), self._convert_all(self._named(ts)), type_name=ts.type)

    def _call(self, ts: TSNode) -> Node:
        receiver_ts = ts.child_by_field_name("receiver")
        method_ts = ts.child_by_field_name("method")
        arguments_ts = ts.child_by_field_name("arguments")
        block_ts = ts.child_by_field_name("block")
        safe_navigation = any(child.type == "&." for child in ts.children)

        receiver = self.convert(receiver_ts)
        if method_ts is not None:
            name = self._make(NodeKind.IDENT, self._ts_range(method_ts), value=self._text(method_ts), type_name=method_ts.type)
        else:
            # `foo.()` is sugar for `foo.call()`
            name = self._make(NodeKind.IDENT, self._ts_range(ts), value="call", type_name="identifier")
        args = self._arguments(arguments_ts) if arguments_ts is not None else ()

        end_ts = arguments_ts or method_ts
        end_byte = end_ts.end_byte if end_ts is not None and block_ts is not None else ts.end_byte
        kind = NodeKind.CSEND if safe_navigation else NodeKind.SEND
        send = self._make(kind, self.offsets.range(ts.start_byte, end_byte), (receiver, name, *args), type_name=ts.type)
        if block_ts is None:
            return send

        params_ts = block_ts.child_by_field_name("parameters")
        params = self.convert(params_ts)
        body = self._body(block_ts, exclude={"parameters"})
        return self._make(NodeKind.BLOCK, self._ts_range(ts), (send, params, body), type_name=block_ts.type)

    def _arguments(self, ts: TSNode) -> tuple[Node | None, ...]:
        """Argument list with each run of bare `pair`s grouped into one hash."""
        args: list[Node | None] = []
        run: list[TSNode] = []

        def flush():
            if not run:
                return
            rng = self.offsets.range(run[0].start_byte, run[-1].end_byte)
            args.append(self._make(NodeKind.HASH, rng, self._convert_all(run), type_name="bare_hash"))
            run.clear()

        for child in self._named(ts):
            if child.type in ("pair", "hash_splat_argument"):
                run.append(child)
                continue
            flush()
            converted = self.convert(child)
            if converted is not None:
                args.append(converted)
        flush()
        return tuple(args)

    def _parameters(self, ts: TSNode) -> Node:
        params = []
        for child in self._named(ts):
            if child.type == "identifier":
                params.append(self._make(NodeKind.ARG, self._ts_range(child), value=self._text(child), type_name=child.type))
            else:
                params.append(self.convert(child))
        return self._make(NodeKind.ARGS, self._ts_range(ts), tuple(p for p in params if p is not None), type_name=ts.type)

    def _empty_args(self, after: TSNode) -> Node:
        rng = self.offsets.range(after.end_byte, after.end_byte)
        return self._make(NodeKind.ARGS, rng, type_name="method_parameters")

    def _method_name(self, ts: TSNode) -> Node:
        return self._make(NodeKind.IDENT, self._ts_range(ts), value=self._text(ts), type_name=ts.type)

    def _method(self, ts: TSNode) -> Node:
        name_ts = ts.child_by_field_name("name")
        name = self._method_name(name_ts)
        params_ts = ts.child_by_field_name("parameters")
        params = self.convert(params_ts) if params_ts is not None else self._empty_args(name_ts)
        body = self._body(ts, exclude={"name", "parameters"})
        return self._make(NodeKind.DEF, self._ts_range(ts), (name, params, body), type_name=ts.type)

    def _singleton_method(self, ts: TSNode) -> Node:
        receiver = self.convert(ts.child_by_field_name("object"))
        name_ts = ts.child_by_field_name("name")
        name = self._method_name(name_ts)
        params_ts = ts.child_by_field_name("parameters")
        params = self.convert(params_ts) if params_ts is not None else self._empty_args(name_ts)
        body = self._body(ts, exclude={"object", "name", "parameters"})
        return self._make(NodeKind.DEFS, self._ts_range(ts), (receiver, name, params, body), type_name=ts.type)

    def _class(self, ts: TSNode) -> Node:
        name = self.convert(ts.child_by_field_name("name"))
        superclass_ts = ts.child_by_field_name("superclass")
        superclass = None
        if superclass_ts is not None:
            expressions = self._named(superclass_ts)
            superclass = self.convert(expressions[0]) if expressions else None
        body = self._body(ts, exclude={"name", "superclass"})
        return self._make(NodeKind.CLASS, self._ts_range(ts), (name, superclass, body), type_name=ts.type)

    def _module(self, ts: TSNode) -> Node:
        name = self.convert(ts.child_by_field_name("name"))
        body = self._body(ts, exclude={"name"})
        return self._make(NodeKind.MODULE, self._ts_range(ts), (name, body), type_name=ts.type)

    def _singleton_class(self, ts: TSNode) -> Node:
        target = self.convert(ts.child_by_field_name("value"))
        body = self._body(ts, exclude={"value"})
        return self._make(NodeKind.SCLASS, self._ts_range(ts), (target, body), type_name=ts.type)

    def _pair(self, ts: TSNode) -> Node:
        key_ts = ts.child_by_field_name("key")
        value_ts = ts.child_by_field_name("value")
        colon_style = not any(child.type == "=>" for child in ts.children)
        if key_ts is not None and key_ts.type == "string" and colon_style:
            # `"name": value` keys are symbols
            key = self._string(key_ts, symbol=True)
        else:
            key = self.convert(key_ts)
        return self._make(NodeKind.PAIR, self._ts_range(ts), (key, self.convert(value_ts)), type_name=ts.type)

    def _hash(self, ts: TSNode) -> Node:
        return self._make(NodeKind.HASH, self._ts_range(ts), self._convert_all(self._named(ts)), type_name=ts.type)

    def _array(self, ts: TSNode) -> Node:
        return self._make(NodeKind.ARRAY, self._ts_range(ts), self._convert_all(self._named(ts)), type_name=ts.type)

    def _simple_symbol(self, ts: TSNode) -> Node:
        return self._make(NodeKind.SYM, self._ts_range(ts), value=self._text(ts)[1:], type_name=ts.type)

    def _bare_symbol(self, ts: TSNode) -> Node:
        if any(child.type == "interpolation" for child in ts.named_children):
            return self._make(NodeKind.DSYM, self._ts_range(ts), self._convert_all(self._named(ts)), type_name=ts.type)
        return self._make(NodeKind.SYM, self._ts_range(ts), value=self._text(ts), type_name=ts.type)

    def _delimited_symbol(self, ts: TSNode) -> Node:
        return self._string(ts, symbol=True)

    def _string(self, ts: TSNode, symbol: bool = False) -> Node:
        parts = []
        for child in ts.named_children:
            if child.type == "interpolation":
                kind = NodeKind.DSYM if symbol else NodeKind.DSTR
                return self._make(kind, self._ts_range(ts), self._convert_all(self._named(ts)), type_name=ts.type)
            if child.type == "escape_sequence":
                parts.append(_unescape(self._text(child)))
            else:
                parts.append(self._text(child))
        if ts.type == "bare_string" and not ts.named_children:
            parts.append(self._text(ts))
        kind = NodeKind.SYM if symbol else NodeKind.STR
        return self._make(kind, self._ts_range(ts), value="".join(parts), type_name=ts.type)

    def _character(self, ts: TSNode) -> Node:
        text = self._text(ts)[1:]
        value = _unescape(text) if text.startswith("\\") else text
        return self._make(NodeKind.STR, self._ts_range(ts), value=value, type_name=ts.type)

    def _integer(self, ts: TSNode) -> Node:
        return self._make(NodeKind.INT, self._ts_range(ts), value=_parse_integer(self._text(ts)), type_name=ts.type)

    def _float(self, ts: TSNode) -> Node:
        text = self._text(ts).replace("_", "")
        return self._make(NodeKind.FLOAT, self._ts_range(ts), value=float(text.rstrip("ri")), type_name=ts.type)

    def _constant(self, ts: TSNode) -> Node:
        return self._make(NodeKind.CONST, self._ts_range(ts), value=self._text(ts), type_name=ts.type)

    def _scope_resolution(self, ts: TSNode) -> Node:
        scope_ts = ts.child_by_field_name("scope")
        name_ts = ts.child_by_field_name("name")
        if scope_ts is not None:
            scope = self.convert(scope_ts)
        else:
            colons = next(child for child in ts.children if child.type == "::")
            scope = self._make(NodeKind.CBASE, self._ts_range(colons), type_name="::")
        name = self.convert(name_ts)
        return self._make(NodeKind.CONST, self._ts_range(ts), (scope, name), type_name=ts.type)

    def _identifier(self, ts: TSNode) -> Node:
        return self._make(NodeKind.IDENT, self._ts_range(ts), value=self._text(ts), type_name=ts.type)

    def _instance_variable(self, ts: TSNode) -> Node:
        return self._make(NodeKind.IVAR, self._ts_range(ts), value=self._text(ts), type_name=ts.type)

    def _wrapper(self, kind: NodeKind) -> Callable[[TSNode], Node]:
        def handler(ts: TSNode) -> Node:
            return self._make(kind, self._ts_range(ts), self._convert_all(self._named(ts)), type_name=ts.type)

        return handler

    def _generic(self, ts: TSNode) -> Node:
        named = self._named(ts)
        if not named:
            return self._make(NodeKind.OTHER, self._ts_range(ts), value=self._text(ts), type_name=ts.type)
        return self._make(NodeKind.OTHER, self._ts_range(ts), self._convert_all(named), type_name=ts.type)


def _unescape(text: str) -> str:
    """Decode one Ruby escape sequence such as `\\n` or `\\u00e9`."""
    body = text[1:]
    if not body:
        return text
    if body[0] in STRING_ESCAPES and len(body) == 1:
        return STRING_ESCAPES[body[0]]
    if body[0] == "u":
        digits = body[1:].strip("{}")
        return "".join(chr(int(code, 16)) for code in digits.split())
    if body[0] == "x" and len(body) > 1:
        return chr(int(body[1:], 16))
    if all(char in "01234567" for char in body):
        return chr(int(body, 8))
    return body


def _parse_integer(text: str) -> int | str:
    cleaned = text.replace("_", "").lower()
    if cleaned.endswith(("r", "i")):
        return text
    if len(cleaned) > 1 and cleaned[0] == "0" and cleaned[1].isdigit():
        return int(cleaned[1:], 8)
    if cleaned.startswith("0d"):
        return int(cleaned[2:])
    return int(cleaned, 0)
