import logging
from pathlib import Path

import tree_sitter_ruby as tsr
from tree_sitter import Language, Node as TSNode, Parser

from .builder import TreeBuilder
from .node_types import ParseResult

log = logging.getLogger(__name__)

RUBY_LANGUAGE = Language(tsr.language())


class RubyParser:
    """Parses Ruby source with tree-sitter and builds the railscop Node tree."""

    def __init__(self):
        self.parser = Parser(RUBY_LANGUAGE)

    def parse_string(self, source: str) -> ParseResult:
        data = source.encode("utf-8")
        raw_tree = self.parser.parse(data)
        builder = TreeBuilder(source, data)
        tree = builder.build(raw_tree.root_node)
        errors = self._collect_errors(raw_tree.root_node, builder)
        if errors:
            log.debug("tree-sitter reported %d syntax error(s)", len(errors))
        return ParseResult(tree=tree, source=source, errors=errors)

    def parse_file(self, file_path: Path) -> ParseResult:
        source = Path(file_path).read_text(encoding="utf-8")
        return self.parse_string(source)

    def _collect_errors(self, root: TSNode, builder: TreeBuilder) -> list[str]:
        if not root.has_error:
            return []
        errors = []
        stack = [root]
        while stack:
            node = stack.pop()
            if node.type == "ERROR" or node.is_missing:
                rng = builder.offsets.range(node.start_byte, node.end_byte)
                what = f"missing {node.type!r}" if node.is_missing else "unexpected syntax"
                errors.append(f"{rng.line}:{rng.column + 1}: {what}")
                continue
            stack.extend(child for child in reversed(node.children) if child.has_error or child.is_missing)
        return errors
