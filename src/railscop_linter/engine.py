import logging
from pathlib import Path
from typing import Callable

from railscop_tree_sitter import Node, NodeKind, RubyParser, SyntaxTree

from .models import LintResult, Offense
from .registry import RuleRegistry
from .reporter import OffenseReporter
from .rules.base import BaseRule, RuleContext

log = logging.getLogger(__name__)

DEFAULT_TARGET_RAILS_VERSION = 5.0

Callback = Callable[[Node, RuleContext], None]


class LinterEngine:
    """Core engine: parses a file and streams its nodes to rule callbacks"""

    def __init__(
        self,
        rules: list[BaseRule] | None = None,
        target_rails_version: float = DEFAULT_TARGET_RAILS_VERSION,
    ):
        self.parser = RubyParser()
        self.target_rails_version = target_rails_version
        all_rules = rules if rules is not None else RuleRegistry().get_all_rules()
        self.rules = [rule for rule in all_rules if rule.supports_rails_version(target_rails_version)]
        for rule in all_rules:
            if rule not in self.rules:
                log.debug(
                    "%s disabled: requires Rails %s, target is %s",
                    rule.rule_id,
                    rule.minimum_target_rails_version,
                    target_rails_version,
                )
        self._dispatch = self._build_dispatch()

    def _build_dispatch(self) -> dict[NodeKind, list[tuple[BaseRule, Callback]]]:
        dispatch: dict[NodeKind, list[tuple[BaseRule, Callback]]] = {}
        for rule in self.rules:
            for kind, callback in rule.handlers().items():
                dispatch.setdefault(kind, []).append((rule, callback))
        return dispatch

    def analyze_file(self, file_path: Path) -> LintResult:
        """Run all lint checks on a file"""
        file_path = Path(file_path)
        source = file_path.read_text(encoding="utf-8")
        return self.analyze_string(source, file_path)

    def analyze_string(self, source: str, file_path: Path | None = None) -> LintResult:
        result = self.parser.parse_string(source)
        for error in result.errors:
            log.warning("%s:%s", file_path or "<string>", error)
        offenses = self.investigate(result.tree, file_path)
        return LintResult(offenses=offenses, parse_errors=result.errors)

    def investigate(self, tree: SyntaxTree, file_path: Path | None = None) -> list[Offense]:
        """Walk the tree depth first and invoke callbacks in document order."""
        reporter = OffenseReporter(file_path)
        contexts = {id(rule): RuleContext(rule, tree, reporter) for rule in self.rules}

        for node in tree.walk():
            callbacks = self._dispatch.get(node.kind)
            if not callbacks:
                continue
            for rule, callback in callbacks:
                if node.kind in (NodeKind.SEND, NodeKind.CSEND) and rule.restrict_on_send:
                    if node.method_name not in rule.restrict_on_send:
                        continue
                callback(node, contexts[id(rule)])

        log.debug("%s: %d offense(s)", file_path or "<string>", len(reporter.offenses))
        return reporter.offenses
