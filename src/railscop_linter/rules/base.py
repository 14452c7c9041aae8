from abc import ABC, abstractmethod
from typing import Any

from railscop_tree_sitter import Node, NodeKind, SourceRange, SyntaxTree

from ..corrector import Corrector
from ..models import Correction, Offense, Severity
from ..reporter import OffenseReporter


class RuleContext:
    """What a rule callback sees of the file being analyzed."""

    def __init__(self, rule: "BaseRule", tree: SyntaxTree, reporter: OffenseReporter):
        self.rule = rule
        self.tree = tree
        self.reporter = reporter

    def source_of(self, node: Node | SourceRange) -> str:
        return self.tree.source_of(node)

    def corrector(self) -> Corrector:
        return Corrector()

    def add_offense(
        self,
        anchor: Node | SourceRange,
        message: str | None = None,
        correction: Correction | None = None,
    ) -> Offense:
        return self.reporter.report(
            rule_id=self.rule.rule_id,
            severity=self.rule.severity,
            anchor=anchor,
            message=message or self.rule.message,
            correction=correction,
        )


class BaseRule(ABC):
    """Abstract base class for all linting rules.

    Rules react to nodes through `on_<kind>(node, ctx)` methods, for example
    `on_send` or `on_def`. They must not keep per-file state on `self`.
    """

    # Method names `on_send` is restricted to; empty means every call
    restrict_on_send: frozenset[str] = frozenset()
    # Lowest Rails version the rule applies to, None for any
    minimum_target_rails_version: float | None = None
    message: str = ""

    @property
    @abstractmethod
    def rule_id(self) -> str:
        """Unique rule identifier (e.g., 'Rails/EnumSyntax')."""
        pass

    @property
    @abstractmethod
    def severity(self) -> Severity:
        """Default severity for this rule."""
        pass

    @property
    def name(self) -> str:
        """Human-readable rule name."""
        return self.rule_id.split("/")[-1]

    @property
    def auto_fixable(self) -> bool:
        """Can this rule automatically fix violations?"""
        return False

    @property
    def description(self) -> str:
        """Detailed description of what this rule checks."""
        doc = type(self).__doc__
        return doc.strip().splitlines()[0] if doc else ""

    def configure(self, options: dict[str, Any]) -> None:
        """Apply rule-specific options from the config file."""

    def supports_rails_version(self, version: float) -> bool:
        return self.minimum_target_rails_version is None or version >= self.minimum_target_rails_version

    def handlers(self) -> dict[NodeKind, Any]:
        """Node kinds this rule listens to, mapped to bound callbacks."""
        found = {}
        for kind in NodeKind:
            callback = getattr(self, f"on_{kind.value}", None)
            if callable(callback):
                found[kind] = callback
        return found
