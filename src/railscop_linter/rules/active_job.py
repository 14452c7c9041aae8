from typing import Any

from railscop_tree_sitter import Node, NodeKind

from ..models import Severity
from ..pattern import compile_pattern
from .base import BaseRule, RuleContext


class ActiveJobInitializeRule(BaseRule):
    """Flags `initialize` defined in a class that directly subclasses ApplicationJob.

    Initialization logic belongs in `before_perform` or `perform`. Only the
    superclass named on the class line is checked; deeper hierarchies are not
    resolved.
    """

    message = "Avoid using `initialize` in ActiveJob. Move initialization logic to `before_perform` or `perform`."

    INITIALIZE_METHOD = compile_pattern("(def :initialize ...)")

    def __init__(self, base_class: str = "ApplicationJob"):
        self.base_class = base_class

    @property
    def rule_id(self) -> str:
        return "Rails/ActiveJobInitialize"

    @property
    def severity(self) -> Severity:
        return Severity.WARNING

    def configure(self, options: dict[str, Any]) -> None:
        self.base_class = str(options.get("base-class", self.base_class)).removeprefix("::")

    def on_def(self, node: Node, ctx: RuleContext) -> None:
        if not self.INITIALIZE_METHOD.matches(node):
            return

        class_node = ctx.tree.find_ancestor(node, NodeKind.CLASS)
        if class_node is None or class_node.parent_class is None:
            return
        if class_node.parent_class.const_name() != self.base_class:
            return

        ctx.add_offense(node)
