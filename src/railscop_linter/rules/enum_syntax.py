from railscop_tree_sitter import Node, NodeKind

from ..models import Correction, Severity
from ..pattern import compile_pattern
from ..ruby_literals import dump_string, inspect_symbol, is_label
from .base import BaseRule, RuleContext


class EnumSyntaxRule(BaseRule):
    """Looks for enums written with keyword arguments syntax.

    Keyword-style enums are deprecated since Rails 7.0 and removed in Rails 8.0:

        # bad
        enum status: { active: 0, archived: 1 }, _prefix: true

        # good
        enum :status, { active: 0, archived: 1 }, prefix: true
    """

    message = "Enum defined with keyword arguments in `{enum}` enum declaration. Use positional arguments instead."
    options_message = "Enum defined with deprecated options in `{enum}` enum declaration. Remove the `_` prefix."

    restrict_on_send = frozenset({"enum"})
    minimum_target_rails_version = 7.0
    OPTION_NAMES = frozenset({"prefix", "suffix", "scopes", "default"})

    KEYWORD_ENUM = compile_pattern("(send nil :enum (hash $...))")
    POSITIONAL_ENUM = compile_pattern("(send nil :enum $_ ${array hash} $hash)")
    ENUM_VALUES = compile_pattern("(pair $_ ${array hash})")
    ENUM_OPTION = compile_pattern("(pair $_ $_)")

    @property
    def rule_id(self) -> str:
        return "Rails/EnumSyntax"

    @property
    def severity(self) -> Severity:
        return Severity.WARNING

    @property
    def auto_fixable(self) -> bool:
        return True

    def on_send(self, node: Node, ctx: RuleContext) -> None:
        self._check_keyword_args(node, ctx)
        self._check_enum_options(node, ctx)

    def _check_keyword_args(self, node: Node, ctx: RuleContext) -> None:
        result = self.KEYWORD_ENUM.match(node)
        if result is None:
            return
        (pairs,) = result

        for pair in pairs:
            values_match = self.ENUM_VALUES.match(pair)
            if values_match is None:
                continue
            key, values = values_match
            options = [other for other in pairs if other is not pair]
            correction = self._correct_keyword_args(node, key, values, options, pairs, ctx)
            ctx.add_offense(values, self.message.format(enum=self._enum_name_value(key, ctx)), correction)

    def _check_enum_options(self, node: Node, ctx: RuleContext) -> None:
        result = self.POSITIONAL_ENUM.match(node)
        if result is None:
            return
        key, _, options = result

        for option in options.children:
            option_match = self.ENUM_OPTION.match(option)
            if option_match is None:
                continue
            name, _ = option_match
            if ctx.source_of(name).startswith("_"):
                ctx.add_offense(name, self.options_message.format(enum=self._enum_name_value(key, ctx)))

    def _correct_keyword_args(
        self,
        node: Node,
        key: Node,
        values: Node,
        options: list[Node],
        pairs: tuple[Node, ...],
        ctx: RuleContext,
    ) -> Correction | None:
        # TODO: rewrite calls spanning several lines once indentation of the
        # reconstructed call can be preserved
        if node.range.is_multiline or self._multiple_enum_definitions(pairs, ctx):
            return None

        rendered_options = self._correct_options(options, ctx)
        if rendered_options is None:
            return None

        corrector = ctx.corrector()
        corrector.replace(node, f"enum {self._enum_name(key, ctx)}, {ctx.source_of(values)}{rendered_options}")
        return corrector.build()

    def _multiple_enum_definitions(self, pairs: tuple[Node, ...], ctx: RuleContext) -> bool:
        keys = [ctx.source_of(pair.key).removeprefix("_") for pair in pairs if pair.kind == NodeKind.PAIR]
        return len([key for key in keys if key not in self.OPTION_NAMES]) >= 2

    @staticmethod
    def _enum_name_value(key: Node, ctx: RuleContext) -> str:
        if key.kind in (NodeKind.SYM, NodeKind.STR):
            return key.value
        return ctx.source_of(key)

    @staticmethod
    def _enum_name(key: Node, ctx: RuleContext) -> str:
        if key.kind == NodeKind.STR:
            return dump_string(key.value)
        if key.kind == NodeKind.SYM:
            return inspect_symbol(key.value)
        return ctx.source_of(key)

    def _correct_options(self, options: list[Node], ctx: RuleContext) -> str | None:
        """`, name: value, ...` for the remaining pairs, or None if one can't be rendered."""
        rendered = []
        for option in options:
            option_match = self.ENUM_OPTION.match(option)
            if option_match is None:
                return None
            key, value = option_match
            if value is None:
                return None
            if key.kind == NodeKind.SYM and is_label(key.value):
                name = key.value.removeprefix("_")
            else:
                name = ctx.source_of(key).removeprefix("_")
            rendered.append(f"{name}: {ctx.source_of(value)}")
        if not rendered:
            return ""
        return ", " + ", ".join(rendered)
