from .errors import UnknownRuleError
from .rules.base import BaseRule


class RuleRegistry:
    """Registry for managing and loading linting rules"""

    def __init__(self, load_builtins: bool = True):
        self._rules: list[BaseRule] = []
        if load_builtins:
            self._load_builtin_rules()

    def register(self, rule: BaseRule):
        if any(existing.rule_id == rule.rule_id for existing in self._rules):
            raise ValueError(f"rule {rule.rule_id!r} is already registered")
        self._rules.append(rule)

    def get_all_rules(self) -> list[BaseRule]:
        return list(self._rules)

    def get_rule(self, rule_id: str) -> BaseRule:
        for rule in self._rules:
            if rule.rule_id == rule_id:
                return rule
        raise UnknownRuleError(f"unknown rule {rule_id!r}")

    def get_enabled_rules(self, select: list[str] | None = None, ignore: list[str] | None = None) -> list[BaseRule]:
        """Rules whose id starts with a selected prefix and with no ignored prefix."""
        select = select or [""]
        ignore = ignore or []
        return [
            rule
            for rule in self._rules
            if any(rule.rule_id.startswith(prefix) for prefix in select)
            and not any(rule.rule_id.startswith(prefix) for prefix in ignore)
        ]

    def _load_builtin_rules(self):
        from .rules.active_job import ActiveJobInitializeRule
        from .rules.enum_syntax import EnumSyntaxRule

        self.register(ActiveJobInitializeRule())
        self.register(EnumSyntaxRule())
