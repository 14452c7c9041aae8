from .active_job import ActiveJobInitializeRule
from .base import BaseRule, RuleContext
from .enum_syntax import EnumSyntaxRule

__all__ = ["ActiveJobInitializeRule", "BaseRule", "EnumSyntaxRule", "RuleContext"]
