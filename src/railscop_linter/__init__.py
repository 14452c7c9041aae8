from .autofix import AutoFixEngine, FixResult, apply_corrections
from .corrector import Corrector
from .engine import DEFAULT_TARGET_RAILS_VERSION, LinterEngine
from .errors import PatternSyntaxError, RailscopError, UnknownRuleError
from .models import Correction, Edit, LintResult, Offense, Severity
from .pattern import MatchResult, NodePattern, compile_pattern
from .registry import RuleRegistry

__all__ = [
    "AutoFixEngine",
    "Correction",
    "Corrector",
    "DEFAULT_TARGET_RAILS_VERSION",
    "Edit",
    "FixResult",
    "LintResult",
    "LinterEngine",
    "MatchResult",
    "NodePattern",
    "Offense",
    "PatternSyntaxError",
    "RailscopError",
    "RuleRegistry",
    "Severity",
    "UnknownRuleError",
    "apply_corrections",
    "compile_pattern",
]
