from railscop_linter.models import Offense

from .models import LintIssue


def offense_to_lint_issue(offense: Offense) -> LintIssue:
    """Convert an internal dataclass offense to an external Pydantic issue"""
    suggestion = None
    if offense.correction is not None:
        suggestion = "; ".join(edit.replacement for edit in offense.correction.edits)
    return LintIssue(
        severity=offense.severity.value.upper(),  # dataclass uses 'warning', Pydantic uses 'WARNING'
        file_path=str(offense.file_path or "<string>"),
        line_number=offense.line,
        column=offense.column + 1,
        rule_id=offense.rule_id,
        message=offense.message,
        suggestion=suggestion,
        auto_fixable=offense.correctable,
    )
