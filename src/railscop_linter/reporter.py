from pathlib import Path

from railscop_tree_sitter import Node, SourceRange

from .models import Correction, Offense, Severity


class OffenseReporter:
    """Accumulates offenses for one file in the order they are reported."""

    def __init__(self, file_path: Path | None = None):
        self.file_path = file_path
        self.offenses: list[Offense] = []

    def report(
        self,
        rule_id: str,
        severity: Severity,
        anchor: Node | SourceRange,
        message: str,
        correction: Correction | None = None,
    ) -> Offense:
        rng = anchor.range if isinstance(anchor, Node) else anchor
        offense = Offense(
            rule_id=rule_id,
            message=message,
            severity=severity,
            range=rng,
            correction=correction,
            file_path=self.file_path,
        )
        self.offenses.append(offense)
        return offense
