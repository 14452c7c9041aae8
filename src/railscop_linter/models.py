from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from railscop_tree_sitter import SourceRange


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    STYLE = "style"

    @property
    def rank(self) -> int:
        return SEVERITY_RANK[self]


SEVERITY_RANK = {
    Severity.ERROR: 4,
    Severity.WARNING: 3,
    Severity.INFO: 2,
    Severity.STYLE: 1,
}


@dataclass(frozen=True)
class Edit:
    """Replace `source[start:end]` of the original text with `replacement`."""

    start: int
    end: int
    replacement: str

    def overlaps(self, other: "Edit") -> bool:
        if self.start == self.end or other.start == other.end:
            # An insertion only conflicts with a replacement that strictly contains it
            point, span = (self, other) if self.start == self.end else (other, self)
            return span.start < point.start < span.end
        return self.start < other.end and other.start < self.end


@dataclass(frozen=True)
class Correction:
    """Non-overlapping edits applied together or not at all."""

    edits: tuple[Edit, ...]

    @property
    def start(self) -> int:
        return self.edits[0].start

    @property
    def end(self) -> int:
        return max(edit.end for edit in self.edits)

    def overlaps(self, other: "Correction") -> bool:
        return any(mine.overlaps(theirs) for mine in self.edits for theirs in other.edits)


@dataclass
class Offense:
    """A reported rule violation"""

    rule_id: str
    message: str
    severity: Severity
    range: SourceRange
    correction: Correction | None = None
    file_path: Path | None = None

    @property
    def line(self) -> int:
        return self.range.line

    @property
    def column(self) -> int:
        return self.range.column

    @property
    def correctable(self) -> bool:
        return self.correction is not None

    @property
    def status(self) -> str:
        return "correctable" if self.correctable else "manual"


@dataclass
class LintResult:
    """Offenses for one file plus any parse errors"""

    offenses: list[Offense] = field(default_factory=list)
    parse_errors: list[str] = field(default_factory=list)
