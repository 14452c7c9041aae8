import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from .engine import LinterEngine
from .models import Correction, Offense

log = logging.getLogger(__name__)


def apply_corrections(source: str, corrections: Iterable[Correction | None]) -> tuple[str, int]:
    """Apply whole corrections in one pass over the original text.

    A correction that overlaps one accepted earlier is skipped; it is picked up
    again when the caller re-lints the result.
    """
    accepted: list[Correction] = []
    for correction in corrections:
        if correction is None:
            continue
        if any(correction.overlaps(other) for other in accepted):
            log.debug("skipping correction at %d-%d: overlaps an earlier one", correction.start, correction.end)
            continue
        accepted.append(correction)

    edits = sorted(
        (edit for correction in accepted for edit in correction.edits),
        key=lambda edit: (edit.start, edit.end),
    )
    result = []
    last_offset = 0
    for edit in edits:
        result.append(source[last_offset : edit.start])
        result.append(edit.replacement)
        last_offset = edit.end
    result.append(source[last_offset:])
    return "".join(result), len(accepted)


@dataclass
class FixResult:
    source: str
    offenses: list[Offense] = field(default_factory=list)
    corrected: int = 0
    passes: int = 0
    parse_errors: list[str] = field(default_factory=list)

    @property
    def modified(self) -> bool:
        return self.corrected > 0


class AutoFixEngine:
    """Lint, apply safe corrections, and re-lint until nothing is left to fix"""

    def __init__(self, engine: LinterEngine, max_passes: int = 10):
        self.engine = engine
        self.max_passes = max_passes

    def fix_string(self, source: str, file_path: Path | None = None) -> FixResult:
        result = FixResult(source=source)
        lint = self.engine.analyze_string(source, file_path)

        while result.passes < self.max_passes:
            corrections = [offense.correction for offense in lint.offenses if offense.correctable]
            if not corrections:
                break
            result.passes += 1
            new_source, applied = apply_corrections(result.source, corrections)
            if new_source == result.source:
                break
            log.debug("pass %d: applied %d correction(s) to %s", result.passes, applied, file_path or "<string>")
            result.source = new_source
            result.corrected += applied
            lint = self.engine.analyze_string(result.source, file_path)
        else:
            log.warning("reached max fix passes (%d) for %s", self.max_passes, file_path or "<string>")

        result.offenses = lint.offenses
        result.parse_errors = lint.parse_errors
        return result

    def fix_file(self, file_path: Path, write: bool = True) -> FixResult:
        file_path = Path(file_path)
        result = self.fix_string(file_path.read_text(encoding="utf-8"), file_path)
        if write and result.modified:
            file_path.write_text(result.source, encoding="utf-8")
        return result
