import logging

from railscop_tree_sitter import Node, SourceRange

from .models import Correction, Edit

log = logging.getLogger(__name__)


class Corrector:
    """Collects edits against the original source of one file.

    `build()` returns `None` instead of a Correction when nothing was recorded or
    when two edits would overlap; a missing fix is preferred to a wrong one.
    """

    def __init__(self):
        self._edits: list[Edit] = []
        self._conflict = False

    @staticmethod
    def _bounds(target: Node | SourceRange) -> tuple[int, int]:
        rng = target.range if isinstance(target, Node) else target
        return rng.start, rng.end

    def _add(self, edit: Edit):
        for existing in self._edits:
            if existing.overlaps(edit):
                log.debug("overlapping edits %s and %s; correction withheld", existing, edit)
                self._conflict = True
        self._edits.append(edit)

    def replace(self, target: Node | SourceRange, text: str):
        start, end = self._bounds(target)
        self._add(Edit(start, end, text))

    def remove(self, target: Node | SourceRange):
        self.replace(target, "")

    def insert_before(self, target: Node | SourceRange, text: str):
        start, _ = self._bounds(target)
        self._add(Edit(start, start, text))

    def insert_after(self, target: Node | SourceRange, text: str):
        _, end = self._bounds(target)
        self._add(Edit(end, end, text))

    def build(self) -> Correction | None:
        if self._conflict or not self._edits:
            return None
        ordered = sorted(enumerate(self._edits), key=lambda item: (item[1].start, item[1].end, item[0]))
        return Correction(tuple(edit for _, edit in ordered))
