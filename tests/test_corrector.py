from railscop_linter.autofix import apply_corrections
from railscop_linter.corrector import Corrector
from railscop_linter.models import Correction, Edit
from railscop_tree_sitter import NodeKind, SourceRange


def span(start, end):
    return SourceRange(start=start, end=end, line=1, column=start, end_line=1)


def test_empty_corrector_builds_nothing():
    assert Corrector().build() is None


def test_edits_are_sorted_by_offset():
    corrector = Corrector()
    corrector.replace(span(10, 12), "b")
    corrector.insert_before(span(0, 3), "a")

    correction = corrector.build()

    assert [edit.start for edit in correction.edits] == [0, 10]
    assert correction.start == 0
    assert correction.end == 12


def test_overlapping_replacements_withhold_the_correction():
    corrector = Corrector()
    corrector.replace(span(0, 10), "x")
    corrector.replace(span(5, 15), "y")

    assert corrector.build() is None


def test_adjacent_replacements_do_not_conflict():
    corrector = Corrector()
    corrector.replace(span(0, 5), "x")
    corrector.replace(span(5, 10), "y")

    assert corrector.build() is not None


def test_insertion_inside_a_replacement_conflicts():
    corrector = Corrector()
    corrector.replace(span(0, 10), "x")
    corrector.insert_after(span(2, 4), "!")

    assert corrector.build() is None


def test_insertion_at_replacement_boundary_is_allowed():
    corrector = Corrector()
    corrector.replace(span(2, 6), "x")
    corrector.insert_before(span(2, 6), "(")
    corrector.insert_after(span(2, 6), ")")

    correction = corrector.build()

    assert apply_corrections("ab1234cd", [correction]) == ("ab(x)cd", 1)


def test_remove_and_node_targets(parse):
    tree = parse("enum :status, [:a], _prefix: true\n").tree
    options = [node for node in tree.walk() if node.kind == NodeKind.HASH][0]

    corrector = Corrector()
    corrector.remove(options)
    source, applied = apply_corrections(tree.source, [corrector.build()])

    assert source == "enum :status, [:a], \n"
    assert applied == 1


def test_edit_overlap_rules():
    assert Edit(0, 5, "").overlaps(Edit(4, 8, ""))
    assert not Edit(0, 5, "").overlaps(Edit(5, 8, ""))
    assert Edit(0, 5, "").overlaps(Edit(3, 3, ""))
    assert not Edit(0, 5, "").overlaps(Edit(0, 0, ""))
    assert not Edit(3, 3, "a").overlaps(Edit(3, 3, "b"))


def test_apply_corrections_skips_overlapping_correction_whole():
    source = "0123456789"
    first = Correction((Edit(0, 2, "AB"), Edit(8, 10, "YZ")))
    second = Correction((Edit(4, 5, "-"), Edit(9, 10, "!")))
    third = Correction((Edit(5, 6, "+"),))

    result, applied = apply_corrections(source, [first, None, second, third])

    assert result == "AB234+67YZ"
    assert applied == 2


def test_apply_corrections_without_corrections_returns_source():
    assert apply_corrections("enum :a, [1]\n", []) == ("enum :a, [1]\n", 0)
