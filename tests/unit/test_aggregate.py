from dvf.pipeline.aggregate import by_commune, by_departement, group_rows
from dvf.pipeline.normalize import normalize_record

from conftest import make_raw


def _row(reference, departement, commune, plan):
    return normalize_record(
        make_raw({"Code departement": departement, "Code commune": commune, "No plan": plan}),
        reference,
    )


def test_group_rows_preserves_first_seen_order(reference):
    a = _row(reference, "01", "1", "1")
    b = _row(reference, "01", "2", "2")
    c = _row(reference, "01", "1", "3")

    groups = by_commune([a, b, c])

    assert list(groups) == ["01001", "01002"]
    assert groups["01001"] == [a, c]
    assert groups["01002"] == [b]


def test_group_rows_by_departement(reference):
    rows = [
        _row(reference, "2A", "4", "1"),
        _row(reference, "01", "53", "2"),
        _row(reference, "2A", "17", "3"),
    ]

    groups = by_departement(rows)

    assert list(groups) == ["2A", "01"]
    assert [row.code_commune for row in groups["2A"]] == ["2A004", "2A017"]


def test_group_rows_returns_fresh_groups(reference):
    rows = [_row(reference, "01", "1", "1")]

    first = group_rows(rows, lambda row: row.code_commune)
    second = group_rows(rows, lambda row: row.code_commune)

    assert first == second
    assert first is not second
    assert first["01001"] is not second["01001"]
