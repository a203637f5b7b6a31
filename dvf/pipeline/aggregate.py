"""Order-preserving grouping of rows by administrative code."""

from __future__ import annotations

from typing import Callable, Iterable

from dvf.common.models import Row


def group_rows(rows: Iterable[Row], key: Callable[[Row], str]) -> dict[str, list[Row]]:
    groups: dict[str, list[Row]] = {}
    for row in rows:
        groups.setdefault(key(row), []).append(row)
    return groups


def by_commune(rows: Iterable[Row]) -> dict[str, list[Row]]:
    return group_rows(rows, lambda row: row.code_commune)


def by_departement(rows: Iterable[Row]) -> dict[str, list[Row]]:
    return group_rows(rows, lambda row: row.code_departement)
