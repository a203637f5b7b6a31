"""Geolocated CSV export at commune, department and national level."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from dvf.common.constants import COORDINATE_PRECISION
from dvf.common.errors import StageError
from dvf.common.fs import write_csv
from dvf.common.models import OUTPUT_COLUMNS, Row


def _serialize_value(value: object) -> object:
    if value is None:
        return ""
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        # Fixed point; str() switches to exponent notation below 1e-4.
        return f"{value:.{COORDINATE_PRECISION}f}".rstrip("0").rstrip(".")
    return value


def _serialize_row(row: Row) -> dict:
    return {key: _serialize_value(value) for key, value in row.to_dict().items()}


def write_rows(path: Path, rows: Iterable[Row]) -> Path:
    try:
        write_csv(path, OUTPUT_COLUMNS, (_serialize_row(row) for row in rows))
    except OSError as exc:
        raise StageError(f"Cannot write export {path}: {exc}") from exc
    return path


def vintage_dir(dist_dir: Path, vintage: str) -> Path:
    return dist_dir / vintage


def commune_path(dist_dir: Path, output_config: dict, vintage: str, code_departement: str, code_commune: str) -> Path:
    return vintage_dir(dist_dir, vintage) / output_config["communes_dir"] / code_departement / f"{code_commune}.csv"


def departement_path(dist_dir: Path, output_config: dict, vintage: str, code_departement: str) -> Path:
    return vintage_dir(dist_dir, vintage) / output_config["departements_dir"] / f"{code_departement}.csv.gz"


def full_path(dist_dir: Path, output_config: dict, vintage: str) -> Path:
    return vintage_dir(dist_dir, vintage) / output_config["full_filename"]
