"""Decode one vintage's compressed source archive."""

from __future__ import annotations

import csv
import gzip
import zlib
from pathlib import Path
from typing import Iterator

from dvf.common.errors import StageError
from dvf.common.models import Row
from dvf.common.parse import RawRecord
from dvf.pipeline.normalize import normalize_record
from dvf.sources.cultures import ReferenceData

SOURCE_DELIMITER = "|"


def source_path(data_dir: Path, pipeline_config: dict, vintage: str) -> Path:
    return data_dir / pipeline_config["source"]["filename_pattern"].format(vintage=vintage)


def iter_raw_records(path: Path, encoding: str = "utf-8") -> Iterator[RawRecord]:
    if not path.exists():
        raise StageError(f"Missing source archive: {path}")
    try:
        with gzip.open(path, "rt", encoding=encoding, newline="") as f:
            yield from csv.DictReader(f, delimiter=SOURCE_DELIMITER)
    except (OSError, EOFError, zlib.error, UnicodeDecodeError, csv.Error) as exc:
        raise StageError(f"Unreadable source archive {path}: {exc}") from exc


def load_vintage_rows(path: Path, reference: ReferenceData, encoding: str = "utf-8") -> list[Row]:
    return [normalize_record(raw, reference) for raw in iter_raw_records(path, encoding)]
