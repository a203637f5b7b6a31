"""Filesystem helpers."""

from __future__ import annotations

import csv
import gzip
from pathlib import Path
from typing import IO, Iterable, Mapping


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def read_yaml(path: Path):
    import yaml

    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def is_gzip_path(path: Path) -> bool:
    return path.suffix == ".gz"


def open_text(path: Path, mode: str = "r", encoding: str = "utf-8") -> IO[str]:
    """Open a text file, transparently (de)compressing ``.gz`` paths."""
    if is_gzip_path(path):
        return gzip.open(path, f"{mode}t", encoding=encoding, newline="")
    return path.open(mode, encoding=encoding, newline="")


def write_csv(path: Path, headers: list[str], rows: Iterable[Mapping[str, object]]) -> None:
    ensure_dir(path.parent)
    with open_text(path, "w") as f:
        writer = csv.DictWriter(f, fieldnames=headers, extrasaction="ignore")
        writer.writeheader()
        for row in rows:
            writer.writerow(row)
