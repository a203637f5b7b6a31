from __future__ import annotations

import csv
import gzip
import json
import logging
from pathlib import Path

import pytest

from dvf.common.fs import open_text
from dvf.sources.cultures import build_reference_data

REPO_CONFIG_DIR = Path(__file__).resolve().parents[1] / "config"

DVF_COLUMNS = [
    "Code service CH",
    "Reference document",
    "1 Articles CGI",
    "2 Articles CGI",
    "3 Articles CGI",
    "4 Articles CGI",
    "5 Articles CGI",
    "No disposition",
    "Date mutation",
    "Nature mutation",
    "Valeur fonciere",
    "No voie",
    "B/T/Q",
    "Type de voie",
    "Code voie",
    "Voie",
    "Code postal",
    "Commune",
    "Code departement",
    "Code commune",
    "Prefixe de section",
    "Section",
    "No plan",
    "No Volume",
    "1er lot",
    "Surface Carrez du 1er lot",
    "2e lot",
    "Surface Carrez du 2e lot",
    "3e lot",
    "Surface Carrez du 3e lot",
    "4e lot",
    "Surface Carrez du 4e lot",
    "5e lot",
    "Surface Carrez du 5e lot",
    "Nombre de lots",
    "Code type local",
    "Type local",
    "Identifiant local",
    "Surface reelle bati",
    "Nombre pieces principales",
    "Nature culture",
    "Nature culture speciale",
    "Surface terrain",
]

SAMPLE_VALUES = {
    "No disposition": "000001",
    "Date mutation": "03/01/2018",
    "Nature mutation": "Vente",
    "Valeur fonciere": "150000,00",
    "No voie": "12",
    "Type de voie": "RUE",
    "Code voie": "0420",
    "Voie": "DE LA PAIX",
    "Code postal": "1000",
    "Commune": "BOURG-EN-BRESSE",
    "Code departement": "01",
    "Code commune": "53",
    "Section": "AB",
    "No plan": "123",
    "Nombre de lots": "0",
    "Code type local": "1",
    "Type local": "Maison",
    "Surface reelle bati": "95",
    "Nombre pieces principales": "4",
    "Nature culture": "S",
    "Surface terrain": "420",
}

# Triangle whose vertex mean is (5.033333..., 46.033333...).
TRIANGLE = {
    "type": "Polygon",
    "coordinates": [[[5.0, 46.0], [5.1, 46.0], [5.0, 46.1], [5.0, 46.0]]],
}


def make_raw(overrides: dict[str, str] | None = None, *, blank: bool = False) -> dict[str, str]:
    raw = {column: "" for column in DVF_COLUMNS}
    if not blank:
        raw.update(SAMPLE_VALUES)
    raw.update(overrides or {})
    return raw


def write_source_archive(path: Path, records: list[dict[str, str]]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = ["|".join(DVF_COLUMNS)]
    for record in records:
        lines.append("|".join(record.get(column, "") for column in DVF_COLUMNS))
    with gzip.open(path, "wt", encoding="utf-8", newline="") as f:
        f.write("\n".join(lines) + "\n")
    return path


def read_csv(path: Path) -> list[dict[str, str]]:
    with open_text(path) as f:
        return list(csv.DictReader(f))


def feature_collection(parcelles: dict[str, dict]) -> dict:
    return {
        "type": "FeatureCollection",
        "features": [
            {"type": "Feature", "id": parcel_id, "geometry": geometry, "properties": {"id": parcel_id}}
            for parcel_id, geometry in parcelles.items()
        ],
    }


def write_cadastre_extract(path: Path, parcelles: dict[str, dict]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(gzip.compress(json.dumps(feature_collection(parcelles)).encode("utf-8")))
    return path


class FakeCadastre:
    def __init__(self, parcelles_by_commune: dict[str, dict[str, dict]], epsg: int = 4326) -> None:
        self.parcelles_by_commune = parcelles_by_commune
        self.epsg = epsg
        self.calls: list[str] = []

    def parcelles(self, code_commune: str):
        self.calls.append(code_commune)
        return self.parcelles_by_commune.get(code_commune)


@pytest.fixture
def reference():
    return build_reference_data(
        {"S": "sols", "T": "terres", "J": "jardins"},
        {"JARD": "jardin", "POTAG": "potager"},
    )


@pytest.fixture
def pipeline_config():
    return {
        "vintages": ["2018", "2017"],
        "source": {"filename_pattern": "valeursfoncieres-{vintage}.txt.gz", "encoding": "utf-8"},
        "output": {"communes_dir": "communes", "departements_dir": "departements", "full_filename": "full.csv.gz"},
        "concurrency": 8,
        "cadastre": {
            "mode": "local",
            "url_template": "https://example.test/{departement}/{commune}.json.gz",
            "path_template": "cadastre/{departement}/{commune}/cadastre-{commune}-parcelles.json.gz",
            "epsg": 4326,
            "rate_per_sec": 100,
        },
    }


@pytest.fixture
def test_logger():
    logger = logging.getLogger("dvf_geo.tests")
    logger.handlers.clear()
    logger.addHandler(logging.NullHandler())
    return logger
