"""Parcel geometries per commune, from Etalab cadastre GeoJSON extracts."""

from __future__ import annotations

import gzip
import json
from pathlib import Path
from types import MappingProxyType, TracebackType
from typing import Any, Mapping, Protocol

from dvf.common.errors import StageError
from dvf.common.http import HttpClient
from dvf.common.parse import departement_from_commune

ParcelGeometries = Mapping[str, dict[str, Any]]


class GeometryProvider(Protocol):
    epsg: int

    def parcelles(self, code_commune: str) -> ParcelGeometries | None: ...


_GZIP_MAGIC = b"\x1f\x8b"


def _decode_payload(payload: bytes, origin: str) -> dict:
    if payload.startswith(_GZIP_MAGIC):
        try:
            payload = gzip.decompress(payload)
        except OSError as exc:
            raise StageError(f"Corrupt gzip cadastre payload from {origin}") from exc
    try:
        return json.loads(payload)
    except ValueError as exc:
        raise StageError(f"Invalid cadastre JSON payload from {origin}") from exc


def parcelles_from_feature_collection(payload: dict) -> ParcelGeometries:
    """Index a parcel FeatureCollection by parcel id."""
    if not isinstance(payload, dict) or payload.get("type") != "FeatureCollection":
        raise StageError("Cadastre payload is not a GeoJSON FeatureCollection")

    parcelles: dict[str, dict[str, Any]] = {}
    for feature in payload.get("features") or []:
        geometry = feature.get("geometry")
        parcel_id = feature.get("id") or (feature.get("properties") or {}).get("id")
        if not parcel_id or not geometry:
            continue
        parcelles[str(parcel_id)] = geometry
    return MappingProxyType(parcelles)


class CadastreProvider:
    """Looks up parcel geometries for one commune at a time.

    ``mode: local`` reads files under ``data_dir`` following ``path_template``;
    ``mode: remote`` downloads ``url_template``. Both templates accept
    ``{departement}`` and ``{commune}``. A commune without an extract yields
    ``None``.
    """

    def __init__(
        self,
        cadastre_config: dict,
        data_dir: Path,
        *,
        http_client: HttpClient | None = None,
    ) -> None:
        self.mode = cadastre_config["mode"]
        self.url_template = cadastre_config["url_template"]
        self.path_template = cadastre_config["path_template"]
        self.epsg = int(cadastre_config["epsg"])
        self.data_dir = data_dir
        self._owns_client = http_client is None and self.mode == "remote"
        if self._owns_client:
            http_client = HttpClient(rate_per_sec=float(cadastre_config["rate_per_sec"]))
        self.http_client = http_client

    def close(self) -> None:
        if self._owns_client and self.http_client is not None:
            self.http_client.close()

    def __enter__(self) -> "CadastreProvider":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _template_fields(self, code_commune: str) -> dict[str, str]:
        return {"departement": departement_from_commune(code_commune), "commune": code_commune}

    def _read_local(self, code_commune: str) -> bytes | None:
        path = self.data_dir / self.path_template.format(**self._template_fields(code_commune))
        if not path.exists():
            return None
        try:
            return path.read_bytes()
        except OSError as exc:
            raise StageError(f"Unreadable cadastre extract: {path}") from exc

    def _read_remote(self, code_commune: str) -> bytes | None:
        url = self.url_template.format(**self._template_fields(code_commune))
        return self.http_client.get_bytes(url, missing_ok=True)

    def parcelles(self, code_commune: str) -> ParcelGeometries | None:
        if not code_commune:
            return None
        if self.mode == "remote":
            payload = self._read_remote(code_commune)
        else:
            payload = self._read_local(code_commune)
        if payload is None:
            return None
        return parcelles_from_feature_collection(_decode_payload(payload, code_commune))
