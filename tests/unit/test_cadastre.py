import gzip
import json
from pathlib import Path

import pytest

from dvf.common.errors import StageError
from dvf.sources.cadastre import CadastreProvider, parcelles_from_feature_collection

from conftest import TRIANGLE, feature_collection, write_cadastre_extract


class FakeHttpClient:
    def __init__(self, payload: bytes | None):
        self.payload = payload
        self.urls: list[str] = []

    def get_bytes(self, url, *, missing_ok=False):
        self.urls.append(url)
        return self.payload


def test_parcelles_from_feature_collection_indexes_by_id():
    payload = feature_collection({"01053000AB0123": TRIANGLE})
    payload["features"].append({"type": "Feature", "geometry": None, "properties": {"id": "x"}})

    parcelles = parcelles_from_feature_collection(payload)

    assert dict(parcelles) == {"01053000AB0123": TRIANGLE}
    with pytest.raises(TypeError):
        parcelles["other"] = TRIANGLE


def test_parcelles_from_feature_collection_rejects_other_payloads():
    with pytest.raises(StageError):
        parcelles_from_feature_collection({"type": "Feature"})


def test_local_provider_reads_gzip_extract(tmp_path: Path, pipeline_config):
    write_cadastre_extract(
        tmp_path / "cadastre" / "01" / "01053" / "cadastre-01053-parcelles.json.gz",
        {"01053000AB0123": TRIANGLE},
    )
    provider = CadastreProvider(pipeline_config["cadastre"], tmp_path)

    assert provider.parcelles("01053")["01053000AB0123"] == TRIANGLE
    assert provider.parcelles("01054") is None
    assert provider.parcelles("") is None


def test_local_provider_rejects_corrupt_extract(tmp_path: Path, pipeline_config):
    path = tmp_path / "cadastre" / "01" / "01053" / "cadastre-01053-parcelles.json.gz"
    path.parent.mkdir(parents=True)
    path.write_bytes(b"not json")
    provider = CadastreProvider(pipeline_config["cadastre"], tmp_path)

    with pytest.raises(StageError):
        provider.parcelles("01053")


def test_remote_provider_formats_url_and_decodes(tmp_path: Path, pipeline_config):
    cfg = dict(pipeline_config["cadastre"], mode="remote")
    body = gzip.compress(json.dumps(feature_collection({"2A004000AB0001": TRIANGLE})).encode("utf-8"))
    client = FakeHttpClient(body)

    with CadastreProvider(cfg, tmp_path, http_client=client) as provider:
        parcelles = provider.parcelles("2A004")

    assert client.urls == ["https://example.test/2A/2A004.json.gz"]
    assert parcelles["2A004000AB0001"] == TRIANGLE


def test_remote_provider_missing_commune(tmp_path: Path, pipeline_config):
    cfg = dict(pipeline_config["cadastre"], mode="remote")
    provider = CadastreProvider(cfg, tmp_path, http_client=FakeHttpClient(None))

    assert provider.parcelles("97105") is None
