import json

import pytest

from scholar_metrics.models import DataSource
from scholar_metrics.services import MetricsNormalizer
from scholar_metrics.sources import SnapshotSource, SourceError


@pytest.mark.asyncio
async def test_missing_snapshot_is_a_failure(tmp_path):
    source = SnapshotSource(tmp_path / "missing.json")

    with pytest.raises(SourceError, match="introuvable"):
        async with source:
            await source.fetch_raw("abc")


@pytest.mark.asyncio
async def test_invalid_json_is_a_failure(tmp_path):
    path = tmp_path / "snapshot.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(SourceError, match="invalide"):
        await SnapshotSource(path).fetch_raw("abc")


@pytest.mark.asyncio
async def test_non_object_json_is_a_failure(tmp_path):
    path = tmp_path / "snapshot.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")

    with pytest.raises(SourceError):
        await SnapshotSource(path).fetch_raw("abc")


@pytest.mark.asyncio
async def test_snapshot_does_not_open_http_client(tmp_path):
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps({"citations": 3}), encoding="utf-8")
    source = SnapshotSource(path)

    async with source:
        raw = await source.fetch_raw("abc")
        assert source.client is None

    assert raw == {"citations": 3}


@pytest.mark.asyncio
async def test_saved_snapshot_restores_the_same_metrics(tmp_path, serpapi_payload):
    normalizer = MetricsNormalizer()
    live = normalizer.normalize(serpapi_payload, DataSource.SERPAPI)
    source = SnapshotSource(tmp_path / "nested" / "snapshot.json")

    source.save(live)
    restored = normalizer.normalize(await source.fetch_raw("abc"), DataSource.SNAPSHOT)

    assert restored.citation_count == live.citation_count
    assert restored.h_index == live.h_index
    assert restored.i10_index == live.i10_index
    assert restored.citations_since == live.citations_since
    assert restored.citations_by_year == live.citations_by_year
    assert restored.papers == live.papers
    assert restored.author_name == live.author_name
    assert restored.author_affiliation == live.author_affiliation
    assert restored.data_source is DataSource.SNAPSHOT


def test_save_leaves_no_temporary_files(tmp_path, serpapi_payload):
    metrics = MetricsNormalizer().normalize(serpapi_payload, DataSource.SERPAPI)
    path = tmp_path / "snapshot.json"

    SnapshotSource(path).save(metrics)
    SnapshotSource(path).save(metrics)

    assert [p.name for p in tmp_path.iterdir()] == ["snapshot.json"]
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["citations"] == 50
    assert "lastUpdated" in data


def test_failed_write_leaves_no_temporary_file(tmp_path, serpapi_payload, monkeypatch):
    metrics = MetricsNormalizer().normalize(serpapi_payload, DataSource.SERPAPI)
    path = tmp_path / "snapshot.json"

    def disk_full(fd):
        raise OSError(28, "No space left on device")

    monkeypatch.setattr("scholar_metrics.sources.snapshot.os.fsync", disk_full)

    with pytest.raises(OSError):
        SnapshotSource(path).save(metrics)

    assert list(tmp_path.iterdir()) == []
