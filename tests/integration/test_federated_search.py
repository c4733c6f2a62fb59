"""End-to-end: JSON export -> refresh -> federated search -> refresh again."""

import anyio
import orjson
import pytest

from acuref_search import EntityType, FederatedSearchEngine, IndexBuildError, SearchFilters
from acuref_search.adapters import JsonSnapshotRecordSource, RecordSourceError
from acuref_search.config import Settings


@pytest.fixture
def engine():
    return FederatedSearchEngine(settings=Settings(_env_file=None))


@pytest.mark.integration
class TestSnapshotLifecycle:
    @pytest.mark.asyncio
    async def test_refresh_search_and_suggest(self, engine, snapshot_file):
        await engine.refresh(JsonSnapshotRecordSource(snapshot_file))

        results = engine.search("headache")
        keys = [(r.type, r.id) for r in results]

        assert (EntityType.POINT, "LI4") in keys
        assert (EntityType.INDICATION, "headache") in keys
        assert (EntityType.HERB, "ge-gen") in keys
        assert [r.score for r in results] == sorted((r.score for r in results), reverse=True)
        assert all(r.snippet is None or len(r.snippet) <= 150 for r in results)

        point = next(r for r in results if r.id == "LI4")
        assert point.title == "LI4 — Hegu"
        assert point.data["contraindications"] == "Pregnancy"

        assert engine.auto_suggest("neck p") == ["neck pain"]
        assert engine.search("neck", SearchFilters(type=EntityType.TECHNIQUE))[0].id == "cupping"

    @pytest.mark.asyncio
    async def test_refresh_picks_up_store_changes(self, engine, snapshot_file):
        source = JsonSnapshotRecordSource(snapshot_file)
        await engine.refresh(source)

        payload = orjson.loads(snapshot_file.read_bytes())
        payload["points"] = [row for row in payload["points"] if row["id"] != "GB20"]
        payload["herbs"].append({"id": "bai-zhi", "name": "Angelica Root", "properties": "Frontal headache"})
        snapshot_file.write_bytes(orjson.dumps(payload))

        await engine.refresh(source)

        ids = {r.id for r in engine.search("headache")}
        assert "GB20" not in ids
        assert "bai-zhi" in ids
        assert engine.generation == 2

    @pytest.mark.asyncio
    async def test_broken_snapshot_keeps_serving(self, engine, snapshot_file):
        source = JsonSnapshotRecordSource(snapshot_file)
        await engine.refresh(source)
        before = engine.search("headache")

        snapshot_file.write_text("{truncated")
        with pytest.raises(RecordSourceError):
            await engine.refresh(source)

        assert engine.generation == 1
        assert engine.search("headache") == before

    def test_rejected_rebuild_keeps_serving(self, engine, raw_records):
        engine.index_data(raw_records)

        raw_records[EntityType.DIET].append({"name": "Row without id"})
        with pytest.raises(IndexBuildError):
            engine.index_data(raw_records)

        assert {r.id for r in engine.search("congee")} == {"congee"}


@pytest.mark.integration
class TestConcurrentRefresh:
    @pytest.mark.asyncio
    async def test_queries_interleaved_with_refresh(self, engine, snapshot_file):
        await engine.refresh(JsonSnapshotRecordSource(snapshot_file))
        generations = []

        async def query_loop():
            for _ in range(20):
                ids = {r.id for r in engine.search("headache")}
                # one generation at a time: the old catalog has GB20, the new one only ST36
                assert ("GB20" in ids) != ("ST36" in ids)
                generations.append(engine.generation)
                await anyio.sleep(0)

        async def refresh_loop():
            payload = orjson.loads(snapshot_file.read_bytes())
            payload["points"] = [{"id": "ST36", "indications": ["headache"]}]
            snapshot_file.write_bytes(orjson.dumps(payload))
            await anyio.sleep(0)
            await engine.refresh(JsonSnapshotRecordSource(snapshot_file))

        async with anyio.create_task_group() as tg:
            tg.start_soon(query_loop)
            tg.start_soon(refresh_loop)

        assert generations == sorted(generations)
        assert engine.generation == 2
