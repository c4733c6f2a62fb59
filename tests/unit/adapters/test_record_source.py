"""Unit tests for record sources."""

import orjson
import pytest

from acuref_search.adapters.record_source import (
    SNAPSHOT_KEYS,
    InMemoryRecordSource,
    JsonSnapshotRecordSource,
    RecordSourceError,
    shape_records,
)
from acuref_search.domain.records import DietRecord, EntityType, PointRecord


@pytest.mark.unit
class TestShapeRecords:
    def test_every_type_present(self):
        shaped = shape_records({EntityType.POINT: [{"id": "LI4", "nameEn": "Hegu"}]})

        assert list(shaped) == list(EntityType)
        assert isinstance(shaped[EntityType.POINT][0], PointRecord)
        assert shaped[EntityType.DIET] == []

    def test_non_mapping_row(self):
        with pytest.raises(RecordSourceError, match="expected an object, got list"):
            shape_records({EntityType.HERB: [["ge-gen"]]})

    def test_row_without_id(self):
        with pytest.raises(RecordSourceError, match="Malformed indication row"):
            shape_records({EntityType.INDICATION: [{"label": "Headache"}]})

    def test_snapshot_keys_cover_every_type(self):
        assert set(SNAPSHOT_KEYS.values()) == set(EntityType)


@pytest.mark.unit
class TestInMemoryRecordSource:
    @pytest.mark.asyncio
    async def test_load_records(self, raw_records):
        records = await InMemoryRecordSource(raw_records).load_records()

        assert [r.id for r in records[EntityType.POINT]] == ["LI4", "GB20", "ST36"]
        assert records[EntityType.DIET][0].stored["name"] == "Ginger Tea"

    @pytest.mark.asyncio
    async def test_string_keys_and_replace(self):
        source = InMemoryRecordSource({"diet": [{"id": "congee"}]})
        source.replace(EntityType.DIET, [{"id": "ginger-tea"}])

        records = await source.load_records()

        assert [r.id for r in records[EntityType.DIET]] == ["ginger-tea"]
        assert isinstance(records[EntityType.DIET][0], DietRecord)

    def test_unknown_type_key(self):
        with pytest.raises(ValueError):
            InMemoryRecordSource({"acupoint": []})

    @pytest.mark.asyncio
    async def test_empty_source(self):
        records = await InMemoryRecordSource().load_records()
        assert all(rows == [] for rows in records.values())


@pytest.mark.unit
class TestJsonSnapshotRecordSource:
    @pytest.mark.asyncio
    async def test_reads_store_export(self, snapshot_file):
        records = await JsonSnapshotRecordSource(snapshot_file).load_records()

        assert {t: len(rows) for t, rows in records.items()} == {
            EntityType.POINT: 3,
            EntityType.INDICATION: 3,
            EntityType.TECHNIQUE: 2,
            EntityType.HERB: 2,
            EntityType.DIET: 2,
        }
        assert records[EntityType.POINT][0].searchable["name_pinyin"] == "Hegu"

    @pytest.mark.asyncio
    async def test_entity_type_keys_and_unknown_collections(self, tmp_path):
        path = tmp_path / "snapshot.json"
        path.write_bytes(orjson.dumps({"diet": [{"id": "congee"}], "users": [{"id": "u1"}]}))

        records = await JsonSnapshotRecordSource(str(path)).load_records()

        assert [r.id for r in records[EntityType.DIET]] == ["congee"]
        assert records[EntityType.POINT] == []

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path):
        with pytest.raises(RecordSourceError, match="Failed to read record snapshot"):
            await JsonSnapshotRecordSource(tmp_path / "missing.json").load_records()

    @pytest.mark.asyncio
    async def test_invalid_json(self, tmp_path):
        path = tmp_path / "snapshot.json"
        path.write_text("{not json")

        with pytest.raises(RecordSourceError) as excinfo:
            await JsonSnapshotRecordSource(path).load_records()
        assert isinstance(excinfo.value.__cause__, orjson.JSONDecodeError)

    @pytest.mark.asyncio
    async def test_top_level_must_be_object(self, tmp_path):
        path = tmp_path / "snapshot.json"
        path.write_bytes(orjson.dumps([{"id": "LI4"}]))

        with pytest.raises(RecordSourceError, match="must contain a JSON object"):
            await JsonSnapshotRecordSource(path).load_records()

    @pytest.mark.asyncio
    async def test_collection_must_be_list(self, tmp_path):
        path = tmp_path / "snapshot.json"
        path.write_bytes(orjson.dumps({"points": {"id": "LI4"}}))

        with pytest.raises(RecordSourceError, match="'points' must be a list"):
            await JsonSnapshotRecordSource(path).load_records()

    @pytest.mark.asyncio
    async def test_malformed_row(self, tmp_path):
        path = tmp_path / "snapshot.json"
        path.write_bytes(orjson.dumps({"herbs": [{"name": "Kudzu Root"}]}))

        with pytest.raises(RecordSourceError, match="Malformed herb row"):
            await JsonSnapshotRecordSource(path).load_records()
