"""Shared test fixtures and configuration."""

from collections.abc import Iterator
import logging
from pathlib import Path
from typing import Any

import orjson
import pytest

from acuref_search.config import Settings
from acuref_search.domain.records import EntityType
from acuref_search.engine import FederatedSearchEngine


# Rows shaped the way the reference store exports them (camelCase keys)
POINT_ROWS: list[dict[str, Any]] = [
    {
        "id": "LI4",
        "nameEn": "Hegu",
        "namePinyin": "Hegu",
        "nameCharacters": "合谷",
        "meridianId": "LI",
        "location": "On the dorsum of the hand, between the first and second metacarpal bones",
        "indications": ["headache", "toothache", "facial pain"],
        "contraindications": "Pregnancy",
        "category": "source point",
    },
    {
        "id": "GB20",
        "nameEn": "Wind Pool",
        "namePinyin": "Fengchi",
        "meridianId": "GB",
        "location": "Below the occiput, in the depression between the sternocleidomastoid and trapezius",
        "indications": ["headache", "neck pain", "dizziness"],
        "category": "window of the sky",
    },
    {
        "id": "ST36",
        "nameEn": "Leg Three Miles",
        "namePinyin": "Zusanli",
        "meridianId": "ST",
        "location": "Below the knee, one finger width lateral to the anterior crest of the tibia",
        "indications": ["fatigue", "digestive disorders"],
        "category": "he-sea point",
    },
]

INDICATION_ROWS: list[dict[str, Any]] = [
    {"id": "headache", "label": "Headache", "synonyms": ["cephalalgia", "head pain"], "category": "pain"},
    {"id": "neck-pain", "label": "Neck Pain", "synonyms": ["cervicalgia", "stiff neck"], "category": "musculoskeletal"},
    {"id": "insomnia", "label": "Insomnia", "synonyms": ["sleeplessness"], "category": "sleep"},
]

TECHNIQUE_ROWS: list[dict[str, Any]] = [
    {
        "id": "cupping",
        "name": "Cupping",
        "description": "Suction cups applied along the back to relieve neck and shoulder tension",
        "modalityId": "manual",
        "duration": "10-15 minutes",
    },
    {
        "id": "moxa",
        "name": "Moxibustion",
        "description": "Burning mugwort near points to warm the channels",
        "modalityId": "heat",
        "cautions": "Keep away from the face",
    },
]

HERB_ROWS: list[dict[str, Any]] = [
    {
        "id": "ge-gen",
        "name": "Kudzu Root",
        "nameChinese": "Ge Gen",
        "properties": "Releases the exterior, relieves neck stiffness and headache",
        "meridians": ["Spleen", "Stomach"],
        "dosage": "9-15 g",
    },
    {
        "id": "chuan-xiong",
        "name": "Szechuan Lovage Root",
        "nameChinese": "Chuan Xiong",
        "properties": "Moves blood and relieves headache",
        "meridians": ["Liver", "Gallbladder", "Pericardium"],
    },
]

DIET_ROWS: list[dict[str, Any]] = [
    {
        "id": "ginger-tea",
        "name": "Ginger Tea",
        "guidance": "Warm drink for cold-type headache and nausea",
        "properties": "warming",
        "category": "beverage",
    },
    {
        "id": "congee",
        "name": "Rice Congee",
        "guidance": "Easily digested breakfast during recovery",
        "properties": "neutral",
        "category": "grain",
    },
]


@pytest.fixture
def raw_records() -> dict[EntityType, list[dict[str, Any]]]:
    """Fresh copies of the sample catalog, keyed by entity type."""
    return {
        EntityType.POINT: [dict(row) for row in POINT_ROWS],
        EntityType.INDICATION: [dict(row) for row in INDICATION_ROWS],
        EntityType.TECHNIQUE: [dict(row) for row in TECHNIQUE_ROWS],
        EntityType.HERB: [dict(row) for row in HERB_ROWS],
        EntityType.DIET: [dict(row) for row in DIET_ROWS],
    }


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def engine(settings: Settings) -> FederatedSearchEngine:
    return FederatedSearchEngine(settings=settings)


@pytest.fixture
def indexed_engine(
    engine: FederatedSearchEngine, raw_records: dict[EntityType, list[dict[str, Any]]]
) -> FederatedSearchEngine:
    engine.index_data(raw_records)
    return engine


@pytest.fixture
def snapshot_file(tmp_path: Path) -> Path:
    """Write the sample catalog as the store's JSON export."""
    path = tmp_path / "snapshot.json"
    payload = {
        "points": POINT_ROWS,
        "indications": INDICATION_ROWS,
        "techniques": TECHNIQUE_ROWS,
        "herbs": HERB_ROWS,
        "dietItems": DIET_ROWS,
    }
    path.write_bytes(orjson.dumps(payload))
    return path


@pytest.fixture(autouse=True)
def restore_root_logger() -> Iterator[None]:
    """Undo handler changes made by ``configure_logging`` in a test."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
