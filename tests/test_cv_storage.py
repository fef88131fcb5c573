"""Tests for local CV storage."""

import json
import pytest
from cvmaker.exceptions import StorageFailure
from cvmaker.models.cv_models import CVRecord, PersonalInfo
from cvmaker.services.cv_storage import LocalCVStorage


def make_record(cv_id: str, updated_at: str) -> CVRecord:
    return CVRecord(
        id=cv_id,
        personalInfo=PersonalInfo(firstName="Anna", lastName=cv_id),
        createdAt="2024-01-01T00:00:00+00:00",
        updatedAt=updated_at,
    )


def test_save_and_load(storage, sample_cv):
    storage.save(sample_cv)

    assert storage.load_by_id("cv-anna") == sample_cv
    assert storage.load_by_id("missing") is None


def test_save_replaces_existing(storage, sample_cv):
    storage.save(sample_cv)
    storage.save(sample_cv.model_copy(update={"professionalSummary": "Updated"}))

    assert storage.load_by_id("cv-anna").professionalSummary == "Updated"
    assert len(storage.list_all()) == 1


def test_load_latest(storage):
    assert storage.load_latest() is None

    storage.save(make_record("first", "2024-01-01T00:00:00+00:00"))
    storage.save(make_record("second", "2024-01-02T00:00:00+00:00"))

    assert storage.load_latest().id == "second"


def test_list_all_most_recent_first(storage):
    storage.save(make_record("old", "2024-01-01T00:00:00+00:00"))
    storage.save(make_record("new", "2024-03-01T00:00:00+00:00"))
    storage.save(make_record("middle", "2024-02-01T00:00:00+00:00"))

    assert [record.id for record in storage.list_all()] == ["new", "middle", "old"]


def test_list_all_empty_storage(storage):
    assert storage.list_all() == []


def test_delete(storage, sample_cv):
    storage.save(sample_cv)

    assert storage.delete("cv-anna") is True
    assert storage.load_by_id("cv-anna") is None
    assert storage.load_latest() is None
    assert storage.delete("cv-anna") is False


def test_invalid_id_is_rejected(storage):
    """Test ids can't escape the storage directory."""
    with pytest.raises(StorageFailure, match="Invalid CV id"):
        storage.save(make_record("../outside", "2024-01-01T00:00:00+00:00"))

    assert storage.load_by_id("../outside") is None
    assert storage.delete("../outside") is False


def test_unreadable_record(storage, sample_cv):
    storage.save(sample_cv)
    (storage.storage_dir / "cv-anna.json").write_text("{broken", encoding="utf-8")

    with pytest.raises(StorageFailure, match="Could not read CV record"):
        storage.load_by_id("cv-anna")


def test_export_and_import(storage, sample_cv, tmp_path):
    storage.save(sample_cv)
    backup = storage.export_data()

    data = json.loads(backup)
    assert data["version"] == "1.0"
    assert [cv["id"] for cv in data["cvs"]] == ["cv-anna"]
    assert "exportDate" in data

    restored = LocalCVStorage(tmp_path / "restored")

    assert restored.import_data(backup) == 1
    assert restored.load_by_id("cv-anna") == sample_cv


def test_import_skips_invalid_records(storage, cv_data):
    broken = dict(cv_data, id="cv-broken", language="de")
    backup = json.dumps({"version": "1.0", "cvs": [cv_data, broken]})

    assert storage.import_data(backup) == 1
    assert storage.load_by_id("cv-broken") is None


@pytest.mark.parametrize("backup", ["not json", "[]", '{"cvs": "none"}'])
def test_import_rejects_malformed_backup(storage, backup):
    with pytest.raises(StorageFailure):
        storage.import_data(backup)


def test_clear(storage, sample_cv):
    storage.save(sample_cv)
    storage.clear()

    assert storage.list_all() == []
    assert storage.load_latest() is None
