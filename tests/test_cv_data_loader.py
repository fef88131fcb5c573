"""Tests for loading and salvaging CV records."""

import json
import pytest
from cvmaker.exceptions import RenderFailure
from cvmaker.models.cv_models import Locale
from cvmaker.services.cv_data_loader import CVDataLoader


@pytest.fixture
def loader() -> CVDataLoader:
    return CVDataLoader()


def test_valid_record_has_no_issues(loader, cv_data):
    record, issues = loader.load_record(cv_data)

    assert record.id == "cv-anna"
    assert issues == []


def test_current_entry_drops_end_date(loader, cv_data):
    record, _ = loader.load_record(cv_data)

    assert record.workExperience[0].current is True
    assert record.workExperience[0].endDate is None


def test_malformed_entry_is_dropped(loader, cv_data):
    """Test one bad entry doesn't discard its siblings."""
    cv_data["languageSkills"][1]["proficiency"] = "Fluent"

    record, issues = loader.load_record(cv_data)

    assert [lang.id for lang in record.languageSkills] == ["lang-1"]
    assert len(record.workExperience) == 2
    assert len(issues) == 1
    assert issues[0].startswith("languageSkills[1]: entry dropped")


def test_section_that_is_not_a_list_is_dropped(loader, cv_data):
    cv_data["itSkills"] = "Excel, Word"

    record, issues = loader.load_record(cv_data)

    assert record.itSkills == []
    assert issues == ["itSkills: expected a list, section dropped"]


def test_invalid_scalar_is_dropped(loader, cv_data):
    cv_data["language"] = "de"

    record, issues = loader.load_record(cv_data)

    assert record.language == Locale.LV
    assert issues[0].startswith("language: value dropped")


def test_missing_personal_info(loader, cv_data):
    del cv_data["personalInfo"]
    cv_data["education"] = "none"

    record, issues = loader.load_record(cv_data)

    assert record.personalInfo.firstName == ""
    assert "personalInfo: missing" in issues


def test_broken_personal_field_is_dropped(loader, cv_data):
    cv_data["personalInfo"]["drivingLicense"] = "B"
    cv_data["personalInfo"]["address"] = "Riga"

    record, issues = loader.load_record(cv_data)

    assert record.personalInfo.firstName == "Anna"
    assert record.personalInfo.drivingLicense is None
    assert record.personalInfo.address.city == ""
    assert issues == ["personalInfo.address: value dropped", "personalInfo.drivingLicense: value dropped"]


def test_unusable_name_fails(loader, cv_data):
    cv_data["personalInfo"]["firstName"] = {"given": "Anna"}

    with pytest.raises(RenderFailure, match="no usable name"):
        loader.load_record(cv_data)


@pytest.mark.parametrize("raw", [None, [], "cv"])
def test_non_mapping_fails(loader, raw):
    with pytest.raises(RenderFailure):
        loader.load_record(raw)


def test_duplicate_entry_ids_are_replaced(loader, cv_data):
    cv_data["workExperience"][1]["id"] = "work-1"

    record, issues = loader.load_record(cv_data)

    first, second = record.workExperience
    assert first.id == "work-1"
    assert second.id != "work-1"
    assert issues == [f"workExperience: duplicate id work-1 replaced with {second.id}"]


def test_load_record_file_json(loader, cv_data, tmp_path):
    path = tmp_path / "cv.json"
    path.write_text(json.dumps(cv_data, ensure_ascii=False), encoding="utf-8")

    record, issues = loader.load_record_file(path)

    assert record.personalInfo.lastName == "Bērziņa"
    assert issues == []


def test_load_record_file_yaml(loader, tmp_path):
    path = tmp_path / "cv.yml"
    path.write_text("id: cv-yaml\npersonalInfo:\n  firstName: Jānis\n  lastName: Kalniņš\n", encoding="utf-8")

    record, _ = loader.load_record_file(path)

    assert record.id == "cv-yaml"
    assert record.personalInfo.firstName == "Jānis"


def test_load_record_file_errors(loader, tmp_path):
    with pytest.raises(FileNotFoundError):
        loader.load_record_file(tmp_path / "missing.json")

    unsupported = tmp_path / "cv.txt"
    unsupported.write_text("Anna", encoding="utf-8")
    with pytest.raises(ValueError, match="Unsupported CV file type"):
        loader.load_record_file(unsupported)

    broken = tmp_path / "cv.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError, match="Invalid JSON format"):
        loader.load_record_file(broken)


@pytest.mark.parametrize("locale", ["lv", "en", "ru"])
def test_load_sample_cv(loader, locale):
    sample = loader.load_sample_cv(locale)

    assert sample.id == f"sample-{locale}"
    assert sample.language == Locale(locale)
    assert sample.workExperience
    assert sample.education


def test_sample_cv_falls_back_to_latvian(loader):
    assert loader.load_sample_cv("de").id == "sample-lv"
    assert loader.load_sample_cv().id == "sample-lv"


def test_sample_cv_is_stable(loader):
    assert loader.load_sample_cv("en") == loader.load_sample_cv("en")
