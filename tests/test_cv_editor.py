"""Tests for the CV editing operations."""

import pytest
from pydantic import ValidationError
from cvmaker.models.cv_models import new_cv_record, Locale
from cvmaker.services.cv_editor import add_entry, remove_entry, update_cv, update_entry


def test_new_cv_record():
    record = new_cv_record(Locale.RU)

    assert record.language == Locale.RU
    assert record.template == "modern"
    assert record.createdAt == record.updatedAt
    assert record.workExperience == []
    assert new_cv_record().id != record.id


def test_update_cv_merges_nested_objects(sample_cv):
    updated = update_cv(sample_cv, {"personalInfo": {"phone": "+371 29999999", "address": {"city": "Jūrmala"}}})

    assert updated.personalInfo.phone == "+371 29999999"
    assert updated.personalInfo.firstName == "Anna"
    assert updated.personalInfo.address.city == "Jūrmala"
    assert updated.personalInfo.address.country == "Latvia"


def test_update_cv_refreshes_timestamp_and_keeps_original(sample_cv):
    updated = update_cv(sample_cv, {"professionalSummary": "New summary"})

    assert updated.professionalSummary == "New summary"
    assert updated.updatedAt != sample_cv.updatedAt
    assert sample_cv.professionalSummary == "Marketing specialist with 5+ years of experience."


def test_update_cv_cannot_change_identity(sample_cv):
    updated = update_cv(sample_cv, {"id": "other", "createdAt": "2030-01-01T00:00:00+00:00"})

    assert updated.id == sample_cv.id
    assert updated.createdAt == sample_cv.createdAt


def test_update_cv_rejects_invalid_data(sample_cv):
    with pytest.raises(ValidationError):
        update_cv(sample_cv, {"language": "de"})


def test_add_entry_assigns_id(sample_cv):
    updated = add_entry(sample_cv, "skills", {"name": "Public speaking"})

    (skill,) = updated.skills
    assert skill.name == "Public speaking"
    assert skill.id


def test_add_entry_appends_last(sample_cv):
    updated = add_entry(sample_cv, "workExperience", {"id": "work-3", "position": "Intern", "startDate": "2019-06-01"})

    assert [entry.id for entry in updated.workExperience] == ["work-1", "work-2", "work-3"]


def test_update_entry_keeps_position(sample_cv):
    updated = update_entry(sample_cv, "workExperience", "work-2", {"company": "Digital Solutions SIA", "id": "x"})

    assert [entry.id for entry in updated.workExperience] == ["work-1", "work-2"]
    assert updated.workExperience[1].company == "Digital Solutions SIA"
    assert updated.workExperience[1].position == "Marketing Specialist"


def test_marking_entry_current_clears_end_date(sample_cv):
    updated = update_entry(sample_cv, "workExperience", "work-2", {"current": True})

    assert updated.workExperience[1].endDate is None


def test_remove_entry(sample_cv):
    updated = remove_entry(sample_cv, "itSkills", "it-2")

    assert [skill.name for skill in updated.itSkills] == ["Google Analytics", "Canva"]


def test_unknown_entry_id(sample_cv):
    with pytest.raises(KeyError):
        update_entry(sample_cv, "education", "missing", {"degree": "PhD"})
    with pytest.raises(KeyError):
        remove_entry(sample_cv, "education", "missing")


def test_unknown_section(sample_cv):
    with pytest.raises(ValueError, match="Unknown CV section"):
        add_entry(sample_cv, "awards", {"name": "Best Marketer"})
