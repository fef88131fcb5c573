"""Shared fixtures for the CV Maker tests."""

from io import BytesIO
from typing import Any, Dict
import pytest
from pypdf import PdfReader
from cvmaker.models.cv_models import CVRecord, PersonalInfo
from cvmaker.services.cv_storage import LocalCVStorage


def make_cv_data() -> Dict[str, Any]:
    """English CV with one current job, one past job and one degree."""
    return {
        "id": "cv-anna",
        "template": "europass",
        "language": "en",
        "createdAt": "2024-01-01T00:00:00+00:00",
        "updatedAt": "2024-01-01T00:00:00+00:00",
        "personalInfo": {
            "firstName": "Anna",
            "lastName": "Bērziņa",
            "email": "anna.berzina@email.com",
            "phone": "+371 20000000",
            "address": {"street": "", "city": "Riga", "postalCode": "", "country": "Latvia"},
        },
        "professionalSummary": "Marketing specialist with 5+ years of experience.",
        "workExperience": [
            {
                "id": "work-1",
                "position": "Lead Marketing Specialist",
                "company": "TechStart Latvia",
                "location": "Riga",
                "startDate": "2022-01-01",
                "endDate": "2023-05-01",
                "current": True,
                "description": "Leading the digital marketing team.",
                "achievements": ["Grew website traffic by 150%"],
            },
            {
                "id": "work-2",
                "position": "Marketing Specialist",
                "company": "Digital Solutions",
                "location": "Riga",
                "startDate": "2020-03-01",
                "endDate": "2021-12-31",
                "current": False,
                "description": "Ran e-mail campaigns.",
                "achievements": [],
            },
        ],
        "education": [
            {
                "id": "edu-1",
                "degree": "Master of Marketing",
                "institution": "Riga Business School",
                "location": "Riga",
                "startDate": "2018-09-01",
                "endDate": "2020-06-30",
                "current": False,
                "gpa": "9.2",
            }
        ],
        "languageSkills": [
            {"id": "lang-1", "language": "lv", "proficiency": "Native"},
            {"id": "lang-2", "language": "en", "proficiency": "C1", "certifications": ["IELTS 7.5"]},
        ],
        "itSkills": [
            {"id": "it-1", "name": "Google Analytics", "category": "Tool", "proficiency": "Advanced", "yearsOfExperience": 4},
            {"id": "it-2", "name": "Mailchimp", "category": "Software", "proficiency": "Intermediate", "yearsOfExperience": 3},
            {"id": "it-3", "name": "Canva", "category": "Tool", "proficiency": "Intermediate", "yearsOfExperience": 2},
        ],
    }


def pdf_text(content: bytes) -> str:
    """Extract the text of every page of a PDF."""
    reader = PdfReader(BytesIO(content))
    return "\n".join(page.extract_text() or "" for page in reader.pages)


@pytest.fixture
def cv_data() -> Dict[str, Any]:
    return make_cv_data()


@pytest.fixture
def sample_cv(cv_data) -> CVRecord:
    return CVRecord.model_validate(cv_data)


@pytest.fixture
def minimal_cv() -> CVRecord:
    """Name only, every optional section empty."""
    return CVRecord(id="cv-minimal", personalInfo=PersonalInfo(firstName="Anna", lastName="Bērziņa"))


@pytest.fixture
def storage(tmp_path) -> LocalCVStorage:
    return LocalCVStorage(tmp_path / "cvs")
