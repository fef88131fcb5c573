"""Pydantic models for CV data structures."""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import List, Literal, Optional
from pydantic import BaseModel, Field, model_validator


CEFRLevel = Literal["A1", "A2", "B1", "B2", "C1", "C2", "Native"]
SkillLevel = Literal["Beginner", "Intermediate", "Advanced", "Expert"]
TemplateCategory = Literal["europass", "modern", "traditional", "creative"]

DEFAULT_TEMPLATE_ID = "modern"


class Locale(str, Enum):
    """Supported locales."""

    LV = "lv"
    RU = "ru"
    EN = "en"


DEFAULT_LOCALE = Locale.LV


def generate_id() -> str:
    """
    Generate a collision-resistant entity id.

    Returns:
        str: Random UUID4 string
    """
    return str(uuid.uuid4())


def utc_now_iso() -> str:
    """Current UTC time as an ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat()


class Address(BaseModel):
    """Postal address; every part may be an empty string."""

    street: str = ""
    city: str = ""
    postalCode: str = ""
    country: str = ""


class PersonalInfo(BaseModel):
    """Personal information model."""

    firstName: str = ""
    lastName: str = ""
    email: str = ""
    phone: str = ""
    address: Address = Field(default_factory=Address)
    dateOfBirth: Optional[str] = None
    nationality: Optional[str] = None
    maritalStatus: Optional[str] = None
    drivingLicense: Optional[List[str]] = None
    photo: Optional[str] = None
    website: Optional[str] = None
    linkedin: Optional[str] = None
    github: Optional[str] = None


class _DatedEntry(BaseModel):
    """Shared current/endDate invariant for dated entries."""

    startDate: str = ""
    endDate: Optional[str] = None
    current: bool = False

    @model_validator(mode="after")
    def _drop_end_date_when_current(self):
        if self.current and self.endDate is not None:
            self.endDate = None
        return self


class WorkExperience(_DatedEntry):
    """Work experience entry model."""

    id: str = Field(default_factory=generate_id)
    position: str = ""
    company: str = ""
    location: str = ""
    description: str = ""
    achievements: Optional[List[str]] = None


class Education(_DatedEntry):
    """Education entry model."""

    id: str = Field(default_factory=generate_id)
    degree: str = ""
    institution: str = ""
    location: str = ""
    gpa: Optional[str] = None
    thesis: Optional[str] = None
    description: Optional[str] = None


class LanguageSkill(BaseModel):
    """Language proficiency model."""

    id: str = Field(default_factory=generate_id)
    language: str
    proficiency: CEFRLevel
    certifications: Optional[List[str]] = None


class ITSkill(BaseModel):
    """IT skill model."""

    id: str = Field(default_factory=generate_id)
    name: str
    category: str = "Other"
    proficiency: SkillLevel
    yearsOfExperience: Optional[float] = None


class Skill(BaseModel):
    """Free-form skill model."""

    id: str = Field(default_factory=generate_id)
    name: str
    category: str = ""
    proficiency: Optional[SkillLevel] = None


class Reference(BaseModel):
    """Reference (referee) model."""

    id: str = Field(default_factory=generate_id)
    name: str
    position: str = ""
    company: str = ""
    email: str = ""
    phone: Optional[str] = None
    relationship: str = ""


class CVRecord(BaseModel):
    """Complete CV record model."""

    id: str = Field(default_factory=generate_id)
    personalInfo: PersonalInfo = Field(default_factory=PersonalInfo)
    professionalSummary: Optional[str] = None
    workExperience: List[WorkExperience] = Field(default_factory=list)
    education: List[Education] = Field(default_factory=list)
    languageSkills: List[LanguageSkill] = Field(default_factory=list)
    itSkills: List[ITSkill] = Field(default_factory=list)
    skills: List[Skill] = Field(default_factory=list)
    references: List[Reference] = Field(default_factory=list)
    hobbies: Optional[List[str]] = None
    additionalInfo: Optional[str] = None
    template: str = DEFAULT_TEMPLATE_ID
    language: Locale = DEFAULT_LOCALE
    createdAt: str = Field(default_factory=utc_now_iso)
    updatedAt: str = Field(default_factory=utc_now_iso)

    class Config:
        """Pydantic config."""

        extra = "ignore"


# Repeating sections that hold entries with a stable ``id``
ENTRY_MODELS = {
    "workExperience": WorkExperience,
    "education": Education,
    "languageSkills": LanguageSkill,
    "itSkills": ITSkill,
    "skills": Skill,
    "references": Reference,
}


def new_cv_record(locale: Locale = DEFAULT_LOCALE) -> CVRecord:
    """
    Create an empty CV record with lifecycle defaults.

    Args:
        locale: Locale for UI copy and formatting

    Returns:
        CVRecord: Fresh record with a new id and equal created/updated stamps
    """
    now = utc_now_iso()
    return CVRecord(
        id=generate_id(),
        template=DEFAULT_TEMPLATE_ID,
        language=Locale(locale),
        createdAt=now,
        updatedAt=now,
    )
