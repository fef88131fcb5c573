"""
Intermediate representation of a rendered CV.

Both back ends (screen preview and PDF) consume this structure, so what is
shown, hidden and ordered is decided exactly once.
"""

from enum import Enum
from typing import Annotated, Iterator, List, Literal, Optional, Tuple, Union
from pydantic import BaseModel, Field


class SectionKind(str, Enum):
    """Optional CV sections in display order."""

    PROFESSIONAL_SUMMARY = "professionalSummary"
    WORK_EXPERIENCE = "workExperience"
    EDUCATION = "education"
    LANGUAGE_SKILLS = "languageSkills"
    IT_SKILLS = "itSkills"
    SKILLS = "skills"
    REFERENCES = "references"
    HOBBIES = "hobbies"
    ADDITIONAL_INFO = "additionalInfo"


SECTION_ORDER: List[SectionKind] = list(SectionKind)


class ContactItem(BaseModel):
    """One contact line in the header (email, phone, location, link)."""

    kind: str
    value: str


class LabeledValue(BaseModel):
    """Label/value pair such as nationality or date of birth."""

    label: str
    value: str


class DocumentHeader(BaseModel):
    """Header block: name, optional photo, contacts and personal details."""

    fullName: str = ""
    photo: Optional[str] = None
    contacts: List[ContactItem] = Field(default_factory=list)
    details: List[LabeledValue] = Field(default_factory=list)

    def text_lines(self) -> List[str]:
        lines = [self.fullName] if self.fullName else []
        lines.extend(item.value for item in self.contacts)
        lines.extend(f"{item.label}: {item.value}" for item in self.details)
        return lines


class TextBlock(BaseModel):
    """Free text paragraph."""

    type: Literal["text"] = "text"
    text: str

    def text_lines(self) -> List[str]:
        return [self.text]


class TimelineEntry(BaseModel):
    """Dated entry (job or study) with optional bullets."""

    type: Literal["timeline"] = "timeline"
    key: str
    title: str = ""
    subtitle: str = ""
    dateRange: str = ""
    location: str = ""
    description: str = ""
    details: List[LabeledValue] = Field(default_factory=list)
    bullets: List[str] = Field(default_factory=list)

    def text_lines(self) -> List[str]:
        lines = [v for v in (self.title, self.subtitle, self.dateRange, self.location) if v]
        if self.description:
            lines.append(self.description)
        lines.extend(f"{item.label}: {item.value}" for item in self.details)
        lines.extend(self.bullets)
        return lines


class SkillItem(BaseModel):
    """Skill or language with an optional level description."""

    key: str
    name: str
    level: str = ""
    note: str = ""
    rating: int = 0

    def text(self) -> str:
        parts = [self.name]
        if self.level:
            parts.append(self.level)
        if self.note:
            parts.append(self.note)
        return " | ".join(parts)


class SkillGroup(BaseModel):
    """Skills sharing a category label; ``label`` is empty when ungrouped."""

    type: Literal["skills"] = "skills"
    label: str = ""
    items: List[SkillItem] = Field(default_factory=list)

    def text_lines(self) -> List[str]:
        lines = [self.label] if self.label else []
        lines.extend(item.text() for item in self.items)
        return lines


class ReferenceEntry(BaseModel):
    """Referee contact card."""

    type: Literal["reference"] = "reference"
    key: str
    name: str
    role: str = ""
    contacts: List[str] = Field(default_factory=list)
    relationship: str = ""

    def text_lines(self) -> List[str]:
        lines = [self.name]
        if self.role:
            lines.append(self.role)
        lines.extend(self.contacts)
        if self.relationship:
            lines.append(self.relationship)
        return lines


class TagList(BaseModel):
    """Flat list of short tags (hobbies)."""

    type: Literal["tags"] = "tags"
    tags: List[str] = Field(default_factory=list)

    def text_lines(self) -> List[str]:
        return list(self.tags)


Block = Annotated[
    Union[TextBlock, TimelineEntry, SkillGroup, ReferenceEntry, TagList],
    Field(discriminator="type"),
]


class Section(BaseModel):
    """One non-empty CV section with its heading and content blocks."""

    kind: SectionKind
    title: str
    blocks: List[Block] = Field(default_factory=list)

    def text_lines(self) -> List[str]:
        lines = [self.title]
        for block in self.blocks:
            lines.extend(block.text_lines())
        return lines


class RenderedDocument(BaseModel):
    """Ordered, fully formatted CV content independent of presentation."""

    locale: str
    header: DocumentHeader
    sections: List[Section] = Field(default_factory=list)
    issues: List[str] = Field(default_factory=list)

    def section_kinds(self) -> List[SectionKind]:
        return [section.kind for section in self.sections]

    def outline(self) -> Iterator[Tuple[SectionKind, str]]:
        """Yield ``(section kind, section text)`` pairs in display order."""
        for section in self.sections:
            yield section.kind, "\n".join(section.text_lines())

    def plain_text(self) -> str:
        lines = self.header.text_lines()
        for section in self.sections:
            lines.extend(section.text_lines())
        return "\n".join(lines)
