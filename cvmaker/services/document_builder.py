"""Service that turns a CV record into the renderer-independent document."""

from typing import Callable, Dict, List, Optional
from loguru import logger
from cvmaker.models.cv_models import CVRecord, ITSkill, Skill
from cvmaker.models.document_models import (
    SECTION_ORDER,
    ContactItem,
    DocumentHeader,
    LabeledValue,
    ReferenceEntry,
    RenderedDocument,
    Section,
    SectionKind,
    SkillGroup,
    SkillItem,
    TagList,
    TextBlock,
    TimelineEntry,
)
from cvmaker.utils.locale_helpers import (
    format_date,
    format_date_range,
    get_label,
    get_language_label,
    get_proficiency_label,
    get_skill_level_label,
)
from cvmaker.utils.template_helpers import group_by_category, skill_rating


def _clean(value: Optional[str]) -> str:
    return value.strip() if isinstance(value, str) else ""


def _clean_list(values: Optional[List[str]]) -> List[str]:
    return [v.strip() for v in values or [] if isinstance(v, str) and v.strip()]


def _join(values: List[Optional[str]], separator: str = ", ") -> str:
    return separator.join(v for v in (_clean(value) for value in values) if v)


class DocumentBuilder:
    """
    Single traversal shared by every template and by the PDF export.

    Section inclusion, ordering and text formatting are decided here; the
    back ends only decide how the result looks.
    """

    def __init__(self):
        """Initialize the builder with one section builder per section kind."""
        self._section_builders: Dict[SectionKind, Callable[[CVRecord, str, bool], Optional[Section]]] = {
            SectionKind.PROFESSIONAL_SUMMARY: self._summary_section,
            SectionKind.WORK_EXPERIENCE: self._work_section,
            SectionKind.EDUCATION: self._education_section,
            SectionKind.LANGUAGE_SKILLS: self._language_section,
            SectionKind.IT_SKILLS: self._it_skills_section,
            SectionKind.SKILLS: self._skills_section,
            SectionKind.REFERENCES: self._references_section,
            SectionKind.HOBBIES: self._hobbies_section,
            SectionKind.ADDITIONAL_INFO: self._additional_info_section,
        }

    def build(
        self,
        cv: CVRecord,
        locale: Optional[str] = None,
        group_skills: bool = False,
    ) -> RenderedDocument:
        """
        Build the rendered document for a CV record.

        Empty sections are left out entirely. A section that fails to build is
        logged, reported in ``issues`` and skipped; the rest of the document is
        still produced.

        Args:
            cv: CV record
            locale: Locale code; defaults to the record's language
            group_skills: Group skill sections by category

        Returns:
            RenderedDocument: Header plus the non-empty sections in display order
        """
        locale = getattr(locale, "value", locale) or getattr(cv.language, "value", cv.language)
        issues: List[str] = []

        try:
            header = self._header(cv, locale)
        except Exception as e:
            logger.warning(f"Header of CV {cv.id} is malformed, rendering name only: {e}")
            issues.append(f"header: {e}")
            header = DocumentHeader(fullName=_join(
                [getattr(cv.personalInfo, "firstName", ""), getattr(cv.personalInfo, "lastName", "")], " "
            ))

        sections: List[Section] = []
        for kind in SECTION_ORDER:
            try:
                section = self._section_builders[kind](cv, locale, group_skills)
            except Exception as e:
                logger.warning(f"Skipping malformed section {kind.value} of CV {cv.id}: {e}")
                issues.append(f"{kind.value}: {e}")
                continue
            if section is not None and section.blocks:
                sections.append(section)

        return RenderedDocument(locale=locale, header=header, sections=sections, issues=issues)

    def _header(self, cv: CVRecord, locale: str) -> DocumentHeader:
        info = cv.personalInfo
        address = info.address

        contacts: List[ContactItem] = []
        for kind, value in (
            ("email", info.email),
            ("phone", info.phone),
            ("location", _join([address.street, address.city, address.postalCode, address.country])),
            ("website", info.website),
            ("linkedin", info.linkedin),
            ("github", info.github),
        ):
            if _clean(value):
                contacts.append(ContactItem(kind=kind, value=_clean(value)))

        details: List[LabeledValue] = []
        for key, value in (
            ("dateOfBirth", format_date(_clean(info.dateOfBirth), locale)),
            ("nationality", _clean(info.nationality)),
            ("maritalStatus", _clean(info.maritalStatus)),
            ("drivingLicense", _join(info.drivingLicense or [])),
        ):
            if value:
                details.append(LabeledValue(label=get_label(key, locale), value=value))

        return DocumentHeader(
            fullName=_join([info.firstName, info.lastName], " "),
            photo=_clean(info.photo) or None,
            contacts=contacts,
            details=details,
        )

    def _section(self, kind: SectionKind, locale: str, blocks: list) -> Optional[Section]:
        # Entries without any text (e.g. a freshly added, unfilled form) render nothing
        blocks = [block for block in blocks if any(line for line in block.text_lines())]
        if not blocks:
            return None
        return Section(kind=kind, title=get_label(kind.value, locale), blocks=blocks)

    def _summary_section(self, cv: CVRecord, locale: str, group_skills: bool) -> Optional[Section]:
        text = _clean(cv.professionalSummary)
        return self._section(SectionKind.PROFESSIONAL_SUMMARY, locale, [TextBlock(text=text)] if text else [])

    def _work_section(self, cv: CVRecord, locale: str, group_skills: bool) -> Optional[Section]:
        blocks = [
            TimelineEntry(
                key=exp.id,
                title=_clean(exp.position),
                subtitle=_clean(exp.company),
                dateRange=format_date_range(exp.startDate, exp.endDate, exp.current, locale),
                location=_clean(exp.location),
                description=_clean(exp.description),
                bullets=_clean_list(exp.achievements),
            )
            for exp in cv.workExperience
        ]
        return self._section(SectionKind.WORK_EXPERIENCE, locale, blocks)

    def _education_section(self, cv: CVRecord, locale: str, group_skills: bool) -> Optional[Section]:
        blocks = []
        for edu in cv.education:
            details = [
                LabeledValue(label=get_label(key, locale), value=_clean(value))
                for key, value in (("gpa", edu.gpa), ("thesis", edu.thesis))
                if _clean(value)
            ]
            blocks.append(
                TimelineEntry(
                    key=edu.id,
                    title=_clean(edu.degree),
                    subtitle=_clean(edu.institution),
                    dateRange=format_date_range(edu.startDate, edu.endDate, edu.current, locale),
                    location=_clean(edu.location),
                    description=_clean(edu.description),
                    details=details,
                )
            )
        return self._section(SectionKind.EDUCATION, locale, blocks)

    def _language_section(self, cv: CVRecord, locale: str, group_skills: bool) -> Optional[Section]:
        items = []
        for lang in cv.languageSkills:
            certifications = _join(lang.certifications or [])
            note = f"{get_label('certifications', locale)}: {certifications}" if certifications else ""
            items.append(
                SkillItem(
                    key=lang.id,
                    name=get_language_label(_clean(lang.language), locale),
                    level=get_proficiency_label(lang.proficiency, locale),
                    note=note,
                )
            )
        return self._section(SectionKind.LANGUAGE_SKILLS, locale, [SkillGroup(items=items)] if items else [])

    def _it_skill_item(self, skill: ITSkill, locale: str) -> SkillItem:
        note = ""
        if skill.yearsOfExperience:
            note = f"{skill.yearsOfExperience:g} {get_label('years', locale)}"
        return SkillItem(
            key=skill.id,
            name=_clean(skill.name),
            level=get_skill_level_label(skill.proficiency, locale),
            note=note,
            rating=skill_rating(skill.proficiency),
        )

    def _skill_item(self, skill: Skill, locale: str) -> SkillItem:
        return SkillItem(
            key=skill.id,
            name=_clean(skill.name),
            level=get_skill_level_label(skill.proficiency, locale) if skill.proficiency else "",
            rating=skill_rating(skill.proficiency),
        )

    def _skill_groups(self, skills: list, to_item: Callable, locale: str, group_skills: bool) -> List[SkillGroup]:
        if not skills:
            return []
        if not group_skills:
            return [SkillGroup(items=[to_item(skill, locale) for skill in skills])]
        return [
            SkillGroup(label=_clean(category), items=[to_item(skill, locale) for skill in members])
            for category, members in group_by_category(skills, lambda skill: skill.category)
        ]

    def _it_skills_section(self, cv: CVRecord, locale: str, group_skills: bool) -> Optional[Section]:
        groups = self._skill_groups(cv.itSkills, self._it_skill_item, locale, group_skills)
        return self._section(SectionKind.IT_SKILLS, locale, groups)

    def _skills_section(self, cv: CVRecord, locale: str, group_skills: bool) -> Optional[Section]:
        groups = self._skill_groups(cv.skills, self._skill_item, locale, group_skills)
        return self._section(SectionKind.SKILLS, locale, groups)

    def _references_section(self, cv: CVRecord, locale: str, group_skills: bool) -> Optional[Section]:
        blocks = [
            ReferenceEntry(
                key=ref.id,
                name=_clean(ref.name),
                role=_join([ref.position, ref.company]),
                contacts=[c for c in (_clean(ref.email), _clean(ref.phone)) if c],
                relationship=_clean(ref.relationship),
            )
            for ref in cv.references
        ]
        return self._section(SectionKind.REFERENCES, locale, blocks)

    def _hobbies_section(self, cv: CVRecord, locale: str, group_skills: bool) -> Optional[Section]:
        hobbies = _clean_list(cv.hobbies)
        return self._section(SectionKind.HOBBIES, locale, [TagList(tags=hobbies)] if hobbies else [])

    def _additional_info_section(self, cv: CVRecord, locale: str, group_skills: bool) -> Optional[Section]:
        text = _clean(cv.additionalInfo)
        return self._section(SectionKind.ADDITIONAL_INFO, locale, [TextBlock(text=text)] if text else [])


# Singleton instance
_document_builder: Optional[DocumentBuilder] = None


def get_document_builder() -> DocumentBuilder:
    """
    Get or create the document builder singleton.

    Returns:
        DocumentBuilder: The builder instance
    """
    global _document_builder
    if _document_builder is None:
        _document_builder = DocumentBuilder()
    return _document_builder
