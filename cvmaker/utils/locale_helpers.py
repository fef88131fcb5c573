"""Locale-dependent formatting helpers shared by both renderers."""

import re
from typing import Dict, List, Optional


MONTH_NAMES: Dict[str, List[str]] = {
    "lv": [
        "janvāris", "februāris", "marts", "aprīlis", "maijs", "jūnijs",
        "jūlijs", "augusts", "septembris", "oktobris", "novembris", "decembris",
    ],
    "ru": [
        "январь", "февраль", "март", "апрель", "май", "июнь",
        "июль", "август", "сентябрь", "октябрь", "ноябрь", "декабрь",
    ],
    "en": [
        "January", "February", "March", "April", "May", "June",
        "July", "August", "September", "October", "November", "December",
    ],
}

LANGUAGE_LABELS: Dict[str, Dict[str, str]] = {
    "lv": {
        "lv": "Latviešu", "ru": "Krievu", "en": "Angļu", "de": "Vācu",
        "fr": "Franču", "es": "Spāņu", "it": "Itāļu",
    },
    "ru": {
        "lv": "Латышский", "ru": "Русский", "en": "Английский", "de": "Немецкий",
        "fr": "Французский", "es": "Испанский", "it": "Итальянский",
    },
    "en": {
        "lv": "Latvian", "ru": "Russian", "en": "English", "de": "German",
        "fr": "French", "es": "Spanish", "it": "Italian",
    },
}

PROFICIENCY_LABELS: Dict[str, Dict[str, str]] = {
    "lv": {
        "A1": "A1 - Sākuma līmenis",
        "A2": "A2 - Pamata līmenis",
        "B1": "B1 - Vidējs līmenis",
        "B2": "B2 - Augstāks vidējais līmenis",
        "C1": "C1 - Augsts līmenis",
        "C2": "C2 - Mātes valodas līmenis",
        "Native": "Dzimtā valoda",
    },
    "ru": {
        "A1": "A1 - Начальный уровень",
        "A2": "A2 - Базовый уровень",
        "B1": "B1 - Средний уровень",
        "B2": "B2 - Выше среднего",
        "C1": "C1 - Высокий уровень",
        "C2": "C2 - Уровень носителя",
        "Native": "Родной язык",
    },
    "en": {
        "A1": "A1 - Beginner",
        "A2": "A2 - Elementary",
        "B1": "B1 - Intermediate",
        "B2": "B2 - Upper Intermediate",
        "C1": "C1 - Advanced",
        "C2": "C2 - Proficient",
        "Native": "Native",
    },
}

SKILL_LEVEL_LABELS: Dict[str, Dict[str, str]] = {
    "lv": {
        "Beginner": "Iesācējs", "Intermediate": "Vidējs",
        "Advanced": "Augsts", "Expert": "Eksperts",
    },
    "ru": {
        "Beginner": "Начинающий", "Intermediate": "Средний",
        "Advanced": "Продвинутый", "Expert": "Эксперт",
    },
    "en": {
        "Beginner": "Beginner", "Intermediate": "Intermediate",
        "Advanced": "Advanced", "Expert": "Expert",
    },
}

UI_LABELS: Dict[str, Dict[str, str]] = {
    "lv": {
        "professionalSummary": "Profesionālais kopsavilkums",
        "workExperience": "Darba pieredze",
        "education": "Izglītība",
        "languageSkills": "Valodu prasmes",
        "itSkills": "IT prasmes",
        "skills": "Citas prasmes",
        "references": "Atsauksmes",
        "hobbies": "Intereses",
        "additionalInfo": "Papildu informācija",
        "present": "šobrīd",
        "gpa": "Vidējā atzīme",
        "thesis": "Diplomdarbs",
        "certifications": "Sertifikāti",
        "dateOfBirth": "Dzimšanas datums",
        "nationality": "Pilsonība",
        "maritalStatus": "Ģimenes stāvoklis",
        "drivingLicense": "Autovadītāja apliecība",
        "years": "g.",
        "curriculumVitae": "CURRICULUM VITAE",
        "page": "Lapa",
    },
    "ru": {
        "professionalSummary": "Профессиональное резюме",
        "workExperience": "Опыт работы",
        "education": "Образование",
        "languageSkills": "Знание языков",
        "itSkills": "IT навыки",
        "skills": "Другие навыки",
        "references": "Рекомендации",
        "hobbies": "Увлечения",
        "additionalInfo": "Дополнительная информация",
        "present": "по настоящее время",
        "gpa": "Средний балл",
        "thesis": "Дипломная работа",
        "certifications": "Сертификаты",
        "dateOfBirth": "Дата рождения",
        "nationality": "Гражданство",
        "maritalStatus": "Семейное положение",
        "drivingLicense": "Водительские права",
        "years": "г.",
        "curriculumVitae": "CURRICULUM VITAE",
        "page": "Страница",
    },
    "en": {
        "professionalSummary": "Professional Summary",
        "workExperience": "Work Experience",
        "education": "Education",
        "languageSkills": "Language Skills",
        "itSkills": "IT Skills",
        "skills": "Other Skills",
        "references": "References",
        "hobbies": "Hobbies",
        "additionalInfo": "Additional Information",
        "present": "present",
        "gpa": "GPA",
        "thesis": "Thesis",
        "certifications": "Certifications",
        "dateOfBirth": "Date of birth",
        "nationality": "Nationality",
        "maritalStatus": "Marital status",
        "drivingLicense": "Driving license",
        "years": "yrs",
        "curriculumVitae": "CURRICULUM VITAE",
        "page": "Page",
    },
}

DATE_RANGE_SEPARATOR = " – "

_ISO_DATE = re.compile(r"^\s*(\d{4})-(\d{1,2})(?:-(\d{1,2}))?(?:[T ].*)?\s*$")
_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9\-_.]")
_REPEATED_UNDERSCORES = re.compile(r"_{2,}")


def _locale_key(locale) -> str:
    # Accepts plain strings and the Locale enum
    return getattr(locale, "value", locale) or ""


def format_date(date: Optional[str], locale: str = "lv") -> str:
    """
    Format an ISO date as "Month Year" using locale month names.

    Parsing is purely textual, so the result never depends on the system
    clock or timezone.

    Args:
        date: ISO date string (YYYY-MM-DD, YYYY-MM or a full timestamp)
        locale: Locale code; unknown locales use English month names

    Returns:
        str: Formatted date, "" for empty input, or the input unchanged
             when it is not an ISO date
    """
    if not date:
        return ""
    match = _ISO_DATE.match(str(date))
    if not match:
        return str(date)
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        return str(date)
    months = MONTH_NAMES.get(_locale_key(locale), MONTH_NAMES["en"])
    return f"{months[month - 1]} {year}"


def format_date_range(
    start_date: Optional[str],
    end_date: Optional[str],
    current: bool,
    locale: str = "lv",
) -> str:
    """
    Format the date range of a dated entry.

    Args:
        start_date: Entry start date
        end_date: Entry end date (ignored when current)
        current: Whether the entry is ongoing
        locale: Locale code

    Returns:
        str: "start – end", "start – present", "start" alone when there is no
             end, or "" when nothing is known
    """
    start = format_date(start_date, locale)
    if current:
        end = get_label("present", locale)
    else:
        end = format_date(end_date, locale)
    if start and end:
        return f"{start}{DATE_RANGE_SEPARATOR}{end}"
    return start or end


def get_language_label(code: str, locale: str) -> str:
    """Display label of a language code in the given UI locale, or the code itself."""
    return LANGUAGE_LABELS.get(_locale_key(locale), {}).get(code) or code


def get_proficiency_label(level: str, locale: str) -> str:
    """Descriptive label of a CEFR level (or "Native"), or the level itself."""
    return PROFICIENCY_LABELS.get(_locale_key(locale), {}).get(level) or level


def get_skill_level_label(level: str, locale: str) -> str:
    """Localized Beginner/Intermediate/Advanced/Expert label, or the level itself."""
    return SKILL_LEVEL_LABELS.get(_locale_key(locale), {}).get(level) or level


def get_label(key: str, locale: str) -> str:
    """
    Look up a UI label.

    Args:
        key: Label key (section kind, "present", field name...)
        locale: Locale code

    Returns:
        str: Localized label, the English label, or the key itself
    """
    labels = UI_LABELS.get(_locale_key(locale), {})
    return labels.get(key) or UI_LABELS["en"].get(key) or key


def sanitize_file_name(file_name: str) -> str:
    """
    Make a safe download file name.

    Characters outside [a-zA-Z0-9._-] become "_", runs of underscores
    collapse to one and the result is lowercased. Never returns an empty
    name or one starting with a dot.

    Args:
        file_name: Raw file name

    Returns:
        str: Sanitized file name
    """
    name = _UNSAFE_FILENAME_CHARS.sub("_", file_name or "")
    name = _REPEATED_UNDERSCORES.sub("_", name).lower()
    name = name.lstrip(".")
    if not name.strip("._"):
        return "cv"
    return name


def build_download_file_name(first_name: str, last_name: str) -> str:
    """File name for an exported CV, e.g. "cv_anna_b_rzi_a.pdf"."""
    return sanitize_file_name(f"CV_{first_name}_{last_name}.pdf")
