"""Pure editing operations on CV records.

Every operation returns an updated copy and refreshes ``updatedAt``; the
record passed in is never modified.
"""

from typing import Any, Dict, Union
from pydantic import BaseModel
from cvmaker.models.cv_models import ENTRY_MODELS, CVRecord, generate_id, utc_now_iso

# Fields that identify a record and are never changed by a merge
PROTECTED_FIELDS = ("id", "createdAt")


def _deep_merge(base: Dict[str, Any], changes: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in changes.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _as_dict(value: Union[BaseModel, Dict[str, Any]]) -> Dict[str, Any]:
    return value.model_dump() if isinstance(value, BaseModel) else dict(value)


def _check_section(section: str) -> None:
    if section not in ENTRY_MODELS:
        raise ValueError(f"Unknown CV section: {section}. Supported: {', '.join(ENTRY_MODELS)}")


def _touch(data: Dict[str, Any]) -> CVRecord:
    data["updatedAt"] = utc_now_iso()
    return CVRecord.model_validate(data)


def update_cv(record: CVRecord, changes: Dict[str, Any]) -> CVRecord:
    """
    Merge a partial update into a record.

    Nested objects (``personalInfo``, ``personalInfo.address``) merge key by
    key; lists and scalars are replaced.

    Args:
        record: Current record
        changes: Partial record

    Returns:
        CVRecord: Updated copy

    Raises:
        ValidationError: If the merged record is invalid
    """
    changes = {key: value for key, value in changes.items() if key not in PROTECTED_FIELDS}
    return _touch(_deep_merge(record.model_dump(), changes))


def add_entry(record: CVRecord, section: str, entry: Union[BaseModel, Dict[str, Any]]) -> CVRecord:
    """
    Append an entry to a repeating section.

    Args:
        record: Current record
        section: Section name, e.g. "workExperience"
        entry: Entry data; a fresh id is assigned when it has none

    Returns:
        CVRecord: Updated copy with the entry last in the section
    """
    _check_section(section)
    entry_data = _as_dict(entry)
    if not entry_data.get("id"):
        entry_data["id"] = generate_id()

    data = record.model_dump()
    data[section] = data[section] + [entry_data]
    return _touch(data)


def update_entry(record: CVRecord, section: str, entry_id: str, changes: Dict[str, Any]) -> CVRecord:
    """
    Merge changes into one entry, keeping its position.

    Args:
        record: Current record
        section: Section name
        entry_id: Id of the entry to update
        changes: Partial entry

    Returns:
        CVRecord: Updated copy

    Raises:
        KeyError: If no entry has that id
    """
    _check_section(section)
    data = record.model_dump()
    entries = data[section]

    for index, existing in enumerate(entries):
        if existing["id"] == entry_id:
            entries[index] = _deep_merge(existing, {k: v for k, v in changes.items() if k != "id"})
            return _touch(data)

    raise KeyError(f"No {section} entry with id {entry_id}")


def remove_entry(record: CVRecord, section: str, entry_id: str) -> CVRecord:
    """
    Delete one entry by id.

    Raises:
        KeyError: If no entry has that id
    """
    _check_section(section)
    data = record.model_dump()
    remaining = [entry for entry in data[section] if entry["id"] != entry_id]
    if len(remaining) == len(data[section]):
        raise KeyError(f"No {section} entry with id {entry_id}")

    data[section] = remaining
    return _touch(data)
