"""Service for loading CV records from raw data, JSON/YAML files and the bundled samples."""

import json
import yaml
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
from loguru import logger
from pydantic import ValidationError
from cvmaker.exceptions import RenderFailure
from cvmaker.models.cv_models import (
    DEFAULT_LOCALE,
    ENTRY_MODELS,
    Address,
    CVRecord,
    Locale,
    PersonalInfo,
    generate_id,
)

# Without a name there is nothing left to render
REQUIRED_PERSONAL_FIELDS = ("firstName", "lastName")


def _describe(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    return f"{location}: {first['msg']}" if location else first["msg"]


class CVDataLoader:
    """Service to load and validate CV records."""

    def __init__(self, data_dir: Optional[Path] = None):
        """
        Initialize the CV data loader.

        Args:
            data_dir: Directory containing the sample CV files. Defaults to cvmaker/data/
        """
        if data_dir is None:
            package_dir = Path(__file__).parent.parent
            data_dir = package_dir / "data"
        self.data_dir = data_dir

    def load_record(self, raw: Any) -> Tuple[CVRecord, List[str]]:
        """
        Validate a raw CV mapping, salvaging what can be salvaged.

        A fully valid mapping is returned as is. Otherwise every well-formed
        section and entry is kept, and each malformed piece is dropped and
        reported as an issue.

        Args:
            raw: Mapping shaped like a persisted CV record

        Returns:
            Tuple[CVRecord, List[str]]: The record and the problems found in it

        Raises:
            RenderFailure: If the input is not a mapping or personal info is unusable
        """
        if not isinstance(raw, dict):
            raise RenderFailure("CV record must be a JSON object")

        try:
            record = CVRecord.model_validate(raw)
            issues: List[str] = []
        except ValidationError as e:
            logger.warning(f"CV record {raw.get('id', '?')} is malformed, salvaging: {_describe(e)}")
            record, issues = self._salvage(raw)

        issues.extend(self._dedupe_entry_ids(record))
        return record, issues

    def _salvage(self, raw: Dict[str, Any]) -> Tuple[CVRecord, List[str]]:
        issues: List[str] = []
        salvaged: Dict[str, Any] = {"personalInfo": self._salvage_personal_info(raw.get("personalInfo"), issues)}

        for key, value in raw.items():
            if key == "personalInfo":
                continue
            if key in ENTRY_MODELS:
                if not isinstance(value, list):
                    issues.append(f"{key}: expected a list, section dropped")
                    continue
                entries = []
                for index, entry in enumerate(value):
                    try:
                        entries.append(ENTRY_MODELS[key].model_validate(entry))
                    except ValidationError as e:
                        issues.append(f"{key}[{index}]: entry dropped ({_describe(e)})")
                salvaged[key] = entries
            elif key in CVRecord.model_fields:
                try:
                    CVRecord.model_validate({key: value})
                    salvaged[key] = value
                except ValidationError as e:
                    issues.append(f"{key}: value dropped ({_describe(e)})")

        return CVRecord.model_validate(salvaged), issues

    @staticmethod
    def _salvage_personal_info(value: Any, issues: List[str]) -> PersonalInfo:
        if value is None:
            issues.append("personalInfo: missing")
            return PersonalInfo()
        if not isinstance(value, dict):
            raise RenderFailure("personalInfo must be an object", issues)

        try:
            return PersonalInfo.model_validate(value)
        except ValidationError as e:
            broken = {str(err["loc"][0]) for err in e.errors() if err["loc"]}

        if broken.intersection(REQUIRED_PERSONAL_FIELDS):
            raise RenderFailure("personalInfo has no usable name", issues)

        kept = {key: field for key, field in value.items() if key not in broken}
        for key in sorted(broken):
            issues.append(f"personalInfo.{key}: value dropped")
        if "address" in broken:
            kept["address"] = Address()

        try:
            return PersonalInfo.model_validate(kept)
        except ValidationError as e:
            raise RenderFailure(f"personalInfo is unusable: {_describe(e)}", issues)

    @staticmethod
    def _dedupe_entry_ids(record: CVRecord) -> List[str]:
        # Entry ids are render keys and edit targets, so they must be unique per section
        issues: List[str] = []
        for section in ENTRY_MODELS:
            seen = set()
            for entry in getattr(record, section):
                if entry.id in seen:
                    new_id = generate_id()
                    issues.append(f"{section}: duplicate id {entry.id} replaced with {new_id}")
                    entry.id = new_id
                seen.add(entry.id)
        return issues

    def load_record_file(self, path: Path) -> Tuple[CVRecord, List[str]]:
        """
        Import a CV record from a JSON or YAML file.

        Args:
            path: File path (.json, .yaml or .yml)

        Returns:
            Tuple[CVRecord, List[str]]: The record and the problems found in it

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the file type is unsupported or the content can't be parsed
            RenderFailure: If the content is not a usable CV record
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"CV file not found: {path}")

        suffix = path.suffix.lower()
        try:
            with open(path, "r", encoding="utf-8") as f:
                if suffix == ".json":
                    raw = json.load(f)
                elif suffix in (".yaml", ".yml"):
                    raw = yaml.safe_load(f)
                else:
                    raise ValueError(f"Unsupported CV file type: {suffix or path.name}")
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON format in {path}: {e}")
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML format in {path}: {e}")

        return self.load_record(raw)

    def load_sample_cv(self, locale: str = DEFAULT_LOCALE.value) -> CVRecord:
        """
        Load the sample CV shown by the template selector.

        Args:
            locale: Locale code; unknown locales fall back to Latvian

        Returns:
            CVRecord: Validated sample record

        Raises:
            FileNotFoundError: If the sample file doesn't exist
            ValueError: If the sample data is invalid
        """
        locale = getattr(locale, "value", locale)
        if locale not in [member.value for member in Locale]:
            locale = DEFAULT_LOCALE.value

        filepath = self.data_dir / f"sample-cv-{locale}.yaml"
        if not filepath.exists():
            raise FileNotFoundError(f"Sample CV file not found: {filepath}")

        try:
            with open(filepath, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML format in {filepath}: {e}")

        try:
            return CVRecord.model_validate(data)
        except ValidationError as e:
            raise ValueError(f"Invalid sample CV in {filepath}. Validation error: {e}")


# Singleton instance
_data_loader: Optional[CVDataLoader] = None


def get_data_loader(data_dir: Optional[Path] = None) -> CVDataLoader:
    """
    Get or create the CV data loader singleton.

    Args:
        data_dir: Optional directory for sample CV files

    Returns:
        CVDataLoader: The data loader instance
    """
    global _data_loader
    if _data_loader is None:
        _data_loader = CVDataLoader(data_dir)
    return _data_loader
