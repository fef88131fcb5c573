"""Local file-backed storage of CV records."""

import json
import os
import re
from pathlib import Path
from typing import List, Optional, Union
from loguru import logger
from pydantic import ValidationError
from pydantic_settings import BaseSettings
from cvmaker.exceptions import StorageFailure
from cvmaker.models.cv_models import CVRecord, utc_now_iso

LATEST_POINTER = "latest"
BACKUP_VERSION = "1.0"

_SAFE_ID = re.compile(r"^[A-Za-z0-9_-]+$")


class StorageSettings(BaseSettings):
    """Storage configuration settings."""

    cv_storage_dir: str = os.getenv("CV_STORAGE_DIR", "~/.cvmaker/cvs")
    cv_autosave_delay: float = float(os.getenv("CV_AUTOSAVE_DELAY", "2.0"))

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


class LocalCVStorage:
    """
    Keyed store of CV records, one JSON file per record.

    A ``latest`` pointer file remembers the most recently saved record.
    """

    def __init__(self, storage_dir: Optional[Union[str, Path]] = None, settings: Optional[StorageSettings] = None):
        """
        Initialize the storage.

        Args:
            storage_dir: Directory holding the record files. Defaults to CV_STORAGE_DIR
            settings: Storage settings (uses defaults if None)
        """
        self.settings = settings or StorageSettings()
        self.storage_dir = Path(storage_dir or self.settings.cv_storage_dir).expanduser()

    def _path(self, cv_id: str) -> Path:
        if not _SAFE_ID.match(cv_id or ""):
            raise StorageFailure(f"Invalid CV id: {cv_id!r}")
        return self.storage_dir / f"{cv_id}.json"

    def _write(self, path: Path, content: str) -> None:
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp_path, path)

    def _read(self, path: Path) -> CVRecord:
        try:
            with open(path, "r", encoding="utf-8") as f:
                return CVRecord.model_validate(json.load(f))
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            raise StorageFailure(f"Could not read CV record {path.name}: {e}") from e

    def save(self, record: CVRecord) -> CVRecord:
        """
        Insert or replace a record and mark it as the latest one.

        Args:
            record: CV record

        Returns:
            CVRecord: The saved record

        Raises:
            StorageFailure: If the record can't be written
        """
        path = self._path(record.id)
        try:
            self._write(path, record.model_dump_json(indent=2))
            self._write(self.storage_dir / LATEST_POINTER, record.id)
        except OSError as e:
            raise StorageFailure(f"Could not save CV {record.id}: {e}") from e

        logger.debug(f"Saved CV {record.id} to {path}")
        return record

    def load_by_id(self, cv_id: str) -> Optional[CVRecord]:
        """
        Load a record by id.

        Returns:
            Optional[CVRecord]: The record, or None if it doesn't exist

        Raises:
            StorageFailure: If the stored file is unreadable
        """
        if not _SAFE_ID.match(cv_id or ""):
            return None
        path = self._path(cv_id)
        if not path.exists():
            return None
        return self._read(path)

    def load_latest(self) -> Optional[CVRecord]:
        """
        Load the most recently saved record.

        Returns:
            Optional[CVRecord]: The record, or None if nothing was saved yet
        """
        pointer = self.storage_dir / LATEST_POINTER
        if not pointer.exists():
            return None
        try:
            cv_id = pointer.read_text(encoding="utf-8").strip()
        except OSError as e:
            raise StorageFailure(f"Could not read latest CV pointer: {e}") from e
        return self.load_by_id(cv_id)

    def list_all(self) -> List[CVRecord]:
        """
        List every stored record, most recently updated first.

        Raises:
            StorageFailure: If a stored file is unreadable
        """
        if not self.storage_dir.exists():
            return []
        records = [self._read(path) for path in self.storage_dir.glob("*.json")]
        return sorted(records, key=lambda record: record.updatedAt, reverse=True)

    def delete(self, cv_id: str) -> bool:
        """
        Delete a record.

        Returns:
            bool: True if a record was deleted, False if it didn't exist
        """
        if not _SAFE_ID.match(cv_id or ""):
            return False
        path = self._path(cv_id)
        if not path.exists():
            return False

        try:
            path.unlink()
            pointer = self.storage_dir / LATEST_POINTER
            if pointer.exists() and pointer.read_text(encoding="utf-8").strip() == cv_id:
                pointer.unlink()
        except OSError as e:
            raise StorageFailure(f"Could not delete CV {cv_id}: {e}") from e

        logger.debug(f"Deleted CV {cv_id}")
        return True

    def export_data(self) -> str:
        """
        Serialize every record as a JSON backup.

        Returns:
            str: JSON document with the records and the export timestamp
        """
        data = {
            "version": BACKUP_VERSION,
            "cvs": [record.model_dump(mode="json") for record in self.list_all()],
            "exportDate": utc_now_iso(),
        }
        return json.dumps(data, ensure_ascii=False, indent=2)

    def import_data(self, json_data: str) -> int:
        """
        Restore records from a JSON backup.

        Records that fail validation are skipped and logged.

        Args:
            json_data: Backup produced by ``export_data``

        Returns:
            int: Number of records imported

        Raises:
            StorageFailure: If the backup isn't valid JSON or has no record list
        """
        try:
            data = json.loads(json_data)
        except json.JSONDecodeError as e:
            raise StorageFailure(f"Invalid backup JSON: {e}") from e

        cvs = data.get("cvs") if isinstance(data, dict) else None
        if not isinstance(cvs, list):
            raise StorageFailure("Backup has no 'cvs' list")

        imported = 0
        for index, raw in enumerate(cvs):
            try:
                record = CVRecord.model_validate(raw)
            except ValidationError as e:
                logger.warning(f"Skipping invalid CV #{index} in backup: {e}")
                continue
            self.save(record)
            imported += 1
        return imported

    def clear(self) -> None:
        """Delete every stored record and the latest pointer."""
        if not self.storage_dir.exists():
            return
        try:
            for path in self.storage_dir.glob("*.json"):
                path.unlink()
            pointer = self.storage_dir / LATEST_POINTER
            if pointer.exists():
                pointer.unlink()
        except OSError as e:
            raise StorageFailure(f"Could not clear CV storage: {e}") from e


# Singleton instance
_cv_storage: Optional[LocalCVStorage] = None


def get_cv_storage(storage_dir: Optional[Union[str, Path]] = None) -> LocalCVStorage:
    """
    Get or create the CV storage singleton.

    Args:
        storage_dir: Optional storage directory

    Returns:
        LocalCVStorage: The storage instance
    """
    global _cv_storage
    if _cv_storage is None:
        _cv_storage = LocalCVStorage(storage_dir)
    return _cv_storage
