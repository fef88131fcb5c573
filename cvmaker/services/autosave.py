"""Debounced background saving of the CV being edited."""

import asyncio
from typing import Optional
from loguru import logger
from cvmaker.models.cv_models import CVRecord
from cvmaker.services.cv_storage import LocalCVStorage


class AutoSaver:
    """
    Save a record after a quiet period.

    Every ``schedule`` call restarts the timer, so a burst of edits results in
    a single save of the last version. Background save failures are logged and
    counted; ``flush`` saves immediately and lets failures propagate.
    """

    def __init__(self, storage: LocalCVStorage, delay: Optional[float] = None):
        """
        Initialize the auto-saver.

        Args:
            storage: Storage to save into
            delay: Quiet period in seconds. Defaults to CV_AUTOSAVE_DELAY
        """
        self.storage = storage
        self.delay = storage.settings.cv_autosave_delay if delay is None else delay
        self.saves = 0
        self.failures = 0
        self.last_error: Optional[str] = None
        self._pending: Optional[CVRecord] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def _cancel_timer(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def schedule(self, record: CVRecord) -> None:
        """
        Schedule a save of the record, replacing any pending one.

        Must be called from a running event loop.
        """
        self._pending = record
        self._cancel_timer()
        self._task = asyncio.get_running_loop().create_task(self._save_later())

    async def _save_later(self) -> None:
        await asyncio.sleep(self.delay)
        record, self._pending = self._pending, None
        if record is None:
            return
        try:
            await asyncio.to_thread(self.storage.save, record)
            self.saves += 1
        except Exception as e:
            self.failures += 1
            self.last_error = str(e)
            logger.warning(f"Auto-save of CV {record.id} failed: {e}")

    async def flush(self) -> Optional[CVRecord]:
        """
        Save the pending record now.

        Returns:
            Optional[CVRecord]: The saved record, or None if nothing was pending

        Raises:
            StorageFailure: If the save fails
        """
        self._cancel_timer()
        record, self._pending = self._pending, None
        if record is None:
            return None
        await asyncio.to_thread(self.storage.save, record)
        self.saves += 1
        return record

    async def close(self) -> None:
        """Stop the timer and drop the pending record without saving."""
        task = self._task
        self._cancel_timer()
        self._pending = None
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)
