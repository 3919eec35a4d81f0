"""JSON file backed, size-capped history of validation attempts."""

import json
import logging
import os
import shutil
import tempfile
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Union

from address_validator.core.models import AddressInput, HistoryRecord, ValidationResult

logger = logging.getLogger(__name__)

DEFAULT_MAX_HISTORY_SIZE = 20
DEFAULT_MAX_RESULTS = 20


class CorruptHistoryError(RuntimeError):
    """Raised when the history file exists but cannot be decoded."""


class JsonHistoryStore:
    """Most-recent-first log of `HistoryRecord` persisted as one JSON array.

    Every write replaces the whole file. Access is serialised within the
    process; separate processes sharing the file are not coordinated.
    """

    def __init__(self, path: Union[str, Path], max_history_size: int = DEFAULT_MAX_HISTORY_SIZE) -> None:
        if max_history_size < 1:
            raise ValueError("max_history_size must be at least 1")
        self.path = Path(path)
        self.max_history_size = max_history_size
        self._lock = threading.Lock()

    def save(
        self,
        original_query: str,
        address_input: Optional[AddressInput],
        result: ValidationResult,
    ) -> HistoryRecord:
        record = HistoryRecord(
            id=str(uuid.uuid4()),
            timestamp=datetime.now(timezone.utc),
            original_query=original_query,
            original_address_input=address_input,
            validation_result=result,
        )
        with self._lock:
            history = self._load()
            history.insert(0, record)
            if len(history) > self.max_history_size:
                logger.debug("Trimming history from %d to %d records", len(history), self.max_history_size)
                history = history[: self.max_history_size]
            self._write(history)
        logger.info("Saved validation record %s for query=%s", record.id, original_query)
        return record

    def get_history(self, max_results: Optional[int] = DEFAULT_MAX_RESULTS) -> List[HistoryRecord]:
        with self._lock:
            history = self._load()
        if max_results is None:
            return history
        return history[: max(max_results, 0)]

    def get_by_id(self, record_id: str) -> Optional[HistoryRecord]:
        with self._lock:
            history = self._load()
        return next((record for record in history if record.id == record_id), None)

    def clear(self) -> bool:
        with self._lock:
            if not self.path.exists():
                return False
            self._write([])
        logger.info("Cleared validation history at %s", self.path)
        return True

    def _load(self) -> List[HistoryRecord]:
        if not self.path.exists():
            return []
        try:
            content = self.path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise CorruptHistoryError(f"History file {self.path} is not valid UTF-8: {exc}") from exc
        if not content.strip():
            return []

        try:
            raw = json.loads(content)
        except json.JSONDecodeError as exc:
            raise CorruptHistoryError(f"History file {self.path} is not valid JSON: {exc}") from exc
        if not isinstance(raw, list):
            raise CorruptHistoryError(f"History file {self.path} must contain a JSON array")

        try:
            return [HistoryRecord.from_dict(item) for item in raw]
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise CorruptHistoryError(f"History file {self.path} contains an invalid record: {exc}") from exc

    def _write(self, history: List[HistoryRecord]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps([record.to_dict() for record in history], ensure_ascii=False, indent=2)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp_name, self.path)
        except OSError:
            if os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise


def seed_history(path: Union[str, Path], sample_path: Union[str, Path]) -> bool:
    """Copy a sample history into place when no history file exists yet."""
    target = Path(path)
    sample = Path(sample_path)
    if target.exists() or not sample.exists():
        return False
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(sample, target)
    logger.info("Seeded validation history from %s", sample)
    return True
