"""
Repository Pattern - dataset persistence gateway.

Resolves where the authoritative dataset lives (bundled template on first
run, writable working copy afterwards), loads it and writes it back. Saves
are full-document, atomic (temp file + replace) and may run on a background
worker so they never block interactive calls.
"""

import json
import logging
import os
import shutil
import uuid
from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor, wait
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Optional

from ..config import Config
from ..errors import (
    CopyFailedError,
    DecodeFailedError,
    DecodeReason,
    NotFoundError,
    PersistenceError,
    WriteFailedError,
)
from ..models import Dataset

logger = logging.getLogger(__name__)


class BaseRepository(ABC):
    """
    Abstract base class for dataset repositories.

    Defines the contract for all persistence operations.
    """

    @abstractmethod
    def initialize(self) -> Dataset:
        """Load the working copy, bootstrapping it from the template if needed."""
        pass

    @abstractmethod
    def save(self, dataset: Dataset) -> None:
        """Write the full dataset synchronously."""
        pass

    @abstractmethod
    def save_async(self, dataset: Dataset) -> Future:
        """Schedule a full-dataset write off the caller's thread."""
        pass

    def flush(self, timeout: Optional[float] = None) -> bool:
        """Wait for scheduled saves. Returns True if none are left pending."""
        return True

    def close(self) -> None:
        """Release background resources."""
        pass


class JSONRepository(BaseRepository):
    """
    JSON-file repository.

    Provides:
    - First-run bootstrap from a read-only template
    - Atomic full-document writes
    - Background saves applied in submission order (last writer wins)
    """

    def __init__(self, data_file: Optional[str] = None, template_file: Optional[str] = None):
        """
        Initialize JSON repository.

        Args:
            data_file: Writable working copy (defaults to Config.DATA_FILE)
            template_file: Bundled template dataset (defaults to Config.TEMPLATE_FILE)
        """
        self.data_file = Path(data_file or Config.DATA_FILE)
        self.template_file = Path(template_file or Config.TEMPLATE_FILE)

        # One worker keeps background writes in FIFO order
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="myvocab-save")
        self._seq_lock = Lock()
        self._write_lock = Lock()
        self._submitted = 0
        self._written = 0
        self._closed = False

    @property
    def has_working_copy(self) -> bool:
        return self.data_file.is_file()

    # ==================== Loading ====================

    def initialize(self) -> Dataset:
        """
        Return the authoritative dataset.

        Raises:
            NotFoundError: template missing on first run
            CopyFailedError: template could not be copied
            DecodeFailedError: working copy is malformed
            PersistenceError: working copy exists but cannot be read
        """
        if self.has_working_copy:
            logger.info("Loading dataset from %s", self.data_file)
        else:
            logger.info("No working copy at %s, bootstrapping from template", self.data_file)
            self._copy_template()

        return self._read(self.data_file)

    def _copy_template(self) -> None:
        if not self.template_file.is_file():
            raise NotFoundError(f"Template dataset not found: {self.template_file}")

        temp_file = self._temp_path()
        try:
            self.data_file.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(self.template_file, temp_file)
            os.replace(temp_file, self.data_file)
        except OSError as e:
            self._discard(temp_file)
            raise CopyFailedError(
                f"Could not copy template {self.template_file} to {self.data_file}: {e}"
            ) from e

        logger.info("Copied template dataset to %s", self.data_file)

    def _read(self, path: Path) -> Dataset:
        try:
            raw = path.read_bytes()
        except OSError as e:
            raise PersistenceError(f"Could not read dataset {path}: {e}") from e

        try:
            data = json.loads(raw.decode("utf-8-sig"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise DecodeFailedError(DecodeReason.CORRUPTED, f"{path.name} is not valid JSON: {e}") from e

        dataset = Dataset.from_dict(data)
        logger.info(
            "Loaded %d words in %d categories for user '%s'",
            len(dataset.words), len(dataset.categories), dataset.user.id,
        )
        return dataset

    # ==================== Saving ====================

    def save(self, dataset: Dataset) -> None:
        """
        Save the dataset now, on the caller's thread.

        Raises:
            WriteFailedError: the working copy was left untouched
        """
        with self._seq_lock:
            self._submitted += 1
            seq = self._submitted
        self._write_snapshot(seq, dataset.to_dict(), coalesce=False)

    def save_async(self, dataset: Dataset) -> Future:
        """
        Snapshot the dataset and write it on the background worker.

        The snapshot is taken before returning, so later in-memory changes
        never leak into this save. The returned future resolves to True when
        written, False when skipped because a newer snapshot superseded it,
        or raises WriteFailedError.
        """
        payload = dataset.to_dict()
        with self._seq_lock:
            self._submitted += 1
            seq = self._submitted
            return self._executor.submit(self._write_snapshot, seq, payload)

    def _write_snapshot(self, seq: int, payload: Dict[str, Any], coalesce: bool = True) -> bool:
        with self._write_lock:
            with self._seq_lock:
                latest = self._submitted
            if seq < self._written or (coalesce and seq < latest):
                logger.debug("Skipping superseded save #%d (latest #%d)", seq, latest)
                return False

            self._write(payload)
            self._written = seq
            logger.debug("Saved dataset snapshot #%d to %s", seq, self.data_file)
            return True

    def _write(self, payload: Dict[str, Any]) -> None:
        """Atomic write: temp file in the same directory + rename."""
        temp_file = self._temp_path()
        try:
            self.data_file.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_file, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_file, self.data_file)
        except (OSError, TypeError, ValueError) as e:
            self._discard(temp_file)
            raise WriteFailedError(f"Could not save dataset to {self.data_file}: {e}") from e

    def _temp_path(self) -> Path:
        return self.data_file.with_name(f"{self.data_file.name}.{uuid.uuid4().hex[:8]}.tmp")

    @staticmethod
    def _discard(temp_file: Path) -> None:
        try:
            temp_file.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Could not remove temp file %s: %s", temp_file, e)

    def flush(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for every scheduled save to finish (successfully or not).

        Done-callbacks of those saves have run by the time this returns True.
        """
        with self._seq_lock:
            if self._closed:
                return True
            # The worker is FIFO and runs each save's callbacks before taking
            # the next item, so the barrier completes after all of them.
            barrier = self._executor.submit(_barrier)
        done, _ = wait([barrier], timeout=timeout)
        return bool(done)

    def close(self) -> None:
        """Flush pending saves and stop the background worker."""
        self.flush()
        with self._seq_lock:
            self._closed = True
        self._executor.shutdown(wait=True)


def _barrier() -> None:
    pass

