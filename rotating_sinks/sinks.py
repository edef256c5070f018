"""File sinks: plain append, size-based rotation and daily (time-based) rotation."""

import logging
import threading
from datetime import datetime, timedelta
from typing import Callable

from rotating_sinks.errors import ConfigurationError, RotationError
from rotating_sinks.file_helper import FileHelper
from rotating_sinks.filenames import FilenameParts, dated, indexed, split
from rotating_sinks.records import FormattedRecord

logger = logging.getLogger(__name__)

FilenameCalculator = Callable[[FilenameParts, datetime], str]


class NullLock:
    """Lock stand-in for sinks confined to a single thread."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


class BaseSink:
    """Runs every public call under the injected lock and delegates I/O to a FileHelper.

    Subclasses implement ``_sink_it``, which returns True when the write rotated.
    """

    def __init__(self, lock=None, file_helper: FileHelper | None = None):
        self._lock = lock if lock is not None else threading.Lock()
        self._file_helper = file_helper if file_helper is not None else FileHelper()
        self._force_flush = False

    @property
    def filename(self) -> str | None:
        return self._file_helper.filename

    def set_force_flush(self, force_flush: bool):
        with self._lock:
            self._force_flush = force_flush

    def write(self, record: FormattedRecord) -> bool:
        with self._lock:
            rotated = self._sink_it(record)
            if self._force_flush:
                self._file_helper.flush()
            return rotated

    def flush(self):
        with self._lock:
            self._file_helper.flush()

    def close(self):
        with self._lock:
            self._file_helper.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def _sink_it(self, record: FormattedRecord) -> bool:
        raise NotImplementedError


class SimpleFileSink(BaseSink):
    """Single target file, no rotation."""

    def __init__(self, filename: str, truncate: bool = False,
                 lock=None, file_helper: FileHelper | None = None):
        super().__init__(lock, file_helper)
        self._file_helper.open(filename, truncate)

    def _sink_it(self, record: FormattedRecord) -> bool:
        self._file_helper.write(record)
        return False


class RotatingFileSink(BaseSink):
    """Rotates when the active file would exceed ``max_size`` bytes.

    Rotated files form the chain ``base.1.ext`` (newest) .. ``base.N.ext``
    (oldest) next to the active ``base.ext``; the content at index N is
    dropped on every rotation.
    """

    DEFAULT_EXTENSION = "log"

    def __init__(self, filename: str | FilenameParts, max_size: int, max_files: int,
                 lock=None, file_helper: FileHelper | None = None):
        if max_size <= 0:
            raise ConfigurationError(f"rotating_file_sink: max_size must be positive, got {max_size}")
        if max_files < 0:
            raise ConfigurationError(f"rotating_file_sink: max_files must be >= 0, got {max_files}")
        super().__init__(lock, file_helper)
        if isinstance(filename, FilenameParts):
            self._parts = filename
        else:
            self._parts = split(filename, self.DEFAULT_EXTENSION)
        self._max_size = max_size
        self._max_files = max_files
        # chain index a failed rotation resumes from; None when no rotation is pending
        self._resume_index: int | None = None
        self._file_helper.open(indexed(self._parts, 0))
        # Expensive, done once: appending to an existing file must count its bytes.
        self._current_size = self._file_helper.size()

    @classmethod
    def from_parts(cls, base_filename: str, extension: str, max_size: int, max_files: int,
                   lock=None, file_helper: FileHelper | None = None) -> "RotatingFileSink":
        return cls(FilenameParts(base_filename, extension), max_size, max_files,
                   lock=lock, file_helper=file_helper)

    @property
    def parts(self) -> FilenameParts:
        return self._parts

    @property
    def current_size(self) -> int:
        return self._current_size

    def backup_files(self) -> list[str]:
        """Existing backup paths ordered newest (index 1) first."""
        with self._lock:
            paths = [indexed(self._parts, i) for i in range(1, self._max_files + 1)]
            return [p for p in paths if self._file_helper.exists(p)]

    def rotate(self):
        with self._lock:
            self._rotate()
            self._current_size = 0

    def _sink_it(self, record: FormattedRecord) -> bool:
        rotated = False
        self._current_size += record.length
        if self._resume_index is not None or self._current_size > self._max_size:
            self._rotate()
            self._current_size = record.length
            rotated = True
        self._file_helper.write(record)
        return rotated

    def _rotate(self):
        # log.txt -> log.1.txt, log.1.txt -> log.2.txt, ..., log.N.txt is dropped.
        # A failed pass resumes at the failed step, so completed renames never repeat.
        helper = self._file_helper
        helper.close()
        if self._resume_index is None:
            self._resume_index = self._max_files
        while self._resume_index > 0:
            i = self._resume_index
            src = indexed(self._parts, i - 1)
            target = indexed(self._parts, i)
            if helper.exists(target):
                try:
                    helper.remove(target)
                except OSError as e:
                    logger.error("Rotation failed removing %s: %s", target, e)
                    raise RotationError(
                        f"rotating_file_sink: failed removing {target}", target, e.errno
                    ) from e
            if helper.exists(src):
                try:
                    helper.rename(src, target)
                except OSError as e:
                    logger.error("Rotation failed renaming %s to %s: %s", src, target, e)
                    raise RotationError(
                        f"rotating_file_sink: failed renaming {src} to {target}", src, e.errno
                    ) from e
            self._resume_index = i - 1
        helper.reopen(truncate=True)
        self._resume_index = None
        logger.info("Rotated %s (%d backups kept)", helper.filename, self._max_files)


class DailyFileSink(BaseSink):
    """Opens a new dated file once a day at ``rotation_hour:rotation_minute`` local time."""

    DEFAULT_EXTENSION = "txt"

    def __init__(self, filename: str | FilenameParts, rotation_hour: int = 0,
                 rotation_minute: int = 0, filename_calculator: FilenameCalculator = dated,
                 clock: Callable[[], datetime] | None = None,
                 lock=None, file_helper: FileHelper | None = None):
        if not 0 <= rotation_hour <= 23 or not 0 <= rotation_minute <= 59:
            raise ConfigurationError(
                f"daily_file_sink: Invalid rotation time {rotation_hour}:{rotation_minute}"
            )
        super().__init__(lock, file_helper)
        if isinstance(filename, FilenameParts):
            self._parts = filename
        else:
            self._parts = split(filename, self.DEFAULT_EXTENSION)
        self._rotation_hour = rotation_hour
        self._rotation_minute = rotation_minute
        self._calc_filename = filename_calculator
        self._clock = clock or datetime.now

        now = self._clock()
        self._file_helper.open(self._calc_filename(self._parts, now))
        self._next_rotation = self.next_rotation(now)

    @classmethod
    def from_parts(cls, base_filename: str, extension: str, rotation_hour: int = 0,
                   rotation_minute: int = 0, **kwargs) -> "DailyFileSink":
        return cls(FilenameParts(base_filename, extension), rotation_hour, rotation_minute, **kwargs)

    @property
    def next_rotation_at(self) -> datetime:
        return self._next_rotation

    def next_rotation(self, now: datetime) -> datetime:
        """First ``rotation_hour:rotation_minute`` strictly after *now*."""
        candidate = now.replace(
            hour=self._rotation_hour, minute=self._rotation_minute, second=0, microsecond=0
        )
        if candidate > now:
            return candidate
        return candidate + timedelta(hours=24)

    def _sink_it(self, record: FormattedRecord) -> bool:
        rotated = False
        now = self._clock()
        if now >= self._next_rotation:
            self._file_helper.open(self._calc_filename(self._parts, now))
            self._next_rotation = self.next_rotation(now)
            logger.info("Opened %s, next rotation at %s",
                        self._file_helper.filename, self._next_rotation.isoformat())
            rotated = True
        self._file_helper.write(record)
        return rotated
