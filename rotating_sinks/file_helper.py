"""Thin wrapper over a single binary file handle used by every sink."""

import logging
import os

from rotating_sinks.errors import FileOpenError
from rotating_sinks.records import FormattedRecord

logger = logging.getLogger(__name__)


class FileHelper:
    def __init__(self):
        self._file = None
        self._filename: str | None = None

    @property
    def filename(self) -> str | None:
        return self._filename

    def open(self, path: str, truncate: bool = False):
        """Open *path* for appending (or truncated), creating parent directories."""
        self.close()
        directory = os.path.dirname(path)
        try:
            if directory:
                os.makedirs(directory, exist_ok=True)
            self._file = open(path, "wb" if truncate else "ab")
        except OSError as e:
            logger.error("Cannot open %s: %s", path, e)
            raise FileOpenError(path, e.errno, e.strerror or "") from e
        self._filename = path
        logger.debug("Opened %s (truncate=%s)", path, truncate)

    def reopen(self, truncate: bool):
        if self._filename is None:
            raise FileOpenError("<none>", reason="reopen called before open")
        self.open(self._filename, truncate)

    def _require_open(self):
        if self._file is None:
            raise FileOpenError(self._filename or "<none>", reason="file is not open")
        return self._file

    def write(self, record: FormattedRecord):
        self._require_open().write(record.data)

    def flush(self):
        if self._file is not None:
            self._file.flush()

    def close(self):
        if self._file is not None and not self._file.closed:
            self._file.close()
        self._file = None

    def size(self) -> int:
        """Real on-disk size of the open file. Flushes first; not meant for the hot path."""
        f = self._require_open()
        f.flush()
        return os.fstat(f.fileno()).st_size

    @staticmethod
    def exists(path: str) -> bool:
        return os.path.exists(path)

    @staticmethod
    def remove(path: str):
        os.remove(path)

    @staticmethod
    def rename(src: str, dst: str):
        os.rename(src, dst)
