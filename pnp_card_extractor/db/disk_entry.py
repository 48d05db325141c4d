"""
On-disk cache entry.

Each entry is one JSON file holding a raw API response. File metadata carries
the timestamps:

- ctime is when the entry was (re)written, used for freshness checks.
- mtime is the Last-Modified time reported by the API, sent back as
  If-Modified-Since on revalidation.

Since ctime can't be set directly, every update rewrites the file: content
goes to a temporary file in the same directory which then replaces the entry,
so readers see either the old or the new content, never a partial write.
"""

import logging
import os
import tempfile
import time
from datetime import UTC, datetime
from pathlib import Path, PurePosixPath

from pnp_card_extractor.models.errors import LastModifiedMissing, WriteError

logger = logging.getLogger(__name__)

ENTRY_SUFFIX = ".json"


def entry_path(root: Path, key: PurePosixPath | str) -> Path:
    """Map a cache key ("pack/core") to its file path under root."""
    return root / f"{key}{ENTRY_SUFFIX}"


class DiskEntry:
    """Adapter for a single cached API response on disk."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._content: bytes | None = None
        self._modified_at: datetime | None = None

    @classmethod
    def fetch(cls, root: Path | None, key: PurePosixPath | str) -> "DiskEntry | None":
        """
        Look up an existing entry.

        Returns:
            The entry, or None if caching is disabled or no file exists.
        """
        if root is None:
            return None
        path = entry_path(root, key)
        return cls(path) if path.exists() else None

    @property
    def modified_at(self) -> datetime:
        """The Last-Modified timestamp returned by the API."""
        if self._modified_at is None:
            self._modified_at = datetime.fromtimestamp(self.path.stat().st_mtime, tz=UTC)
        return self._modified_at

    @property
    def cached_at(self) -> float:
        """When the entry was last written, as a POSIX timestamp."""
        return self.path.stat().st_ctime

    def older_than(self, seconds: float, now: float | None = None) -> bool:
        """True if the entry was written more than `seconds` before `now`."""
        if now is None:
            now = time.time()
        return now > self.cached_at + seconds

    def read(self) -> bytes:
        if self._content is None:
            self._content = self.path.read_bytes()
        return self._content

    def store(
        self,
        content: bytes,
        modified_at: datetime | None,
        now: float | None = None,
    ) -> bytes:
        """
        Replace the entry's content and Last-Modified timestamp.

        Raises:
            LastModifiedMissing: If no Last-Modified timestamp is known
            WriteError: If the file can't be written
        """
        if modified_at is None:
            raise LastModifiedMissing(f"No Last-Modified timestamp for {self.path}")

        self._write(content, modified_at, now)
        self._content = content
        self._modified_at = modified_at
        logger.info(
            "Stored %d bytes into %s (last-modified: %s)",
            len(content),
            self.path,
            modified_at.isoformat(),
        )
        return content

    def touch(self, now: float | None = None) -> bytes:
        """
        Mark the entry as freshly cached without changing its content.

        Raises:
            WriteError: If the file can't be rewritten
        """
        content = self.read()
        self._write(content, self.modified_at, now)
        return content

    def _write(self, content: bytes, modified_at: datetime, now: float | None) -> None:
        if now is None:
            now = time.time()

        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            with os.fdopen(fd, "wb") as f:
                f.write(content)
            os.utime(tmp_name, (now, modified_at.timestamp()))
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as e:
            raise WriteError(f"Could not write {self.path}: {e}") from e
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
