"""Folder scanner that builds content-addressed snapshots."""

import hashlib
from pathlib import Path
from typing import List, Optional

from folder_mirror.events import EventSink
from folder_mirror.logging_setup import get_logger
from folder_mirror.snapshot import Snapshot

logger = get_logger()

CHUNK_SIZE = 64 * 1024


class ScanError(Exception):
    """Raised when a folder cannot be listed at all."""

    pass


def fingerprint_file(path: Path) -> bytes:
    """Return the SHA-256 digest of a file's whole content."""
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.digest()


class Scanner:
    """Scans the top level of a folder and fingerprints its files."""

    def __init__(
        self,
        ignore_extensions: List[str] | None = None,
        ignore_filenames_prefix: List[str] | None = None,
        ignore_filenames_exact: List[str] | None = None,
        error_sink: Optional[EventSink] = None,
    ):
        """Initialize scanner with ignore rules.

        Args:
            ignore_extensions: Extensions to ignore (e.g., ['.tmp', '.bak'])
            ignore_filenames_prefix: Filename prefixes to ignore
            ignore_filenames_exact: Exact filenames to ignore
            error_sink: Receives a message for every file that could not be read
        """
        self.ignore_extensions = set(f for f in (ignore_extensions or []) if f)
        self.ignore_filenames_prefix = set(f for f in (ignore_filenames_prefix or []) if f)
        self.ignore_filenames_exact = set(f for f in (ignore_filenames_exact or []) if f)
        self.error_sink = error_sink

    def _should_ignore(self, filename: str) -> bool:
        """Check if file should be ignored."""
        if filename in self.ignore_filenames_exact:
            return True

        for prefix in self.ignore_filenames_prefix:
            if filename.startswith(prefix):
                return True

        for ext in self.ignore_extensions:
            if filename.endswith(ext):
                return True

        return False

    def _report(self, message: str) -> None:
        if self.error_sink is not None:
            self.error_sink.operation_error(message)

    def build_snapshot(self, root_path: str) -> Snapshot:
        """Fingerprint every file directly inside ``root_path``.

        Sub-directories are not descended into. A file that cannot be read
        is reported and left out. A folder that cannot be listed is not
        treated as empty, since that would read as every file being deleted.

        Args:
            root_path: Folder to scan

        Returns:
            Dict mapping file name to SHA-256 digest

        Raises:
            ScanError: If the folder itself cannot be listed
        """
        result: Snapshot = {}
        root = Path(root_path)

        try:
            entries = sorted(root.iterdir())
        except (OSError, IOError) as e:
            logger.warning(f"Could not list directory {root_path}: {e}")
            raise ScanError(f"Could not list directory {root_path}: {e}") from e

        for file_path in entries:
            filename = file_path.name

            try:
                if not file_path.is_file():
                    continue
            except OSError as e:
                logger.warning(f"Could not stat {filename} in {root_path}: {e}")
                self._report(str(e))
                continue

            if self._should_ignore(filename):
                logger.debug(f"Ignoring file: {filename}")
                continue

            try:
                result[filename] = fingerprint_file(file_path)
            except (OSError, IOError) as e:
                logger.warning(f"Could not read file {filename} in {root_path}: {e}")
                self._report(str(e))

        logger.debug(f"Scanned {len(result)} files in {root_path}")
        return result
