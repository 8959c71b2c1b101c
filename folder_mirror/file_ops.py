"""File operations layer for mirror actions."""

import shutil
from pathlib import Path

from folder_mirror.logging_setup import get_logger

logger = get_logger()


class FileOpsError(Exception):
    """Raised when file operation fails."""

    pass


class FileOps:
    """Handles file copy, delete and rename operations.

    Every operation overwrites whatever already sits at the destination.
    """

    def copy_file(self, src: str, dst: str, preserve_mtime: bool = True) -> None:
        """Copy file from source to destination.

        Args:
            src: Source file path
            dst: Destination file path
            preserve_mtime: Whether to preserve modification time

        Raises:
            FileOpsError: If copy fails
        """
        try:
            src_path = Path(src)
            dst_path = Path(dst)

            try:
                if src_path.resolve() == dst_path.resolve():
                    logger.debug(f"Skipped copy; source and destination are identical: {src}")
                    return
            except OSError:
                pass

            if preserve_mtime:
                shutil.copy2(str(src_path), str(dst_path))
            else:
                shutil.copy(str(src_path), str(dst_path))

            if not dst_path.exists():
                raise FileOpsError(f"Copy verification failed: {dst}")

            logger.debug(f"Copied file: {src} -> {dst}")
        except (OSError, IOError, shutil.Error) as e:
            logger.error(f"Failed to copy file {src} to {dst}: {e}")
            raise FileOpsError(f"Copy failed: {e}") from e

    def delete_file(self, path: str) -> None:
        """Delete file.

        Args:
            path: File to delete

        Raises:
            FileOpsError: If delete fails
        """
        try:
            Path(path).unlink()
            logger.debug(f"Deleted file: {path}")
        except (OSError, IOError) as e:
            logger.error(f"Failed to delete file {path}: {e}")
            raise FileOpsError(f"Delete failed: {e}") from e

    def rename_file(self, old_path: str, new_path: str) -> None:
        """Rename file, replacing any file already at ``new_path``.

        Args:
            old_path: Current file path
            new_path: New file path

        Raises:
            FileOpsError: If rename fails
        """
        try:
            old = Path(old_path)

            if not old.exists():
                raise FileOpsError(f"Source file does not exist: {old_path}")

            old.replace(Path(new_path))
            logger.debug(f"Renamed file: {old_path} -> {new_path}")
        except (OSError, IOError) as e:
            logger.error(f"Failed to rename file {old_path} to {new_path}: {e}")
            raise FileOpsError(f"Rename failed: {e}") from e

    def ensure_directory(self, path: str) -> None:
        """Ensure directory exists.

        Args:
            path: Directory path

        Raises:
            FileOpsError: If creation fails
        """
        try:
            Path(path).mkdir(parents=True, exist_ok=True)
        except (OSError, IOError) as e:
            logger.error(f"Failed to create directory {path}: {e}")
            raise FileOpsError(f"Directory creation failed: {e}") from e
