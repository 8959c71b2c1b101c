"""Pytest configuration and fixtures."""

import logging
import shutil
import tempfile
from pathlib import Path

import pytest

from folder_mirror.events import ChangeEvent, ChangeKind, EventSink
from folder_mirror.logging_setup import get_logger


class RecordingSink(EventSink):
    """Event sink that keeps everything it receives."""

    def __init__(self):
        self.events = []
        self.errors = []

    def file_added(self, side, file_name, performed_by_synchronizer):
        self.events.append(
            ChangeEvent(ChangeKind.ADDED, side, file_name, None, performed_by_synchronizer)
        )

    def file_modified(self, side, file_name, performed_by_synchronizer):
        self.events.append(
            ChangeEvent(ChangeKind.MODIFIED, side, file_name, None, performed_by_synchronizer)
        )

    def file_renamed(self, side, old_file_name, new_file_name, performed_by_synchronizer):
        self.events.append(
            ChangeEvent(
                ChangeKind.RENAMED, side, new_file_name, old_file_name, performed_by_synchronizer
            )
        )

    def file_deleted(self, side, file_name, performed_by_synchronizer):
        self.events.append(
            ChangeEvent(ChangeKind.DELETED, side, file_name, None, performed_by_synchronizer)
        )

    def operation_error(self, message):
        self.errors.append(message)


@pytest.fixture(autouse=True)
def reset_mirror_logger():
    """Drop handlers installed by setup_logging after each test."""
    yield
    logger = get_logger()
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def temp_dirs():
    """Create temporary source and replica directories for testing."""
    temp_root = Path(tempfile.mkdtemp())
    source = temp_root / "source"
    replica = temp_root / "replica"
    source.mkdir()
    replica.mkdir()

    yield source, replica

    # Cleanup
    shutil.rmtree(temp_root, ignore_errors=True)


@pytest.fixture
def sink():
    """Create a recording event sink."""
    return RecordingSink()


@pytest.fixture
def sample_config(tmp_path):
    """Create a sample config file for testing."""
    config_path = tmp_path / "config.yaml"
    config_content = f"""
source_root: {tmp_path / "source"}
replica_root: {tmp_path / "replica"}
interval_ms: 500

ignore:
  extensions:
    - .tmp
  filenames_prefix:
    - "~$"
  filenames_exact:
    - thumbs.db

logging:
  level: DEBUG
  file_path: {tmp_path / "logs" / "mirror.log"}
  max_size_mb: 1
  backup_count: 2
"""
    config_path.write_text(config_content)
    return config_path
