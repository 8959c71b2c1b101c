"""Validation of command line values."""

from enum import Enum
from pathlib import Path
from typing import Optional, Sequence

CORRECT_ARGUMENT_COUNT = 4
MIN_SYNC_INTERVAL_MS = 1


class ValidationStatus(Enum):
    """Outcome of validating a single command line value."""

    SUCCESS = 0
    ARGUMENT_COUNT_ERROR = 1
    FOLDER_PATH_DOES_NOT_EXIST = 2
    SYNC_INTERVAL_PARSING_ERROR = 3
    SYNC_INTERVAL_TOO_SHORT_ERROR = 4
    FILE_PATH_DOES_NOT_EXIST = 5


def validate_argument_count(args: Optional[Sequence[str]]) -> ValidationStatus:
    if args is None or len(args) != CORRECT_ARGUMENT_COUNT:
        return ValidationStatus.ARGUMENT_COUNT_ERROR
    return ValidationStatus.SUCCESS


def validate_folder_path(folder_path: Optional[str]) -> ValidationStatus:
    if folder_path and Path(folder_path).is_dir():
        return ValidationStatus.SUCCESS
    return ValidationStatus.FOLDER_PATH_DOES_NOT_EXIST


def validate_file_path(file_path: Optional[str]) -> ValidationStatus:
    if file_path and Path(file_path).is_file():
        return ValidationStatus.SUCCESS
    return ValidationStatus.FILE_PATH_DOES_NOT_EXIST


def validate_sync_interval(interval: Optional[str]) -> ValidationStatus:
    """Check that ``interval`` parses as a whole number of milliseconds.

    Args:
        interval: Raw command line value

    Returns:
        SUCCESS, SYNC_INTERVAL_PARSING_ERROR or SYNC_INTERVAL_TOO_SHORT_ERROR
    """
    if interval is None:
        return ValidationStatus.SYNC_INTERVAL_PARSING_ERROR

    try:
        value = int(interval.strip())
    except ValueError:
        return ValidationStatus.SYNC_INTERVAL_PARSING_ERROR

    if value < MIN_SYNC_INTERVAL_MS:
        return ValidationStatus.SYNC_INTERVAL_TOO_SHORT_ERROR
    return ValidationStatus.SUCCESS
