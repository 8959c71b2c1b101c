"""Main entry point for the folder mirror."""

import argparse
import sys
import threading
from enum import IntEnum
from pathlib import Path
from typing import Callable, List, Optional, Union

from folder_mirror.config_loader import Config, ConfigError, load_config, load_config_from_env
from folder_mirror.events import LoggingEventSink
from folder_mirror.file_ops import FileOps, FileOpsError
from folder_mirror.logging_setup import get_logger, setup_logging
from folder_mirror.scanner import Scanner
from folder_mirror.synchronizer import RunState, Synchronizer
from folder_mirror.validator import (
    MIN_SYNC_INTERVAL_MS,
    ValidationStatus,
    validate_argument_count,
    validate_file_path,
    validate_folder_path,
    validate_sync_interval,
)

logger = get_logger()

RESPONSE_POSITIVE = "y"
RESPONSE_NEGATIVE = "n"
LINE_SEPARATOR = "*" * 29

InputFn = Callable[[str], str]


class ExitCode(IntEnum):
    """Process exit codes."""

    SUCCESS = 0
    ARGUMENT_COUNT_ERROR = 1
    FOLDER_CREATION_ERROR = 2
    SYNC_INTERVAL_PARSING_ERROR = 3
    SYNC_INTERVAL_TOO_SHORT_ERROR = 4
    LOG_FILE_CREATION_ERROR = 5
    CONFIG_ERROR = 6
    INTERRUPTED = 130


class MirrorRunner:
    """Wires configuration, logging and the synchronizer together."""

    def __init__(self, config: Config):
        """Initialize mirror runner.

        Args:
            config: Validated configuration
        """
        self.config = config
        setup_logging(
            self.config.log_file_path,
            self.config.log_level,
            max_bytes=self.config.log_max_size_mb * 1024 * 1024,
            backup_count=self.config.log_backup_count,
            rotation_enabled=self.config.log_rotation_enabled,
        )

        self.sink = LoggingEventSink()
        self.scanner = Scanner(
            ignore_extensions=self.config.ignore_extensions,
            ignore_filenames_prefix=self.config.ignore_filenames_prefix,
            ignore_filenames_exact=self.config.ignore_filenames_exact,
            error_sink=self.sink,
        )
        self.synchronizer = Synchronizer(
            self.config.source_root,
            self.config.replica_root,
            self.config.interval_ms,
            self.sink,
            scanner=self.scanner,
        )

    def run(self, stop_event: Optional[threading.Event] = None) -> RunState:
        """Start polling; blocks until ``stop_event`` is set or the process dies."""
        return self.synchronizer.begin_synchronization(stop_event)


def ask_yes_no(prompt: str, input_fn: InputFn = input) -> bool:
    """Ask until the user answers y or n.

    A closed input stream counts as "no".
    """
    print(f"{prompt} ({RESPONSE_POSITIVE}/{RESPONSE_NEGATIVE})")
    while True:
        try:
            response = (input_fn("") or "").strip().lower()
        except EOFError:
            print("No input available, assuming no.")
            return False
        if response == RESPONSE_POSITIVE:
            return True
        if response == RESPONSE_NEGATIVE:
            return False
        print(
            f'Provided response is not valid. Enter "{RESPONSE_POSITIVE}" for "Yes" '
            f'or "{RESPONSE_NEGATIVE}" for "No".'
        )


def ensure_folder(folder_path: str, input_fn: InputFn = input) -> Optional[ExitCode]:
    """Make sure ``folder_path`` exists, offering to create it.

    Returns:
        None to continue, otherwise the code to exit with
    """
    if validate_folder_path(folder_path) == ValidationStatus.SUCCESS:
        print(f'Folder "{folder_path}" already exists and will be used.')
        return None

    if not ask_yes_no(
        f'Folder path "{folder_path}" does not exist. Attempt to create it?', input_fn
    ):
        print("Folder will not be created. Exiting program.")
        return ExitCode.SUCCESS

    try:
        FileOps().ensure_directory(folder_path)
    except FileOpsError as e:
        print(f'Error: Folder creation did not succeed due to "{e}". Exiting program.')
        return ExitCode.FOLDER_CREATION_ERROR

    print(f'Successfully created folder "{folder_path}".')
    return None


def ensure_log_file(log_file_path: str, input_fn: InputFn = input) -> Optional[ExitCode]:
    """Make sure the log file exists, offering to create it.

    Returns:
        None to continue, otherwise the code to exit with
    """
    if validate_file_path(log_file_path) == ValidationStatus.SUCCESS:
        print(f'Log file "{log_file_path}" already exists and will be used.')
        return None

    if not ask_yes_no(
        f'Log file path "{log_file_path}" does not exist. Attempt to create it?', input_fn
    ):
        print("Log file will not be created. Exiting program.")
        return ExitCode.SUCCESS

    try:
        path = Path(log_file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch()
    except OSError as e:
        print(f'Error: Log file creation did not succeed due to "{e}". Exiting program.')
        return ExitCode.LOG_FILE_CREATION_ERROR

    print(f'Successfully created log file "{log_file_path}".')
    return None


def config_from_arguments(
    arguments: List[str], input_fn: InputFn = input
) -> Union[Config, ExitCode]:
    """Validate the four positional values and build a config from them.

    Returns:
        Config to run with, or the code to exit with
    """
    if validate_argument_count(arguments) == ValidationStatus.ARGUMENT_COUNT_ERROR:
        print(
            "Error: Incorrect argument count. Provide 4 arguments: source folder path, "
            "replica folder path, synchronization interval (in ms) and log file path. "
            "Exiting program."
        )
        return ExitCode.ARGUMENT_COUNT_ERROR

    source_root, replica_root, interval, log_file_path = arguments

    for folder_path in (source_root, replica_root):
        exit_code = ensure_folder(folder_path, input_fn)
        if exit_code is not None:
            return exit_code

    status = validate_sync_interval(interval)
    if status == ValidationStatus.SYNC_INTERVAL_PARSING_ERROR:
        print(
            f'Error: Provided synchronization interval "{interval}" cannot be parsed '
            "as an integer. Exiting program."
        )
        return ExitCode.SYNC_INTERVAL_PARSING_ERROR
    if status == ValidationStatus.SYNC_INTERVAL_TOO_SHORT_ERROR:
        print(
            f'Error: Provided synchronization interval "{interval}" is too short. '
            f"Minimum expected value is {MIN_SYNC_INTERVAL_MS}. Exiting program."
        )
        return ExitCode.SYNC_INTERVAL_TOO_SHORT_ERROR
    print(f"Synchronization interval of {interval}ms is valid and will be used.")

    exit_code = ensure_log_file(log_file_path, input_fn)
    if exit_code is not None:
        return exit_code

    return Config.from_arguments(source_root, replica_root, int(interval), log_file_path)


def print_configuration_summary(config: Config) -> None:
    print(
        f"\n{LINE_SEPARATOR}\n"
        "Configuration summary:\n"
        f'Source folder: "{config.source_root}"\n'
        f'Replica folder: "{config.replica_root}"\n'
        f"Synchronization interval: {config.interval_ms}ms\n"
        f'Log file path: "{config.log_file_path}"\n\n'
        "Beginning folder synchronization.\n"
        f"{LINE_SEPARATOR}\n"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Folder Mirror - one-way source to replica folder synchronization"
    )
    parser.add_argument("source", nargs="?", help="Source folder path")
    parser.add_argument("replica", nargs="?", help="Replica folder path")
    parser.add_argument("interval", nargs="?", help="Synchronization interval in milliseconds")
    parser.add_argument("log_file", nargs="?", help="Log file path")
    parser.add_argument(
        "--config",
        type=str,
        help="Path to config.yaml file (replaces the positional arguments)",
    )
    parser.add_argument(
        "--use-env",
        action="store_true",
        help="Load config from MIRROR_CONFIG environment variable",
    )
    return parser


def main(argv: Optional[List[str]] = None, input_fn: InputFn = input) -> int:
    """Main entry point.

    Returns:
        Exit code
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    positional = [
        value
        for value in (args.source, args.replica, args.interval, args.log_file)
        if value is not None
    ]

    try:
        if args.use_env or args.config:
            try:
                config = load_config_from_env() if args.use_env else load_config(args.config)
            except ConfigError as e:
                logger.error(f"Config error: {e}")
                return ExitCode.CONFIG_ERROR

            for folder_path in (config.source_root, config.replica_root):
                exit_code = ensure_folder(folder_path, input_fn)
                if exit_code is not None:
                    return exit_code
        else:
            if not positional:
                parser.print_help()
            result = config_from_arguments(positional, input_fn)
            if isinstance(result, ExitCode):
                return result
            config = result

        print_configuration_summary(config)
        runner = MirrorRunner(config)
        runner.run()
        return ExitCode.SUCCESS
    except KeyboardInterrupt:
        logger.info("Synchronization interrupted by user")
        return ExitCode.INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
