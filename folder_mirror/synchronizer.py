"""Polling loop that keeps the replica folder in step with the source."""

import threading
from dataclasses import dataclass, field
from typing import Optional

from folder_mirror.classifier import classify_changes
from folder_mirror.events import EventSink, Side
from folder_mirror.file_ops import FileOps
from folder_mirror.logging_setup import get_logger
from folder_mirror.reconciler import Reconciler
from folder_mirror.scanner import Scanner, ScanError
from folder_mirror.snapshot import Snapshot, snapshots_equal

logger = get_logger()


@dataclass(frozen=True)
class RunState:
    """Snapshots of both folders as they were left by the previous cycle."""

    previous_source: Snapshot = field(default_factory=dict)
    previous_replica: Snapshot = field(default_factory=dict)


class Synchronizer:
    """Orchestrates polling cycles."""

    def __init__(
        self,
        source_root: str,
        replica_root: str,
        interval_ms: int,
        sink: EventSink,
        scanner: Optional[Scanner] = None,
        file_ops: Optional[FileOps] = None,
    ):
        """Initialize synchronizer.

        Args:
            source_root: Folder to mirror
            replica_root: Folder kept identical to the source
            interval_ms: Pause between cycles in milliseconds
            sink: Receives external and synchronizer-performed changes
            scanner: Snapshot builder, defaults to one reporting into ``sink``
            file_ops: File operation primitives used by the reconciler
        """
        if not source_root or not source_root.strip():
            raise ValueError("'source_root' cannot be empty or whitespace")
        if not replica_root or not replica_root.strip():
            raise ValueError("'replica_root' cannot be empty or whitespace")
        if interval_ms <= 0:
            raise ValueError("'interval_ms' must be positive")
        if sink is None:
            raise ValueError("'sink' is required")

        self.source_root = source_root
        self.replica_root = replica_root
        self.interval_ms = interval_ms
        self.sink = sink
        self.scanner = scanner or Scanner(error_sink=sink)
        self.reconciler = Reconciler(
            source_root,
            replica_root,
            sink,
            scanner=self.scanner,
            file_ops=file_ops,
        )

    def _scan(self) -> RunState:
        return RunState(
            previous_source=self.scanner.build_snapshot(self.source_root),
            previous_replica=self.scanner.build_snapshot(self.replica_root),
        )

    def run_cycle(self, state: RunState) -> RunState:
        """Execute one polling cycle without waiting.

        If either folder cannot be listed, the failure is reported and the
        cycle is abandoned without touching the replica.

        Args:
            state: Snapshots left behind by the previous cycle

        Returns:
            Snapshots to hand to the next cycle, or ``state`` itself when the
            cycle was abandoned
        """
        try:
            current_source = self.scanner.build_snapshot(self.source_root)
            current_replica = self.scanner.build_snapshot(self.replica_root)

            if not snapshots_equal(current_source, state.previous_source):
                for event in classify_changes(current_source, state.previous_source, Side.SOURCE):
                    self.sink.emit(event)

            if not snapshots_equal(current_replica, state.previous_replica):
                for event in classify_changes(
                    current_replica, state.previous_replica, Side.REPLICA
                ):
                    self.sink.emit(event)

            if not snapshots_equal(current_source, current_replica):
                logger.debug("Source and replica differ, reconciling")
                self.reconciler.reconcile()

            # Both folders may have changed since the scans above
            return self._scan()
        except ScanError as e:
            logger.error(f"Skipping synchronization cycle: {e}")
            self.sink.operation_error(str(e))
            return state

    def begin_synchronization(
        self,
        stop_event: Optional[threading.Event] = None,
        state: Optional[RunState] = None,
    ) -> RunState:
        """Poll until ``stop_event`` is set.

        Without a stop event this only returns when the process is
        interrupted.

        Args:
            stop_event: Set to stop after the current cycle or wait
            state: Snapshots to start from, empty by default

        Returns:
            The state left by the last completed cycle
        """
        stop_event = stop_event or threading.Event()
        state = state or RunState()

        logger.info(
            f"Beginning synchronization of {self.source_root} -> {self.replica_root} "
            f"every {self.interval_ms}ms"
        )

        while not stop_event.is_set():
            state = self.run_cycle(state)
            stop_event.wait(self.interval_ms / 1000)

        logger.info("Synchronization stopped")
        return state
