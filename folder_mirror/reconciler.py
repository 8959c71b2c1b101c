"""Converges the replica folder toward the source folder."""

from pathlib import Path
from typing import List, Optional

from folder_mirror.events import ChangeEvent, ChangeKind, EventSink, Side
from folder_mirror.file_ops import FileOps, FileOpsError
from folder_mirror.logging_setup import get_logger
from folder_mirror.scanner import Scanner
from folder_mirror.snapshot import (
    Snapshot,
    contains_fingerprint,
    count_with_fingerprint,
    except_duplicate_pairs,
    name_for_fingerprint,
)

logger = get_logger()


class Reconciler:
    """Copies, renames and deletes replica files until they match the source.

    The source folder is only ever read. Snapshots are rebuilt through the
    scanner at each decision point, so files changed by an earlier step (or
    by someone else) while reconciling are seen as they are now.
    """

    def __init__(
        self,
        source_root: str,
        replica_root: str,
        sink: EventSink,
        scanner: Optional[Scanner] = None,
        file_ops: Optional[FileOps] = None,
    ):
        """Initialize reconciler.

        Args:
            source_root: Folder to mirror
            replica_root: Folder to bring in line with the source
            sink: Receives every action taken and every failed operation
            scanner: Snapshot builder, defaults to one reporting into ``sink``
            file_ops: File operation primitives
        """
        self.source_root = source_root
        self.replica_root = replica_root
        self.sink = sink
        self.scanner = scanner or Scanner(error_sink=sink)
        self.file_ops = file_ops or FileOps()

    def _source_snapshot(self) -> Snapshot:
        return self.scanner.build_snapshot(self.source_root)

    def _replica_snapshot(self) -> Snapshot:
        return self.scanner.build_snapshot(self.replica_root)

    def _replica_path(self, name: str) -> str:
        return str(Path(self.replica_root) / name)

    def _source_path(self, name: str) -> str:
        return str(Path(self.source_root) / name)

    def _record(self, events: List[ChangeEvent], event: ChangeEvent) -> None:
        events.append(event)
        self.sink.emit(event)

    def reconcile(self) -> List[ChangeEvent]:
        """Run both reconciliation phases.

        Returns:
            Replica events performed by the synchronizer, in order
        """
        events: List[ChangeEvent] = []
        self.prune_excess_replica_files(events)
        self.copy_excess_source_files(events)
        logger.info(f"Reconciliation performed {len(events)} operations")
        return events

    def _rename_target(self, source: Snapshot, replica: Snapshot, fingerprint: bytes) -> str:
        """Pick the source name a stray replica file should take.

        Names whose content is already mirrored are skipped so a rename never
        overwrites a replica file that is already correct.
        """
        unmirrored = except_duplicate_pairs(source, replica)
        name = name_for_fingerprint(unmirrored, fingerprint)
        if name is None:
            name = name_for_fingerprint(source, fingerprint)
        return name

    def prune_excess_replica_files(self, events: List[ChangeEvent]) -> None:
        """Rename or delete replica files that have no exact source counterpart."""
        source = self._source_snapshot()
        replica = self._replica_snapshot()

        for name, fingerprint in except_duplicate_pairs(replica, source).items():
            fresh_replica = self._replica_snapshot()
            # an earlier rename may have overwritten or moved this file
            if fresh_replica.get(name) != fingerprint:
                continue

            fresh_source = self._source_snapshot()
            has_extra_copies = count_with_fingerprint(
                fresh_replica, fingerprint
            ) > count_with_fingerprint(fresh_source, fingerprint)

            try:
                if not has_extra_copies and contains_fingerprint(source, fingerprint):
                    # replica file carries a name the source no longer uses
                    new_name = self._rename_target(source, fresh_replica, fingerprint)
                    self.file_ops.rename_file(
                        self._replica_path(name), self._replica_path(new_name)
                    )
                    self._record(
                        events,
                        ChangeEvent(
                            ChangeKind.RENAMED,
                            Side.REPLICA,
                            new_name,
                            old_file_name=name,
                            performed_by_synchronizer=True,
                        ),
                    )
                else:
                    self.file_ops.delete_file(self._replica_path(name))
                    self._record(
                        events,
                        ChangeEvent(
                            ChangeKind.DELETED,
                            Side.REPLICA,
                            name,
                            performed_by_synchronizer=True,
                        ),
                    )
            except FileOpsError as e:
                logger.error(f"Could not prune replica file {name}: {e}")
                self.sink.operation_error(str(e))

    def copy_excess_source_files(self, events: List[ChangeEvent]) -> None:
        """Bring source files that are missing or stale in the replica across."""
        source = self._source_snapshot()
        replica = self._replica_snapshot()

        for name, fingerprint in except_duplicate_pairs(source, replica).items():
            try:
                if contains_fingerprint(replica, fingerprint):
                    old_name = name_for_fingerprint(replica, fingerprint)
                    fresh_replica = self._replica_snapshot()
                    has_new_copies = count_with_fingerprint(
                        source, fingerprint
                    ) > count_with_fingerprint(fresh_replica, fingerprint)

                    # the old file may already have been moved by an earlier pair
                    if not has_new_copies and Path(self._replica_path(old_name)).is_file():
                        self.file_ops.rename_file(
                            self._replica_path(old_name), self._replica_path(name)
                        )
                        self._record(
                            events,
                            ChangeEvent(
                                ChangeKind.RENAMED,
                                Side.REPLICA,
                                name,
                                old_file_name=old_name,
                                performed_by_synchronizer=True,
                            ),
                        )
                        continue

                self.file_ops.copy_file(self._source_path(name), self._replica_path(name))
                self._record(
                    events,
                    ChangeEvent(
                        ChangeKind.ADDED,
                        Side.REPLICA,
                        name,
                        performed_by_synchronizer=True,
                    ),
                )
            except FileOpsError as e:
                logger.error(f"Could not mirror source file {name}: {e}")
                self.sink.operation_error(str(e))
