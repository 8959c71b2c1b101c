"""Tests for the polling loop."""

import threading

import pytest

from folder_mirror.events import ChangeEvent, ChangeKind, Side
from folder_mirror.scanner import Scanner, ScanError
from folder_mirror.synchronizer import RunState, Synchronizer


def _make_synchronizer(source, replica, sink, interval_ms=10):
    return Synchronizer(str(source), str(replica), interval_ms, sink)


def _synchronizer_events(sink):
    return [event for event in sink.events if event.performed_by_synchronizer]


def _external_events(sink):
    return [event for event in sink.events if not event.performed_by_synchronizer]


class TestRunCycle:
    """run_cycle tests."""

    def test_first_cycle_copies_source(self, temp_dirs, sink):
        """Test that a single source file reaches an empty replica."""
        source, replica = temp_dirs
        (source / "x.txt").write_text("H1")
        synchronizer = _make_synchronizer(source, replica, sink)

        state = synchronizer.run_cycle(RunState())

        assert (replica / "x.txt").read_text() == "H1"
        assert _synchronizer_events(sink) == [
            ChangeEvent(ChangeKind.ADDED, Side.REPLICA, "x.txt", performed_by_synchronizer=True)
        ]
        assert state.previous_source == state.previous_replica
        assert set(state.previous_source) == {"x.txt"}

    def test_first_cycle_reports_existing_source_files(self, temp_dirs, sink):
        """Test that files found at start are narrated as external additions."""
        source, replica = temp_dirs
        (source / "x.txt").write_text("H1")

        _make_synchronizer(source, replica, sink).run_cycle(RunState())

        assert _external_events(sink) == [ChangeEvent(ChangeKind.ADDED, Side.SOURCE, "x.txt")]

    def test_stable_folders_produce_no_events(self, temp_dirs, sink):
        """Test that a converged pair stays quiet on the next cycle."""
        source, replica = temp_dirs
        (source / "x.txt").write_text("H1")
        synchronizer = _make_synchronizer(source, replica, sink)
        state = synchronizer.run_cycle(RunState())
        sink.events.clear()

        next_state = synchronizer.run_cycle(state)

        assert sink.events == []
        assert next_state == state

    def test_source_rename_is_mirrored_as_rename(self, temp_dirs, sink):
        """Test that renaming in the source renames in the replica."""
        source, replica = temp_dirs
        (source / "x.txt").write_text("H1")
        synchronizer = _make_synchronizer(source, replica, sink)
        state = synchronizer.run_cycle(RunState())
        sink.events.clear()

        (source / "x.txt").rename(source / "y.txt")
        synchronizer.run_cycle(state)

        assert _external_events(sink) == [
            ChangeEvent(ChangeKind.RENAMED, Side.SOURCE, "y.txt", old_file_name="x.txt")
        ]
        assert _synchronizer_events(sink) == [
            ChangeEvent(
                ChangeKind.RENAMED,
                Side.REPLICA,
                "y.txt",
                old_file_name="x.txt",
                performed_by_synchronizer=True,
            )
        ]
        assert not (replica / "x.txt").exists()
        assert (replica / "y.txt").read_text() == "H1"

    def test_external_replica_addition_is_reported_then_removed(self, temp_dirs, sink):
        """Test that a file dropped into the replica is narrated and deleted."""
        source, replica = temp_dirs
        (source / "x.txt").write_text("H1")
        synchronizer = _make_synchronizer(source, replica, sink)
        state = synchronizer.run_cycle(RunState())
        sink.events.clear()

        (replica / "z.txt").write_text("intruder")
        synchronizer.run_cycle(state)

        assert sink.events == [
            ChangeEvent(ChangeKind.ADDED, Side.REPLICA, "z.txt", performed_by_synchronizer=False),
            ChangeEvent(ChangeKind.DELETED, Side.REPLICA, "z.txt", performed_by_synchronizer=True),
        ]
        assert not (replica / "z.txt").exists()

    def test_duplicate_deleted_from_source(self, temp_dirs, sink):
        """Test that deleting one of two identical source files keeps the other."""
        source, replica = temp_dirs
        (source / "a.txt").write_text("same")
        (source / "b.txt").write_text("same")
        synchronizer = _make_synchronizer(source, replica, sink)
        state = synchronizer.run_cycle(RunState())
        sink.events.clear()

        (source / "a.txt").unlink()
        synchronizer.run_cycle(state)

        assert _external_events(sink) == [ChangeEvent(ChangeKind.DELETED, Side.SOURCE, "a.txt")]
        assert _synchronizer_events(sink) == [
            ChangeEvent(ChangeKind.DELETED, Side.REPLICA, "a.txt", performed_by_synchronizer=True)
        ]
        assert (replica / "b.txt").read_text() == "same"

    def test_state_is_rescanned_after_reconcile(self, temp_dirs, sink):
        """Test that the returned state reflects the converged replica."""
        source, replica = temp_dirs
        (source / "a.txt").write_text("a")
        (replica / "stale.txt").write_text("stale")

        state = _make_synchronizer(source, replica, sink).run_cycle(RunState())

        assert set(state.previous_replica) == {"a.txt"}

    def test_injected_scanner_is_used(self, temp_dirs, sink):
        """Test that a stub scanner can simulate folder contents."""
        source, replica = temp_dirs

        class StubScanner(Scanner):
            def build_snapshot(self, root_path):
                return {}

        synchronizer = Synchronizer(
            str(source), str(replica), 10, sink, scanner=StubScanner()
        )
        (source / "ignored.txt").write_text("x")

        state = synchronizer.run_cycle(RunState())

        assert state == RunState()
        assert sink.events == []

    def test_vanished_source_leaves_replica_alone(self, temp_dirs, sink):
        """Test that an unlistable source does not read as every file deleted."""
        source, replica = temp_dirs
        (source / "a.txt").write_text("a")
        (source / "b.txt").write_text("b")
        synchronizer = _make_synchronizer(source, replica, sink)
        state = synchronizer.run_cycle(RunState())
        sink.events.clear()

        source.rename(source.parent / "moved")
        next_state = synchronizer.run_cycle(state)

        assert sorted(p.name for p in replica.iterdir()) == ["a.txt", "b.txt"]
        assert next_state == state
        assert sink.events == []
        assert len(sink.errors) == 1
        assert "Could not list directory" in sink.errors[0]

    def test_scan_error_mid_cycle_keeps_previous_state(self, temp_dirs, sink):
        """Test that a scan failure on the replica abandons the cycle."""
        source, replica = temp_dirs

        class FailingReplicaScanner(Scanner):
            def build_snapshot(self, root_path):
                if root_path == str(replica):
                    raise ScanError(f"Could not list directory {root_path}: gone")
                return super().build_snapshot(root_path)

        synchronizer = Synchronizer(
            str(source), str(replica), 10, sink, scanner=FailingReplicaScanner()
        )
        (source / "x.txt").write_text("H1")
        previous = RunState(previous_source={"old.txt": b"\x00" * 32})

        state = synchronizer.run_cycle(previous)

        assert state is previous
        assert sink.events == []
        assert not (replica / "x.txt").exists()
        assert len(sink.errors) == 1


class TestBeginSynchronization:
    """begin_synchronization tests."""

    def test_stops_when_event_is_set(self, temp_dirs, sink):
        """Test that the loop exits after the stop event is set."""
        source, replica = temp_dirs
        (source / "x.txt").write_text("H1")
        synchronizer = _make_synchronizer(source, replica, sink)
        stop_event = threading.Event()
        cycles = []
        real_run_cycle = synchronizer.run_cycle

        def run_cycle(state):
            cycles.append(state)
            new_state = real_run_cycle(state)
            if len(cycles) == 3:
                stop_event.set()
            return new_state

        synchronizer.run_cycle = run_cycle
        state = synchronizer.begin_synchronization(stop_event)

        assert len(cycles) == 3
        assert set(state.previous_replica) == {"x.txt"}

    def test_preset_event_runs_no_cycle(self, temp_dirs, sink):
        """Test that an already-set event returns immediately."""
        source, replica = temp_dirs
        (source / "x.txt").write_text("H1")
        stop_event = threading.Event()
        stop_event.set()

        state = _make_synchronizer(source, replica, sink).begin_synchronization(stop_event)

        assert state == RunState()
        assert not (replica / "x.txt").exists()


class TestSynchronizerValidation:
    """Constructor validation tests."""

    @pytest.mark.parametrize(
        "source_root, replica_root, interval_ms",
        [
            ("", "/replica", 100),
            ("   ", "/replica", 100),
            ("/source", "", 100),
            ("/source", "/replica", 0),
            ("/source", "/replica", -5),
        ],
    )
    def test_invalid_arguments(self, sink, source_root, replica_root, interval_ms):
        """Test that bad constructor values are rejected."""
        with pytest.raises(ValueError):
            Synchronizer(source_root, replica_root, interval_ms, sink)

    def test_sink_required(self):
        """Test that a sink is mandatory."""
        with pytest.raises(ValueError):
            Synchronizer("/source", "/replica", 100, None)
