"""Classification of externally made changes between two polls."""

from typing import List

from folder_mirror.events import ChangeEvent, ChangeKind, Side
from folder_mirror.logging_setup import get_logger
from folder_mirror.snapshot import (
    Snapshot,
    contains_fingerprint,
    contains_name,
    count_with_fingerprint,
    except_duplicate_pairs,
    name_for_fingerprint,
)

logger = get_logger()


def classify_changes(current: Snapshot, previous: Snapshot, side: Side) -> List[ChangeEvent]:
    """Describe how a folder changed since its previous snapshot.

    Both snapshots must belong to the same side. Fingerprint counts are
    compared against that side's own previous snapshot: if the number of
    files carrying a fingerprint did not grow, a pair with a known
    fingerprint under a new name is a rename rather than a fresh copy.
    Otherwise a pair whose name already existed is a modification, and
    anything else was added. A pure count rule would report every
    modification as an addition, so the name check is applied first.

    The old name of a rename is taken from the pairs that disappeared, so
    a surviving duplicate is never reported as the file that moved.

    Args:
        current: Snapshot taken now
        previous: Snapshot taken at the end of the last cycle
        side: Folder both snapshots belong to

    Returns:
        Events in detection order, none of them performed by the synchronizer
    """
    events: List[ChangeEvent] = []

    added_or_changed = except_duplicate_pairs(current, previous)
    removed_or_changed = except_duplicate_pairs(previous, current)

    for name, fingerprint in added_or_changed.items():
        is_new_copy = count_with_fingerprint(current, fingerprint) > count_with_fingerprint(
            previous, fingerprint
        )

        if not is_new_copy and contains_fingerprint(previous, fingerprint):
            old_name = name_for_fingerprint(removed_or_changed, fingerprint)
            if old_name is None:
                old_name = name_for_fingerprint(previous, fingerprint)
            events.append(ChangeEvent(ChangeKind.RENAMED, side, name, old_file_name=old_name))
        elif contains_name(previous, name):
            # New content always raises its own count, so the name decides
            events.append(ChangeEvent(ChangeKind.MODIFIED, side, name))
        else:
            events.append(ChangeEvent(ChangeKind.ADDED, side, name))

    for name, fingerprint in removed_or_changed.items():
        # Renamed and modified files were already reported above
        if not contains_name(added_or_changed, name) and not contains_fingerprint(
            added_or_changed, fingerprint
        ):
            events.append(ChangeEvent(ChangeKind.DELETED, side, name))

    logger.debug(f"Classified {len(events)} external changes in {side.value} folder")
    return events
