"""Pure comparisons between folder snapshots.

A snapshot maps each file name in a folder to the SHA-256 digest of its
content. Two name/digest pairs are equal only when both halves match, so a
renamed file and a modified file both show up in an excess set; telling them
apart is left to the classifier and the reconciler.
"""

from typing import Dict, Optional

Snapshot = Dict[str, bytes]


def snapshots_equal(a: Snapshot, b: Snapshot) -> bool:
    """Return True if both snapshots hold exactly the same pairs."""
    if len(a) != len(b):
        return False
    for name, fingerprint in a.items():
        if b.get(name) != fingerprint:
            return False
    return True


def except_duplicate_pairs(a: Snapshot, b: Snapshot) -> Snapshot:
    """Return the pairs of ``a`` that have no exact match in ``b``."""
    return {name: fp for name, fp in a.items() if b.get(name) != fp}


def contains_name(snapshot: Snapshot, name: str) -> bool:
    return name in snapshot


def contains_fingerprint(snapshot: Snapshot, fingerprint: bytes) -> bool:
    return any(fp == fingerprint for fp in snapshot.values())


def name_for_fingerprint(snapshot: Snapshot, fingerprint: bytes) -> Optional[str]:
    """Return the name carrying ``fingerprint``.

    When several files share the content, the lexicographically smallest
    name wins so the choice never depends on directory listing order.
    """
    matches = [name for name, fp in snapshot.items() if fp == fingerprint]
    return min(matches) if matches else None


def count_with_fingerprint(snapshot: Snapshot, fingerprint: bytes) -> int:
    return sum(1 for fp in snapshot.values() if fp == fingerprint)
