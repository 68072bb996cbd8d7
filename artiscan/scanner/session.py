"""
Scan Session Module - Mutable state of one scan run.

Owned by the scan controller and mutated only from its thread.
"""

import hashlib
from dataclasses import dataclass, field
from typing import Dict, List, Set, Tuple

from artiscan.errors import SkippedItem
from artiscan.parsing import ItemRecord


def fingerprint(record: ItemRecord) -> str:
    """
    Content fingerprint used to spot items seen before.

    The UI offers no stable identifier, so this covers the name, level,
    rarity and the full stat tuple. Two distinct items with identical rolls
    share a fingerprint and collapse into one record.
    """
    parts = [
        record.set_key,
        record.slot.value,
        record.name,
        str(record.rarity),
        str(record.level),
        f"{record.main_stat.kind.value}={record.main_stat.value:g}",
    ]
    parts.extend(f"{s.kind.value}={s.value:g}" for s in record.sub_stats)
    return hashlib.sha1("|".join(parts).encode("utf-8")).hexdigest()


@dataclass
class ScanSession:
    """
    Accumulated results and counters for one run.

    Attributes:
        records: Kept records in encounter order
        fingerprints: Fingerprints of kept records (output dedup)
        seen: Fingerprints of every parsed item, filtered or not (wrap detection)
        skipped: Items given up on, one entry per grid position
        positions: Grid position (absolute row, column) of every seen fingerprint
        skipped_at: Grid positions already reported as skipped
        page: Current page index (0 = before the first scroll)
        scroll_offset: Absolute row shown at the top of the current page
        filtered: Items dropped by the rarity/level filters
        duplicates: Cell visits that showed an already seen item
        cells_visited: Cell visits so far
        cancelled: Set once cancellation has been honored
    """
    records: List[ItemRecord] = field(default_factory=list)
    fingerprints: Set[str] = field(default_factory=set)
    seen: Set[str] = field(default_factory=set)
    skipped: List[SkippedItem] = field(default_factory=list)
    positions: Dict[str, Tuple[int, int]] = field(default_factory=dict)
    skipped_at: Set[Tuple[int, int]] = field(default_factory=set)
    page: int = 0
    scroll_offset: int = 0
    filtered: int = 0
    duplicates: int = 0
    cells_visited: int = 0
    cancelled: bool = False

    def observe(self, record: ItemRecord) -> bool:
        """
        Note a parsed item.

        Returns:
            True if the item was not seen before in this session
        """
        fp = fingerprint(record)
        if fp in self.seen:
            self.duplicates += 1
            return False
        self.seen.add(fp)
        return True

    def keep(self, record: ItemRecord) -> bool:
        """
        Append a record that passed the filters, unless already kept.

        Returns:
            True if appended
        """
        fp = fingerprint(record)
        if fp in self.fingerprints:
            return False
        self.fingerprints.add(fp)
        self.records.append(record)
        return True

    @property
    def items_seen(self) -> int:
        """Distinct items encountered, including filtered and skipped ones."""
        return len(self.seen) + len(self.skipped)

    def place(self, fp: str, position: Tuple[int, int]) -> None:
        """Remember where a fingerprint was first seen."""
        self.positions.setdefault(fp, position)

    def skip(self, skipped: SkippedItem, position: Tuple[int, int]) -> bool:
        """
        Record a skipped item unless its grid position was skipped before.

        Returns:
            True if recorded
        """
        if position in self.skipped_at:
            return False
        self.skipped_at.add(position)
        self.skipped.append(skipped)
        return True
