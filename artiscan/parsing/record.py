"""
Item Record Module - Typed output unit of a scan.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from .vocabulary import Slot, StatKind


MAX_SUB_STATS = 4
MAX_LEVEL = 20


@dataclass(frozen=True)
class Stat:
    """A stat kind with its value (percent kinds hold e.g. 46.6 for 46.6%)."""
    kind: StatKind
    value: float

    def __str__(self) -> str:
        if self.kind.is_percent:
            return f"{self.kind.name}={self.value:g}%"
        return f"{self.kind.name}={self.value:g}"


@dataclass(frozen=True)
class ItemRecord:
    """
    Immutable artifact record.

    Attributes:
        name: Piece name as matched in the vocabulary
        set_key: GOOD set key derived from the name
        slot: Slot derived from the name
        rarity: 1-5 stars
        level: 0-20
        main_stat: Main stat (always present)
        sub_stats: Up to four substats in pane order
        equipped: Character name, or None when unequipped
    """
    name: str
    set_key: str
    slot: Slot
    rarity: int
    level: int
    main_stat: Stat
    sub_stats: Tuple[Stat, ...] = ()
    equipped: Optional[str] = None

    def __post_init__(self):
        if not 1 <= self.rarity <= 5:
            raise ValueError(f"rarity must be 1..5, got {self.rarity}")
        if not 0 <= self.level <= MAX_LEVEL:
            raise ValueError(f"level must be 0..{MAX_LEVEL}, got {self.level}")
        if len(self.sub_stats) > MAX_SUB_STATS:
            raise ValueError(f"at most {MAX_SUB_STATS} substats, got {len(self.sub_stats)}")
        if self.main_stat is None:
            raise ValueError("main stat is required")

    def describe(self) -> str:
        subs = ", ".join(str(s) for s in self.sub_stats)
        return f"{self.name} {self.rarity}* +{self.level} [{self.main_stat}] ({subs})"
