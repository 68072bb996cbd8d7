"""
Export Module - Writes scanned records in community optimizer formats.

Formats:
    mona: Mona Uranai (grouped by position, percent values as fractions)
    good: Genshin Open Object Description, version 1
    all:  Both of the above
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Sequence

from artiscan.parsing import SETS_BY_KEY, ItemRecord, Slot, StatKind
from artiscan.parsing.record import Stat

logger = logging.getLogger(__name__)


FORMATS = ("mona", "good", "all")
GOOD_SOURCE = "artiscan"

MONA_POSITIONS: Dict[Slot, str] = {
    Slot.FLOWER: "flower",
    Slot.PLUME: "feather",
    Slot.SANDS: "sand",
    Slot.GOBLET: "cup",
    Slot.CIRCLET: "head",
}

MONA_STAT_NAMES: Dict[StatKind, str] = {
    StatKind.HP: "lifeStatic",
    StatKind.HP_PERCENT: "lifePercentage",
    StatKind.ATK: "attackStatic",
    StatKind.ATK_PERCENT: "attackPercentage",
    StatKind.DEF: "defendStatic",
    StatKind.DEF_PERCENT: "defendPercentage",
    StatKind.ELEMENTAL_MASTERY: "elementalMastery",
    StatKind.ENERGY_RECHARGE: "recharge",
    StatKind.CRIT_RATE: "critical",
    StatKind.CRIT_DMG: "criticalDamage",
    StatKind.HEALING_BONUS: "cureEffect",
    StatKind.PYRO_DMG: "fireBonus",
    StatKind.ELECTRO_DMG: "thunderBonus",
    StatKind.HYDRO_DMG: "waterBonus",
    StatKind.ANEMO_DMG: "windBonus",
    StatKind.GEO_DMG: "rockBonus",
    StatKind.CRYO_DMG: "iceBonus",
    StatKind.DENDRO_DMG: "dendroBonus",
    StatKind.PHYSICAL_DMG: "physicalBonus",
}


def _mona_stat(stat: Stat) -> Dict[str, Any]:
    value = stat.value / 100 if stat.kind.is_percent else stat.value
    return {"name": MONA_STAT_NAMES[stat.kind], "value": round(value, 4)}


def to_mona(records: Sequence[ItemRecord]) -> Dict[str, Any]:
    """Build the Mona document."""
    doc: Dict[str, Any] = {"version": "1"}
    for position in MONA_POSITIONS.values():
        doc[position] = []

    for record in records:
        position = MONA_POSITIONS[record.slot]
        doc[position].append({
            "setName": SETS_BY_KEY[record.set_key].mona_name,
            "position": position,
            "mainTag": _mona_stat(record.main_stat),
            "normalTags": [_mona_stat(s) for s in record.sub_stats],
            "omit": False,
            "level": record.level,
            "star": record.rarity,
            "equip": record.equipped,
        })
    return doc


def character_key(name: str) -> str:
    """
    GOOD character key: PascalCase with punctuation removed.

    Example:
        >>> character_key("Hu Tao")
        'HuTao'
        >>> character_key("Kaedehara Kazuha")
        'KaedeharaKazuha'
    """
    words = re.findall(r"[A-Za-z0-9]+", name)
    return "".join(w[:1].upper() + w[1:] for w in words)


def to_good(records: Sequence[ItemRecord]) -> Dict[str, Any]:
    """Build the GOOD version 1 document."""
    artifacts: List[Dict[str, Any]] = []
    for record in records:
        artifacts.append({
            "setKey": record.set_key,
            "slotKey": record.slot.value,
            "level": record.level,
            "rarity": record.rarity,
            "mainStatKey": record.main_stat.kind.value,
            "location": character_key(record.equipped) if record.equipped else "",
            "lock": False,
            "substats": [{"key": s.kind.value, "value": s.value} for s in record.sub_stats],
        })
    return {
        "format": "GOOD",
        "version": 1,
        "source": GOOD_SOURCE,
        "artifacts": artifacts,
    }


_BUILDERS = {
    "mona": to_mona,
    "good": to_good,
}


def save(records: Sequence[ItemRecord], output_dir: Path, output_format: str = "mona") -> List[Path]:
    """
    Write records to `<output_dir>/<format>.json`.

    Args:
        records: Records to export
        output_dir: Destination directory (created if missing)
        output_format: "mona", "good" or "all"

    Returns:
        Paths written

    Raises:
        ValueError: Unknown format
        OSError: If the files cannot be written
    """
    if output_format not in FORMATS:
        raise ValueError(f"Unknown output format '{output_format}'. Available: {', '.join(FORMATS)}")

    names = list(_BUILDERS) if output_format == "all" else [output_format]
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    written = []
    for name in names:
        path = output_dir / f"{name}.json"
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(_BUILDERS[name](records), f, indent=2, ensure_ascii=False)
        logger.info(f"Exported {len(records)} records to {path}")
        written.append(path)
    return written
