"""
Record Parser

Turns the recognized strings of one item into an ItemRecord. Every field
is matched against a closed vocabulary; a string a couple of edits away
from a known token is corrected to it, anything further away is a parse
error for that field. Nothing is silently dropped.
"""

import logging
import re
from typing import Dict, List, Optional, Sequence, Tuple

from rapidfuzz import process, utils
from rapidfuzz.distance import Levenshtein

from artiscan.errors import MalformedField
from artiscan.layout import EQUIP, LEVEL, MAIN_STAT_NAME, MAIN_STAT_VALUE, NAME, SUB_STATS
from artiscan.ocr.result import RawFieldSet
from .record import ItemRecord, MAX_LEVEL, Stat
from .vocabulary import (
    ALLOWED_MAIN_STATS,
    ALLOWED_SUB_STATS,
    PIECE_NAMES,
    STAT_NAMES,
    StatKind,
)

logger = logging.getLogger(__name__)


SUB_STAT_PATTERN = re.compile(r"^(?P<name>[^\d+]*?)\s*\+?\s*(?P<value>\d[\d.,]*)\s*(?P<pct>[%％]?)\s*$")
LEVEL_PATTERN = re.compile(r"^\+?\s*(\d{1,2})$")
EQUIP_PATTERN = re.compile(r"^\s*(?P<prefix>[^:：]*)[:：]\s*(?P<name>.+?)\s*$")
EQUIP_PREFIX = "Equipped"
THOUSANDS_PATTERN = re.compile(r"^\d{1,3}([.,]\d{3})+$")


def _max_edits(token: str) -> int:
    """Edit budget for nearest-match correction, grows with token length."""
    return max(1, len(token) // 5)


def nearest_token(text: str, choices: Sequence[str]) -> Optional[str]:
    """
    Nearest vocabulary entry within that entry's edit budget.

    Comparison ignores case and punctuation. Returns None when nothing is
    close enough.
    """
    query = utils.default_process(text)
    if not query or not choices:
        return None
    budgets = {choice: _max_edits(utils.default_process(choice)) for choice in choices}
    matches = process.extract(
        query,
        list(budgets),
        scorer=Levenshtein.distance,
        processor=utils.default_process,
        score_cutoff=max(budgets.values()),
        limit=None,
    )
    # Sorted by distance, nearest first
    for choice, distance, _ in matches:
        if distance <= budgets[choice]:
            return choice
    return None


def parse_number(text: str) -> Tuple[float, bool]:
    """
    Parse a stat value with locale-tolerant separators.

    Args:
        text: e.g. "4,780", "46.6%", "3,9%", "1.234"

    Returns:
        (value, is_percent)

    Raises:
        ValueError: If no number can be read
    """
    s = re.sub(r"\s+", "", text)
    percent = s.endswith("%") or s.endswith("％")
    s = s.rstrip("%％")
    if not s:
        raise ValueError(f"No number in {text!r}")

    if "," in s and "." in s:
        # The later separator is the decimal point
        if s.rfind(",") > s.rfind("."):
            s = s.replace(".", "").replace(",", ".")
        else:
            s = s.replace(",", "")
    elif "," in s or "." in s:
        if not percent and THOUSANDS_PATTERN.match(s):
            s = s.replace(",", "").replace(".", "")
        else:
            s = s.replace(",", ".")

    return float(s), percent


class RecordParser:
    """
    Parses a RawFieldSet into an ItemRecord.

    Example:
        >>> record = RecordParser().parse(raw)
        >>> record.main_stat.kind
        <StatKind.HP: 'hp'>
    """

    def __init__(self):
        self._stat_names = list(STAT_NAMES.keys())
        self._piece_names = list(PIECE_NAMES.keys())

    def parse(self, raw: RawFieldSet) -> ItemRecord:
        """
        Build a typed record from recognized strings.

        Raises:
            MalformedField: Naming the first field that could not be parsed
        """
        name = self._parse_name(raw.text(NAME))
        artifact_set, slot = PIECE_NAMES[name]

        main_stat = self._parse_main_stat(raw.text(MAIN_STAT_NAME), raw.text(MAIN_STAT_VALUE))
        if main_stat.kind not in ALLOWED_MAIN_STATS[slot]:
            raise MalformedField(MAIN_STAT_NAME, f"{main_stat.kind.name} on {slot.value}")

        sub_stats = self._parse_sub_stats(raw, main_stat.kind)
        level = self._parse_level(raw.text(LEVEL))
        equipped = self._parse_equip(raw.text(EQUIP))

        try:
            return ItemRecord(
                name=name,
                set_key=artifact_set.key,
                slot=slot,
                rarity=raw.stars,
                level=level,
                main_stat=main_stat,
                sub_stats=tuple(sub_stats),
                equipped=equipped,
            )
        except ValueError as e:
            raise MalformedField("record", str(e)) from e

    def _parse_name(self, text: str) -> str:
        if text in PIECE_NAMES:
            return text
        match = nearest_token(text, self._piece_names)
        if match is None:
            raise MalformedField(NAME, text)
        logger.debug(f"Name corrected: {text!r} -> {match!r}")
        return match

    def _stat_kind(self, field_name: str, text: str, percent: bool) -> StatKind:
        display = text.strip()
        if display not in STAT_NAMES:
            display = nearest_token(display, self._stat_names)
            if display is None:
                raise MalformedField(field_name, text)
        flat_kind, percent_kind = STAT_NAMES[display]
        return percent_kind if percent else flat_kind

    def _parse_main_stat(self, name_text: str, value_text: str) -> Stat:
        try:
            value, percent = parse_number(value_text)
        except ValueError:
            raise MalformedField(MAIN_STAT_VALUE, value_text)
        return Stat(self._stat_kind(MAIN_STAT_NAME, name_text, percent), value)

    def _parse_sub_stats(self, raw: RawFieldSet, main_kind: StatKind) -> List[Stat]:
        stats: List[Stat] = []
        seen = {main_kind}
        for field_name in SUB_STATS:
            text = raw.text(field_name).strip()
            if not text:
                continue
            match = SUB_STAT_PATTERN.match(text)
            if not match:
                raise MalformedField(field_name, text)
            try:
                value, _ = parse_number(match.group("value") + match.group("pct"))
            except ValueError:
                raise MalformedField(field_name, text)

            kind = self._stat_kind(field_name, match.group("name"), bool(match.group("pct")))
            if kind not in ALLOWED_SUB_STATS or kind in seen:
                raise MalformedField(field_name, text)
            seen.add(kind)
            stats.append(Stat(kind, value))
        return stats

    def _parse_level(self, text: str) -> int:
        match = LEVEL_PATTERN.match(text.strip())
        if not match:
            raise MalformedField(LEVEL, text)
        level = int(match.group(1))
        if level > MAX_LEVEL:
            raise MalformedField(LEVEL, text)
        return level

    def _parse_equip(self, text: str) -> Optional[str]:
        text = text.strip()
        if not text:
            return None
        match = EQUIP_PATTERN.match(text)
        if not match or Levenshtein.distance(match.group("prefix").strip().lower(),
                                             EQUIP_PREFIX.lower()) > _max_edits(EQUIP_PREFIX):
            raise MalformedField(EQUIP, text)
        return match.group("name")


def field_texts(raw: RawFieldSet) -> Dict[str, str]:
    """Recognized text per field, for logging skipped items."""
    return {name: result.text for name, result in raw.fields.items()}
