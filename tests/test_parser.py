"""
Test script for record parsing

Covers:
1. Clean recognizer output -> ItemRecord
2. Nearest-match correction of near-miss names and stat labels
3. Parse errors naming the failing field
4. Locale-tolerant numbers

Usage:
    python test_parser.py
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from artiscan.errors import MalformedField
from artiscan.layout import EQUIP, LEVEL, MAIN_STAT_NAME, MAIN_STAT_VALUE, NAME, SUB_STATS
from artiscan.ocr import RawFieldSet, RecognitionResult
from artiscan.parsing import RecordParser, Slot, StatKind, parse_number
from artiscan.parsing.parser import field_texts, nearest_token
from artiscan.parsing.vocabulary import ARTIFACT_SETS, PIECE_NAMES


def make_raw(name="Gladiator's Nostalgia", main_name="HP", main_value="4,780",
             subs=("CRIT Rate+3.9%", "ATK+19", "Energy Recharge+6.5%", "CRIT DMG+7.8%"),
             level="+20", equip="Equipped: Hu Tao", stars=5) -> RawFieldSet:
    texts = {
        NAME: name,
        MAIN_STAT_NAME: main_name,
        MAIN_STAT_VALUE: main_value,
        LEVEL: level,
        EQUIP: equip,
    }
    for field_name, text in zip(SUB_STATS, list(subs) + [""] * (len(SUB_STATS) - len(subs))):
        texts[field_name] = text
    return RawFieldSet(
        fields={k: RecognitionResult(v, 0.99) for k, v in texts.items()},
        stars=stars,
    )


def test_clean_record():
    """Recognizer output with no errors."""
    print("\n" + "="*60)
    print("TEST: Clean record")
    print("="*60)

    record = RecordParser().parse(make_raw())
    print(f"  {record.describe()}")

    assert record.set_key == "GladiatorsFinale"
    assert record.slot is Slot.FLOWER
    assert record.rarity == 5
    assert record.level == 20
    assert record.main_stat.kind is StatKind.HP
    assert record.main_stat.value == 4780
    assert [s.kind for s in record.sub_stats] == [
        StatKind.CRIT_RATE, StatKind.ATK, StatKind.ENERGY_RECHARGE, StatKind.CRIT_DMG,
    ]
    assert record.sub_stats[0].value == pytest.approx(3.9)
    assert record.sub_stats[1].value == 19
    assert record.equipped == "Hu Tao"


def test_percent_main_stat_and_missing_substats():
    raw = make_raw(name="Witch's End Time", main_name="ATK", main_value="46.6%",
                   subs=("CRIT DMG+14.0%", "Elemental Mastery+23", "DEF+37"),
                   level="+16", equip="")
    record = RecordParser().parse(raw)

    assert record.slot is Slot.SANDS
    assert record.main_stat.kind is StatKind.ATK_PERCENT
    assert record.main_stat.value == pytest.approx(46.6)
    assert len(record.sub_stats) == 3
    assert record.equipped is None


def test_fuzzy_correction():
    """Near-miss recognition is snapped to the vocabulary."""
    print("\n" + "="*60)
    print("TEST: Nearest-match correction")
    print("="*60)

    raw = make_raw(
        name="Gladiators Nostalgla",
        subs=("CRlT Rate+3.9%", "ATK+19"),
        equip="Equlpped: Bennett",
    )
    record = RecordParser().parse(raw)
    print(f"  {record.describe()}")

    assert record.name == "Gladiator's Nostalgia"
    assert record.sub_stats[0].kind is StatKind.CRIT_RATE
    assert record.equipped == "Bennett"

    assert nearest_token("Royal Flra", ["Royal Flora", "Royal Plume"]) == "Royal Flora"
    assert nearest_token("completely different", ["Royal Flora"]) is None
    assert nearest_token("", ["Royal Flora"]) is None


def test_edit_budget_follows_vocabulary_token():
    # "elemental mastery" (17 chars) allows 3 edits even for a shorter reading
    assert nearest_token("Elemental Mast", ["Elemental Mastery", "Energy Recharge"]) == "Elemental Mastery"
    # "hp" allows 1 edit however long the reading is
    assert nearest_token("HPxx", ["HP", "ATK"]) is None
    assert nearest_token("H", ["HP", "ATK"]) == "HP"


def test_piece_vocabulary_covers_every_set():
    print("\n" + "="*60)
    print("TEST: Piece vocabulary")
    print("="*60)
    print(f"  {len(ARTIFACT_SETS)} sets, {len(PIECE_NAMES)} pieces")

    assert len(ARTIFACT_SETS) >= 40
    assert all(set(s.pieces) == set(Slot) for s in ARTIFACT_SETS)
    # No piece name is shared between sets or slots
    assert len(PIECE_NAMES) == 5 * len(ARTIFACT_SETS)
    assert len({s.key for s in ARTIFACT_SETS}) == len(ARTIFACT_SETS)
    assert len({s.mona_name for s in ARTIFACT_SETS}) == len(ARTIFACT_SETS)


@pytest.mark.parametrize("name, set_key, slot", [
    ("Gilded Corsage", "HeartOfDepth", Slot.FLOWER),
    ("Feather of Jagged Peaks", "ArchaicPetra", Slot.PLUME),
    ("Moment of Cessation", "PaleFlame", Slot.SANDS),
    ("Pearl Cage", "OceanHuedClam", Slot.GOBLET),
    ("Crown of Watatsumi", "OceanHuedClam", Slot.CIRCLET),
    ("Instructor's Cap", "Instructor", Slot.CIRCLET),
])
def test_pieces_from_many_sets_parse(name, set_key, slot):
    main = {Slot.FLOWER: ("HP", "4,780"), Slot.PLUME: ("ATK", "311")}.get(slot, ("ATK", "46.6%"))
    raw = make_raw(name=name, main_name=main[0], main_value=main[1],
                   subs=("CRIT Rate+3.9%", "CRIT DMG+7.8%"))
    record = RecordParser().parse(raw)
    assert record.set_key == set_key
    assert record.slot is slot


def test_unknown_name_is_malformed():
    with pytest.raises(MalformedField) as info:
        RecordParser().parse(make_raw(name="Mysterious Teapot"))
    assert info.value.field_name == NAME


def test_main_stat_must_fit_slot():
    # A flower always carries flat HP
    with pytest.raises(MalformedField) as info:
        RecordParser().parse(make_raw(main_name="ATK", main_value="311"))
    assert info.value.field_name == MAIN_STAT_NAME


def test_main_value_unreadable():
    with pytest.raises(MalformedField) as info:
        RecordParser().parse(make_raw(main_value="--"))
    assert info.value.field_name == MAIN_STAT_VALUE


@pytest.mark.parametrize("subs", [
    ("CRIT Rate+3.9%", "CRIT Rate+7.0%"),   # repeated kind
    ("HP+209",),                             # same kind as the main stat
    ("Pyro DMG Bonus+5.0%",),                # never a substat
    ("CRIT Rate",),                          # no value
])
def test_bad_substats(subs):
    with pytest.raises(MalformedField) as info:
        RecordParser().parse(make_raw(subs=subs))
    assert info.value.field_name in SUB_STATS


@pytest.mark.parametrize("level", ["+21", "Lv", "", "+1O"])
def test_bad_level(level):
    with pytest.raises(MalformedField) as info:
        RecordParser().parse(make_raw(level=level))
    assert info.value.field_name == LEVEL


def test_bad_equip_prefix():
    with pytest.raises(MalformedField) as info:
        RecordParser().parse(make_raw(equip="Wearer: Kaeya"))
    assert info.value.field_name == EQUIP


def test_rarity_out_of_range_rejected():
    with pytest.raises(MalformedField):
        RecordParser().parse(make_raw(stars=6))


@pytest.mark.parametrize("text,expected", [
    ("4,780", (4780.0, False)),
    ("4.780", (4780.0, False)),
    ("4 780", (4780.0, False)),
    ("311", (311.0, False)),
    ("46.6%", (46.6, True)),
    ("3,9%", (3.9, True)),
    ("1.234,5", (1234.5, False)),
    ("1,234.5", (1234.5, False)),
    ("7.8％", (7.8, True)),
])
def test_parse_number(text, expected):
    value, percent = parse_number(text)
    assert value == pytest.approx(expected[0])
    assert percent is expected[1]


def test_parse_number_rejects_empty():
    with pytest.raises(ValueError):
        parse_number("%")


def test_field_texts():
    texts = field_texts(make_raw())
    assert texts[NAME] == "Gladiator's Nostalgia"
    assert texts[SUB_STATS[0]] == "CRIT Rate+3.9%"


def main():
    """Run all tests."""
    print("="*60)
    print("PARSER TESTS")
    print("="*60)

    results = []
    for name, fn in [
        ("Clean Record", test_clean_record),
        ("Percent Main Stat", test_percent_main_stat_and_missing_substats),
        ("Fuzzy Correction", test_fuzzy_correction),
        ("Unknown Name", test_unknown_name_is_malformed),
        ("Main Stat Slot", test_main_stat_must_fit_slot),
        ("Bad Equip", test_bad_equip_prefix),
    ]:
        try:
            fn()
            results.append((name, True))
        except AssertionError as e:
            print(f"  FAILED: {e}")
            results.append((name, False))

    print("\n" + "="*60)
    print("SUMMARY")
    print("="*60)
    for name, passed in results:
        print(f"  {name}: [{'PASS' if passed else 'FAIL'}]")
    return 0 if all(passed for _, passed in results) else 1


if __name__ == "__main__":
    sys.exit(main())
