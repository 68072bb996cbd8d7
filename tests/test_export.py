"""
Test script for export formats

Usage:
    python test_export.py
"""

import json
import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from artiscan import export
from artiscan.parsing import ItemRecord, Slot, StatKind
from artiscan.parsing.record import Stat


def sample_records():
    return [
        ItemRecord(
            name="Gladiator's Nostalgia",
            set_key="GladiatorsFinale",
            slot=Slot.FLOWER,
            rarity=5,
            level=20,
            main_stat=Stat(StatKind.HP, 4780),
            sub_stats=(Stat(StatKind.CRIT_RATE, 3.9), Stat(StatKind.ATK, 19)),
            equipped="Hu Tao",
        ),
        ItemRecord(
            name="Witch's End Time",
            set_key="CrimsonWitchOfFlames",
            slot=Slot.SANDS,
            rarity=4,
            level=8,
            main_stat=Stat(StatKind.ATK_PERCENT, 22.5),
        ),
    ]


def test_mona():
    print("\n" + "="*60)
    print("TEST: Mona export")
    print("="*60)

    doc = export.to_mona(sample_records())
    assert set(doc) == {"version", "flower", "feather", "sand", "cup", "head"}
    assert len(doc["flower"]) == 1 and len(doc["sand"]) == 1 and doc["cup"] == []

    flower = doc["flower"][0]
    print(f"  {flower}")
    assert flower["setName"] == "gladiatorFinale"
    assert flower["mainTag"] == {"name": "lifeStatic", "value": 4780}
    assert flower["normalTags"][0] == {"name": "critical", "value": pytest.approx(0.039)}
    assert flower["normalTags"][1] == {"name": "attackStatic", "value": 19}
    assert flower["star"] == 5 and flower["level"] == 20

    sand = doc["sand"][0]
    assert sand["mainTag"]["name"] == "attackPercentage"
    assert sand["mainTag"]["value"] == pytest.approx(0.225)
    assert sand["equip"] is None


def test_good():
    doc = export.to_good(sample_records())
    assert doc["format"] == "GOOD" and doc["version"] == 1

    flower, sands = doc["artifacts"]
    assert flower["setKey"] == "GladiatorsFinale"
    assert flower["slotKey"] == "flower"
    assert flower["mainStatKey"] == "hp"
    assert flower["location"] == "HuTao"
    assert flower["substats"] == [{"key": "critRate_", "value": 3.9}, {"key": "atk", "value": 19}]
    assert sands["mainStatKey"] == "atk_"
    assert sands["location"] == ""


def test_character_key():
    assert export.character_key("Hu Tao") == "HuTao"
    assert export.character_key("Raiden Shogun") == "RaidenShogun"
    assert export.character_key("Kamisato Ayaka") == "KamisatoAyaka"


def test_save_formats(tmp_path):
    written = export.save(sample_records(), tmp_path / "out", "all")
    assert sorted(p.name for p in written) == ["good.json", "mona.json"]

    good = json.loads((tmp_path / "out" / "good.json").read_text(encoding="utf-8"))
    assert len(good["artifacts"]) == 2

    only_mona = export.save(sample_records(), tmp_path / "mona_only", "mona")
    assert [p.name for p in only_mona] == ["mona.json"]

    with pytest.raises(ValueError):
        export.save(sample_records(), tmp_path, "mingyulab")


def main():
    """Run all tests."""
    print("="*60)
    print("EXPORT TESTS")
    print("="*60)

    results = []
    for name, fn in [("Mona", test_mona), ("GOOD", test_good), ("Character Key", test_character_key)]:
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
