"""
Test script for cancellation plumbing and the scan session

Usage:
    python test_input_driver.py
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from artiscan.input_driver import CancelKeyListener, CancellationToken, InputDriver
from artiscan.parsing import ItemRecord, Slot, StatKind
from artiscan.parsing.record import Stat
from artiscan.scanner import ScanSession, fingerprint


class RecordingDriver(InputDriver):
    def __init__(self, token=None):
        super().__init__(token)
        self.events = []

    def move_and_click(self, point):
        self.events.append(("click", point))

    def scroll(self, amount):
        self.events.append(("scroll", amount))


def record(atk=19, level=20, rarity=5):
    return ItemRecord(
        name="Royal Flora",
        set_key="NoblesseOblige",
        slot=Slot.FLOWER,
        rarity=rarity,
        level=level,
        main_stat=Stat(StatKind.HP, 4780),
        sub_stats=(Stat(StatKind.ATK, atk),),
    )


def test_token():
    token = CancellationToken()
    assert not token.is_cancelled()
    token.cancel()
    assert token.is_cancelled()
    token.reset()
    assert not token.is_cancelled()


def test_driver_polls_shared_token():
    token = CancellationToken()
    driver = RecordingDriver(token)
    driver.move_and_click((10, 20))
    assert not driver.poll_cancellation()
    token.cancel()
    assert driver.poll_cancellation()
    assert driver.events == [("click", (10, 20))]


def test_listener_rejects_unknown_key():
    with pytest.raises(ValueError):
        CancelKeyListener(CancellationToken(), key="space")
    assert CancelKeyListener(CancellationToken(), key="F12").key == "f12"


@pytest.mark.skipif(sys.platform == "win32", reason="listener polls the real keyboard on Windows")
def test_listener_is_inert_off_windows():
    token = CancellationToken()
    listener = CancelKeyListener(token)
    listener.start()
    listener.stop()
    assert not listener.is_alive()
    assert not token.is_cancelled()


def test_fingerprint():
    assert fingerprint(record()) == fingerprint(record())
    assert fingerprint(record()) != fingerprint(record(atk=20))
    assert fingerprint(record()) != fingerprint(record(level=16))
    assert fingerprint(record()) != fingerprint(record(rarity=4))


def test_session_dedup():
    print("\n" + "="*60)
    print("TEST: ScanSession")
    print("="*60)

    session = ScanSession()
    assert session.observe(record())
    assert session.keep(record())
    assert not session.observe(record())
    assert not session.keep(record())
    assert session.observe(record(atk=33))

    assert len(session.records) == 1
    assert session.duplicates == 1
    assert session.items_seen == 2


def main():
    """Run all tests."""
    print("="*60)
    print("INPUT / SESSION TESTS")
    print("="*60)

    results = []
    for name, fn in [
        ("Token", test_token),
        ("Driver Polling", test_driver_polls_shared_token),
        ("Fingerprint", test_fingerprint),
        ("Session Dedup", test_session_dedup),
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
