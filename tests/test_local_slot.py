"""
Tests for the per-client local slot.

Run with: python -m pytest tests/test_local_slot.py
"""

from logic.local_slot import LocalSlot, slot_filename


def test_slot_filename_is_safe():
    assert slot_filename("alpha") == "alpha.json"
    assert slot_filename("../etc/passwd") == "_etc_passwd.json"
    assert slot_filename("...") == "anonymous.json"


def test_get_set_clear(tmp_path):
    slot = LocalSlot(str(tmp_path), "alpha")
    assert slot.get("sentinels_hidden", []) == []

    slot.set("sentinels_hidden", [101, 302])
    assert LocalSlot(str(tmp_path), "alpha").get("sentinels_hidden") == [101, 302]

    slot.clear()
    slot.clear()
    assert slot.get("sentinels_hidden") is None


def test_corrupt_slot_reads_empty(tmp_path, caplog):
    slot = LocalSlot(str(tmp_path), "alpha")
    slot.set("key", 1)
    with open(slot.path, "w", encoding="utf-8") as f:
        f.write("{not json")

    assert slot.get("key") is None
    assert "corrupt" in caplog.text
