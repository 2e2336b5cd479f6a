"""
Tests for the marker record store.

Run with: python -m pytest tests/test_store.py
"""

import pytest

from logic.config import get_base_dataset
from logic.models import RESERVED_ID_THRESHOLD, Category, Dataset, InvalidOperation, Marker, Origin
from logic.store import IdSource, MarkerStore


def test_add_appends_user_marker(store):
    before = len(store.overlay.THREATS)
    marker = store.add(Category.THREATS, 10.0, 20.0)

    assert len(store.overlay.THREATS) == before + 1
    assert store.overlay.THREATS[-1] is marker
    assert (marker.lat, marker.lng) == (10.0, 20.0)
    assert marker.kind == "User Added"
    assert marker.origin is Origin.OVERLAY
    assert marker.id >= RESERVED_ID_THRESHOLD


@pytest.mark.parametrize(
    "category, name, group",
    [
        (Category.THREATS, "New Hostile", "Unknown Force"),
        (Category.ASSETS, "New FOB", "My Squad"),
        (Category.LOGISTICS, "New Refuel", "Public"),
    ],
)
def test_add_uses_category_defaults(store, category, name, group):
    marker = store.add(category, 1.5, -2.5)
    assert marker.name == name
    assert marker.group == group
    assert marker.category is category


def test_add_accepts_out_of_range_coordinates(store):
    marker = store.add(Category.ASSETS, 500.0, -720.0)
    assert (marker.lat, marker.lng) == (500.0, -720.0)


def test_add_only_touches_its_category(store):
    store.add(Category.LOGISTICS, 0.0, 0.0)
    assert store.overlay.THREATS == []
    assert store.overlay.ASSETS == []
    assert len(store.overlay.LOGISTICS) == 1


def test_ids_unique_with_frozen_clock(store):
    ids = [store.add(Category.THREATS, 0.0, 0.0).id for _ in range(5)]
    assert len(set(ids)) == 5
    assert ids == sorted(ids)


def test_id_source_never_goes_backwards(clock):
    source = IdSource(clock)
    first = source.next_id()
    clock.now -= 60
    assert source.next_id() == first + 1


def test_id_source_stays_above_threshold():
    source = IdSource(lambda: 0.0)
    assert source.next_id() >= RESERVED_ID_THRESHOLD


def test_add_skips_ids_already_in_overlay(clock):
    taken = int(clock.now * 1000)
    existing = Marker(
        id=taken,
        name="Remote",
        lat=0.0,
        lng=0.0,
        kind="User Added",
        group="Public",
        category=Category.LOGISTICS,
    )
    store = MarkerStore(
        get_base_dataset(), overlay=Dataset(LOGISTICS=[existing]), id_source=IdSource(clock)
    )

    marker = store.add(Category.THREATS, 1.0, 1.0)

    assert marker.id == taken + 1


def test_stores_sharing_id_source_never_collide(clock):
    source = IdSource(clock)
    first = MarkerStore(get_base_dataset(), id_source=source)
    second = MarkerStore(get_base_dataset(), id_source=source)

    assert first.add(Category.THREATS, 0.0, 0.0).id != second.add(Category.THREATS, 0.0, 0.0).id


def test_add_notifies_overlay_listener(store):
    pushed = []
    store.on_overlay_change = pushed.append

    marker = store.add(Category.ASSETS, 1.0, 2.0)

    assert len(pushed) == 1
    assert [m.id for m in pushed[0].ASSETS] == [marker.id]
    # listener gets a copy
    assert pushed[0].ASSETS[0] is not marker


def test_rename_overlay_marker(store):
    marker = store.add(Category.THREATS, 1.0, 2.0)
    other = store.add(Category.THREATS, 3.0, 4.0)

    renamed = store.rename(Category.THREATS, marker.id, "Skiff Sighting")

    assert renamed.name == "Skiff Sighting"
    assert other.name == "New Hostile"
    assert (renamed.lat, renamed.lng, renamed.kind) == (1.0, 2.0, "User Added")


def test_rename_base_marker_raises(store):
    pushed = []
    store.on_overlay_change = pushed.append

    with pytest.raises(InvalidOperation):
        store.rename(Category.THREATS, 101, "Something Else")

    assert store.base.find(Category.THREATS, 101).name == "MSC United VIII"
    assert pushed == []


@pytest.mark.parametrize("name", [None, "", "   "])
def test_rename_cancelled_is_noop(store, name):
    marker = store.add(Category.ASSETS, 1.0, 2.0)
    pushed = []
    store.on_overlay_change = pushed.append

    assert store.rename(Category.ASSETS, marker.id, name) is None
    assert marker.name == "New FOB"
    assert pushed == []


def test_rename_unknown_marker_is_noop(store):
    assert store.rename(Category.ASSETS, 123456789, "Ghost") is None


def test_rename_wrong_category_is_noop(store):
    marker = store.add(Category.ASSETS, 1.0, 2.0)
    assert store.rename(Category.LOGISTICS, marker.id, "Moved") is None
    assert marker.name == "New FOB"


def test_delete_overlay_marker(store):
    keep = store.add(Category.THREATS, 1.0, 1.0)
    drop = store.add(Category.THREATS, 2.0, 2.0)
    asset = store.add(Category.ASSETS, 3.0, 3.0)
    pushed = []
    store.on_overlay_change = pushed.append

    assert store.delete(Category.THREATS, drop.id) is True

    assert [m.id for m in store.overlay.THREATS] == [keep.id]
    assert [m.id for m in store.overlay.ASSETS] == [asset.id]
    assert len(pushed) == 1
    assert store.suppressed == set()


def test_delete_base_marker_suppresses_locally(store):
    store.add(Category.THREATS, 1.0, 1.0)
    overlay_before = store.overlay.to_document()
    pushed, hidden = [], []
    store.on_overlay_change = pushed.append
    store.on_suppression_change = hidden.append

    assert store.delete(Category.THREATS, 101) is True

    assert store.suppressed == {101}
    assert store.overlay.to_document() == overlay_before
    assert store.base.find(Category.THREATS, 101) is not None
    assert pushed == []
    assert hidden == [{101}]


def test_delete_base_marker_twice(store):
    store.delete(Category.ASSETS, 301)
    assert store.delete(Category.ASSETS, 301) is False
    assert store.suppressed == {301}


def test_delete_unknown_marker(store):
    assert store.delete(Category.LOGISTICS, 42) is False
    assert store.suppressed == set()


def test_delete_base_id_in_other_category_is_noop(store):
    assert store.delete(Category.THREATS, 301) is False
    assert store.suppressed == set()


def test_rename_base_id_in_other_category_is_noop(store):
    assert store.rename(Category.THREATS, 401, "Moved") is None
    assert store.base.find(Category.LOGISTICS, 401).name == "Refuel: Pizza Hut"


def test_toggle_visibility_keeps_data(store):
    store.add(Category.ASSETS, 1.0, 1.0)
    assert store.toggle_visibility(Category.ASSETS) is False
    assert store.view()[Category.ASSETS] == []
    assert len(store.overlay.ASSETS) == 1
    assert store.toggle_visibility(Category.ASSETS) is True
    assert len(store.view()[Category.ASSETS]) == 3


def test_delete_then_add_scenario(store):
    store.delete(Category.THREATS, 101)
    ids = [m.id for m in store.view()[Category.THREATS]]
    assert 101 not in ids

    marker = store.add(Category.THREATS, 10.0, 20.0)
    view = store.view()[Category.THREATS]

    assert len(view) == len(ids) + 1
    assert view[-1].id == marker.id
    assert marker.id >= RESERVED_ID_THRESHOLD
    assert (view[-1].lat, view[-1].lng) == (10.0, 20.0)
    assert view[-1].kind == "User Added"


def test_clear_suppression(store):
    hidden = []
    store.on_suppression_change = hidden.append
    store.delete(Category.THREATS, 102)
    store.clear_suppression()
    assert store.suppressed == set()
    assert hidden[-1] == set()
    assert 102 in [m.id for m in store.view()[Category.THREATS]]
