"""
Tests for the interaction controller.

Run with: python -m pytest tests/test_controller.py
"""

import pytest

from logic.controller import InteractionController
from logic.models import Category, Dataset, InvalidOperation


@pytest.fixture
def controller(store):
    return InteractionController(store)


def test_add_mode_toggles(controller):
    assert controller.toggle_add_mode(Category.THREATS) is Category.THREATS
    assert controller.toggle_add_mode(Category.ASSETS) is Category.ASSETS
    assert controller.toggle_add_mode(Category.ASSETS) is None


def test_click_without_mode_does_nothing(controller, store):
    assert controller.map_click(10.0, 20.0) is None
    assert list(store.overlay.all_markers()) == []


def test_click_adds_once_then_disarms(controller, store):
    controller.toggle_add_mode(Category.LOGISTICS)

    marker = controller.map_click(44.6, -63.5)

    assert marker.category is Category.LOGISTICS
    assert marker.name == "New Refuel"
    assert controller.add_mode is None
    assert controller.map_click(1.0, 1.0) is None
    assert len(store.overlay.LOGISTICS) == 1


def test_select_and_close(controller):
    marker = controller.select(Category.THREATS, 106)
    assert marker.name == "Galaxy Leader"
    assert controller.active is marker

    controller.close()
    assert controller.active is None


def test_select_hidden_marker_fails(controller):
    controller.toggle_layer(Category.ASSETS)
    assert controller.select(Category.ASSETS, 301) is None
    assert controller.active is None


def test_select_suppressed_marker_fails(controller):
    controller.delete(Category.THREATS, 101)
    assert controller.select(Category.THREATS, 101) is None


def test_rename_updates_active(controller):
    controller.toggle_add_mode(Category.ASSETS)
    marker = controller.map_click(1.0, 2.0)
    controller.select(Category.ASSETS, marker.id)

    controller.rename(Category.ASSETS, marker.id, "Forward Base")

    assert controller.active.name == "Forward Base"


def test_rename_cancelled_keeps_active(controller):
    controller.toggle_add_mode(Category.ASSETS)
    marker = controller.map_click(1.0, 2.0)
    controller.select(Category.ASSETS, marker.id)

    assert controller.rename(Category.ASSETS, marker.id, None) is None
    assert controller.active.name == "New FOB"


def test_rename_base_marker_rejected(controller):
    controller.select(Category.LOGISTICS, 401)
    with pytest.raises(InvalidOperation):
        controller.rename(Category.LOGISTICS, 401, "Refuel: Tacos")
    assert controller.active.name == "Refuel: Pizza Hut"


def test_delete_closes_panel(controller, store):
    controller.select(Category.ASSETS, 302)
    controller.delete(Category.ASSETS, 302)
    assert controller.active is None
    assert store.suppressed == {302}


def test_refresh_active_after_remote_delete(controller, store):
    controller.toggle_add_mode(Category.THREATS)
    marker = controller.map_click(1.0, 2.0)
    controller.select(Category.THREATS, marker.id)

    store.replace_overlay(Dataset())
    controller.refresh_active()

    assert controller.active is None
