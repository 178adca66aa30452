"""
Tests for ui_state module.

Tests control caching, bulk enable/disable, click dispatch, result cells
and the default gateway indicator.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from config import LABEL_DEFAULT, LABEL_MAKE_DEFAULT, CLASS_PRIMARY, CLASS_POSITIVE
from display import RenderedTable
from enums import ControlRole, ResultState, CheckKind
from models import Control
from ui_state import UIStateController


def default_labels(ui: UIStateController) -> list[str]:
    return [b.key for b in ui.gateway_buttons if b.label == LABEL_DEFAULT]


class TestCapture:
    """Test UIStateController.capture()."""

    def test_partitions_controls(self, ui: UIStateController) -> None:
        assert [c.role for c in ui.test_buttons] == [ControlRole.TEST, ControlRole.TEST, ControlRole.TEST_ALL]
        assert [c.key for c in ui.gateway_buttons] == ["eth0", "wlan0"]

    def test_cells_keyed_by_kind_and_interface(self, ui: UIStateController) -> None:
        assert set(ui.cells) == {
            (CheckKind.PING, "eth0"), (CheckKind.CURL, "eth0"),
            (CheckKind.PING, "wlan0"), (CheckKind.CURL, "wlan0"),
        }

    def test_recapture_replaces(self, ui: UIStateController) -> None:
        ui.capture([])

        assert ui.test_buttons == []
        assert ui.gateway_buttons == []
        assert ui.cells == {}


class TestLookups:

    def test_test_button_ignores_test_all(self, ui: UIStateController) -> None:
        assert ui.test_button("eth0").key == "eth0"
        assert ui.test_button(None) is None

    def test_unknown_keys(self, ui: UIStateController) -> None:
        assert ui.test_button("eth9") is None
        assert ui.gateway_button("eth9") is None
        assert ui.cell(CheckKind.PING, "eth9") is None

    def test_control_state(self, ui: UIStateController) -> None:
        eth0 = ui.control_state("eth0")
        wlan0 = ui.control_state("wlan0")

        assert eth0.is_default_gateway is True
        assert wlan0.is_default_gateway is False
        assert eth0.testing_disabled is False

    def test_control_state_unknown_key(self, ui: UIStateController) -> None:
        state = ui.control_state("eth9")

        assert state.testing_disabled is True
        assert state.is_default_gateway is False

    def test_control_state_follows_disable(self, ui: UIStateController) -> None:
        ui.disable_all()

        assert ui.control_state("wlan0").testing_disabled is True


class TestEnableDisable:

    def test_disable_all(self, ui: UIStateController) -> None:
        ui.disable_all()

        assert all(c.disabled for c in ui.test_buttons + ui.gateway_buttons)

    def test_enable_all_keeps_default_disabled(self, ui: UIStateController) -> None:
        ui.disable_all()
        ui.enable_all()

        assert not any(c.disabled for c in ui.test_buttons)
        assert ui.gateway_button("eth0").disabled is True
        assert ui.gateway_button("wlan0").disabled is False

    def test_enable_all_strips_label(self, ui: UIStateController) -> None:
        ui.gateway_button("wlan0").label = f" {LABEL_DEFAULT} "

        ui.enable_all()

        assert ui.gateway_button("wlan0").disabled is True


class TestResultCells:

    def test_mark_result_success(self, ui: UIStateController) -> None:
        ui.mark_result(CheckKind.PING, "eth0", "12 ms")

        cell = ui.cell(CheckKind.PING, "eth0")
        assert cell.state is ResultState.SUCCESS
        assert cell.value == "12 ms"

    @pytest.mark.parametrize("value", [None, ""])
    def test_mark_result_failure(self, ui: UIStateController, value) -> None:
        ui.mark_result(CheckKind.CURL, "eth0", value)

        assert ui.cell(CheckKind.CURL, "eth0").state is ResultState.FAILURE

    def test_mark_result_unknown_key_ignored(self, ui: UIStateController) -> None:
        ui.mark_result(CheckKind.PING, "eth9", "12 ms")

        assert all(c.state is ResultState.PLACEHOLDER for c in ui.cells.values())

    def test_mark_pending(self, ui: UIStateController) -> None:
        ui.mark_result(CheckKind.PING, "eth0", "12 ms")
        ui.mark_pending(CheckKind.PING, "eth0")

        cell = ui.cell(CheckKind.PING, "eth0")
        assert cell.state is ResultState.PENDING
        assert cell.value is None

    def test_clear_results_only_touches_one_interface(self, ui: UIStateController) -> None:
        for kind in CheckKind:
            ui.mark_result(kind, "eth0", "ok")
            ui.mark_result(kind, "wlan0", "ok")

        ui.clear_results("eth0")

        assert ui.cell(CheckKind.PING, "eth0").state is ResultState.PLACEHOLDER
        assert ui.cell(CheckKind.CURL, "eth0").state is ResultState.PLACEHOLDER
        assert ui.cell(CheckKind.PING, "wlan0").state is ResultState.SUCCESS

    def test_snapshot_and_restore(self, ui: UIStateController) -> None:
        ui.mark_result(CheckKind.PING, "wlan0", "20 ms")
        before = ui.snapshot_results(CheckKind.PING)

        ui.mark_pending(CheckKind.PING, "wlan0")
        ui.restore_result(CheckKind.PING, "wlan0", before["wlan0"])

        assert set(before) == {"eth0", "wlan0"}
        assert ui.cell(CheckKind.PING, "wlan0").text == "✔ 20 ms"


class TestDefaultIndicator:
    """Test UIStateController.set_default_indicator()."""

    def test_switch(self, ui: UIStateController) -> None:
        ui.set_default_indicator("wlan0")

        eth0 = ui.gateway_button("eth0")
        wlan0 = ui.gateway_button("wlan0")
        assert wlan0.label == LABEL_DEFAULT
        assert wlan0.disabled is True
        assert CLASS_PRIMARY in wlan0.classes and CLASS_POSITIVE not in wlan0.classes
        assert eth0.label == LABEL_MAKE_DEFAULT
        assert eth0.disabled is False
        assert CLASS_POSITIVE in eth0.classes and CLASS_PRIMARY not in eth0.classes

    @pytest.mark.parametrize("sequence", [
        ["wlan0"],
        ["wlan0", "eth0"],
        ["eth0", "eth0", "wlan0"],
        ["wlan0", "wlan0", "eth0", "wlan0"],
    ])
    def test_at_most_one_default(self, ui: UIStateController, sequence: list[str]) -> None:
        for key in sequence:
            ui.set_default_indicator(key)

        assert default_labels(ui) == [sequence[-1]]

    def test_unknown_key_clears_default(self, ui: UIStateController) -> None:
        ui.set_default_indicator("eth9")

        assert default_labels(ui) == []

    def test_buttons_without_key_skipped(self, ui: UIStateController) -> None:
        stray = Control(role=ControlRole.GATEWAY, key=None, label="Make Default")
        ui.gateway_buttons.append(stray)

        ui.set_default_indicator("wlan0")

        assert stray.label == "Make Default"
        assert stray.classes == set()


class TestDispatch:
    """Test attach/detach and dispatch()."""

    def test_attach_idempotent(self) -> None:
        controller = UIStateController()

        controller.attach()
        controller.attach()
        assert controller.attached is True

        controller.detach()
        controller.detach()
        assert controller.attached is False

    def test_dispatch_runs_handler(self, ui: UIStateController) -> None:
        handler = AsyncMock()
        ui.register(ControlRole.TEST, handler)
        ui.attach()

        async def click() -> None:
            await ui.dispatch(ui.test_button("wlan0"))

        asyncio.run(click())

        handler.assert_awaited_once_with("wlan0")

    def test_detached_ignored(self, ui: UIStateController) -> None:
        handler = AsyncMock()
        ui.register(ControlRole.TEST, handler)

        async def click():
            return ui.dispatch(ui.test_button("wlan0"))

        assert asyncio.run(click()) is None
        handler.assert_not_awaited()

    def test_disabled_ignored(self, ui: UIStateController) -> None:
        handler = AsyncMock()
        ui.register(ControlRole.GATEWAY, handler)
        ui.attach()

        async def click():
            return ui.dispatch(ui.gateway_button("eth0"))

        assert asyncio.run(click()) is None
        handler.assert_not_awaited()

    def test_unregistered_role_ignored(self, ui: UIStateController) -> None:
        ui.attach()

        async def click():
            return ui.dispatch(ui.test_button("eth0"))

        assert asyncio.run(click()) is None

    def test_one_handler_per_role(self, ui: UIStateController, rendered_table: RenderedTable) -> None:
        first, second = AsyncMock(), AsyncMock()
        ui.register(ControlRole.TEST_ALL, first)
        ui.register(ControlRole.TEST_ALL, second)
        ui.attach()

        async def click() -> None:
            await ui.dispatch(rendered_table.test_all_control)

        asyncio.run(click())

        first.assert_not_awaited()
        second.assert_awaited_once_with(None)
