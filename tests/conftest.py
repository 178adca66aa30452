"""
Pytest configuration and shared fixtures.

Provides a mocked backend API, rendered tables and page helpers used
throughout the test suite. Async code is driven with asyncio.run().
"""

import pytest
from typing import Generator
from unittest.mock import MagicMock
import logging

from _pytest.logging import LogCaptureFixture
from display import RenderedTable, TableRenderer
from enums import CheckKind
from models import InterfaceMap
from notifications import NotificationCenter
from rpc.api import RouteKeeperApi
from rpc.schemas import (
    InterfacesResponse,
    DefaultInterfaceResponse,
    SuccessResponse,
    CheckResponse,
    BulkEntry,
    BulkCheckResponse,
    SettingsResponse,
)
from ui_state import UIStateController


# ============================================================================
# Logging Fixtures
# ============================================================================

@pytest.fixture
def disable_logging() -> Generator[None, None, None]:
    """Disable logging during tests to reduce noise."""
    logging.disable(logging.CRITICAL)
    yield
    logging.disable(logging.NOTSET)


@pytest.fixture
def caplog_debug(caplog: LogCaptureFixture) -> LogCaptureFixture:
    """Capture DEBUG level logs in tests."""
    caplog.set_level(logging.DEBUG)
    return caplog


# ============================================================================
# Backend Fixtures
# ============================================================================

def single_reply(kind: CheckKind, interface: str) -> CheckResponse:
    """Default single-test reply: '<iface> ok'."""
    return CheckResponse(kind=kind, value=f"{interface} {kind} ok")


def bulk_reply(kind: CheckKind) -> BulkCheckResponse:
    """Default bulk reply: both interfaces succeed."""
    return BulkCheckResponse(kind=kind, results=(
        BulkEntry(interface="eth0", success=True, value=f"eth0 {kind} ok"),
        BulkEntry(interface="wlan0", success=True, value=f"wlan0 {kind} ok"),
    ))


@pytest.fixture
def mock_api() -> MagicMock:
    """
    RouteKeeperApi mock for a router with eth0 (default) and wlan0.

    Async methods are AsyncMocks, derived from RouteKeeperApi.
    """
    api = MagicMock(spec=RouteKeeperApi)
    api.get_interfaces.return_value = InterfacesResponse(interfaces=["eth0", "wlan0"])
    api.find_default_interface.return_value = DefaultInterfaceResponse(default_interface="eth0")
    api.load_settings.return_value = SettingsResponse(settings={})
    api.save_settings.return_value = SuccessResponse(success=True)
    api.set_default_gateway.return_value = SuccessResponse(success=True)
    api.run_test.side_effect = single_reply
    api.run_test_all.side_effect = bulk_reply
    return api


# ============================================================================
# Page Model Fixtures
# ============================================================================

@pytest.fixture
def interface_map() -> InterfaceMap:
    return InterfaceMap(["eth0", "wlan0"])


@pytest.fixture
def rendered_table(interface_map: InterfaceMap) -> RenderedTable:
    """Table for eth0/wlan0 with eth0 as default gateway."""
    return TableRenderer().render(interface_map, "eth0")


@pytest.fixture
def ui(rendered_table: RenderedTable) -> UIStateController:
    """UIStateController that captured rendered_table."""
    controller = UIStateController()
    controller.capture(rendered_table.controls, rendered_table.cells)
    return controller


@pytest.fixture
def notifications() -> NotificationCenter:
    return NotificationCenter(dismiss_after=0.01)
