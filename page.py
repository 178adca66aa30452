"""
RouteKeeper page composition root.

Loads the initial data, renders the interface table and the settings
section, wires the click dispatch table once, and lets callers activate
controls the way an operator would.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Optional

from logging_config import get_logger
from display import RenderedTable, TableRenderer
from enums import ControlRole
from gateway import GatewaySwitcher
from models import Control, InterfaceMap
from notifications import NotificationCenter
from orchestrator import RunOrchestrator
from rpc.api import RouteKeeperApi
from rpc.client import RpcError
from rpc.schemas import ABSENT
from settings_form import SettingsForm
from settings_store import SettingsStore
from ui_state import UIStateController
from utils.system import sanitize_for_log

logger = get_logger(__name__)


@dataclass
class PageData:
    """Initial data fetched when the page opens."""

    interfaces: list[str] = field(default_factory=list)
    default_gateway: str = ""
    settings: dict[str, Any] = field(default_factory=dict)


class RouteKeeperPage:
    """
    The interface table plus the Test Settings section.

    Attributes:
        ui: Control/cell state and click dispatch
        table: Last rendered interface table (None before render())
        interfaces: Key map for the interfaces of the last load
    """

    def __init__(self, api: RouteKeeperApi, notifications: Optional[NotificationCenter] = None) -> None:
        self.api = api
        self.notifications = notifications or NotificationCenter()
        self.settings = SettingsStore(api)
        self.settings_form = SettingsForm(self.settings, self.notifications)
        self.ui = UIStateController()
        self.renderer = TableRenderer()
        self.renderer.on_rendered(lambda table: self.ui.capture(table.controls, table.cells))

        self.interfaces = InterfaceMap([])
        self.table: Optional[RenderedTable] = None
        self.orchestrator: Optional[RunOrchestrator] = None
        self.gateway: Optional[GatewaySwitcher] = None

    # ------------------------------------------------------------------
    # Load
    # ------------------------------------------------------------------

    async def load(self) -> PageData:
        """Fetch interfaces, default gateway and settings concurrently."""
        interfaces, default_gateway, settings = await asyncio.gather(
            self._load_interfaces(),
            self._load_default_gateway(),
            self.settings.load(),
        )

        logger.info("Found %d interfaces, default gateway %s",
                    len(interfaces), sanitize_for_log(default_gateway or "none"))

        return PageData(interfaces=interfaces, default_gateway=default_gateway, settings=settings)

    async def _load_interfaces(self) -> list[str]:
        try:
            response = await self.api.get_interfaces()
        except RpcError as e:
            logger.error("Could not list interfaces: %s", sanitize_for_log(e))
            return []

        if response.interfaces is ABSENT:
            logger.warning("get_interfaces reply has no 'interfaces' field")
            return []

        return response.interfaces

    async def _load_default_gateway(self) -> str:
        try:
            response = await self.api.find_default_interface()
        except RpcError as e:
            logger.error("Could not determine default gateway: %s", sanitize_for_log(e))
            return ""

        if response.default_interface is ABSENT:
            logger.debug("find_active_default_if reply has no 'default_interface' field")
            return ""

        return response.default_interface

    # ------------------------------------------------------------------
    # Render
    # ------------------------------------------------------------------

    def render(self, data: PageData) -> RenderedTable:
        """Build the page from loaded data and attach click dispatch."""
        self.interfaces = InterfaceMap(data.interfaces)
        self.orchestrator = RunOrchestrator(self.api, self.settings, self.ui, self.interfaces)
        self.gateway = GatewaySwitcher(
            self.api, self.ui, self.interfaces, self.notifications,
            default_gateway=data.default_gateway,
        )

        self.ui.register(ControlRole.TEST, self.orchestrator.test_one)
        self.ui.register(ControlRole.TEST_ALL, self._test_all)
        self.ui.register(ControlRole.GATEWAY, self.gateway.set_default)
        self.ui.register(ControlRole.SAVE, self.settings_form.save_row)

        self.table = self.renderer.render(self.interfaces, data.default_gateway)
        self.settings_form.render(data.settings)

        self.ui.attach()
        return self.table

    async def open(self) -> RenderedTable:
        return self.render(await self.load())

    def close(self) -> None:
        self.ui.detach()

    async def _test_all(self, _key: Optional[str]) -> None:
        await self.orchestrator.test_all()

    # ------------------------------------------------------------------
    # Interaction
    # ------------------------------------------------------------------

    def find_control(self, role: ControlRole, key: Optional[str] = None) -> Optional[Control]:
        if role is ControlRole.SAVE:
            row = self.settings_form.rows.get(key)
            return row.save_control if row else None
        if self.table is None:
            return None
        return self.table.find(role, key)

    async def click(self, role: ControlRole, key: Optional[str] = None) -> bool:
        """
        Activate a control and wait for its handler to finish.

        Returns:
            False if no such control exists or the click was ignored
        """
        control = self.find_control(role, key)
        if control is None:
            logger.warning("No %s control for %s", role, sanitize_for_log(key))
            return False

        task = self.ui.dispatch(control)
        if task is None:
            return False

        await task
        return True
