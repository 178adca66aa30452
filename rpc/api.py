"""
Async facade over the luci.routekeeper ubus object.

One coroutine per backend method. Each call runs the blocking UbusClient
request in a worker thread, so the event loop (and every control-state
mutation on it) stays single-threaded while requests are in flight.

All coroutines raise RpcError subclasses on failure; deciding what a failure
means for the page is left to the callers.
"""

import asyncio
from typing import Any, Optional

from logging_config import get_logger
from config import RPC_OBJECT
from enums import CheckKind
from rpc.client import UbusClient
from rpc.schemas import (
    InterfacesResponse,
    DefaultInterfaceResponse,
    SuccessResponse,
    CheckResponse,
    BulkCheckResponse,
    SettingsResponse,
)
from utils.system import sanitize_for_log

logger = get_logger(__name__)


class RouteKeeperApi:
    """Typed, awaitable access to the routekeeper backend."""

    def __init__(self, client: UbusClient, obj: str = RPC_OBJECT) -> None:
        self.client = client
        self.obj = obj

    async def _call(self, method: str, params: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        return await asyncio.to_thread(self.client.call, self.obj, method, params or {})

    async def get_interfaces(self) -> InterfacesResponse:
        return InterfacesResponse.from_data(await self._call("get_interfaces"))

    async def find_default_interface(self) -> DefaultInterfaceResponse:
        return DefaultInterfaceResponse.from_data(await self._call("find_active_default_if"))

    async def set_default_gateway(self, interface: str) -> SuccessResponse:
        logger.info("Requesting default gateway switch to %s", sanitize_for_log(interface))
        return SuccessResponse.from_data(
            await self._call("set_default_gateway", {"interface": interface})
        )

    async def run_test(self, kind: CheckKind, interface: str) -> CheckResponse:
        """Run one ping or curl test on one interface."""
        data = await self._call(f"run_{kind.value}_test", {"interface": interface})
        return CheckResponse.from_data(kind, data)

    async def run_ping_test(self, interface: str) -> CheckResponse:
        return await self.run_test(CheckKind.PING, interface)

    async def run_curl_test(self, interface: str) -> CheckResponse:
        return await self.run_test(CheckKind.CURL, interface)

    async def run_test_all(self, kind: CheckKind) -> BulkCheckResponse:
        """Run one ping or curl test on every interface known to the backend."""
        data = await self._call(f"run_{kind.value}_test_all")
        return BulkCheckResponse.from_data(kind, data)

    async def run_ping_test_all(self) -> BulkCheckResponse:
        return await self.run_test_all(CheckKind.PING)

    async def run_curl_test_all(self) -> BulkCheckResponse:
        return await self.run_test_all(CheckKind.CURL)

    async def load_settings(self) -> SettingsResponse:
        return SettingsResponse.from_data(await self._call("load_settings"))

    async def save_settings(self, settings: dict[str, str]) -> SuccessResponse:
        """Persist a partial settings patch."""
        return SuccessResponse.from_data(
            await self._call("save_settings", {"settings": settings})
        )
