"""
Test run orchestration.

Coordinates one test run against one interface (test_one) or every
interface (test_all):

    Idle -> Disabling -> Resolving-Settings -> Pending -> Collecting -> Idle

Every control is disabled for the duration of a run, so a second run cannot
be started until the first one has settled. Ping and curl calls for the same
scope run concurrently; each is caught on its own so one failing check never
prevents the other from reporting.

Failures (transport or "no result") are shown as failed cells. They are
never raised to the caller and never retried.
"""

import asyncio
from typing import Any, Optional

from logging_config import get_logger
from config import TEST_TYPE_KEY
from enums import RunState, CheckKind, CheckType
from models import InterfaceMap
from rpc.api import RouteKeeperApi
from rpc.client import RpcError
from rpc.schemas import ABSENT
from settings_store import SettingsStore
from ui_state import UIStateController, CellSnapshot
from utils.system import sanitize_for_log

logger = get_logger(__name__)


def resolve_test_type(value: Any) -> CheckType:
    """
    Coerce a persisted test_type value.

    Case and surrounding whitespace are ignored; anything that is not one of
    ping/curl/both (including non-strings) selects both.

    Examples:
        >>> resolve_test_type(" PING ")
        <CheckType.PING: 'ping'>
        >>> resolve_test_type("udp")
        <CheckType.BOTH: 'both'>
    """
    if isinstance(value, str):
        try:
            return CheckType(value.strip().lower())
        except ValueError:
            pass

    if value not in (None, ""):
        logger.debug("Unknown test type %s, running both tests", sanitize_for_log(value))

    return CheckType.BOTH


class RunOrchestrator:
    """
    Runs ping/curl checks through the backend and reports them to the page.

    Attributes:
        state: Current phase of the run in progress (IDLE between runs)
    """

    def __init__(
        self,
        api: RouteKeeperApi,
        settings: SettingsStore,
        ui: UIStateController,
        interfaces: InterfaceMap
    ) -> None:
        self.api = api
        self.settings = settings
        self.ui = ui
        self.interfaces = interfaces
        self.state = RunState.IDLE

    async def load_test_type(self) -> CheckType:
        """Fetch settings fresh and pick the test kinds for this run."""
        self.state = RunState.RESOLVING_SETTINGS
        settings = await self.settings.load_effective()
        test_type = resolve_test_type(settings.get(TEST_TYPE_KEY))
        logger.debug("Test type: %s", test_type)
        return test_type

    # ------------------------------------------------------------------
    # Single interface
    # ------------------------------------------------------------------

    async def test_one(self, key: Optional[str]) -> None:
        """
        Test one interface with the selected checks.

        Args:
            key: Sanitized interface key taken from the Test button
        """
        if not key:
            logger.warning("Test requested without an interface key")
            return

        iface = self.interfaces.lookup(key)
        logger.info("Testing interface %s", sanitize_for_log(iface))

        self.state = RunState.DISABLING
        self.ui.disable_all()
        self.ui.clear_results(key)

        try:
            test_type = await self.load_test_type()

            self.state = RunState.PENDING
            for kind in test_type.kinds:
                self.ui.mark_pending(kind, key)

            self.state = RunState.COLLECTING
            await asyncio.gather(*(
                self._run_single(kind, iface, key) for kind in test_type.kinds
            ))
        finally:
            self.ui.enable_all()
            self.state = RunState.IDLE

        logger.info("Finished testing %s", sanitize_for_log(iface))

    async def _run_single(self, kind: CheckKind, iface: str, key: str) -> None:
        try:
            response = await self.api.run_test(kind, iface)
        except RpcError as e:
            logger.warning("%s test on %s failed: %s", kind, sanitize_for_log(iface), sanitize_for_log(e))
            self.ui.mark_result(kind, key, None)
            return

        if response.value is ABSENT:
            logger.warning("%s test reply for %s has no '%s' field",
                           kind, sanitize_for_log(iface), kind.result_field)

        logger.debug("%s %s -> %s", kind, sanitize_for_log(iface), sanitize_for_log(response.result))
        self.ui.mark_result(kind, key, response.result)

    # ------------------------------------------------------------------
    # All interfaces
    # ------------------------------------------------------------------

    async def test_all(self) -> None:
        """
        Test every interface with one bulk backend call per selected check.

        Interfaces missing from a bulk reply keep the cell state they had
        before the run started.
        """
        logger.info("Testing all %d interfaces", len(self.interfaces))

        self.state = RunState.DISABLING
        self.ui.disable_all()

        try:
            test_type = await self.load_test_type()

            self.state = RunState.PENDING
            before = {kind: self.ui.snapshot_results(kind) for kind in test_type.kinds}
            for key in self.interfaces:
                for kind in test_type.kinds:
                    self.ui.mark_pending(kind, key)

            self.state = RunState.COLLECTING
            await asyncio.gather(*(
                self._run_bulk(kind, before[kind]) for kind in test_type.kinds
            ))
        finally:
            self.ui.enable_all()
            self.state = RunState.IDLE

        logger.info("Finished testing all interfaces")

    async def _run_bulk(self, kind: CheckKind, before: dict[str, CellSnapshot]) -> None:
        try:
            response = await self.api.run_test_all(kind)
        except RpcError as e:
            logger.warning("Bulk %s test failed: %s", kind, sanitize_for_log(e))
            self._fail_all(kind)
            return

        if response.results is ABSENT:
            logger.warning("Bulk %s test reply has no 'results' field", kind)
            self._fail_all(kind)
            return

        reported = set()
        for entry in response.results:
            key = self.interfaces.key_for(entry.interface)
            if key is None:
                logger.debug("Ignoring %s result for unknown interface %s", kind, sanitize_for_log(entry.interface))
                continue
            self.ui.mark_result(kind, key, entry.result)
            reported.add(key)

        for key, snapshot in before.items():
            if key not in reported:
                logger.debug("No %s result for %s, keeping previous state", kind, sanitize_for_log(key))
                self.ui.restore_result(kind, key, snapshot)

        logger.debug("Bulk %s test: %d/%d interfaces reported", kind, len(reported), len(self.interfaces))

    def _fail_all(self, kind: CheckKind) -> None:
        for key in self.interfaces:
            self.ui.mark_result(kind, key, None)
