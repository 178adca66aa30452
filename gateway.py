"""
Default gateway switching.
"""

from typing import Optional

from logging_config import get_logger
from models import InterfaceMap
from notifications import NotificationCenter
from rpc.api import RouteKeeperApi
from rpc.client import RpcError
from rpc.schemas import ABSENT
from ui_state import UIStateController
from utils.system import sanitize_for_log

logger = get_logger(__name__)


class GatewaySwitcher:
    """
    Asks the backend to move the default route to another interface.

    Attributes:
        default_gateway: Raw name of the interface currently marked default
    """

    def __init__(
        self,
        api: RouteKeeperApi,
        ui: UIStateController,
        interfaces: InterfaceMap,
        notifications: NotificationCenter,
        default_gateway: str = ""
    ) -> None:
        self.api = api
        self.ui = ui
        self.interfaces = interfaces
        self.notifications = notifications
        self.default_gateway = default_gateway

    async def set_default(self, key: Optional[str]) -> bool:
        """
        Make the interface behind key the default gateway.

        The target button is disabled while the request is in flight, which
        also swallows repeated activations. Afterwards it is re-enabled unless
        it now marks the default.

        Returns:
            True if the backend confirmed the switch
        """
        button = self.ui.gateway_button(key) if key else None
        if button is None or button.disabled:
            logger.debug("Ignoring gateway switch for %s", sanitize_for_log(key))
            return False

        iface = self.interfaces.lookup(key)
        button.disabled = True
        switched = False

        try:
            response = await self.api.set_default_gateway(iface)
        except RpcError as e:
            logger.error("Switching default gateway to %s failed: %s", sanitize_for_log(iface), sanitize_for_log(e))
            self.notifications.error(f"API error setting default gateway to '{iface}'.")
        else:
            if response.success is ABSENT:
                logger.warning("set_default_gateway reply has no 'success' field")

            if response.ok:
                switched = True
                self.default_gateway = iface
                self.ui.set_default_indicator(key)
                self.notifications.info(f"Default gateway set to '{iface}'.")
            else:
                self.notifications.error(f"Failed to set default gateway to '{iface}'.")
        finally:
            button.disabled = self.ui.control_state(key).is_default_gateway

        return switched
