"""
Test settings persistence.

Loads persisted test configuration from the backend, overlays it on the
built-in defaults, and sends partial updates back.

Settings are never cached here: every test run and every settings render
fetches them fresh.
"""

from typing import Any, Mapping

from logging_config import get_logger
from config import DEFAULT_SETTINGS
from rpc.api import RouteKeeperApi
from rpc.client import RpcError
from rpc.schemas import ABSENT
from utils.system import sanitize_for_log

logger = get_logger(__name__)


def effective(raw: Mapping[str, Any]) -> dict[str, Any]:
    """
    Overlay persisted settings on the defaults.

    Every schema key is present in the result. Keys with a None value count
    as not persisted; unknown keys are passed through.

    Examples:
        >>> effective({"ping_count": "3"})["ping_count"]
        '3'
        >>> effective({})["test_type"]
        'both'
    """
    merged: dict[str, Any] = dict(DEFAULT_SETTINGS)
    merged.update({key: value for key, value in raw.items() if value is not None})
    return merged


class SettingsStore:
    """Backend-backed store for the test settings."""

    def __init__(self, api: RouteKeeperApi) -> None:
        self.api = api

    async def load(self) -> dict[str, Any]:
        """
        Fetch persisted settings.

        Returns:
            The persisted mapping, or {} if the call failed or the backend
            sent no settings object. Never raises RpcError.
        """
        try:
            response = await self.api.load_settings()
        except RpcError as e:
            logger.warning("Could not load settings, using defaults: %s", sanitize_for_log(e))
            return {}

        if response.settings is ABSENT:
            logger.debug("load_settings returned no 'settings' field, using defaults")
            return {}

        return response.settings

    async def load_effective(self) -> dict[str, Any]:
        """Fetch persisted settings and overlay them on the defaults."""
        return effective(await self.load())

    @staticmethod
    def effective(raw: Mapping[str, Any]) -> dict[str, Any]:
        return effective(raw)

    async def save(self, patch: Mapping[str, str]) -> bool:
        """
        Persist a partial update.

        Args:
            patch: Keys to change and their new values

        Returns:
            True only if the backend acknowledged the write
        """
        logger.debug("Saving settings %s", sanitize_for_log(dict(patch)))

        try:
            response = await self.api.save_settings(dict(patch))
        except RpcError as e:
            logger.error("Saving settings failed: %s", sanitize_for_log(e))
            return False

        if response.success is ABSENT:
            logger.warning("save_settings reply has no 'success' field, treating as failure")
            return False

        if not response.ok:
            logger.warning("Backend rejected settings update %s", sanitize_for_log(list(patch)))

        return response.ok
