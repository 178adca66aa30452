"""
Test Settings section of the page.

One row per schema key (label, input field, description, Save button) plus
the test type selector. A row's input is empty while the persisted value
equals the built-in default; the default is shown as placeholder instead.

Writes go through SettingsStore and are merged into the local view only after
the backend acknowledged them.
"""

from typing import Any, Mapping, Optional

from logging_config import get_logger
from config import (
    SETTINGS_OPTIONS,
    TEST_TYPE_KEY,
    TEST_TYPE_LABEL,
    TEST_TYPE_CHOICES,
    LABEL_DEFAULT,
    LABEL_SAVE,
    CLASS_BUTTON,
    CLASS_POSITIVE,
    CLASS_SAVE,
)
from enums import ControlRole, CheckType
from models import Control, SettingsRow
from notifications import NotificationCenter
from orchestrator import resolve_test_type
from settings_store import SettingsStore, effective
from utils.system import sanitize_for_log

logger = get_logger(__name__)


class SettingsForm:
    """
    Editable view of the test settings.

    Attributes:
        current: Effective settings as last confirmed by the backend
        rows: Settings rows keyed by setting key, in schema order
        test_type: Value shown by the test type selector
    """

    def __init__(self, store: SettingsStore, notifications: NotificationCenter) -> None:
        self.store = store
        self.notifications = notifications
        self.current: dict[str, Any] = effective({})
        self.rows: dict[str, SettingsRow] = {}
        self.test_type = CheckType.BOTH.value

    @property
    def choices(self) -> list[tuple[str, str]]:
        return list(TEST_TYPE_CHOICES)

    @property
    def controls(self) -> list[Control]:
        return [row.save_control for row in self.rows.values()]

    def render(self, settings: Mapping[str, Any]) -> list[SettingsRow]:
        """Build the rows from freshly loaded (persisted) settings."""
        self.current = effective(settings)
        self.test_type = resolve_test_type(settings.get(TEST_TYPE_KEY)).value

        self.rows = {}
        for option in SETTINGS_OPTIONS:
            value = self.current[option.key]
            self.rows[option.key] = SettingsRow(
                option=option,
                value="" if value == option.default else str(value),
                save_control=Control(
                    role=ControlRole.SAVE,
                    key=option.key,
                    label=LABEL_SAVE,
                    classes={CLASS_BUTTON, CLASS_POSITIVE, CLASS_SAVE},
                ),
            )

        return list(self.rows.values())

    def set_input(self, key: str, text: str) -> None:
        """Type text into a row's input field."""
        self.rows[key].value = text

    async def save_row(self, key: Optional[str]) -> bool:
        """
        Persist the value typed into one row.

        An empty input means "back to default". Unchanged values are not sent.

        Returns:
            True if a new value was saved
        """
        row = self.rows.get(key) if key else None
        if row is None:
            logger.warning("Save requested for unknown setting %s", sanitize_for_log(key))
            return False

        label = row.option.label
        default = row.option.default
        new_value = row.value.strip()
        current_value = str(self.current.get(key, default))

        if new_value == current_value or (new_value == "" and current_value == default):
            logger.debug("%s unchanged, nothing to save", label)
            return False

        stored_value = new_value or default

        if not await self.store.save({key: stored_value}):
            self.notifications.error(f"API error updating '{label}'.")
            return False

        self.current[key] = stored_value
        row.value = new_value

        shown_new = new_value or LABEL_DEFAULT
        shown_old = current_value or LABEL_DEFAULT
        self.notifications.info(f"Successfully updated '{label}' from '{shown_old}' to '{shown_new}'.")
        return True

    async def change_test_type(self, value: str) -> bool:
        """
        Persist a new test type selection.

        Returns:
            True if the backend stored it
        """
        if value not in {choice for choice, _ in TEST_TYPE_CHOICES}:
            logger.debug("Ignoring invalid test type %s", sanitize_for_log(value))
            return False

        if not await self.store.save({TEST_TYPE_KEY: value}):
            self.notifications.error(f"API error updating {TEST_TYPE_LABEL}.")
            return False

        self.test_type = value
        self.current[TEST_TYPE_KEY] = value
        self.notifications.info(f"Successfully updated {TEST_TYPE_LABEL} to '{value}'.")
        return True
