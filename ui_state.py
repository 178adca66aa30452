"""
Control and result-cell state of the interface table.

UIStateController owns the cached test buttons, default-gateway buttons and
result cells of the rendered table, and the dispatch table that routes an
activated control to its handler.

The caches are filled from the renderer's "rendering complete" notification
(capture()), never by polling for controls after a delay.
"""

import asyncio
from typing import Any, Awaitable, Callable, Iterable, Optional

from logging_config import get_logger
from config import (
    LABEL_DEFAULT,
    LABEL_MAKE_DEFAULT,
    CLASS_PRIMARY,
    CLASS_POSITIVE,
)
from enums import ControlRole, ResultState, CheckKind
from models import Control, ControlState, ResultCell
from utils.system import sanitize_for_log

logger = get_logger(__name__)

Handler = Callable[[Optional[str]], Awaitable[Any]]
CellSnapshot = tuple[ResultState, Optional[str]]


class UIStateController:
    """
    Enabled/disabled/labelled state of every control plus result indicators.

    Attributes:
        test_buttons: Per-interface Test buttons and the Test All button
        gateway_buttons: Per-interface Default / Make Default buttons
        cells: Result cells keyed by (kind, interface key)
    """

    def __init__(self) -> None:
        self.test_buttons: list[Control] = []
        self.gateway_buttons: list[Control] = []
        self.cells: dict[tuple[CheckKind, str], ResultCell] = {}
        self._handlers: dict[ControlRole, Handler] = {}
        self._attached = False
        self._tasks: set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------

    def capture(self, controls: Iterable[Control], cells: Iterable[ResultCell] = ()) -> None:
        """Replace the cached controls and cells with a freshly rendered set."""
        controls = list(controls)
        self.test_buttons = [c for c in controls if c.role in (ControlRole.TEST, ControlRole.TEST_ALL)]
        self.gateway_buttons = [c for c in controls if c.role is ControlRole.GATEWAY]
        self.cells = {(cell.kind, cell.key): cell for cell in cells}

        logger.debug("Captured %d test buttons, %d gateway buttons, %d result cells",
                     len(self.test_buttons), len(self.gateway_buttons), len(self.cells))

    @property
    def attached(self) -> bool:
        return self._attached

    def attach(self) -> None:
        """Start routing activated controls to handlers. Safe to call twice."""
        if self._attached:
            return
        self._attached = True
        logger.debug("Click dispatch attached")

    def detach(self) -> None:
        """Stop routing activated controls. Safe to call twice."""
        if not self._attached:
            return
        self._attached = False
        logger.debug("Click dispatch detached")

    def register(self, role: ControlRole, handler: Handler) -> None:
        """Route activations of controls with this role to handler(control.key)."""
        self._handlers[role] = handler

    def dispatch(self, control: Control) -> Optional[asyncio.Task]:
        """
        Activate a control.

        Disabled controls, and any control while detached, are ignored.
        Must be called from the running event loop.

        Returns:
            The task running the handler, or None if nothing was started
        """
        if not self._attached:
            logger.debug("Ignoring %s click: dispatch not attached", control.role)
            return None

        if control.disabled:
            logger.debug("Ignoring click on disabled %s control %s", control.role, sanitize_for_log(control.key))
            return None

        handler = self._handlers.get(control.role)
        if handler is None:
            logger.warning("No handler registered for %s controls", control.role)
            return None

        task = asyncio.get_running_loop().create_task(handler(control.key))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def test_button(self, key: str) -> Optional[Control]:
        return next((c for c in self.test_buttons if c.role is ControlRole.TEST and c.key == key), None)

    def gateway_button(self, key: str) -> Optional[Control]:
        return next((c for c in self.gateway_buttons if c.key == key), None)

    def cell(self, kind: CheckKind, key: str) -> Optional[ResultCell]:
        return self.cells.get((kind, key))

    def control_state(self, key: str) -> ControlState:
        """Derive testing-disabled / is-default flags for one interface."""
        test = self.test_button(key)
        gateway = self.gateway_button(key)
        return ControlState(
            testing_disabled=test.disabled if test else True,
            is_default_gateway=bool(gateway and gateway.label == LABEL_DEFAULT),
        )

    # ------------------------------------------------------------------
    # Bulk enable / disable
    # ------------------------------------------------------------------

    def disable_all(self) -> None:
        for button in self.test_buttons:
            button.disabled = True
        for button in self.gateway_buttons:
            button.disabled = True

    def enable_all(self) -> None:
        """Re-enable every button; the current default's button stays disabled."""
        for button in self.test_buttons:
            button.disabled = False
        for button in self.gateway_buttons:
            button.disabled = button.label.strip() == LABEL_DEFAULT

    # ------------------------------------------------------------------
    # Result cells
    # ------------------------------------------------------------------

    def mark_result(self, kind: CheckKind, key: str, value: Optional[str]) -> None:
        """Show success with value when value is truthy, otherwise failure."""
        cell = self.cell(kind, key)
        if cell is None:
            logger.debug("No %s cell for %s", kind, sanitize_for_log(key))
            return

        if value:
            cell.state, cell.value = ResultState.SUCCESS, value
        else:
            cell.state, cell.value = ResultState.FAILURE, None

    def mark_pending(self, kind: CheckKind, key: str) -> None:
        cell = self.cell(kind, key)
        if cell is not None:
            cell.state, cell.value = ResultState.PENDING, None

    def clear_results(self, key: str) -> None:
        """Reset both cells of one interface to the placeholder."""
        for kind in CheckKind:
            cell = self.cell(kind, key)
            if cell is not None:
                cell.state, cell.value = ResultState.PLACEHOLDER, None

    def snapshot_results(self, kind: CheckKind) -> dict[str, CellSnapshot]:
        """Current state of every cell of one kind, keyed by interface key."""
        return {key: cell.snapshot() for (cell_kind, key), cell in self.cells.items() if cell_kind is kind}

    def restore_result(self, kind: CheckKind, key: str, snapshot: CellSnapshot) -> None:
        cell = self.cell(kind, key)
        if cell is not None:
            cell.restore(snapshot)

    # ------------------------------------------------------------------
    # Default gateway indicator
    # ------------------------------------------------------------------

    def set_default_indicator(self, key: str) -> None:
        """
        Make key's gateway button the only "Default" one.

        Every gateway button is re-derived from the new default, so at most
        one button reads "Default" afterwards no matter how often or in what
        order this is called. Buttons without an interface key are skipped.
        """
        for button in self.gateway_buttons:
            if not button.key:
                continue

            is_default = button.key == key
            button.label = LABEL_DEFAULT if is_default else LABEL_MAKE_DEFAULT
            button.disabled = is_default
            button.classes.discard(CLASS_PRIMARY)
            button.classes.discard(CLASS_POSITIVE)
            button.classes.add(CLASS_PRIMARY if is_default else CLASS_POSITIVE)
