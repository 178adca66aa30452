"""
Rendering and terminal output.

TableRenderer builds the interface table (one row per interface plus the
"Test All Interfaces" row) and tells its listeners when rendering is
complete, handing over every control and result cell it created.

The format_* / print_page functions turn the page model into terminal text.
"""

from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from config import (
    TABLE_COLUMNS,
    SETTINGS_COLUMNS,
    COLUMN_SEPARATOR,
    Colors,
    LABEL_DEFAULT,
    LABEL_MAKE_DEFAULT,
    LABEL_TEST,
    CLASS_BUTTON,
    CLASS_ACTION,
    CLASS_PRIMARY,
    CLASS_POSITIVE,
    CLASS_TEST_ALL,
    TEST_ALL_LABEL,
    TEST_TYPE_LABEL,
)
from enums import ControlRole, NotificationLevel, ResultState, CheckKind
from models import Control, InterfaceMap, Notification, ResultCell, SettingsRow


# ============================================================================
# Page Model
# ============================================================================

@dataclass(eq=False)
class InterfaceRow:
    """One interface row of the table."""

    key: str
    name: str
    test_control: Control
    curl_cell: ResultCell
    ping_cell: ResultCell
    gateway_control: Control


@dataclass(eq=False)
class RenderedTable:
    """Everything the renderer produced for the interface table."""

    rows: list[InterfaceRow]
    test_all_control: Control

    @property
    def controls(self) -> list[Control]:
        controls = []
        for row in self.rows:
            controls.extend((row.test_control, row.gateway_control))
        controls.append(self.test_all_control)
        return controls

    @property
    def cells(self) -> list[ResultCell]:
        cells = []
        for row in self.rows:
            cells.extend((row.curl_cell, row.ping_cell))
        return cells

    def find(self, role: ControlRole, key: Optional[str] = None) -> Optional[Control]:
        return next((c for c in self.controls if c.role is role and c.key == key), None)


def gateway_control(key: str, is_default: bool) -> Control:
    """Default / Make Default button for one interface."""
    return Control(
        role=ControlRole.GATEWAY,
        key=key,
        label=LABEL_DEFAULT if is_default else LABEL_MAKE_DEFAULT,
        classes={CLASS_BUTTON, CLASS_PRIMARY if is_default else CLASS_POSITIVE},
        disabled=is_default,
    )


class TableRenderer:
    """Builds the interface table and announces completion."""

    def __init__(self) -> None:
        self._listeners: list[Callable[[RenderedTable], None]] = []

    def on_rendered(self, listener: Callable[[RenderedTable], None]) -> None:
        """Call listener with the finished table after every render()."""
        self._listeners.append(listener)

    def render(self, interfaces: InterfaceMap, default_gateway: str) -> RenderedTable:
        """
        Build one row per interface, in load order.

        Args:
            interfaces: Key map built from the backend's interface list
            default_gateway: Raw name of the current default ("" if none)
        """
        rows = []
        for key in interfaces:
            name = interfaces.lookup(key)
            rows.append(InterfaceRow(
                key=key,
                name=name,
                test_control=Control(
                    role=ControlRole.TEST,
                    key=key,
                    label=LABEL_TEST,
                    classes={CLASS_BUTTON, CLASS_ACTION},
                ),
                curl_cell=ResultCell(kind=CheckKind.CURL, key=key),
                ping_cell=ResultCell(kind=CheckKind.PING, key=key),
                gateway_control=gateway_control(key, bool(default_gateway) and name == default_gateway),
            ))

        table = RenderedTable(
            rows=rows,
            test_all_control=Control(
                role=ControlRole.TEST_ALL,
                key=None,
                label=LABEL_TEST,
                classes={CLASS_BUTTON, CLASS_ACTION, CLASS_TEST_ALL},
            ),
        )

        for listener in self._listeners:
            listener(table)

        return table


# ============================================================================
# Terminal Output
# ============================================================================

CELL_COLORS = {
    ResultState.SUCCESS: Colors.GREEN,
    ResultState.FAILURE: Colors.RED,
    ResultState.PENDING: Colors.CYAN,
}


def paint(text: str, color: str, use_colors: bool) -> str:
    return f"{color}{text}{Colors.RESET}" if use_colors and color else text


def format_cell(cell: ResultCell, width: int, use_colors: bool = True) -> str:
    """Pad first, then colour, so ANSI codes do not break alignment."""
    return paint(cell.text.ljust(width), CELL_COLORS.get(cell.state, ""), use_colors)


def format_button(control: Control) -> str:
    """[Label] for enabled buttons, (Label) for disabled ones."""
    return f"({control.label})" if control.disabled else f"[{control.label}]"


def _total_width(columns: list[tuple[str, int]]) -> int:
    return sum(width for _, width in columns) + len(COLUMN_SEPARATOR) * (len(columns) - 1)


def format_interface_table(table: RenderedTable, use_colors: bool = True) -> str:
    """
    Format the interface table.

    Color coding:
    - GREEN: test succeeded (value shown)
    - RED: test failed
    - CYAN: test in flight
    - YELLOW: current default gateway
    """
    widths = dict(TABLE_COLUMNS)
    total_width = _total_width(TABLE_COLUMNS)

    lines = ["=" * total_width]
    lines.append(COLUMN_SEPARATOR.join(name.ljust(width) for name, width in TABLE_COLUMNS))
    lines.append("-" * total_width)

    for row in table.rows:
        gateway = format_button(row.gateway_control).ljust(widths["DEFAULT_GATEWAY"])
        if row.gateway_control.label == LABEL_DEFAULT:
            gateway = paint(gateway, Colors.YELLOW, use_colors)

        lines.append(COLUMN_SEPARATOR.join([
            row.name[:widths["INTERFACE"]].ljust(widths["INTERFACE"]),
            format_button(row.test_control).ljust(widths["TEST"]),
            format_cell(row.curl_cell, widths["CURL_RESULT"], use_colors),
            format_cell(row.ping_cell, widths["PING_RESULT"], use_colors),
            gateway,
        ]))

    lines.append("-" * total_width)
    lines.append(COLUMN_SEPARATOR.join([
        TEST_ALL_LABEL.ljust(widths["INTERFACE"] + len(COLUMN_SEPARATOR) + widths["TEST"]),
        format_button(table.test_all_control),
    ]))
    lines.append("=" * total_width)

    return "\n".join(lines)


def format_settings(rows: Iterable[SettingsRow], test_type: str) -> str:
    """Format the Test Settings table; empty values mean "use default"."""
    widths = dict(SETTINGS_COLUMNS)
    total_width = _total_width(SETTINGS_COLUMNS)

    lines = [f"{TEST_TYPE_LABEL}: {test_type}", "=" * total_width]
    lines.append(COLUMN_SEPARATOR.join(name.ljust(width) for name, width in SETTINGS_COLUMNS))
    lines.append("-" * total_width)

    for row in rows:
        lines.append(COLUMN_SEPARATOR.join([
            row.option.label.ljust(widths["SETTING"]),
            (row.value or "-").ljust(widths["VALUE"]),
            row.placeholder,
        ]))

    lines.append("=" * total_width)
    return "\n".join(lines)


def format_notifications(notifications: Iterable[Notification], use_colors: bool = True) -> str:
    lines = []
    for note in notifications:
        color = Colors.RED if note.level is NotificationLevel.ERROR else Colors.GREEN
        lines.append(paint(f"[{note.level}] {note.message}", color, use_colors))
    return "\n".join(lines)


def print_page(
    table: RenderedTable,
    notifications: Iterable[Notification] = (),
    use_colors: bool = True
) -> None:
    """Print notifications followed by the interface table."""
    banner = format_notifications(notifications, use_colors)
    if banner:
        print(banner)
        print()
    print(format_interface_table(table, use_colors))
