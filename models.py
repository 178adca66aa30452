"""
Data structure definitions.

Type-safe data models for the panel page: the interface key map, controls,
result cells, notifications and settings rows.
"""

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional

from config import (
    SettingOption,
    GLYPH_PLACEHOLDER,
    GLYPH_PENDING,
    GLYPH_SUCCESS,
    GLYPH_FAILURE,
    FAILED_TEXT,
)
from enums import ControlRole, NotificationLevel, ResultState, CheckKind
from utils.system import sanitize_key


class InterfaceMap:
    """
    Immutable mapping between sanitized keys and raw interface names.

    Built once per page load from the interface list returned by the backend.
    Sanitized keys replace every non-alphanumeric character with '_'. When two
    raw names sanitize to the same key the later one gets a numeric suffix
    (eth0_2, eth0_2_2, ...) so that every raw name owns exactly one key.

    Lookups for keys that were never produced return the key itself; names
    that were not loaded have no key.
    """

    def __init__(self, interfaces: Iterable[str]) -> None:
        by_key: dict[str, str] = {}
        by_name: dict[str, str] = {}

        for name in interfaces:
            if name in by_name:
                continue

            base = key = sanitize_key(name)
            suffix = 2
            while key in by_key:
                key = f"{base}_{suffix}"
                suffix += 1

            by_key[key] = name
            by_name[name] = key

        self._by_key = by_key
        self._by_name = by_name

    def lookup(self, key: str) -> str:
        """Return the raw interface name for a key, or the key itself."""
        return self._by_key.get(key, key)

    def key_for(self, name: str) -> Optional[str]:
        """Return the key for a raw interface name, None if it was not loaded."""
        return self._by_name.get(name)

    def keys(self) -> list[str]:
        """Keys in load order."""
        return list(self._by_key)

    def names(self) -> list[str]:
        """Raw interface names in load order."""
        return list(self._by_key.values())

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._by_key))

    def __len__(self) -> int:
        return len(self._by_key)

    def __repr__(self) -> str:
        return f"InterfaceMap({self._by_key!r})"


@dataclass(eq=False)
class Control:
    """
    One interactive button on the page.

    Attributes:
        role: What the control triggers when activated
        key: Data attribute (interface key or settings key), None for Test All
        label: Visible text
        classes: Style classes (cbi-button-*)
        disabled: Whether activation is currently ignored
    """

    role: ControlRole
    key: Optional[str]
    label: str
    classes: set[str] = field(default_factory=set)
    disabled: bool = False


@dataclass
class ResultCell:
    """
    Result indicator for one interface and one test kind.

    Attributes:
        kind: ping or curl
        key: Sanitized interface key
        state: Placeholder, pending, success or failure
        value: Backend-supplied result text on success
    """

    kind: CheckKind
    key: str
    state: ResultState = ResultState.PLACEHOLDER
    value: Optional[str] = None

    @property
    def text(self) -> str:
        """Rendered cell content."""
        if self.state is ResultState.PENDING:
            return GLYPH_PENDING
        if self.state is ResultState.SUCCESS:
            return f"{GLYPH_SUCCESS} {self.value}"
        if self.state is ResultState.FAILURE:
            return f"{GLYPH_FAILURE} {FAILED_TEXT}"
        return GLYPH_PLACEHOLDER

    def snapshot(self) -> tuple[ResultState, Optional[str]]:
        """Current state and value, suitable for restore()."""
        return self.state, self.value

    def restore(self, snapshot: tuple[ResultState, Optional[str]]) -> None:
        self.state, self.value = snapshot


@dataclass(frozen=True)
class ControlState:
    """
    Derived affordance state of one interface.

    Attributes:
        testing_disabled: The interface's Test button is disabled
        is_default_gateway: The interface's gateway button reads "Default"
    """

    testing_disabled: bool
    is_default_gateway: bool


@dataclass(eq=False)
class Notification:
    """
    User-visible banner.

    Attributes:
        message: Text shown to the operator
        level: info or error
        transient: Dismissed automatically after a short delay
        dismissed: Removed from the page
    """

    message: str
    level: NotificationLevel
    transient: bool = False
    dismissed: bool = False


@dataclass(eq=False)
class SettingsRow:
    """
    One row of the Test Settings table.

    The input value is empty while the persisted value equals the default,
    the default is then shown as placeholder.
    """

    option: SettingOption
    value: str
    save_control: Control

    @property
    def placeholder(self) -> str:
        return self.option.default
