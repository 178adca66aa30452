"""
Response schemas for the luci.routekeeper ubus object.

Every call has its own dataclass. A field the backend did not send is
represented by ABSENT, which is distinct from an explicit null (None):

    {"ping_result": "12 ms"}  -> CheckResponse(value="12 ms")
    {"ping_result": null}     -> CheckResponse(value=None)
    {}                        -> CheckResponse(value=ABSENT)

Parsers accept absent fields and raise RpcResponseError only when a field is
present with the wrong type.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from logging_config import get_logger
from enums import CheckKind
from rpc.client import RpcResponseError
from utils.system import sanitize_for_log

logger = get_logger(__name__)


class Absent(Enum):
    """Marker type for a field missing from a reply."""
    FIELD = "absent"

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = Absent.FIELD


def _scalar_text(value: Any, field_name: str) -> Optional[str]:
    """Result values are strings; numbers are accepted and stringified."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise RpcResponseError(f"'{field_name}' has type {type(value).__name__}, expected string")


@dataclass(frozen=True)
class InterfacesResponse:
    """get_interfaces -> {interfaces: [str]}"""

    interfaces: Union[list[str], Absent]

    @classmethod
    def from_data(cls, data: dict[str, Any]) -> "InterfacesResponse":
        if "interfaces" not in data:
            return cls(interfaces=ABSENT)

        value = data["interfaces"]
        if not isinstance(value, list) or not all(isinstance(i, str) for i in value):
            raise RpcResponseError("'interfaces' must be a list of strings")

        return cls(interfaces=list(value))


@dataclass(frozen=True)
class DefaultInterfaceResponse:
    """find_active_default_if -> {default_interface: str}; "" means none."""

    default_interface: Union[str, Absent]

    @classmethod
    def from_data(cls, data: dict[str, Any]) -> "DefaultInterfaceResponse":
        if "default_interface" not in data:
            return cls(default_interface=ABSENT)

        value = data["default_interface"]
        if value is None:
            return cls(default_interface="")
        if not isinstance(value, str):
            raise RpcResponseError("'default_interface' must be a string")

        return cls(default_interface=value)


@dataclass(frozen=True)
class SuccessResponse:
    """set_default_gateway / save_settings -> {success: bool}"""

    success: Union[bool, Absent]

    @classmethod
    def from_data(cls, data: dict[str, Any]) -> "SuccessResponse":
        if "success" not in data:
            return cls(success=ABSENT)
        return cls(success=bool(data["success"]))

    @property
    def ok(self) -> bool:
        return self.success is True


@dataclass(frozen=True)
class CheckResponse:
    """run_ping_test / run_curl_test -> {<kind>_result: str|null}"""

    kind: CheckKind
    value: Union[str, None, Absent]

    @classmethod
    def from_data(cls, kind: CheckKind, data: dict[str, Any]) -> "CheckResponse":
        field_name = kind.result_field
        if field_name not in data:
            return cls(kind=kind, value=ABSENT)
        return cls(kind=kind, value=_scalar_text(data[field_name], field_name))

    @property
    def result(self) -> Optional[str]:
        """Value to display, None for absent/null/empty (failure)."""
        if self.value is ABSENT or not self.value:
            return None
        return self.value


@dataclass(frozen=True)
class BulkEntry:
    """One element of a run_*_test_all results list."""

    interface: str
    success: bool
    value: Union[str, None, Absent]

    @property
    def result(self) -> Optional[str]:
        """Value to display, None unless the backend reported success."""
        if not self.success or self.value is ABSENT or not self.value:
            return None
        return self.value


@dataclass(frozen=True)
class BulkCheckResponse:
    """run_ping_test_all / run_curl_test_all -> {results: [{interface, success, <kind>_result}]}"""

    kind: CheckKind
    results: Union[tuple[BulkEntry, ...], Absent]

    @classmethod
    def from_data(cls, kind: CheckKind, data: dict[str, Any]) -> "BulkCheckResponse":
        if "results" not in data:
            return cls(kind=kind, results=ABSENT)

        raw = data["results"]
        if not isinstance(raw, list):
            raise RpcResponseError("'results' must be a list")

        field_name = kind.result_field
        entries = []
        for item in raw:
            if not isinstance(item, dict) or not isinstance(item.get("interface"), str):
                logger.warning("Skipping %s result without interface: %s", kind, sanitize_for_log(item))
                continue

            try:
                value = _scalar_text(item[field_name], field_name) if field_name in item else ABSENT
            except RpcResponseError as e:
                # A bad entry fails only its own interface
                logger.warning("Malformed %s result for %s: %s",
                               kind, sanitize_for_log(item["interface"]), sanitize_for_log(e))
                entries.append(BulkEntry(interface=item["interface"], success=False, value=None))
                continue

            entries.append(BulkEntry(
                interface=item["interface"],
                success=bool(item.get("success", False)),
                value=value,
            ))

        return cls(kind=kind, results=tuple(entries))


@dataclass(frozen=True)
class SettingsResponse:
    """load_settings -> {settings: mapping}"""

    settings: Union[dict[str, Any], Absent]

    @classmethod
    def from_data(cls, data: dict[str, Any]) -> "SettingsResponse":
        if "settings" not in data:
            return cls(settings=ABSENT)

        value = data["settings"]
        if value is None:
            return cls(settings={})
        if not isinstance(value, dict):
            raise RpcResponseError("'settings' must be an object")

        return cls(settings=dict(value))
