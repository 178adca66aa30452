"""
Enumeration types for routekeeper.

Provides type-safe constants for test kinds, test types, control roles,
result states and run states.
"""

from enum import Enum


class CheckKind(str, Enum):
    """
    A single connectivity check the backend can run on an interface.

    Inherits from str so values can be used directly as cell ids
    and RPC field prefixes (ping_result, curl_result).
    """

    PING = "ping"
    CURL = "curl"

    def __str__(self) -> str:
        """Return the value for string operations."""
        return self.value

    @property
    def result_field(self) -> str:
        """Name of the RPC response field carrying this kind's value."""
        return f"{self.value}_result"


class CheckType(str, Enum):
    """
    Health check selection stored in the test_type setting.
    """

    PING = "ping"
    CURL = "curl"
    BOTH = "both"

    def __str__(self) -> str:
        """Return the value for string operations."""
        return self.value

    @property
    def kinds(self) -> tuple[CheckKind, ...]:
        """Test kinds selected by this type, ping first."""
        if self is CheckType.PING:
            return (CheckKind.PING,)
        if self is CheckType.CURL:
            return (CheckKind.CURL,)
        return (CheckKind.PING, CheckKind.CURL)


class ControlRole(str, Enum):
    """
    Role of an interactive control, used as the dispatch table key.
    """
    TEST = "test"
    TEST_ALL = "test_all"
    GATEWAY = "gateway"
    SAVE = "save"

    def __str__(self) -> str:
        """Return the value for string operations."""
        return self.value


class ResultState(str, Enum):
    """
    Display state of one result cell.
    """
    PLACEHOLDER = "placeholder"
    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"

    def __str__(self) -> str:
        """Return the value for string operations."""
        return self.value


class RunState(str, Enum):
    """
    Phases of one test run.
    """
    IDLE = "idle"
    DISABLING = "disabling"
    RESOLVING_SETTINGS = "resolving-settings"
    PENDING = "pending"
    COLLECTING = "collecting"

    def __str__(self) -> str:
        """Return the value for string operations."""
        return self.value


class NotificationLevel(str, Enum):
    """
    Severity of a user-visible notification.
    """
    INFO = "info"
    ERROR = "error"

    def __str__(self) -> str:
        """Return the value for string operations."""
        return self.value
