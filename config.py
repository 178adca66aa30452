"""
Centralized configuration for the RouteKeeper panel controller.

All constants, schemas, and configuration values are defined here.
This ensures a single source of truth and makes the tool easy to maintain.

Requires:
    - Python 3.9+
    - OpenWrt router exposing the luci.routekeeper ubus object over rpcd
"""

from dataclasses import dataclass

# ============================================================================
# RPC Backend Configuration
# ============================================================================

# ubus object implemented by the privileged routekeeper rpcd plugin
RPC_OBJECT = "luci.routekeeper"

# JSON-RPC endpoint served by uhttpd-mod-ubus
DEFAULT_ROUTER_URL = "http://192.168.1.1"
UBUS_ENDPOINT_PATH = "/ubus"

# Session id used for unauthenticated calls (session.login itself)
NULL_SESSION_ID = "00000000000000000000000000000000"

DEFAULT_USERNAME = "root"

# Environment variable consulted for the password when --password is omitted
PASSWORD_ENV_VAR = "ROUTEKEEPER_PASSWORD"

# Transport timeout for one JSON-RPC request (seconds).
# Ping/curl timeouts are backend settings, see SETTINGS_OPTIONS.
RPC_TIMEOUT_SECONDS = 30

# Connection-level retry policy (request never reached the router)
RETRY_ATTEMPTS = 3
RETRY_BACKOFF_FACTOR = 0.5

# ubus status codes (libubus enum ubus_msg_status)
UBUS_STATUS = {
    0: "OK",
    1: "INVALID_COMMAND",
    2: "INVALID_ARGUMENT",
    3: "METHOD_NOT_FOUND",
    4: "NOT_FOUND",
    5: "NO_DATA",
    6: "PERMISSION_DENIED",
    7: "TIMEOUT",
    8: "NOT_SUPPORTED",
    9: "UNKNOWN_ERROR",
    10: "CONNECTION_FAILED",
}

# ============================================================================
# Test Settings Schema
# ============================================================================


@dataclass(frozen=True)
class SettingOption:
    """
    One editable row of the Test Settings table.

    Attributes:
        key: Setting key as stored by the backend
        label: Human readable name
        default: Built-in default value
        description: Tooltip shown under the input field
    """

    key: str
    label: str
    default: str
    description: str


SETTINGS_OPTIONS = (
    SettingOption(
        key="curl_address",
        label="Curl Address",
        default="http://www.gstatic.com/generate_204",
        description="The URL used for Curl requests.",
    ),
    SettingOption(
        key="ping_address",
        label="Ping Address",
        default="8.8.8.8",
        description="The IP address used for ping tests.",
    ),
    SettingOption(
        key="curl_timeout",
        label="Curl Timeout",
        default="2",
        description="The maximum time to wait for a Curl response.",
    ),
    SettingOption(
        key="curl_max_time",
        label="Curl Max Time",
        default="2",
        description="The maximum time for the entire Curl request.",
    ),
    SettingOption(
        key="ping_count",
        label="Ping Count",
        default="1",
        description="Number of ping requests to send.",
    ),
    SettingOption(
        key="ping_timeout",
        label="Ping Timeout",
        default="1",
        description="Time to wait for each ping response.",
    ),
)

TEST_TYPE_KEY = "test_type"
TEST_TYPE_LABEL = "Test Type"

# Selector choices in display order: (value, label)
TEST_TYPE_CHOICES = [
    ("both", "Ping & Curl"),
    ("ping", "Ping Only"),
    ("curl", "Curl Only"),
]

DEFAULT_TEST_TYPE = "both"

DEFAULT_SETTINGS = {opt.key: opt.default for opt in SETTINGS_OPTIONS}
DEFAULT_SETTINGS[TEST_TYPE_KEY] = DEFAULT_TEST_TYPE

# ============================================================================
# Notification Configuration
# ============================================================================

# Success banners disappear on their own after this many seconds
NOTIFICATION_DISMISS_SECONDS = 2.0

# ============================================================================
# Display Configuration
# ============================================================================

# Labels for the default-gateway button
LABEL_DEFAULT = "Default"
LABEL_MAKE_DEFAULT = "Make Default"
LABEL_TEST = "Test"
LABEL_SAVE = "Save"

# Button classes (mirrors the LuCI cbi-button classes the panel styles)
CLASS_BUTTON = "cbi-button"
CLASS_ACTION = "cbi-button-action"
CLASS_PRIMARY = "cbi-button-primary"
CLASS_POSITIVE = "cbi-button-positive"
CLASS_TEST_ALL = "test-all"
CLASS_SAVE = "routekeeper-save-btn"

# Result cell glyphs
GLYPH_PLACEHOLDER = "-"
GLYPH_PENDING = "◠"
GLYPH_SUCCESS = "✔"
GLYPH_FAILURE = "✘"
FAILED_TEXT = "Failed"

# Table column definitions: (column_name, width_in_characters)
TABLE_COLUMNS = [
    ("INTERFACE", 16),
    ("TEST", 8),
    ("CURL_RESULT", 22),
    ("PING_RESULT", 22),
    ("DEFAULT_GATEWAY", 16),
]

SETTINGS_COLUMNS = [
    ("SETTING", 16),
    ("VALUE", 40),
    ("DEFAULT", 40),
]

TEST_ALL_LABEL = "Test All Interfaces"


# ANSI color codes for terminal output
class Colors:
    """
    Terminal color codes for result cells and notifications.

    Color scheme:
        GREEN: Successful test result / info notification
        RED: Failed test result / error notification
        CYAN: Test in flight
        YELLOW: Current default gateway
        RESET: Reset to terminal default colors
    """
    GREEN = '\033[92m'
    RED = '\033[91m'
    CYAN = '\033[96m'
    YELLOW = '\033[93m'
    RESET = '\033[0m'


# Column separator for table output (3 spaces for readability)
COLUMN_SEPARATOR = "   "
