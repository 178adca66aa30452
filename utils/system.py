"""
System utilities module.

Provides input validation and sanitization helpers shared by the RPC layer,
the page model and the CLI.

Security:
    Interface names and setting values come from the router backend or the
    command line and are never trusted for logging or as UI handles.
"""

import re
from typing import Any


# ============================================================================
# Security: Input Validation
# ============================================================================

# Regex for valid interface names (OpenWrt + traditional naming)
# Allows: letters, digits, hyphens, underscores, dots, colons, at-sign (VLAN/PPPoE)
# Prevents: shell metacharacters, path separators, quotes
VALID_INTERFACE_NAME = re.compile(r'^[a-zA-Z0-9._:@-]+$')

# Anything that is not a letter or digit is replaced in UI-safe keys
UNSAFE_KEY_CHARS = re.compile(r'[^a-zA-Z0-9]')


def validate_interface_name(name: str) -> bool:
    """
    Validate interface name given on the command line.

    Prevents shell metacharacters: ; & | ` $ ( ) { } [ ] < > ' "
    Prevents path separators: / \\
    Prevents newlines: \\n \\r
    Allows standard interface names: eth0, eth0.2, wlan0, pppoe-wan, br-lan

    Args:
        name: Interface name to validate

    Returns:
        True if valid interface name, False otherwise
    """
    if not name or len(name) > 64 or '\n' in name or '\r' in name:
        return False
    return bool(VALID_INTERFACE_NAME.match(name))


def sanitize_key(name: str) -> str:
    """
    Derive a UI-safe handle from a raw interface name.

    Examples:
        >>> sanitize_key("eth0.2")
        'eth0_2'
        >>> sanitize_key("pppoe-wan")
        'pppoe_wan'
    """
    return UNSAFE_KEY_CHARS.sub("_", name)


# ============================================================================
# Security: Log Sanitization
# ============================================================================

def sanitize_for_log(value: Any) -> str:
    """
    Sanitize values before logging to prevent log injection attacks.

    Removes control characters that could manipulate log output:
    - Newlines (\\n, \\r) - prevent log splitting
    - ANSI escape codes - prevent terminal manipulation
    - Null bytes - prevent log truncation

    Order of operations:
    1. Replace newlines with spaces (FIRST)
    2. Remove ANSI escape sequences
    3. Remove other control characters

    Args:
        value: Any value to be logged

    Returns:
        Sanitized string safe for logging

    Examples:
        >>> sanitize_for_log("normal text")
        'normal text'
        >>> sanitize_for_log("line1\\nline2")
        'line1 line2'
        >>> sanitize_for_log("\\x1b[31mred\\x1b[0m")
        'red'
    """
    if value is None:
        return "None"

    text = str(value)

    text = text.replace('\n', ' ').replace('\r', ' ')

    # ESC [ followed by zero or more digits/semicolons, ending with m
    text = re.sub(r'\x1b\[[0-9;]*m', '', text)

    # \x00-\x08, \x0b, \x0c, \x0e-\x1f, \x7f-\x9f
    text = re.sub(r'[\x00-\x08\x0b-\x0c\x0e-\x1f\x7f-\x9f]', '', text)

    # Limit length for logs (prevent log flooding)
    if len(text) > 200:
        text = text[:197] + "..."

    return text
