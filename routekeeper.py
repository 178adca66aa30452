#!/usr/bin/env python3
"""
RouteKeeper - Main Entry Point

Inspects router interfaces, runs ping/curl health checks per interface or in
bulk, and switches the default gateway through the luci.routekeeper ubus
object. Each command opens the panel page, performs one action on it and
prints the resulting page state.
"""

import asyncio
import os
import sys
import argparse
from pathlib import Path
from typing import Optional

from logging_config import setup_logging, get_logger
from config import (
    DEFAULT_ROUTER_URL,
    DEFAULT_USERNAME,
    PASSWORD_ENV_VAR,
    RPC_TIMEOUT_SECONDS,
    SETTINGS_OPTIONS,
    TEST_TYPE_CHOICES,
)
from display import print_page, format_notifications, format_settings
from enums import ControlRole, NotificationLevel
from notifications import NotificationCenter
from page import RouteKeeperPage
from rpc.api import RouteKeeperApi
from rpc.client import RpcError, UbusClient
from utils.system import validate_interface_name, sanitize_for_log

logger = get_logger(__name__)

TABLE_COMMANDS = {"show", "test", "test-all", "set-default"}


def parse_arguments(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description='RouteKeeper - test router interfaces and manage the default gateway',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  %(prog)s                              # Show interfaces and default gateway
  %(prog)s test eth0.2                  # Ping/curl test one interface
  %(prog)s test-all                     # Test every interface
  %(prog)s set-default wwan0            # Make wwan0 the default gateway
  %(prog)s settings                     # Show test settings
  %(prog)s set ping_address 1.1.1.1     # Change one setting
  %(prog)s set ping_address ""          # Reset one setting to its default
  %(prog)s test-type ping               # Only run ping tests
        '''
    )

    parser.add_argument(
        '--url',
        default=DEFAULT_ROUTER_URL,
        help=f'Router base URL (default: {DEFAULT_ROUTER_URL})'
    )

    parser.add_argument(
        '-u', '--username',
        default=DEFAULT_USERNAME,
        help=f'rpcd login user (default: {DEFAULT_USERNAME})'
    )

    parser.add_argument(
        '-p', '--password',
        default=os.environ.get(PASSWORD_ENV_VAR),
        help=f'rpcd login password (default: ${PASSWORD_ENV_VAR}; omit to use the anonymous session)'
    )

    parser.add_argument(
        '--timeout',
        type=float,
        default=RPC_TIMEOUT_SECONDS,
        help=f'Per-request timeout in seconds (default: {RPC_TIMEOUT_SECONDS})'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose output including every RPC call'
    )

    parser.add_argument(
        '--log-file',
        type=Path,
        help='Write logs to specified file'
    )

    parser.add_argument(
        '--no-color',
        action='store_true',
        help='Disable colored output'
    )

    commands = parser.add_subparsers(dest='command', metavar='COMMAND')

    commands.add_parser('show', help='Show interfaces and the default gateway')

    test = commands.add_parser('test', help='Test one interface')
    test.add_argument('interface', help='Interface name, e.g. eth0.2')

    commands.add_parser('test-all', help='Test all interfaces')

    set_default = commands.add_parser('set-default', help='Make an interface the default gateway')
    set_default.add_argument('interface', help='Interface name, e.g. wan')

    commands.add_parser('settings', help='Show test settings')

    set_option = commands.add_parser('set', help='Change one test setting ("" resets to default)')
    set_option.add_argument('key', choices=[opt.key for opt in SETTINGS_OPTIONS])
    set_option.add_argument('value')

    test_type = commands.add_parser('test-type', help='Select which checks a test runs')
    test_type.add_argument('test_type', choices=[value for value, _ in TEST_TYPE_CHOICES])

    args = parser.parse_args(argv)
    if args.command is None:
        args.command = 'show'
    return args


async def perform(page: RouteKeeperPage, args: argparse.Namespace) -> bool:
    """
    Run the requested action on an opened page.

    Returns:
        False if the action could not be started
    """
    if args.command in ('test', 'set-default'):
        key = page.interfaces.key_for(args.interface)
        if key is None:
            logger.error("Unknown interface: %s", sanitize_for_log(args.interface))
            return False

        if args.command == 'test':
            return await page.click(ControlRole.TEST, key)

        if page.ui.control_state(key).is_default_gateway:
            logger.warning("%s is already the default gateway", sanitize_for_log(args.interface))
            return True
        return await page.click(ControlRole.GATEWAY, key)

    if args.command == 'test-all':
        return await page.click(ControlRole.TEST_ALL)

    if args.command == 'set':
        page.settings_form.set_input(args.key, args.value)
        await page.click(ControlRole.SAVE, args.key)
        return True

    if args.command == 'test-type':
        await page.settings_form.change_test_type(args.test_type)
        return True

    return True


async def run(args: argparse.Namespace) -> int:
    """Open the page, perform one action, print the result."""
    client = UbusClient(args.url, timeout=args.timeout)
    use_colors = not args.no_color

    try:
        if args.password is not None:
            await asyncio.to_thread(client.login, args.username, args.password)

        notifications = NotificationCenter()
        page = RouteKeeperPage(RouteKeeperApi(client), notifications)
        await page.open()

        if not page.interfaces and args.command in TABLE_COMMANDS:
            logger.warning("Router reported no interfaces")

        started = await perform(page, args)
        page.close()

    except RpcError as e:
        logger.error("RPC error: %s", sanitize_for_log(e))
        return 1

    finally:
        client.close()

    if args.command in TABLE_COMMANDS:
        print_page(page.table, notifications.history, use_colors)
    else:
        banner = format_notifications(notifications.history, use_colors)
        if banner:
            print(banner)
            print()
        print(format_settings(page.settings_form.rows.values(), page.settings_form.test_type))

    failed = any(note.level is NotificationLevel.ERROR for note in notifications.history)
    return 0 if started and not failed else 1


def main() -> None:
    """Main entry point for routekeeper."""
    args = parse_arguments()

    setup_logging(
        verbose=args.verbose,
        log_file=args.log_file,
        use_colors=not args.no_color
    )

    interface = getattr(args, 'interface', None)
    if interface is not None and not validate_interface_name(interface):
        print(f"Error: invalid interface name: {sanitize_for_log(interface)}", file=sys.stderr)
        sys.exit(1)

    logger.info("RouteKeeper starting (%s)", args.url)
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
