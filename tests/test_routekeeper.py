"""
Tests for the routekeeper command line entry point.
"""

import asyncio
import argparse
from unittest.mock import MagicMock, patch

import pytest

from notifications import NotificationCenter
from page import RouteKeeperPage
from routekeeper import main, parse_arguments, perform, run
from rpc.client import RpcStatusError
from rpc.schemas import SuccessResponse


class TestParseArguments:

    def test_defaults(self, monkeypatch) -> None:
        monkeypatch.delenv("ROUTEKEEPER_PASSWORD", raising=False)

        args = parse_arguments([])

        assert args.command == "show"
        assert args.url == "http://192.168.1.1"
        assert args.username == "root"
        assert args.password is None
        assert args.verbose is False

    def test_test_command(self) -> None:
        args = parse_arguments(["-v", "--no-color", "test", "eth0.2"])

        assert args.command == "test"
        assert args.interface == "eth0.2"
        assert args.verbose is True
        assert args.no_color is True

    def test_set_command(self) -> None:
        args = parse_arguments(["set", "ping_count", "3"])

        assert (args.key, args.value) == ("ping_count", "3")

    def test_set_unknown_key(self) -> None:
        with pytest.raises(SystemExit):
            parse_arguments(["set", "nope", "3"])

    def test_test_type_choices(self) -> None:
        assert parse_arguments(["test-type", "curl"]).test_type == "curl"

        with pytest.raises(SystemExit):
            parse_arguments(["test-type", "udp"])


@pytest.fixture
def opened_page(mock_api: MagicMock, notifications: NotificationCenter) -> RouteKeeperPage:
    page = RouteKeeperPage(mock_api, notifications)
    asyncio.run(page.open())
    return page


class TestPerform:

    def test_test(self, opened_page: RouteKeeperPage, mock_api: MagicMock) -> None:
        assert asyncio.run(perform(opened_page, parse_arguments(["test", "wlan0"]))) is True

        assert mock_api.run_test.await_count == 2

    def test_unknown_interface(self, opened_page: RouteKeeperPage, mock_api: MagicMock) -> None:
        assert asyncio.run(perform(opened_page, parse_arguments(["test", "eth9"]))) is False

        mock_api.run_test.assert_not_awaited()

    def test_set_default(self, opened_page: RouteKeeperPage, mock_api: MagicMock) -> None:
        assert asyncio.run(perform(opened_page, parse_arguments(["set-default", "wlan0"]))) is True

        mock_api.set_default_gateway.assert_awaited_once_with("wlan0")

    def test_set_default_already_default(self, opened_page: RouteKeeperPage, mock_api: MagicMock) -> None:
        assert asyncio.run(perform(opened_page, parse_arguments(["set-default", "eth0"]))) is True

        mock_api.set_default_gateway.assert_not_awaited()

    def test_test_all(self, opened_page: RouteKeeperPage, mock_api: MagicMock) -> None:
        assert asyncio.run(perform(opened_page, parse_arguments(["test-all"]))) is True

        assert mock_api.run_test_all.await_count == 2

    def test_set(self, opened_page: RouteKeeperPage, mock_api: MagicMock) -> None:
        asyncio.run(perform(opened_page, parse_arguments(["set", "ping_address", "1.1.1.1"])))

        mock_api.save_settings.assert_awaited_once_with({"ping_address": "1.1.1.1"})

    def test_test_type(self, opened_page: RouteKeeperPage, mock_api: MagicMock) -> None:
        asyncio.run(perform(opened_page, parse_arguments(["test-type", "ping"])))

        mock_api.save_settings.assert_awaited_once_with({"test_type": "ping"})

    def test_show(self, opened_page: RouteKeeperPage, mock_api: MagicMock) -> None:
        assert asyncio.run(perform(opened_page, parse_arguments([]))) is True

        mock_api.run_test.assert_not_awaited()


class TestRun:
    """Test run() with the ubus client and backend API mocked."""

    @pytest.fixture
    def client(self) -> MagicMock:
        with patch("routekeeper.UbusClient") as client_class:
            yield client_class.return_value

    @pytest.fixture(autouse=True)
    def api(self, mock_api: MagicMock) -> MagicMock:
        with patch("routekeeper.RouteKeeperApi", return_value=mock_api):
            yield mock_api

    def args(self, *argv: str) -> argparse.Namespace:
        return parse_arguments(["--no-color", "-p", "secret", *argv])

    def test_show(self, client: MagicMock, capsys) -> None:
        assert asyncio.run(run(self.args("show"))) == 0

        client.login.assert_called_once_with("root", "secret")
        client.close.assert_called_once()
        out = capsys.readouterr().out
        assert "eth0" in out and "(Default)" in out

    def test_anonymous_session(self, client: MagicMock, monkeypatch) -> None:
        monkeypatch.delenv("ROUTEKEEPER_PASSWORD", raising=False)

        assert asyncio.run(run(parse_arguments(["show"]))) == 0

        client.login.assert_not_called()

    def test_settings_view(self, client: MagicMock, capsys) -> None:
        assert asyncio.run(run(self.args("settings"))) == 0

        out = capsys.readouterr().out
        assert "Test Type: both" in out
        assert "Ping Address" in out

    def test_failed_action_exit_code(self, client: MagicMock, api: MagicMock, capsys) -> None:
        api.set_default_gateway.return_value = SuccessResponse(success=False)

        assert asyncio.run(run(self.args("set-default", "wlan0"))) == 1

        assert "Failed to set default gateway to 'wlan0'." in capsys.readouterr().out

    def test_unknown_interface_exit_code(self, client: MagicMock) -> None:
        assert asyncio.run(run(self.args("test", "eth9"))) == 1

    def test_login_failure(self, client: MagicMock, api: MagicMock) -> None:
        client.login.side_effect = RpcStatusError(6, "session", "login")

        assert asyncio.run(run(self.args("show"))) == 1

        api.get_interfaces.assert_not_awaited()
        client.close.assert_called_once()


class TestMain:

    def test_invalid_interface_name(self, capsys) -> None:
        with patch("sys.argv", ["routekeeper", "test", "eth0;reboot"]), \
                patch("routekeeper.setup_logging"), \
                pytest.raises(SystemExit) as exc:
            main()

        assert exc.value.code == 1
        assert "invalid interface name" in capsys.readouterr().err

    def test_exit_code_from_run(self) -> None:
        with patch("sys.argv", ["routekeeper", "show"]), \
                patch("routekeeper.setup_logging"), \
                patch("routekeeper.run", return_value=0), \
                pytest.raises(SystemExit) as exc:
            main()

        assert exc.value.code == 0

