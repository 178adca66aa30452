"""
ubus JSON-RPC transport.

Talks to the router's /ubus endpoint (uhttpd-mod-ubus) with the JSON-RPC 2.0
"call" method:

    request:  {"jsonrpc": "2.0", "id": 1, "method": "call",
               "params": [<session>, <object>, <method>, <args>]}
    response: {"jsonrpc": "2.0", "id": 1, "result": [<status>, <data>]}

The client is synchronous (requests). Callers on the event loop go through
rpc.api, which runs each call in a worker thread.

Retry strategy:
- Only connection establishment failures are retried; the request never
  reached the router, so retrying cannot run a test or switch twice
- Read timeouts and HTTP/ubus errors are raised immediately
"""

import itertools
import time
from typing import Any, Optional

import requests

from logging_config import get_logger
from config import (
    DEFAULT_ROUTER_URL,
    UBUS_ENDPOINT_PATH,
    NULL_SESSION_ID,
    RPC_TIMEOUT_SECONDS,
    RETRY_ATTEMPTS,
    RETRY_BACKOFF_FACTOR,
    UBUS_STATUS,
)
from utils.system import sanitize_for_log

logger = get_logger(__name__)


class RpcError(Exception):
    """Base class for every failed RPC call."""


class RpcTransportError(RpcError):
    """The HTTP request could not be completed."""


class RpcProtocolError(RpcError):
    """The endpoint answered with a JSON-RPC error or a malformed envelope."""

    def __init__(self, message: str, code: Optional[int] = None) -> None:
        super().__init__(message)
        self.code = code


class RpcStatusError(RpcError):
    """ubus returned a non-zero status code."""

    def __init__(self, status: int, obj: str, method: str) -> None:
        self.status = status
        self.status_name = UBUS_STATUS.get(status, "UNKNOWN")
        super().__init__(f"{obj}.{method} failed with ubus status {status} ({self.status_name})")


class RpcResponseError(RpcError):
    """The call succeeded but the returned data has the wrong shape."""


class UbusClient:
    """
    Minimal ubus JSON-RPC client bound to one router.

    Attributes:
        url: Full endpoint URL (router base URL + /ubus)
        timeout: Per-request timeout in seconds
        session_id: ubus_rpc_session used for calls (null session until login)
    """

    def __init__(
        self,
        base_url: str = DEFAULT_ROUTER_URL,
        timeout: float = RPC_TIMEOUT_SECONDS,
        http: Optional[requests.Session] = None
    ) -> None:
        self.url = base_url.rstrip("/") + UBUS_ENDPOINT_PATH
        self.timeout = timeout
        self.session_id = NULL_SESSION_ID
        self.http = http or requests.Session()
        self._ids = itertools.count(1)

    def login(self, username: str, password: str) -> str:
        """
        Open an rpcd session.

        Returns:
            The ubus_rpc_session id, also stored for subsequent calls

        Raises:
            RpcStatusError: Wrong credentials (PERMISSION_DENIED)
            RpcResponseError: No session id in the answer
        """
        logger.info("Logging in to %s as %s", self.url, sanitize_for_log(username))

        data = self._call(NULL_SESSION_ID, "session", "login", {
            "username": username,
            "password": password,
        })

        session_id = data.get("ubus_rpc_session")
        if not isinstance(session_id, str) or not session_id:
            raise RpcResponseError("session.login response missing 'ubus_rpc_session'")

        self.session_id = session_id
        logger.debug("Session established (expires in %ss)", data.get("expires", "?"))
        return session_id

    def call(self, obj: str, method: str, params: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        Invoke a ubus method with the current session.

        Returns:
            The data object of the reply ({} when ubus sent none)
        """
        return self._call(self.session_id, obj, method, params or {})

    def close(self) -> None:
        self.http.close()

    def _call(self, session_id: str, obj: str, method: str, params: dict[str, Any]) -> dict[str, Any]:
        request_id = next(self._ids)
        payload = {
            "jsonrpc": "2.0",
            "id": request_id,
            "method": "call",
            "params": [session_id, obj, method, params],
        }

        # Credentials and session tokens stay out of the log
        private = obj == "session"
        logger.debug("-> [%d] %s.%s %s", request_id, obj, method, "{...}" if private else sanitize_for_log(params))

        response = self._post(payload)
        data = parse_reply(response, obj, method)

        logger.debug("<- [%d] %s", request_id, "{...}" if private else sanitize_for_log(data))
        return data

    def _post(self, payload: dict[str, Any]) -> requests.Response:
        for attempt in range(RETRY_ATTEMPTS):
            try:
                return self.http.post(self.url, json=payload, timeout=self.timeout)

            except requests.exceptions.ConnectionError as e:
                if attempt < RETRY_ATTEMPTS - 1:
                    delay = RETRY_BACKOFF_FACTOR * (2 ** attempt)
                    logger.debug("Connection failed: %s, retrying in %ss (attempt %d/%d)",
                                 type(e).__name__, delay, attempt + 1, RETRY_ATTEMPTS)
                    time.sleep(delay)
                    continue
                logger.warning("All %d connection attempts to %s failed", RETRY_ATTEMPTS, self.url)
                raise RpcTransportError(f"cannot connect to {self.url}: {e}") from e

            except requests.exceptions.Timeout as e:
                raise RpcTransportError(f"request to {self.url} timed out after {self.timeout}s") from e

            except requests.exceptions.RequestException as e:
                raise RpcTransportError(f"request to {self.url} failed: {e}") from e

        raise RpcTransportError(f"cannot connect to {self.url}")


def parse_reply(response: requests.Response, obj: str, method: str) -> dict[str, Any]:
    """
    Unwrap a JSON-RPC reply into the ubus data object.

    Raises:
        RpcTransportError: HTTP status other than 200
        RpcProtocolError: Invalid JSON, JSON-RPC error member, malformed result
        RpcStatusError: Non-zero ubus status
        RpcResponseError: Data is not a JSON object
    """
    if response.status_code != 200:
        raise RpcTransportError(f"{obj}.{method}: HTTP {response.status_code}")

    try:
        body = response.json()
    except ValueError as e:
        raise RpcProtocolError(f"{obj}.{method}: invalid JSON reply") from e

    if not isinstance(body, dict):
        raise RpcProtocolError(f"{obj}.{method}: reply is not a JSON-RPC object")

    if (error := body.get("error")) is not None:
        if isinstance(error, dict):
            raise RpcProtocolError(
                f"{obj}.{method}: {error.get('message', 'unknown error')}",
                code=error.get("code"),
            )
        raise RpcProtocolError(f"{obj}.{method}: {error}")

    result = body.get("result")
    if not isinstance(result, list) or not result or not isinstance(result[0], int):
        raise RpcProtocolError(f"{obj}.{method}: malformed result {sanitize_for_log(result)}")

    if result[0] != 0:
        raise RpcStatusError(result[0], obj, method)

    if len(result) < 2:
        return {}

    data = result[1]
    if not isinstance(data, dict):
        raise RpcResponseError(f"{obj}.{method}: data is {type(data).__name__}, expected object")

    return data
