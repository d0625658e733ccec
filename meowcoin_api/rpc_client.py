"""
Meowcoin Core JSON-RPC Client

Sends one JSON-RPC 1.0 request per call over HTTP POST with Basic auth.

- Uses httpx.AsyncClient, one instance for the client's lifetime
- No retries; the only timeout is the transport timeout
- Every error carries the command that caused it
"""

import itertools
import json
import logging
import re
import time
from typing import Any, List, Optional, Sequence, Tuple, Union

import httpx

from meowcoin_api.exceptions import ConfigError, ProtocolError, TransportError

logger = logging.getLogger(__name__)

RpcParam = Union[int, float, str]

_NUMBER_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


def coerce_param(token: str) -> RpcParam:
    """Convert a command-line token to int or float when it is a plain number.

    "0" -> 0, "-1" -> -1, "1.5" -> 1.5, "abc" -> "abc"
    """
    if not _NUMBER_RE.match(token):
        return token
    if "." in token or "e" in token.lower():
        return float(token)
    return int(token)


def parse_command(command: str) -> Tuple[str, List[RpcParam]]:
    """Split "getnetworkhashps 0 -1 1" into ("getnetworkhashps", [0, -1, 1])."""
    parts = command.split()
    if not parts:
        raise ValueError("RPC command must not be empty")
    return parts[0], [coerce_param(p) for p in parts[1:]]


def _format_rpc_error(error: Any) -> str:
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return json.dumps(error)


class MeowcoinRPCClient:
    """
    Async client for a single Meowcoin Core node.

    call("getdifficulty 0") parses a command string; call_method("getblock",
    [block_hash, 1]) sends typed parameters as-is.
    """

    def __init__(
        self,
        url: str,
        user: Optional[str],
        password: Optional[str],
        timeout: float = 30.0,
    ):
        self._url = url
        self._user = user
        self._password = password
        self._client = httpx.AsyncClient(timeout=timeout)
        self._ids = itertools.count(int(time.time() * 1000))
        logger.info(f"MeowcoinRPCClient initialized (url={url})")

    @classmethod
    def from_settings(cls, settings) -> "MeowcoinRPCClient":
        return cls(
            url=settings.rpc_url,
            user=settings.rpc_user,
            password=settings.rpc_pass,
            timeout=settings.rpc_timeout_seconds,
        )

    async def close(self):
        """Close the underlying httpx client to release connections."""
        if self._client:
            await self._client.aclose()

    async def __aenter__(self) -> "MeowcoinRPCClient":
        return self

    async def __aexit__(self, exc_type, exc_value, traceback) -> None:
        await self.close()

    async def call(self, command: str) -> Any:
        """Run a whitespace-separated command such as "getnetworkhashps 0 -1 0"."""
        method, params = parse_command(command)
        return await self._send(method, params, command)

    async def call_method(self, method: str, params: Sequence[RpcParam] = ()) -> Any:
        """Run a method with explicitly typed parameters."""
        command = " ".join([method, *(str(p) for p in params)])
        return await self._send(method, list(params), command)

    async def _send(self, method: str, params: List[RpcParam], command: str) -> Any:
        """POST one JSON-RPC request and return its result.

        Raises:
            ConfigError: RPC credentials are not configured.
            TransportError: Node unreachable, timed out, or non-2xx status.
            ProtocolError: Body is not a JSON-RPC envelope or carries an error.
        """
        if not self._user or not self._password:
            logger.error(f"RPC error [{command}]: credentials not configured")
            raise ConfigError(command=command)

        payload = {
            "jsonrpc": "1.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }

        try:
            resp = await self._client.post(
                self._url,
                json=payload,
                auth=(self._user, self._password),
            )
        except httpx.TimeoutException:
            logger.error(f"RPC error [{command}]: timeout")
            raise TransportError("timeout", command=command)
        except httpx.HTTPError as e:
            logger.error(f"RPC error [{command}]: {e}")
            raise TransportError(str(e) or type(e).__name__, command=command)

        if not resp.is_success:
            reason = f"HTTP {resp.status_code}: {resp.reason_phrase}"
            # Core answers RPC failures with HTTP 500 and an error envelope
            try:
                body = resp.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and body.get("error"):
                reason = f"{reason} ({_format_rpc_error(body['error'])})"
            logger.error(f"RPC error [{command}]: {reason}")
            raise TransportError(reason, command=command)

        try:
            data = resp.json()
        except ValueError:
            logger.error(f"RPC error [{command}]: invalid JSON body")
            raise ProtocolError("invalid JSON in response", command=command)

        if not isinstance(data, dict):
            logger.error(f"RPC error [{command}]: response is not an object")
            raise ProtocolError("response is not a JSON-RPC envelope", command=command)

        if data.get("error") is not None:
            reason = f"RPC error: {_format_rpc_error(data['error'])}"
            logger.error(f"RPC error [{command}]: {reason}")
            raise ProtocolError(reason, command=command)

        if "result" not in data:
            logger.error(f"RPC error [{command}]: missing result field")
            raise ProtocolError("response has no result field", command=command)

        return data["result"]
