"""
Domain exceptions for the application.

Services raise these instead of fastapi.HTTPException to avoid coupling
the service layer to the web framework. A global exception handler in
main.py translates them into HTTP responses.
"""

from typing import Optional


class AppError(Exception):
    """Base application error with an HTTP-equivalent status code."""

    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class RpcError(AppError):
    """Failure talking to the node (502).

    The message is prefixed with the offending command so a log line is
    enough to reproduce the call.
    """

    def __init__(self, reason: str, command: Optional[str] = None, status_code: int = 502):
        self.reason = reason
        self.command = command
        message = f"RPC command failed: {command} - {reason}" if command else reason
        super().__init__(message, status_code=status_code)


class ConfigError(RpcError):
    """RPC credentials are not configured (500)."""

    def __init__(self, reason: str = "RPC_USER and RPC_PASS must be set", command: Optional[str] = None):
        super().__init__(reason, command=command, status_code=500)


class TransportError(RpcError):
    """Network or HTTP-level failure reaching the node (502)."""


class ProtocolError(RpcError):
    """JSON-RPC error envelope or malformed response (502)."""


class ValidationError(RpcError):
    """Well-formed response missing a field the metric needs (502)."""


class ServiceUnavailableError(AppError):
    """Metric cannot be served right now (503)."""

    def __init__(self, message: str = "Service temporarily unavailable"):
        super().__init__(message, status_code=503)
