"""Custom exceptions for the xike-switch tooling."""

from __future__ import annotations

from dataclasses import dataclass


class SwitchError(Exception):
    """Base exception for all xike-switch errors.

    Attributes:
        kind: Short failure category reported in command outcomes.
    """

    kind: str = "SwitchError"


class SwitchConnectionError(SwitchError, ConnectionError):
    """Raised when the TCP connect, write or read to a switch fails."""

    kind = "ConnectionError"

    def __init__(self, host: str, port: int, cause: Exception) -> None:
        self.host = host
        self.port = port
        self.cause = cause
        super().__init__(f"Connection to {host}:{port} failed: {cause}")


class SwitchTimeoutError(SwitchError, TimeoutError):
    """Raised when a single request exceeds its wall-clock deadline."""

    kind = "TimeoutError"

    def __init__(self, host: str, port: int, timeout_s: float) -> None:
        self.host = host
        self.port = port
        self.timeout_s = timeout_s
        super().__init__(f"Request to {host}:{port} timed out after {timeout_s:g}s")


class SwitchProtocolError(SwitchError):
    """Raised when the switch returns a malformed HTTP response."""

    kind = "ProtocolError"


class SwitchAuthError(SwitchError):
    """Raised when no session credential can be derived for a switch."""

    kind = "AuthError"


class SwitchUsageError(SwitchError):
    """Raised for invalid option combinations (e.g. save without execute)."""

    kind = "UsageError"


class SwitchConfigError(SwitchError, ValueError):
    """Raised when the YAML configuration cannot be parsed or validated."""

    kind = "ConfigError"


class SwitchParseError(SwitchError):
    """Raised when HTML parsing fails or expected elements are not found."""

    kind = "ParseError"


@dataclass
class ConfigResolutionError(SwitchError):
    """A port references a template that does not exist.

    Never raised by the compiler: instances are collected as warnings and
    the port is treated as ``not-member``.
    """

    kind = "ConfigResolutionError"

    switch_key: str
    port_name: str
    template: str

    def __post_init__(self) -> None:
        super().__init__(
            f"Template {self.template!r} not found for "
            f"{self.switch_key}:{self.port_name}"
        )
