"""Session credentials for Xike switches.

The Xike firmware does not negotiate a session: the cookie it expects is the
static ``<user>=<response>`` pair already present in the configuration.
Deriving it is still a discrete step so that firmware needing a real login
exchange can plug in here without changing the compiler or executor.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from xike_switch.client.errors import SwitchAuthError
from xike_switch.model.config import Switch
from xike_switch.vendor.xike.mappings import AUTH_TYPES

logger = logging.getLogger(__name__)


@dataclass
class AuthResult:
    """Outcome of :func:`authenticate_switches`.

    Attributes:
        credentials: Switch key -> cookie string for every switch that
            authenticated.
        failures: Switch key -> error for every switch that did not.
    """

    credentials: dict[str, str] = field(default_factory=dict)
    failures: dict[str, SwitchAuthError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """True if every switch authenticated."""
        return not self.failures


def derive_credential(switch: Switch) -> str:
    """Return the session cookie for *switch*.

    Raises:
        SwitchAuthError: If the switch has no (usable) auth configuration.
    """
    auth = switch.auth
    if auth is None:
        raise SwitchAuthError(f"No auth config found for {switch.key}")
    if auth.type not in AUTH_TYPES:
        raise SwitchAuthError(f"Unsupported auth type {auth.type!r} for {switch.key}")
    return f"{auth.user}={auth.response}"


def authenticate_switches(switches: Iterable[Switch], verbose: bool = False) -> AuthResult:
    """Derive credentials for each switch, isolating failures per switch."""
    result = AuthResult()
    for switch in switches:
        print(f"Logging in to {switch.key} ({switch.address})...")
        try:
            cookie = derive_credential(switch)
        except SwitchAuthError as exc:
            logger.error("Login to %s failed: %s", switch.key, exc)
            print(f"  ✗ Login failed: {exc}")
            result.failures[switch.key] = exc
            continue
        print("  ✓ Login successful")
        if verbose:
            print(f"  Cookie: {cookie}")
        result.credentials[switch.key] = cookie
    return result
