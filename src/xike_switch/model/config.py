"""Typed model for the declarative VLAN/port-template configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from xike_switch.vendor.xike.mappings import MembershipStatus

# VLAN ID -> "tagged" | "pvid"; VLANs not listed are "not-member".
Template = Mapping[int, MembershipStatus]


@dataclass(frozen=True)
class SwitchAuth:
    """Static authentication material for one switch.

    Attributes:
        type: Auth scheme; only ``"xike"`` is known.
        user: Cookie name expected by the firmware.
        password: Login password (kept for firmware needing a live login).
        response: Precomputed login response used as the cookie value.
    """

    type: str
    user: str
    password: str
    response: str


@dataclass(frozen=True)
class Port:
    """A switch port and the template it follows.

    Attributes:
        name: Human-readable port name (used in metrics and JSON output).
        template: Name of a template in :attr:`SwitchConfig.templates`.
    """

    name: str
    template: str


@dataclass(frozen=True)
class Switch:
    """A managed switch.

    Attributes:
        key: Stable identifier used for filtering and reporting.
        name: Display name.
        address: Host name or IP address of the web interface.
        auth: Authentication material, or ``None`` if not configured.
        ports: Ports in firmware order; the position in this tuple is the
            0-based index used in form fields.
    """

    key: str
    name: str
    address: str
    auth: SwitchAuth | None
    ports: tuple[Port, ...] = ()


@dataclass(frozen=True)
class SwitchConfig:
    """Whole configuration: VLANs, shared templates and switches.

    Attributes:
        vlans: VLAN ID -> name, in configuration order.
        templates: Template name -> :data:`Template`.
        switches: Switch key -> :class:`Switch`, in configuration order.
    """

    vlans: Mapping[int, str] = field(default_factory=dict)
    templates: Mapping[str, Template] = field(default_factory=dict)
    switches: Mapping[str, Switch] = field(default_factory=dict)
