"""Typed models for the per-switch VLAN membership view."""

from __future__ import annotations

from dataclasses import dataclass, field

from xike_switch.vendor.xike.mappings import MembershipStatus


@dataclass
class VlanMembership:
    """Membership of every port of one switch in one VLAN.

    Attributes:
        vlan_id: 802.1Q VLAN identifier.
        vlan_name: Human-readable VLAN name.
        ports: Port name -> membership status, in port order.
    """

    vlan_id: int
    vlan_name: str
    ports: dict[str, MembershipStatus] = field(default_factory=dict)


@dataclass
class SwitchMembership:
    """Resolved VLAN membership for a single switch.

    Attributes:
        switch: Switch key.
        name: Switch display name.
        address: Switch address.
        vlans: One entry per configured VLAN, in VLAN order.
    """

    switch: str
    name: str
    address: str
    vlans: list[VlanMembership] = field(default_factory=list)
