"""VLAN write payloads for Xike CGI switches.

Each function translates strongly-typed arguments into the exact form-field
payload the firmware expects and wraps it in a
:class:`~xike_switch.model.command.CompiledCommand`.  Nothing here touches the
network.

Captured payloads:

    MEMBERSHIP: POST /vlan.cgi?page=static
        vid=<id>&name=<name>&vlanPort_0=<c>&vlanPort_1=<c>…
        c: 0 = pvid (untagged), 1 = tagged, 2 = not member

    PVID: POST /vlan.cgi?page=port_based
        ports=<index>&pvid=<id>&vlan_accept_frame_type=0

    SAVE: POST /save.cgi
        (empty body)
"""

from __future__ import annotations

from typing import Sequence
from urllib.parse import quote

from xike_switch.client.http import USER_AGENT
from xike_switch.model.command import CompiledCommand
from xike_switch.vendor.xike.endpoints import SAVE, VLAN_PORT_BASED, VLAN_STATIC
from xike_switch.vendor.xike.mappings import ACCEPT_FRAME_ALL

_METHOD: str = "POST"
_FORM_CONTENT_TYPE: str = "application/x-www-form-urlencoded"

# Characters left unescaped by JavaScript's encodeURIComponent, which the
# firmware's own pages use to build these forms.
_URI_COMPONENT_SAFE: str = "-_.!~*'()"


def encode_uri_component(value: str) -> str:
    """Percent-encode *value* the way ``encodeURIComponent`` does."""
    return quote(value, safe=_URI_COMPONENT_SAFE)


def membership_body(vlan_id: int, name: str, port_codes: Sequence[str]) -> str:
    """Build the ``vlan.cgi?page=static`` form body.

    Args:
        vlan_id: 802.1Q VLAN identifier.
        name: VLAN name (escaped here).
        port_codes: One membership code per port, in port order.  The list
            position becomes the ``vlanPort_<n>`` index.
    """
    fields = [f"vid={vlan_id}", f"name={encode_uri_component(name)}"]
    fields.extend(f"vlanPort_{index}={code}" for index, code in enumerate(port_codes))
    return "&".join(fields)


def pvid_body(port_index: int, vlan_id: int) -> str:
    """Build the ``vlan.cgi?page=port_based`` form body."""
    return f"ports={port_index}&pvid={vlan_id}&vlan_accept_frame_type={ACCEPT_FRAME_ALL}"


def form_headers(address: str, cookie: str, body: str) -> tuple[tuple[str, str], ...]:
    """Return the fixed header set, in the order the firmware is used to."""
    return (
        ("Host", address),
        ("User-Agent", USER_AGENT),
        ("Accept", "*/*"),
        ("Cookie", cookie),
        ("Content-Length", str(len(body.encode("utf-8")))),
        ("Content-Type", _FORM_CONTENT_TYPE),
    )


def membership_command(
    switch_key: str,
    address: str,
    cookie: str,
    vlan_id: int,
    name: str,
    port_codes: Sequence[str],
) -> CompiledCommand:
    """Build the command that sets every port's membership in one VLAN."""
    body = membership_body(vlan_id, name, port_codes)
    return CompiledCommand(
        switch_key=switch_key,
        address=address,
        method=_METHOD,
        path=VLAN_STATIC,
        headers=form_headers(address, cookie, body),
        body=body,
        kind="vlan_membership",
        label=f"VLAN {vlan_id} ({name})",
    )


def pvid_command(
    switch_key: str,
    address: str,
    cookie: str,
    port_index: int,
    vlan_id: int,
) -> CompiledCommand:
    """Build the command that sets the native VLAN of one port.

    Args:
        port_index: 0-based port index (Port 1 = 0).
        vlan_id: VLAN to use as PVID; must already have membership.
    """
    body = pvid_body(port_index, vlan_id)
    return CompiledCommand(
        switch_key=switch_key,
        address=address,
        method=_METHOD,
        path=VLAN_PORT_BASED,
        headers=form_headers(address, cookie, body),
        body=body,
        kind="pvid",
        label=f"Port {port_index} PVID {vlan_id}",
    )


def save_command(switch_key: str, address: str, cookie: str) -> CompiledCommand:
    """Build the command that persists the running configuration."""
    return CompiledCommand(
        switch_key=switch_key,
        address=address,
        method=_METHOD,
        path=SAVE,
        headers=form_headers(address, cookie, ""),
        body="",
        kind="save",
        label="save configuration",
    )
