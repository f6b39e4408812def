"""VLAN configuration compiler.

Turns a declarative :class:`~xike_switch.model.config.SwitchConfig` into the
ordered HTTP commands the Xike firmware expects.  The compiler is pure: no
network access, no mutation of its input, identical output for identical
input.

Per switch the command order is:

1. one membership command per VLAN, in VLAN configuration order;
2. one PVID command per port that has a ``pvid`` VLAN, in port order.

Membership has to exist before a PVID can reference it, so this order must
not change.
"""

from __future__ import annotations

import logging
from typing import Mapping

from xike_switch.client.errors import ConfigResolutionError, SwitchAuthError
from xike_switch.client.session import derive_credential
from xike_switch.client.vlan_ops import membership_command, pvid_command
from xike_switch.model.command import CompiledCommand, CompileResult, SwitchCommands
from xike_switch.model.config import Switch, SwitchConfig, Template
from xike_switch.model.vlan import SwitchMembership, VlanMembership
from xike_switch.vendor.xike.mappings import MEMBERSHIP_CODE, MembershipStatus

logger = logging.getLogger(__name__)


def membership_status(template: Template | None, vlan_id: int) -> MembershipStatus:
    """Return the status *template* assigns to *vlan_id*.

    A missing template or an unlisted VLAN both mean ``"not-member"``.
    """
    if template is None:
        return "not-member"
    status = template.get(vlan_id)
    if status == "pvid" or status == "tagged":
        return status
    return "not-member"


def find_pvid(template: Template, vlans: Mapping[int, str]) -> int | None:
    """Return the first VLAN (in *vlans* order) that *template* marks ``pvid``.

    Templates marking several VLANs as ``pvid`` are tolerated: the first one
    wins.
    """
    for vlan_id in vlans:
        if template.get(vlan_id) == "pvid":
            return vlan_id
    return None


def compile_commands(
    config: SwitchConfig,
    credentials: Mapping[str, str] | None = None,
) -> CompileResult:
    """Compile *config* into per-switch command batches.

    Args:
        config: Configuration, usually already narrowed by
            :func:`~xike_switch.utils.filter.filter_config`.
        credentials: Switch key -> cookie.  Switches missing here get a
            cookie derived from their own auth config (or an empty one).

    Returns:
        A :class:`CompileResult`; unresolved template references are listed
        in :attr:`CompileResult.warnings` and do not stop compilation.
    """
    result = CompileResult()
    for switch in config.switches.values():
        cookie = _cookie_for(switch, credentials)
        batch, missing = _compile_switch(config, switch, cookie)
        result.batches.append(batch)
        result.warnings.extend(missing)
    return result


def compile_switch(
    config: SwitchConfig,
    switch: Switch,
    cookie: str,
) -> SwitchCommands:
    """Compile the commands for a single *switch* using *cookie*."""
    batch, _ = _compile_switch(config, switch, cookie)
    return batch


def build_membership_view(config: SwitchConfig) -> list[SwitchMembership]:
    """Resolve every port's membership in every VLAN, per switch.

    This is the non-executing inspection view; it shares the template
    resolution rules with :func:`compile_commands`.
    """
    view: list[SwitchMembership] = []
    for switch in config.switches.values():
        templates, _ = _port_templates(config, switch)
        vlans: list[VlanMembership] = []
        for vlan_id, vlan_name in config.vlans.items():
            ports: dict[str, MembershipStatus] = {}
            for port, template in zip(switch.ports, templates):
                ports[port.name] = membership_status(template, vlan_id)
            vlans.append(VlanMembership(vlan_id=vlan_id, vlan_name=vlan_name, ports=ports))
        view.append(
            SwitchMembership(
                switch=switch.key,
                name=switch.name,
                address=switch.address,
                vlans=vlans,
            )
        )
    return view


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------

def _compile_switch(
    config: SwitchConfig,
    switch: Switch,
    cookie: str,
) -> tuple[SwitchCommands, list[ConfigResolutionError]]:
    templates, missing = _port_templates(config, switch)

    commands: list[CompiledCommand] = []
    for vlan_id, vlan_name in config.vlans.items():
        codes = [MEMBERSHIP_CODE[membership_status(t, vlan_id)] for t in templates]
        commands.append(
            membership_command(switch.key, switch.address, cookie, vlan_id, vlan_name, codes)
        )

    for port_index, template in enumerate(templates):
        if template is None:
            continue
        pvid = find_pvid(template, config.vlans)
        if pvid is not None:
            commands.append(
                pvid_command(switch.key, switch.address, cookie, port_index, pvid)
            )

    logger.debug(
        "Compiled %d command(s) for %s (%d VLANs, %d ports)",
        len(commands), switch.key, len(config.vlans), len(switch.ports),
    )
    batch = SwitchCommands(
        switch_key=switch.key,
        address=switch.address,
        commands=tuple(commands),
    )
    return batch, missing


def _port_templates(
    config: SwitchConfig,
    switch: Switch,
) -> tuple[list[Template | None], list[ConfigResolutionError]]:
    """Resolve each port's template, in port order (``None`` if unknown)."""
    templates: list[Template | None] = []
    missing: list[ConfigResolutionError] = []
    for port in switch.ports:
        template = config.templates.get(port.template)
        if template is None:
            err = ConfigResolutionError(switch.key, port.name, port.template)
            logger.warning("%s", err)
            missing.append(err)
        templates.append(template)
    return templates, missing


def _cookie_for(switch: Switch, credentials: Mapping[str, str] | None) -> str:
    if credentials and switch.key in credentials:
        return credentials[switch.key]
    try:
        return derive_credential(switch)
    except SwitchAuthError:
        return ""
