"""Narrow a configuration to selected switches and VLANs."""

from __future__ import annotations

import logging
from typing import Sequence

from xike_switch.model.config import SwitchConfig

logger = logging.getLogger(__name__)


def vlan_matches(vlan_id: int, vlan_name: str, selector: str) -> bool:
    """True if *selector* names this VLAN.

    A selector of decimal digits matches the VLAN ID; any selector also matches the
    VLAN name case-insensitively (exact, not substring).
    """
    text = selector.strip()
    if text.isdecimal() and int(text) == vlan_id:
        return True
    return vlan_name.lower() == text.lower()


def filter_config(
    config: SwitchConfig,
    switch_filters: Sequence[str] = (),
    vlan_filters: Sequence[str] = (),
) -> SwitchConfig:
    """Return a copy of *config* restricted to the selected switches/VLANs.

    Templates are shared and never filtered.  An empty filter list means "no
    filtering" for that dimension.  Port order is untouched, so positional
    port indices are identical with or without a VLAN filter.

    Args:
        config: Full configuration.
        switch_filters: Switch keys (exact match).
        vlan_filters: VLAN IDs or names.

    Returns:
        A new :class:`SwitchConfig`; entries keep their original order.
    """
    if vlan_filters:
        vlans = {
            vid: name
            for vid, name in config.vlans.items()
            if any(vlan_matches(vid, name, f) for f in vlan_filters)
        }
        if not vlans:
            logger.warning("No VLAN found matching any of: %s", ", ".join(vlan_filters))
    else:
        vlans = dict(config.vlans)

    if switch_filters:
        wanted = set(switch_filters)
        switches = {key: sw for key, sw in config.switches.items() if key in wanted}
        if not switches:
            logger.warning("No switch found matching any of: %s", ", ".join(switch_filters))
    else:
        switches = dict(config.switches)

    return SwitchConfig(vlans=vlans, templates=config.templates, switches=switches)
