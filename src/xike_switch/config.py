"""Load and validate the VLAN/switch YAML configuration."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping

import yaml

from xike_switch.client.errors import SwitchConfigError
from xike_switch.model.config import Port, Switch, SwitchAuth, SwitchConfig, Template
from xike_switch.vendor.xike.mappings import AUTH_TYPES, TEMPLATE_STATUSES

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("vlans.yaml")


def load_config(path: str | Path = DEFAULT_CONFIG_PATH) -> SwitchConfig:
    """Read *path* and return a validated :class:`SwitchConfig`.

    Raises:
        SwitchConfigError: If the file cannot be read, is not valid YAML or
            does not match the expected structure.
    """
    config_path = Path(path)
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle)
    except OSError as exc:
        raise SwitchConfigError(f"Cannot read {config_path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise SwitchConfigError(f"Invalid YAML in {config_path}: {exc}") from exc

    config = parse_config(raw)
    logger.info(
        "Loaded %s: %d VLAN(s), %d template(s), %d switch(es)",
        config_path, len(config.vlans), len(config.templates), len(config.switches),
    )
    return config


def parse_config(raw: Any) -> SwitchConfig:
    """Validate an already-decoded document and build the model.

    Mapping order from the document is preserved for VLANs and switches.
    """
    root = _require_mapping(raw, "config")
    vlans = _parse_vlans(_require_mapping(root.get("vlans"), "vlans"))
    templates = {
        _require_key_string(name, "templates"): _parse_template(body, f"templates.{name}")
        for name, body in _require_mapping(root.get("templates"), "templates").items()
    }
    switches: dict[str, Switch] = {}
    for key, body in _require_mapping(root.get("switches"), "switches").items():
        key = _require_key_string(key, "switches")
        switches[key] = _parse_switch(key, body, f"switches.{key}")
    return SwitchConfig(vlans=vlans, templates=templates, switches=switches)


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------

def _require_mapping(value: Any, context: str) -> Mapping[Any, Any]:
    if not isinstance(value, Mapping):
        raise SwitchConfigError(f"{context}: expected a mapping.")
    return value


def _require_string(mapping: Mapping[str, Any], field: str, context: str) -> str:
    value = mapping.get(field)
    if value is None:
        raise SwitchConfigError(f"{context}: missing required field '{field}'.")
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise SwitchConfigError(f"{context}: field '{field}' must be a string.")
    return str(value)


def _require_key_string(key: Any, context: str) -> str:
    if isinstance(key, bool) or not isinstance(key, (str, int)):
        raise SwitchConfigError(f"{context}: invalid key {key!r}.")
    return str(key)


def _coerce_vlan_id(value: Any, context: str) -> int:
    if isinstance(value, bool):
        raise SwitchConfigError(f"{context}: VLAN ID must be a number, got {value!r}.")
    try:
        vlan_id = int(str(value).strip())
    except ValueError as exc:
        raise SwitchConfigError(f"{context}: VLAN ID must be a number, got {value!r}.") from exc
    if vlan_id <= 0:
        raise SwitchConfigError(f"{context}: VLAN ID must be positive, got {vlan_id}.")
    return vlan_id


def _parse_vlans(raw: Mapping[Any, Any]) -> dict[int, str]:
    vlans: dict[int, str] = {}
    for key, name in raw.items():
        vlan_id = _coerce_vlan_id(key, "vlans")
        if vlan_id in vlans:
            raise SwitchConfigError(f"vlans: duplicate VLAN ID {vlan_id}.")
        if name is None or isinstance(name, (Mapping, list, bool)):
            raise SwitchConfigError(f"vlans.{vlan_id}: name must be a string.")
        vlans[vlan_id] = str(name)
    return vlans


def _parse_template(raw: Any, context: str) -> Template:
    template: dict[int, Any] = {}
    for key, status in _require_mapping(raw, context).items():
        vlan_id = _coerce_vlan_id(key, context)
        if status not in TEMPLATE_STATUSES:
            raise SwitchConfigError(
                f"{context}.{vlan_id}: invalid status {status!r}. Allowed: pvid, tagged."
            )
        template[vlan_id] = status

    pvids = [vid for vid, status in template.items() if status == "pvid"]
    if len(pvids) > 1:
        # A port has exactly one native VLAN; the compiler will use the first
        # of these in VLAN order.
        logger.warning(
            "%s marks VLANs %s as pvid; only one will be applied per port",
            context, pvids,
        )
    return template


def _parse_auth(raw: Any, context: str) -> SwitchAuth:
    auth = _require_mapping(raw, context)
    auth_type = _require_string(auth, "type", context)
    if auth_type not in AUTH_TYPES:
        raise SwitchConfigError(
            f"{context}: invalid type '{auth_type}'. Allowed: {', '.join(sorted(AUTH_TYPES))}."
        )
    return SwitchAuth(
        type=auth_type,
        user=_require_string(auth, "user", context),
        password=_require_string(auth, "pass", context),
        response=_require_string(auth, "resp", context),
    )


def _parse_switch(key: str, raw: Any, context: str) -> Switch:
    body = _require_mapping(raw, context)
    raw_ports = body.get("ports")
    if not isinstance(raw_ports, list):
        raise SwitchConfigError(f"{context}: 'ports' must be a list.")
    ports: list[Port] = []
    for index, raw_port in enumerate(raw_ports):
        port_context = f"{context}.ports[{index}]"
        port = _require_mapping(raw_port, port_context)
        ports.append(
            Port(
                name=_require_string(port, "name", port_context),
                template=_require_string(port, "template", port_context),
            )
        )
    return Switch(
        key=key,
        name=_require_string(body, "name", context),
        address=_require_string(body, "address", context),
        auth=_parse_auth(body["auth"], f"{context}.auth") if "auth" in body else None,
        ports=tuple(ports),
    )
