"""Renderers for compiled output: JSON membership view and request listings."""

from __future__ import annotations

import json
from typing import Any, Sequence

from xike_switch.model.command import CompiledCommand, SwitchCommands
from xike_switch.model.vlan import SwitchMembership


def membership_to_dict(view: Sequence[SwitchMembership]) -> list[dict[str, Any]]:
    """Serialize *view* to JSON-compatible dicts.

    Keys follow the switch UI's camelCase naming (``vlanId``, ``vlanName``).
    """
    return [
        {
            "switch": sw.switch,
            "name": sw.name,
            "address": sw.address,
            "vlans": [
                {"vlanId": v.vlan_id, "vlanName": v.vlan_name, "ports": dict(v.ports)}
                for v in sw.vlans
            ],
        }
        for sw in view
    ]


def render_membership_json(view: Sequence[SwitchMembership]) -> str:
    """Return *view* as indented JSON text."""
    return json.dumps(membership_to_dict(view), indent=2, ensure_ascii=False)


def format_http_request(command: CompiledCommand) -> str:
    """Return *command* as a literal, human-readable HTTP request."""
    lines = [f"{command.method} {command.path} HTTP/1.1"]
    lines.extend(f"{name}: {value}" for name, value in command.headers)
    lines.append("")
    lines.append(command.body)
    return "\n".join(lines) + "\n"


def render_http_requests(batches: Sequence[SwitchCommands]) -> str:
    """Return the annotated listing of every request, switch by switch."""
    out: list[str] = []
    for batch in batches:
        out.append(f"# Switch: {batch.switch_key} ({batch.address})")
        out.append(
            f"# {len(batch.commands)} configuration requests (VLAN membership + PVID)"
        )
        out.append("")
        for index, command in enumerate(batch.commands, start=1):
            out.append(f"## Request {index}")
            out.append(format_http_request(command))
            out.append("---")
            out.append("")
    return "\n".join(out)
