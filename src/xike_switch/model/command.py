"""Typed models for compiled switch commands."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from xike_switch.client.errors import ConfigResolutionError

CommandKind = Literal["vlan_membership", "pvid", "save"]


@dataclass(frozen=True)
class CompiledCommand:
    """A fully materialized HTTP request for one switch.

    Attributes:
        switch_key: Key of the target switch.
        address: Host the request is sent to.
        method: HTTP method (always ``"POST"`` for writes).
        path: Request target including query string.
        headers: ``(name, value)`` pairs in wire order.
        body: Form-encoded request body.
        kind: What the command changes.
        label: Short human description, e.g. ``"VLAN 10 (data)"``.
    """

    switch_key: str
    address: str
    method: str
    path: str
    headers: tuple[tuple[str, str], ...]
    body: str
    kind: CommandKind
    label: str


@dataclass(frozen=True)
class SwitchCommands:
    """Ordered commands for a single switch.

    Attributes:
        switch_key: Switch key.
        address: Switch address.
        commands: Membership commands (VLAN order) then PVID commands
            (port order).
    """

    switch_key: str
    address: str
    commands: tuple[CompiledCommand, ...] = ()


@dataclass
class CompileResult:
    """Output of :func:`~xike_switch.utils.vlan_compile.compile_commands`.

    Attributes:
        batches: One :class:`SwitchCommands` per switch, in config order.
        warnings: Unresolved template references encountered while compiling.
    """

    batches: list[SwitchCommands] = field(default_factory=list)
    warnings: list[ConfigResolutionError] = field(default_factory=list)
