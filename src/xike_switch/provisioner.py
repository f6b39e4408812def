"""Top-level VLAN provisioning workflow.

Ties the pipeline together::

    SwitchConfig -> filter -> compile -> (authenticate + execute) -> save
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from xike_switch.client.errors import SwitchUsageError
from xike_switch.client.executor import ExecutionReport, execute_commands, save_configuration
from xike_switch.client.http import RawHTTPClient
from xike_switch.client.session import AuthResult, authenticate_switches
from xike_switch.model.command import CompileResult
from xike_switch.model.config import SwitchConfig
from xike_switch.model.vlan import SwitchMembership
from xike_switch.utils.filter import filter_config
from xike_switch.utils.vlan_compile import build_membership_view, compile_commands

logger = logging.getLogger(__name__)


def check_run_flags(http: bool, execute: bool, save: bool) -> None:
    """Reject invalid mode combinations before any network activity.

    Raises:
        SwitchUsageError: If *save* is set without *execute*, or *execute*
            without *http*.
    """
    if save and not execute:
        raise SwitchUsageError("--save requires --execute flag")
    if execute and not http:
        raise SwitchUsageError("--execute requires --http flag")


@dataclass
class ProvisionResult:
    """Everything :meth:`Provisioner.apply` did.

    Attributes:
        auth: Credential derivation result.
        execution: Outcome of the VLAN/PVID commands.
        save: Outcome of the save step, or ``None`` if not requested.
    """

    auth: AuthResult
    execution: ExecutionReport
    save: ExecutionReport | None = None

    @property
    def ok(self) -> bool:
        """True if every switch was configured (and saved, if requested)."""
        return self.execution.ok and (self.save is None or self.save.ok)


class Provisioner:
    """Compile and apply a VLAN configuration to a set of switches.

    Args:
        config: Full validated configuration.
        switch_filters: Switch keys to restrict to (empty = all).
        vlan_filters: VLAN IDs or names to restrict to (empty = all).
        client: Raw HTTP client; a new one is built from *timeout_s* if
            omitted.
        timeout_s: Per-request deadline in seconds.
        max_workers: Upper bound on switches configured concurrently.
    """

    def __init__(
        self,
        config: SwitchConfig,
        switch_filters: Sequence[str] = (),
        vlan_filters: Sequence[str] = (),
        client: RawHTTPClient | None = None,
        timeout_s: float = 10.0,
        max_workers: int | None = None,
    ) -> None:
        self.config: SwitchConfig = filter_config(config, switch_filters, vlan_filters)
        self.client: RawHTTPClient = client or RawHTTPClient(timeout_s=timeout_s)
        self.max_workers = max_workers

    def membership_view(self) -> list[SwitchMembership]:
        """Return the per-switch VLAN/port membership (inspection mode)."""
        return build_membership_view(self.config)

    def compile(self) -> CompileResult:
        """Return the commands that :meth:`apply` would send."""
        return compile_commands(self.config)

    def apply(self, save: bool = False, verbose: bool = False) -> ProvisionResult:
        """Authenticate, send every command and optionally save.

        Individual command failures are recorded, never raised; the save
        step runs after execution regardless of its success.
        """
        print("\n# Authenticating to switches...\n")
        auth = authenticate_switches(self.config.switches.values(), verbose)

        print("\n# Configuring VLANs...\n")
        compiled = compile_commands(self.config, auth.credentials)
        execution = execute_commands(
            compiled.batches,
            auth.credentials,
            self.client,
            verbose=verbose,
            max_workers=self.max_workers,
        )

        saved: ExecutionReport | None = None
        if save:
            print("\n# Saving configuration...\n")
            saved = save_configuration(
                self.config.switches.values(), auth.credentials, self.client, verbose
            )

        result = ProvisionResult(auth=auth, execution=execution, save=saved)
        if not result.ok:
            failed = set(execution.failed_switches)
            if saved is not None:
                failed.update(saved.failed_switches)
            logger.error("Provisioning incomplete for: %s", ", ".join(sorted(failed)))
        return result
