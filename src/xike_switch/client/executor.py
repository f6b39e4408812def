"""Execute compiled commands against real switches.

Switches are independent and run in parallel, one worker per switch.  Within
a switch commands are strictly sequential because the firmware keeps mutable
page/session state.  A failing command never aborts the batch: its outcome is
recorded and the next command is sent.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Sequence

from xike_switch.client.errors import SwitchAuthError, SwitchError
from xike_switch.client.http import DEFAULT_PORT, RawHTTPClient
from xike_switch.client.vlan_ops import save_command
from xike_switch.model.command import CompiledCommand, SwitchCommands
from xike_switch.model.config import Switch

logger = logging.getLogger(__name__)

# Reported when the switch answered but not with a 2xx status.
HTTP_STATUS_ERROR: str = "HTTPStatusError"

_BODY_PREVIEW: int = 200


@dataclass(frozen=True)
class CommandOutcome:
    """Result of sending one command.

    Attributes:
        switch_key: Switch the command was sent to.
        index: 1-based position of the command in its batch (0 if no command
            was sent, e.g. on an auth failure).
        label: Human description of the command.
        success: ``True`` on a 2xx response.
        status: HTTP status code, if a response was received.
        status_text: HTTP reason phrase, if a response was received.
        error_kind: Failure category (``"TimeoutError"``, ``"ConnectionError"``,
            ``"ProtocolError"``, ``"AuthError"``, ``"HTTPStatusError"``).
        error: Failure message.
        response_body: Body returned by the switch.
    """

    switch_key: str
    index: int
    label: str
    success: bool
    status: int | None = None
    status_text: str | None = None
    error_kind: str | None = None
    error: str | None = None
    response_body: str = ""


@dataclass
class SwitchReport:
    """All outcomes for one switch, in send order."""

    switch_key: str
    address: str
    outcomes: list[CommandOutcome] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True if every command for this switch succeeded."""
        return all(o.success for o in self.outcomes)

    @property
    def failures(self) -> list[CommandOutcome]:
        return [o for o in self.outcomes if not o.success]


@dataclass
class ExecutionReport:
    """Per-switch reports, in configuration order."""

    switches: list[SwitchReport] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True if every switch's batch fully succeeded."""
        return all(s.ok for s in self.switches)

    @property
    def failed_switches(self) -> list[str]:
        return [s.switch_key for s in self.switches if not s.ok]


def execute_command(
    client: RawHTTPClient,
    command: CompiledCommand,
    index: int = 1,
    verbose: bool = False,
) -> CommandOutcome:
    """Send *command* and convert any failure into a :class:`CommandOutcome`."""
    if verbose:
        print(f"  URL: http://{command.address}{command.path}")
        print(f"  Body: {command.body}")
    try:
        resp = client.request(
            command.address,
            DEFAULT_PORT,
            command.method,
            command.path,
            command.headers,
            command.body,
        )
    except SwitchError as exc:
        logger.error("%s: %s failed: %s", command.switch_key, command.label, exc)
        return CommandOutcome(
            switch_key=command.switch_key,
            index=index,
            label=command.label,
            success=False,
            error_kind=exc.kind,
            error=str(exc),
        )

    if verbose:
        preview = resp.body[:_BODY_PREVIEW]
        more = "..." if len(resp.body) > _BODY_PREVIEW else ""
        print(f"  Response Status: {resp.status} {resp.status_text}")
        print(f"  Response Body: {preview}{more}")

    if not resp.ok:
        logger.error(
            "%s: %s rejected: %d %s",
            command.switch_key, command.label, resp.status, resp.status_text,
        )
    return CommandOutcome(
        switch_key=command.switch_key,
        index=index,
        label=command.label,
        success=resp.ok,
        status=resp.status,
        status_text=resp.status_text,
        error_kind=None if resp.ok else HTTP_STATUS_ERROR,
        error=None if resp.ok else f"{resp.status} {resp.status_text}",
        response_body=resp.body,
    )


def run_batch(
    client: RawHTTPClient,
    batch: SwitchCommands,
    verbose: bool = False,
) -> SwitchReport:
    """Send every command of *batch* in order, never stopping early."""
    report = SwitchReport(switch_key=batch.switch_key, address=batch.address)
    for index, command in enumerate(batch.commands, start=1):
        print(f"Configuring {command.label} on {batch.switch_key}...")
        outcome = execute_command(client, command, index, verbose)
        _print_outcome(outcome)
        report.outcomes.append(outcome)
    logger.info(
        "Completed %s: %d/%d command(s) succeeded",
        batch.switch_key, len(report.outcomes) - len(report.failures), len(report.outcomes),
    )
    return report


def execute_commands(
    batches: Sequence[SwitchCommands],
    credentials: Mapping[str, str],
    client: RawHTTPClient,
    verbose: bool = False,
    max_workers: int | None = None,
) -> ExecutionReport:
    """Execute all *batches*, one worker per switch.

    Args:
        batches: Compiled commands, one entry per switch in config order.
        credentials: Switch key -> cookie.  Switches without a credential
            are reported with a single ``AuthError`` outcome and nothing is
            sent to them.
        client: Raw HTTP client used for every request.
        verbose: Print request/response details.
        max_workers: Upper bound on concurrently configured switches
            (default: one per switch).

    Returns:
        An :class:`ExecutionReport` ordered like *batches*.
    """
    report = ExecutionReport()
    runnable: list[SwitchCommands] = []
    for batch in batches:
        if batch.switch_key in credentials:
            runnable.append(batch)
            continue
        logger.error("Skipping %s: not authenticated", batch.switch_key)
        report.switches.append(_auth_failure(batch.switch_key, batch.address))

    if runnable:
        workers = max_workers or len(runnable)
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = {
                b.switch_key: pool.submit(run_batch, client, b, verbose) for b in runnable
            }
            done = {key: fut.result() for key, fut in futures.items()}
        report.switches.extend(done.values())

    order = {b.switch_key: i for i, b in enumerate(batches)}
    report.switches.sort(key=lambda s: order[s.switch_key])
    return report


def save_configuration(
    switches: Iterable[Switch],
    credentials: Mapping[str, str],
    client: RawHTTPClient,
    verbose: bool = False,
) -> ExecutionReport:
    """Ask each switch to persist its running configuration.

    Issued once execution has run, whether or not every command succeeded:
    a partially applied configuration may still be worth keeping.
    """
    report = ExecutionReport()
    for switch in switches:
        cookie = credentials.get(switch.key)
        if cookie is None:
            report.switches.append(_auth_failure(switch.key, switch.address))
            continue
        print(f"Saving configuration for {switch.key} ({switch.address})...")
        outcome = execute_command(client, save_command(switch.key, switch.address, cookie),
                                  verbose=verbose)
        if outcome.success:
            print(f"  ✓ Configuration saved: {outcome.status} {outcome.status_text}")
        else:
            print(f"  ✗ Save failed: {outcome.error}")
        report.switches.append(
            SwitchReport(switch_key=switch.key, address=switch.address, outcomes=[outcome])
        )
    return report


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------

def _auth_failure(switch_key: str, address: str) -> SwitchReport:
    outcome = CommandOutcome(
        switch_key=switch_key,
        index=0,
        label="authenticate",
        success=False,
        error_kind=SwitchAuthError.kind,
        error=f"No credential for {switch_key}",
    )
    return SwitchReport(switch_key=switch_key, address=address, outcomes=[outcome])


def _print_outcome(outcome: CommandOutcome) -> None:
    if outcome.success:
        print(f"  ✓ Success: {outcome.status} {outcome.status_text}")
    else:
        print(f"  ✗ Failed [{outcome.error_kind}]: {outcome.error}")
