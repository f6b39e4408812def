#!/usr/bin/env python3
"""Example: push VLAN membership and PVIDs to the configured switches.

Usage (dry run, default):

    VLANS_YAML=examples/vlans.yaml python examples/apply_vlans.py

Usage (live apply and save):

    APPLY=1 SAVE=1 VLANS_YAML=examples/vlans.yaml python examples/apply_vlans.py

Environment variables:
    VLANS_YAML    Path to the configuration (default: examples/vlans.yaml).
    XIKE_VLAN     Only touch this VLAN (ID or name; default: all VLANs).
    XIKE_TIMEOUT  Per-request timeout in seconds (default: 10).
    APPLY         Set to "1" to actually send the requests (default: dry-run).
    SAVE          Set to "1" to save the configuration after applying.
"""

from __future__ import annotations

import os
import sys

from xike_switch.client.errors import SwitchConfigError
from xike_switch.config import load_config
from xike_switch.logging_config import configure_logging
from xike_switch.provisioner import Provisioner

# ---------------------------------------------------------------------------
# Read configuration from environment
# ---------------------------------------------------------------------------
path = os.environ.get("VLANS_YAML", "examples/vlans.yaml")
vlan = os.environ.get("XIKE_VLAN", "")
timeout = float(os.environ.get("XIKE_TIMEOUT", "10"))
apply_changes = os.environ.get("APPLY", "0") == "1"
save = os.environ.get("SAVE", "0") == "1"

configure_logging("INFO")

try:
    config = load_config(path)
except SwitchConfigError as exc:
    print(f"ERROR: {exc}", file=sys.stderr)
    sys.exit(1)

provisioner = Provisioner(config, vlan_filters=[vlan] if vlan else [], timeout_s=timeout)

# ---------------------------------------------------------------------------
# Plan and apply
# ---------------------------------------------------------------------------
print("=== DRY RUN ===")
for batch in provisioner.compile().batches:
    print(f"  {batch.switch_key} ({batch.address}): {len(batch.commands)} request(s)")
    for command in batch.commands:
        print(f"    - {command.label}")
print()

if not apply_changes:
    print("Dry-run only -- set APPLY=1 to apply changes.")
    sys.exit(0)

result = provisioner.apply(save=save)

print()
for report in result.execution.switches:
    status = "ok" if report.ok else f"{len(report.failures)} failure(s)"
    print(f"  {report.switch_key}: {status}")
    for outcome in report.failures:
        print(f"    [{outcome.error_kind}] {outcome.label}: {outcome.error}")

sys.exit(0 if result.ok else 1)
