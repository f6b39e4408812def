#!/usr/bin/env python3
"""Example: print the HTTP requests that would configure each switch.

Nothing is sent; this only loads the YAML, compiles it and prints the
request listing.

Usage:

    VLANS_YAML=examples/vlans.yaml python examples/show_requests.py

Environment variables:
    VLANS_YAML    Path to the configuration (default: examples/vlans.yaml).
    XIKE_SWITCH   Only show this switch key (default: all switches).
"""

from __future__ import annotations

import os
import sys

from xike_switch.client.errors import SwitchConfigError
from xike_switch.config import load_config
from xike_switch.provisioner import Provisioner
from xike_switch.utils.render import render_http_requests

path = os.environ.get("VLANS_YAML", "examples/vlans.yaml")
switch = os.environ.get("XIKE_SWITCH", "")

try:
    config = load_config(path)
except SwitchConfigError as exc:
    print(f"ERROR: {exc}", file=sys.stderr)
    sys.exit(1)

provisioner = Provisioner(config, switch_filters=[switch] if switch else [])
result = provisioner.compile()

for warning in result.warnings:
    print(f"WARNING: {warning}", file=sys.stderr)

print(render_http_requests(result.batches))
