"""Unit tests for YAML configuration loading in xike_switch.config."""

from __future__ import annotations

import logging
from pathlib import Path
from textwrap import dedent

import pytest

from xike_switch.client.errors import SwitchConfigError
from xike_switch.config import load_config, parse_config
from xike_switch.model.config import Port, SwitchAuth

_YAML = dedent(
    """\
    vlans:
      20: voice
      10: data
    templates:
      trunk:
        10: tagged
        20: pvid
      access:
        10: pvid
    switches:
      sw1:
        name: Core Switch
        address: 192.0.2.10
        auth:
          type: xike
          user: admin
          pass: secret
          resp: 0123abcd
        ports:
          - name: uplink
            template: trunk
          - name: desk
            template: access
      sw2:
        name: Lab
        address: 192.0.2.11
        ports: []
    """
)


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "vlans.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def _raw(**overrides: object) -> dict:
    raw: dict = {
        "vlans": {10: "data"},
        "templates": {"t": {10: "tagged"}},
        "switches": {
            "sw1": {"name": "S", "address": "a", "ports": [{"name": "p", "template": "t"}]},
        },
    }
    raw.update(overrides)
    return raw


# ---------------------------------------------------------------------------
# load_config
# ---------------------------------------------------------------------------

class TestLoadConfig:
    def test_full_document(self, tmp_path: Path) -> None:
        config = load_config(_write(tmp_path, _YAML))

        assert list(config.vlans.items()) == [(20, "voice"), (10, "data")]
        assert dict(config.templates["trunk"]) == {10: "tagged", 20: "pvid"}
        assert list(config.switches) == ["sw1", "sw2"]

        sw1 = config.switches["sw1"]
        assert sw1.name == "Core Switch"
        assert sw1.address == "192.0.2.10"
        assert sw1.auth == SwitchAuth(type="xike", user="admin", password="secret",
                                      response="0123abcd")
        assert sw1.ports == (Port("uplink", "trunk"), Port("desk", "access"))

    def test_auth_is_optional(self, tmp_path: Path) -> None:
        config = load_config(_write(tmp_path, _YAML))
        assert config.switches["sw2"].auth is None
        assert config.switches["sw2"].ports == ()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(SwitchConfigError, match="Cannot read"):
            load_config(tmp_path / "absent.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        with pytest.raises(SwitchConfigError, match="Invalid YAML"):
            load_config(_write(tmp_path, "vlans: [unclosed\n"))

    def test_empty_document(self, tmp_path: Path) -> None:
        with pytest.raises(SwitchConfigError, match="expected a mapping"):
            load_config(_write(tmp_path, ""))

    def test_config_error_is_value_error(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError):
            load_config(_write(tmp_path, "- just a list\n"))


# ---------------------------------------------------------------------------
# parse_config validation
# ---------------------------------------------------------------------------

class TestParseConfig:
    def test_minimal(self) -> None:
        config = parse_config(_raw())
        assert config.vlans == {10: "data"}
        assert config.switches["sw1"].ports == (Port("p", "t"),)

    def test_string_vlan_ids_coerced(self) -> None:
        config = parse_config(_raw(vlans={"10": "data"}, templates={"t": {"10": "pvid"}}))
        assert config.vlans == {10: "data"}
        assert dict(config.templates["t"]) == {10: "pvid"}

    @pytest.mark.parametrize("key", ["ten", 0, -5, True])
    def test_bad_vlan_ids_rejected(self, key: object) -> None:
        with pytest.raises(SwitchConfigError, match="VLAN ID"):
            parse_config(_raw(vlans={key: "x"}))

    def test_duplicate_vlan_id_rejected(self) -> None:
        with pytest.raises(SwitchConfigError, match="duplicate"):
            parse_config(_raw(vlans={10: "a", "10": "b"}))

    def test_vlan_name_must_be_scalar(self) -> None:
        with pytest.raises(SwitchConfigError, match="name must be a string"):
            parse_config(_raw(vlans={10: None}))

    def test_invalid_status_rejected(self) -> None:
        with pytest.raises(SwitchConfigError, match="invalid status"):
            parse_config(_raw(templates={"t": {10: "untagged"}}))

    def test_not_member_is_not_a_template_status(self) -> None:
        with pytest.raises(SwitchConfigError):
            parse_config(_raw(templates={"t": {10: "not-member"}}))

    def test_multiple_pvids_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="xike_switch.config"):
            parse_config(_raw(vlans={10: "a", 20: "b"}, templates={"t": {10: "pvid", 20: "pvid"}}))
        assert "pvid" in caplog.text

    def test_unknown_auth_type_rejected(self) -> None:
        switches = {"sw1": {"name": "S", "address": "a", "ports": [],
                            "auth": {"type": "radius", "user": "u", "pass": "p", "resp": "r"}}}
        with pytest.raises(SwitchConfigError, match="invalid type 'radius'"):
            parse_config(_raw(switches=switches))

    def test_auth_missing_field(self) -> None:
        switches = {"sw1": {"name": "S", "address": "a", "ports": [],
                            "auth": {"type": "xike", "user": "u", "pass": "p"}}}
        with pytest.raises(SwitchConfigError, match="'resp'"):
            parse_config(_raw(switches=switches))

    def test_ports_must_be_list(self) -> None:
        switches = {"sw1": {"name": "S", "address": "a", "ports": {"p": "t"}}}
        with pytest.raises(SwitchConfigError, match="'ports' must be a list"):
            parse_config(_raw(switches=switches))

    def test_port_requires_template(self) -> None:
        switches = {"sw1": {"name": "S", "address": "a", "ports": [{"name": "p"}]}}
        with pytest.raises(SwitchConfigError, match=r"ports\[0\].*'template'"):
            parse_config(_raw(switches=switches))

    def test_switch_requires_address(self) -> None:
        switches = {"sw1": {"name": "S", "ports": []}}
        with pytest.raises(SwitchConfigError, match="'address'"):
            parse_config(_raw(switches=switches))

    def test_missing_section(self) -> None:
        raw = _raw()
        del raw["templates"]
        with pytest.raises(SwitchConfigError, match="templates"):
            parse_config(raw)

    def test_unknown_template_reference_is_not_a_load_error(self) -> None:
        switches = {"sw1": {"name": "S", "address": "a",
                            "ports": [{"name": "p", "template": "nope"}]}}
        config = parse_config(_raw(switches=switches))
        assert config.switches["sw1"].ports[0].template == "nope"
