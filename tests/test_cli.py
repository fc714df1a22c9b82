from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from zwthings import cli

runner = CliRunner()

SMART_SWITCH = """
node_id: 2
info:
  manufacturer: Aeotec
  manufacturerid: "0x0086"
  product: Smart Switch 6
  productid: "0x0060"
  producttype: "0x0003"
device_class: {generic: 0x10, basic: 4, specific: 1}
values:
  - {class_id: 0x25, index: 0, type: bool, label: Switch, value: true}
  - {class_id: 0x26, index: 0, type: byte, label: Level, value: 99}
  - {class_id: 0x32, index: 8, type: decimal, label: Power, units: W, value: 4.2, read_only: true}
  - class_id: 0x70
    index: 80
    type: list
    genre: config
    label: Notification
    values: [Nothing, Hail, Basic]
    value: Hail
"""


@pytest.fixture(autouse=True)
def isolated_xdg(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.delenv("ZWTHINGS_DEBUG", raising=False)


def test_quirks_command() -> None:
    result = runner.invoke(cli.app, ["quirks"])
    assert result.exit_code == 0
    assert "aeotec_zw096: 0x0086 0x0060" in result.stdout
    assert "first_alert_zcombo: 0x0138 0x0001, 0x0002" in result.stdout


def test_classify_command(tmp_path: Path) -> None:
    snapshot = tmp_path / "switch.yaml"
    snapshot.write_text(SMART_SWITCH, encoding="utf-8")

    result = runner.invoke(cli.app, ["classify", str(snapshot)])

    assert result.exit_code == 0
    assert "Type: smartPlug" in result.stdout
    assert "Quirks: aeotec_reporting, aeotec_zw096" in result.stdout
    assert "  on = True" in result.stdout
    assert "  instantaneousPower = 4.2 watt" in result.stdout
    assert "  level" not in result.stdout
    assert "config node2 param 80 = 2 (size 1)" in result.stdout
    assert "poll" not in result.stdout


def test_classify_json(tmp_path: Path) -> None:
    snapshot = tmp_path / "switch.yaml"
    snapshot.write_text(SMART_SWITCH, encoding="utf-8")

    result = runner.invoke(cli.app, ["classify", "--json", str(snapshot)])

    assert result.exit_code == 0
    dumped = json.loads(result.stdout)
    assert dumped["id"] == "zwave-2"
    assert dumped["quirks"] == ["aeotec_reporting", "aeotec_zw096"]
    assert "level" not in dumped["properties"]


def test_classify_error_is_clean(tmp_path: Path) -> None:
    snapshot = tmp_path / "bad.yaml"
    snapshot.write_text("node_id: nope\nvalues: []\n", encoding="utf-8")

    result = runner.invoke(cli.app, ["classify", str(snapshot)])

    assert result.exit_code == 1
    assert "Error: Schema validation failed" in result.stderr
    assert "Traceback" not in result.stderr


def test_unknown_debug_category_warns(tmp_path: Path) -> None:
    result = runner.invoke(cli.app, ["--debug", "node,bogus", "quirks"])
    assert result.exit_code == 0
    assert "Warning: unknown debug category 'bogus'" in result.stderr
