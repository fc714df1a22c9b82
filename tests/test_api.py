from __future__ import annotations

from pathlib import Path

import pytest

from zwthings import api


@pytest.fixture(autouse=True)
def isolated_xdg(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))


def test_client_classifies_snapshot_and_sets_property(loop) -> None:
    client = api.Client(loop=loop)
    snapshot = api.NodeSnapshot.from_document(
        {
            "node_id": 9,
            "device_class": {"generic": 0x10},
            "values": [{"class_id": 0x25, "index": 0, "type": "bool", "label": "Switch", "value": False}],
        }
    )

    node = client.classify_snapshot(snapshot)
    assert [n.id for n in client.list_nodes()] == ["zwave-9"]
    assert node.thing_type == "onOffSwitch"

    client.set_property(9, "on", True)
    assert isinstance(client.driver, api.RecordingDriver)
    assert client.driver.value_writes()[-1].describe() == "set 9-37-1-0 = True"


def test_client_lists_packaged_quirks(loop) -> None:
    client = api.Client(loop=loop)
    assert "schlage_deadbolt" in [quirk.id for quirk in client.list_quirks()]
    assert client.load_warnings == ()


def test_client_unknown_node(loop) -> None:
    client = api.Client(loop=loop)
    with pytest.raises(api.UnknownNodeError):
        client.get_node(42)


def test_public_api_exports() -> None:
    for name in api.__all__:
        assert hasattr(api, name)
