from __future__ import annotations

import logging

import pytest

from zwthings.core.debug import set_debug_flags
from zwthings.core.model import RawValue
from zwthings.core.value_store import ValueStore


@pytest.fixture(autouse=True)
def restore_levels():
    names = ("zwthings.core.classifier", "zwthings.core.quirks", "zwthings.core.value_store")
    levels = {name: logging.getLogger(name).level for name in names}
    yield
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)


def test_named_categories_enable_debug() -> None:
    unknown = set_debug_flags("classifier, valueId")
    assert unknown == []
    assert logging.getLogger("zwthings.core.classifier").level == logging.DEBUG
    assert logging.getLogger("zwthings.core.quirks").level == logging.DEBUG
    assert logging.getLogger("zwthings.core.value_store").level == logging.DEBUG


def test_unknown_categories_are_returned() -> None:
    assert set_debug_flags("bogus,,classifier") == ["bogus"]


def test_value_id_category_logs_stored_values(caplog: pytest.LogCaptureFixture) -> None:
    set_debug_flags("valueId")
    store = ValueStore(2)

    with caplog.at_level(logging.DEBUG, logger="zwthings.core.value_store"):
        store.put(RawValue(node_id=2, class_id=0x25, label="Switch", value=True))
        store.put(RawValue(node_id=2, class_id=0x25, label="Switch", value=False))

    messages = [record.getMessage() for record in caplog.records if record.name == "zwthings.core.value_store"]
    assert messages == [
        "node2 add valueId: 2-37-1-0 label: 'Switch' value: True",
        "node2 update valueId: 2-37-1-0 label: 'Switch' value: False",
    ]
