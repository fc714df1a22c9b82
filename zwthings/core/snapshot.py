"""Node snapshots: one node's identity and raw values, replayable offline."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from zwthings.core.errors import SnapshotError
from zwthings.core.loader import read_document, validate_document
from zwthings.core.model import RawValue
from zwthings.core.node import Node

if TYPE_CHECKING:
    from zwthings.core.service import AdapterService

LOGGER = logging.getLogger(__name__)

_SCHEMA = "node.schema.json"
_DEAD_NOTIFICATION = 5


@dataclass(frozen=True)
class NodeSnapshot:
    node_id: int
    info: dict[str, Any] = field(default_factory=dict)
    device_class: dict[str, int] = field(default_factory=dict)
    values: tuple[dict[str, Any], ...] = ()
    changes: tuple[dict[str, Any], ...] = ()
    dead: bool = False

    @classmethod
    def from_document(cls, doc: dict[str, Any], *, source: str = "<snapshot>") -> NodeSnapshot:
        validate_document(doc, _SCHEMA, source=source, invalid_error=SnapshotError)
        return cls(
            node_id=doc["node_id"],
            info=dict(doc.get("info", {})),
            device_class=dict(doc.get("device_class", {})),
            values=tuple(doc["values"]),
            changes=tuple(doc.get("changes", ())),
            dead=bool(doc.get("dead", False)),
        )


def load_snapshot(path: Path) -> NodeSnapshot:
    doc = read_document(path, read_error=SnapshotError, invalid_error=SnapshotError)
    return NodeSnapshot.from_document(doc, source=str(path))


def replay_snapshot(service: AdapterService, snapshot: NodeSnapshot) -> Node:
    """Feed ``snapshot`` through ``service`` the way the driver would."""
    node_id = snapshot.node_id
    service.node_added(node_id)
    for value in snapshot.values:
        service.value_added(node_id, value["class_id"], value)
    service.node_naming(node_id, {**snapshot.info, **snapshot.device_class})
    if snapshot.dead:
        service.node_notification(node_id, _DEAD_NOTIFICATION)
        service.scan_complete()
    else:
        service.node_ready(node_id, snapshot.device_class)

    node = service.get_node(node_id)
    for change in snapshot.changes:
        key = node.find_value_key(change["class_id"], change.get("instance", 1), change.get("index", 0))
        raw = node.values.get(key)
        if raw is None:
            LOGGER.warning("node%d: change for unknown value %s", node_id, change)
            continue
        service.value_changed(node_id, raw.class_id, RawValue.from_driver({**raw.as_dict(), **change}))
    return node
