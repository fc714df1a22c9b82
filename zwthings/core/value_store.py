"""Per-node store of raw protocol values."""

from __future__ import annotations

import logging
from collections.abc import Iterator

from zwthings.core.model import RawValue, ValueKey

LOGGER = logging.getLogger(__name__)


class ValueStore:
    """Raw values of one node, keyed by ``(node, class, instance, index)``.

    Iteration order is insertion order, so ``find`` is stable across calls.
    """

    def __init__(self, node_id: int) -> None:
        self.node_id = node_id
        self._values: dict[ValueKey, RawValue] = {}
        self.classes: list[int] = []

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[RawValue]:
        return iter(self._values.values())

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def get(self, key: ValueKey | None) -> RawValue | None:
        if key is None:
            return None
        return self._values.get(key)

    def put(self, raw: RawValue) -> bool:
        """Insert or overwrite ``raw``; return True if the key is new."""
        if raw.class_id not in self.classes:
            self.classes.append(raw.class_id)
        is_new = raw.key not in self._values
        self._values[raw.key] = raw
        LOGGER.debug(
            "node%d %s valueId: %s label: %r value: %r",
            self.node_id,
            "add" if is_new else "update",
            raw.value_id,
            raw.label,
            raw.value,
        )
        return is_new

    def remove(self, class_id: int, instance: int, index: int) -> RawValue | None:
        key = ValueKey(self.node_id, class_id, instance, index)
        raw = self._values.pop(key, None)
        if raw is None:
            LOGGER.info("node%d remove: unknown value %s (ignored)", self.node_id, key)
        return raw

    def find(
        self,
        class_id: int,
        instance: int | None = None,
        index: int | None = None,
    ) -> ValueKey | None:
        """Return the first key matching the class and the optional filters."""
        for key in self._values:
            if key.class_id != class_id:
                continue
            if instance is not None and key.instance != instance:
                continue
            if index is not None and key.index != index:
                continue
            return key
        return None

