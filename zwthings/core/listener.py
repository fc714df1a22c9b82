"""Downstream notification interface."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from zwthings.core.binding import PropertyBinding
    from zwthings.core.model import Action
    from zwthings.core.node import Node


class DeviceListener(Protocol):
    def device_added(self, node: Node) -> None: ...

    def device_removed(self, node: Node) -> None: ...

    def property_changed(self, node: Node, binding: PropertyBinding) -> None: ...

    def event(self, node: Node, name: str, data: Any = None) -> None: ...

    def action_started(self, node: Node, action: Action) -> None: ...

    def action_finished(self, node: Node, action: Action) -> None: ...

    def action_rejected(self, node: Node, action: Action) -> None: ...


class NullListener:
    """Listener used when nothing downstream is attached."""

    def device_added(self, node: Node) -> None:
        pass

    def device_removed(self, node: Node) -> None:
        pass

    def property_changed(self, node: Node, binding: PropertyBinding) -> None:
        pass

    def event(self, node: Node, name: str, data: Any = None) -> None:
        pass

    def action_started(self, node: Node, action: Action) -> None:
        pass

    def action_finished(self, node: Node, action: Action) -> None:
        pass

    def action_rejected(self, node: Node, action: Action) -> None:
        pass
