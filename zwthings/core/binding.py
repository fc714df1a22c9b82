"""Semantic properties bound to raw values."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from zwthings.core.codecs import Codec, Decoded, Encoded, decoder_for, encoder_for, resolve_codec
from zwthings.core.constants import CommandClass
from zwthings.core.errors import PropertyError, PropertyReadOnlyError, PropertyValueError
from zwthings.core.model import PropertyDescr, RawValue, ValueKey, ValueKind

if TYPE_CHECKING:
    from zwthings.core.node import Node

LOGGER = logging.getLogger(__name__)

_CONFIG_PARAM_SIZE = {ValueKind.INT: 4, ValueKind.LIST: 1}

UpdatedHook = Callable[["PropertyBinding"], None]


class PropertyBinding:
    """A named property linked to zero, one, or two raw values.

    A binding with no value key is synthetic: only internal logic sets it,
    and raw notifications never match it. ``timer`` is the one timer this
    binding may own (level ramp, lock timeout); ``cancel_timer`` releases it.
    """

    def __init__(
        self,
        node: Node,
        name: str,
        descr: PropertyDescr,
        value_key: ValueKey | None = None,
        *,
        aux_value_key: ValueKey | None = None,
        encoder: Codec | str = Codec.IDENTITY,
        decoder: Codec | str = Codec.IDENTITY,
        value_map: tuple[tuple[str, Any], ...] = (),
        default: Any = None,
        fire_and_forget: bool = False,
    ) -> None:
        self.node = node
        self.name = name
        self.descr = descr
        self.value_key = value_key
        self.aux_value_key = aux_value_key
        self.encoder = resolve_codec(encoder)
        self.decoder = resolve_codec(decoder)
        self._encode = encoder_for(self.encoder)
        self._decode = decoder_for(self.decoder)
        self.value_map = value_map
        self.default = default
        self.fire_and_forget = fire_and_forget
        self.value: Any = default
        self.updated: UpdatedHook | None = None
        self.timer: asyncio.TimerHandle | None = None
        self._pending: list[asyncio.Future[Any]] = []

        for key in self.value_keys:
            raw = node.values.get(key)
            if raw is not None and raw.value is not None:
                self.value = self.decode(raw, raw.value).value

    @property
    def visible(self) -> bool:
        return not self.name.startswith("_")

    @property
    def value_keys(self) -> tuple[ValueKey, ...]:
        return tuple(key for key in (self.value_key, self.aux_value_key) if key is not None)

    @property
    def is_synthetic(self) -> bool:
        return not self.value_keys

    def matches(self, key: ValueKey) -> bool:
        return key in self.value_keys

    def decode(self, raw: RawValue | None, data: Any) -> Decoded:
        try:
            return self._decode(self, raw, data)
        except (TypeError, ValueError, IndexError, OverflowError) as exc:
            LOGGER.warning(
                "node%d property %s: unexpected raw value %r (%s) - keeping %r",
                self.node.node_id,
                self.name,
                data,
                exc,
                self.value,
            )
            return Decoded(self.value, f"{self.value} (unexpected zw: {data!r})")

    def encode(self, raw: RawValue | None, value: Any) -> Encoded:
        return self._encode(self, raw, value)

    @property
    def level(self) -> int | None:
        """Hardware-scale reading of the bound raw value, for codecs that have one."""
        raw = self.node.values.get(self.value_key)
        if raw is None or raw.value is None:
            return None
        try:
            return self._decode(self, raw, raw.value).level
        except (TypeError, ValueError, IndexError, OverflowError):
            return None

    def set_cached_value(self, value: Any) -> None:
        self.value = value

    def _confirmed_value(self, raw: RawValue | None, value: Any, encoded: Encoded) -> Any:
        # The value the device reports once it applies ``encoded``.
        if self.encoder == Codec.IDENTITY:
            return value
        return self.decode(raw, encoded.data).value

    def set_value(self, value: Any) -> asyncio.Future[Any]:
        """Outward set; the future resolves when the node confirms the change."""
        future: asyncio.Future[Any] = self.node.loop.create_future()

        if self.descr.read_only:
            future.set_exception(
                PropertyReadOnlyError(f"Property {self.name} for node {self.node.id} is read-only")
            )
            return future

        if self.is_synthetic:
            try:
                encoded = self.encode(None, value)
            except PropertyValueError as exc:
                future.set_exception(exc)
                return future
            self._pending.append(future)
            self.node.set_property_value(self, self._confirmed_value(None, value, encoded))
            return future

        raw = self.node.values.get(self.value_key)
        if raw is None:
            future.set_exception(
                PropertyError(f"Property {self.name} for node {self.node.id} has no raw value")
            )
            return future
        if raw.read_only:
            future.set_exception(
                PropertyReadOnlyError(
                    f"Property {self.name} for node {self.node.id} is bound to read-only value {raw.value_id}"
                )
            )
            return future

        try:
            encoded = self.encode(raw, value)
        except PropertyValueError as exc:
            future.set_exception(exc)
            return future

        self._pending.append(future)
        self.set_cached_value(self._confirmed_value(raw, value, encoded))
        LOGGER.info(
            "setProperty property: %s for: %s valueId: %s value: %s",
            self.name,
            self.node.name or self.node.id,
            raw.value_id,
            encoded.trace,
        )

        driver = self.node.driver
        if raw.class_id == CommandClass.CONFIGURATION:
            size = _CONFIG_PARAM_SIZE.get(raw.kind, 2)
            driver.set_config_param(raw.node_id, raw.index, encoded.data, size)
            # Some devices never report configuration changes back.
            self.node.notify_property_changed(self)
        else:
            driver.set_value(raw.key, encoded.data)
            if self.fire_and_forget:
                self.node.notify_property_changed(self)
        return future

    def resolve_pending(self) -> None:
        pending, self._pending = self._pending, []
        for future in pending:
            if not future.done():
                future.set_result(self.value)

    def fail_pending(self, exc: Exception) -> None:
        pending, self._pending = self._pending, []
        for future in pending:
            if not future.done():
                future.set_exception(exc)

    def start_timer(self, delay: float, callback: Callable[..., None], *args: Any) -> bool:
        """Schedule ``callback``; a no-op returning False if a timer is active."""
        if self.timer is not None:
            return False
        self.timer = self.node.loop.call_later(delay, self._fire_timer, callback, args)
        return True

    def _fire_timer(self, callback: Callable[..., None], args: tuple[Any, ...]) -> None:
        self.timer = None
        callback(*args)

    def cancel_timer(self) -> None:
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None

    def detach(self) -> None:
        self.cancel_timer()
        self.fail_pending(PropertyError(f"Property {self.name} for node {self.node.id} was removed"))

    def as_dict(self) -> dict[str, Any]:
        prop = self.descr.as_dict()
        prop["name"] = self.name
        prop["value"] = self.value
        if self.value_key is not None:
            prop["valueId"] = str(self.value_key)
        if self.aux_value_key is not None:
            prop["auxValueId"] = str(self.aux_value_key)
        if self.level is not None:
            prop["level"] = self.level
        return prop
