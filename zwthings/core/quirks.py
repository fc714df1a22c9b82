"""Quirk catalog loading and hardware-identity matching."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass, fields
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any

from zwthings.core.errors import QuirkLoadError, QuirkValidationError
from zwthings.core.loader import read_document, validate_document
from zwthings.core.model import (
    ConfigWrite,
    NodeIdentity,
    Quirk,
    QuirkHints,
    QuirkMatch,
    QuirkOverrides,
)

LOGGER = logging.getLogger(__name__)

_SCHEMA = "quirk.schema.json"
_LOCK_CODE_KINDS = ("locked", "unlocked", "jammed")


@dataclass(frozen=True)
class QuirkTable:
    """Ordered, immutable quirk catalog."""

    quirks: tuple[Quirk, ...] = ()
    warnings: tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.quirks)

    def get(self, quirk_id: str) -> Quirk | None:
        for quirk in self.quirks:
            if quirk.id == quirk_id:
                return quirk
        return None

    def matching(self, identity: NodeIdentity) -> tuple[Quirk, ...]:
        return matching_quirks(identity, self.quirks)

    def overrides_for(self, identity: NodeIdentity) -> QuirkOverrides:
        return merge_overrides(self.matching(identity))


def _quirk_dirs() -> tuple[Path, Path]:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    xdg_data = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local/share"))
    return xdg_config / "zwthings/quirks", xdg_data / "zwthings/quirks"


def _normalize_id(value: str | None) -> str:
    return (value or "").strip().lower()


def _build_hints(entry: dict[str, Any]) -> QuirkHints:
    lock_codes = entry.get("lock_alarm_codes")
    if lock_codes is not None:
        lock_codes = {kind: tuple(int(c) for c in lock_codes.get(kind, ())) for kind in _LOCK_CODE_KINDS}
    return QuirkHints(
        not_light=entry.get("not_light"),
        report_on_change=entry.get("report_on_change"),
        scene_layout=entry.get("scene_layout"),
        slide_travel=entry.get("slide_travel"),
        alarm_smoke_co=entry.get("alarm_smoke_co"),
        binary_sensor_contact=entry.get("binary_sensor_contact"),
        lock_alarm_codes=lock_codes,
    )


def _build_quirk(entry: dict[str, Any]) -> Quirk:
    match = entry["match"]
    return Quirk(
        id=entry["id"],
        description=" ".join(str(entry.get("description", "")).split()),
        match=QuirkMatch(
            manufacturer_id=_normalize_id(match["manufacturer_id"]),
            product_id=_normalize_id(match["product_id"]) if "product_id" in match else None,
            product_ids=tuple(_normalize_id(p) for p in match.get("product_ids", [])),
            product_type=_normalize_id(match["product_type"]) if "product_type" in match else None,
        ),
        exclude_properties=tuple(entry.get("exclude_properties", [])),
        set_configs=tuple(
            ConfigWrite(
                param_id=int(item["param_id"]),
                value=int(item["value"]),
                size=int(item.get("size", 1)),
            )
            for item in entry.get("set_configs", [])
        ),
        disable_poll=entry.get("disable_poll"),
        hints=_build_hints(entry.get("hints", {})),
    )


def build_quirks(doc: dict[str, Any], source: Path | Traversable | str) -> list[Quirk]:
    """Validate one catalog document and build its quirks in file order."""
    validate_document(doc, _SCHEMA, source=str(source), invalid_error=QuirkValidationError)
    quirks: list[Quirk] = []
    seen: set[str] = set()
    for entry in doc["quirks"]:
        if entry["id"] in seen:
            raise QuirkValidationError(f"Duplicate quirk id '{entry['id']}' in {source}")
        seen.add(entry["id"])
        quirks.append(_build_quirk(entry))
    return quirks


def _read_catalog(path: Path | Traversable) -> list[Quirk]:
    doc = read_document(path, read_error=QuirkLoadError, invalid_error=QuirkValidationError)
    return build_quirks(doc, path)


def _iter_packaged_quirk_paths() -> list[Traversable]:
    quirk_root = resources.files("zwthings.quirks")
    return [item for item in quirk_root.iterdir() if item.name.endswith((".yml", ".yaml"))]


def _iter_user_quirk_paths() -> list[Path]:
    paths: list[Path] = []
    for directory in _quirk_dirs():
        if not directory.exists() or not directory.is_dir():
            continue
        paths.extend(sorted(p for p in directory.iterdir() if p.suffix in {".yml", ".yaml"}))
    return paths


def load_quirks() -> QuirkTable:
    quirks: dict[str, Quirk] = {}
    warnings: list[str] = []

    for path in sorted(_iter_packaged_quirk_paths(), key=lambda p: p.name):
        for quirk in _read_catalog(path):
            if quirk.id in quirks:
                raise QuirkValidationError(f"Quirk id '{quirk.id}' in {path} is already defined")
            quirks[quirk.id] = quirk

    for path in _iter_user_quirk_paths():
        for quirk in _read_catalog(path):
            if quirk.id in quirks:
                warning = f"User quirk '{quirk.id}' overrides packaged quirk"
                LOGGER.warning(warning)
                warnings.append(warning)
            # dict assignment keeps the original catalog position
            quirks[quirk.id] = quirk

    return QuirkTable(quirks=tuple(quirks.values()), warnings=tuple(warnings))


def quirk_matches(quirk: Quirk, identity: NodeIdentity) -> bool:
    match = quirk.match
    if _normalize_id(identity.manufacturer_id) != match.manufacturer_id:
        return False
    product_id = _normalize_id(identity.product_id)
    if match.product_id is not None and product_id != match.product_id:
        return False
    if match.product_ids and product_id not in match.product_ids:
        return False
    if match.product_type is not None and _normalize_id(identity.product_type) != match.product_type:
        return False
    return True


def matching_quirks(identity: NodeIdentity, quirks: Iterable[Quirk]) -> tuple[Quirk, ...]:
    return tuple(quirk for quirk in quirks if quirk_matches(quirk, identity))


def merge_overrides(quirks: Iterable[Quirk]) -> QuirkOverrides:
    """Fold matching quirks in catalog order; scalar hints are last-write-wins."""
    quirk_ids: list[str] = []
    excluded: set[str] = set()
    set_configs: list[ConfigWrite] = []
    merged: dict[str, Any] = {}

    for quirk in quirks:
        quirk_ids.append(quirk.id)
        excluded.update(quirk.exclude_properties)
        set_configs.extend(quirk.set_configs)
        if quirk.disable_poll is not None:
            merged["disable_poll"] = quirk.disable_poll
        for hint in fields(QuirkHints):
            value = getattr(quirk.hints, hint.name)
            if value is not None:
                merged[hint.name] = value

    return QuirkOverrides(
        quirk_ids=tuple(quirk_ids),
        exclude_properties=frozenset(excluded),
        set_configs=tuple(set_configs),
        **merged,
    )
