"""YAML/JSON document loading and schema validation shared by quirks and snapshots."""

from __future__ import annotations

import json
import re
from functools import cache
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys and keeps on/off as strings."""


UniqueKeyLoader.yaml_implicit_resolvers = {
    key: list(value) for key, value in yaml.SafeLoader.yaml_implicit_resolvers.items()
}

for first_char, mappings in list(UniqueKeyLoader.yaml_implicit_resolvers.items()):
    UniqueKeyLoader.yaml_implicit_resolvers[first_char] = [
        (tag, regexp)
        for tag, regexp in mappings
        if tag != "tag:yaml.org,2002:bool"
    ]

# JSON true/false (and YAML's lowercase spelling) still load as booleans.
UniqueKeyLoader.add_implicit_resolver(
    "tag:yaml.org,2002:bool",
    re.compile(r"^(?:true|false)$"),
    list("tf"),
)


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[Any, Any]:
    mapping: dict[Any, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise yaml.constructor.ConstructorError(
                None, None, f"Duplicate key '{key}' in YAML document", key_node.start_mark
            )
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


def read_document(
    path: Path | Traversable,
    *,
    read_error: type[Exception],
    invalid_error: type[Exception],
) -> dict[str, Any]:
    """Read a YAML (or JSON) document whose root must be a mapping."""
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise read_error(f"Could not read {path}: {exc}") from exc
    return parse_document(content, source=str(path), invalid_error=invalid_error)


def parse_document(content: str, *, source: str, invalid_error: type[Exception]) -> dict[str, Any]:
    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise invalid_error(f"Invalid YAML in {source}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise invalid_error(f"{source} must contain a mapping at root")
    return loaded


@cache
def load_schema_validator(schema_name: str) -> Any:
    schema_text = resources.files("zwthings.schemas").joinpath(schema_name).read_text(encoding="utf-8")
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def validate_document(
    doc: dict[str, Any],
    schema_name: str,
    *,
    source: str,
    invalid_error: type[Exception],
) -> None:
    validator = load_schema_validator(schema_name)
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise invalid_error(f"Schema validation failed for {source}{where}: {exc.message}") from exc
