"""Named debug categories mapped onto module loggers."""

from __future__ import annotations

import logging
import re

LOGGER = logging.getLogger(__name__)

DEBUG_CATEGORIES: dict[str, tuple[str, ...]] = {
    # classification decisions and quirk application
    "classifier": ("zwthings.core.classifier", "zwthings.core.quirks"),
    # upstream notification flow through the adapter service
    "flow": ("zwthings.core.service",),
    "node": (
        "zwthings.core.node",
        "zwthings.core.binding",
        "zwthings.core.scene",
        "zwthings.core.lock",
        "zwthings.core.color",
    ),
    # every raw value as it is stored
    "valueId": ("zwthings.core.value_store",),
}

_SPLIT_RE = re.compile(r"[, ]+")


def set_debug_flags(names: str) -> list[str]:
    """Enable DEBUG on the loggers behind each named category.

    ``names`` is a comma or space separated list. Unrecognized names are
    logged and returned so callers can report them.
    """
    unknown: list[str] = []
    for name in _SPLIT_RE.split(names.strip()):
        if not name:
            continue
        loggers = DEBUG_CATEGORIES.get(name)
        if loggers is None:
            LOGGER.warning("Unrecognized debug flag '%s' (ignored)", name)
            unknown.append(name)
            continue
        LOGGER.info("Enabling debug for %s", name)
        for logger_name in loggers:
            logging.getLogger(logger_name).setLevel(logging.DEBUG)
    return unknown
