"""Domain-specific errors for zwthings."""


class ZWThingsError(Exception):
    """Base error for zwthings."""


class QuirkValidationError(ZWThingsError):
    """Raised when a quirk file does not conform to schema or semantics."""


class QuirkLoadError(ZWThingsError):
    """Raised when reading quirk sources fails."""


class SnapshotError(ZWThingsError):
    """Raised when a node snapshot cannot be read or validated."""


class UnknownCodecError(ZWThingsError):
    """Raised when a binding names an encode/decode strategy that does not exist."""


class UnknownNodeError(ZWThingsError):
    """Raised when a request targets a node id the adapter does not know."""


class PropertyError(ZWThingsError):
    """Base error for property set requests."""


class UnknownPropertyError(PropertyError):
    """Raised when a node has no property with the requested name."""


class PropertyReadOnlyError(PropertyError):
    """Raised when setting a property that is, or is bound to, a read-only value."""


class PropertyValueError(PropertyError):
    """Raised when a value cannot be encoded for the bound raw value."""


class UnknownActionError(ZWThingsError):
    """Raised when a node does not define the requested action."""


class ActionRejectedError(ZWThingsError):
    """Raised (through the action future) when an action is rejected."""
