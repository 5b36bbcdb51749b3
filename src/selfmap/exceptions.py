class SelfMapError(Exception):
    """Base class for exceptions in this module."""


class ItemNotFound(SelfMapError, KeyError):
    """Raised when a key is not found by item access on a collection."""
