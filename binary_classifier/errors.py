class DimensionError(ValueError):
    """Raised when a vector or layer chain has the wrong shape."""


class PersistenceError(OSError):
    """Raised when a network cannot be saved to or restored from disk."""
