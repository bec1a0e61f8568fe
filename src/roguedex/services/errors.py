"""Service-layer exceptions."""


class FactoryError(Exception):
    """Raised when a roster member cannot be created."""


class SaveLoadError(Exception):
    """Raised when a persisted run cannot be turned back into a RunState."""
