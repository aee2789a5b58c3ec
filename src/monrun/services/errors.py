"""Service-layer exceptions."""


class FactoryError(Exception):
    """Raised when a runtime entity cannot be created."""


class BattleStateError(Exception):
    """Raised when an operation does not fit the session's current phase."""
