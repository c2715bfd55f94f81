# errors.py
# Recoverable failures raised by the power-up engine. State is never modified
# when one of these is raised.


class PowerUpError(ValueError):
    """Base class for rejected power-up or undo requests."""

    kind = "PowerUpError"


class InvalidTarget(PowerUpError):
    """The target tile is missing or violates the power-up's precondition."""

    kind = "InvalidTarget"


class Exhausted(PowerUpError):
    """The power-up has no uses left."""

    kind = "Exhausted"


class NoHistory(PowerUpError):
    """Undo was requested with no recorded state to restore."""

    kind = "NoHistory"
