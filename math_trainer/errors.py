from __future__ import annotations


class MathTrainerError(Exception):
    """Base class for errors raised by the trainer core."""


class InvalidConfig(MathTrainerError, ValueError):
    """Grade, difficulty or problem kind outside its enumerated domain."""


class UnsupportedOperation(MathTrainerError, LookupError):
    """No generator is registered for the requested problem kind."""

    def __init__(self, kind: str) -> None:
        super().__init__(f"No generator found for type: {kind}")
        self.kind = kind


class PersistenceFailure(MathTrainerError, OSError):
    """The history store could not be read or written."""
