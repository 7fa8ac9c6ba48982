from typing import Optional


class FinanceBotError(Exception):
    """Base class for every error raised inside the command engine."""


class ValidationFailure(FinanceBotError):
    """
    A missing or invalid entity.
    Recovered locally (clarification prompt or explanatory reply),
    never surfaced as a hard error.
    """

    def __init__(self, message: str, *, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class MissingEntity(ValidationFailure):
    """A command cannot run until the user supplies `field`."""

    def __init__(self, field: str):
        super().__init__(f"Missing required entity: {field}", field=field)


class CollaboratorError(FinanceBotError):
    """A storage or insight call failed. No partial write is committed."""

    def __init__(self, operation: str, detail: str = ""):
        super().__init__(f"{operation} failed: {detail}" if detail else f"{operation} failed")
        self.operation = operation


class CollaboratorTimeout(CollaboratorError):
    pass


class CollaboratorUnavailable(CollaboratorError):
    pass


class InternalInvariantViolation(FinanceBotError):
    """A malformed context or an illegal state transition."""
