"""Domain errors raised by the rotation core.

None of these are retried by the core; callers decide what to do with them.
"""


class RotationError(Exception):
    """Base class for every error raised by the rotation core."""


class ValidationError(RotationError, ValueError):
    """Bad slot coordinate, portion count or other rejected input (nothing was written)."""


class NotFoundError(RotationError, LookupError):
    """Referenced template or recipe does not exist."""


class CycleRejected(RotationError):
    """A sub-recipe link (or a swap to a composed recipe) would close a composition cycle."""

    def __init__(self, parent_id: int, child_id: int, message: str = ""):
        self.parent_id = parent_id
        self.child_id = child_id
        super().__init__(message or f"Linking recipe {parent_id} -> {child_id} would create a cycle")


class StaleProposal(RotationError):
    """The slot targeted by a swap no longer holds the recipe the swap expects."""


class ScalingDomainError(RotationError, ValueError):
    """Portion counts passed to the scaling engine were not positive."""


__all__ = [
    'RotationError', 'ValidationError', 'NotFoundError',
    'CycleRejected', 'StaleProposal', 'ScalingDomainError',
]
