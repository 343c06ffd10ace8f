"""Domain-level exceptions.

All catalog and cart failures are expressed as subclasses of
DomainException so the outer layers (CLI, HTTP) can catch them uniformly.
Each class carries the HTTP status the error maps to.
"""


class DomainException(Exception):
    """Base class for all domain errors."""

    status_code = 500


class ValidationError(DomainException):
    """A business rule or invariant was violated."""

    status_code = 400


class ConflictError(DomainException):
    """A uniqueness rule was violated (duplicate slug/SKU, category with children)."""

    status_code = 400


class NotFoundError(DomainException):
    """A requested entity does not exist."""

    status_code = 404


class PermissionDeniedError(DomainException):
    """The caller does not own the entity it tried to change."""

    status_code = 403


class StoreError(DomainException):
    """The backing store failed. Propagated, never interpreted."""


class IntegrityViolation(StoreError):
    """The store rejected a write because of a constraint."""


class UniqueViolation(IntegrityViolation):
    """The write collided with a unique constraint or index."""
