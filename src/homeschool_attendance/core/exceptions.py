class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced student (or its record) does not exist."""


class ConstraintViolation(DomainError):
    """Raised when a write breaks a uniqueness or foreign-key constraint."""


class StorageError(DomainError):
    """Raised when the underlying database fails (connection, I/O, engine error)."""


class DeserializationWarning(UserWarning):
    """Stored attendance data could not be decoded and was treated as empty."""
