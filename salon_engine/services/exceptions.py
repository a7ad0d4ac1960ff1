"""Errors raised by the service layer.

The API layer maps these onto HTTP status codes; nothing below the API
knows about HTTP.
"""

from typing import Optional


class SalonError(Exception):
    """Base exception for service operations."""
    pass


class NotFoundError(SalonError):
    """
    The entity does not exist, or exists but the caller may not see it.

    Both cases raise the same error with the same message so callers cannot
    probe for other users' ids.
    """

    def __init__(self, entity: str, entity_id: Optional[int] = None):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found or unauthorized")


class ValidationFailure(SalonError):
    """A required field is missing or invalid."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class UpstreamFailure(SalonError):
    """The language-model call failed."""
    pass


def require_text(value: Optional[str], field: str, max_length: Optional[int] = None) -> str:
    """
    Validate a required text field.

    Args:
        value: Submitted value
        field: Field name used in the error
        max_length: Optional upper bound on length

    Returns:
        The value, unchanged

    Raises:
        ValidationFailure: If the value is missing, blank or too long
    """
    if value is None or not value.strip():
        raise ValidationFailure(field, "must not be empty")
    if max_length is not None and len(value) > max_length:
        raise ValidationFailure(field, f"must be at most {max_length} characters")
    return value
