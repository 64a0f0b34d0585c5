"""
Data Validation Utilities for the Question Bank

This module provides the building blocks the validation engine is made of:
1. Reusable validator factories that raise ``ValueError`` with a readable message
2. ``FieldViolation`` and ``ValidationResult`` for collecting failures
3. Regex patterns for identifiers
"""

import re
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Type, Union

from pydantic import AnyHttpUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from questionbank.common.error_handling import ValidationError

Validator = Callable[[Any], Any]

# Regex patterns for common validation
PATTERNS = {
    "uuid": r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$",
    "integer": r"^[+-]?\d+$",
}

_http_url_adapter = TypeAdapter(AnyHttpUrl)


class FieldViolation:
    """A single failed rule, addressed by its dotted field path"""

    __slots__ = ("field", "message")

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field, "message": self.message}

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, FieldViolation):
            return NotImplemented
        return self.field == other.field and self.message == other.message

    def __hash__(self) -> int:
        return hash((self.field, self.message))

    def __repr__(self) -> str:
        return f"FieldViolation({self.field!r}, {self.message!r})"


class ValidationResult:
    """Result of a validation operation"""

    def __init__(self, violations: Optional[List[FieldViolation]] = None):
        self.violations = list(violations or [])

    @property
    def is_valid(self) -> bool:
        return not self.violations

    def __bool__(self) -> bool:
        """Allow using the result in boolean context"""
        return self.is_valid

    @property
    def errors(self) -> List[Dict[str, str]]:
        return [violation.to_dict() for violation in self.violations]

    def raise_if_invalid(self, message: str = "Validation failed") -> None:
        """
        Raise an exception if validation failed.

        Raises:
            ValidationError: If any violation was collected
        """
        if not self.is_valid:
            raise ValidationError(message, errors=self.errors)


def is_integer(value: Any) -> bool:
    """True for JSON integers; booleans are not integers here."""
    return isinstance(value, int) and not isinstance(value, bool)


def is_blank(value: Any) -> bool:
    """True for values a required field treats as missing."""
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


# Validator factories

def validate_string(description: str = "value") -> Validator:
    def validator_func(value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError(f"{description} must be a string")
        return value

    return validator_func


def validate_length(
    min_length: Optional[int] = None,
    max_length: Optional[int] = None,
    description: str = "value",
    unit: str = "characters",
    strip: bool = True
) -> Validator:
    """
    Create a validator function for length validation.

    Strings are measured after trimming surrounding whitespace.

    Args:
        min_length: Minimum length
        max_length: Maximum length
        description: Description of the value for error messages
        unit: What the length counts, used in error messages
        strip: Whether to trim strings before measuring

    Returns:
        Validator function
    """
    def validator_func(value: Any) -> Any:
        if not hasattr(value, "__len__"):
            raise ValueError(f"{description} must have a length")

        measured = value.strip() if strip and isinstance(value, str) else value
        length = len(measured)

        too_short = min_length is not None and length < min_length
        too_long = max_length is not None and length > max_length
        if not (too_short or too_long):
            return value

        if min_length is not None and max_length is not None:
            raise ValueError(f"{description} must be between {min_length} and {max_length} {unit}")
        if too_short:
            raise ValueError(f"{description} must be at least {min_length} {unit}")
        raise ValueError(f"{description} must not exceed {max_length} {unit}")

    return validator_func


def coerce_integer(message: str) -> Validator:
    """
    Create a validator that turns decimal strings (query parameters) into ints.
    """
    compiled_pattern = re.compile(PATTERNS["integer"])

    def validator_func(value: Any) -> int:
        if is_integer(value):
            return value
        if isinstance(value, str) and compiled_pattern.match(value.strip()):
            return int(value.strip())
        raise ValueError(message)

    return validator_func


def validate_range(
    min_value: Optional[Union[int, float]] = None,
    max_value: Optional[Union[int, float]] = None,
    description: str = "value",
    unit: str = "",
    message: Optional[str] = None
) -> Validator:
    """
    Create a validator function for integer range validation.

    Args:
        min_value: Minimum value
        max_value: Maximum value
        description: Description of the value for error messages
        unit: Optional unit appended to range messages
        message: Message replacing every generated one

    Returns:
        Validator function
    """
    suffix = f" {unit}" if unit else ""

    def validator_func(value: Any) -> int:
        if not is_integer(value):
            raise ValueError(message or f"{description} must be an integer")

        if min_value is not None and max_value is not None:
            if not min_value <= value <= max_value:
                raise ValueError(message or f"{description} must be between {min_value} and {max_value}{suffix}")
        elif min_value is not None and value < min_value:
            raise ValueError(message or f"{description} must be at least {min_value}{suffix}")
        elif max_value is not None and value > max_value:
            raise ValueError(message or f"{description} must be at most {max_value}{suffix}")

        return value

    return validator_func


def validate_boolean(description: str = "value") -> Validator:
    """
    Create a validator that accepts only literal booleans.

    Truthy stand-ins such as 1 or "true" are rejected.
    """
    def validator_func(value: Any) -> bool:
        if not isinstance(value, bool):
            raise ValueError(f"{description} must be a boolean")
        return value

    return validator_func


def validate_enum(enum_class: Type[Enum], message: str) -> Validator:
    """
    Create a validator function for enum validation.

    Only exact enum values are accepted.

    Args:
        enum_class: Enum class to validate against
        message: Error message used when the value is not a member

    Returns:
        Validator function
    """
    valid_values = {member.value for member in enum_class}

    def validator_func(value: Any) -> Any:
        if not isinstance(value, str) or value not in valid_values:
            raise ValueError(message)
        return enum_class(value)

    return validator_func


def validate_one_of(valid_values: List[Any], message: str) -> Validator:
    def validator_func(value: Any) -> Any:
        if value not in valid_values:
            raise ValueError(message)
        return value

    return validator_func


def validate_object(description: str = "value") -> Validator:
    def validator_func(value: Any) -> dict:
        if not isinstance(value, dict):
            raise ValueError(f"{description} must be an object")
        return value

    return validator_func


def validate_pattern(pattern: str, message: str) -> Validator:
    """
    Create a validator function for pattern validation.

    Args:
        pattern: Regex pattern to validate against
        message: Error message used when the value does not match

    Returns:
        Validator function
    """
    compiled_pattern = re.compile(pattern)

    def validator_func(value: Any) -> str:
        if not isinstance(value, str) or not compiled_pattern.match(value.strip()):
            raise ValueError(message)
        return value

    return validator_func


def validate_url(message: str) -> Validator:
    """
    Create a validator for absolute http(s) URLs.

    The grammar check is delegated to pydantic's ``AnyHttpUrl``. Hosts must
    carry a top-level domain (or be an IP literal), so ``http://a`` and
    ``http://localhost`` are rejected.
    """
    def validator_func(value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError(message)
        try:
            url = _http_url_adapter.validate_python(value.strip())
        except PydanticValidationError:
            raise ValueError(message)

        host = url.host or ""
        if "." not in host.strip(".") and not host.startswith("["):
            raise ValueError(message)
        return value

    return validator_func


def validate_list(
    min_items: Optional[int] = None,
    max_items: Optional[int] = None,
    description: str = "value",
    message: Optional[str] = None
) -> Validator:
    """
    Create a validator for JSON arrays with optional size bounds.

    Args:
        min_items: Minimum number of items
        max_items: Maximum number of items
        description: Description of the value for error messages
        message: Message used when the bounds are violated

    Returns:
        Validator function
    """
    def validator_func(value: Any) -> list:
        if not isinstance(value, list):
            raise ValueError(message or f"{description} must be an array")
        if min_items is not None and len(value) < min_items:
            raise ValueError(message or f"{description} must have at least {min_items} items")
        if max_items is not None and len(value) > max_items:
            raise ValueError(message or f"{description} must have at most {max_items} items")
        return value

    return validator_func


validate_uuid = validate_pattern(PATTERNS["uuid"], "Invalid question ID format")
