# -*- coding: utf-8 -*-
"""Foodprint exception hierarchy.

Exception Hierarchy:
    FoodprintException (base)
    ├── ValidationError
    ├── ConfigurationError
    └── DataException
        └── DataAccessError

Only ``ValidationError`` ever leaves the engine: a malformed request is the
caller's fault. Everything else is raised internally and absorbed by the
fallback chains, so degraded results are still successful results.

Example:
    >>> from foodprint.exceptions import ValidationError
    >>> raise ValidationError(
    ...     message="quantity must be at least 1",
    ...     invalid_fields={"quantity": "0"},
    ... )
"""

import json
import re
from datetime import datetime
from typing import Any, Dict, Optional


# ==============================================================================
# Base Exception
# ==============================================================================

class FoodprintException(Exception):
    """Base exception for all Foodprint errors.

    Attributes:
        message: Human-readable error message
        error_code: Unique error identifier (e.g. "FP_VALIDATION_ERROR")
        context: Dictionary with error-specific details
        timestamp: When the error occurred
    """

    ERROR_PREFIX = "FP"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self._generate_error_code()
        self.context = context or {}
        self.timestamp = datetime.now()

    def _generate_error_code(self) -> str:
        """Generate error code from the class name (CamelCase -> SNAKE)."""
        error_type = re.sub(r"(?<!^)(?=[A-Z])", "_", self.__class__.__name__).upper()
        return f"{self.ERROR_PREFIX}_{error_type}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)

    def __str__(self) -> str:
        parts = [f"[{self.error_code}]", self.message]
        if self.context:
            parts.append(f"Context: {self.context}")
        return " ".join(parts)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(message={self.message!r}, "
            f"error_code={self.error_code!r})"
        )


# ==============================================================================
# Request Exceptions
# ==============================================================================

class ValidationError(FoodprintException):
    """Malformed calculation request.

    Raised for a missing dish name, an ingredient list that is not a list of
    strings, a quantity below 1 or an unknown detail level.

    Example:
        >>> raise ValidationError(
        ...     message="dish_name is required",
        ...     invalid_fields={"dish_name": "missing"},
        ... )
    """

    def __init__(
        self,
        message: str,
        invalid_fields: Optional[Dict[str, str]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        context = dict(context or {})
        if invalid_fields:
            context["invalid_fields"] = invalid_fields
        super().__init__(message, context=context)
        self.invalid_fields = invalid_fields or {}


class ConfigurationError(FoodprintException):
    """Invalid or unreadable configuration."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        context = dict(context or {})
        if config_key:
            context["config_key"] = config_key
        super().__init__(message, context=context)


# ==============================================================================
# Data Exceptions
# ==============================================================================

class DataException(FoodprintException):
    """Base exception for reference-data errors."""

    ERROR_PREFIX = "FP_DATA"


class DataAccessError(DataException):
    """The structured reference store could not be read or written."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        context = dict(context or {})
        if operation:
            context["operation"] = operation
        if original_error is not None:
            context["original_error"] = str(original_error)
        super().__init__(message, context=context)
        self.original_error = original_error


__all__ = [
    "FoodprintException",
    "ValidationError",
    "ConfigurationError",
    "DataException",
    "DataAccessError",
]
