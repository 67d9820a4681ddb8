"""
Connector Error Taxonomy
========================

Structured errors for external emission-data sources and the inference
service. Source clients classify every failure into one of these types for
logging, then report "no data"; nothing here is raised to engine callers.
"""

from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError as PydanticValidationError


class ConnectorError(Exception):
    """
    Base exception for all connector errors

    - message: Human-readable error description
    - connector: Which connector raised the error
    - status_code: HTTP status code (if applicable)
    - url: Target URL (if applicable)
    - context: Additional error context
    - original_error: Wrapped exception (if any)
    """

    def __init__(
        self,
        message: str,
        connector: str,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None
    ):
        self.message = message
        self.connector = connector
        self.status_code = status_code
        self.url = url
        self.context = context or {}
        self.original_error = original_error

        parts = [f"[{connector}] {message}"]
        if status_code:
            parts.append(f"(HTTP {status_code})")
        if url:
            parts.append(f"(URL: {url})")

        super().__init__(" ".join(parts))

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for serialization"""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "connector": self.connector,
            "status_code": self.status_code,
            "url": self.url,
            "context": self.context,
            "original_error": str(self.original_error) if self.original_error else None
        }


class ConnectorConfigError(ConnectorError):
    """
    Configuration error

    Example:
        raise ConnectorConfigError(
            "Missing API key",
            connector="klimato",
            context={"required_env": "KLIMATO_API_KEY"}
        )
    """
    pass


class ConnectorAuthError(ConnectorError):
    """Credentials rejected (HTTP 401/403)."""
    pass


class ConnectorNetworkError(ConnectorError):
    """Connection, DNS or TLS failure."""
    pass


class ConnectorTimeoutError(ConnectorError):
    """Request exceeded its timeout."""
    pass


class ConnectorRateLimit(ConnectorError):
    """
    Rate limit exceeded

    Includes retry information when available.
    """

    def __init__(
        self,
        message: str,
        connector: str,
        retry_after: Optional[int] = None,
        **kwargs
    ):
        super().__init__(message, connector, **kwargs)
        self.retry_after = retry_after
        if retry_after:
            self.context["retry_after"] = retry_after


class ConnectorNotFound(ConnectorError):
    """The provider has no entry for the requested item."""
    pass


class ConnectorBadRequest(ConnectorError):
    pass


class ConnectorServerError(ConnectorError):
    """Upstream 5xx."""
    pass


class ConnectorValidationError(ConnectorError):
    """
    Payload failed validation

    Raised when a response body is not JSON or does not have the expected
    shape.
    """

    def __init__(
        self,
        message: str,
        connector: str,
        validation_errors: Optional[List[Dict[str, Any]]] = None,
        **kwargs
    ) -> None:
        super().__init__(message, connector, **kwargs)
        self.validation_errors = validation_errors or []
        if validation_errors:
            self.context["validation_errors"] = validation_errors


def classify_connector_error(
    error: Exception,
    connector: str,
    url: Optional[str] = None
) -> ConnectorError:
    """
    Classify a raw exception as a specific ConnectorError type

    Example:
        try:
            response = requests.get(url, timeout=10)
            response.raise_for_status()
        except Exception as e:
            logger.warning(classify_connector_error(e, "klimato", url))
    """
    if isinstance(error, ConnectorError):
        return error

    if isinstance(error, requests.Timeout):
        return ConnectorTimeoutError(
            f"Request timed out: {error}", connector=connector, url=url, original_error=error
        )

    if isinstance(error, requests.ConnectionError):
        return ConnectorNetworkError(
            f"Network error: {error}", connector=connector, url=url, original_error=error
        )

    response = getattr(error, "response", None)
    status_code = getattr(response, "status_code", None)
    if status_code is not None:
        if status_code in (401, 403):
            return ConnectorAuthError(
                f"Authentication failed: {error}",
                connector=connector, status_code=status_code, url=url, original_error=error
            )

        if status_code == 404:
            return ConnectorNotFound(
                f"Resource not found: {error}",
                connector=connector, status_code=status_code, url=url, original_error=error
            )

        if status_code == 429:
            retry_after = None
            header = response.headers.get("Retry-After") if hasattr(response, "headers") else None
            if header:
                try:
                    retry_after = int(header)
                except ValueError:
                    retry_after = None
            return ConnectorRateLimit(
                f"Rate limit exceeded: {error}",
                connector=connector, retry_after=retry_after,
                status_code=status_code, url=url, original_error=error
            )

        if 400 <= status_code < 500:
            return ConnectorBadRequest(
                f"Bad request: {error}",
                connector=connector, status_code=status_code, url=url, original_error=error
            )

        if 500 <= status_code < 600:
            return ConnectorServerError(
                f"Server error: {error}",
                connector=connector, status_code=status_code, url=url, original_error=error
            )

    if isinstance(error, PydanticValidationError):
        return ConnectorValidationError(
            f"Validation failed: {error}",
            connector=connector,
            validation_errors=error.errors(),
            url=url,
            original_error=error
        )

    if isinstance(error, ValueError):
        return ConnectorValidationError(
            f"Malformed response: {error}", connector=connector, url=url, original_error=error
        )

    return ConnectorError(str(error), connector=connector, url=url, original_error=error)
