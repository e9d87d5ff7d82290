"""Custom exceptions for Cartwise.

Defines specific exception types for better error handling and reporting.
Each exception carries the HTTP status code the API layer responds with.
"""

from typing import Any, Dict, Optional

MIN_LIMIT = 1
MAX_LIMIT = 50


class CartwiseException(Exception):
    """Base exception for Cartwise errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize exception.

        Args:
            message: Human-readable error message
            status_code: HTTP status code for API responses
            details: Additional error details for debugging
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details or {}


class InvalidLimitError(CartwiseException):
    """Raised when a requested list size is outside the accepted range."""

    def __init__(self, limit: int):
        super().__init__(
            message=f"Limit must be between {MIN_LIMIT} and {MAX_LIMIT}",
            status_code=400,
            details={"limit": limit},
        )


class InvalidProductIdError(CartwiseException):
    """Raised when a product identifier is malformed."""

    def __init__(self, product_id: str):
        super().__init__(
            message="Invalid product ID",
            status_code=400,
            details={"product_id": product_id},
        )


class ProductNotFoundError(CartwiseException):
    """Raised when an anchor product does not exist or was deleted."""

    def __init__(self, product_id: str):
        super().__init__(
            message="Product not found",
            status_code=404,
            details={"product_id": product_id},
        )


class DataNotFoundError(CartwiseException):
    """Raised when the catalog data directory cannot be found."""

    def __init__(self, data_dir: str, details: Optional[Dict[str, Any]] = None):
        message = (
            f"Catalog data not found at '{data_dir}'. "
            "Generate or export catalog data first."
        )
        super().__init__(
            message=message,
            status_code=503,
            details=details or {"data_dir": data_dir},
        )


class DataLoadError(CartwiseException):
    """Raised when catalog data fails to load."""

    def __init__(self, data_dir: str, error: Exception):
        message = f"Failed to load catalog data from '{data_dir}': {str(error)}"
        super().__init__(
            message=message,
            status_code=500,
            details={
                "data_dir": data_dir,
                "error": str(error),
                "error_type": type(error).__name__,
            },
        )
