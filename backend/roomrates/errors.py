from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class AppError(Exception):
    status_code: int
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None
    retryable: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "details": self.details or {},
        }
        if self.retryable is not None:
            payload["retryable"] = self.retryable
        return {"error": payload}


class CategoryNotFound(AppError):
    """A room category key is absent from the property's definitions."""

    def __init__(self, property_id: str, category_key: str) -> None:
        super().__init__(
            status_code=404,
            code="category_not_found",
            message=f"Room category '{category_key}' not found",
            details={"property_id": property_id, "category_key": category_key},
        )


class PropertyNotFound(AppError):
    def __init__(self, property_id: str) -> None:
        super().__init__(
            status_code=404,
            code="property_not_found",
            message=f"Property '{property_id}' not found",
            details={"property_id": property_id},
        )


class DataSourceFailure(AppError):
    """The data store failed to answer a fetch. Never retried here."""

    def __init__(self, operation: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            status_code=503,
            code="data_source_failure",
            message=f"Data store failed during {operation}",
            details=details,
            retryable=False,
        )


class InvalidDateWindow(AppError):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            status_code=422,
            code="invalid_date_window",
            message=message,
            details=details,
        )


def error_response(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details or {},
        }
    }
