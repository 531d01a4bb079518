from collections.abc import Sized


class AppError(Exception):
    """Base class for errors rendered as ``{"message", "details"}`` responses."""

    def __init__(self, message: str, status_code: int = 500, details: dict | None = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class InputInvalidError(AppError):
    """A required input batch was missing or empty; nothing was placed."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=400, details=details)


class ResourceNotFoundError(AppError):
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with id {resource_id} not found",
            status_code=404,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


def require_items(field: str, items: Sized | None) -> None:
    if not items:
        raise InputInvalidError(f"{field} must not be empty", details={"field": field})
