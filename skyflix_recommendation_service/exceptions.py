"""Error types raised by the recommendation engine."""

from typing import Any, Dict, Optional


class RecommendationError(Exception):
    """Base exception for the recommendation service."""

    def __init__(
            self,
            message: str,
            code: str = "RECOMMENDATION_ERROR",
            details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "code": self.code, "details": self.details}


class NotFoundError(RecommendationError):
    """Referenced user, film or genre does not exist."""

    def __init__(self, resource: str, identifier: Any):
        self.resource = resource
        self.identifier = identifier
        super().__init__(
            f"{resource.capitalize()} not found: {identifier}",
            "NOT_FOUND",
            {"resource": resource, "identifier": identifier}
        )


class ValidationError(RecommendationError):
    """Malformed input such as a non-positive limit."""

    def __init__(self, field: str, value: Any, message: str):
        self.field = field
        self.value = value
        super().__init__(
            f"Validation error for {field}: {message}",
            "VALIDATION_ERROR",
            {"field": field, "value": value}
        )


class UpstreamIOError(RecommendationError):
    """Catalog store query failed."""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(
            f"Catalog query failed during {operation}: {message}",
            "UPSTREAM_IO_ERROR",
            {"operation": operation}
        )
