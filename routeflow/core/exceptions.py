"""
Service-wide exception hierarchy.

Services raise these; the blueprints register handlers against them once and
translate them to HTTP responses (see ``routeflow.blueprints``).

Usage:
    from routeflow.core.exceptions import NotFoundError, ValidationError

    raise NotFoundError(resource="WorkflowStep", resource_id=42)
    raise ValidationError("description is required", details={"description": "empty"})
"""


class NotFoundError(Exception):
    """Raised when a requested resource does not exist.  Maps to HTTP 404.

    Args:
        resource: Human-readable entity name (e.g. "Workflow", "Dependency").
        resource_id: The key that was looked up.
    """

    def __init__(self, resource: str, resource_id: int | str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" id={resource_id}"
        msg += " not found"
        super().__init__(msg)


class ValidationError(Exception):
    """Raised when input violates a business rule.  Maps to HTTP 400.

    No partial mutation may have happened when this is raised: services
    validate before they touch the session.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown for structured API responses.
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class ReservedDependencyError(ValidationError):
    """Raised when an operation targets a reserved requirement it may not touch."""

    def __init__(self, dependency_id: int, operation: str) -> None:
        self.dependency_id = dependency_id
        self.operation = operation
        super().__init__(
            f"Requirement {dependency_id} is reserved and cannot be {operation}",
            details={"dependencyID": dependency_id},
        )


class ConflictError(Exception):
    """Raised when an operation would duplicate a unique key.  Maps to HTTP 409.

    Args:
        resource: Model name.
        field: The unique field that would be duplicated.
        value: The conflicting value.
    """

    def __init__(self, resource: str, field: str, value: str | None = None) -> None:
        self.resource = resource
        self.field = field
        self.value = value
        msg = f"{resource} with {field}={value!r} already exists"
        super().__init__(msg)
