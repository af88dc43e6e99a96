class DomainError(Exception):
    """Base exception class for all domain-specific exceptions."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class UnauthorizedError(DomainError):
    """Exception raised when an operation needs an identity and none was supplied."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class ResourceNotFoundError(DomainError):
    """Exception raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        message = f"{resource_type} with ID {resource_id} not found"
        super().__init__(message)


class NotEnrolledError(DomainError):
    """Exception raised when a progression operation targets a course the user never enrolled in."""

    def __init__(self, course_id: str) -> None:
        self.course_id = course_id
        super().__init__(f"Not enrolled in course {course_id}")


class ValidationError(DomainError):
    """Exception raised when validation fails."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConflictError(DomainError):
    """Exception raised when a concurrent write lost a race; the caller should retry."""

    def __init__(self, message: str = "Concurrent update detected, please retry") -> None:
        super().__init__(message)


class StorageUnavailableError(DomainError):
    """Exception raised when the store is unreachable or a call timed out."""

    def __init__(self, message: str = "Storage temporarily unavailable") -> None:
        super().__init__(message)
