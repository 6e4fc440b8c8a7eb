"""Custom application exceptions.

Every reservation failure carries a stable ``kind`` next to its HTTP status so
callers that do not speak HTTP can still branch on the error category.
"""

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base application exception."""

    kind: str = "internal_error"

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "An unexpected error occurred",
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=detail, headers=headers)

    def __str__(self) -> str:
        return str(self.detail)


class ValidationError(AppException):
    """Malformed input: missing or inverted dates, non-positive guest count."""

    kind = "validation_error"

    def __init__(self, detail: str = "Validation failed") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class NotFoundError(AppException):
    """Resource not found exception."""

    kind = "not_found"

    def __init__(self, resource: str = "Resource", identifier: str | None = None) -> None:
        detail = f"{resource} not found"
        if identifier:
            detail = f"{resource} with ID '{identifier}' not found"
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class AuthenticationError(AppException):
    """Authentication failed exception."""

    kind = "authentication_error"

    def __init__(self, detail: str = "Authentication failed") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class ForbiddenError(AppException):
    """Principal lacks the ownership or role the operation requires."""

    kind = "forbidden"

    def __init__(self, detail: str = "You don't have permission to access this resource") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class ConflictError(AppException):
    """Requested dates overlap an active reservation."""

    kind = "conflict"

    def __init__(self, detail: str = "dates unavailable") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class InvalidStateError(AppException):
    """Operation not allowed for the reservation's current state."""

    kind = "invalid_state"

    def __init__(self, detail: str = "This operation is not allowed for the current reservation state") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class IllegalTransitionError(InvalidStateError):
    """State transition missing from the reservation transition table."""

    def __init__(self, current: str, target: str) -> None:
        self.current = current
        self.target = target
        super().__init__(f"Illegal reservation transition: {current} -> {target}")
