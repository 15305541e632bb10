from fastapi import status


class StoreAppError(Exception):
    """Base class for errors that map onto a client-facing status code"""
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(StoreAppError):
    """Missing or malformed required fields"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class QueryCompileError(StoreAppError):
    """Filter parameters that cannot be turned into a catalog query"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid filter parameters"


class NotFoundError(StoreAppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class AuthError(StoreAppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authorized, no token"


class ForbiddenError(StoreAppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not authorized to access this route"


class StoreError(StoreAppError):
    """Persistence failure. Never shown to clients beyond a generic 500."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"


def from_schema_error(exc) -> ValidationError:
    """Turn a pydantic ``ValidationError`` into a readable client-facing one"""
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        parts.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    return ValidationError("; ".join(parts) or "Invalid request")
