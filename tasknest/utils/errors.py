from typing import Dict, List, Optional

VALIDATION_ERROR = "VALIDATION_ERROR"
UNAUTHORIZED = "UNAUTHORIZED"
FORBIDDEN = "FORBIDDEN"
NOT_FOUND = "NOT_FOUND"
DUPLICATE_ENTRY = "DUPLICATE_ENTRY"
INTERNAL_ERROR = "INTERNAL_ERROR"
NOT_IMPLEMENTED = "NOT_IMPLEMENTED"

MSG_VALIDATION_ERROR = "Validation error"
MSG_UNAUTHORIZED = "Unauthorized access"
MSG_FORBIDDEN = "Forbidden access"
MSG_NOT_FOUND = "Resource not found"
MSG_INTERNAL_ERROR = "Internal server error"


class ApiError(Exception):
    """An error that maps onto one HTTP status and one envelope.

    Raised from services and dependencies; turned into a response by the
    handlers registered in tasknest.main.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        code: str = INTERNAL_ERROR,
        errors: Optional[Dict[str, List[str]]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.errors = errors

    @classmethod
    def bad_request(cls, message: str, errors: Optional[Dict[str, List[str]]] = None) -> "ApiError":
        return cls(message, 400, VALIDATION_ERROR, errors)

    @classmethod
    def validation(cls, errors: Dict[str, List[str]]) -> "ApiError":
        return cls(MSG_VALIDATION_ERROR, 400, VALIDATION_ERROR, errors)

    @classmethod
    def unauthorized(cls, message: str = MSG_UNAUTHORIZED) -> "ApiError":
        return cls(message, 401, UNAUTHORIZED)

    @classmethod
    def forbidden(cls, message: str = MSG_FORBIDDEN) -> "ApiError":
        return cls(message, 403, FORBIDDEN)

    @classmethod
    def not_found(cls, message: str = MSG_NOT_FOUND) -> "ApiError":
        return cls(message, 404, NOT_FOUND)

    @classmethod
    def conflict(cls, message: str) -> "ApiError":
        return cls(message, 409, DUPLICATE_ENTRY)

    @classmethod
    def not_implemented(cls, message: str) -> "ApiError":
        return cls(message, 501, NOT_IMPLEMENTED)
