"""
API Exceptions and Error Responses

Every error leaves the API as {"success": false, "error": <slug>, "message": ...}
with optional "details".
"""
from typing import Optional, Dict, Any, List
from fastapi import HTTPException, status
from fastapi.responses import JSONResponse


# ============================================
# CUSTOM EXCEPTIONS
# ============================================

class APIException(HTTPException):
    """Base API exception with standardized response"""

    def __init__(
        self,
        status_code: int,
        error: str,
        message: Optional[str] = None,
        details: Optional[List[Dict[str, Any]]] = None,
        headers: Optional[Dict[str, str]] = None
    ):
        super().__init__(status_code=status_code, detail=error, headers=headers)
        self.error = error
        self.message = message
        self.details = details


class AuthenticationError(APIException):
    """No usable credential in the session"""
    def __init__(self, message: str = "Authentication required"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error="authentication_required",
            message=message
        )


class ValidationError(APIException):
    """Request validation failed (bad body, invalid SGF)"""
    def __init__(self, message: str = "Validation failed", errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error="validation_error",
            message=message,
            details=errors
        )


class OAuthCallbackError(APIException):
    """The OAuth2 callback could not be completed"""
    def __init__(self, message: str = "Can't handle the OAuth2 callback, make sure that code is valid."):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error="oauth_callback_failed",
            message=message
        )


# ============================================
# ERROR RESPONSES
# ============================================

# Error slugs for plain status codes (Drive errors, send_error)
ERROR_SLUGS = {
    400: "validation_error",
    401: "authentication_required",
    403: "permission_denied",
    404: "not_found",
    409: "conflict",
    429: "rate_limit_exceeded",
    500: "internal_server_error",
    503: "service_unavailable",
}


def error_slug(status_code: int) -> str:
    """Error code for a status code without a more specific one"""
    return ERROR_SLUGS.get(status_code, "http_error")


def create_error_response(
    error_type: str,
    message: str,
    details: Optional[List[Dict[str, Any]]] = None,
    status_code: int = 400
) -> JSONResponse:
    """
    Create a standardized error response

    Args:
        error_type: Error code/type
        message: Human-readable error message
        details: Optional list of detailed errors
        status_code: HTTP status code
    """
    response_data = {
        "success": False,
        "error": error_type,
        "message": message
    }

    if details:
        response_data["details"] = details

    return JSONResponse(status_code=status_code, content=response_data)
