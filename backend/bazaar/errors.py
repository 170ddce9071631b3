# Overview: Error kinds raised by services and surfaced to callers by routes.

"""
Every failure a caller can see is one of six kinds. Services raise the
kind closest to where the problem is detected; routes translate it to the
wire format (callable protocol or plain HTTP JSON) without retrying.

    kind                 status                 HTTP
    Unauthenticated      UNAUTHENTICATED        401
    InvalidArgument      INVALID_ARGUMENT       400
    NotFound             NOT_FOUND              404
    PermissionDenied     PERMISSION_DENIED      403
    FailedPrecondition   FAILED_PRECONDITION    400
    Internal             INTERNAL               500
"""


class ServiceError(Exception):
    """Base class for all caller-visible errors."""
    status = "INTERNAL"
    code = "internal"
    http_status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_callable_error(self) -> dict:
        return {"status": self.status, "message": self.message}

    def to_http_error(self) -> dict:
        return {"code": self.code, "message": self.message}


class Unauthenticated(ServiceError):
    """Missing, malformed, expired or otherwise invalid bearer credential."""
    status = "UNAUTHENTICATED"
    code = "unauthenticated"
    http_status = 401


class InvalidArgument(ServiceError):
    """Missing or malformed request field."""
    status = "INVALID_ARGUMENT"
    code = "invalid-argument"
    http_status = 400


class NotFound(ServiceError):
    """Referenced document does not exist."""
    status = "NOT_FOUND"
    code = "not-found"
    http_status = 404


class PermissionDenied(ServiceError):
    """Role check failed or the caller does not own the target."""
    status = "PERMISSION_DENIED"
    code = "permission-denied"
    http_status = 403


class FailedPrecondition(ServiceError):
    """State-machine guard violated (wrong status, missing linkage, limit reached)."""
    status = "FAILED_PRECONDITION"
    code = "failed-precondition"
    http_status = 400


class Internal(ServiceError):
    """Unexpected or downstream failure."""
    status = "INTERNAL"
    code = "internal"
    http_status = 500
