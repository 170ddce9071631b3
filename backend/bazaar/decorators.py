# Overview: Request decorators for API routes; bearer authentication and callable protocol framing.

from functools import wraps
from flask import request, jsonify, g, current_app

from .errors import Internal, InvalidArgument, ServiceError, Unauthenticated
from .services import auth_service, permission_service


def _authenticate():
    """Verify the bearer token and store the caller on g."""
    try:
        token = auth_service.extract_bearer_token(request.headers.get("Authorization"))
        identity = auth_service.verify_token(token)
    except Unauthenticated as e:
        permission_service.log_security_event(
            None,
            "AUTH_FAILED",
            resource=request.path,
            reason=e.message,
        )
        raise

    g.identity = identity
    g.caller_uid = identity.uid
    return identity


def require_auth(f):
    """
    Require a valid bearer token.

    Sets the following Flask g attributes:
    - g.identity: auth_service.Identity for the caller
    - g.caller_uid: the caller's uid

    Returns 401 with {"error": {"code": "unauthenticated", ...}} when the
    header is missing, malformed or the token does not verify.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            _authenticate()
        except ServiceError as e:
            return jsonify({"error": e.to_http_error()}), e.http_status
        return f(*args, **kwargs)

    return decorated_function


def callable_endpoint(f):
    """
    Speak the callable protocol around a route.

    Request:  POST {"data": {...}} with a bearer token
    Success:  200 {"result": <return value of f>}
    Failure:  {"error": {"status": "<KIND>", "message": "..."}} with the
              kind's HTTP status

    The wrapped function receives the request's data object and returns the
    result payload. Unexpected exceptions are logged and reported as
    INTERNAL.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            _authenticate()

            body = request.get_json(silent=True)
            if not isinstance(body, dict) or "data" not in body:
                raise InvalidArgument("Bad Request")
            data = body["data"] if body["data"] is not None else {}

            result = f(data, *args, **kwargs)
            return jsonify({"result": result}), 200

        except ServiceError as e:
            return jsonify({"error": e.to_callable_error()}), e.http_status
        except Exception:
            current_app.logger.exception("Callable %s failed", request.path)
            error = Internal("服务器内部错误，请重试")
            return jsonify({"error": error.to_callable_error()}), error.http_status

    return decorated_function
