# Overview: Service-layer operations for auth; verifies bearer credentials and issues local tokens.

"""
Bearer Credential Verification

Every request carries "Authorization: Bearer <token>". The AUTH_BACKEND
setting picks how the token is verified:

- "firebase": Firebase ID token, verified by firebase_admin.auth
- "signed":   HS256 token signed with SECRET_KEY (python-jose), used by the
              local CLI and the test suite

Either way the result is an Identity carrying the stable user id (uid).
Any verification failure is Unauthenticated; no business data is read
before the caller is known.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timezone
from typing import Any

from flask import current_app
from jose import ExpiredSignatureError, JWTError, jwt

from ..errors import Internal, Unauthenticated
from ..time_utils import utcnow

SIGNING_ALGORITHM = "HS256"
AUTH_BACKENDS = ("firebase", "signed")


@dataclass(frozen=True)
class Identity:
    """Authenticated caller. uid is the only field authorization relies on."""
    uid: str
    claims: dict[str, Any] = field(default_factory=dict)

    @property
    def phone_number(self) -> str | None:
        return self.claims.get("phone_number")


def extract_bearer_token(header_value: str | None) -> str:
    if not header_value:
        raise Unauthenticated("缺少认证令牌")
    scheme, _, token = header_value.partition(" ")
    if scheme != "Bearer" or not token.strip():
        raise Unauthenticated("认证令牌格式错误")
    return token.strip()


def verify_token(token: str) -> Identity:
    backend = current_app.config.get("AUTH_BACKEND", "signed")
    if backend == "firebase":
        return _verify_firebase_token(token)
    if backend == "signed":
        return _verify_signed_token(token)
    raise Internal(f"Invalid AUTH_BACKEND: {backend}. Must be one of {AUTH_BACKENDS}")


def _verify_signed_token(token: str) -> Identity:
    try:
        claims = jwt.decode(
            token,
            current_app.config["SECRET_KEY"],
            algorithms=[SIGNING_ALGORITHM],
        )
    except ExpiredSignatureError:
        raise Unauthenticated("认证令牌已过期")
    except JWTError:
        raise Unauthenticated("认证令牌无效")

    uid = claims.get("uid") or claims.get("sub")
    if not uid:
        raise Unauthenticated("认证令牌缺少用户ID")
    return Identity(uid=uid, claims=claims)


def _verify_firebase_token(token: str) -> Identity:
    from firebase_admin import auth as firebase_auth

    from ..docstore.firestore import ensure_firebase_app

    ensure_firebase_app(current_app.config.get("GOOGLE_APPLICATION_CREDENTIALS"))
    try:
        claims = firebase_auth.verify_id_token(token)
    except firebase_auth.CertificateFetchError:
        current_app.logger.exception("Could not fetch Firebase token certificates")
        raise Internal("无法验证认证令牌")
    except firebase_auth.ExpiredIdTokenError:
        raise Unauthenticated("认证令牌已过期")
    except (firebase_auth.InvalidIdTokenError, ValueError):
        raise Unauthenticated("认证令牌无效")

    return Identity(uid=claims["uid"], claims=claims)


def issue_token(
    uid: str,
    *,
    expires_in: int | None = None,
    extra_claims: dict[str, Any] | None = None,
) -> str:
    """
    Issue a signed bearer token for the "signed" auth backend.

    Firebase ID tokens are minted by the client SDK, never here.
    """
    if not uid:
        raise ValueError("uid is required")
    if expires_in is None:
        expires_in = current_app.config.get("TOKEN_TTL_SECONDS", 43200)

    issued_at = _epoch_now()
    claims = dict(extra_claims or {})
    claims.update({
        "sub": uid,
        "uid": uid,
        "iat": issued_at,
        "exp": issued_at + int(expires_in),
    })
    return jwt.encode(claims, current_app.config["SECRET_KEY"], algorithm=SIGNING_ALGORITHM)


def _epoch_now() -> int:
    # utcnow() is naive UTC
    return int(utcnow().replace(tzinfo=timezone.utc).timestamp())
