import logging
import secrets
from typing import NamedTuple, Optional
from fastapi import Header, HTTPException, status
from todo_api import config
from todo_api.utils.auth import (
    decode_token,
    InvalidTokenSignature,
    TokenClaims,
    TokenError,
    TokenRevoked,
)
from todo_api.utils.revocation import revoked_tokens

logger = logging.getLogger(__name__)


class CurrentUser(NamedTuple):
    username: str
    user_id: int
    claims: TokenClaims


def _unauthorized(detail: str = "Unauthorized") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def extract_bearer_token(authorization: Optional[str]) -> str:
    """Return the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        raise _unauthorized()
    scheme, _, token = authorization.partition(" ")
    if scheme != "Bearer" or not token.strip():
        raise _unauthorized()
    return token.strip()


def get_current_user(authorization: Optional[str] = Header(None)) -> CurrentUser:
    """The only source of the caller's identity for every protected route."""
    token = extract_bearer_token(authorization)
    try:
        claims = decode_token(token)
        if revoked_tokens.is_revoked(claims.jti):
            raise TokenRevoked("token has been revoked")
    except InvalidTokenSignature:
        logger.warning("Rejected token with invalid signature")
        raise _unauthorized()
    except TokenRevoked:
        logger.warning("Rejected revoked token")
        raise _unauthorized("Token has been revoked")
    except TokenError as exc:
        # expired or malformed
        logger.warning("Rejected token: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="invalid or expired token",
        )
    return CurrentUser(username=claims.username, user_id=claims.user_id, claims=claims)


def require_api_key(authorization: Optional[str] = Header(None)) -> None:
    """Static shared-secret gate; unrelated to bearer tokens."""
    if not authorization or not secrets.compare_digest(
        authorization.encode("utf-8"), config.STATIC_API_KEY.encode("utf-8")
    ):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="UNAUTHORIZED")
