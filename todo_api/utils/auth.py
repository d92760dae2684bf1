import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, UTC
from typing import Optional
from jose import jwt, JWTError, ExpiredSignatureError
from jose.exceptions import JWTClaimsError
from passlib.context import CryptContext
from todo_api.config import SECRET_KEY, ALGORITHM

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class TokenError(Exception):
    """Base class for every reason a bearer token is refused."""


class InvalidTokenSignature(TokenError):
    pass


class TokenExpired(TokenError):
    pass


class MalformedToken(TokenError):
    pass


class TokenRevoked(TokenError):
    pass


@dataclass(frozen=True)
class TokenClaims:
    username: str
    user_id: int
    expires_at: datetime
    jti: Optional[str] = None


def hash_password(password: str):
    """Hash a password after validating bcrypt's 72-byte limit.

    Raises ValueError if the UTF-8 encoding of the password exceeds 72 bytes.
    """
    if isinstance(password, str):
        b = password.encode("utf-8")
        if len(b) > 72:
            # make the failure explicit and consistent
            raise ValueError("password too long: must be at most 72 bytes when UTF-8 encoded")
    return pwd_context.hash(password)


def verify_password(plain, hashed):
    """Verify a plaintext password against a hash.

    If verification raises a ValueError (for example plain >72 bytes), return False
    to allow the caller to respond with an authentication failure instead of an error.
    """
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        return False


def dummy_verify():
    """Spend the same time as a real verify when the user does not exist."""
    pwd_context.dummy_verify()


def create_token(username: str, user_id: int, expires_delta: Optional[timedelta] = None) -> str:
    # read expiry at call-time so tests (and runtime overrides) that modify
    # todo_api.config.ACCESS_TOKEN_EXPIRE_MINUTES take effect immediately
    import todo_api.config as _cfg
    if expires_delta is None:
        expires_delta = timedelta(minutes=_cfg.ACCESS_TOKEN_EXPIRE_MINUTES)
    expire = datetime.now(UTC) + expires_delta
    claims = {
        "username": username,
        "user_id": user_id,
        "jti": uuid.uuid4().hex,
        "exp": int(expire.timestamp()),  # JWT spec uses Unix timestamp
    }
    return jwt.encode(claims, SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str) -> TokenClaims:
    """Verify signature and expiry of ``token`` and return its identity claims.

    Raises InvalidTokenSignature when the signature does not match or the token
    was signed with any algorithm other than ALGORITHM (``none`` included),
    TokenExpired when ``exp`` has passed, and MalformedToken for anything that
    does not parse or lacks the identity claims.
    """
    try:
        header = jwt.get_unverified_header(token)
        jwt.get_unverified_claims(token)
    except JWTError as exc:
        raise MalformedToken("token could not be parsed") from exc

    if header.get("alg") != ALGORITHM:
        raise InvalidTokenSignature(f"unexpected signing algorithm: {header.get('alg')!r}")

    try:
        # jwt.decode checks the signature before any claim, so what is left
        # after the claim errors is a signature mismatch
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError as exc:
        raise TokenExpired("token has expired") from exc
    except JWTClaimsError as exc:
        raise MalformedToken(str(exc)) from exc
    except JWTError as exc:
        raise InvalidTokenSignature("signature verification failed") from exc

    if "exp" not in payload:
        raise MalformedToken("token has no expiry")
    username = payload.get("username")
    user_id = payload.get("user_id")
    if not isinstance(username, str) or not username:
        raise MalformedToken("token is missing the username claim")
    if not isinstance(user_id, int) or isinstance(user_id, bool):
        raise MalformedToken("token is missing the user_id claim")

    return TokenClaims(
        username=username,
        user_id=user_id,
        expires_at=datetime.fromtimestamp(payload["exp"], UTC),
        jti=payload.get("jti"),
    )
