import calendar
import logging
from datetime import datetime, timedelta

from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from passlib.context import CryptContext

from autoreport.config import get_settings
from autoreport.errors import InternalError, InvalidTokenError, TokenExpiredError
from autoreport.models import utcnow

logger = logging.getLogger(__name__)

# ==========================================================
# PASSWORD HASHING
# ==========================================================

pwd_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto"
)


def hash_password(password: str) -> str:
    try:
        return pwd_context.hash(password)
    except (TypeError, ValueError) as exc:
        logger.error("Password hashing failed: %s", type(exc).__name__)
        raise InternalError() from exc


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (TypeError, ValueError):
        logger.warning("Stored password hash could not be parsed")
        return False


def dummy_verify() -> None:
    """Spend the time of a real verify when there is no hash to check."""
    pwd_context.dummy_verify()


# ==========================================================
# JWT TOKEN
# ==========================================================

def _timestamp(moment: datetime) -> int:
    return calendar.timegm(moment.utctimetuple())


def create_access_token(data: dict, expires_delta: timedelta | None = None, now: datetime | None = None) -> str:
    settings = get_settings()
    now = now or utcnow()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)

    to_encode = data.copy()
    to_encode.update({
        "iat": _timestamp(now),
        "exp": _timestamp(now + expires_delta),
    })
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str, now: datetime | None = None) -> dict:
    """Return the claims of a valid token.

    Expiry is checked against ``now`` rather than the wall clock so callers
    control the time the token is evaluated at.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm],
            options={"verify_exp": False},
        )
    except JWTError as exc:
        raise InvalidTokenError() from exc

    expires = payload.get("exp")
    if payload.get("sub") is None or not isinstance(expires, (int, float)):
        raise InvalidTokenError()

    if _timestamp(now or utcnow()) > expires:
        raise TokenExpiredError()

    return payload


# ==========================================================
# OAUTH2 SCHEME
# ==========================================================

oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="/auth/login",
    scheme_name="JWT"
)
