"""Password reset flow.

A user moves from no reset pending to reset pending when a token is issued,
and back once the token is consumed. Only the SHA-256 digest of the token is
stored; the raw value goes to the caller for out-of-band delivery.
"""
import hashlib
import hmac
import logging
import secrets
from datetime import datetime, timedelta

from autoreport.config import get_settings
from autoreport.errors import (
    InvalidTokenError,
    NoPendingResetError,
    NotFoundError,
    TokenExpiredError,
)
from autoreport.security import hash_password
from autoreport.store import UserStore

logger = logging.getLogger(__name__)

RESET_TOKEN_BYTES = 32


def hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def request_reset(store: UserStore, email: str, now: datetime) -> str:
    user = store.find_by_email(email)
    if user is None:
        raise NotFoundError()

    token = secrets.token_urlsafe(RESET_TOKEN_BYTES)
    expires = now + timedelta(minutes=get_settings().reset_token_expire_minutes)
    store.update_reset_fields(user.id, hash_reset_token(token), expires)

    logger.info("Password reset issued for user %s", user.id)
    return token


def confirm_reset(store: UserStore, email: str, token: str, new_password: str, now: datetime) -> None:
    user = store.find_by_email(email)
    if user is None:
        raise NotFoundError()

    stored_hash = user.reset_token
    if stored_hash is None:
        raise NoPendingResetError()

    if now > user.reset_expires:
        logger.info("Expired password reset presented for user %s", user.id)
        raise TokenExpiredError("Reset token expired")

    if not hmac.compare_digest(hash_reset_token(token), stored_hash):
        logger.info("Wrong password reset token presented for user %s", user.id)
        raise InvalidTokenError("Invalid reset token")

    consumed = store.update_password(
        user.id,
        hash_password(new_password),
        consume_reset_token=stored_hash,
    )
    if not consumed:
        # another confirmation used the token first
        raise NoPendingResetError()

    logger.info("Password reset completed for user %s", user.id)
