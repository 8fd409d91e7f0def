import logging
from datetime import datetime

from autoreport import reset, trial
from autoreport.errors import (
    AlreadyExistsError,
    InvalidTokenError,
    InvalidCredentialsError,
    TokenExpiredError,
    TrialExpiredError,
    UnauthorizedError,
    UniqueViolationError,
)
from autoreport.models import User, utcnow
from autoreport.security import (
    create_access_token,
    decode_access_token,
    dummy_verify,
    hash_password,
    verify_password,
)
from autoreport.store import UserStore

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AuthService:
    """Registration, login, password reset and request authentication."""

    def __init__(self, store: UserStore):
        self.store = store

    # ==========================================================
    # REGISTER
    # ==========================================================

    def register(self, name: str, email: str, password: str, now: datetime | None = None) -> User:
        now = now or utcnow()
        email = normalize_email(email)

        if self.store.find_by_email(email) is not None:
            raise AlreadyExistsError()

        trial_start, trial_end = trial.start_trial(now)
        try:
            user = self.store.insert(
                name=name,
                email=email,
                password_hash=hash_password(password),
                trial_start=trial_start,
                trial_end=trial_end,
                trial_active=True,
                created_at=now,
            )
        except UniqueViolationError as exc:
            raise AlreadyExistsError() from exc

        logger.info("Registered user %s, trial ends %s", user.id, trial_end.isoformat())
        return user

    # ==========================================================
    # LOGIN
    # ==========================================================

    def login(self, email: str, password: str, now: datetime | None = None) -> str:
        now = now or utcnow()
        user = self.store.find_by_email(normalize_email(email))

        if user is None:
            dummy_verify()
            logger.info("Rejected login")
            raise InvalidCredentialsError()

        if not verify_password(password, user.password_hash):
            logger.info("Rejected login")
            raise InvalidCredentialsError()

        self._check_trial(user, now)

        return create_access_token({"sub": str(user.id), "email": user.email}, now=now)

    # ==========================================================
    # PASSWORD RESET
    # ==========================================================

    def request_reset(self, email: str, now: datetime | None = None) -> str:
        return reset.request_reset(self.store, normalize_email(email), now or utcnow())

    def confirm_reset(self, email: str, token: str, new_password: str, now: datetime | None = None) -> None:
        reset.confirm_reset(self.store, normalize_email(email), token, new_password, now or utcnow())

    # ==========================================================
    # AUTHENTICATED REQUESTS
    # ==========================================================

    def authenticate(self, token: str, now: datetime | None = None) -> int:
        try:
            claims = decode_access_token(token, now=now)
            return int(claims["sub"])
        except (InvalidTokenError, TokenExpiredError) as exc:
            raise UnauthorizedError(exc.detail) from exc
        except ValueError as exc:
            raise UnauthorizedError("Invalid token") from exc

    def get_active_user(self, user_id: int, now: datetime | None = None) -> User:
        user = self.store.get(user_id)
        if user is None:
            raise UnauthorizedError("User not found")

        self._check_trial(user, now or utcnow())
        return user

    def _check_trial(self, user: User, now: datetime) -> None:
        if trial.is_trial_active(user, now):
            return

        if user.trial_active:
            self.store.update_trial_active(user.id, False)
            logger.info("Trial expired for user %s", user.id)
        raise TrialExpiredError()
