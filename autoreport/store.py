import logging
from functools import wraps

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from autoreport.errors import InternalError, UniqueViolationError
from autoreport.models import User

logger = logging.getLogger(__name__)


def _is_email_conflict(exc: IntegrityError) -> bool:
    # sqlite: "UNIQUE constraint failed: users.email"
    # postgres: duplicate key value violates unique constraint "ix_users_email"
    message = str(exc.orig).lower()
    return "email" in message and ("unique" in message or "duplicate" in message)


def _store_errors(func):
    """Roll back and surface driver failures as InternalError."""

    @wraps(func)
    def wrapper(self, *args, **kwargs):
        try:
            return func(self, *args, **kwargs)
        except UniqueViolationError:
            raise
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Credential store failure in %s", func.__name__)
            raise InternalError() from exc

    return wrapper


class UserStore:
    """Credential store over a SQLAlchemy session.

    Every write commits on its own; each public method is one unit of work.
    """

    def __init__(self, db: Session):
        self.db = db

    @_store_errors
    def find_by_email(self, email: str) -> User | None:
        return self.db.execute(
            select(User).where(User.email == email)
        ).scalar_one_or_none()

    @_store_errors
    def get(self, user_id: int) -> User | None:
        return self.db.get(User, user_id)

    @_store_errors
    def insert(self, **fields) -> User:
        user = User(**fields)
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            if _is_email_conflict(exc):
                raise UniqueViolationError(fields.get("email")) from exc
            raise
        self.db.refresh(user)
        return user

    @_store_errors
    def update_password(self, user_id: int, password_hash: str, consume_reset_token: str | None = None) -> bool:
        """Replace the password hash.

        With ``consume_reset_token`` the reset fields are cleared in the same
        statement, and the row only matches while its pending token is still
        that one. Returns False when nothing was updated.
        """
        stmt = update(User).where(User.id == user_id)
        values = {"password_hash": password_hash}
        if consume_reset_token is not None:
            stmt = stmt.where(User.reset_token == consume_reset_token)
            values.update(reset_token=None, reset_expires=None)

        result = self.db.execute(stmt.values(**values).execution_options(synchronize_session=False))
        self.db.commit()
        return result.rowcount == 1

    @_store_errors
    def update_reset_fields(self, user_id: int, token_hash: str | None, expires) -> None:
        if (token_hash is None) != (expires is None):
            raise ValueError("reset token and expiry must be set or cleared together")

        self.db.execute(
            update(User)
            .where(User.id == user_id)
            .values(reset_token=token_hash, reset_expires=expires)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()

    @_store_errors
    def update_trial_active(self, user_id: int, active: bool) -> None:
        self.db.execute(
            update(User)
            .where(User.id == user_id, User.trial_active != active)
            .values(trial_active=active)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
