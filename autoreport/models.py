from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from autoreport.database import Base


def utcnow() -> datetime:
    """Naive UTC timestamp, the format every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)

    trial_start = Column(DateTime, nullable=False)
    trial_end = Column(DateTime, nullable=False)
    trial_active = Column(Boolean, nullable=False, default=True)

    # set and cleared together
    reset_token = Column(String(64), nullable=True)
    reset_expires = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utcnow)

    def __repr__(self):
        return f"<User id={self.id} email={self.email}>"


class Client(Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=True)
    google_ads_id = Column(String, nullable=True)
    meta_ads_id = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow)
