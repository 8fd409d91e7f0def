from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from autoreport.config import get_settings

settings = get_settings()

# ==================================================
# ENGINE
# ==================================================

connect_args = {}
if settings.database_url.startswith("sqlite"):
    connect_args["check_same_thread"] = False

engine = create_engine(
    settings.database_url,
    connect_args=connect_args,
    pool_pre_ping=True,
)

SessionLocal = sessionmaker(bind=engine, autoflush=False)
Base = declarative_base()


# ==================================================
# DEPENDENCIES
# ==================================================

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """Create missing tables. Existing tables are left as they are."""
    import autoreport.models  # noqa: F401

    Base.metadata.create_all(bind or engine)
