# marketplace/data/database.py
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, declarative_base

from marketplace.utils.settings import DATABASE_URL
from marketplace.utils.retry import db_connect_retry
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, pool_pre_ping=True, connect_args=connect_args)

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@db_connect_retry()
def init_db(bind=None):
    """Creates all tables registered on Base.metadata."""
    # models must be imported before create_all so they land in the metadata
    import marketplace.data.models  # noqa: F401

    bind = bind or engine
    with bind.connect() as conn:
        conn.execute(text("SELECT 1"))

    logger.info(f"Creating tables: {list(Base.metadata.tables.keys())}")
    Base.metadata.create_all(bind=bind)
