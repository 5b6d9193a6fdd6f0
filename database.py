from sqlmodel import create_engine, SQLModel, Session
from sqlalchemy.pool import StaticPool
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL")

if not DATABASE_URL:
    raise ValueError("DATABASE_URL environment variable is not set")

SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("1", "true", "yes")


def build_engine(url: str, echo: bool = False):
    """
    Create an engine for the given database URL

    SQLite connections are shared across threads; an in-memory SQLite
    database keeps a single connection so every session sees the same data.
    """
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=echo, **kwargs)
    return create_engine(url, echo=echo)


# Create engine
engine = build_engine(DATABASE_URL, echo=SQL_ECHO)


def create_db_and_tables(bind=None):
    """Create all tables in the database"""
    # Table classes must be registered on the metadata first
    import models  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)


def get_session():
    """Get database session - used as FastAPI dependency"""
    with Session(engine) as session:
        yield session
