from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session

from salary_mgmt.config import settings


def make_engine(url: str = settings.DATABASE_URL, echo: bool = settings.SQL_ECHO):
    """Build an engine; SQLite connections are shared across FastAPI's threadpool."""
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # one connection, otherwise every checkout sees an empty database
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=echo, **kwargs)
    return create_engine(url, echo=echo)


engine = make_engine()


def init_db(bind=None):
    # models must be imported so their tables are registered on the metadata
    import salary_mgmt.models  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)


def get_session():
    """Provide DB session"""
    with Session(engine) as session:
        yield session
