from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from deliveryapp.config import settings


def build_engine(url: str):
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        # in-memory databases live per connection, share one
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=False, **kwargs)

    return create_engine(
        url,
        echo=False,
        pool_pre_ping=True,
        pool_recycle=1800,
    )


engine = build_engine(settings.database_url)


def create_db_and_tables(bind=None):
    from deliveryapp import models  # noqa: F401  registers every table
    SQLModel.metadata.create_all(bind or engine)
