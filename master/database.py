from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from pathlib import Path

from master.models import Base
from shared.config import DATABASE_URL

IN_MEMORY_URLS = {"sqlite://", "sqlite:///:memory:"}


def create_session_factory(database_url: str = DATABASE_URL):
    """
    Create the engine for the namespace database, create the schema and
    return a session factory bound to it.
    """
    engine_kwargs = {}
    if database_url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if database_url in IN_MEMORY_URLS:
            # one shared connection so every session sees the same database
            engine_kwargs["poolclass"] = StaticPool
        elif database_url.startswith("sqlite:///"):
            Path(database_url[len("sqlite:///"):]).parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(database_url, **engine_kwargs)
    Base.metadata.create_all(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)
