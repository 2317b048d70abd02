from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


def make_engine(database_url: str) -> Engine:
    # Only apply sqlite-specific connect_args when using sqlite
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}

    # Enable pool_pre_ping to avoid stale connections (useful for cloud DBs like Neon)
    return create_engine(
        database_url,
        connect_args=connect_args,
        pool_pre_ping=True,
    )


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request):
    """Yield a session from the factory the running app was built with."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
