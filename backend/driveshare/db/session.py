from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from driveshare.core.config import settings


def _connect_args(uri: str) -> dict:
    if not uri.startswith("sqlite"):
        return {}
    # Request threads share the engine; concurrent share link consumers
    # wait on the write lock instead of failing straight away
    return {"check_same_thread": False, "timeout": 30}


engine = create_engine(
    settings.SQLALCHEMY_DATABASE_URI,
    pool_pre_ping=True,
    connect_args=_connect_args(settings.SQLALCHEMY_DATABASE_URI),
)
SessionLocal = sessionmaker(autoflush=False, bind=engine)
