from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from access_gate.core.config import settings


def make_engine(url: str):
    """Create an engine; SQLite connections are shared with worker threads"""
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args, pool_pre_ping=True)


engine = make_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
