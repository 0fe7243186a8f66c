"""Generate database session"""

from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.core.config import configure_logging, get_settings
from src.db.schema import Base

engine = create_engine(get_settings().database_url)
SessionLocal = sessionmaker(bind=engine)


def init_db() -> None:
    """Start-up: set up logging and ensure all tables are created"""
    configure_logging()
    Base.metadata.create_all(bind=engine)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
