"""Database session management"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from lunch_ledger.config import settings

# SQLite connections are handed to worker threads by the repositories
connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}

engine = create_engine(
    settings.database_url,
    pool_pre_ping=True,  # Verify connections before using
    pool_recycle=3600,
    connect_args=connect_args,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
