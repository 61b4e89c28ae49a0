"""Database session management with connection pooling"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from fintrack_analytics.config import settings

connect_args = {}
pool_options = {
    "pool_pre_ping": True,  # Verify connections before using
    "pool_size": 10,
    "max_overflow": 10,
    "pool_recycle": 3600,
}
if settings.database_url.startswith("sqlite"):
    # Analytics sections query from worker threads
    connect_args = {"check_same_thread": False}
    pool_options = {}

engine = create_engine(settings.database_url, connect_args=connect_args, **pool_options)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
