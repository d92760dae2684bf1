from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from todo_api.config import (
    DATABASE_URL,
    DB_POOL_SIZE,
    DB_MAX_OVERFLOW,
    DB_POOL_RECYCLE,
)

# Only apply sqlite-specific connect_args when using sqlite
if DATABASE_URL.startswith("sqlite"):
    engine_kwargs = {"connect_args": {"check_same_thread": False}}
else:
    # small idle pool, larger max-open bound, bounded connection lifetime
    engine_kwargs = {
        "pool_size": DB_POOL_SIZE,
        "max_overflow": DB_MAX_OVERFLOW,
        "pool_recycle": DB_POOL_RECYCLE,
    }

# Enable pool_pre_ping to avoid stale connections (useful for cloud DBs like Neon)
engine = create_engine(
    DATABASE_URL,
    pool_pre_ping=True,
    **engine_kwargs,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
