from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase, Session
from app.config import settings

# --- 1. SYNC ENGINE (Ingestion Scripts & Pipeline) ---
# SQLite needs cross-thread access because the crawl runs on a worker pool.
connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

sync_engine = create_engine(
    settings.DATABASE_URL,
    echo=False,
    future=True,
    connect_args=connect_args
)

SessionLocal = sessionmaker(
    bind=sync_engine,
    class_=Session,
    autocommit=False,
    autoflush=False
)

# --- 2. MODELS BASE ---
class Base(DeclarativeBase):
    pass
