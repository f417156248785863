import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import DATABASE_URL

logger = logging.getLogger(__name__)


def build_engine(url: str = DATABASE_URL):
    """Create an engine for the relational record store"""
    connect_args = {}
    if url.startswith("sqlite"):
        # FastAPI serves requests from a thread pool
        connect_args["check_same_thread"] = False

    try:
        engine = create_engine(url, pool_pre_ping=True, connect_args=connect_args, echo=False)
    except Exception as e:
        logger.error(f"❌ Failed to create database engine: {e}")
        raise

    logger.info("✅ Database engine created successfully")
    return engine


engine = build_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()