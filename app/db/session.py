from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from app.core import config
DATABASE_URL = config.DATABASE_URL


def _connect_args(url: str) -> dict:
    """Bound connection and statement time per backend."""
    if url.startswith("sqlite"):
        # timeout = seconds to wait on a locked database file
        return {"check_same_thread": False, "timeout": config.DB_CONNECT_TIMEOUT_SECONDS}
    if url.startswith("postgresql"):
        return {
            "connect_timeout": config.DB_CONNECT_TIMEOUT_SECONDS,
            "options": f"-c statement_timeout={config.DB_STATEMENT_TIMEOUT_MS}",
        }
    return {}


engine = create_engine(
    DATABASE_URL,
    connect_args=_connect_args(DATABASE_URL),
    pool_pre_ping=True,
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
