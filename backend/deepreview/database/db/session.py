from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from deepreview.config.config import Config


def _connect_args(url: str) -> dict:
    # SQLite connections are shared across the FastAPI threadpool
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


database_url = Config.database_url
# Managed Postgres hosts hand out "postgres://" URLs, SQLAlchemy wants "postgresql://"
if database_url.startswith("postgres://"):
    database_url = database_url.replace("postgres://", "postgresql://", 1)

engine = create_engine(
    database_url,
    pool_pre_ping=True,
    connect_args=_connect_args(database_url),
)

SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,
)
