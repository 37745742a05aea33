from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker

from workshop.core.config import settings


def build_engine(url: str = settings.DATABASE_URL):
    backend = make_url(url).get_backend_name()
    kwargs: dict = {"pool_pre_ping": True}
    if backend == "postgresql":
        kwargs["pool_timeout"] = settings.DB_POOL_TIMEOUT
        kwargs["connect_args"] = {
            "connect_timeout": settings.DB_POOL_TIMEOUT,
            "options": f"-c statement_timeout={settings.DB_STATEMENT_TIMEOUT_MS}",
        }
    elif backend == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False, "timeout": settings.DB_POOL_TIMEOUT}

    eng = create_engine(url, **kwargs)

    if backend == "sqlite":
        @event.listens_for(eng, "connect")
        def _sqlite_pragmas(dbapi_conn, _record):
            cur = dbapi_conn.cursor()
            cur.execute("PRAGMA foreign_keys=ON")
            cur.close()

    return eng


engine = build_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
