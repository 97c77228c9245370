import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from sqlalchemy import create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from app.config import settings
from app.errors import StoreFailureError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_engine(db_path: Path | None = None):
    path = db_path or settings.db_path
    engine = create_engine(
        f"sqlite:///{path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    return engine


engine = get_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def store_errors(db: Session, action: str):
    """Roll back and re-raise driver errors as StoreFailureError."""
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Store failure while trying to %s: %s", action, exc)
        raise StoreFailureError(f"Failed to {action}") from exc


SCHEMA_SQL = """\
-- ============================================================
-- USERS (owned by the account service, read-only for the core)
-- ============================================================
CREATE TABLE IF NOT EXISTS users (
    id                  TEXT PRIMARY KEY,
    role                TEXT NOT NULL CHECK(role IN ('STUDENT','ALUMNI','ADMIN')),
    full_name           TEXT,
    email_address       TEXT,
    mobile_number       TEXT,
    bio                 TEXT,
    profile_picture_url TEXT,
    passing_batch       TEXT,
    github              TEXT,
    linked_in           TEXT,
    is_deleted          INTEGER NOT NULL DEFAULT 0,
    created_at          TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE INDEX IF NOT EXISTS idx_users_role ON users(role);

-- ============================================================
-- JOBS
-- ============================================================
CREATE TABLE IF NOT EXISTS jobs (
    id                   TEXT PRIMARY KEY,
    owner_id             TEXT NOT NULL REFERENCES users(id),
    job_title            TEXT NOT NULL,
    job_description      TEXT NOT NULL,
    designation          TEXT NOT NULL,
    location             TEXT NOT NULL,
    mode                 TEXT NOT NULL,
    experience           TEXT NOT NULL,
    salary               TEXT NOT NULL,
    vacancy              INTEGER NOT NULL CHECK(vacancy > 0),
    joining_date         TEXT NOT NULL,
    open_till            TEXT NOT NULL,
    status               TEXT NOT NULL DEFAULT 'OPEN'
                         CHECK(status IN ('OPEN','CLOSED','ON_HOLD')),
    is_deleted           INTEGER NOT NULL DEFAULT 0,
    archived_description TEXT,
    created_at           TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    updated_at           TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE INDEX IF NOT EXISTS idx_jobs_owner ON jobs(owner_id);
CREATE INDEX IF NOT EXISTS idx_jobs_status ON jobs(status);
CREATE INDEX IF NOT EXISTS idx_jobs_live_joining ON jobs(is_deleted, joining_date);
CREATE INDEX IF NOT EXISTS idx_jobs_open_till ON jobs(open_till);

-- ============================================================
-- JOB APPLICATIONS
-- ============================================================
CREATE TABLE IF NOT EXISTS job_applications (
    id         TEXT PRIMARY KEY,
    user_id    TEXT NOT NULL REFERENCES users(id),
    job_id     TEXT NOT NULL REFERENCES jobs(id),
    applied_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE UNIQUE INDEX IF NOT EXISTS idx_applications_user_job ON job_applications(user_id, job_id);
CREATE INDEX IF NOT EXISTS idx_applications_job ON job_applications(job_id, applied_at);
"""


def init_db(db_path: Path | None = None):
    path = db_path or settings.db_path
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.executescript(SCHEMA_SQL)
    conn.close()


def check_integrity(db_path: Path | None = None) -> bool:
    path = db_path or settings.db_path
    conn = sqlite3.connect(str(path))
    try:
        result = conn.execute("PRAGMA integrity_check").fetchone()
    finally:
        conn.close()
    if result and result[0] == "ok":
        logger.info("Database integrity check passed.")
        return True
    logger.error("DATABASE INTEGRITY CHECK FAILED: %s", result)
    return False
