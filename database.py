import logging
import sqlite3
from contextlib import contextmanager
import config
from database_schemas import ALL_TABLE_SCHEMAS

logger = logging.getLogger(__name__)


@contextmanager
def get_db():
    conn = sqlite3.connect(config.DB_NAME, timeout=10)
    conn.execute("PRAGMA foreign_keys = ON")
    try:
        yield conn
    finally:
        conn.close()


@contextmanager
def transaction(conn: sqlite3.Connection):
    """Run a group of statements atomically.

    BEGIN IMMEDIATE takes the write lock up front, so two requests running the
    same read-then-write sequence are serialized instead of interleaved.
    """
    conn.execute("BEGIN IMMEDIATE")
    try:
        yield conn.cursor()
    except Exception:
        conn.rollback()
        raise
    conn.commit()


def init_db():
    with get_db() as conn:
        cursor = conn.cursor()
        for schema in ALL_TABLE_SCHEMAS:
            cursor.execute(schema)
        conn.commit()
    logger.info("Database schema ready at %s", config.DB_NAME)


if __name__ == "__main__":
    init_db()
