"""SQLite schema management (code-first approach)."""

import logging

from src.core import db_client


logger = logging.getLogger(__name__)


# Central list of all collections in the schema
COLLECTIONS = [
    "pets",
    "task_progress",
]

TABLE_SCHEMAS: dict[str, str] = {
    "pets": """
        CREATE TABLE IF NOT EXISTS pets (
            id TEXT PRIMARY KEY,
            owner TEXT NOT NULL,
            data TEXT NOT NULL,
            updated TEXT NOT NULL
        )
    """,
    "task_progress": """
        CREATE TABLE IF NOT EXISTS task_progress (
            id TEXT PRIMARY KEY,
            user_address TEXT NOT NULL,
            task_id TEXT NOT NULL,
            data TEXT NOT NULL,
            updated TEXT NOT NULL
        )
    """,
}

INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_pets_owner ON pets (owner)",
    "CREATE INDEX IF NOT EXISTS idx_task_progress_user ON task_progress (user_address)",
]


async def init_db(*, db_path: str | None = None) -> None:
    """Create all tables and indexes if they do not exist yet."""
    conn = await db_client.get_connection(db_path=db_path)
    for collection in COLLECTIONS:
        await conn.execute(TABLE_SCHEMAS[collection])
    for index in INDEXES:
        await conn.execute(index)
    await conn.commit()

    logger.info("Database schema initialized", extra={"collections": COLLECTIONS})
