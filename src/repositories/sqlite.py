"""Durable repositories over the aiosqlite ``db_client``.

Each instance owns the per-key locks for its database, so construct one
instance per database file and share it for the lifetime of the service.
"""

import json
import logging
from contextlib import AbstractAsyncContextManager
from typing import Any

from pydantic import ValidationError

from src.core import db_client
from src.core.config import Constants
from src.core.errors import StorageError
from src.core.locks import KeyedLocks
from src.domain.pet import Pet
from src.domain.task import TaskProgress


logger = logging.getLogger(__name__)


async def _list_all(*, collection: str, filter_query: str, db_path: str | None) -> list[dict[str, Any]]:
    """Page through every record matching the filter."""
    records: list[dict[str, Any]] = []
    page = 1
    while True:
        batch = await db_client.list_records(
            collection=collection,
            page=page,
            per_page=Constants.DEFAULT_PER_PAGE_LIMIT,
            filter_query=filter_query,
            db_path=db_path,
        )
        records.extend(batch)
        if len(batch) < Constants.DEFAULT_PER_PAGE_LIMIT:
            return records
        page += 1


def _progress_id(user_address: str, task_id: str) -> str:
    return json.dumps([user_address, task_id])


class SqlitePetRepository:
    """Pet storage in the ``pets`` table."""

    def __init__(self, *, db_path: str | None = None) -> None:
        self._db_path = db_path
        self._locks = KeyedLocks()

    def locked(self, token_id: str) -> AbstractAsyncContextManager[None]:
        return self._locks.hold(token_id)

    async def get(self, token_id: str) -> Pet | None:
        try:
            record = await db_client.get_record(collection="pets", record_id=token_id, db_path=self._db_path)
            return Pet.model_validate(record["data"])
        except db_client.RecordNotFoundError:
            return None
        except (db_client.DatabaseError, ValidationError) as e:
            msg = f"Failed to load pet {token_id}"
            raise StorageError(msg) from e

    async def add(self, pet: Pet) -> None:
        if await self.get(pet.token_id) is not None:
            msg = f"Pet already exists: {pet.token_id}"
            raise ValueError(msg)
        await self.save(pet)

    async def save(self, pet: Pet) -> None:
        try:
            await db_client.upsert_record(
                collection="pets",
                record_id=pet.token_id,
                data=pet.model_dump(mode="json"),
                columns={"owner": pet.owner.lower()},
                db_path=self._db_path,
            )
        except db_client.DatabaseError as e:
            msg = f"Failed to save pet {pet.token_id}"
            raise StorageError(msg) from e

    async def list_by_owner(self, owner: str) -> list[Pet]:
        filter_query = f'owner = "{db_client.sanitize_param(owner.lower())}"'
        try:
            records = await _list_all(collection="pets", filter_query=filter_query, db_path=self._db_path)
            return [Pet.model_validate(record["data"]) for record in records]
        except (db_client.DatabaseError, ValidationError) as e:
            msg = f"Failed to list pets for owner {owner}"
            raise StorageError(msg) from e


class SqliteTaskRepository:
    """Task progress storage in the ``task_progress`` table."""

    def __init__(self, *, db_path: str | None = None) -> None:
        self._db_path = db_path
        self._locks = KeyedLocks()

    def locked(self, user_address: str, task_id: str) -> AbstractAsyncContextManager[None]:
        return self._locks.hold((user_address, task_id))

    async def get(self, user_address: str, task_id: str) -> TaskProgress | None:
        try:
            record = await db_client.get_record(
                collection="task_progress",
                record_id=_progress_id(user_address, task_id),
                db_path=self._db_path,
            )
            return TaskProgress.model_validate(record["data"])
        except db_client.RecordNotFoundError:
            return None
        except (db_client.DatabaseError, ValidationError) as e:
            msg = f"Failed to load progress for task {task_id}"
            raise StorageError(msg) from e

    async def save(self, user_address: str, task_id: str, progress: TaskProgress) -> None:
        try:
            await db_client.upsert_record(
                collection="task_progress",
                record_id=_progress_id(user_address, task_id),
                data=progress.model_dump(mode="json"),
                columns={"user_address": user_address, "task_id": task_id},
                db_path=self._db_path,
            )
        except db_client.DatabaseError as e:
            msg = f"Failed to save progress for task {task_id}"
            raise StorageError(msg) from e

    async def list_for_user(self, user_address: str) -> dict[str, TaskProgress]:
        filter_query = f'user_address = "{db_client.sanitize_param(user_address)}"'
        try:
            records = await _list_all(collection="task_progress", filter_query=filter_query, db_path=self._db_path)
            return {record["task_id"]: TaskProgress.model_validate(record["data"]) for record in records}
        except (db_client.DatabaseError, ValidationError) as e:
            msg = f"Failed to list task progress for {user_address}"
            raise StorageError(msg) from e
