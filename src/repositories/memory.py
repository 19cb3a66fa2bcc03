"""In-memory repositories for tests and single-process development."""

from contextlib import AbstractAsyncContextManager

from src.core.locks import KeyedLocks
from src.domain.pet import Pet
from src.domain.task import TaskProgress


class InMemoryPetRepository:
    """Pet storage backed by a dict. Records are copied on the way in and out."""

    def __init__(self) -> None:
        self._pets: dict[str, Pet] = {}
        self._locks = KeyedLocks()

    def locked(self, token_id: str) -> AbstractAsyncContextManager[None]:
        return self._locks.hold(token_id)

    async def get(self, token_id: str) -> Pet | None:
        pet = self._pets.get(token_id)
        return pet.model_copy(deep=True) if pet is not None else None

    async def add(self, pet: Pet) -> None:
        if pet.token_id in self._pets:
            msg = f"Pet already exists: {pet.token_id}"
            raise ValueError(msg)
        self._pets[pet.token_id] = pet.model_copy(deep=True)

    async def save(self, pet: Pet) -> None:
        self._pets[pet.token_id] = pet.model_copy(deep=True)

    async def list_by_owner(self, owner: str) -> list[Pet]:
        owner_key = owner.lower()
        return [pet.model_copy(deep=True) for pet in self._pets.values() if pet.owner.lower() == owner_key]


class InMemoryTaskRepository:
    """Task progress storage backed by a nested dict keyed by user then task."""

    def __init__(self) -> None:
        self._records: dict[str, dict[str, TaskProgress]] = {}
        self._locks = KeyedLocks()

    def locked(self, user_address: str, task_id: str) -> AbstractAsyncContextManager[None]:
        return self._locks.hold((user_address, task_id))

    async def get(self, user_address: str, task_id: str) -> TaskProgress | None:
        record = self._records.get(user_address, {}).get(task_id)
        return record.model_copy(deep=True) if record is not None else None

    async def save(self, user_address: str, task_id: str, progress: TaskProgress) -> None:
        self._records.setdefault(user_address, {})[task_id] = progress.model_copy(deep=True)

    async def list_for_user(self, user_address: str) -> dict[str, TaskProgress]:
        return {
            task_id: record.model_copy(deep=True) for task_id, record in self._records.get(user_address, {}).items()
        }
