"""Repository protocols for the pet and task progress stores.

Implementations must serialize read-modify-write sequences per key through
``locked``; distinct keys must not contend.
"""

from contextlib import AbstractAsyncContextManager
from typing import Protocol

from src.domain.pet import Pet
from src.domain.task import TaskProgress


class PetRepository(Protocol):
    """Storage for pet records keyed by token id."""

    def locked(self, token_id: str) -> AbstractAsyncContextManager[None]:
        """Hold exclusive access to one pet for the duration of the block."""
        ...

    async def get(self, token_id: str) -> Pet | None: ...

    async def add(self, pet: Pet) -> None:
        """Insert a newly minted pet.

        Raises:
            ValueError: If a pet with the same token id already exists
        """
        ...

    async def save(self, pet: Pet) -> None: ...

    async def list_by_owner(self, owner: str) -> list[Pet]:
        """Return every pet of ``owner``, matched case-insensitively."""
        ...


class TaskRepository(Protocol):
    """Storage for task progress records keyed by (user address, task id)."""

    def locked(self, user_address: str, task_id: str) -> AbstractAsyncContextManager[None]:
        """Hold exclusive access to one progress record for the duration of the block."""
        ...

    async def get(self, user_address: str, task_id: str) -> TaskProgress | None: ...

    async def save(self, user_address: str, task_id: str, progress: TaskProgress) -> None: ...

    async def list_for_user(self, user_address: str) -> dict[str, TaskProgress]:
        """Return the user's records keyed by task id."""
        ...
