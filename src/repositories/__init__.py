"""Storage abstractions for pets and task progress."""

from src.repositories.base import PetRepository, TaskRepository
from src.repositories.memory import InMemoryPetRepository, InMemoryTaskRepository
from src.repositories.sqlite import SqlitePetRepository, SqliteTaskRepository


__all__ = [
    "InMemoryPetRepository",
    "InMemoryTaskRepository",
    "PetRepository",
    "SqlitePetRepository",
    "SqliteTaskRepository",
    "TaskRepository",
]
