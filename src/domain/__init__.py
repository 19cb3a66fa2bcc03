"""Domain models and DTOs."""

from src.domain.catalog import DEFAULT_TASK_CATALOG, TaskCatalog
from src.domain.pet import Pet, PetAction, PetAttributes, PetRarity, PetSpecies
from src.domain.task import (
    TaskAction,
    TaskCategory,
    TaskDefinition,
    TaskDifficulty,
    TaskProgress,
    TaskRequirements,
    TaskReward,
    TaskStatus,
    TaskType,
)


__all__ = [
    "DEFAULT_TASK_CATALOG",
    "Pet",
    "PetAction",
    "PetAttributes",
    "PetRarity",
    "PetSpecies",
    "TaskAction",
    "TaskCatalog",
    "TaskCategory",
    "TaskDefinition",
    "TaskDifficulty",
    "TaskProgress",
    "TaskRequirements",
    "TaskReward",
    "TaskStatus",
    "TaskType",
]
