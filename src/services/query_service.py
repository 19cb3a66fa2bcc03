"""Stateless filtering, sorting and aggregation over store snapshots.

Nothing here writes: callers pass in the records they already loaded and get
read models back.
"""

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime

from src.domain.pet import Pet
from src.domain.task import (
    TaskCategory,
    TaskDefinition,
    TaskDifficulty,
    TaskProgress,
    TaskStatus,
    TaskType,
)
from src.models.service_models import (
    AvailableFilters,
    PetsWithStats,
    PetView,
    TaskCatalogEntry,
    TaskCatalogFilters,
    TaskProgressStatistics,
    TaskProgressSummary,
    TaskStatusView,
)
from src.services import progression
from src.services.task_state_machine import derive_status


logger = logging.getLogger(__name__)


def average_level(pets: Iterable[Pet]) -> float:
    """Mean level rounded to one decimal, 0.0 for no pets."""
    levels = [pet.level for pet in pets]
    if not levels:
        return 0.0
    return round(sum(levels) / len(levels), 1)


def filter_pets(pets: Iterable[Pet], *, token_id: str | None = None, name_filter: str | None = None) -> list[Pet]:
    selected = list(pets)
    if token_id:
        selected = [pet for pet in selected if pet.token_id == token_id]
    if name_filter:
        needle = name_filter.lower()
        selected = [pet for pet in selected if needle in pet.name.lower()]
    return selected


def build_pets_with_stats(
    pets: Iterable[Pet],
    *,
    now: datetime,
    token_id: str | None = None,
    name_filter: str | None = None,
    hunger_threshold_hours: float = progression.HOURS_BEFORE_HUNGRY,
) -> PetsWithStats:
    """Filter an owner's pets, attach derived stats and rank by (level, experience) descending."""
    views: list[PetView] = [
        progression.build_pet_view(pet, now, hunger_threshold_hours=hunger_threshold_hours)
        for pet in filter_pets(pets, token_id=token_id, name_filter=name_filter)
    ]
    views.sort(key=lambda view: (view.level, view.experience), reverse=True)

    return PetsWithStats(
        pets=views,
        total_pets=len(views),
        highest_level_pet=views[0] if views else None,
        average_level=average_level(views),
    )


def build_task_status(task_id: str, record: TaskProgress | None) -> TaskStatusView:
    """Status view of one task; a missing record reads as not started."""
    base = record if record is not None else TaskProgress()
    return TaskStatusView(**base.model_dump(), task_id=task_id, status=derive_status(record))


def summarize_task_progress(user_address: str, records: Mapping[str, TaskProgress]) -> TaskProgressSummary:
    """Every progress record of a user plus aggregate statistics."""
    tasks = [build_task_status(task_id, record) for task_id, record in records.items()]

    total = len(tasks)
    completed = sum(1 for task in tasks if task.completed)
    in_progress = sum(1 for task in tasks if not task.completed and task.progress > 0)
    available_rewards = sum(1 for task in tasks if task.status == TaskStatus.COMPLETED_PENDING_REWARD)

    return TaskProgressSummary(
        user_address=user_address,
        tasks=tasks,
        statistics=TaskProgressStatistics(
            total_tasks=total,
            completed_tasks=completed,
            in_progress_tasks=in_progress,
            completion_rate=(completed / total) * 100 if total > 0 else 0.0,
            available_rewards=available_rewards,
        ),
    )


def _matches(value: str, wanted: str | None) -> bool:
    return wanted is None or value.lower() == wanted.lower()


def filter_task_catalog(definitions: Iterable[TaskDefinition], filters: TaskCatalogFilters) -> list[TaskDefinition]:
    """Apply catalog predicates and order by difficulty, keeping catalog order among ties."""
    selected = [
        definition
        for definition in definitions
        if _matches(definition.type, filters.task_type)
        and _matches(definition.category, filters.category)
        and _matches(definition.difficulty, filters.difficulty)
        and (filters.pet_level is None or definition.requirements.pet_level <= filters.pet_level)
        and (not filters.active_only or definition.is_active)
    ]
    return sorted(selected, key=lambda definition: definition.difficulty.rank)


def annotate_catalog(
    definitions: Iterable[TaskDefinition],
    records: Mapping[str, TaskProgress] | None,
) -> list[TaskCatalogEntry]:
    """Attach each task's status for a user when their records are supplied."""
    entries = []
    for definition in definitions:
        status = build_task_status(definition.id, records.get(definition.id)) if records is not None else None
        entries.append(TaskCatalogEntry(**definition.model_dump(), completion_status=status))
    return entries


def available_filters() -> AvailableFilters:
    return AvailableFilters(
        types=[task_type.value for task_type in TaskType],
        categories=[category.value for category in TaskCategory],
        difficulties=[difficulty.value for difficulty in TaskDifficulty],
    )
