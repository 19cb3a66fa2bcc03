"""Task Store: single writer of per-user task progress records."""

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from src.core.errors import ErrorCode, InvalidInputError, NotFoundError
from src.core.logging import log_with_user_context, span
from src.domain.catalog import TaskCatalog
from src.domain.pet import Pet
from src.domain.task import TaskAction, TaskDefinition, TaskProgress, TaskStatus
from src.models.service_models import (
    TaskCatalogFilters,
    TaskCatalogListing,
    TaskProgressSummary,
    TaskStatusView,
)
from src.repositories.base import TaskRepository
from src.services import query_service, task_state_machine


logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


def check_requirements(definition: TaskDefinition, pet: Pet) -> tuple[dict[str, bool], str | None]:
    """Evaluate a task's requirements against a pet.

    Returns:
        Tuple of (requirement name -> met, lock reason or None when all are met)
    """
    requirements = definition.requirements
    met = {"level_met": pet.level >= requirements.pet_level}
    missing_stats = []
    for stat, minimum in requirements.minimum_stats.items():
        current = getattr(pet.attributes, stat, 0)
        met[f"{stat}_met"] = current >= minimum
        if current < minimum:
            missing_stats.append(f"{stat} {current}/{minimum}")

    if not met["level_met"]:
        return met, f"Pet level too low (required: {requirements.pet_level}, current: {pet.level})"
    if missing_stats:
        return met, f"Minimum stats not met: {', '.join(missing_stats)}"
    return met, None


class TaskStore:
    """Owns task progress reads, action application and catalog listing."""

    def __init__(
        self,
        repository: TaskRepository,
        catalog: TaskCatalog,
        *,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._repository = repository
        self._catalog = catalog
        self._clock = clock

    def _definition(self, task_id: str) -> TaskDefinition:
        definition = self._catalog.get(task_id)
        if definition is None:
            msg = f"Task not found: {task_id}"
            raise NotFoundError(msg, code=ErrorCode.ERR_TASK_NOT_FOUND)
        return definition

    async def get_task_progress(
        self,
        user_address: str,
        task_id: str | None = None,
    ) -> TaskStatusView | TaskProgressSummary:
        """Return one task's status, or every task of the user with statistics.

        Raises:
            InvalidInputError: If user_address is empty
        """
        if not user_address:
            raise InvalidInputError("user_address is required")

        with span("task_store.get_task_progress"):
            if task_id:
                record = await self._repository.get(user_address, task_id)
                return query_service.build_task_status(task_id, record)

            records = await self._repository.list_for_user(user_address)
            return query_service.summarize_task_progress(user_address, records)

    async def apply_task_action(
        self,
        user_address: str,
        task_id: str,
        action: str | TaskAction,
        progress: object = None,
    ) -> TaskStatusView:
        """Run one state machine action against the user's progress record.

        A successful claim carries the task reward in the returned view so the
        reward collaborator knows what is owed.

        Raises:
            InvalidInputError: Missing identifiers, unknown action or bad progress
            NotFoundError: Task id not in the catalog
            InvalidTransitionError: Action not allowed from the current state
        """
        if not user_address or not task_id:
            raise InvalidInputError("Missing required fields: user_address, task_id, action")
        parsed = task_state_machine.parse_action(action)
        definition = self._definition(task_id)

        with span("task_store.apply_task_action"):
            async with self._repository.locked(user_address, task_id):
                record = await self._repository.get(user_address, task_id)
                updated = task_state_machine.transition(
                    record,
                    parsed,
                    now=self._clock(),
                    progress=progress,
                    task_id=task_id,
                )
                await self._repository.save(user_address, task_id, updated)

            view = query_service.build_task_status(task_id, updated)
            if parsed == TaskAction.CLAIM_REWARD:
                view.reward = definition.reward
                log_with_user_context(
                    logger,
                    "info",
                    "Task reward claimed",
                    user_address=user_address,
                    task_id=task_id,
                    reward_experience=definition.reward.experience,
                    reward_coins=definition.reward.coins,
                )
            else:
                log_with_user_context(
                    logger, "info", "Task action applied", user_address=user_address, task_id=task_id, action=parsed
                )
            return view

    async def evaluate_requirements(self, user_address: str, task_id: str, pet: Pet) -> TaskStatusView:
        """Refresh the requirement map of a task for a pet and lock or unlock it.

        Only records with no progress and no completion are locked, so the
        progress invariants always hold.

        Raises:
            NotFoundError: Task id not in the catalog
        """
        if not user_address:
            raise InvalidInputError("user_address is required")
        definition = self._definition(task_id)
        met, reason = check_requirements(definition, pet)

        with span("task_store.evaluate_requirements"):
            async with self._repository.locked(user_address, task_id):
                record = await self._repository.get(user_address, task_id)
                updated = record.model_copy(deep=True) if record is not None else TaskProgress()
                updated.requirements = met

                if reason is not None and not updated.completed and updated.progress == 0:
                    updated.locked = True
                    updated.reason = reason
                elif reason is None and updated.locked:
                    updated.locked = False
                    updated.reason = None

                await self._repository.save(user_address, task_id, updated)

            view = query_service.build_task_status(task_id, updated)
            if view.status == TaskStatus.LOCKED:
                log_with_user_context(
                    logger, "info", "Task locked", user_address=user_address, task_id=task_id, reason=reason
                )
            return view

    async def list_task_catalog(
        self,
        filters: TaskCatalogFilters | None = None,
        *,
        user_address: str | None = None,
    ) -> TaskCatalogListing:
        """Filter and sort the catalog, annotating statuses for a user without writing."""
        with span("task_store.list_task_catalog"):
            selected = query_service.filter_task_catalog(self._catalog, filters or TaskCatalogFilters())
            records = await self._repository.list_for_user(user_address) if user_address else None
            entries = query_service.annotate_catalog(selected, records)
            return TaskCatalogListing(
                tasks=entries,
                total_tasks=len(entries),
                available_filters=query_service.available_filters(),
            )
