"""Thin HTTP adapter over the pet and task stores."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.core.engine import Engine
from src.models.service_models import (
    ExperienceResult,
    PetsWithStats,
    TaskCatalogFilters,
    TaskCatalogListing,
    TaskProgressSummary,
    TaskStatusView,
)


router = APIRouter(prefix="/api/tools/pet", tags=["pet"])
logger = logging.getLogger(__name__)


class ExperienceRequest(BaseModel):
    """Body of an experience gain. Accepts camelCase or snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    token_id: str = Field(..., min_length=1)
    experience_gained: int
    action_type: str | None = None


class TaskActionRequest(BaseModel):
    """Body of a task action. Accepts camelCase or snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_address: str = Field(..., min_length=1)
    task_id: str = Field(..., min_length=1)
    action: str = Field(..., min_length=1)
    progress: int | None = None


def get_engine(request: Request) -> Engine:
    """Engine built by the application lifespan."""
    return request.app.state.engine


EngineDep = Annotated[Engine, Depends(get_engine)]


@router.get("/check-level")
async def check_level(
    engine: EngineDep,
    user_address: Annotated[str, Query(alias="userAddress", min_length=1)],
    token_id: Annotated[str | None, Query(alias="tokenId")] = None,
    pet_name: Annotated[str | None, Query(alias="petName")] = None,
) -> PetsWithStats:
    """List an owner's pets with derived level stats."""
    return await engine.pet_store.get_pets_by_owner(user_address, token_id=token_id, name_filter=pet_name)


@router.post("/check-level")
async def gain_experience(engine: EngineDep, body: ExperienceRequest) -> ExperienceResult:
    """Apply an experience gain and optional care action to a pet."""
    return await engine.pet_store.apply_experience(body.token_id, body.experience_gained, body.action_type)


@router.get("/check-task")
async def check_task(
    engine: EngineDep,
    user_address: Annotated[str, Query(alias="userAddress", min_length=1)],
    task_id: Annotated[str | None, Query(alias="taskId")] = None,
) -> TaskStatusView | TaskProgressSummary:
    """Return one task's status or the user's whole progress summary."""
    return await engine.task_store.get_task_progress(user_address, task_id)


@router.post("/check-task")
async def apply_task_action(engine: EngineDep, body: TaskActionRequest) -> TaskStatusView:
    """Run a task action (start, update_progress, complete, claim_reward)."""
    return await engine.task_store.apply_task_action(body.user_address, body.task_id, body.action, body.progress)


@router.get("/task-list")
async def task_list(
    engine: EngineDep,
    user_address: Annotated[str | None, Query(alias="userAddress")] = None,
    pet_level: Annotated[int | None, Query(alias="petLevel", ge=1)] = None,
    task_type: Annotated[str | None, Query(alias="taskType")] = None,
    category: Annotated[str | None, Query()] = None,
    difficulty: Annotated[str | None, Query()] = None,
) -> TaskCatalogListing:
    """Filtered task catalog, annotated with the user's statuses when an address is given."""
    filters = TaskCatalogFilters(
        task_type=task_type,
        category=category,
        difficulty=difficulty,
        pet_level=pet_level,
    )
    return await engine.task_store.list_task_catalog(filters, user_address=user_address)
