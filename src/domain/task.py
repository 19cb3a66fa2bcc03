"""Task catalog and task progress domain models and enums."""

from datetime import UTC, datetime
from enum import StrEnum
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TaskType(StrEnum):
    """How often a task is offered."""

    DAILY = "daily"
    WEEKLY = "weekly"
    EVENT = "event"
    ADVENTURE = "adventure"


class TaskCategory(StrEnum):
    """Gameplay category of a task."""

    CARE = "Care"
    ENTERTAINMENT = "Entertainment"
    TRAINING = "Training"
    COMBAT = "Combat"
    EXPLORATION = "Exploration"


class TaskDifficulty(StrEnum):
    """Task difficulty, totally ordered Easy < Medium < Hard."""

    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"

    @property
    def rank(self) -> int:
        return DIFFICULTY_ORDER[self]


DIFFICULTY_ORDER: MappingProxyType[TaskDifficulty, int] = MappingProxyType(
    {
        TaskDifficulty.EASY: 1,
        TaskDifficulty.MEDIUM: 2,
        TaskDifficulty.HARD: 3,
    }
)


class TaskStatus(StrEnum):
    """Task lifecycle state derived from a progress record."""

    LOCKED = "locked"
    NOT_STARTED = "not_started"
    STARTED = "started"
    IN_PROGRESS = "in_progress"
    COMPLETED_PENDING_REWARD = "completed_pending_reward"
    COMPLETED_AND_CLAIMED = "completed_and_claimed"


class TaskAction(StrEnum):
    """Actions accepted by the task state machine."""

    START = "start"
    UPDATE_PROGRESS = "update_progress"
    COMPLETE = "complete"
    CLAIM_REWARD = "claim_reward"


class TaskReward(BaseModel):
    """Reward owed once a task's reward is claimed."""

    model_config = ConfigDict(frozen=True)

    experience: int = Field(..., ge=0)
    coins: int = Field(default=0, ge=0)
    items: tuple[str, ...] = Field(default=())


class TaskRequirements(BaseModel):
    """Pet requirements for attempting a task."""

    model_config = ConfigDict(frozen=True)

    pet_level: int = Field(default=1, ge=1, description="Minimum pet level")
    minimum_stats: dict[str, int] = Field(
        default_factory=dict, description="Minimum attribute thresholds by attribute name"
    )


class TaskDefinition(BaseModel):
    """Immutable catalog entry."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Catalog task ID")
    title: str = Field(..., description="Task title")
    description: str = Field(default="", description="Detailed task description")
    type: TaskType = Field(..., description="Offer cadence")
    category: TaskCategory = Field(..., description="Gameplay category")
    difficulty: TaskDifficulty = Field(..., description="Difficulty tier")
    reward: TaskReward = Field(..., description="Reward on claim")
    requirements: TaskRequirements = Field(default_factory=TaskRequirements)
    is_active: bool = Field(default=True, description="Whether the task is currently offered")
    created_at: datetime = Field(..., description="Catalog load timestamp")


class TaskProgress(BaseModel):
    """Per-user progress record for one task.

    Invariants: reward_claimed implies completed, completed implies progress == 100,
    locked implies not completed and progress == 0.
    """

    completed: bool = False
    completed_at: datetime | None = None
    reward_claimed: bool = False
    reward_claimed_at: datetime | None = None
    started_at: datetime | None = None
    progress: int = Field(default=0, ge=0, le=100)
    current_step: str | None = None
    requirements: dict[str, bool] = Field(default_factory=dict)
    locked: bool = False
    reason: str | None = None
    last_updated: datetime | None = None
    time_spent: int | None = Field(default=None, ge=0, description="Seconds spent on the task")

    @field_validator("completed_at", "reward_claimed_at", "started_at", "last_updated")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value
