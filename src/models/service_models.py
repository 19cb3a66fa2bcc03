"""Pydantic models for service layer return types.

These models provide type safety at service boundaries: stores hand back
derived views rather than the raw records they own.
"""

from pydantic import BaseModel, Field

from src.domain.pet import Pet
from src.domain.task import TaskDefinition, TaskProgress, TaskReward, TaskStatus


class NextLevelRequirements(BaseModel):
    """Advisory requirements for reaching the next level."""

    experience_required: int
    training_sessions_needed: int
    estimated_days: int


class PetView(Pet):
    """Pet snapshot with derived progression fields attached."""

    level_progress: int
    power_level: int
    next_level_requirements: NextLevelRequirements | None = None
    status_effects: list[str] = Field(default_factory=list)
    can_level_up: bool = False
    type_number: int = 0
    total_experience: int = 0


class PetsWithStats(BaseModel):
    """Result of listing an owner's pets."""

    pets: list[PetView]
    total_pets: int
    highest_level_pet: PetView | None = None
    average_level: float = 0.0


class ExperienceResult(BaseModel):
    """Outcome of applying an experience gain to one pet."""

    pet: PetView
    leveled_up: bool
    levels_gained: int
    experience_gained: int
    previous_level: int
    new_skills: list[str] = Field(default_factory=list)
    message: str


class TaskStatusView(TaskProgress):
    """Progress record annotated with its derived lifecycle status."""

    task_id: str
    status: TaskStatus
    reward: TaskReward | None = Field(default=None, description="Set when a reward was just claimed")


class TaskProgressStatistics(BaseModel):
    """Aggregate statistics over one user's task progress."""

    total_tasks: int
    completed_tasks: int
    in_progress_tasks: int
    completion_rate: float
    available_rewards: int


class TaskProgressSummary(BaseModel):
    """All task progress for one user."""

    user_address: str
    tasks: list[TaskStatusView]
    statistics: TaskProgressStatistics


class TaskCatalogFilters(BaseModel):
    """Optional predicates for listing the task catalog."""

    task_type: str | None = None
    category: str | None = None
    difficulty: str | None = None
    pet_level: int | None = Field(default=None, ge=1)
    active_only: bool = False


class TaskCatalogEntry(TaskDefinition):
    """Catalog entry, optionally annotated with a user's status."""

    completion_status: TaskStatusView | None = None


class AvailableFilters(BaseModel):
    """Values accepted by the catalog filters."""

    types: list[str]
    categories: list[str]
    difficulties: list[str]


class TaskCatalogListing(BaseModel):
    """Filtered and sorted task catalog."""

    tasks: list[TaskCatalogEntry]
    total_tasks: int
    available_filters: AvailableFilters
