"""Static task catalog loaded once at startup."""

from datetime import UTC, datetime
from types import MappingProxyType

from src.domain.task import (
    TaskCategory,
    TaskDefinition,
    TaskDifficulty,
    TaskRequirements,
    TaskReward,
    TaskType,
)


_CATALOG_CREATED_AT = datetime(2025, 8, 10, tzinfo=UTC)

DEFAULT_TASK_CATALOG: tuple[TaskDefinition, ...] = (
    TaskDefinition(
        id="task_001",
        title="Feed Your Pet",
        description="Feed your pet to increase its happiness and energy",
        type=TaskType.DAILY,
        category=TaskCategory.CARE,
        difficulty=TaskDifficulty.EASY,
        reward=TaskReward(experience=50, coins=10),
        requirements=TaskRequirements(pet_level=1),
        created_at=_CATALOG_CREATED_AT,
    ),
    TaskDefinition(
        id="task_002",
        title="Play with Pet",
        description="Spend time playing with your pet to boost its mood",
        type=TaskType.DAILY,
        category=TaskCategory.ENTERTAINMENT,
        difficulty=TaskDifficulty.EASY,
        reward=TaskReward(experience=75, coins=15),
        requirements=TaskRequirements(pet_level=1),
        created_at=_CATALOG_CREATED_AT,
    ),
    TaskDefinition(
        id="task_003",
        title="Train Pet Skills",
        description="Train your pet to learn new skills and abilities",
        type=TaskType.WEEKLY,
        category=TaskCategory.TRAINING,
        difficulty=TaskDifficulty.MEDIUM,
        reward=TaskReward(experience=200, coins=50, items=("Skill Book", "Training Treats")),
        requirements=TaskRequirements(pet_level=3),
        created_at=_CATALOG_CREATED_AT,
    ),
    TaskDefinition(
        id="task_004",
        title="Pet Battle Tournament",
        description="Enter your pet in a tournament to compete with other pets",
        type=TaskType.EVENT,
        category=TaskCategory.COMBAT,
        difficulty=TaskDifficulty.HARD,
        reward=TaskReward(experience=500, coins=200, items=("Tournament Trophy", "Rare Accessory")),
        requirements=TaskRequirements(pet_level=10, minimum_stats={"strength": 70, "agility": 60}),
        created_at=_CATALOG_CREATED_AT,
    ),
    TaskDefinition(
        id="task_005",
        title="Explore New Territory",
        description="Take your pet on an adventure to discover new areas",
        type=TaskType.ADVENTURE,
        category=TaskCategory.EXPLORATION,
        difficulty=TaskDifficulty.MEDIUM,
        reward=TaskReward(experience=300, coins=100, items=("Explorer's Map", "Adventure Badge")),
        requirements=TaskRequirements(pet_level=5, minimum_stats={"stamina": 50}),
        created_at=_CATALOG_CREATED_AT,
    ),
)


class TaskCatalog:
    """Read-only lookup over task definitions, preserving catalog order."""

    def __init__(self, definitions: tuple[TaskDefinition, ...] = DEFAULT_TASK_CATALOG) -> None:
        self._definitions = definitions
        self._by_id = MappingProxyType({definition.id: definition for definition in definitions})
        if len(self._by_id) != len(definitions):
            raise ValueError("Task catalog contains duplicate task ids")

    def __iter__(self):
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._by_id

    def get(self, task_id: str) -> TaskDefinition | None:
        return self._by_id.get(task_id)
