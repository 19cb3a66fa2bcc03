"""Demo pets and task progress for local development."""

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from src.domain.pet import Pet, PetAttributes, PetRarity, PetSpecies
from src.domain.task import TaskProgress
from src.services.task_state_machine import invariant_violations


if TYPE_CHECKING:
    from src.core.engine import Engine


logger = logging.getLogger(__name__)

DEMO_OWNER = "0x742d35Cc9001C7C1b0B5E9fD4a8dC4A0a5c7F5c1"


def _ts(value: str) -> datetime:
    return datetime.fromisoformat(value).astimezone(UTC)


def demo_pets() -> list[Pet]:
    return [
        Pet(
            token_id="pet_1691234567890_abc123def",
            owner=DEMO_OWNER,
            name="Draco",
            species=PetSpecies.DRAGON,
            level=15,
            experience=24850,
            experience_to_next_level=750,
            rarity=PetRarity.RARE,
            attributes=PetAttributes(strength=95, agility=78, intelligence=88, stamina=82),
            skills=["Fire Breath", "Flight", "Treasure Hunting", "Battle Roar"],
            last_fed=_ts("2025-08-10T10:30:00+00:00"),
            last_played=_ts("2025-08-10T11:15:00+00:00"),
            happiness=85,
            energy=70,
            health=100,
            created_at=_ts("2025-07-15T08:00:00+00:00"),
            last_level_up=_ts("2025-08-09T16:45:00+00:00"),
            achievements=["First Flight", "Dragon Slayer", "Treasure Master", "Battle Champion"],
        ),
        Pet(
            token_id="pet_1691234567891_xyz789ghi",
            owner=DEMO_OWNER,
            name="Whiskers",
            species=PetSpecies.CAT,
            level=8,
            experience=7860,
            experience_to_next_level=240,
            rarity=PetRarity.COMMON,
            attributes=PetAttributes(strength=45, agility=92, intelligence=75, stamina=58),
            skills=["Stealth", "Climbing", "Night Vision"],
            last_fed=_ts("2025-08-10T09:00:00+00:00"),
            last_played=_ts("2025-08-10T10:00:00+00:00"),
            happiness=90,
            energy=80,
            health=95,
            created_at=_ts("2025-08-01T12:00:00+00:00"),
            last_level_up=_ts("2025-08-08T14:20:00+00:00"),
            achievements=["Silent Hunter", "Tree Climber"],
        ),
    ]


def demo_task_progress() -> dict[str, TaskProgress]:
    return {
        "task_001": TaskProgress(
            completed=True,
            completed_at=_ts("2025-08-10T10:00:00+00:00"),
            reward_claimed=True,
            progress=100,
            time_spent=300,
        ),
        "task_002": TaskProgress(
            started_at=_ts("2025-08-10T12:00:00+00:00"),
            progress=75,
            current_step="Playing with pet",
        ),
        "task_003": TaskProgress(
            completed=True,
            completed_at=_ts("2025-08-09T15:30:00+00:00"),
            progress=100,
            time_spent=1800,
        ),
        "task_004": TaskProgress(
            progress=25,
            current_step="Training for tournament",
            requirements={"strength_met": True, "agility_met": False, "level_met": True},
        ),
        "task_005": TaskProgress(
            locked=True,
            reason="Pet level too low (required: 5, current: 3)",
        ),
    }


async def seed_demo_data(engine: "Engine") -> None:
    """Load the demo pets and the demo owner's task progress into the repositories.

    Only missing records are written, so progress made since an earlier run survives a restart.
    """
    for pet in demo_pets():
        if await engine.pet_repository.get(pet.token_id) is None:
            await engine.pet_repository.add(pet)

    for task_id, record in demo_task_progress().items():
        violations = invariant_violations(record)
        if violations:
            msg = f"Demo progress for {task_id} is inconsistent: {violations}"
            raise ValueError(msg)
        if await engine.task_repository.get(DEMO_OWNER, task_id) is None:
            await engine.task_repository.save(DEMO_OWNER, task_id, record)

    logger.info("Demo data seeded", extra={"owner": DEMO_OWNER})
