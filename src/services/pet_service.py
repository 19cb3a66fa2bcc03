"""Pet Store: single writer of pet records.

Every mutation reads the pet, runs the progression rules on a copy and
persists it in one write while holding the pet's lock, so concurrent
experience gains on the same pet are applied one after another.
"""

import logging
import random
from collections.abc import Callable
from datetime import UTC, datetime

from src.core.config import Settings
from src.core.errors import ErrorCode, InvalidInputError, NotFoundError, StorageError
from src.core.logging import log_with_context, span
from src.domain.pet import Pet, PetAction
from src.models.service_models import ExperienceResult, PetsWithStats
from src.repositories.base import PetRepository
from src.services import progression, query_service


logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _parse_pet_action(action: str | PetAction | None) -> PetAction | None:
    if action is None or action == "":
        return None
    try:
        return PetAction(action)
    except ValueError as e:
        valid = ", ".join(a.value for a in PetAction)
        msg = f"Invalid action type: {action}. Must be one of: {valid}"
        raise InvalidInputError(msg) from e


class PetStore:
    """Owns pet lookups and the apply-experience operation."""

    def __init__(
        self,
        repository: PetRepository,
        *,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = _utc_now,
        hunger_threshold_hours: float = progression.HOURS_BEFORE_HUNGRY,
    ) -> None:
        self._repository = repository
        self._rng = rng or random.Random()
        self._clock = clock
        self._hunger_threshold_hours = hunger_threshold_hours

    @classmethod
    def from_settings(cls, repository: PetRepository, app_settings: Settings) -> "PetStore":
        return cls(
            repository,
            rng=random.Random(app_settings.random_seed),
            hunger_threshold_hours=app_settings.hunger_threshold_hours,
        )

    async def add_pet(self, pet: Pet) -> None:
        """Register a pet minted elsewhere. Used by the mint collaborator and seeding."""
        with span("pet_store.add_pet"):
            try:
                await self._repository.add(pet)
            except ValueError as e:
                raise InvalidInputError(str(e)) from e
            logger.info("Registered pet", extra={"token_id": pet.token_id, "owner": pet.owner})

    async def get_pets_by_owner(
        self,
        owner: str,
        *,
        token_id: str | None = None,
        name_filter: str | None = None,
    ) -> PetsWithStats:
        """List an owner's pets with derived stats, highest level first.

        Raises:
            InvalidInputError: If owner is empty
        """
        if not owner:
            raise InvalidInputError("owner is required")

        with span("pet_store.get_pets_by_owner"):
            pets = await self._repository.list_by_owner(owner)
            result = query_service.build_pets_with_stats(
                pets,
                now=self._clock(),
                token_id=token_id,
                name_filter=name_filter,
                hunger_threshold_hours=self._hunger_threshold_hours,
            )
            logger.debug("Listed pets", extra={"owner": owner, "count": result.total_pets})
            return result

    async def apply_experience(
        self,
        token_id: str,
        delta: int,
        action: str | PetAction | None = None,
    ) -> ExperienceResult:
        """Add experience to a pet, level it up and apply an optional care action.

        Args:
            token_id: Pet token identifier
            delta: Non-negative experience gained
            action: Optional care action (feed, play, train, rest)

        Returns:
            ExperienceResult with the updated pet view and level-up details

        Raises:
            InvalidInputError: If delta is negative or not an integer, or the action is unknown
            NotFoundError: If no pet has this token id
            StorageError: If the repository fails
        """
        if isinstance(delta, bool) or not isinstance(delta, int):
            msg = f"Experience gained must be an integer, got {delta!r}"
            raise InvalidInputError(msg)
        if delta < 0:
            msg = f"Experience gained must be non-negative, got {delta}"
            raise InvalidInputError(msg)
        pet_action = _parse_pet_action(action)

        with span("pet_store.apply_experience"):
            async with self._repository.locked(token_id):
                pet = await self._repository.get(token_id)
                if pet is None:
                    msg = f"Pet not found: {token_id}"
                    raise NotFoundError(msg, code=ErrorCode.ERR_PET_NOT_FOUND)

                now = self._clock()
                outcome = progression.gain_experience(pet, delta, rng=self._rng, now=now)
                updated = outcome.pet
                if pet_action is not None:
                    progression.apply_action_effects(updated, pet_action, now)

                try:
                    await self._repository.save(updated)
                except StorageError:
                    logger.error("apply_experience_save_failed", extra={"token_id": token_id})
                    raise

            leveled_up = outcome.levels_gained > 0
            if leveled_up:
                log_with_context(
                    logger,
                    "info",
                    "Pet leveled up",
                    token_id=token_id,
                    previous_level=pet.level,
                    level=updated.level,
                    new_skills=outcome.new_skills,
                )

            message = (
                f"{updated.name} gained {delta} experience and leveled up to level {updated.level}!"
                if leveled_up
                else f"{updated.name} gained {delta} experience"
            )
            return ExperienceResult(
                pet=progression.build_pet_view(updated, now, hunger_threshold_hours=self._hunger_threshold_hours),
                leveled_up=leveled_up,
                levels_gained=outcome.levels_gained,
                experience_gained=delta,
                previous_level=pet.level,
                new_skills=outcome.new_skills,
                message=message,
            )
