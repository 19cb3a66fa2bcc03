"""Pure progression rules: experience curve, derived stats and level-up pass.

Nothing here touches storage. The Pet Store copies a pet, runs these
functions on the copy and persists the result in one write.
"""

import math
import random
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from src.core.config import Constants
from src.domain.pet import (
    ACTION_EFFECTS,
    SKILL_SCHEDULE,
    SPECIES_TYPE_NUMBERS,
    Pet,
    PetAction,
    PetAttributes,
    PetSpecies,
    clamp_stat,
)
from src.models.service_models import NextLevelRequirements, PetView


HOURS_BEFORE_HUNGRY = 12.0


def experience_required(level: int) -> int:
    """Cumulative experience needed to hold ``level``: floor(level^2 * 100)."""
    if level < 1:
        msg = f"Level must be >= 1, got {level}"
        raise ValueError(msg)
    return math.floor(level**2 * Constants.EXPERIENCE_CURVE_FACTOR)


def level_progress(pet: Pet) -> int:
    """Percent of the way from the current level threshold to the next, in [0, 100)."""
    current = experience_required(pet.level)
    span = experience_required(pet.level + 1) - current
    percent = math.floor(100 * (pet.experience - current) / span)
    # A freshly minted pet sits below its own level threshold
    return max(0, min(99, percent))


def power_level(pet: Pet) -> int:
    attributes = pet.attributes
    return attributes.strength + attributes.agility + attributes.intelligence + attributes.stamina


def can_level_up(pet: Pet) -> bool:
    return pet.experience >= experience_required(pet.level + 1)


def next_level_requirements(level: int) -> NextLevelRequirements:
    """Absolute experience for ``level + 1`` plus advisory effort estimates."""
    required = experience_required(level + 1)
    sessions = math.ceil(
        required / Constants.EXPERIENCE_PER_TRAINING_SESSION / Constants.TRAINING_SESSIONS_PER_BATCH
    )
    return NextLevelRequirements(
        experience_required=required,
        training_sessions_needed=sessions,
        estimated_days=math.ceil(required / Constants.EXPERIENCE_PER_DAY),
    )


def status_effects(pet: Pet, now: datetime, *, hunger_threshold_hours: float = HOURS_BEFORE_HUNGRY) -> list[str]:
    """Derive qualitative status tags from vitality stats at ``now``."""
    effects: list[str] = []

    if pet.happiness >= Constants.VERY_HAPPY_THRESHOLD:
        effects.append("Very Happy")
    elif pet.happiness >= Constants.HAPPY_THRESHOLD:
        effects.append("Happy")
    elif pet.happiness <= Constants.SAD_THRESHOLD:
        effects.append("Sad")

    if pet.energy >= Constants.ENERGETIC_THRESHOLD:
        effects.append("Energetic")
    elif pet.energy <= Constants.TIRED_THRESHOLD:
        effects.append("Tired")

    if pet.health == Constants.STAT_MAX:
        effects.append("Healthy")
    elif pet.health <= Constants.NEEDS_CARE_THRESHOLD:
        effects.append("Needs Care")

    if now - pet.last_fed > timedelta(hours=hunger_threshold_hours):
        effects.append("Hungry")

    return effects


def species_type_number(species: PetSpecies) -> int:
    return SPECIES_TYPE_NUMBERS.get(species, SPECIES_TYPE_NUMBERS[PetSpecies.UNKNOWN])


def skill_for_level(species: PetSpecies, level: int) -> str | None:
    schedule = SKILL_SCHEDULE.get(species)
    if schedule is None:
        return None
    return schedule.get(level)


def grow_attributes(attributes: PetAttributes, rng: random.Random) -> PetAttributes:
    """Raise each attribute by an independent draw from the increase choices."""
    grown = {
        name: clamp_stat(getattr(attributes, name) + rng.choice(Constants.ATTRIBUTE_INCREASE_CHOICES))
        for name in PetAttributes.NAMES
    }
    return PetAttributes(**grown)


@dataclass
class LevelUpOutcome:
    """Result of running the level-up pass on a pet copy."""

    pet: Pet
    levels_gained: int = 0
    new_skills: list[str] = field(default_factory=list)


def gain_experience(pet: Pet, delta: int, *, rng: random.Random, now: datetime) -> LevelUpOutcome:
    """Add ``delta`` experience and level up until the pet is no longer under-leveled.

    Returns a new pet; the argument is left untouched.
    """
    if delta < 0:
        msg = f"Experience delta must be non-negative, got {delta}"
        raise ValueError(msg)

    updated = pet.model_copy(deep=True)
    updated.experience += delta
    outcome = LevelUpOutcome(pet=updated)

    while updated.experience >= experience_required(updated.level + 1):
        updated.level += 1
        updated.last_level_up = now
        updated.attributes = grow_attributes(updated.attributes, rng)
        outcome.levels_gained += 1

        skill = skill_for_level(updated.species, updated.level)
        if skill is not None and skill not in updated.skills:
            updated.skills.append(skill)
            outcome.new_skills.append(skill)

    updated.experience_to_next_level = experience_required(updated.level + 1) - updated.experience
    return outcome


def apply_action_effects(pet: Pet, action: PetAction, now: datetime) -> None:
    """Apply a care action's fixed vitality deltas in place."""
    happiness, energy, health = ACTION_EFFECTS[action]
    pet.happiness = clamp_stat(pet.happiness + happiness)
    pet.energy = clamp_stat(pet.energy + energy)
    pet.health = clamp_stat(pet.health + health)

    if action == PetAction.FEED:
        pet.last_fed = now
    elif action == PetAction.PLAY:
        pet.last_played = now


def build_pet_view(
    pet: Pet,
    now: datetime,
    *,
    hunger_threshold_hours: float = HOURS_BEFORE_HUNGRY,
) -> PetView:
    """Attach derived progression fields to a pet snapshot."""
    return PetView(
        **pet.model_dump(),
        level_progress=level_progress(pet),
        power_level=power_level(pet),
        next_level_requirements=next_level_requirements(pet.level),
        status_effects=status_effects(pet, now, hunger_threshold_hours=hunger_threshold_hours),
        can_level_up=can_level_up(pet),
        type_number=species_type_number(pet.species),
        total_experience=pet.experience,
    )
