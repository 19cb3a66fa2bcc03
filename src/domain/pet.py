"""Pet domain models, enums and static species tables."""

from datetime import UTC, datetime
from enum import StrEnum
from types import MappingProxyType
from typing import ClassVar

from pydantic import BaseModel, Field, field_validator

from src.core.config import Constants


class PetSpecies(StrEnum):
    """Species tag of a pet. Unrecognised tags fall back to UNKNOWN."""

    DRAGON = "Dragon"
    CAT = "Cat"
    DOG = "Dog"
    BIRD = "Bird"
    UNKNOWN = "Unknown"

    @classmethod
    def from_value(cls, value: "str | PetSpecies") -> "PetSpecies":
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        for member in cls:
            if member.value.lower() == normalized:
                return member
        return cls.UNKNOWN


class PetRarity(StrEnum):
    """Rarity tag assigned at mint time."""

    COMMON = "Common"
    UNCOMMON = "Uncommon"
    RARE = "Rare"
    EPIC = "Epic"
    LEGENDARY = "Legendary"


class PetAction(StrEnum):
    """Care actions that can accompany an experience gain."""

    FEED = "feed"
    PLAY = "play"
    TRAIN = "train"
    REST = "rest"


# Species x level -> skill unlocked on reaching that level
SKILL_SCHEDULE: MappingProxyType[PetSpecies, MappingProxyType[int, str]] = MappingProxyType(
    {
        PetSpecies.DRAGON: MappingProxyType(
            {5: "Fire Breath", 10: "Flight", 15: "Treasure Hunting", 20: "Battle Roar", 25: "Dragon Rage"}
        ),
        PetSpecies.CAT: MappingProxyType(
            {3: "Stealth", 6: "Climbing", 9: "Night Vision", 12: "Hunting Instinct", 15: "Acrobatics"}
        ),
        PetSpecies.DOG: MappingProxyType(
            {3: "Fetch", 6: "Guard", 9: "Tracking", 12: "Loyalty Boost", 15: "Pack Leader"}
        ),
        PetSpecies.BIRD: MappingProxyType(
            {3: "Flight", 6: "Dive Attack", 9: "Weather Sense", 12: "Swift Escape", 15: "Air Mastery"}
        ),
    }
)

# Numeric species code consumed by the mint collaborator
SPECIES_TYPE_NUMBERS: MappingProxyType[PetSpecies, int] = MappingProxyType(
    {
        PetSpecies.DRAGON: 1,
        PetSpecies.CAT: 2,
        PetSpecies.DOG: 3,
        PetSpecies.BIRD: 4,
        PetSpecies.UNKNOWN: 0,
    }
)

# (happiness, energy, health) deltas per care action
ACTION_EFFECTS: MappingProxyType[PetAction, tuple[int, int, int]] = MappingProxyType(
    {
        PetAction.FEED: (10, 20, 5),
        PetAction.PLAY: (15, -10, 0),
        PetAction.TRAIN: (5, -20, 0),
        PetAction.REST: (0, 30, 10),
    }
)


def clamp_stat(value: int) -> int:
    """Clamp an attribute or vitality value to the allowed range."""
    return max(Constants.STAT_MIN, min(Constants.STAT_MAX, value))


class PetAttributes(BaseModel):
    """Four growth attributes, each within [0, 100]."""

    strength: int = Field(default=10, ge=0, le=100)
    agility: int = Field(default=10, ge=0, le=100)
    intelligence: int = Field(default=10, ge=0, le=100)
    stamina: int = Field(default=10, ge=0, le=100)

    NAMES: ClassVar[tuple[str, ...]] = ("strength", "agility", "intelligence", "stamina")


class Pet(BaseModel):
    """Pet data transfer object."""

    token_id: str = Field(..., description="Unique token identifier")
    owner: str = Field(..., description="Owning account identifier")
    name: str = Field(..., description="Display name")
    species: PetSpecies = Field(default=PetSpecies.UNKNOWN, description="Species tag")
    level: int = Field(default=1, ge=1, description="Current level")
    experience: int = Field(default=0, ge=0, description="Cumulative experience")
    experience_to_next_level: int = Field(default=0, ge=0, description="Experience missing for the next level")
    rarity: PetRarity = Field(default=PetRarity.COMMON, description="Rarity tag")
    attributes: PetAttributes = Field(default_factory=PetAttributes)
    skills: list[str] = Field(default_factory=list, description="Unlocked skills in unlock order")
    happiness: int = Field(default=50, ge=0, le=100)
    energy: int = Field(default=50, ge=0, le=100)
    health: int = Field(default=100, ge=0, le=100)
    created_at: datetime = Field(..., description="Mint timestamp")
    last_fed: datetime = Field(..., description="Last feeding timestamp")
    last_played: datetime = Field(..., description="Last play timestamp")
    last_level_up: datetime | None = Field(default=None, description="Last level-up timestamp")
    achievements: list[str] = Field(default_factory=list, description="Earned achievement names")

    @field_validator("species", mode="before")
    @classmethod
    def _coerce_species(cls, value: object) -> PetSpecies:
        return PetSpecies.from_value(str(value))

    @field_validator("skills")
    @classmethod
    def _unique_skills(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))

    @field_validator("created_at", "last_fed", "last_played", "last_level_up")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        # Naive timestamps are taken to be UTC.
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value
