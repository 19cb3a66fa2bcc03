"""Pytest configuration and fixtures for unit tests."""

from datetime import UTC, datetime, timedelta

import pytest

from src.domain.catalog import TaskCatalog
from src.domain.pet import Pet, PetAttributes, PetRarity, PetSpecies
from src.repositories.memory import InMemoryPetRepository, InMemoryTaskRepository
from src.services.pet_service import PetStore
from src.services.task_service import TaskStore
from tests.unit.mocks import FixedChoiceRandom


FIXED_NOW = datetime(2025, 8, 10, 12, 0, tzinfo=UTC)
OWNER = "0xOwnerA"
USER = "0xUserA"


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def clock():
    """Clock that always returns FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def rng() -> FixedChoiceRandom:
    """Random source that always picks the largest attribute increase (3)."""
    return FixedChoiceRandom(-1)


@pytest.fixture
def make_pet():
    """Factory for pets fed an hour before FIXED_NOW."""

    def _make_pet(**overrides) -> Pet:
        data = {
            "token_id": "pet_001",
            "owner": OWNER,
            "name": "Ember",
            "species": PetSpecies.DRAGON,
            "level": 1,
            "experience": 0,
            "experience_to_next_level": 400,
            "rarity": PetRarity.COMMON,
            "attributes": PetAttributes(strength=50, agility=50, intelligence=50, stamina=50),
            "happiness": 60,
            "energy": 60,
            "health": 80,
            "created_at": FIXED_NOW - timedelta(days=10),
            "last_fed": FIXED_NOW - timedelta(hours=1),
            "last_played": FIXED_NOW - timedelta(hours=1),
        }
        data.update(overrides)
        return Pet(**data)

    return _make_pet


@pytest.fixture
def pet_repository() -> InMemoryPetRepository:
    return InMemoryPetRepository()


@pytest.fixture
def task_repository() -> InMemoryTaskRepository:
    return InMemoryTaskRepository()


@pytest.fixture
def catalog() -> TaskCatalog:
    return TaskCatalog()


@pytest.fixture
def pet_store(pet_repository, rng, clock) -> PetStore:
    return PetStore(pet_repository, rng=rng, clock=clock)


@pytest.fixture
def task_store(task_repository, catalog, clock) -> TaskStore:
    return TaskStore(task_repository, catalog, clock=clock)
