"""Construction of the engine's stores for the lifetime of the service."""

import logging
from dataclasses import dataclass

from src.core import schema
from src.core.config import Settings
from src.core.seed import seed_demo_data
from src.domain.catalog import TaskCatalog
from src.repositories.base import PetRepository, TaskRepository
from src.repositories.memory import InMemoryPetRepository, InMemoryTaskRepository
from src.repositories.sqlite import SqlitePetRepository, SqliteTaskRepository
from src.services.pet_service import PetStore
from src.services.task_service import TaskStore


logger = logging.getLogger(__name__)


@dataclass
class Engine:
    """Stores and their repositories, built once at startup and passed explicitly."""

    pet_store: PetStore
    task_store: TaskStore
    pet_repository: PetRepository
    task_repository: TaskRepository
    catalog: TaskCatalog


def build_engine(app_settings: Settings, *, catalog: TaskCatalog | None = None) -> Engine:
    """Build repositories for the configured backend and the stores over them."""
    pet_repository: PetRepository
    task_repository: TaskRepository
    if app_settings.storage_backend == "sqlite":
        pet_repository = SqlitePetRepository(db_path=app_settings.sqlite_db_path)
        task_repository = SqliteTaskRepository(db_path=app_settings.sqlite_db_path)
    else:
        pet_repository = InMemoryPetRepository()
        task_repository = InMemoryTaskRepository()

    task_catalog = catalog or TaskCatalog()
    engine = Engine(
        pet_store=PetStore.from_settings(pet_repository, app_settings),
        task_store=TaskStore(task_repository, task_catalog),
        pet_repository=pet_repository,
        task_repository=task_repository,
        catalog=task_catalog,
    )
    logger.info(
        "Engine built",
        extra={"storage_backend": app_settings.storage_backend, "catalog_size": len(task_catalog)},
    )
    return engine


async def start_engine(engine: Engine, app_settings: Settings) -> None:
    """Prepare storage and optionally load demo data."""
    if app_settings.storage_backend == "sqlite":
        await schema.init_db(db_path=app_settings.sqlite_db_path)

    if app_settings.seed_demo_data:
        await seed_demo_data(engine)
