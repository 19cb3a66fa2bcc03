from src.services import (
    pet_service,
    progression,
    query_service,
    task_service,
    task_state_machine,
)


__all__ = [
    "pet_service",
    "progression",
    "query_service",
    "task_service",
    "task_state_machine",
]
