"""Pure state transition functions for task progress lifecycle management."""

import logging
from datetime import datetime

from src.core.config import Constants
from src.core.errors import ErrorCode, InvalidInputError, InvalidTransitionError
from src.domain.task import TaskAction, TaskProgress, TaskStatus


logger = logging.getLogger(__name__)


_OPEN_STATES = frozenset({TaskStatus.NOT_STARTED, TaskStatus.STARTED, TaskStatus.IN_PROGRESS})
_COMPLETED_STATES = frozenset({TaskStatus.COMPLETED_PENDING_REWARD, TaskStatus.COMPLETED_AND_CLAIMED})

# Source states from which each action is allowed
ALLOWED_TRANSITIONS: dict[TaskAction, frozenset[TaskStatus]] = {
    TaskAction.START: _OPEN_STATES,
    TaskAction.UPDATE_PROGRESS: _OPEN_STATES,
    TaskAction.COMPLETE: _OPEN_STATES | _COMPLETED_STATES,
    TaskAction.CLAIM_REWARD: frozenset({TaskStatus.COMPLETED_PENDING_REWARD}),
}


def derive_status(record: TaskProgress | None) -> TaskStatus:
    """Derive the lifecycle state of a progress record. No record means not started."""
    if record is None:
        return TaskStatus.NOT_STARTED
    if record.locked:
        return TaskStatus.LOCKED
    if record.completed:
        return TaskStatus.COMPLETED_AND_CLAIMED if record.reward_claimed else TaskStatus.COMPLETED_PENDING_REWARD
    if record.progress > 0:
        return TaskStatus.IN_PROGRESS
    if record.started_at is not None:
        return TaskStatus.STARTED
    return TaskStatus.NOT_STARTED


def parse_action(action: str | TaskAction) -> TaskAction:
    """Convert a raw action name, rejecting anything outside the declared set."""
    try:
        return TaskAction(action)
    except ValueError as e:
        valid = ", ".join(a.value for a in TaskAction)
        msg = f"Invalid action: {action}. Must be one of: {valid}"
        raise InvalidInputError(msg) from e


def invariant_violations(record: TaskProgress) -> list[str]:
    """List every task progress invariant the record breaks."""
    violations = []
    if record.reward_claimed and not record.completed:
        violations.append("reward claimed on an incomplete task")
    if record.completed and record.progress != Constants.PROGRESS_MAX:
        violations.append("completed task without full progress")
    if record.locked and (record.completed or record.progress != Constants.PROGRESS_MIN):
        violations.append("locked task with progress or completion")
    return violations


def _validated_progress(progress: object) -> int:
    if isinstance(progress, bool) or not isinstance(progress, int):
        msg = f"Progress must be an integer percentage, got {progress!r}"
        raise InvalidInputError(msg)
    if not Constants.PROGRESS_MIN <= progress <= Constants.PROGRESS_MAX:
        msg = f"Progress must be between {Constants.PROGRESS_MIN} and {Constants.PROGRESS_MAX}, got {progress}"
        raise InvalidInputError(msg)
    return progress


def _guard(action: TaskAction, status: TaskStatus, task_id: str) -> None:
    if status in ALLOWED_TRANSITIONS[action]:
        return

    if status == TaskStatus.LOCKED:
        msg = f"Cannot {action}: task {task_id} is locked"
        raise InvalidTransitionError(msg, code=ErrorCode.ERR_TASK_LOCKED)
    if action == TaskAction.CLAIM_REWARD:
        if status == TaskStatus.COMPLETED_AND_CLAIMED:
            msg = f"Cannot claim reward: reward for task {task_id} already claimed"
            raise InvalidTransitionError(msg, code=ErrorCode.ERR_REWARD_ALREADY_CLAIMED)
        msg = f"Cannot claim reward: task {task_id} is not completed"
        raise InvalidTransitionError(msg)

    msg = f"Cannot {action}: task {task_id} is in {status} state"
    raise InvalidTransitionError(msg)


def transition(
    record: TaskProgress | None,
    action: str | TaskAction,
    *,
    now: datetime,
    progress: object = None,
    task_id: str = "",
) -> TaskProgress:
    """Apply ``action`` to a progress record and return the next record.

    The input record is never modified. Guards run before payload validation,
    so a locked or completed task rejects progress updates whatever the payload.

    Raises:
        InvalidInputError: Unknown action or progress outside [0, 100]
        InvalidTransitionError: Action not allowed from the current state
    """
    parsed = parse_action(action)
    status = derive_status(record)
    _guard(parsed, status, task_id)

    updated = record.model_copy(deep=True) if record is not None else TaskProgress()

    if parsed == TaskAction.START:
        updated.started_at = now
        updated.progress = Constants.PROGRESS_MIN
        updated.completed = False
    elif parsed == TaskAction.UPDATE_PROGRESS:
        updated.progress = _validated_progress(progress)
        updated.last_updated = now
        if updated.progress >= Constants.PROGRESS_MAX:
            updated.completed = True
            updated.completed_at = now
    elif parsed == TaskAction.COMPLETE:
        updated.completed = True
        updated.completed_at = now
        updated.progress = Constants.PROGRESS_MAX
    elif parsed == TaskAction.CLAIM_REWARD:
        updated.reward_claimed = True
        updated.reward_claimed_at = now

    violations = invariant_violations(updated)
    if violations:
        msg = f"Cannot {parsed}: task {task_id} would break invariants: {'; '.join(violations)}"
        raise InvalidTransitionError(msg)

    logger.debug(
        "Task transition",
        extra={"task_id": task_id, "action": parsed.value, "from": status.value, "to": derive_status(updated).value},
    )
    return updated
