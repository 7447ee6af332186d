"""DecideActionUseCase — explicit approve/reject of a pending ActionRecord."""

from __future__ import annotations

import logging

from autocrm.application.ports.action_repo import ActionRecordRepository
from autocrm.application.ports.user_repo import UserRepository
from autocrm.application.use_cases.execute_action import ActionExecutor, ExecutionResult
from autocrm.domain.errors import (
    ActionNotFoundError,
    ActionNotPendingError,
    UserNotFoundError,
)
from autocrm.domain.policies.action_lifecycle import transition
from autocrm.domain.policies.approval_gate import ensure_can_decide
from autocrm.domain.value_objects.enums import ActionStatus

logger = logging.getLogger(__name__)


class DecideActionUseCase:
    def __init__(
        self,
        user_repo: UserRepository,
        action_repo: ActionRecordRepository,
        executor: ActionExecutor,
    ):
        self._users = user_repo
        self._actions = action_repo
        self._executor = executor

    async def execute(self, action_id: str, user_id: str, approve: bool) -> ExecutionResult:
        """Approve (and run) or reject *action_id*.

        Rejection never touches the ticket. Approval executes straight away;
        an execution failure is reported through the returned status, not
        raised.

        Raises:
            UserNotFoundError / ActionNotFoundError: unknown ids.
            AuthorizationError: the user may not decide this record.
            ActionNotPendingError: the record was already decided.
        """
        user = await self._users.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(f"User not found: {user_id}")

        record = await self._actions.get_by_id(action_id, for_update=True)
        if record is None:
            raise ActionNotFoundError(f"Action not found: {action_id}")

        ensure_can_decide(user, record)

        if not record.is_pending():
            raise ActionNotPendingError(
                f"Action is not pending (current status: {record.status.value})"
            )

        if not approve:
            transition(record, ActionStatus.REJECTED, decided_by=user.id)
            await self._actions.update(record)
            logger.info("Action %s rejected by %s", record.id, user.id)
            return ExecutionResult(record.id, ActionStatus.REJECTED)

        transition(record, ActionStatus.APPROVED, decided_by=user.id)
        await self._actions.update(record)
        logger.info("Action %s approved by %s", record.id, user.id)
        return await self._executor.execute(record)
