"""SubmitActionUseCase — free text → interpreted, resolved, recorded actions.

Pipeline:
1. Check the submitter (service representatives only)
2. Interpret the text (bounded by a timeout)
3. Resolve every action to a ticket (nothing is written if one fails)
4. Persist one pending ActionRecord per action
5. Execute immediately when the user does not require approval
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from autocrm.application.ports.action_repo import ActionRecordRepository
from autocrm.application.ports.llm_port import (
    ActionInterpreterPort,
    InterpretationContext,
    TicketContext,
)
from autocrm.application.ports.ticket_repo import TicketRepository
from autocrm.application.ports.user_repo import UserRepository
from autocrm.application.use_cases.execute_action import ActionExecutor, ExecutionResult
from autocrm.application.use_cases.resolve_customer import CustomerResolver
from autocrm.domain.entities.action_record import ActionRecord
from autocrm.domain.entities.structured_action import StructuredAction
from autocrm.domain.entities.ticket import Ticket
from autocrm.domain.entities.user import UserProfile
from autocrm.domain.errors import (
    ActionValidationError,
    AmbiguousMatchError,
    AuthorizationError,
    InterpretationError,
    UserNotFoundError,
)
from autocrm.domain.policies.approval_gate import should_auto_execute
from autocrm.domain.policies.customer_matching import match_people
from autocrm.domain.policies.note_visibility import resolve_note_visibility
from autocrm.domain.value_objects.enums import ActionType, UserRole

logger = logging.getLogger(__name__)

SELF_REFERENCES = frozenset({"me", "myself", "self", "i", "mine"})


@dataclass
class SubmissionResult:
    """Everything the caller needs to render the outcome of one submission."""

    records: list[ActionRecord]
    actions: list[StructuredAction]
    requires_approval: bool
    executions: list[ExecutionResult] = field(default_factory=list)

    @property
    def parsed_result(self) -> list[dict]:
        return [a.to_payload() for a in self.actions]


class SubmitActionUseCase:
    """Orchestrates interpretation, resolution and record creation."""

    def __init__(
        self,
        interpreter: ActionInterpreterPort,
        resolver: CustomerResolver,
        executor: ActionExecutor,
        user_repo: UserRepository,
        ticket_repo: TicketRepository,
        action_repo: ActionRecordRepository,
        timeout_seconds: float = 30.0,
        context_limit: int = 20,
    ):
        self._interpreter = interpreter
        self._resolver = resolver
        self._executor = executor
        self._users = user_repo
        self._tickets = ticket_repo
        self._actions = action_repo
        self._timeout = timeout_seconds
        self._context_limit = context_limit

    async def execute(self, input_text: str, user_id: str) -> SubmissionResult:
        """Submit *input_text* on behalf of *user_id*.

        Raises:
            UserNotFoundError: unknown submitter.
            AuthorizationError: the submitter is not a service representative.
            ActionValidationError: blank input, or an unusable assignee.
            InterpretationError: the interpreter failed or timed out.
            ResolutionError: an action could not be tied to exactly one ticket.
        """
        user = await self._users.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(f"User not found: {user_id}")
        if not user.can_submit_actions():
            raise AuthorizationError("Only service representatives can submit AI actions")

        text = (input_text or "").strip()
        if not text:
            raise ActionValidationError("input_text must not be empty")

        logger.info("Submission from %s (%d chars)", user.id, len(text))

        context = await self._build_context(user.id)
        actions = await self._interpret(text, context)
        logger.info("Interpreted %d action(s) for %s", len(actions), user.id)

        planned: list[tuple[StructuredAction, Ticket]] = []
        for action in actions:
            ticket = await self._resolver.resolve(
                action.customer_name, user.id, action.ticket_keywords
            )
            if action.action_type == ActionType.ADD_NOTE:
                action.is_customer_visible = resolve_note_visibility(
                    action, user.ai_preferences
                )
            if action.action_type == ActionType.ASSIGN_TICKET:
                action.assign_to = await self._resolve_assignee(action.assign_to, user)
            planned.append((action, ticket))

        records: list[ActionRecord] = []
        for action, ticket in planned:
            record = ActionRecord(
                id=None,
                user_id=user.id,
                ticket_id=ticket.id,
                input_text=input_text,
                action_type=action.action_type.value,
                interpreted_action=action.to_payload(),
            )
            record.requires_approval = not should_auto_execute(record, user.ai_preferences)
            record = await self._actions.save(record)
            logger.info(
                "Created action %s (%s) on ticket %s, requires_approval=%s",
                record.id, record.action_type, record.ticket_id, record.requires_approval,
            )
            records.append(record)

        requires_approval = user.ai_preferences.require_approval
        executions: list[ExecutionResult] = []
        for record in records:
            if not record.requires_approval:
                executions.append(await self._executor.execute(record))

        return SubmissionResult(
            records=records,
            actions=[a for a, _ in planned],
            requires_approval=requires_approval,
            executions=executions,
        )

    async def _build_context(self, acting_user_id: str) -> InterpretationContext:
        tickets = await self._tickets.get_recent(self._context_limit)
        customer_ids = sorted({t.customer_id for t in tickets if t.customer_id})
        names = {u.id: u.full_name for u in await self._users.get_by_ids(customer_ids)}
        return InterpretationContext(
            acting_user_id=acting_user_id,
            recent_tickets=tuple(
                TicketContext(
                    ticket_id=t.id,
                    title=t.title,
                    status=t.status.value,
                    tags=tuple(sorted(t.tags)),
                    customer_name=names.get(t.customer_id, "Unknown"),
                    assigned_to=t.assigned_to,
                )
                for t in tickets
            ),
        )

    async def _interpret(
        self, text: str, context: InterpretationContext
    ) -> list[StructuredAction]:
        try:
            actions = await asyncio.wait_for(
                self._interpreter.interpret(text, context), timeout=self._timeout
            )
        except asyncio.TimeoutError:
            logger.warning("Interpretation timed out after %.1fs", self._timeout)
            raise InterpretationError(
                f"Interpretation timed out after {self._timeout:g} seconds"
            ) from None
        except InterpretationError as e:
            logger.warning("Interpretation failed: %s", e)
            raise
        except Exception as e:
            logger.warning("Interpreter raised %s: %s", e.__class__.__name__, e)
            raise InterpretationError(f"Interpretation failed: {e}") from e

        if not actions:
            raise InterpretationError("No actionable instruction found in the input")
        return list(actions)

    async def _resolve_assignee(self, raw: str | None, user: UserProfile) -> str:
        """Map an interpreted ``assign_to`` onto a user id."""
        value = (raw or "").strip()
        if not value or value.casefold() in SELF_REFERENCES or value == user.id:
            return user.id

        existing = await self._users.get_by_id(value)
        if existing is not None:
            if not existing.can_manage_tickets():
                raise ActionValidationError(
                    f"Cannot assign a ticket to {existing.full_name}: "
                    f"not a service representative"
                )
            return existing.id

        staff = await self._users.get_by_role(UserRole.SERVICE_REP)
        staff += await self._users.get_by_role(UserRole.ADMIN)
        match = match_people(value, staff)
        if match is None:
            raise ActionValidationError(f"No service representative found matching: {value}")
        if len(match.people) > 1:
            names = sorted(p.full_name for p in match.people)
            raise AmbiguousMatchError(
                f"'{value}' matches several representatives: {', '.join(names)}", names
            )
        return match.people[0].id
