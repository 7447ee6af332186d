"""FastAPI dependency injection — wires adapters into use cases."""

from __future__ import annotations

import logging

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from autocrm.adapters.llm.openai_adapter import OpenAIActionInterpreter
from autocrm.adapters.llm.openai_transcriber import OpenAITranscriber
from autocrm.adapters.llm.rule_based_interpreter import RuleBasedInterpreter
from autocrm.adapters.persistence.database import get_session
from autocrm.adapters.persistence.repositories import (
    SqlActionRecordRepository,
    SqlMessageRepository,
    SqlTicketRepository,
    SqlTransaction,
    SqlUserRepository,
)
from autocrm.application.ports.action_repo import ActionRecordRepository
from autocrm.application.ports.llm_port import ActionInterpreterPort
from autocrm.application.ports.message_repo import MessageRepository
from autocrm.application.ports.ticket_repo import TicketRepository
from autocrm.application.ports.transaction_port import TransactionPort
from autocrm.application.ports.transcription_port import TranscriptionPort
from autocrm.application.ports.user_repo import UserRepository
from autocrm.application.use_cases.decide_action import DecideActionUseCase
from autocrm.application.use_cases.execute_action import ActionExecutor
from autocrm.application.use_cases.list_actions import ActionHistoryUseCase
from autocrm.application.use_cases.manage_preferences import ManagePreferencesUseCase
from autocrm.application.use_cases.resolve_customer import CustomerResolver
from autocrm.application.use_cases.submit_action import SubmitActionUseCase
from autocrm.application.use_cases.transcribe_audio import TranscribeAudioUseCase
from autocrm.config import is_openai_key_configured, settings

logger = logging.getLogger(__name__)


# Singleton adapters (stateless)
if is_openai_key_configured(settings.openai_api_key):
    _interpreter: ActionInterpreterPort = OpenAIActionInterpreter()
else:
    logger.warning("OPENAI_API_KEY is not set (or placeholder). Using rule-based interpreter.")
    _interpreter = RuleBasedInterpreter()

_transcriber = OpenAITranscriber()


def get_interpreter() -> ActionInterpreterPort:
    return _interpreter


def get_transcriber() -> TranscriptionPort:
    return _transcriber


def get_user_repo(session: AsyncSession = Depends(get_session)) -> UserRepository:
    return SqlUserRepository(session)


def get_ticket_repo(session: AsyncSession = Depends(get_session)) -> TicketRepository:
    return SqlTicketRepository(session)


def get_message_repo(session: AsyncSession = Depends(get_session)) -> MessageRepository:
    return SqlMessageRepository(session)


def get_action_repo(session: AsyncSession = Depends(get_session)) -> ActionRecordRepository:
    return SqlActionRecordRepository(session)


def get_transaction(session: AsyncSession = Depends(get_session)) -> TransactionPort:
    return SqlTransaction(session)


def get_executor(
    ticket_repo: TicketRepository = Depends(get_ticket_repo),
    message_repo: MessageRepository = Depends(get_message_repo),
    action_repo: ActionRecordRepository = Depends(get_action_repo),
    transactions: TransactionPort = Depends(get_transaction),
) -> ActionExecutor:
    return ActionExecutor(
        ticket_repo=ticket_repo,
        message_repo=message_repo,
        action_repo=action_repo,
        transactions=transactions,
    )


def get_submit_action_uc(
    interpreter: ActionInterpreterPort = Depends(get_interpreter),
    executor: ActionExecutor = Depends(get_executor),
    user_repo: UserRepository = Depends(get_user_repo),
    ticket_repo: TicketRepository = Depends(get_ticket_repo),
    action_repo: ActionRecordRepository = Depends(get_action_repo),
) -> SubmitActionUseCase:
    return SubmitActionUseCase(
        interpreter=interpreter,
        resolver=CustomerResolver(user_repo, ticket_repo),
        executor=executor,
        user_repo=user_repo,
        ticket_repo=ticket_repo,
        action_repo=action_repo,
        timeout_seconds=settings.llm_timeout_seconds,
        context_limit=settings.recent_tickets_limit,
    )


def get_decide_action_uc(
    executor: ActionExecutor = Depends(get_executor),
    user_repo: UserRepository = Depends(get_user_repo),
    action_repo: ActionRecordRepository = Depends(get_action_repo),
) -> DecideActionUseCase:
    return DecideActionUseCase(user_repo=user_repo, action_repo=action_repo, executor=executor)


def get_history_uc(
    action_repo: ActionRecordRepository = Depends(get_action_repo),
    ticket_repo: TicketRepository = Depends(get_ticket_repo),
) -> ActionHistoryUseCase:
    return ActionHistoryUseCase(action_repo=action_repo, ticket_repo=ticket_repo)


def get_preferences_uc(
    user_repo: UserRepository = Depends(get_user_repo),
) -> ManagePreferencesUseCase:
    return ManagePreferencesUseCase(user_repo)


def get_transcribe_uc(
    transcriber: TranscriptionPort = Depends(get_transcriber),
    user_repo: UserRepository = Depends(get_user_repo),
) -> TranscribeAudioUseCase:
    return TranscribeAudioUseCase(
        transcriber=transcriber,
        user_repo=user_repo,
        timeout_seconds=settings.transcription_timeout_seconds,
    )
