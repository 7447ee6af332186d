"""OpenAI adapter — implements ActionInterpreterPort with function calling."""

from __future__ import annotations

import json
import logging

from openai import AsyncOpenAI, OpenAIError

from autocrm.adapters.llm.schemas import FUNCTION_NAME, FUNCTION_SCHEMA, parse_interpretation
from autocrm.application.ports.llm_port import ActionInterpreterPort, InterpretationContext
from autocrm.config import settings
from autocrm.domain.entities.structured_action import StructuredAction
from autocrm.domain.errors import InterpretationError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """\
You are an AI assistant helping service representatives manage tickets in an \
equipment repair CRM system.

Your task is to turn the service representative's input into structured ticket \
actions by calling the function {function_name}.

Available actions:
1. add_note: add an internal or customer-visible note
2. update_status: change the ticket status
3. update_tags: add or remove tags
4. assign_ticket: assign the ticket to a service representative

For every instruction in the input:
- Identify the customer exactly as the representative referred to them and put it \
in customer_name (full name, first name, "Mr. Smith", or a description such as \
"the guy with the broken forklift"). Do not invent names.
- Put equipment or issue words that identify the ticket (forklift, hydraulic, \
conveyor, ...) in ticket_keywords.
- Classify the action type.
- Rewrite colloquial note text into a short professional note, keeping every \
concrete fact (parts, measurements, dates, names).
- Notes are internal unless the wording clearly addresses the customer \
("let them know", "tell the customer"); leave is_customer_visible out when unsure.
- Extract tags relevant to the equipment or repair (lowercase, hyphenated).
- Give a confidence score between 0 and 1.

Assignment rules:
- Words like "assign", "give me", "I'll take", "let me handle" are ALWAYS \
assign_ticket.
- For self-assignment set assign_to to "me". For anyone else set assign_to to \
the representative's name as written.
- Add status_update "open" when the ticket is new or unassigned.

Several customers, or several distinct changes for one customer, must produce \
several actions. A note plus a status change for the same customer is two \
actions: add_note and update_status.

Valid statuses: new, open, pending_customer, pending_internal, resolved, closed.

The requesting service representative's id is {user_id}.

Recent tickets (newest first):
{tickets}"""


class OpenAIActionInterpreter(ActionInterpreterPort):
    """OpenAI implementation of ActionInterpreterPort."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        timeout_seconds: float | None = None,
    ):
        self._model = model or settings.openai_model
        self._client = AsyncOpenAI(
            api_key=api_key or settings.openai_api_key,
            timeout=timeout_seconds or settings.llm_timeout_seconds,
            max_retries=0,
        )

    async def interpret(
        self, input_text: str, context: InterpretationContext | None = None
    ) -> list[StructuredAction]:
        """Send the input with the function schema and parse the tool call."""
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=self._build_messages(input_text, context),
                temperature=0,
                tools=[{"type": "function", "function": FUNCTION_SCHEMA}],
                tool_choice={"type": "function", "function": {"name": FUNCTION_NAME}},
            )
        except OpenAIError as e:
            logger.warning("OpenAI call failed: %s", e)
            raise InterpretationError(f"Language model call failed: {e}") from e

        arguments = self._extract_arguments(response)
        actions = parse_interpretation(arguments)
        logger.info(
            "Model %s returned %d action(s): %s",
            self._model, len(actions), ", ".join(a.action_type.value for a in actions),
        )
        return actions

    def _build_messages(
        self, input_text: str, context: InterpretationContext | None
    ) -> list[dict]:
        tickets = []
        user_id = "unknown"
        if context is not None:
            user_id = context.acting_user_id
            tickets = [
                {
                    "id": t.ticket_id,
                    "title": t.title,
                    "status": t.status,
                    "tags": list(t.tags),
                    "customer": t.customer_name,
                    "assigned_to": t.assigned_to,
                }
                for t in context.recent_tickets
            ]
        system = SYSTEM_PROMPT.format(
            function_name=FUNCTION_NAME,
            user_id=user_id,
            tickets=json.dumps(tickets, ensure_ascii=False),
        )
        return [
            {"role": "system", "content": system},
            {"role": "user", "content": input_text},
        ]

    @staticmethod
    def _extract_arguments(response) -> str:
        """Pull the function arguments out of the first tool call."""
        if not response.choices:
            raise InterpretationError("Language model returned no choices")
        message = response.choices[0].message
        for call in message.tool_calls or []:
            if call.function.name == FUNCTION_NAME:
                return call.function.arguments
        raise InterpretationError(
            f"Language model did not call {FUNCTION_NAME}"
        )
