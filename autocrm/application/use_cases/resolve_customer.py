"""CustomerResolver — free-text person/equipment mention → one ticket."""

from __future__ import annotations

import logging

from autocrm.application.ports.ticket_repo import TicketRepository
from autocrm.application.ports.user_repo import UserRepository
from autocrm.domain.entities.ticket import Ticket
from autocrm.domain.errors import (
    AmbiguousMatchError,
    CustomerNotFoundError,
    TicketNotFoundError,
)
from autocrm.domain.policies.customer_matching import (
    Ambiguous,
    NotFound,
    Resolved,
    ResolutionResult,
    is_indirect_mention,
    match_people,
    mention_keywords,
    select_ticket,
    select_ticket_among_customers,
    select_ticket_by_keywords,
    split_mention,
)
from autocrm.domain.value_objects.enums import UserRole

logger = logging.getLogger(__name__)


class CustomerResolver:
    """Finds the ticket an instruction is about."""

    def __init__(self, user_repo: UserRepository, ticket_repo: TicketRepository):
        self._users = user_repo
        self._tickets = ticket_repo

    async def lookup(
        self,
        mention: str | None,
        acting_user_id: str,
        keywords: list[str] | tuple[str, ...] = (),
    ) -> ResolutionResult:
        """Resolve without raising; callers can branch on the result variant.

        Args:
            mention: the customer reference as extracted from the input.
            acting_user_id: the representative asking; used as the last
                tiebreak (a ticket already assigned to them wins).
            keywords: equipment/issue words that favour matching tickets.
        """
        keywords = [k for k in keywords if k and k.strip()]
        name, descriptors = split_mention(mention)
        keywords += [k for k in descriptors if k not in keywords]

        match = None
        if name:
            customers = await self._users.get_by_role(UserRole.CUSTOMER)
            match = match_people(name, customers)

        if match is None:
            if not is_indirect_mention(mention):
                return NotFound("customer", f"No customer found matching: {mention}")
            search = keywords + [k for k in mention_keywords(mention) if k not in keywords]
            if not search:
                return NotFound("customer", f"No customer or equipment reference in: {mention!r}")
            result = select_ticket_by_keywords(
                await self._tickets.get_open(), search, acting_user_id
            )
            logger.info("Indirect mention %r → %s", mention, type(result).__name__)
            return result

        tickets = await self._tickets.get_by_customers([c.id for c in match.people])

        if len(match.people) == 1:
            customer = match.people[0]
            result = select_ticket(tickets, keywords, acting_user_id)
            if isinstance(result, Resolved):
                logger.info(
                    "Mention %r → customer %s (%s) → ticket %s",
                    mention, customer.full_name, match.tier, result.ticket.id,
                )
                return Resolved(result.ticket, customer, result.reason)
            if isinstance(result, NotFound):
                return NotFound(
                    "ticket", f"No recent tickets found for customer: {customer.full_name}"
                )
            return Ambiguous(
                result.candidates,
                f"{customer.full_name} has several open tickets that match equally well",
            )

        tiebreak = select_ticket_among_customers(tickets, keywords)
        if tiebreak is not None:
            customer = next(
                (c for c in match.people if c.id == tiebreak.ticket.customer_id), None
            )
            return Resolved(tiebreak.ticket, customer, tiebreak.reason)

        names = tuple(sorted(c.full_name for c in match.people))
        return Ambiguous(names, f"'{mention}' matches several customers: {', '.join(names)}")

    async def resolve(
        self,
        mention: str | None,
        acting_user_id: str,
        keywords: list[str] | tuple[str, ...] = (),
    ) -> Ticket:
        """Resolve to exactly one ticket.

        Raises:
            CustomerNotFoundError: no customer profile matches.
            TicketNotFoundError: a customer matched but has no eligible ticket.
            AmbiguousMatchError: several equally strong candidates remain.
        """
        result = await self.lookup(mention, acting_user_id, keywords)
        if isinstance(result, Resolved):
            return result.ticket
        if isinstance(result, Ambiguous):
            raise AmbiguousMatchError(result.reason, list(result.candidates))
        if result.kind == "customer":
            raise CustomerNotFoundError(result.reason)
        raise TicketNotFoundError(result.reason)
