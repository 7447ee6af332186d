"""Pytest configuration and shared fixtures."""

import pytest

from autocrm.domain.entities.preferences import UserAIPreferences
from autocrm.domain.value_objects.enums import NoteVisibility, TicketStatus, UserRole
from tests.fakes import World


@pytest.fixture
def world():
    return World()


@pytest.fixture
def crm(world):
    """Customers with equipment tickets, three reps and an admin.

    carol: service rep, approval required (the default)
    david: service rep, no approval, voice input on
    frank: service rep, notes customer-visible by default
    eva: admin
    """
    world.add_user("carol", "Carol Service", UserRole.SERVICE_REP)
    world.add_user(
        "david",
        "David Service",
        UserRole.SERVICE_REP,
        UserAIPreferences(require_approval=False, enable_voice_input=True),
    )
    world.add_user(
        "frank",
        "Frank Tech",
        UserRole.SERVICE_REP,
        UserAIPreferences(default_note_visibility=NoteVisibility.CUSTOMER),
    )
    world.add_user("eva", "Eva Admin", UserRole.ADMIN)

    world.add_user("jack", "Jack Smith")
    world.add_user("jane", "Jane Doe")
    world.add_user("john", "John Warehouse")
    world.add_user("sarah", "Sarah Builder")

    world.add_ticket(
        "t-jack-forklift",
        "jack",
        "Forklift hydraulic leak",
        tags={"forklift", "hydraulic"},
        status=TicketStatus.OPEN,
        age_hours=1,
    )
    world.add_ticket(
        "t-jack-old",
        "jack",
        "Old conveyor inspection",
        tags={"conveyor"},
        status=TicketStatus.CLOSED,
        age_hours=48,
    )
    world.add_ticket(
        "t-jane-printer",
        "jane",
        "Label printer jams",
        tags={"printer"},
        status=TicketStatus.NEW,
        age_hours=2,
    )
    world.add_ticket(
        "t-john-reach",
        "john",
        "Reach truck maintenance",
        tags={"reach-truck", "maintenance"},
        status=TicketStatus.OPEN,
        age_hours=3,
    )
    world.add_ticket(
        "t-sarah-excavator",
        "sarah",
        "CAT excavator won't start",
        tags={"excavator", "electrical"},
        status=TicketStatus.NEW,
        age_hours=4,
    )
    return world


@pytest.fixture
def sample_input():
    return "Add a note to Jack Smith's ticket that the replacement pump ships Friday"
