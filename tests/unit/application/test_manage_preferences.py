"""Tests for preference management and action history."""

import pytest

from autocrm.application.use_cases.list_actions import ActionHistoryUseCase
from autocrm.application.use_cases.manage_preferences import ManagePreferencesUseCase
from autocrm.domain.entities.preferences import UserAIPreferences
from autocrm.domain.entities.structured_action import StructuredAction
from autocrm.domain.errors import UserNotFoundError
from autocrm.domain.value_objects.enums import ActionType, NoteVisibility
from tests.fakes import FakeInterpreter


def _note(customer):
    return StructuredAction(
        action_type=ActionType.ADD_NOTE,
        customer_name=customer,
        note_content="checked in",
        confidence_score=0.9,
    )


@pytest.mark.asyncio
async def test_get_defaults(crm):
    prefs = await ManagePreferencesUseCase(crm.users).get("carol")
    assert prefs == UserAIPreferences()


@pytest.mark.asyncio
async def test_update_persists(crm):
    uc = ManagePreferencesUseCase(crm.users)
    new = UserAIPreferences(
        require_approval=False,
        enable_voice_input=True,
        default_note_visibility=NoteVisibility.CUSTOMER,
    )
    await uc.update("carol", new)
    assert await uc.get("carol") == new


@pytest.mark.asyncio
async def test_patch_keeps_fields_not_given(crm):
    uc = ManagePreferencesUseCase(crm.users)
    before = await uc.get("david")
    saved = await uc.patch("david", {"enableVoiceInput": False})
    assert saved.enable_voice_input is False
    assert saved.require_approval is False
    assert saved.default_note_visibility == before.default_note_visibility


@pytest.mark.asyncio
async def test_unknown_user(crm):
    uc = ManagePreferencesUseCase(crm.users)
    with pytest.raises(UserNotFoundError):
        await uc.get("ghost")
    with pytest.raises(UserNotFoundError):
        await uc.update("ghost", UserAIPreferences())


@pytest.mark.asyncio
async def test_preference_change_does_not_touch_existing_records(crm):
    result = await crm.submit_uc(FakeInterpreter([_note("Jack Smith")])).execute("x", "carol")
    await ManagePreferencesUseCase(crm.users).update(
        "carol", UserAIPreferences(require_approval=False)
    )
    assert crm.record(result.records[0].id).requires_approval is True


@pytest.mark.asyncio
async def test_history_newest_first_with_tickets(crm):
    uc = crm.submit_uc(FakeInterpreter([_note("Jack Smith")]))
    first = await uc.execute("first", "carol")
    uc = crm.submit_uc(FakeInterpreter([_note("John Warehouse")]))
    second = await uc.execute("second", "carol")
    await crm.submit_uc(FakeInterpreter([_note("Jane Doe")])).execute("other", "david")

    entries = await ActionHistoryUseCase(crm.actions, crm.tickets).execute("carol")

    assert [e.record.id for e in entries] == [second.records[0].id, first.records[0].id]
    assert entries[0].ticket.title == "Reach truck maintenance"


@pytest.mark.asyncio
async def test_history_survives_removed_ticket(crm):
    result = await crm.submit_uc(FakeInterpreter([_note("Jack Smith")])).execute("x", "carol")
    del crm.store.tickets["t-jack-forklift"]

    [entry] = await ActionHistoryUseCase(crm.actions, crm.tickets).execute("carol")

    assert entry.record.id == result.records[0].id
    assert entry.ticket is None
