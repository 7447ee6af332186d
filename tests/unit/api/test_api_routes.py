"""HTTP tests: routes wired to in-memory fakes through dependency overrides."""

import base64

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from autocrm.adapters.persistence.database import get_session
from autocrm.domain.entities.structured_action import StructuredAction
from autocrm.domain.value_objects.enums import ActionStatus, ActionType, TicketStatus
from autocrm.infrastructure.api import dependencies as deps
from autocrm.main import create_app
from tests.fakes import FakeInterpreter, FakeTranscriber


class FakeSession:
    def __init__(self, fail_execute=False):
        self.commits = 0
        self.rollbacks = 0
        self.fail_execute = fail_execute

    async def commit(self):
        self.commits += 1

    async def rollback(self):
        self.rollbacks += 1

    async def execute(self, statement):
        if self.fail_execute:
            raise OperationalError("SELECT 1", {}, Exception("connection refused"))
        return _Scalar()


class _Scalar:
    def scalar(self):
        return 1


NOTE = StructuredAction(
    action_type=ActionType.ADD_NOTE,
    customer_name="Jack Smith",
    note_content="pump ships Friday",
    confidence_score=0.9,
)


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def interpreter():
    return FakeInterpreter([NOTE])


@pytest.fixture
def transcriber():
    return FakeTranscriber("close Jack's ticket")


@pytest.fixture
def client(crm, session, interpreter, transcriber):
    app = create_app()
    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[deps.get_user_repo] = lambda: crm.users
    app.dependency_overrides[deps.get_ticket_repo] = lambda: crm.tickets
    app.dependency_overrides[deps.get_message_repo] = lambda: crm.messages
    app.dependency_overrides[deps.get_action_repo] = lambda: crm.actions
    app.dependency_overrides[deps.get_transaction] = lambda: crm.tx
    app.dependency_overrides[deps.get_interpreter] = lambda: interpreter
    app.dependency_overrides[deps.get_transcriber] = lambda: transcriber
    return TestClient(app)


# ─── /ai-actions ────────────────────────────────────────────────────


def test_submit_creates_pending_action(client, crm, session):
    r = client.post(
        "/api/ai-actions",
        json={"input_text": "Add a note for Jack Smith", "user_id": "carol"},
    )
    assert r.status_code == 200
    data = r.json()
    assert data["requires_approval"] is True
    assert data["executions"] == []
    [action] = data["actions"]
    assert action["status"] == "pending"
    assert action["ticket_id"] == "t-jack-forklift"
    assert action["input_text"] == "Add a note for Jack Smith"
    assert data["parsed_result"][0]["note_content"] == "pump ships Friday"
    assert session.commits == 1


def test_submit_auto_executes_for_no_approval_user(client, crm):
    r = client.post("/api/ai-actions", json={"input_text": "note", "user_id": "david"})
    data = r.json()
    assert data["requires_approval"] is False
    assert data["executions"][0]["status"] == "executed"
    assert len(crm.messages_for("t-jack-forklift")) == 1


def test_submit_unknown_customer_is_404(client, crm, interpreter):
    interpreter.actions = [
        StructuredAction(action_type=ActionType.ADD_NOTE, customer_name="Zed Zebra",
                         note_content="x")
    ]
    r = client.post("/api/ai-actions", json={"input_text": "x", "user_id": "carol"})
    assert r.status_code == 404
    assert r.json()["code"] == "customer_not_found"
    assert crm.store.actions == {}


def test_submit_by_customer_is_403(client):
    r = client.post("/api/ai-actions", json={"input_text": "x", "user_id": "jack"})
    assert r.status_code == 403
    assert r.json()["code"] == "unauthorized"


def test_submit_ambiguous_lists_candidates(client, crm, interpreter):
    crm.add_user("jack-b", "Jack Brown")
    crm.add_ticket("t-jack-b", "jack-b", "Printer offline")
    interpreter.actions = [
        StructuredAction(action_type=ActionType.ADD_NOTE, customer_name="Jack", note_content="x")
    ]
    r = client.post("/api/ai-actions", json={"input_text": "x", "user_id": "carol"})
    assert r.status_code == 409
    assert r.json()["candidates"] == ["Jack Brown", "Jack Smith"]


def test_submit_interpreter_failure_is_502(client, interpreter):
    interpreter.actions = []
    r = client.post("/api/ai-actions", json={"input_text": "hi", "user_id": "carol"})
    assert r.status_code == 502
    assert r.json()["code"] == "interpretation_error"


def test_submit_requires_fields(client):
    r = client.post("/api/ai-actions", json={"input_text": "x"})
    assert r.status_code == 422


def test_approve_then_second_decision_conflicts(client, crm, session):
    submitted = client.post(
        "/api/ai-actions", json={"input_text": "note", "user_id": "carol"}
    ).json()
    action_id = submitted["actions"][0]["id"]

    r = client.post(
        "/api/ai-actions/execute",
        json={"action_id": action_id, "user_id": "carol", "approve": True},
    )
    assert r.status_code == 200
    assert r.json() == {"action_id": action_id, "status": "executed", "error_message": None}
    assert crm.record(action_id).status == ActionStatus.EXECUTED

    again = client.post(
        "/api/ai-actions/execute",
        json={"action_id": action_id, "user_id": "carol", "approve": False},
    )
    assert again.status_code == 409
    assert again.json()["code"] == "action_not_pending"
    assert session.commits == 2


def test_reject(client, crm):
    action_id = client.post(
        "/api/ai-actions", json={"input_text": "note", "user_id": "carol"}
    ).json()["actions"][0]["id"]

    r = client.post(
        "/api/ai-actions/execute",
        json={"action_id": action_id, "user_id": "carol", "approve": False},
    )
    assert r.json()["status"] == "rejected"
    assert crm.messages_for("t-jack-forklift") == []


def test_decide_unknown_action_is_404(client):
    r = client.post(
        "/api/ai-actions/execute",
        json={"action_id": "nope", "user_id": "carol", "approve": True},
    )
    assert r.status_code == 404
    assert r.json()["code"] == "action_not_found"


def test_history_includes_ticket_summary(client):
    client.post("/api/ai-actions", json={"input_text": "note", "user_id": "carol"})
    r = client.get("/api/ai-actions", params={"user_id": "carol"})
    data = r.json()
    assert data["total"] == 1
    assert data["actions"][0]["ticket"] == {
        "id": "t-jack-forklift",
        "title": "Forklift hydraulic leak",
        "status": "open",
    }


# ─── /users/{id}/ai-preferences ─────────────────────────────────────


def test_preferences_roundtrip(client, session):
    assert client.get("/api/users/carol/ai-preferences").json() == {
        "requireApproval": True,
        "enableVoiceInput": False,
        "defaultNoteVisibility": "internal",
    }
    body = {"requireApproval": False, "enableVoiceInput": True, "defaultNoteVisibility": "customer"}
    r = client.put("/api/users/carol/ai-preferences", json=body)
    assert r.json() == body
    assert client.get("/api/users/carol/ai-preferences").json() == body
    assert session.commits == 1


def test_preferences_partial_put_keeps_other_fields(client):
    r = client.put("/api/users/david/ai-preferences", json={"defaultNoteVisibility": "customer"})
    assert r.json() == {
        "requireApproval": False,
        "enableVoiceInput": True,
        "defaultNoteVisibility": "customer",
    }


def test_preferences_reject_unknown_visibility(client):
    r = client.put(
        "/api/users/carol/ai-preferences", json={"defaultNoteVisibility": "everyone"}
    )
    assert r.status_code == 422


def test_preferences_unknown_user(client):
    assert client.get("/api/users/ghost/ai-preferences").status_code == 404


# ─── /transcribe ────────────────────────────────────────────────────


def test_transcribe(client, transcriber):
    audio = base64.b64encode(b"webm-bytes").decode()
    r = client.post("/api/transcribe", json={"audio_base64": audio, "user_id": "david"})
    assert r.status_code == 200
    assert r.json() == {"text": "close Jack's ticket"}
    assert transcriber.calls[0][0] == b"webm-bytes"


def test_transcribe_voice_disabled(client):
    audio = base64.b64encode(b"webm-bytes").decode()
    r = client.post("/api/transcribe", json={"audio_base64": audio, "user_id": "carol"})
    assert r.status_code == 403


def test_transcribe_bad_payload(client):
    r = client.post("/api/transcribe", json={"audio_base64": "%%%"})
    assert r.status_code == 422
    assert r.json()["code"] == "validation_error"


# ─── /tickets and /health ───────────────────────────────────────────


def test_ticket_list_has_names(client):
    data = client.get("/api/tickets").json()
    assert data["total"] == 5
    by_id = {t["id"]: t for t in data["tickets"]}
    assert by_id["t-jack-forklift"]["customer_name"] == "Jack Smith"
    assert by_id["t-jack-forklift"]["tags"] == ["forklift", "hydraulic"]


def test_ticket_detail_with_messages(client, crm):
    client.post("/api/ai-actions", json={"input_text": "note", "user_id": "david"})
    data = client.get("/api/tickets/t-jack-forklift").json()
    [message] = data["messages"]
    assert message["sender_name"] == "David Service"
    assert message["is_internal"] is True
    assert data["status"] == TicketStatus.OPEN.value


def test_ticket_not_found(client):
    r = client.get("/api/tickets/missing")
    assert r.status_code == 404
    assert r.json()["code"] == "ticket_not_found"


def test_health(client):
    data = client.get("/api/health").json()
    assert data["status"] == "ok"
    assert data["interpreter"] == "FakeInterpreter"


def test_health_degraded_when_database_down(client, session):
    session.fail_execute = True
    data = client.get("/api/health").json()
    assert data["status"] == "degraded"
    assert data["database"] == "error: OperationalError"
