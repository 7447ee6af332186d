"""Tests for mention normalization, name matching and ticket selection."""

from datetime import datetime, timedelta, timezone

from autocrm.domain.entities.ticket import Ticket
from autocrm.domain.entities.user import UserProfile
from autocrm.domain.policies.customer_matching import (
    Ambiguous,
    NotFound,
    Resolved,
    is_indirect_mention,
    match_people,
    mention_keywords,
    normalize_mention,
    select_ticket,
    select_ticket_among_customers,
    select_ticket_by_keywords,
    split_mention,
)
from autocrm.domain.value_objects.enums import TicketStatus, UserRole

T0 = datetime(2025, 1, 1, tzinfo=timezone.utc)


def _person(uid, name):
    return UserProfile(id=uid, full_name=name, role=UserRole.CUSTOMER)


def _t(tid, customer="c1", hours_ago=0, status=TicketStatus.OPEN, tags=(), assigned_to=None,
       title="Ticket"):
    return Ticket(
        id=tid,
        title=title,
        customer_id=customer,
        status=status,
        tags=set(tags),
        assigned_to=assigned_to,
        created_at=T0 - timedelta(hours=hours_ago),
    )


PEOPLE = [
    _person("jack", "Jack Smith"),
    _person("jane", "Jane Smith"),
    _person("john", "John Warehouse"),
]


# ─── Mentions ────────────────────────────────────────────────────────


def test_normalize_strips_honorific_possessive_punctuation():
    assert normalize_mention("  Mr. Smith's ") == "smith"


def test_indirect_mentions():
    assert is_indirect_mention("the guy with the broken forklift")
    assert is_indirect_mention("")
    assert is_indirect_mention(None)
    assert not is_indirect_mention("Jack Smith")


def test_indirect_markers_match_whole_words_only():
    assert not is_indirect_mention("Jack Smith the manager")
    assert not is_indirect_mention("the oneill account")
    assert is_indirect_mention("the one with the crane")


def test_split_mention_separates_name_from_descriptor():
    assert split_mention("Jane Doe with the forklift") == ("jane doe", ["forklift"])
    assert split_mention("the guy with the broken forklift") == ("", ["broken", "forklift"])
    assert split_mention("Mr. Smith") == ("smith", [])


def test_mention_keywords_drop_filler_words():
    assert mention_keywords("the guy with the broken forklift") == ["broken", "forklift"]


# ─── Name matching ───────────────────────────────────────────────────


def test_full_name_match():
    m = match_people("Jack Smith", PEOPLE)
    assert [p.id for p in m.people] == ["jack"]
    assert m.tier == "full_name"


def test_case_and_whitespace_insensitive():
    m = match_people("  jack   SMITH ", PEOPLE)
    assert [p.id for p in m.people] == ["jack"]


def test_typo_matches_fuzzily():
    m = match_people("Jak Smith", PEOPLE)
    assert [p.id for p in m.people] == ["jack"]
    assert m.tier == "fuzzy"


def test_first_name_match():
    m = match_people("John", PEOPLE)
    assert [p.id for p in m.people] == ["john"]
    assert m.tier == "first_name"


def test_shared_last_name_is_ambiguous():
    m = match_people("Mr. Smith", PEOPLE)
    assert {p.id for p in m.people} == {"jack", "jane"}
    assert m.tier == "last_name"


def test_no_match_returns_none():
    assert match_people("Zed Zebra", PEOPLE) is None
    assert match_people("   ", PEOPLE) is None


# ─── Ticket selection ────────────────────────────────────────────────


def test_most_recent_open_ticket_wins():
    result = select_ticket([_t("old", hours_ago=5), _t("new", hours_ago=1)])
    assert isinstance(result, Resolved)
    assert result.ticket.id == "new"


def test_closed_tickets_are_skipped():
    result = select_ticket(
        [_t("closed", hours_ago=0, status=TicketStatus.CLOSED), _t("open", hours_ago=9)]
    )
    assert result.ticket.id == "open"


def test_no_open_tickets_is_not_found():
    result = select_ticket([_t("x", status=TicketStatus.RESOLVED)])
    assert isinstance(result, NotFound)
    assert result.kind == "ticket"


def test_keywords_beat_recency():
    result = select_ticket(
        [_t("new", hours_ago=1, tags={"printer"}), _t("old", hours_ago=9, tags={"forklift"})],
        keywords=["forklift"],
    )
    assert result.ticket.id == "old"


def test_exact_tie_broken_by_assignment_to_acting_user():
    tickets = [_t("a", assigned_to="david"), _t("b", assigned_to="carol")]
    result = select_ticket(tickets, acting_user_id="carol")
    assert result.ticket.id == "b"


def test_exact_tie_without_tiebreak_is_ambiguous():
    result = select_ticket([_t("a"), _t("b")], acting_user_id="carol")
    assert isinstance(result, Ambiguous)
    assert len(result.candidates) == 2


def test_select_by_keywords_for_indirect_mentions():
    tickets = [
        _t("fork", tags={"forklift", "hydraulic"}, hours_ago=3),
        _t("crane", tags={"crane"}, hours_ago=1),
    ]
    result = select_ticket_by_keywords(tickets, ["forklift"])
    assert result.ticket.id == "fork"
    assert isinstance(select_ticket_by_keywords(tickets, ["boat"]), NotFound)


def test_keyword_tiebreak_between_customers():
    tickets = [
        _t("jack-fork", customer="jack", tags={"forklift"}),
        _t("jane-printer", customer="jane", tags={"printer"}),
    ]
    result = select_ticket_among_customers(tickets, ["forklift"])
    assert result.ticket.id == "jack-fork"


def test_no_tiebreak_between_customers_without_keywords():
    tickets = [_t("a", customer="jack", hours_ago=0), _t("b", customer="jane", hours_ago=5)]
    assert select_ticket_among_customers(tickets, []) is None
