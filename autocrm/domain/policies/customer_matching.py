"""CustomerMatchingPolicy — map a free-text person/equipment mention to a ticket.

Matching is approximate by necessity: names are not unique and the input is
dictated or typed in a hurry. Ambiguity is returned as its own result
variant instead of being resolved by an arbitrary pick.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from difflib import SequenceMatcher
from typing import Union

from autocrm.domain.entities.ticket import Ticket
from autocrm.domain.entities.user import UserProfile

HONORIFICS = frozenset({"mr", "mrs", "ms", "miss", "mx", "dr", "sir", "madam", "mister"})

# Phrases that describe a person instead of naming them
INDIRECT_MARKERS = (
    "the guy",
    "the customer",
    "the client",
    "the lady",
    "the man",
    "the woman",
    "the person",
    "the one",
    "the folks",
    "whoever",
    "someone",
    "somebody",
    "with the",
    "who has",
    "whose",
)

MENTION_STOPWORDS = frozenset(
    {
        "the", "a", "an", "guy", "with", "customer", "client", "one", "who",
        "has", "had", "have", "lady", "man", "woman", "person", "folks", "that",
        "whose", "their", "his", "her", "ticket", "about", "for", "and",
        "someone", "somebody", "whoever", "from", "our", "they", "them",
    }
)

# Minimum SequenceMatcher ratio for a typo-tolerant name match
FUZZY_THRESHOLD = 0.8

_INDIRECT_RE = re.compile(
    r"\b(?:" + "|".join(re.escape(m) for m in INDIRECT_MARKERS) + r")\b"
)
_POSSESSIVE_RE = re.compile(r"['’]s\b")
_PUNCT_RE = re.compile(r"[^\w\s-]")


# ── Result variants ─────────────────────────────────────────────────


@dataclass(frozen=True)
class Resolved:
    ticket: Ticket
    customer: UserProfile | None = None
    reason: str = ""


@dataclass(frozen=True)
class Ambiguous:
    candidates: tuple[str, ...]
    reason: str


@dataclass(frozen=True)
class NotFound:
    kind: str  # "customer" | "ticket"
    reason: str


ResolutionResult = Union[Resolved, Ambiguous, NotFound]


@dataclass(frozen=True)
class NameMatch:
    people: tuple[UserProfile, ...]
    tier: str  # "full_name" | "fuzzy" | "first_name" | "last_name"


# ── Mention handling ────────────────────────────────────────────────


def normalize_mention(text: str | None) -> str:
    """Trim, case-fold, drop possessives, punctuation and honorifics."""
    t = (text or "").strip().casefold()
    t = _POSSESSIVE_RE.sub("", t)
    t = _PUNCT_RE.sub(" ", t)
    return " ".join(tok for tok in t.split() if tok not in HONORIFICS)


def _squash(text: str | None) -> str:
    return " ".join((text or "").casefold().split())


def is_indirect_mention(text: str | None) -> bool:
    """True when the mention describes rather than names the customer."""
    lowered = _squash(text)
    if not normalize_mention(lowered):
        return True
    return _INDIRECT_RE.search(lowered) is not None


def split_mention(text: str | None) -> tuple[str, list[str]]:
    """Split a mention into its name part and descriptor words.

    "Jane Doe with the forklift" gives ("jane doe", ["forklift"]);
    "the guy with the forklift" gives ("", ["forklift"]).
    """
    lowered = _squash(text)
    marker = _INDIRECT_RE.search(lowered)
    if marker is None:
        return normalize_mention(lowered), []
    head = normalize_mention(lowered[: marker.start()]).split()
    name = " ".join(tok for tok in head if tok not in MENTION_STOPWORDS)
    return name, mention_keywords(lowered[marker.start() :])


def mention_keywords(text: str | None) -> list[str]:
    """Content words of an indirect mention ("the guy with the broken forklift")."""
    words = normalize_mention(text).split()
    return [w for w in words if len(w) >= 3 and w not in MENTION_STOPWORDS]


# ── Customer matching ───────────────────────────────────────────────


def _contains(name: str, mention: str) -> bool:
    """Token-boundary containment in either direction."""
    return f" {mention} " in f" {name} " or f" {name} " in f" {mention} "


def _ratio(a: str, b: str) -> float:
    return SequenceMatcher(None, a, b).ratio()


def _best(scored: list[tuple[float, UserProfile]]) -> tuple[UserProfile, ...]:
    eligible = [(s, c) for s, c in scored if s >= FUZZY_THRESHOLD]
    if not eligible:
        return ()
    top = max(s for s, _ in eligible)
    return tuple(c for s, c in eligible if s == top)


def match_people(mention: str | None, people: list[UserProfile]) -> NameMatch | None:
    """Find the people a mention most plausibly refers to.

    Tiers, first non-empty wins:
      1. Full name containment (multi-word mentions).
      2. Fuzzy full name, for typos ("Jak Smith").
      3. First name equals a mention word.
      4. Last name equals a mention word ("Mr. Smith").
      5. Fuzzy single-word first/last name.

    Returns None when nothing matches. Several people in the winning
    tier is an ambiguity for the caller to break.
    """
    m = normalize_mention(mention)
    if not m:
        return None
    tokens = m.split()

    if len(tokens) >= 2:
        full = [c for c in people if _contains(normalize_mention(c.full_name), m)]
        if full:
            return NameMatch(tuple(full), "full_name")

        fuzzy = _best([(_ratio(m, normalize_mention(c.full_name)), c) for c in people])
        if fuzzy:
            return NameMatch(fuzzy, "fuzzy")

    first = [c for c in people if c.first_name and c.first_name.casefold() in tokens]
    if first:
        return NameMatch(tuple(first), "first_name")

    last = [c for c in people if c.last_name and c.last_name.casefold() in tokens]
    if last:
        return NameMatch(tuple(last), "last_name")

    scored = []
    for c in people:
        names = [n.casefold() for n in (c.first_name, c.last_name) if n]
        if names:
            scored.append((max(_ratio(tok, n) for tok in tokens for n in names), c))
    fuzzy_token = _best(scored)
    if fuzzy_token:
        return NameMatch(fuzzy_token, "fuzzy")

    return None


# ── Ticket selection ────────────────────────────────────────────────


def _describe(ticket: Ticket) -> str:
    return f"{ticket.title} ({ticket.id})"


def _break_ties(pool: list[Ticket], acting_user_id: str | None) -> list[Ticket]:
    """Narrow by recency, then by assignment to the acting representative."""
    if len(pool) <= 1:
        return pool

    dated = [t for t in pool if t.created_at is not None]
    if dated:
        newest = max(t.created_at for t in dated)
        pool = [t for t in dated if t.created_at == newest]
    if len(pool) <= 1:
        return pool

    if acting_user_id:
        mine = [t for t in pool if t.assigned_to == acting_user_id]
        if len(mine) == 1:
            return mine
    return pool


def select_ticket(
    tickets: list[Ticket],
    keywords: list[str] | tuple[str, ...] = (),
    acting_user_id: str | None = None,
) -> ResolutionResult:
    """Pick one customer's most relevant open ticket.

    Keyword-matching tickets are preferred; otherwise the most recently
    created open ticket wins. Exact ties are reported as Ambiguous.
    """
    open_tickets = [t for t in tickets if t.is_open()]
    if not open_tickets:
        return NotFound("ticket", "No open tickets")

    pool = open_tickets
    if keywords:
        scored = [(t.keyword_hits(keywords), t) for t in open_tickets]
        best = max(s for s, _ in scored)
        if best > 0:
            pool = [t for s, t in scored if s == best]

    remaining = _break_ties(pool, acting_user_id)
    if len(remaining) == 1:
        return Resolved(remaining[0], reason="Most relevant open ticket")
    return Ambiguous(
        tuple(_describe(t) for t in remaining),
        "Several open tickets match equally well",
    )


def select_ticket_by_keywords(
    tickets: list[Ticket],
    keywords: list[str] | tuple[str, ...],
    acting_user_id: str | None = None,
) -> ResolutionResult:
    """Indirect-mention path: match open tickets by tags/description only."""
    open_tickets = [t for t in tickets if t.is_open()]
    scored = [(t.keyword_hits(keywords), t) for t in open_tickets]
    best = max((s for s, _ in scored), default=0)
    if best == 0:
        return NotFound("ticket", f"No open ticket matches: {', '.join(keywords)}")

    pool = [t for s, t in scored if s == best]
    remaining = _break_ties(pool, acting_user_id)
    if len(remaining) == 1:
        return Resolved(remaining[0], reason=f"Keyword match ({best} hits)")
    return Ambiguous(
        tuple(_describe(t) for t in remaining),
        "Several open tickets match the description equally well",
    )


def select_ticket_among_customers(
    tickets: list[Ticket],
    keywords: list[str] | tuple[str, ...],
) -> Resolved | None:
    """Break a multi-customer name tie with keywords.

    Only a single best keyword-scoring ticket counts; recency is never used
    to choose between different people.
    """
    if not keywords:
        return None
    scored = [(t.keyword_hits(keywords), t) for t in tickets if t.is_open()]
    best = max((s for s, _ in scored), default=0)
    if best == 0:
        return None
    top = [t for s, t in scored if s == best]
    if len(top) != 1:
        return None
    return Resolved(top[0], reason=f"Keyword tiebreak ({best} hits)")
