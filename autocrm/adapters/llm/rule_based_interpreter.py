"""Deterministic interpreter — used when no OpenAI key is configured.

Handles the common phrasings representatives use ("add a note for X about Y",
"mark X's ticket as resolved", "tag it with A, B", "assign it to me"). Anything
it does not recognise simply yields no action.
"""

from __future__ import annotations

import logging
import re

from autocrm.application.ports.llm_port import ActionInterpreterPort, InterpretationContext
from autocrm.domain.entities.structured_action import StructuredAction
from autocrm.domain.value_objects.enums import ActionType

logger = logging.getLogger(__name__)

RULE_CONFIDENCE = 0.5

EQUIPMENT_TERMS = frozenset(
    {
        "forklift", "hydraulic", "hydraulics", "conveyor", "pump", "compressor",
        "generator", "crane", "excavator", "tractor", "boiler", "press", "motor",
        "engine", "seal", "valve", "leak", "brake", "brakes", "battery", "loader",
        "belt", "gearbox", "bearing", "welder", "lathe", "mixer", "chiller",
    }
)

# Capitalised words that start commands, not names
COMMAND_WORDS = frozenset(
    {
        "add", "mark", "set", "tag", "assign", "give", "put", "leave", "write",
        "update", "change", "move", "remove", "close", "resolve", "reopen",
        "please", "also", "then", "note", "let", "tell", "hand", "and", "the",
    }
)

_ACTION_VERBS = (
    r"add|mark|set|tag|untag|assign|close|resolve|reopen|remove|give|put|leave|"
    r"write|update|change|move|hand|let|tell"
)
_NAME = r"[A-Z][a-z]+(?:\s+[A-Z][a-z]+)?"

_HONORIFIC_DOT_RE = re.compile(r"\b(Mr|Mrs|Ms|Dr)\.")
_SENTENCE_RE = re.compile(r"(?<=[.;!?])\s+|\n+")
_CLAUSE_RE = re.compile(
    rf",?\s+(?:and|then)\s+(?=(?:then\s+|also\s+)?(?:{_ACTION_VERBS})\b)", re.IGNORECASE
)

_INDIRECT_RE = re.compile(
    r"\bthe\s+(?:guy|customer|client|lady|man|woman|person|one|folks)\b"
    r"(?:\s+(?:with|who|whose|from|at)\b[^,.;:]*)?",
    re.IGNORECASE,
)
_HONORIFIC_RE = re.compile(r"\b(?:Mr|Mrs|Ms|Dr)\s+[A-Z][a-z]+")
_POSSESSIVE_RE = re.compile(rf"\b({_NAME})['’]s\b")
_PREPOSITION_RE = re.compile(rf"\b(?:for|on|about|with|from)\s+({_NAME})")

_NOTE_RE = re.compile(
    r"\b(?:add|leave|put|write|make)\s+(?:a\s+|an\s+)?"
    r"(?:(?:internal|public|private|customer[- ]visible)\s+)?note\b"
    r"|\bnote\s+(?:for|on|to)\b",
    re.IGNORECASE,
)
_NOTE_CONTENT_RE = re.compile(
    r"(?:\babout\b|\bthat\b|\bsaying\b|\bregarding\b|:)\s*(.+)$", re.IGNORECASE
)
_VISIBLE_RE = re.compile(
    r"\b(?:let\s+(?:them|him|her|the\s+customer)\s+know|tell\s+(?:them|him|her|the\s+customer)"
    r"|customer[- ]visible|public\s+note|visible\s+to\s+(?:the\s+)?customer)\b",
    re.IGNORECASE,
)
_INTERNAL_RE = re.compile(r"\b(?:internal|private)\b", re.IGNORECASE)

_STATUS_AS_RE = re.compile(
    r"\b(?:mark|flag)(?:ed)?\b[^.;]*?\bas\s+([a-z][a-z _-]*?)\s*(?:$|[,.;!?])", re.IGNORECASE
)
_STATUS_TO_RE = re.compile(
    r"\b(?:set|change|update|move)\b[^.;]*?\bstatus\b[^.;]*?\bto\s+([a-z][a-z _-]*?)\s*(?:$|[,.;!?])",
    re.IGNORECASE,
)
_STATUS_VERB_RE = re.compile(r"\b(close|resolve|reopen)\b", re.IGNORECASE)
_STATUS_VERBS = {"close": "closed", "resolve": "resolved", "reopen": "open"}
_STATUS_ALIASES = {
    "done": "resolved",
    "fixed": "resolved",
    "complete": "resolved",
    "completed": "resolved",
    "waiting on customer": "pending_customer",
    "waiting on the customer": "pending_customer",
    "waiting for customer": "pending_customer",
    "waiting for the customer": "pending_customer",
    "pending": "pending_internal",
    "in progress": "open",
}

_TAG_WITH_RE = re.compile(r"\btag(?:ged)?\b[^.;]*?\bwith\s+(.+)$", re.IGNORECASE)
_TAG_ADD_RE = re.compile(r"\badd\s+(?:the\s+|a\s+)?(.+?)\s+tags?\b", re.IGNORECASE)
_TAG_ADD_LIST_RE = re.compile(r"\badd\s+tags?\s+(.+)$", re.IGNORECASE)
_TAG_REMOVE_RE = re.compile(
    r"\b(?:remove|drop|clear)\s+(?:the\s+)?(.+?)\s+tags?\b|\buntag\s+(.+)$", re.IGNORECASE
)
_TAG_SPLIT_RE = re.compile(r"\s*(?:,|\band\b|&)\s*", re.IGNORECASE)

_ASSIGN_SELF_RE = re.compile(
    r"\b(?:assign\b[^.;]*?\bto\s+(?:me|myself)\b"
    r"|assign\s+me\b|give\s+(?:it\s+to\s+)?me\b"
    r"|i['’]?ll\s+take\b|i\s+will\s+take\b|let\s+me\s+(?:handle|take)\b)",
    re.IGNORECASE,
)
_ASSIGN_OTHER_RE = re.compile(rf"\b(?i:assign|give|hand|reassign)\b.*?\bto\s+({_NAME})")


class RuleBasedInterpreter(ActionInterpreterPort):
    """Regex interpreter implementing ActionInterpreterPort."""

    async def interpret(
        self, input_text: str, context: InterpretationContext | None = None
    ) -> list[StructuredAction]:
        actions: list[StructuredAction] = []
        customer: str | None = None

        for clause in split_clauses(input_text):
            mention = extract_customer(clause)
            if mention:
                customer = mention
            found = interpret_clause(clause, customer)
            actions.extend(found)

        logger.info("Rule-based interpreter produced %d action(s)", len(actions))
        return actions


def split_clauses(text: str) -> list[str]:
    """Sentences, then ``and <verb>`` joints inside each sentence."""
    text = _HONORIFIC_DOT_RE.sub(r"\1", text or "")
    clauses: list[str] = []
    for sentence in _SENTENCE_RE.split(text):
        for clause in _CLAUSE_RE.split(sentence):
            clause = clause.strip()
            if clause:
                clauses.append(clause)
    return clauses


def _strip_command_words(name: str) -> str:
    words = name.split()
    while words and words[0].casefold() in COMMAND_WORDS:
        words.pop(0)
    return " ".join(words)


def extract_customer(clause: str) -> str | None:
    """The customer mention in *clause*, or None (pronouns, "it")."""
    m = _HONORIFIC_RE.search(clause)
    if m:
        return m.group(0)

    for pattern in (_POSSESSIVE_RE, _PREPOSITION_RE):
        for m in pattern.finditer(clause):
            name = _strip_command_words(m.group(1))
            if name:
                return name

    m = _INDIRECT_RE.search(clause)
    if m:
        return m.group(0).strip()
    return None


def extract_keywords(clause: str) -> list[str]:
    words = re.findall(r"[a-z]+", clause.lower())
    seen: list[str] = []
    for w in words:
        if w in EQUIPMENT_TERMS and w not in seen:
            seen.append(w)
    return seen


def _normalize_tag(raw: str) -> str:
    tag = raw.strip().strip("'\"").lower()
    tag = re.sub(r"^(?:the|a|an)\s+", "", tag)
    tag = re.sub(r"\s+tags?$", "", tag)
    return "-".join(tag.split())


def _split_tags(raw: str) -> list[str]:
    raw = raw.strip().rstrip(".!?")
    tags = [_normalize_tag(t) for t in _TAG_SPLIT_RE.split(raw)]
    return [t for t in tags if t]


def _note_content(clause: str, note_match: re.Match) -> str | None:
    rest = clause[note_match.end():]
    m = _NOTE_CONTENT_RE.search(rest)
    if m:
        content = m.group(1)
    else:
        content = re.sub(rf"^\s*(?:for|on|to)\s+(?:{_NAME}|the\s+\w+)", "", rest)
    content = content.strip().rstrip(".!?;,").strip()
    return content or None


def _status(clause: str) -> str | None:
    for pattern in (_STATUS_AS_RE, _STATUS_TO_RE):
        m = pattern.search(clause)
        if m:
            raw = m.group(1).strip().lower()
            return _STATUS_ALIASES.get(raw, raw.replace(" ", "_").replace("-", "_"))
    m = _STATUS_VERB_RE.search(clause)
    if m and not _NOTE_RE.search(clause):
        return _STATUS_VERBS[m.group(1).lower()]
    return None


def interpret_clause(clause: str, customer: str | None) -> list[StructuredAction]:
    """Every action a single clause asks for."""
    keywords = extract_keywords(clause)
    actions: list[StructuredAction] = []

    def make(action_type: ActionType, **fields) -> StructuredAction:
        return StructuredAction(
            action_type=action_type,
            customer_name=customer,
            confidence_score=RULE_CONFIDENCE,
            ticket_keywords=list(keywords),
            **fields,
        )

    note = _NOTE_RE.search(clause)
    if note:
        visible = None
        if _VISIBLE_RE.search(clause):
            visible = True
        elif _INTERNAL_RE.search(clause):
            visible = False
        content = _note_content(clause, note)
        if content:
            actions.append(make(ActionType.ADD_NOTE, note_content=content, is_customer_visible=visible))
        # A note clause carries no other instruction
        return actions

    status = _status(clause)
    if status:
        actions.append(make(ActionType.UPDATE_STATUS, status_update=status))

    add: list[str] = []
    remove: list[str] = []
    m = _TAG_REMOVE_RE.search(clause)
    if m:
        remove = _split_tags(m.group(1) or m.group(2))
    else:
        for pattern in (_TAG_WITH_RE, _TAG_ADD_LIST_RE, _TAG_ADD_RE):
            m = pattern.search(clause)
            if m:
                add = _split_tags(m.group(1))
                break
    if add or remove:
        actions.append(make(ActionType.UPDATE_TAGS, tags_to_add=add, tags_to_remove=remove))

    if _ASSIGN_SELF_RE.search(clause):
        actions.append(make(ActionType.ASSIGN_TICKET, assign_to="me"))
    else:
        m = _ASSIGN_OTHER_RE.search(clause)
        if m:
            actions.append(make(ActionType.ASSIGN_TICKET, assign_to=m.group(1)))

    return actions
