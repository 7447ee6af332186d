"""TagUpdatePolicy — set arithmetic for ticket tags."""


def _clean(tags: set[str] | list[str] | None) -> set[str]:
    return {t.strip() for t in (tags or []) if t and t.strip()}


def compute_tags(
    existing: set[str] | list[str],
    tags_to_add: list[str] | None,
    tags_to_remove: list[str] | None,
) -> set[str]:
    """Return ``(existing ∪ add) \\ remove``.

    Order-independent and idempotent: applying the same update twice yields
    the same set as applying it once. Comparison is case-insensitive, an
    added tag that already exists in another case is not duplicated, and a
    tag present in both lists ends up removed.
    """
    current = _clean(existing)
    known = {t.casefold() for t in current}
    for tag in sorted(_clean(tags_to_add)):
        if tag.casefold() not in known:
            current.add(tag)
            known.add(tag.casefold())

    remove = {t.casefold() for t in _clean(tags_to_remove)}
    return {t for t in current if t.casefold() not in remove}
