"""
Name lookup over upstream entity lists (quests, items, blueprints, ARCs).
"""

from typing import Any, Dict, Iterable, Optional


def resolve_entity(
    query: str,
    entities: Optional[Iterable[Dict[str, Any]]],
    *,
    field: str = "name",
) -> Optional[Dict[str, Any]]:
    """Return the first entity whose ``field`` contains ``query``, ignoring case.

    Order is the order of ``entities``; there is no ranking, so with
    ``["Rifle", "Rifle Mk2"]`` the query ``"rifle"`` yields ``"Rifle"`` and
    ``"Rifle Mk2"`` is only reachable with a more specific query.
    Entities without a usable name are skipped.
    """
    if not entities:
        return None

    needle = query.casefold()
    for entity in entities:
        if not isinstance(entity, dict):
            continue
        name = entity.get(field)
        if isinstance(name, str) and name and needle in name.casefold():
            return entity
    return None
