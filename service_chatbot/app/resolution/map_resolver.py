"""
Parse ``<map>[-<level>]`` tokens typed in chat into a map and level.

Accepted shapes include ``dam``, ``blue-gate-underground``,
``stella-topfloor``, ``stella-top-floor`` and ``stella-top floor``.
Matching rules run in a fixed order and the first one that finds a map wins:

1. longest hyphen-delimited prefix that is an exact map key or alias;
2. partial match: the first map key contained in the input, or containing
   the input's first segment.

Once a map is known the level is looked up by exact alias, then alias with
hyphens removed, then substring in either direction.
"""

import re
from dataclasses import dataclass
from typing import Optional, Tuple

from .maps import MAPS, MapEntry, MapTable


_WHITESPACE = re.compile(r"\s+")
_LEADING_SEPARATORS = re.compile(r"^[-\s]+")


@dataclass(frozen=True)
class MapResolution:
    """Outcome of resolving a map token."""

    map: MapEntry
    map_key: str
    level_search: Optional[str] = None
    level_name: Optional[str] = None

    @property
    def needs_level_hint(self) -> bool:
        """Map has levels and the caller gave none."""
        return self.map.has_levels and not self.level_search

    @property
    def level_unmatched(self) -> bool:
        """Caller gave a level the map does not know."""
        return bool(self.level_search) and self.map.has_levels and self.level_name is None


def _hyphenate(text: str) -> str:
    return _WHITESPACE.sub("-", text)


def _split_exact_prefix(token: str, table: MapTable) -> Optional[Tuple[str, str]]:
    parts = token.split("-")
    for i in range(len(parts), 0, -1):
        candidate_key = "-".join(parts[:i])
        if candidate_key in table:
            return candidate_key, _hyphenate("-".join(parts[i:]))
    return None


def _split_partial(token: str, table: MapTable) -> Optional[Tuple[str, str]]:
    first_segment = token.split("-")[0]
    for key in table.lookup_keys():
        if key in token or first_segment in key:
            remainder = _LEADING_SEPARATORS.sub("", token.replace(key, "", 1))
            return key, _hyphenate(remainder)
    return None


def resolve_level(entry: MapEntry, level_search: Optional[str]) -> Optional[str]:
    """Return the level display name for ``level_search`` or None."""
    if not level_search or not entry.has_levels:
        return None

    exact = entry.level_for(level_search)
    if exact:
        return exact

    collapsed = entry.level_for(level_search.replace("-", ""))
    if collapsed:
        return collapsed

    for alias, display in entry.levels:
        if alias in level_search or level_search in alias:
            return display
    return None


def resolve_map_token(token: str, table: MapTable = MAPS) -> Optional[MapResolution]:
    """Resolve a chat token to a :class:`MapResolution`, or None when no map matches."""
    normalized = token.lower().strip()
    if not normalized:
        return None

    split = _split_exact_prefix(normalized, table) or _split_partial(normalized, table)
    if split is None:
        return None

    map_key, level_search = split
    entry = table.get(map_key)
    if entry is None:  # pragma: no cover - keys come from the table itself
        return None

    return MapResolution(
        map=entry,
        map_key=map_key,
        level_search=level_search or None,
        level_name=resolve_level(entry, level_search),
    )
