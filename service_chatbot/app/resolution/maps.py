"""
Static map table: canonical entries plus an alias index.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence, Tuple


MAP_BASE_URL = "https://metaforge.app/arc-raiders/map"


@dataclass(frozen=True)
class MapEntry:
    """One in-game map.

    ``levels`` is an ordered sequence of ``(alias, display name)`` pairs;
    several aliases may share a display name.
    """

    key: str
    name: str
    url: str
    aliases: Tuple[str, ...] = ()
    levels: Tuple[Tuple[str, str], ...] = ()

    @property
    def has_levels(self) -> bool:
        return bool(self.levels)

    def level_aliases(self) -> List[str]:
        return [alias for alias, _ in self.levels]

    def level_for(self, alias: str) -> Optional[str]:
        for candidate, display in self.levels:
            if candidate == alias:
                return display
        return None

    def level_names(self) -> List[str]:
        """Distinct level display names, first-seen order."""
        seen: List[str] = []
        for _, display in self.levels:
            if display not in seen:
                seen.append(display)
        return seen


class MapTable:
    """Exact-key lookup over canonical map keys and their aliases.

    Iteration order of :meth:`lookup_keys` is each canonical key followed by
    its aliases, in declaration order. Partial matching relies on it.
    """

    def __init__(self, entries: Sequence[MapEntry]):
        self._entries: Tuple[MapEntry, ...] = tuple(entries)
        self._by_key: Dict[str, MapEntry] = {}
        self._alias_index: Dict[str, str] = {}
        self._lookup_order: List[str] = []

        for entry in self._entries:
            for lookup_key in (entry.key,) + entry.aliases:
                if lookup_key in self._alias_index:
                    raise ValueError(f"Duplicate map key '{lookup_key}'")
                self._alias_index[lookup_key] = entry.key
                self._lookup_order.append(lookup_key)
            self._by_key[entry.key] = entry

    def get(self, lookup_key: str) -> Optional[MapEntry]:
        canonical = self._alias_index.get(lookup_key)
        return self._by_key[canonical] if canonical is not None else None

    def __contains__(self, lookup_key: str) -> bool:
        return lookup_key in self._alias_index

    def __iter__(self) -> Iterator[MapEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def canonical_key(self, lookup_key: str) -> Optional[str]:
        return self._alias_index.get(lookup_key)

    def lookup_keys(self) -> List[str]:
        return list(self._lookup_order)

    def names(self) -> List[str]:
        return [entry.name for entry in self._entries]


_BLUE_GATE_LEVELS = (
    ("surface", "Surface"),
    ("underground", "Underground"),
)

_STELLA_MONTIS_LEVELS = (
    ("top-floor", "Top Floor"),
    ("topfloor", "Top Floor"),
    ("top", "Top Floor"),
    ("bottom-floor", "Bottom Floor"),
    ("bottomfloor", "Bottom Floor"),
    ("bottom", "Bottom Floor"),
)

MAPS = MapTable([
    MapEntry(
        key="dam",
        name="Dam Battlegrounds",
        url=f"{MAP_BASE_URL}/dam",
    ),
    MapEntry(
        key="spaceport",
        name="The Spaceport",
        url=f"{MAP_BASE_URL}/spaceport",
        levels=(
            ("surface", "Surface"),
            ("tunnels", "Tunnels"),
        ),
    ),
    MapEntry(
        key="buried-city",
        name="Buried City",
        url=f"{MAP_BASE_URL}/buried-city",
    ),
    MapEntry(
        key="blue-gate",
        name="Blue Gate",
        url=f"{MAP_BASE_URL}/blue-gate",
        aliases=("blue",),
        levels=_BLUE_GATE_LEVELS,
    ),
    MapEntry(
        key="stella-montis",
        name="Stella Montis",
        url=f"{MAP_BASE_URL}/stella-montis",
        aliases=("stella",),
        levels=_STELLA_MONTIS_LEVELS,
    ),
])
