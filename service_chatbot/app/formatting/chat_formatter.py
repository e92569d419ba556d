"""
Single-line chat renderings of upstream payloads.

Every function here is pure: it takes already-fetched data and returns the
string a chat bot posts verbatim.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from ..adapters.loot_store import LootRecord
from ..resolution.map_resolver import MapResolution
from ..resolution.maps import MapTable


DATA_SUFFIX = " | Data from metaforge.app/arc-raiders"
TRIALS_LINK = "metaforge.app/arc-raiders/weekly-trials"

USAGE_HINTS = {
    "quest": "Please specify a quest name. Usage: !quest <name> | Example: !quest bad | Use !quests to see all quests.",
    "item": "Please specify an item name. Usage: !item <name> | Example: !item rifle",
    "blueprint": "Please specify a blueprint name. Usage: !arcblueprint <name> | Example: !arcblueprint rifle",
    "arc": "Please specify an ARC enemy name. Usage: !arc <name> | Example: !arc wasp | !arc queen",
    "map": "Please specify a map name. Usage: !map <name> | Example: !map dam | Use !maps to see all available maps.",
}

ERROR_SUBJECTS = {
    "quests": "quests",
    "quest": "quest data",
    "item": "item data",
    "blueprint": "blueprint data",
    "arc": "ARC data",
    "events": "events",
    "map": "map data",
    "trials": "weekly trials",
}


def as_list(payload: Any) -> List[Dict[str, Any]]:
    """Upstream list payloads, tolerating an unexpected shape as empty."""
    if isinstance(payload, list):
        return payload
    return []


def error_message(subject: str) -> str:
    return f"Error fetching {ERROR_SUBJECTS.get(subject, subject)}. Please try again later."


def format_quest_list(quests: Sequence[Dict[str, Any]]) -> str:
    if not quests:
        return "No quests found."
    names = ", ".join(q.get("name") or "Unnamed" for q in quests[:5])
    return (
        f"Found {len(quests)} quests. Examples: {names}... "
        f"| Use !quest <name> for details{DATA_SUFFIX}"
    )


def _reward_name(item: Any) -> str:
    if isinstance(item, str):
        return item
    if isinstance(item, dict):
        return item.get("name") or "Item"
    return "Item"


def format_quest(quest: Dict[str, Any]) -> str:
    details = f"Quest: {quest.get('name') or 'Unknown'}"

    if quest.get("description"):
        details += f" | {quest['description']}"

    objectives = quest.get("objectives") or []
    if objectives:
        details += f" | Objectives: {', '.join(str(o) for o in objectives)}"

    granted = quest.get("granted_items") or []
    if granted:
        details += f" | Rewards: {', '.join(_reward_name(item) for item in granted)}"

    xp = quest.get("xp")
    if isinstance(xp, (int, float)) and xp > 0:
        details += f" | XP: {xp}"

    return details + DATA_SUFFIX


def quest_not_found(raw_name: str) -> str:
    return f'Quest "{raw_name}" not found. Try !quests to see available quests.'


def format_item(item: Dict[str, Any]) -> str:
    details = item.get("name") or "Unknown Item"
    if item.get("category"):
        details += f" ({item['category']})"
    if item.get("description"):
        details += f" - {item['description']}"
    return details + DATA_SUFFIX


def item_not_found(raw_name: str) -> str:
    return f'Item "{raw_name}" not found.'


def format_blueprint(blueprint: Dict[str, Any]) -> str:
    details = f"Blueprint: {blueprint.get('name') or 'Unknown'}"
    if blueprint.get("location"):
        details += f" | Found at: {blueprint['location']}"
    if blueprint.get("map"):
        details += f" | Map: {blueprint['map']}"
    if blueprint.get("description"):
        details += f" | {blueprint['description']}"
    return details + DATA_SUFFIX


def blueprint_not_found(raw_name: str) -> str:
    return f'Blueprint "{raw_name}" not found. Try searching with a partial name.'


def format_arc(arc: Dict[str, Any], loot: Optional[LootRecord]) -> str:
    details = arc.get("name") or "Unknown ARC"

    if loot is not None and loot.loot:
        notable = loot.notable()
        if notable:
            listed = ", ".join(f"{drop.item} ({drop.rarity})" for drop in notable)
            details += f" | Notable Loot: {listed}"
        else:
            listed = ", ".join(drop.item for drop in loot.loot[:3])
            details += f" | Loot: {listed}"

    return details + DATA_SUFFIX


def arc_not_found(raw_name: str) -> str:
    return f'ARC enemy "{raw_name}" not found. Try common enemies like: Wasp, Hornet, Leaper, Queen'


def _parse_start_time(value: Any) -> Optional[datetime]:
    # Numbers are epoch milliseconds, strings ISO-8601.
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str) and value.strip():
        candidate = value.strip()
        if candidate.endswith("Z"):
            candidate = candidate[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(candidate)
        except ValueError:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)
    return None


def format_event_time(value: Any) -> str:
    """Render like ``1/5/2026, 3:00:00 PM`` (UTC), or ``TBA``."""
    parsed = _parse_start_time(value) if value else None
    if parsed is None:
        return "TBA"
    hour = parsed.hour % 12 or 12
    meridiem = "AM" if parsed.hour < 12 else "PM"
    return f"{parsed.month}/{parsed.day}/{parsed.year}, {hour}:{parsed.minute:02d}:{parsed.second:02d} {meridiem}"


def format_events(events: Sequence[Dict[str, Any]]) -> str:
    if not events:
        return "No upcoming events scheduled."
    lines = [
        f"{idx}. {event.get('name') or 'Unknown Event'} - {format_event_time(event.get('startTime'))}"
        for idx, event in enumerate(events[:3], start=1)
    ]
    return f"Upcoming Events: {' | '.join(lines)}{DATA_SUFFIX}"


def format_map_list(table: MapTable) -> str:
    return (
        f"Available Maps: {', '.join(table.names())} "
        f"| Use !map <name> for interactive map link{DATA_SUFFIX}"
    )


def map_not_found(raw_name: str) -> str:
    return f'Map "{raw_name}" not found. Use !maps to see all available maps.'


def format_map(resolution: MapResolution) -> str:
    entry = resolution.map
    response = entry.name

    if resolution.level_name:
        response += (
            f" ({resolution.level_name}) - Interactive Map: {entry.url}"
            f' - Select "{resolution.level_name}" in top-right filters'
        )
    elif resolution.level_unmatched:
        response += (
            f" - Available levels: {', '.join(entry.level_names())}. "
            f"Example: !map {resolution.map_key}-{entry.level_aliases()[0]}"
        )
    elif resolution.needs_level_hint:
        examples = entry.level_aliases()[:2]
        tip = " or ".join(f'"!map {resolution.map_key}-{alias}"' for alias in examples)
        response += f" - Interactive Map: {entry.url} - Tip: Use {tip}"
    else:
        response += f" - Interactive Map: {entry.url}"

    return response + DATA_SUFFIX


def format_countdown(window_end: Any, now: Optional[datetime] = None) -> str:
    """`` (resets in 2d 3h 4m)`` for a Unix-seconds window end, or ``""``."""
    if not window_end or isinstance(window_end, bool) or not isinstance(window_end, (int, float)):
        return ""

    now = now or datetime.now(timezone.utc)
    ms_left = window_end * 1000 - now.timestamp() * 1000
    if ms_left <= 0:
        return " (resetting soon)"

    total_mins = int(ms_left // 60000)
    days, remainder = divmod(total_mins, 1440)
    hours, mins = divmod(remainder, 60)

    parts = []
    if days > 0:
        parts.append(f"{days}d")
    if hours > 0:
        parts.append(f"{hours}h")
    if mins > 0:
        parts.append(f"{mins}m")
    return f" (resets in {' '.join(parts)})" if parts else ""


def format_trials(payload: Any, now: Optional[datetime] = None) -> str:
    envelope = payload if isinstance(payload, dict) else {}
    trials = as_list(envelope.get("data"))
    active = [trial for trial in trials if isinstance(trial, dict) and trial.get("is_active")]

    if not active:
        return f"No active weekly trials right now. Check back later! | {TRIALS_LINK}"

    countdown = format_countdown(envelope.get("activeWindowEnd"), now=now)
    names = " | ".join(str(trial.get("name") or "") for trial in active)
    return f"Active Weekly Trials{countdown}: {names} | {TRIALS_LINK}"
