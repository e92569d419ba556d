"""
Unit tests for chat response formatting.
"""

import pytest
from datetime import datetime, timedelta, timezone

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_chatbot.app.adapters.loot_store import LootDrop, LootRecord
from service_chatbot.app.formatting import chat_formatter as fmt
from service_chatbot.app.resolution.map_resolver import resolve_map_token
from service_chatbot.app.resolution.maps import MAPS


NOW = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


class TestEntityFormatting:
    """Quest, item, blueprint and ARC lines."""

    def test_quest_list(self):
        quests = [{"name": f"Q{i}"} for i in range(7)]
        assert fmt.format_quest_list(quests) == (
            "Found 7 quests. Examples: Q0, Q1, Q2, Q3, Q4... "
            "| Use !quest <name> for details | Data from metaforge.app/arc-raiders"
        )

    def test_empty_quest_list(self):
        assert fmt.format_quest_list([]) == "No quests found."

    def test_full_quest(self):
        quest = {
            "name": "A Bad Feeling",
            "description": "Investigate the signal",
            "objectives": ["Reach the tower", "Scan the relay"],
            "granted_items": [{"name": "Bandage"}, "Metal Parts", {}],
            "xp": 500,
        }
        assert fmt.format_quest(quest) == (
            "Quest: A Bad Feeling | Investigate the signal "
            "| Objectives: Reach the tower, Scan the relay "
            "| Rewards: Bandage, Metal Parts, Item | XP: 500"
            " | Data from metaforge.app/arc-raiders"
        )

    def test_quest_without_optional_fields(self):
        assert fmt.format_quest({"name": "Bare", "xp": 0}) == (
            "Quest: Bare | Data from metaforge.app/arc-raiders"
        )

    def test_item(self):
        item = {"name": "Rifle", "category": "Weapon", "description": "Reliable"}
        assert fmt.format_item(item) == "Rifle (Weapon) - Reliable | Data from metaforge.app/arc-raiders"

    def test_blueprint(self):
        blueprint = {"name": "Rifle Blueprint", "location": "Control Tower", "map": "Dam"}
        assert fmt.format_blueprint(blueprint) == (
            "Blueprint: Rifle Blueprint | Found at: Control Tower | Map: Dam"
            " | Data from metaforge.app/arc-raiders"
        )

    def test_not_found_messages_echo_input(self):
        assert fmt.quest_not_found("zz") == 'Quest "zz" not found. Try !quests to see available quests.'
        assert fmt.item_not_found("zz") == 'Item "zz" not found.'
        assert fmt.blueprint_not_found("zz").startswith('Blueprint "zz" not found.')
        assert fmt.arc_not_found("zz").startswith('ARC enemy "zz" not found.')
        assert fmt.map_not_found("zz") == 'Map "zz" not found. Use !maps to see all available maps.'

    def test_arc_with_notable_loot(self):
        loot = LootRecord("bison", (LootDrop("Leaper Pulse Unit", "Epic"), LootDrop("ARC Alloy", "Uncommon")))
        assert fmt.format_arc({"name": "Leaper"}, loot) == (
            "Leaper | Notable Loot: Leaper Pulse Unit (Epic) | Data from metaforge.app/arc-raiders"
        )

    def test_arc_without_notable_loot_lists_first_three(self):
        loot = LootRecord("wasp", tuple(LootDrop(f"Part {i}", "Common") for i in range(5)))
        assert fmt.format_arc({"name": "Wasp"}, loot) == (
            "Wasp | Loot: Part 0, Part 1, Part 2 | Data from metaforge.app/arc-raiders"
        )

    def test_arc_without_loot_record(self):
        assert fmt.format_arc({"name": "Tick"}, None) == "Tick | Data from metaforge.app/arc-raiders"

    def test_error_message(self):
        assert fmt.error_message("quests") == "Error fetching quests. Please try again later."
        assert fmt.error_message("arc") == "Error fetching ARC data. Please try again later."

    def test_as_list(self):
        assert fmt.as_list([1]) == [1]
        assert fmt.as_list({"data": [1]}) == []
        assert fmt.as_list(None) == []


class TestEventFormatting:
    """Event schedule lines."""

    def test_iso_start_time(self):
        assert fmt.format_event_time("2026-01-05T15:00:00Z") == "1/5/2026, 3:00:00 PM"

    def test_epoch_millis_start_time(self):
        start = int(datetime(2026, 3, 9, 0, 5, 7, tzinfo=timezone.utc).timestamp() * 1000)
        assert fmt.format_event_time(start) == "3/9/2026, 12:05:07 AM"

    @pytest.mark.parametrize("value", [None, "", "not-a-date", True])
    def test_missing_or_bad_start_time(self, value):
        assert fmt.format_event_time(value) == "TBA"

    def test_events_shows_first_three(self):
        events = [
            {"name": "Night Raid", "startTime": "2026-01-05T15:00:00Z"},
            {"name": "Storm"},
            {"startTime": "2026-01-06T09:30:00Z"},
            {"name": "Hidden"},
        ]
        assert fmt.format_events(events) == (
            "Upcoming Events: 1. Night Raid - 1/5/2026, 3:00:00 PM | 2. Storm - TBA "
            "| 3. Unknown Event - 1/6/2026, 9:30:00 AM | Data from metaforge.app/arc-raiders"
        )

    def test_no_events(self):
        assert fmt.format_events([]) == "No upcoming events scheduled."


class TestTrialsFormatting:
    """Weekly trials and countdown."""

    def test_countdown(self):
        window_end = (NOW + timedelta(days=2, hours=3, minutes=4, seconds=30)).timestamp()
        assert fmt.format_countdown(window_end, now=NOW) == " (resets in 2d 3h 4m)"

    def test_countdown_omits_zero_units(self):
        window_end = (NOW + timedelta(hours=5)).timestamp()
        assert fmt.format_countdown(window_end, now=NOW) == " (resets in 5h)"

    def test_countdown_under_a_minute(self):
        window_end = (NOW + timedelta(seconds=30)).timestamp()
        assert fmt.format_countdown(window_end, now=NOW) == ""

    def test_countdown_elapsed(self):
        window_end = (NOW - timedelta(minutes=1)).timestamp()
        assert fmt.format_countdown(window_end, now=NOW) == " (resetting soon)"

    @pytest.mark.parametrize("window_end", [None, 0, "soon"])
    def test_countdown_without_window(self, window_end):
        assert fmt.format_countdown(window_end, now=NOW) == ""

    def test_active_trials(self):
        payload = {
            "data": [
                {"name": "Trial A", "is_active": True},
                {"name": "Trial B", "is_active": False},
                {"name": "Trial C", "is_active": True},
            ],
            "activeWindowEnd": (NOW + timedelta(days=1)).timestamp(),
        }
        assert fmt.format_trials(payload, now=NOW) == (
            "Active Weekly Trials (resets in 1d): Trial A | Trial C "
            "| metaforge.app/arc-raiders/weekly-trials"
        )

    def test_no_active_trials(self):
        payload = {"data": [{"name": "Trial B", "is_active": False}]}
        assert fmt.format_trials(payload, now=NOW) == (
            "No active weekly trials right now. Check back later! "
            "| metaforge.app/arc-raiders/weekly-trials"
        )

    def test_active_trial_without_name(self):
        payload = {"data": [{"name": "Trial A", "is_active": True}, {"is_active": True}]}
        assert fmt.format_trials(payload, now=NOW) == (
            "Active Weekly Trials: Trial A |  | metaforge.app/arc-raiders/weekly-trials"
        )

    def test_unexpected_payload(self):
        assert fmt.format_trials([], now=NOW).startswith("No active weekly trials")


class TestMapFormatting:
    """Map lines for each resolution outcome."""

    def test_map_list(self):
        assert fmt.format_map_list(MAPS) == (
            "Available Maps: Dam Battlegrounds, The Spaceport, Buried City, Blue Gate, Stella Montis "
            "| Use !map <name> for interactive map link | Data from metaforge.app/arc-raiders"
        )

    def test_map_with_level(self):
        assert fmt.format_map(resolve_map_token("stella-topfloor")) == (
            "Stella Montis (Top Floor) - Interactive Map: https://metaforge.app/arc-raiders/map/stella-montis"
            ' - Select "Top Floor" in top-right filters | Data from metaforge.app/arc-raiders'
        )

    def test_map_with_unknown_level(self):
        assert fmt.format_map(resolve_map_token("blue-gate-basement")) == (
            "Blue Gate - Available levels: Surface, Underground. Example: !map blue-gate-surface"
            " | Data from metaforge.app/arc-raiders"
        )

    def test_map_needing_level_hint(self):
        assert fmt.format_map(resolve_map_token("spaceport")) == (
            "The Spaceport - Interactive Map: https://metaforge.app/arc-raiders/map/spaceport"
            ' - Tip: Use "!map spaceport-surface" or "!map spaceport-tunnels"'
            " | Data from metaforge.app/arc-raiders"
        )

    def test_map_without_levels(self):
        assert fmt.format_map(resolve_map_token("dam")) == (
            "Dam Battlegrounds - Interactive Map: https://metaforge.app/arc-raiders/map/dam"
            " | Data from metaforge.app/arc-raiders"
        )
