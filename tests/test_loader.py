"""Tests for game data and progress loading."""

import json

import pytest
import yaml

from questgraph.loader import GameDataError, load_game_data, load_progress, parse_member

GAME_DATA = {
    "tasks": [
        {
            "id": "a",
            "name": "Debut",
            "factionName": None,
            "taskRequirements": [],
            "objectives": [{"id": "a-1", "count": None}],
        },
        {
            "id": "b",
            "taskRequirements": [{"task": {"id": "a"}, "status": None}, None],
            "traderLevelRequirements": [{"trader": {"id": "prapor"}, "level": 2}],
        },
    ],
    "hideoutStations": [
        {"id": "stash", "normalizedName": "stash", "levels": [{"id": "stash-1", "level": 1}]}
    ],
    "editions": [{"id": "standard", "value": 1, "defaultStashLevel": 1}],
}


# ==================== GAME DATA ====================


class TestLoadGameData:
    """Test game data documents."""

    def test_json(self, tmp_path):
        """JSON documents load with provider field names."""
        path = tmp_path / "data.json"
        path.write_text(json.dumps(GAME_DATA), encoding="utf-8")
        game_data = load_game_data(path)
        assert [task.id for task in game_data.tasks] == ["a", "b"]
        assert game_data.hideout_stations[0].levels[0].id == "stash-1"
        assert game_data.editions[0].default_stash_level == 1

    def test_nulls_default(self, tmp_path):
        """Null optional fields fall back to defaults."""
        path = tmp_path / "data.json"
        path.write_text(json.dumps(GAME_DATA), encoding="utf-8")
        tasks = load_game_data(path).tasks
        assert tasks[0].faction_name == "Any"
        assert tasks[0].objectives[0].count == 1
        assert tasks[1].task_requirements[0].status == []
        assert len(tasks[1].task_requirements) == 1

    def test_yaml(self, tmp_path):
        """YAML documents load the same way."""
        path = tmp_path / "data.yaml"
        path.write_text(yaml.safe_dump(GAME_DATA), encoding="utf-8")
        assert len(load_game_data(path).tasks) == 2

    def test_graphql_wrapper(self, tmp_path):
        """A `data` wrapper is unwrapped."""
        path = tmp_path / "data.json"
        path.write_text(json.dumps({"data": GAME_DATA}), encoding="utf-8")
        assert len(load_game_data(path).tasks) == 2

    def test_missing_file(self, tmp_path):
        """Missing files raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_game_data(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        """Unparseable documents raise GameDataError."""
        path = tmp_path / "data.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(GameDataError, match="Could not parse"):
            load_game_data(path)

    def test_schema_error(self, tmp_path):
        """Tasks without ids fail validation."""
        path = tmp_path / "data.json"
        path.write_text(json.dumps({"tasks": [{"name": "no id"}]}), encoding="utf-8")
        with pytest.raises(GameDataError, match="Schema validation failed"):
            load_game_data(path)

    def test_empty(self, tmp_path):
        """Empty documents are rejected."""
        path = tmp_path / "data.yaml"
        path.write_text("", encoding="utf-8")
        with pytest.raises(GameDataError, match="Empty document"):
            load_game_data(path)


# ==================== PROGRESS ====================


class TestLoadProgress:
    """Test team progress documents."""

    def test_rows_and_bare_progress(self, tmp_path):
        """Members may be stored rows or bare progress objects."""
        document = {
            "members": {
                "me": {
                    "gameEdition": 4,
                    "currentGameMode": "pve",
                    "pvp": {"level": 12},
                    "pve": {"level": 30, "pmcFaction": "BEAR"},
                },
                "friend": {"level": 7, "taskCompletions": {"a": {"complete": True}}},
            }
        }
        path = tmp_path / "team.yaml"
        path.write_text(yaml.safe_dump(document, sort_keys=False), encoding="utf-8")
        team = load_progress(path)
        assert list(team) == ["me", "friend"]
        assert team["me"].game_edition == 4
        assert team["me"].for_mode(None).level == 30
        assert team["me"].for_mode("pvp").level == 12
        assert team["friend"].for_mode("pve").is_task_completed("a")
        assert team["friend"].for_mode("pvp").level == 7
        assert team["friend"].game_edition == 1

    def test_default_game_edition(self, tmp_path):
        """Members without an edition take the supplied default."""
        document = {
            "members": {
                "me": {"gameEdition": 2, "pvp": {"level": 12}},
                "row": {"pvp": {"level": 20}},
                "bare": {"level": 10},
            }
        }
        path = tmp_path / "team.json"
        path.write_text(json.dumps(document), encoding="utf-8")
        team = load_progress(path, default_game_edition=5)
        assert team["me"].game_edition == 2
        assert team["row"].game_edition == 5
        assert team["bare"].game_edition == 5

    def test_parse_member_default_edition(self):
        """A bare member gets the default edition."""
        assert parse_member({"level": 10}, default_game_edition=5).game_edition == 5
        assert parse_member({"level": 10}).game_edition == 1
        assert parse_member({"game_edition": 3}, default_game_edition=5).game_edition == 3

    def test_missing_members(self, tmp_path):
        """Documents without members are rejected."""
        path = tmp_path / "team.json"
        path.write_text(json.dumps({"team": []}), encoding="utf-8")
        with pytest.raises(GameDataError, match="members"):
            load_progress(path)

    def test_invalid_member(self, tmp_path):
        """Invalid member data names the member."""
        path = tmp_path / "team.json"
        path.write_text(json.dumps({"members": {"me": {"level": "high"}}}), encoding="utf-8")
        with pytest.raises(GameDataError, match="member me"):
            load_progress(path)
