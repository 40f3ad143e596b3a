import json

import pytest
import yaml
from typer.testing import CliRunner

from channel_lineup.cli import app

runner = CliRunner()

MINUTE = 60_000
HOUR = 60 * MINUTE
MIDNIGHT = 1_704_067_200_000


@pytest.fixture(autouse=True)
def quiet_logs(monkeypatch):
    """Keep log lines out of the captured output."""
    monkeypatch.setenv("LINEUP_LOG_LEVEL", "WARNING")


@pytest.fixture
def programs_file(tmp_path):
    path = tmp_path / "programs.yaml"
    path.write_text(
        yaml.dump(
            [
                {"id": f"ep{n}", "durationMs": 22 * MINUTE, "kind": "episode", "groupKey": "bluey", "episode": n}
                for n in range(1, 5)
            ]
        )
    )
    return path


@pytest.fixture
def lineup_file(tmp_path):
    path = tmp_path / "lineup.json"
    path.write_text(
        json.dumps(
            {
                "start_time": MIDNIGHT,
                "entries": [
                    {"type": "program", "program_id": "a", "duration_ms": HOUR, "group_key": "g1"},
                    {"type": "flex", "duration_ms": MINUTE},
                    {"type": "flex", "duration_ms": MINUTE},
                    {"type": "program", "program_id": "b", "duration_ms": 2 * HOUR, "group_key": "g2"},
                ],
            }
        )
    )
    return path


def test_schedule_time_slots_json(tmp_path, programs_file):
    spec = tmp_path / "spec.yaml"
    spec.write_text(
        yaml.dump(
            {
                "maxDays": 1,
                "slots": [
                    {"timeOfDayMs": 0, "selector": "show.bluey", "order": "ordered"},
                    {"timeOfDayMs": 2 * HOUR, "selector": "flex"},
                ],
            }
        )
    )

    result = runner.invoke(
        app, ["schedule", "time-slots", str(spec), str(programs_file), "--now", str(MIDNIGHT), "--json"]
    )

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["start_time"] == MIDNIGHT
    assert [e["program_id"] for e in data["entries"][:5]] == ["ep1", "ep2", "ep3", "ep4", "ep1"]
    assert sum(e["duration_ms"] for e in data["entries"]) == 24 * HOUR


def test_schedule_random_slots_table(tmp_path, programs_file):
    spec = tmp_path / "spec.json"
    spec.write_text(json.dumps({"max_days": 1, "slots": [{"selector": "episode"}]}))

    result = runner.invoke(
        app, ["schedule", "random-slots", str(spec), str(programs_file), "--now", str(MIDNIGHT), "--seed", "4"]
    )

    assert result.exit_code == 0, result.output
    assert "Random Slot Lineup" in result.stdout
    assert "Total Duration" in result.stdout


def test_schedule_invalid_spec(tmp_path, programs_file):
    spec = tmp_path / "spec.yaml"
    spec.write_text(yaml.dump({"max_days": 0}))

    result = runner.invoke(app, ["schedule", "time-slots", str(spec), str(programs_file)])

    assert result.exit_code == 1


def test_schedule_missing_programs_file(tmp_path):
    spec = tmp_path / "spec.yaml"
    spec.write_text(yaml.dump({"max_days": 1}))

    result = runner.invoke(app, ["schedule", "random-slots", str(spec), str(tmp_path / "missing.yaml")])

    assert result.exit_code == 1


def test_transform_consolidate(lineup_file):
    result = runner.invoke(app, ["transform", "consolidate", str(lineup_file), "--json"])

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert [e["type"] for e in data["entries"]] == ["program", "flex", "program"]
    assert data["entries"][1]["duration_ms"] == 2 * MINUTE


def test_transform_replicate(lineup_file):
    result = runner.invoke(app, ["transform", "replicate", str(lineup_file), "--count", "3", "--json"])

    assert result.exit_code == 0, result.output
    assert len(json.loads(result.stdout)["entries"]) == 12


def test_transform_balance(lineup_file):
    result = runner.invoke(app, ["transform", "balance", str(lineup_file), "--by", "program_count", "--json"])

    assert result.exit_code == 0, result.output
    assert len(json.loads(result.stdout)["entries"]) == 4


def test_transform_restrict_hours(lineup_file):
    result = runner.invoke(
        app,
        ["transform", "restrict-hours", str(lineup_file), "--start", "18:00", "--end", "22:00",
         "--now", str(MIDNIGHT), "--json"],
    )

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["start_time"] == MIDNIGHT + 18 * HOUR
    assert [e["type"] for e in data["entries"]] == ["program", "program"]


def test_transform_restrict_hours_bad_time(lineup_file):
    result = runner.invoke(app, ["transform", "restrict-hours", str(lineup_file), "--start", "25:99", "--end", "22:00"])

    assert result.exit_code != 0


def test_config_show_json():
    result = runner.invoke(app, ["config", "show", "--json"])

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["iteration_cap"] == 40_000
    assert data["log_level"] == "WARNING"


def test_config_show_table():
    result = runner.invoke(app, ["config", "show"])

    assert result.exit_code == 0
    assert "slack_ms" in result.stdout
