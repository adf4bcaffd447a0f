"""Tests for the CLI commands."""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from checkmate.adapters.file_store import FileTaskStore
from checkmate.cli import main
from checkmate.config import Config


@pytest.fixture
def config(tmp_path):
    return Config(data_dir=str(tmp_path / "data"))


@pytest.fixture
def runner(config):
    with patch("checkmate.cli.load_config", return_value=config):
        yield CliRunner()


@pytest.fixture
def store(config):
    return FileTaskStore(config.data_path)


@pytest.fixture
def seeded(store, make_task, now):
    store.save(
        [
            make_task("Email Alice", id="aaa111", location="home", priority="high"),
            make_task("Deep work", id="bbb222", time="long", load="high", location="work"),
            make_task("Groceries", id="ccc333", location="errands", completed_at=now),
        ]
    )
    return store


class TestAdd:
    def test_add(self, runner, store):
        result = runner.invoke(
            main, ["add", "Call mom", "--time", "quick", "--load", "low", "--location", "home"]
        )

        assert result.exit_code == 0
        assert "Added: [ ]" in result.output
        assert "Call mom (<15m, low load, home, medium priority)" in result.output
        assert store.load()[0].title == "Call mom"

    def test_add_with_due_date(self, runner, store):
        result = runner.invoke(main, ["add", "Taxes", "--due", "2025-04-15"])
        assert result.exit_code == 0
        assert "due 2025-04-15" in result.output

    def test_rejects_unknown_choice(self, runner):
        result = runner.invoke(main, ["add", "x", "--time", "forever"])
        assert result.exit_code == 2

    def test_blank_title(self, runner):
        result = runner.invoke(main, ["add", "   "])
        assert result.exit_code == 1
        assert "Error:" in result.output


class TestList:
    def test_empty(self, runner):
        result = runner.invoke(main, ["list"])
        assert "No tasks yet" in result.output

    def test_active_by_priority(self, runner, seeded):
        result = runner.invoke(main, ["list"])

        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert "Email Alice" in lines[0]
        assert "Deep work" in lines[1]
        assert "Groceries" not in result.output
        assert "2 tasks" in result.output

    def test_completed_json(self, runner, seeded):
        result = runner.invoke(main, ["list", "--status", "completed", "--json"])
        data = json.loads(result.output)
        assert [t["title"] for t in data] == ["Groceries"]

    def test_no_matches(self, runner, store, make_task):
        store.save([make_task("Open")])
        result = runner.invoke(main, ["list", "--status", "completed"])
        assert "No matching tasks." in result.output


class TestDoneAndDelete:
    def test_done_toggles(self, runner, seeded):
        result = runner.invoke(main, ["done", "aaa"])
        assert result.exit_code == 0
        assert "Completed: Email Alice" in result.output

        result = runner.invoke(main, ["done", "aaa"])
        assert "Reopened: Email Alice" in result.output

    def test_done_unknown(self, runner, seeded):
        result = runner.invoke(main, ["done", "zzz"])
        assert result.exit_code == 1
        assert "No task matching 'zzz'" in result.output

    def test_delete_confirmed(self, runner, seeded):
        result = runner.invoke(main, ["delete", "bbb"], input="y\n")
        assert "Deleted: Deep work" in result.output
        assert [t.id for t in seeded.load()] == ["aaa111", "ccc333"]

    def test_delete_declined(self, runner, seeded):
        runner.invoke(main, ["delete", "bbb"], input="n\n")
        assert len(seeded.load()) == 3

    def test_delete_yes_flag(self, runner, seeded):
        result = runner.invoke(main, ["delete", "ccc333", "--yes"])
        assert "Deleted: Groceries" in result.output


class TestSuggest:
    def test_headline_and_rest(self, runner, store, make_task):
        store.save([make_task(f"Task {i}", location="home") for i in range(5)])

        result = runner.invoke(main, ["suggest", "--time", "quick", "--energy", "low"])

        assert result.exit_code == 0
        assert "Context: <15m available, low energy, at home" in result.output
        before, after = result.output.split("Also fits:")
        assert before.count("Task ") == 3
        assert after.count("Task ") == 2

    def test_nothing_fits(self, runner, seeded):
        result = runner.invoke(main, ["suggest", "--location", "online", "--time", "quick"])
        assert "Nothing fits right now" in result.output

    def test_anywhere_is_not_a_context(self, runner):
        result = runner.invoke(main, ["suggest", "--location", "anywhere"])
        assert result.exit_code == 2

    def test_json(self, runner, seeded):
        result = runner.invoke(
            main, ["suggest", "--time", "long", "--energy", "high", "--location", "work", "--json"]
        )
        assert [t["title"] for t in json.loads(result.output)] == ["Deep work"]


class TestProgress:
    def test_text(self, runner, seeded):
        result = runner.invoke(main, ["progress"])
        assert result.exit_code == 0
        assert "Completion rate: 33% (1 of 3 done, 2 active)" in result.output

    def test_empty(self, runner):
        result = runner.invoke(main, ["progress"])
        assert "No progress data yet" in result.output

    def test_json(self, runner, seeded):
        data = json.loads(runner.invoke(main, ["progress", "--json"]).output)
        assert data["total"] == 3
        assert data["location"]["errands"] == 1
        assert data["most_productive_location"] == "errands"


class TestExportImport:
    def test_export_to_stdout(self, runner, seeded):
        result = runner.invoke(main, ["export", "--format", "csv", "--scope", "active", "-o", "-"])
        assert result.exit_code == 0
        assert result.output.startswith('"Title"')
        assert "Groceries" not in result.output

    def test_export_to_file(self, runner, seeded, tmp_path):
        target = tmp_path / "out.json"
        result = runner.invoke(main, ["export", "-o", str(target)])

        assert f"Exported to {target}" in result.output
        assert json.loads(target.read_text())["exportInfo"]["totalTasks"] == 3

    def test_import_merge(self, runner, store, make_task, tmp_path):
        source = tmp_path / "in.json"
        source.write_text(json.dumps({"tasks": [make_task("Imported", id="imp1").to_dict()]}))

        result = runner.invoke(main, ["import", str(source)])

        assert result.exit_code == 0
        assert "Imported 1 task." in result.output
        assert [t.title for t in store.load()] == ["Imported"]

    def test_import_invalid(self, runner, tmp_path):
        source = tmp_path / "bad.json"
        source.write_text("not json")
        result = runner.invoke(main, ["import", str(source)])
        assert result.exit_code == 1
        assert "Invalid JSON" in result.output

    def test_import_non_string_title(self, runner, make_task, tmp_path):
        record = make_task("A").to_dict()
        record["title"] = 42
        source = tmp_path / "bad.json"
        source.write_text(json.dumps([record]))

        result = runner.invoke(main, ["import", str(source)])

        assert result.exit_code == 1
        assert "Error: Task t1: title must be a string" in result.output

    def test_import_replace_needs_confirmation(self, runner, seeded, make_task, tmp_path):
        source = tmp_path / "in.json"
        source.write_text(json.dumps([make_task("Only", id="o1").to_dict()]))

        runner.invoke(main, ["import", str(source), "--replace"], input="n\n")
        assert len(seeded.load()) == 3

        runner.invoke(main, ["import", str(source), "--replace"], input="y\n")
        assert [t.title for t in seeded.load()] == ["Only"]


class TestFocus:
    def test_stop_and_mark_done(self, runner, seeded):
        with patch("checkmate.cli.time.sleep", side_effect=[None, KeyboardInterrupt]):
            result = runner.invoke(main, ["focus", "aaa"], input="y\n")

        assert result.exit_code == 0
        assert "Focus: Email Alice" in result.output
        assert "0:01" in result.output
        assert "Completed: Email Alice" in result.output
        assert next(t for t in seeded.load() if t.id == "aaa111").completed

    def test_stop_without_marking(self, runner, seeded):
        with patch("checkmate.cli.time.sleep", side_effect=KeyboardInterrupt):
            runner.invoke(main, ["focus", "aaa"], input="n\n")
        assert not next(t for t in seeded.load() if t.id == "aaa111").completed
