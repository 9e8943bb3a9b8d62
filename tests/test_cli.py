"""CLI tests running against the rule-based client and a temporary data dir."""

from __future__ import annotations

import json

import pytest

from taskflow.adapters.storage_json import JsonEntityStore
from taskflow.cli import _parse_update_fields, main


@pytest.fixture
def config_path(tmp_path, monkeypatch) -> str:
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"data_dir": str(tmp_path / "data")}), encoding="utf-8")
    return str(path)


def _run(config_path: str, *argv: str) -> None:
    main(["--config", config_path, *argv])


def test_chat_creates_task_and_reports_result(config_path, capsys) -> None:
    _run(config_path, "chat", "task: buy milk, important")

    out = capsys.readouterr().out
    assert "Added a task: buy milk, important." in out
    assert "[ACTION:" not in out
    assert "  ok   CREATE_TASK #1" in out

    _run(config_path, "list", "tasks")

    [line] = capsys.readouterr().out.strip().splitlines()
    task = json.loads(line)
    assert (task["title"], task["priority"], task["status"]) == ("buy milk, important", "high", "pending")


def test_chat_json_output(config_path, capsys) -> None:
    _run(config_path, "chat", "--json", "remember the cello")

    payload = json.loads(capsys.readouterr().out)
    assert payload["success"] is True
    assert payload["actions"] == [{"type": "CREATE_SCRAP", "data": {"content": "remember the cello"}}]
    assert payload["action_results"][0]["data"]["processed"] is False


def test_scrap_and_unprocessed_listing(config_path, capsys) -> None:
    _run(config_path, "scrap", "gift ideas for dad", "--date", "2025-06-15")
    assert capsys.readouterr().out.strip() == "Captured scrap #1."

    _run(config_path, "list", "scraps", "--unprocessed")

    [line] = capsys.readouterr().out.strip().splitlines()
    scrap = json.loads(line)
    assert scrap["content"] == "gift ideas for dad"
    assert scrap["date_assigned"] == "2025-06-15"


def test_update_task_validates_fields(config_path, capsys) -> None:
    _run(config_path, "chat", "task: draft report")
    capsys.readouterr()

    _run(config_path, "update", "task", "1", "--set", "status=completed")
    assert capsys.readouterr().out.strip() == "Updated task 1."

    with pytest.raises(SystemExit) as excinfo:
        _run(config_path, "update", "task", "1", "--set", "priority=critical")
    assert "priority" in str(excinfo.value.code)


def test_update_missing_entity_exits_with_message(config_path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        _run(config_path, "update", "note", "9", "--json", '{"title": "x"}')

    assert excinfo.value.code == "Note 9 not found"


def test_history_shows_recent_turns(config_path, capsys) -> None:
    _run(config_path, "chat", "project: Garden")
    _run(config_path, "chat", "note: Plant tomatoes in May")
    capsys.readouterr()

    _run(config_path, "history", "--limit", "1")

    out = capsys.readouterr().out
    assert "You: note: Plant tomatoes in May" in out
    assert "AI: Saved a note: Plant tomatoes in May." in out
    assert "Garden" not in out


def test_missing_config_file_exits(tmp_path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["--config", str(tmp_path / "missing.json"), "list", "tasks"])

    assert "Config file not found" in str(excinfo.value.code)


def test_parse_update_fields_merges_json_and_set() -> None:
    updates = _parse_update_fields(["status=on_hold"], '{"name": "Renamed", "status": "active"}')

    assert updates == {"name": "Renamed", "status": "on_hold"}


@pytest.mark.parametrize("pairs, payload", [(["novalue"], None), (["=x"], None), ([], "[1, 2]"), ([], "{bad")])
def test_parse_update_fields_rejects_bad_input(pairs, payload) -> None:
    with pytest.raises(SystemExit):
        _parse_update_fields(pairs, payload)


def test_update_note_tags_are_stored_as_list(config_path, capsys, tmp_path) -> None:
    _run(config_path, "chat", "note: Plant tomatoes in May")
    capsys.readouterr()

    _run(config_path, "update", "note", "1", "--set", "tags=garden, spring", "--set", "date_assigned=2025-05-01")

    assert capsys.readouterr().out.strip() == "Updated note 1."
    note = JsonEntityStore(str(tmp_path / "data")).get_note(1).value
    assert note.tags == ["garden", "spring"]
    assert note.date_assigned == "2025-05-01"


def test_update_note_rejects_bad_date(config_path, capsys, tmp_path) -> None:
    _run(config_path, "chat", "note: Plant tomatoes in May")
    capsys.readouterr()

    with pytest.raises(SystemExit) as excinfo:
        _run(config_path, "update", "note", "1", "--set", "date_assigned=next week")

    assert "date_assigned" in str(excinfo.value.code)
    assert JsonEntityStore(str(tmp_path / "data")).get_note(1).value.date_assigned is None


def test_update_project_rejects_unknown_status(config_path, capsys, tmp_path) -> None:
    _run(config_path, "chat", "project: Garden")
    capsys.readouterr()

    with pytest.raises(SystemExit) as excinfo:
        _run(config_path, "update", "project", "1", "--set", "status=bogus")

    assert "Invalid project update payload: status" in str(excinfo.value.code)
    assert JsonEntityStore(str(tmp_path / "data")).get_project(1).value.status == "active"


def test_update_project_status_and_tags(config_path, capsys, tmp_path) -> None:
    _run(config_path, "chat", "project: Garden")
    capsys.readouterr()

    _run(config_path, "update", "project", "1", "--json", '{"status": "on_hold", "tags": "outdoor"}')

    project = JsonEntityStore(str(tmp_path / "data")).get_project(1).value
    assert (project.status, project.tags) == ("on_hold", ["outdoor"])
