"""Unit tests for the action dispatcher."""

from __future__ import annotations

import pytest

from taskflow.core.dispatcher import ActionDispatcher
from taskflow.core.errors import StoreError
from taskflow.core.models import ActionDirective


def _directive(action_type: str, **payload) -> ActionDirective:
    return ActionDirective(type=action_type, payload=payload)


@pytest.fixture
def dispatcher(store) -> ActionDispatcher:
    return ActionDispatcher(store)


@pytest.mark.parametrize(
    "action_type, payload",
    [
        ("CREATE_TASK", {"title": "Call plumber"}),
        ("CREATE_PROJECT", {"name": "Kitchen remodel"}),
        ("CREATE_NOTE", {"title": "Tile ideas", "content": "white hex"}),
        ("CREATE_SCRAP", {"content": "ask about permits"}),
    ],
)
def test_single_create_yields_one_matching_result(dispatcher, action_type, payload) -> None:
    results = dispatcher.dispatch([ActionDirective(type=action_type, payload=payload)])

    assert len(results) == 1
    assert results[0].directive.type == action_type
    assert results[0].success is True
    assert results[0].entity["id"] == 1


def test_create_task_applies_defaults(dispatcher, store) -> None:
    [result] = dispatcher.dispatch([_directive("CREATE_TASK", title="Buy milk")])

    task = store.get_task(result.entity["id"]).value
    assert task.priority == "medium"
    assert task.status == "pending"
    assert task.tags == []
    assert task.description == ""


def test_create_project_defaults_to_active(dispatcher) -> None:
    [result] = dispatcher.dispatch([_directive("CREATE_PROJECT", name="Garden", tags="outdoor, spring")])

    assert result.entity["status"] == "active"
    assert result.entity["tags"] == ["outdoor", "spring"]


def test_unknown_type_fails_without_touching_store(dispatcher, store) -> None:
    store.calls.clear()

    [result] = dispatcher.dispatch([_directive("UNKNOWN_TYPE")])

    assert result.success is False
    assert result.error == "Unknown action type: UNKNOWN_TYPE"
    assert store.calls == []


def test_invalid_priority_is_a_directive_failure(dispatcher, store) -> None:
    [result] = dispatcher.dispatch([_directive("CREATE_TASK", title="x", priority="critical")])

    assert result.success is False
    assert "priority" in result.error
    assert store.list_tasks() == []


def test_note_requires_title_and_content(dispatcher) -> None:
    [result] = dispatcher.dispatch([_directive("CREATE_NOTE", title="only title")])

    assert result.success is False
    assert "content" in result.error


def test_failure_does_not_abort_remaining_directives(dispatcher, store) -> None:
    results = dispatcher.dispatch(
        [
            _directive("CREATE_TASK", title="first"),
            _directive("UPDATE_TASK", id=99, updates={"status": "completed"}),
            _directive("BOGUS"),
            _directive("CREATE_SCRAP", content="last"),
        ]
    )

    assert [r.success for r in results] == [True, False, False, True]
    assert results[1].error == "Task 99 not found"
    assert [r.directive.type for r in results] == ["CREATE_TASK", "UPDATE_TASK", "BOGUS", "CREATE_SCRAP"]
    assert len(store.list_scraps()) == 1


def test_update_task_applies_only_allow_listed_fields(dispatcher, store) -> None:
    task = store.create_task({"title": "Draft report"}).value

    [result] = dispatcher.dispatch(
        [
            _directive(
                "UPDATE_TASK",
                id=task.id,
                updates={"status": "completed", "title": "Final report", "created_at": "1999-01-01", "id": 42},
            )
        ]
    )

    updated = store.get_task(task.id).value
    assert result.success is True
    assert updated.status == "completed"
    assert updated.title == "Final report"
    assert updated.id == task.id
    assert updated.created_at == task.created_at
    assert updated.updated_at >= task.updated_at


def test_update_task_accepts_string_id(dispatcher, store) -> None:
    task = store.create_task({"title": "Stringly"}).value

    [result] = dispatcher.dispatch([_directive("UPDATE_TASK", id=str(task.id), updates={"priority": "urgent"})])

    assert result.success is True
    assert result.entity["priority"] == "urgent"


def test_update_task_rejects_invalid_status(dispatcher, store) -> None:
    task = store.create_task({"title": "Stable"}).value

    [result] = dispatcher.dispatch([_directive("UPDATE_TASK", id=task.id, updates={"status": "done"})])

    assert result.success is False
    assert store.get_task(task.id).value.status == "pending"


def test_task_with_unknown_project_fails(dispatcher) -> None:
    [result] = dispatcher.dispatch([_directive("CREATE_TASK", title="orphan", project_id=7)])

    assert result.success is False
    assert result.error == "Project 7 not found"


def test_convert_scrap_to_note_defaults_content(dispatcher, store) -> None:
    scrap = store.create_scrap({"content": "Remember the blue paint code 4021"}).value

    [result] = dispatcher.dispatch(
        [_directive("CONVERT_SCRAP", scrap_id=scrap.id, to="note", data={"title": "Paint"})]
    )

    assert result.success is True
    note = store.get_note(result.entity["id"]).value
    assert note.content == scrap.content
    converted = store.get_scrap(scrap.id).value
    assert converted.processed is True
    assert converted.converted_to_type == "note"
    assert converted.converted_to_id == note.id


def test_convert_scrap_to_task_defaults_description(dispatcher, store) -> None:
    scrap = store.create_scrap({"content": "book dentist"}).value

    [result] = dispatcher.dispatch(
        [_directive("CONVERT_SCRAP", scrap_id=scrap.id, to="task", data={"title": "Dentist", "priority": "high"})]
    )

    assert result.entity["description"] == "book dentist"
    assert result.entity["priority"] == "high"
    assert store.get_scrap(scrap.id).value.converted_to_type == "task"


def test_convert_scrap_keeps_explicit_content(dispatcher, store) -> None:
    scrap = store.create_scrap({"content": "raw"}).value

    [result] = dispatcher.dispatch(
        [_directive("CONVERT_SCRAP", scrap_id=scrap.id, to="note", data={"title": "T", "content": "polished"})]
    )

    assert result.entity["content"] == "polished"


def test_convert_missing_scrap_fails(dispatcher, store) -> None:
    [result] = dispatcher.dispatch([_directive("CONVERT_SCRAP", scrap_id=5, to="task", data={"title": "x"})])

    assert result.success is False
    assert result.error == "Scrap 5 not found"
    assert store.list_tasks() == []


def test_convert_to_unsupported_target_fails(dispatcher, store) -> None:
    scrap = store.create_scrap({"content": "hmm"}).value

    [result] = dispatcher.dispatch([_directive("CONVERT_SCRAP", scrap_id=scrap.id, to="project", data={})])

    assert result.success is False
    assert "to" in result.error
    assert store.get_scrap(scrap.id).value.processed is False


def test_convert_task_without_title_leaves_scrap_unprocessed(dispatcher, store) -> None:
    scrap = store.create_scrap({"content": "untitled thought"}).value

    [result] = dispatcher.dispatch([_directive("CONVERT_SCRAP", scrap_id=scrap.id, to="task")])

    assert result.success is False
    assert "data.title" in result.error
    assert store.get_scrap(scrap.id).value.processed is False


def test_convert_processed_scrap_is_a_conflict(dispatcher, store) -> None:
    scrap = store.create_scrap({"content": "once only"}).value
    first = dispatcher.dispatch_one(_directive("CONVERT_SCRAP", scrap_id=scrap.id, to="note", data={"title": "A"}))

    second = dispatcher.dispatch_one(_directive("CONVERT_SCRAP", scrap_id=scrap.id, to="note", data={"title": "B"}))

    assert first.success is True
    assert second.success is False
    assert "already converted" in second.error
    assert len(store.list_notes()) == 1
    assert store.get_scrap(scrap.id).value.converted_to_id == first.entity["id"]


def test_store_error_is_captured_per_directive(dispatcher, store, monkeypatch) -> None:
    def broken(fields):
        raise StoreError("disk full")

    monkeypatch.setattr(store, "create_note", broken)

    results = dispatcher.dispatch(
        [
            _directive("CREATE_NOTE", title="t", content="c"),
            _directive("CREATE_TASK", title="still runs"),
        ]
    )

    assert results[0].success is False
    assert results[0].error == "disk full"
    assert results[1].success is True


def test_update_task_splits_comma_separated_tags(dispatcher, store) -> None:
    task = store.create_task({"title": "Tagged", "tags": ["old"]}).value

    [result] = dispatcher.dispatch([_directive("UPDATE_TASK", id=task.id, updates={"tags": "home, errands"})])

    assert result.success is True
    assert store.get_task(task.id).value.tags == ["home", "errands"]
