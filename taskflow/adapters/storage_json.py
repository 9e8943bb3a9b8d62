from __future__ import annotations

import json
import logging
import os
from typing import Any, Callable, Dict, List, Optional

from taskflow.core.errors import StoreError
from taskflow.core.interfaces import EntityStore
from taskflow.core.models import CONVERSION_TARGETS, Entity, Note, Project, Scrap, Task, utcnow
from taskflow.core.results import INVALID, Err, Ok, Result, not_found

logger = logging.getLogger(__name__)

TABLES = {
    "project": ("projects", Project),
    "task": ("tasks", Task),
    "note": ("notes", Note),
    "scrap": ("scraps", Scrap),
}

UPDATABLE_FIELDS = {
    "project": ("name", "description", "status", "area", "tags"),
    "task": ("project_id", "title", "description", "due_date", "priority", "status", "area", "tags"),
    "note": ("title", "content", "date_assigned", "date_range_end", "area", "tags"),
}

SEQUENCES_TABLE = "sequences"


class JsonEntityStore(EntityStore):
    def __init__(self, base_dir: str = "data") -> None:
        self.base_dir = base_dir

    def create_project(self, fields: Dict[str, Any]) -> Result[Project]:
        if not fields.get("name"):
            return Err("Project name is required")
        return self._insert(
            "project",
            {
                "name": fields["name"],
                "description": fields.get("description") or "",
                "status": fields.get("status") or "active",
                "tags": list(fields.get("tags") or []),
                "area": fields.get("area"),
            },
        )

    def get_project(self, project_id: int) -> Result[Project]:
        return self._get("project", project_id)

    def update_project(self, project_id: int, fields: Dict[str, Any]) -> Result[Project]:
        return self._update("project", project_id, fields)

    def list_projects(self, status: Optional[str] = None, area: Optional[str] = None) -> List[Project]:
        return self._query("project", lambda item: _matches(item, status=status, area=area))

    def create_task(self, fields: Dict[str, Any]) -> Result[Task]:
        if not fields.get("title"):
            return Err("Task title is required")
        project_id = fields.get("project_id")
        if project_id is not None and not self._exists("project", project_id):
            return not_found("project", project_id)
        return self._insert(
            "task",
            {
                "title": fields["title"],
                "description": fields.get("description") or "",
                "due_date": fields.get("due_date"),
                "priority": fields.get("priority") or "medium",
                "status": fields.get("status") or "pending",
                "project_id": project_id,
                "tags": list(fields.get("tags") or []),
                "area": fields.get("area"),
            },
        )

    def get_task(self, task_id: int) -> Result[Task]:
        return self._get("task", task_id)

    def update_task(self, task_id: int, fields: Dict[str, Any]) -> Result[Task]:
        project_id = fields.get("project_id")
        if project_id is not None and not self._exists("project", project_id):
            return not_found("project", project_id)
        return self._update("task", task_id, fields)

    def list_tasks(
        self,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        project_id: Optional[int] = None,
        area: Optional[str] = None,
        due_date: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Task]:
        tasks = self._query(
            "task",
            lambda item: _matches(
                item,
                status=status,
                priority=priority,
                project_id=project_id,
                area=area,
                due_date=due_date,
            ),
        )
        if limit is not None:
            return tasks[:limit]
        return tasks

    def create_note(self, fields: Dict[str, Any]) -> Result[Note]:
        if not fields.get("title") or not fields.get("content"):
            return Err("Note title and content are required")
        return self._insert(
            "note",
            {
                "title": fields["title"],
                "content": fields["content"],
                "date_assigned": fields.get("date_assigned"),
                "date_range_end": fields.get("date_range_end"),
                "tags": list(fields.get("tags") or []),
                "area": fields.get("area"),
            },
        )

    def get_note(self, note_id: int) -> Result[Note]:
        return self._get("note", note_id)

    def update_note(self, note_id: int, fields: Dict[str, Any]) -> Result[Note]:
        return self._update("note", note_id, fields)

    def list_notes(self, area: Optional[str] = None, date_assigned: Optional[str] = None) -> List[Note]:
        return self._query("note", lambda item: _matches(item, area=area, date_assigned=date_assigned))

    def create_scrap(self, fields: Dict[str, Any]) -> Result[Scrap]:
        if not fields.get("content"):
            return Err("Scrap content is required")
        return self._insert(
            "scrap",
            {
                "content": fields["content"],
                "date_assigned": fields.get("date_assigned"),
                "date_range_end": fields.get("date_range_end"),
                "processed": False,
                "converted_to_type": None,
                "converted_to_id": None,
            },
        )

    def get_scrap(self, scrap_id: int) -> Result[Scrap]:
        return self._get("scrap", scrap_id)

    def mark_scrap_converted(self, scrap_id: int, target_type: str, target_id: int) -> Result[Scrap]:
        if target_type not in CONVERSION_TARGETS:
            return Err(f"Cannot convert scrap to '{target_type}'")
        items = self._read_table("scraps")
        for item in items:
            if item["id"] == scrap_id:
                item["processed"] = True
                item["converted_to_type"] = target_type
                item["converted_to_id"] = target_id
                item["updated_at"] = utcnow().isoformat()
                self._write_table("scraps", items)
                return Ok(Scrap.from_dict(item))
        return not_found("scrap", scrap_id)

    def list_scraps(self, processed: Optional[bool] = None) -> List[Scrap]:
        return self._query("scrap", lambda item: processed is None or bool(item.get("processed")) == processed)

    def delete(self, kind: str, entity_id: int) -> Result[int]:
        if kind not in TABLES:
            return Err(f"Unknown entity kind: {kind}", INVALID)
        table, _ = TABLES[kind]
        items = self._read_table(table)
        remaining = [item for item in items if item["id"] != entity_id]
        if len(remaining) == len(items):
            return not_found(kind, entity_id)
        self._write_table(table, remaining)
        return Ok(entity_id)

    def _insert(self, kind: str, record: Dict[str, Any]) -> Ok:
        table, klass = TABLES[kind]
        now = utcnow().isoformat()
        item = {"id": self._next_id(table), **record, "created_at": now, "updated_at": now}
        items = self._read_table(table)
        items.append(item)
        self._write_table(table, items)
        logger.debug("Created %s %s", kind, item["id"])
        return Ok(klass.from_dict(item))

    def _get(self, kind: str, entity_id: int) -> Result[Entity]:
        table, klass = TABLES[kind]
        for item in self._read_table(table):
            if item["id"] == entity_id:
                return Ok(klass.from_dict(item))
        return not_found(kind, entity_id)

    def _exists(self, kind: str, entity_id: int) -> bool:
        return self._get(kind, entity_id).ok

    def _update(self, kind: str, entity_id: int, fields: Dict[str, Any]) -> Result[Entity]:
        table, klass = TABLES[kind]
        allowed = {key: value for key, value in fields.items() if key in UPDATABLE_FIELDS[kind]}
        items = self._read_table(table)
        for item in items:
            if item["id"] != entity_id:
                continue
            changed = {key: value for key, value in allowed.items() if item.get(key) != value}
            if changed:
                item.update(changed)
                item["updated_at"] = utcnow().isoformat()
                self._write_table(table, items)
                logger.debug("Updated %s %s: %s", kind, entity_id, sorted(changed))
            return Ok(klass.from_dict(item))
        return not_found(kind, entity_id)

    def _query(self, kind: str, predicate: Callable[[Dict[str, Any]], bool]) -> List[Any]:
        table, klass = TABLES[kind]
        items = [item for item in self._read_table(table) if predicate(item)]
        items.sort(key=lambda item: (item["created_at"], item["id"]), reverse=True)
        return [klass.from_dict(item) for item in items]

    def _next_id(self, table: str) -> int:
        sequences = self._read_json(SEQUENCES_TABLE, {})
        next_id = int(sequences.get(table, 0)) + 1
        sequences[table] = next_id
        self._write_json(SEQUENCES_TABLE, sequences)
        return next_id

    def _read_table(self, name: str) -> List[dict]:
        return self._read_json(name, [])

    def _write_table(self, name: str, items: List[dict]) -> None:
        self._write_json(name, items)

    def _read_json(self, name: str, empty: Any) -> Any:
        path = self._table_path(name)
        if not os.path.exists(path):
            return empty
        try:
            with open(path, "r", encoding="utf-8") as handle:
                return json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            raise StoreError(f"Cannot read {path}: {exc}") from exc

    def _write_json(self, name: str, payload: Any) -> None:
        path = self._table_path(name)
        try:
            os.makedirs(self.base_dir, exist_ok=True)
            with open(path, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2)
        except OSError as exc:
            raise StoreError(f"Cannot write {path}: {exc}") from exc

    def _table_path(self, name: str) -> str:
        return os.path.join(self.base_dir, f"{name}.json")


def _matches(item: Dict[str, Any], **filters: Any) -> bool:
    for key, expected in filters.items():
        if expected is not None and item.get(key) != expected:
            return False
    return True
