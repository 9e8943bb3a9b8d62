from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


TASK_STATUSES = ("pending", "in_progress", "completed", "cancelled")
TASK_PRIORITIES = ("low", "medium", "high", "urgent")
CONVERSION_TARGETS = ("task", "note")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


@dataclass
class Entity:
    id: int
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["created_at"] = self.created_at.isoformat()
        data["updated_at"] = self.updated_at.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        payload = dict(data)
        payload["created_at"] = _parse_timestamp(payload["created_at"])
        payload["updated_at"] = _parse_timestamp(payload["updated_at"])
        known = cls.__dataclass_fields__
        return cls(**{key: value for key, value in payload.items() if key in known})


@dataclass
class Project(Entity):
    name: str = ""
    description: str = ""
    status: str = "active"
    tags: List[str] = field(default_factory=list)
    area: Optional[str] = None


@dataclass
class Task(Entity):
    title: str = ""
    description: str = ""
    due_date: Optional[str] = None
    priority: str = "medium"
    status: str = "pending"
    project_id: Optional[int] = None
    tags: List[str] = field(default_factory=list)
    area: Optional[str] = None


@dataclass
class Note(Entity):
    title: str = ""
    content: str = ""
    date_assigned: Optional[str] = None
    date_range_end: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    area: Optional[str] = None


@dataclass
class Scrap(Entity):
    content: str = ""
    date_assigned: Optional[str] = None
    date_range_end: Optional[str] = None
    processed: bool = False
    converted_to_type: Optional[str] = None
    converted_to_id: Optional[int] = None


@dataclass
class ActionDirective:
    type: str
    payload: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "data": self.payload}


@dataclass
class ActionResult:
    directive: ActionDirective
    success: bool
    entity: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    @classmethod
    def succeeded(cls, directive: ActionDirective, entity: Entity) -> "ActionResult":
        return cls(directive=directive, success=True, entity=entity.to_dict())

    @classmethod
    def failed(cls, directive: ActionDirective, message: str) -> "ActionResult":
        return cls(directive=directive, success=False, error=message)

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            return {"type": self.directive.type, "success": True, "data": self.entity}
        return {"type": self.directive.type, "success": False, "error": self.error}


@dataclass
class ContextSnapshot:
    recent_tasks: List[Dict[str, Any]] = field(default_factory=list)
    projects: List[Dict[str, Any]] = field(default_factory=list)
    unprocessed_scraps: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ConversationTurn:
    message: str
    raw_response: str
    context_snapshot: Dict[str, Any]
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "raw_response": self.raw_response,
            "context_snapshot": self.context_snapshot,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConversationTurn":
        return cls(
            message=data["message"],
            raw_response=data["raw_response"],
            context_snapshot=data.get("context_snapshot", {}),
            timestamp=_parse_timestamp(data["timestamp"]),
        )


@dataclass
class ChatResponse:
    success: bool
    response: str
    actions: List[ActionDirective] = field(default_factory=list)
    action_results: List[ActionResult] = field(default_factory=list)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        if not self.success:
            return {"success": False, "error": self.error, "response": self.response}
        return {
            "success": True,
            "response": self.response,
            "actions": [action.to_dict() for action in self.actions],
            "action_results": [result.to_dict() for result in self.action_results],
        }
