from __future__ import annotations

from datetime import date
from typing import Annotated, Any, ClassVar, Dict, List, Literal, Optional, Tuple, Type

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError, field_validator

from taskflow.core.models import ActionDirective


CREATE_TASK = "CREATE_TASK"
CREATE_PROJECT = "CREATE_PROJECT"
CREATE_NOTE = "CREATE_NOTE"
CREATE_SCRAP = "CREATE_SCRAP"
UPDATE_TASK = "UPDATE_TASK"
CONVERT_SCRAP = "CONVERT_SCRAP"


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _none_to_empty(value: Any) -> Any:
    return "" if value is None else value


def _tag_list(value: Any) -> Any:
    if value is None:
        return []
    if isinstance(value, str):
        return [tag.strip() for tag in value.split(",") if tag.strip()]
    return value


Priority = Literal["low", "medium", "high", "urgent"]
TaskStatus = Literal["pending", "in_progress", "completed", "cancelled"]
ProjectStatus = Literal["active", "on_hold", "completed", "archived"]
Text = Annotated[str, BeforeValidator(_none_to_empty)]
OptionalDate = Annotated[Optional[date], BeforeValidator(_blank_to_none)]
OptionalText = Annotated[Optional[str], BeforeValidator(_blank_to_none)]
OptionalId = Annotated[Optional[int], BeforeValidator(_blank_to_none)]
Tags = Annotated[List[str], BeforeValidator(_tag_list)]


class DirectivePayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    def record_fields(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


class CreateTask(DirectivePayload):
    title: str = Field(min_length=1)
    description: Text = ""
    due_date: OptionalDate = None
    priority: Priority = "medium"
    status: TaskStatus = "pending"
    project_id: OptionalId = None
    tags: Tags = Field(default_factory=list)
    area: OptionalText = None


class CreateProject(DirectivePayload):
    name: str = Field(min_length=1)
    description: Text = ""
    status: ProjectStatus = "active"
    tags: Tags = Field(default_factory=list)
    area: OptionalText = None


class CreateNote(DirectivePayload):
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    date_assigned: OptionalDate = None
    date_range_end: OptionalDate = None
    tags: Tags = Field(default_factory=list)
    area: OptionalText = None


class CreateScrap(DirectivePayload):
    content: str = Field(min_length=1)
    date_assigned: OptionalDate = None
    date_range_end: OptionalDate = None


class FieldUpdates(DirectivePayload):
    # keys that may be changed but never cleared
    REQUIRED_FIELDS: ClassVar[Tuple[str, ...]] = ()

    def record_fields(self) -> Dict[str, Any]:
        updates = self.model_dump(mode="json", exclude_unset=True)
        for key in self.REQUIRED_FIELDS:
            if key in updates and updates[key] is None:
                updates.pop(key)
        if "description" in updates and updates["description"] is None:
            updates["description"] = ""
        return updates


class TaskUpdates(FieldUpdates):
    REQUIRED_FIELDS = ("title", "priority", "status", "tags")

    project_id: OptionalId = None
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    due_date: OptionalDate = None
    priority: Optional[Priority] = None
    status: Optional[TaskStatus] = None
    area: OptionalText = None
    tags: Optional[Tags] = None


class ProjectUpdates(FieldUpdates):
    REQUIRED_FIELDS = ("name", "status", "tags")

    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None
    area: OptionalText = None
    tags: Optional[Tags] = None


class NoteUpdates(FieldUpdates):
    REQUIRED_FIELDS = ("title", "content", "tags")

    title: Optional[str] = Field(default=None, min_length=1)
    content: Optional[str] = Field(default=None, min_length=1)
    date_assigned: OptionalDate = None
    date_range_end: OptionalDate = None
    area: OptionalText = None
    tags: Optional[Tags] = None


class UpdateTask(DirectivePayload):
    id: int
    updates: TaskUpdates = Field(default_factory=TaskUpdates)


class ConvertScrap(DirectivePayload):
    scrap_id: int
    to: Literal["task", "note"]
    data: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("data", mode="before")
    @classmethod
    def _empty_data(cls, value: Any) -> Any:
        return {} if value is None else value


PAYLOAD_MODELS: Dict[str, Type[DirectivePayload]] = {
    CREATE_TASK: CreateTask,
    CREATE_PROJECT: CreateProject,
    CREATE_NOTE: CreateNote,
    CREATE_SCRAP: CreateScrap,
    UPDATE_TASK: UpdateTask,
    CONVERT_SCRAP: ConvertScrap,
}

KNOWN_TYPES = tuple(PAYLOAD_MODELS)


class UnknownDirectiveType(ValueError):
    def __init__(self, directive_type: str) -> None:
        super().__init__(f"Unknown action type: {directive_type}")
        self.directive_type = directive_type


def validate_directive(directive: ActionDirective) -> DirectivePayload:
    model = PAYLOAD_MODELS.get(directive.type)
    if model is None:
        raise UnknownDirectiveType(directive.type)
    return model.model_validate(directive.payload)


def describe_validation_error(directive_type: str, exc: ValidationError, prefix: str = "") -> str:
    problems = []
    for error in exc.errors():
        parts = ([prefix] if prefix else []) + [str(part) for part in error.get("loc", ())]
        location = ".".join(parts) or "payload"
        problems.append(f"{location}: {error.get('msg', 'invalid value')}")
    return f"Invalid {directive_type} payload: " + "; ".join(problems)
