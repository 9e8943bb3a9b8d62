from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from taskflow.core.models import ConversationTurn, Note, Project, Scrap, Task
from taskflow.core.results import Result

if TYPE_CHECKING:
    from taskflow.config import ModelSettings


class ModelClient(ABC):
    name = "model"

    def __init__(self, settings: "ModelSettings") -> None:
        self.settings = settings

    def is_configured(self) -> bool:
        return self.settings.is_configured()

    @abstractmethod
    def send(self, prompt: str) -> str:
        raise NotImplementedError


class EntityStore(ABC):
    @abstractmethod
    def create_project(self, fields: Dict[str, Any]) -> Result[Project]:
        raise NotImplementedError

    @abstractmethod
    def get_project(self, project_id: int) -> Result[Project]:
        raise NotImplementedError

    @abstractmethod
    def update_project(self, project_id: int, fields: Dict[str, Any]) -> Result[Project]:
        raise NotImplementedError

    @abstractmethod
    def list_projects(self, status: Optional[str] = None, area: Optional[str] = None) -> List[Project]:
        raise NotImplementedError

    @abstractmethod
    def create_task(self, fields: Dict[str, Any]) -> Result[Task]:
        raise NotImplementedError

    @abstractmethod
    def get_task(self, task_id: int) -> Result[Task]:
        raise NotImplementedError

    @abstractmethod
    def update_task(self, task_id: int, fields: Dict[str, Any]) -> Result[Task]:
        raise NotImplementedError

    @abstractmethod
    def list_tasks(
        self,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        project_id: Optional[int] = None,
        area: Optional[str] = None,
        due_date: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Task]:
        raise NotImplementedError

    @abstractmethod
    def create_note(self, fields: Dict[str, Any]) -> Result[Note]:
        raise NotImplementedError

    @abstractmethod
    def get_note(self, note_id: int) -> Result[Note]:
        raise NotImplementedError

    @abstractmethod
    def update_note(self, note_id: int, fields: Dict[str, Any]) -> Result[Note]:
        raise NotImplementedError

    @abstractmethod
    def list_notes(self, area: Optional[str] = None, date_assigned: Optional[str] = None) -> List[Note]:
        raise NotImplementedError

    @abstractmethod
    def create_scrap(self, fields: Dict[str, Any]) -> Result[Scrap]:
        raise NotImplementedError

    @abstractmethod
    def get_scrap(self, scrap_id: int) -> Result[Scrap]:
        raise NotImplementedError

    @abstractmethod
    def mark_scrap_converted(self, scrap_id: int, target_type: str, target_id: int) -> Result[Scrap]:
        raise NotImplementedError

    @abstractmethod
    def list_scraps(self, processed: Optional[bool] = None) -> List[Scrap]:
        raise NotImplementedError

    @abstractmethod
    def delete(self, kind: str, entity_id: int) -> Result[int]:
        raise NotImplementedError


class ConversationLog(ABC):
    @abstractmethod
    def append(self, turn: ConversationTurn) -> None:
        raise NotImplementedError

    @abstractmethod
    def recent(self, limit: int = 10) -> List[ConversationTurn]:
        raise NotImplementedError
