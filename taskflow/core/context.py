from __future__ import annotations

from taskflow.core.interfaces import EntityStore
from taskflow.core.models import ContextSnapshot


DEFAULT_RECENT_TASK_LIMIT = 5


class ContextBuilder:
    def __init__(self, store: EntityStore, recent_task_limit: int = DEFAULT_RECENT_TASK_LIMIT) -> None:
        self.store = store
        self.recent_task_limit = recent_task_limit

    def build(self) -> ContextSnapshot:
        # store queries are most-recent-first with id as the tie breaker
        tasks = self.store.list_tasks(limit=self.recent_task_limit)
        projects = self.store.list_projects(status="active")
        scraps = self.store.list_scraps(processed=False)
        return ContextSnapshot(
            recent_tasks=[task.to_dict() for task in tasks],
            projects=[project.to_dict() for project in projects],
            unprocessed_scraps=[scrap.to_dict() for scrap in scraps],
        )
