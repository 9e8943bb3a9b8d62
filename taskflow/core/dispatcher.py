from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, List

from pydantic import ValidationError

from taskflow.core.directives import (
    CONVERT_SCRAP,
    CREATE_NOTE,
    CREATE_PROJECT,
    CREATE_SCRAP,
    CREATE_TASK,
    UPDATE_TASK,
    ConvertScrap,
    CreateNote,
    CreateProject,
    CreateScrap,
    CreateTask,
    DirectivePayload,
    UnknownDirectiveType,
    UpdateTask,
    describe_validation_error,
    validate_directive,
)
from taskflow.core.errors import StoreError
from taskflow.core.interfaces import EntityStore
from taskflow.core.models import ActionDirective, ActionResult
from taskflow.core.results import CONFLICT, Err, Ok, Result

logger = logging.getLogger(__name__)


class ActionDispatcher:
    def __init__(self, store: EntityStore) -> None:
        self.store = store
        self._handlers: Dict[str, Callable[[DirectivePayload], Result]] = {
            CREATE_TASK: self._create_task,
            CREATE_PROJECT: self._create_project,
            CREATE_NOTE: self._create_note,
            CREATE_SCRAP: self._create_scrap,
            UPDATE_TASK: self._update_task,
            CONVERT_SCRAP: self._convert_scrap,
        }

    def dispatch(self, directives: Iterable[ActionDirective]) -> List[ActionResult]:
        return [self.dispatch_one(directive) for directive in directives]

    def dispatch_one(self, directive: ActionDirective) -> ActionResult:
        try:
            payload = validate_directive(directive)
        except UnknownDirectiveType as exc:
            return self._failed(directive, str(exc))
        except ValidationError as exc:
            return self._failed(directive, describe_validation_error(directive.type, exc))

        try:
            outcome = self._handlers[directive.type](payload)
        except StoreError as exc:
            logger.exception("Store failure while dispatching %s", directive.type)
            return self._failed(directive, str(exc))

        if isinstance(outcome, Err):
            return self._failed(directive, outcome.message)
        logger.info("Dispatched %s -> id %s", directive.type, outcome.value.id)
        return ActionResult.succeeded(directive, outcome.value)

    def _create_task(self, payload: CreateTask) -> Result:
        return self.store.create_task(payload.record_fields())

    def _create_project(self, payload: CreateProject) -> Result:
        return self.store.create_project(payload.record_fields())

    def _create_note(self, payload: CreateNote) -> Result:
        return self.store.create_note(payload.record_fields())

    def _create_scrap(self, payload: CreateScrap) -> Result:
        return self.store.create_scrap(payload.record_fields())

    def _update_task(self, payload: UpdateTask) -> Result:
        return self.store.update_task(payload.id, payload.updates.record_fields())

    def _convert_scrap(self, payload: ConvertScrap) -> Result:
        found = self.store.get_scrap(payload.scrap_id)
        if isinstance(found, Err):
            return found
        scrap = found.value
        if scrap.processed:
            return Err(
                f"Scrap {scrap.id} was already converted to {scrap.converted_to_type} {scrap.converted_to_id}",
                CONFLICT,
            )

        data = dict(payload.data)
        if payload.to == "task":
            if data.get("description") is None:
                data["description"] = scrap.content
            model, create = CreateTask, self.store.create_task
        else:
            if data.get("content") is None:
                data["content"] = scrap.content
            model, create = CreateNote, self.store.create_note
        try:
            fields = model.model_validate(data).record_fields()
        except ValidationError as exc:
            return Err(describe_validation_error(CONVERT_SCRAP, exc, prefix="data"))

        created = create(fields)
        if isinstance(created, Err):
            return created
        marked = self.store.mark_scrap_converted(scrap.id, payload.to, created.value.id)
        if isinstance(marked, Err):
            return marked
        return Ok(created.value)

    def _failed(self, directive: ActionDirective, message: str) -> ActionResult:
        logger.info("Directive %s failed: %s", directive.type, message)
        return ActionResult.failed(directive, message)
