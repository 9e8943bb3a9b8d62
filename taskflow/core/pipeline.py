from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from taskflow.core.context import DEFAULT_RECENT_TASK_LIMIT, ContextBuilder
from taskflow.core.dispatcher import ActionDispatcher
from taskflow.core.errors import NotConfiguredError, ProviderError
from taskflow.core.interfaces import ConversationLog, EntityStore, ModelClient
from taskflow.core.models import ChatResponse, ConversationTurn, utcnow
from taskflow.core.parser import parse_actions
from taskflow.core.prompts import compose_prompt

logger = logging.getLogger(__name__)

NOT_CONFIGURED_RESPONSE = (
    "I need to be configured with an API key to help you. Please add your API key in the settings."
)
FALLBACK_RESPONSE = "Sorry, I encountered an error while processing your request. Please try again."


class ChatPipeline:
    def __init__(
        self,
        model: ModelClient,
        store: EntityStore,
        conversation_log: ConversationLog,
        recent_task_limit: int = DEFAULT_RECENT_TASK_LIMIT,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.model = model
        self.store = store
        self.conversation_log = conversation_log
        self.context_builder = ContextBuilder(store, recent_task_limit=recent_task_limit)
        self.dispatcher = ActionDispatcher(store)
        self.clock = clock or utcnow

    def handle(self, message: str) -> ChatResponse:
        # credential check comes before any store read or prompt work
        if not self.model.is_configured():
            error = NotConfiguredError(self.model.name)
            logger.warning("Chat turn rejected: %s", error)
            return ChatResponse(success=False, error=str(error), response=NOT_CONFIGURED_RESPONSE)

        snapshot = self.context_builder.build()
        now = self.clock()
        prompt = compose_prompt(snapshot, message, today=now.astimezone().date())
        try:
            raw_response = self.model.send(prompt)
        except ProviderError as exc:
            logger.error("Model call failed (%s): %s", type(exc).__name__, exc)
            return ChatResponse(success=False, error=str(exc), response=FALLBACK_RESPONSE)

        self.conversation_log.append(
            ConversationTurn(
                message=message,
                raw_response=raw_response,
                context_snapshot=snapshot.to_dict(),
                timestamp=now,
            )
        )

        actions = parse_actions(raw_response)
        results = self.dispatcher.dispatch(actions)
        failed = sum(1 for result in results if not result.success)
        logger.info("Chat turn handled: %d actions, %d failed", len(results), failed)
        return ChatResponse(
            success=True,
            response=raw_response,
            actions=actions,
            action_results=results,
        )
