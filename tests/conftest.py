"""Shared fixtures for the taskflow test suite."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

import pytest

from taskflow.adapters.conversation_json import JsonConversationLog
from taskflow.adapters.storage_json import JsonEntityStore
from taskflow.config import ModelSettings
from taskflow.core.errors import ProviderError
from taskflow.core.interfaces import ModelClient
from taskflow.core.pipeline import ChatPipeline


FIXED_NOW = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class ScriptedModel(ModelClient):
    """Model client returning queued replies and recording every prompt."""

    name = "Scripted"

    def __init__(self, replies: Optional[List[str]] = None, api_key: str = "test-key") -> None:
        super().__init__(ModelSettings(api_key=api_key))
        self.replies = list(replies or [])
        self.prompts: List[str] = []
        self.error: Optional[ProviderError] = None

    def send(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.replies.pop(0)


class RecordingStore(JsonEntityStore):
    """JSON store that records the name of every public call."""

    def __init__(self, base_dir: str) -> None:
        super().__init__(base_dir)
        self.calls: List[str] = []

    def __getattribute__(self, name: str):
        attr = super().__getattribute__(name)
        if callable(attr) and not name.startswith("_"):
            super().__getattribute__("calls").append(name)
        return attr


@pytest.fixture
def store(tmp_path) -> RecordingStore:
    return RecordingStore(str(tmp_path / "data"))


@pytest.fixture
def conversation_log(tmp_path) -> JsonConversationLog:
    return JsonConversationLog(str(tmp_path / "data"))


@pytest.fixture
def model() -> ScriptedModel:
    return ScriptedModel()


@pytest.fixture
def pipeline(model, store, conversation_log) -> ChatPipeline:
    return ChatPipeline(
        model=model,
        store=store,
        conversation_log=conversation_log,
        clock=lambda: FIXED_NOW,
    )
