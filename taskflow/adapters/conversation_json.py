from __future__ import annotations

import json
import os
from typing import List

from taskflow.core.errors import StoreError
from taskflow.core.interfaces import ConversationLog
from taskflow.core.models import ConversationTurn


class JsonConversationLog(ConversationLog):
    def __init__(self, base_dir: str = "data", table: str = "chat_history") -> None:
        self.path = os.path.join(base_dir, f"{table}.json")

    def append(self, turn: ConversationTurn) -> None:
        items = self._read()
        items.append(turn.to_dict())
        self._write(items)

    def recent(self, limit: int = 10) -> List[ConversationTurn]:
        if limit <= 0:
            return []
        items = self._read()[-limit:]
        return [ConversationTurn.from_dict(item) for item in reversed(items)]

    def _read(self) -> List[dict]:
        if not os.path.exists(self.path):
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as handle:
                return json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            raise StoreError(f"Cannot read {self.path}: {exc}") from exc

    def _write(self, items: List[dict]) -> None:
        dir_name = os.path.dirname(self.path)
        try:
            if dir_name:
                os.makedirs(dir_name, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as handle:
                json.dump(items, handle, indent=2)
        except OSError as exc:
            raise StoreError(f"Cannot write {self.path}: {exc}") from exc
