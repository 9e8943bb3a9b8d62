from __future__ import annotations

import json
import re
from datetime import date, timedelta
from typing import Any, Dict, Optional, Tuple

from taskflow.config import ModelSettings
from taskflow.core.directives import CREATE_NOTE, CREATE_PROJECT, CREATE_SCRAP, CREATE_TASK
from taskflow.core.interfaces import ModelClient


PREFIXES = {
    "task": CREATE_TASK,
    "todo": CREATE_TASK,
    "project": CREATE_PROJECT,
    "note": CREATE_NOTE,
    "scrap": CREATE_SCRAP,
    "idea": CREATE_SCRAP,
}

PRIORITY_KEYWORDS = [
    ("urgent", ["urgent", "asap", "immediately"]),
    ("high", ["high priority", "important"]),
    ("low", ["low priority", "someday", "whenever"]),
]

TODAY_PATTERN = re.compile(r"Today's date is (\d{4}-\d{2}-\d{2})")


def _simple_title(text: str, max_words: int = 6) -> str:
    words = re.findall(r"\w+", text)
    return " ".join(words[:max_words]) if words else "Untitled"


def _user_message(prompt: str) -> str:
    marker = "\nUser: "
    index = prompt.rfind(marker)
    if index == -1:
        return prompt.strip()
    return prompt[index + len(marker):].strip()


def _prompt_date(prompt: str) -> date:
    match = TODAY_PATTERN.search(prompt)
    if match:
        return date.fromisoformat(match.group(1))
    return date.today()


def _priority(text: str) -> str:
    text_lower = text.lower()
    for priority, keywords in PRIORITY_KEYWORDS:
        if any(keyword in text_lower for keyword in keywords):
            return priority
    return "medium"


def _due_date(text: str, today: date) -> Optional[str]:
    text_lower = text.lower()
    if "tomorrow" in text_lower:
        return (today + timedelta(days=1)).isoformat()
    if "today" in text_lower:
        return today.isoformat()
    return None


def _split_prefix(message: str) -> Tuple[str, str]:
    head, sep, body = message.partition(":")
    action_type = PREFIXES.get(head.strip().lower()) if sep else None
    if action_type and body.strip():
        return action_type, body.strip()
    return CREATE_SCRAP, message


class RuleBasedClient(ModelClient):
    """Offline stand-in for an LLM: maps "task:", "note:" style prefixes to actions."""

    name = "rules"

    def __init__(self, settings: Optional[ModelSettings] = None) -> None:
        super().__init__(settings or ModelSettings())

    def is_configured(self) -> bool:
        return True

    def send(self, prompt: str) -> str:
        message = _user_message(prompt)
        if not message:
            return "Tell me what to capture, for example 'task: renew passport tomorrow'."
        action_type, body = _split_prefix(message)
        payload: Dict[str, Any]
        if action_type == CREATE_TASK:
            payload = {"title": body, "priority": _priority(body)}
            due_date = _due_date(body, _prompt_date(prompt))
            if due_date:
                payload["due_date"] = due_date
            summary = f"Added a task: {body}."
        elif action_type == CREATE_PROJECT:
            payload = {"name": body}
            summary = f"Started a project: {body}."
        elif action_type == CREATE_NOTE:
            payload = {"title": _simple_title(body), "content": body}
            summary = f"Saved a note: {payload['title']}."
        else:
            payload = {"content": body}
            summary = "Captured that as a scrap for later."
        return f"{summary}\n[ACTION:{action_type}] {json.dumps(payload)}"
