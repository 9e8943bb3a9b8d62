from __future__ import annotations

import json
import logging
import re
from typing import List, Optional

from taskflow.core.models import ActionDirective

logger = logging.getLogger(__name__)

ACTION_MARKER = re.compile(r"\[ACTION:([A-Z_]+)\]", re.IGNORECASE)


def parse_actions(text: str) -> List[ActionDirective]:
    directives: List[ActionDirective] = []
    if not text:
        return directives
    position = 0
    while True:
        match = ACTION_MARKER.search(text, position)
        if match is None:
            return directives
        # a bad payload is dropped and scanning resumes after its marker
        position = match.end()
        action_type = match.group(1)
        start = _skip_whitespace(text, match.end())
        if start >= len(text) or text[start] != "{":
            logger.warning("Dropping %s at offset %d: no JSON object follows the marker", action_type, match.start())
            continue
        end = find_object_end(text, start)
        if end is None:
            logger.warning("Dropping %s at offset %d: unterminated JSON object", action_type, match.start())
            continue
        try:
            payload = json.loads(text[start:end])
        except json.JSONDecodeError as exc:
            logger.warning("Dropping %s at offset %d: %s", action_type, match.start(), exc)
            continue
        directives.append(ActionDirective(type=action_type, payload=payload))
        position = end


def find_object_end(text: str, start: int) -> Optional[int]:
    # braces inside JSON strings do not count; None when the object never closes
    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index + 1
    return None


def strip_actions(text: str) -> str:
    parts = []
    position = 0
    for match in ACTION_MARKER.finditer(text):
        if match.start() < position:
            continue
        parts.append(text[position:match.start()])
        position = match.end()
        start = _skip_whitespace(text, match.end())
        if start < len(text) and text[start] == "{":
            end = find_object_end(text, start)
            position = end if end is not None else len(text)
    parts.append(text[position:])
    cleaned = "".join(parts)
    return re.sub(r"\n{3,}", "\n\n", cleaned).strip()


def _skip_whitespace(text: str, index: int) -> int:
    while index < len(text) and text[index].isspace():
        index += 1
    return index
