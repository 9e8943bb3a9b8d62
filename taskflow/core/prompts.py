from __future__ import annotations

import json
from datetime import date
from typing import Optional

from taskflow.core.models import ContextSnapshot


CAPABILITIES_PROMPT = """
You are TaskFlow AI, a helpful assistant for managing projects, tasks, and notes. You can help users create, edit, and organize their work through natural conversation.

CAPABILITIES:
- Create and manage projects, tasks, notes, and scraps
- Convert scraps into tasks or notes
- Set due dates, priorities, and organize by areas/tags
- Process daily planning and scrap organization
""".strip()

ACTION_GRAMMAR_PROMPT = """
When users want to create or modify entities, include the matching action in your reply. Write the marker exactly as shown, followed by one JSON object:

[ACTION:CREATE_TASK] {"title": "Task title", "description": "Description", "due_date": "YYYY-MM-DD", "priority": "low|medium|high|urgent", "project_id": null, "tags": ["tag1"], "area": "area_name"}

[ACTION:CREATE_PROJECT] {"name": "Project name", "description": "Description", "area": "area_name", "tags": ["tag1"]}

[ACTION:CREATE_NOTE] {"title": "Note title", "content": "Content", "date_assigned": "YYYY-MM-DD", "tags": ["tag1"], "area": "area_name"}

[ACTION:CREATE_SCRAP] {"content": "Raw thought or idea", "date_assigned": "YYYY-MM-DD"}

[ACTION:UPDATE_TASK] {"id": 123, "updates": {"title": "New title", "status": "pending|in_progress|completed|cancelled"}}

[ACTION:CONVERT_SCRAP] {"scrap_id": 123, "to": "task|note", "data": {"title": "Title"}}

Only title is required for CREATE_TASK, name for CREATE_PROJECT, title and content for CREATE_NOTE and content for CREATE_SCRAP. Use ids from the current context; an entity created in this reply has no id yet.

Be conversational and helpful. Provide context and explanations with your responses.
""".strip()


def compose_prompt(snapshot: ContextSnapshot, message: str, today: Optional[date] = None) -> str:
    sections = [CAPABILITIES_PROMPT]
    if today is not None:
        sections.append(f"Today's date is {today.isoformat()}.")
    sections.append("CURRENT CONTEXT:\n" + _context_text(snapshot))
    sections.append(ACTION_GRAMMAR_PROMPT)
    return "\n\n".join(sections) + f"\n\nUser: {message}"


def _context_text(snapshot: ContextSnapshot) -> str:
    lines = []
    if snapshot.recent_tasks:
        lines.append("Recent Tasks: " + _dumps(snapshot.recent_tasks))
    if snapshot.projects:
        lines.append("Current Projects: " + _dumps(snapshot.projects))
    if snapshot.unprocessed_scraps:
        lines.append("Unprocessed Scraps: " + _dumps(snapshot.unprocessed_scraps))
    return "\n".join(lines) or "No projects, tasks or scraps yet."


def _dumps(items) -> str:
    return json.dumps(items, sort_keys=True, ensure_ascii=False)
