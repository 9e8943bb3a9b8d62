import argparse
import json
import logging
import os

from pydantic import ValidationError

from taskflow.config import load_config
from taskflow.core.directives import NoteUpdates, ProjectUpdates, TaskUpdates, describe_validation_error
from taskflow.core.errors import TaskflowError
from taskflow.core.parser import strip_actions
from taskflow.core.pipeline import ChatPipeline
from taskflow.core.results import Err
from taskflow.registry import build_conversation_log, build_model_client, build_store


def _ensure_data_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)


def _load(args):
    config = load_config(args.config)
    _ensure_data_dir(config.data_dir)
    return config


def _parse_update_fields(set_pairs: list[str], json_payload: str | None) -> dict:
    updates: dict = {}
    if json_payload:
        try:
            payload = json.loads(json_payload)
        except json.JSONDecodeError as exc:
            raise SystemExit(f"Invalid JSON for --json: {exc}") from exc
        if not isinstance(payload, dict):
            raise SystemExit("--json must be a JSON object.")
        updates.update(payload)
    for pair in set_pairs or []:
        if "=" not in pair:
            raise SystemExit(f"Invalid --set value '{pair}'. Use key=value.")
        key, value = pair.split("=", 1)
        key = key.strip()
        if not key:
            raise SystemExit(f"Invalid --set value '{pair}'. Use key=value.")
        updates[key] = value
    return updates


def _unwrap(result):
    if isinstance(result, Err):
        raise SystemExit(result.message)
    return result.value


def cmd_chat(args) -> None:
    config = _load(args)
    pipeline = ChatPipeline(
        model=build_model_client(config),
        store=build_store(config),
        conversation_log=build_conversation_log(config),
        recent_task_limit=config.recent_task_limit,
    )
    response = pipeline.handle(args.message)
    if args.json:
        print(json.dumps(response.to_dict(), indent=2))
        return
    if not response.success:
        print(response.response)
        raise SystemExit(f"Error: {response.error}")
    text = strip_actions(response.response)
    if text:
        print(text)
    for result in response.action_results:
        if result.success:
            print(f"  ok   {result.directive.type} #{result.entity['id']}")
        else:
            print(f"  fail {result.directive.type}: {result.error}")


def cmd_scrap(args) -> None:
    config = _load(args)
    store = build_store(config)
    scrap = _unwrap(store.create_scrap({"content": args.text, "date_assigned": args.date}))
    print(f"Captured scrap #{scrap.id}.")


def cmd_list(args) -> None:
    config = _load(args)
    store = build_store(config)
    if args.kind == "tasks":
        records = store.list_tasks(status=args.status, area=args.area, limit=args.limit)
    elif args.kind == "projects":
        records = store.list_projects(status=args.status, area=args.area)
    elif args.kind == "notes":
        records = store.list_notes(area=args.area)
    else:
        records = store.list_scraps(processed=False if args.unprocessed else None)
    if args.limit is not None:
        records = records[: args.limit]
    for record in records:
        print(json.dumps(record.to_dict()))


UPDATE_MODELS = {
    "task": TaskUpdates,
    "project": ProjectUpdates,
    "note": NoteUpdates,
}


def cmd_update(args) -> None:
    config = _load(args)
    store = build_store(config)
    updates = _parse_update_fields(args.set, args.json)
    if not updates:
        raise SystemExit("Provide updates via --set or --json.")
    try:
        updates = UPDATE_MODELS[args.kind].model_validate(updates).record_fields()
    except ValidationError as exc:
        raise SystemExit(describe_validation_error(f"{args.kind} update", exc)) from exc
    if args.kind == "task":
        record = _unwrap(store.update_task(args.id, updates))
    elif args.kind == "project":
        record = _unwrap(store.update_project(args.id, updates))
    else:
        record = _unwrap(store.update_note(args.id, updates))
    print(f"Updated {args.kind} {record.id}.")


def cmd_history(args) -> None:
    config = _load(args)
    conversation_log = build_conversation_log(config)
    for turn in conversation_log.recent(args.limit):
        print(f"[{turn.timestamp.isoformat()}] You: {turn.message}")
        print(f"  AI: {strip_actions(turn.raw_response)}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="TaskFlow conversational task manager")
    parser.add_argument("--config", help="Path to config.json")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    chat_cmd = sub.add_parser("chat", help="Send one message to the assistant")
    chat_cmd.add_argument("message", help="Message text")
    chat_cmd.add_argument("--json", action="store_true", help="Print the full response as JSON")
    chat_cmd.set_defaults(func=cmd_chat)

    scrap_cmd = sub.add_parser("scrap", help="Capture a scrap without the assistant")
    scrap_cmd.add_argument("text", help="Scrap text")
    scrap_cmd.add_argument("--date", help="Assigned date (YYYY-MM-DD)")
    scrap_cmd.set_defaults(func=cmd_scrap)

    list_cmd = sub.add_parser("list", help="List stored entities")
    list_cmd.add_argument("kind", choices=["tasks", "projects", "notes", "scraps"])
    list_cmd.add_argument("--status", help="Filter tasks or projects by status")
    list_cmd.add_argument("--area", help="Filter by area")
    list_cmd.add_argument("--unprocessed", action="store_true", help="Only unprocessed scraps")
    list_cmd.add_argument("--limit", type=int, help="Maximum number of records")
    list_cmd.set_defaults(func=cmd_list)

    update_cmd = sub.add_parser("update", help="Update a stored entity")
    update_cmd.add_argument("kind", choices=["task", "project", "note"])
    update_cmd.add_argument("id", type=int, help="Entity id")
    update_cmd.add_argument(
        "--set",
        action="append",
        default=[],
        help="Field update as key=value (repeatable)",
    )
    update_cmd.add_argument(
        "--json",
        dest="json",
        help="JSON object of field updates",
    )
    update_cmd.set_defaults(func=cmd_update)

    history_cmd = sub.add_parser("history", help="Show recent conversation turns")
    history_cmd.add_argument("--limit", type=int, default=10)
    history_cmd.set_defaults(func=cmd_history)

    return parser


def main(argv=None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        args.func(args)
    except TaskflowError as exc:
        raise SystemExit(f"Error: {exc}") from exc


if __name__ == "__main__":
    main()
