import argparse
import getpass
import os
import sys
from datetime import date
from pathlib import Path
from typing import Optional

import httpx
from dotenv import load_dotenv

from client.app import TaskApp
from client.dashboard import FILTER_OPTIONS, VIEWS, Notifier
from client.session import LocalStorage


def default_storage_path() -> Path:
    """
    Session storage file:
      ~/.taskmanager/storage.json

    Override with TASKS_STORAGE env var or --storage CLI option.
    """
    env = os.getenv("TASKS_STORAGE")
    if env:
        return Path(env).expanduser().resolve()
    return (Path.home() / ".taskmanager" / "storage.json").resolve()


def _parse_date(d: Optional[str]) -> Optional[str]:
    if not d:
        return None
    try:
        return date.fromisoformat(d).isoformat()
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Invalid date '{d}'. Use YYYY-MM-DD.") from e


def _print_notification(note) -> None:
    stream = sys.stderr if note.kind == "error" else sys.stdout
    print(note.text, file=stream)


def _find_task(app: TaskApp, task_id: str) -> Optional[dict]:
    for task in app.dashboard.tasks:
        if task.get("id") == task_id:
            return task
    app.notifier.error("Task not found")
    return None


def _require_session(app: TaskApp) -> bool:
    if app.restore_session():
        return app.dashboard.refresh()
    print("Not logged in. Run the 'login' command first.", file=sys.stderr)
    return False


def cmd_register(app: TaskApp, ns: argparse.Namespace) -> int:
    password = ns.password or getpass.getpass("Password: ")
    return 0 if app.register(ns.name, ns.email, password) else 1


def cmd_login(app: TaskApp, ns: argparse.Namespace) -> int:
    password = ns.password or getpass.getpass("Password: ")
    return 0 if app.login(ns.email, password) else 1


def cmd_logout(app: TaskApp, ns: argparse.Namespace) -> int:
    app.logout()
    print("Logged out.")
    return 0


def cmd_whoami(app: TaskApp, ns: argparse.Namespace) -> int:
    if not app.restore_session():
        print("Not logged in.", file=sys.stderr)
        return 1
    print(f"{app.session.display_name} <{app.session.user.get('email')}>")
    return 0


def cmd_list(app: TaskApp, ns: argparse.Namespace) -> int:
    if not _require_session(app):
        return 1
    app.dashboard.set_filter(ns.filter)
    app.dashboard.set_view(ns.status)
    print(app.dashboard.render())
    return 0


def cmd_add(app: TaskApp, ns: argparse.Namespace) -> int:
    if not _require_session(app):
        return 1
    fields = {"title": ns.title, "priority": ns.priority, "dueDate": ns.due}
    if ns.description:
        fields["description"] = ns.description
    app.dashboard.open_add()
    return 0 if app.dashboard.save_task(fields) else 1


def cmd_edit(app: TaskApp, ns: argparse.Namespace) -> int:
    if not _require_session(app):
        return 1
    task = _find_task(app, ns.id)
    if task is None:
        return 1
    fields = {
        "title": ns.title,
        "description": ns.description,
        "priority": ns.priority,
        "dueDate": ns.due,
    }
    app.dashboard.open_edit(task)
    return 0 if app.dashboard.save_task(
        {k: v for k, v in fields.items() if v is not None}
    ) else 1


def cmd_done(app: TaskApp, ns: argparse.Namespace) -> int:
    if not _require_session(app):
        return 1
    task = _find_task(app, ns.id)
    return 0 if task is not None and app.dashboard.toggle_complete(task) else 1


def cmd_delete(app: TaskApp, ns: argparse.Namespace) -> int:
    if not _require_session(app):
        return 1
    task = _find_task(app, ns.id)
    return 0 if task is not None and app.dashboard.delete_task(task) else 1


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="tasks", description="Task manager client")
    p.add_argument("--server", help="API root URL (default: TASKS_API_URL or http://localhost:3000)")
    p.add_argument("--storage", help="Path to the session storage file")

    sub = p.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("register", help="Create an account")
    sp.add_argument("name")
    sp.add_argument("email")
    sp.add_argument("--password")
    sp.set_defaults(func=cmd_register)

    sp = sub.add_parser("login", help="Log in and remember the session")
    sp.add_argument("email")
    sp.add_argument("--password")
    sp.set_defaults(func=cmd_login)

    sp = sub.add_parser("logout", help="Forget the stored session")
    sp.set_defaults(func=cmd_logout)

    sp = sub.add_parser("whoami", help="Show the signed-in user")
    sp.set_defaults(func=cmd_whoami)

    sp = sub.add_parser("list", help="Show stats and tasks")
    sp.add_argument("--filter", choices=FILTER_OPTIONS, default="all")
    sp.add_argument("--status", choices=VIEWS, default="all")
    sp.set_defaults(func=cmd_list)

    sp = sub.add_parser("add", help="Add a task")
    sp.add_argument("title")
    sp.add_argument("--priority", choices=["low", "medium", "high"], default="low")
    sp.add_argument("--due", type=_parse_date, default=date.today().isoformat())
    sp.add_argument("--description", "-d")
    sp.set_defaults(func=cmd_add)

    sp = sub.add_parser("edit", help="Edit a task")
    sp.add_argument("id")
    sp.add_argument("--title")
    sp.add_argument("--priority", choices=["low", "medium", "high"])
    sp.add_argument("--due", type=_parse_date)
    sp.add_argument("--description", "-d")
    sp.set_defaults(func=cmd_edit)

    sp = sub.add_parser("done", help="Toggle completion of a task")
    sp.add_argument("id")
    sp.set_defaults(func=cmd_done)

    sp = sub.add_parser("delete", help="Delete a task")
    sp.add_argument("id")
    sp.set_defaults(func=cmd_delete)

    return p


def main(argv=None, http: Optional[httpx.Client] = None) -> int:
    load_dotenv()
    ns = build_parser().parse_args(argv)

    storage = LocalStorage(ns.storage or default_storage_path())
    app = TaskApp(
        storage,
        base_url=ns.server or os.getenv("TASKS_API_URL", "http://localhost:3000"),
        http=http,
        notifier=Notifier(on_notify=_print_notification),
    )
    return int(ns.func(app, ns))


if __name__ == "__main__":
    raise SystemExit(main())
