import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Callable, List, Optional

from client.api import ApiClient, ApiError
from utils.completion import is_completed

logger = logging.getLogger(__name__)

FILTER_OPTIONS = ["all", "today", "week", "high", "medium", "low"]
FILTER_LABELS = {
    "all": "All Tasks",
    "today": "Today",
    "week": "This Week",
    "high": "High Priority",
    "medium": "Medium Priority",
    "low": "Low Priority",
}
PRIORITY_FILTERS = ("high", "medium", "low")
VIEWS = ("all", "pending", "completed")


def parse_due_date(value) -> Optional[date]:
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value:
        return None
    try:
        return date.fromisoformat(value.split("T", 1)[0])
    except ValueError:
        return None


def _priority(task: dict) -> str:
    value = task.get("priority")
    return value.lower() if isinstance(value, str) else ""


def filter_tasks(tasks: List[dict], key: str, today: Optional[date] = None) -> List[dict]:
    """
    Subset of tasks matching a dashboard filter

    "today" keeps tasks due today, "week" those due between today and
    today + 7 days inclusive, priority keys match case-insensitively.
    Unknown keys keep everything.
    """
    today = today or date.today()
    next_week = today + timedelta(days=7)

    def keep(task: dict) -> bool:
        if key in ("today", "week"):
            due = parse_due_date(task.get("dueDate"))
            if due is None:
                return False
            if key == "today":
                return due == today
            return today <= due <= next_week
        if key in PRIORITY_FILTERS:
            return _priority(task) == key
        return True

    return [task for task in tasks if keep(task)]


def compute_stats(tasks: List[dict]) -> dict:
    """Totals shown on the dashboard, recomputed from the whole list"""
    return {
        "total": len(tasks),
        "lowPriority": sum(1 for t in tasks if _priority(t) == "low"),
        "mediumPriority": sum(1 for t in tasks if _priority(t) == "medium"),
        "highPriority": sum(1 for t in tasks if _priority(t) == "high"),
        "completed": sum(1 for t in tasks if is_completed(t.get("completed"))),
    }


def pending_tasks(tasks: List[dict]) -> List[dict]:
    return [t for t in tasks if not is_completed(t.get("completed"))]


def completed_tasks(tasks: List[dict]) -> List[dict]:
    return [t for t in tasks if is_completed(t.get("completed"))]


@dataclass
class Notification:
    kind: str  # "success" or "error"
    text: str


@dataclass
class Notifier:
    """Collects one-shot messages for the user"""
    messages: List[Notification] = field(default_factory=list)
    on_notify: Optional[Callable[[Notification], None]] = None

    def _push(self, kind: str, text: str) -> None:
        note = Notification(kind, text)
        self.messages.append(note)
        if self.on_notify:
            self.on_notify(note)

    def success(self, text: str) -> None:
        self._push("success", text)

    def error(self, text: str) -> None:
        self._push("error", text)


class Dashboard:
    """
    View state of the task overview

    Every mutation goes to the server and is followed by a full refresh
    of the task list; a failed call leaves the current list in place.
    """

    def __init__(self, api: ApiClient, notifier: Optional[Notifier] = None):
        self.api = api
        self.notifier = notifier or Notifier()
        self.tasks: List[dict] = []
        self.filter = "all"
        self.view = "all"
        self.modal_open = False
        self.selected_task: Optional[dict] = None
        self.loading = False

    @property
    def stats(self) -> dict:
        return compute_stats(self.tasks)

    def visible_tasks(self, today: Optional[date] = None) -> List[dict]:
        tasks = self.tasks
        if self.view == "pending":
            tasks = pending_tasks(tasks)
        elif self.view == "completed":
            tasks = completed_tasks(tasks)
        return filter_tasks(tasks, self.filter, today)

    def set_view(self, view: str) -> None:
        if view not in VIEWS:
            raise ValueError(f"Unknown view {view!r}")
        self.view = view

    def set_filter(self, key: str) -> None:
        if key not in FILTER_OPTIONS:
            raise ValueError(f"Unknown filter {key!r}")
        self.filter = key

    def open_add(self) -> None:
        self.selected_task = None
        self.modal_open = True

    def open_edit(self, task: dict) -> None:
        self.selected_task = task
        self.modal_open = True

    def close_modal(self) -> None:
        self.modal_open = False
        self.selected_task = None

    def refresh(self) -> bool:
        try:
            self.tasks = self.api.list_tasks()
        except ApiError as exc:
            self.notifier.error(exc.message)
            return False
        return True

    def save_task(self, fields: dict) -> bool:
        """
        Submit the add/edit form

        Edits the selected task if one is open, otherwise creates a task.
        Refused while a previous submission is still loading.
        """
        if self.loading:
            return False
        self.loading = True
        editing = self.selected_task
        try:
            if editing:
                self.api.update_task(editing["id"], fields)
            else:
                self.api.create_task(fields)
        except ApiError as exc:
            logger.info("Saving task failed: %s", exc.message)
            self.notifier.error(exc.message)
            return False
        finally:
            self.loading = False

        self.close_modal()
        self.notifier.success("Task updated" if editing else "Task created")
        self.refresh()
        return True

    def toggle_complete(self, task: dict) -> bool:
        try:
            self.api.toggle_complete(task["id"])
        except ApiError as exc:
            self.notifier.error(exc.message)
            return False
        self.refresh()
        return True

    def delete_task(self, task: dict) -> bool:
        try:
            self.api.delete_task(task["id"])
        except ApiError as exc:
            self.notifier.error(exc.message)
            return False
        self.notifier.success("Task deleted")
        self.refresh()
        return True

    def render(self, today: Optional[date] = None) -> str:
        """Plain-text view: stats line, filter label, task table"""
        stats = self.stats
        lines = [
            "Total {total} | Completed {completed} | High {highPriority} | "
            "Medium {mediumPriority} | Low {lowPriority}".format(**stats),
            FILTER_LABELS[self.filter],
            "-" * 60,
        ]
        visible = self.visible_tasks(today)
        if not visible:
            lines.append(
                "Create your first task to get started" if self.filter == "all"
                else "No tasks match this filter"
            )
        for task in visible:
            mark = "x" if is_completed(task.get("completed")) else " "
            lines.append(
                f"[{mark}] {task.get('dueDate') or '':<10}  {_priority(task):<6}  "
                f"{task.get('title', '')}  ({task.get('id', '')})"
            )
        return "\n".join(lines)
