from datetime import date

import pytest

from client import cli
from client.api import ApiError
from client.app import TaskApp
from client.session import LocalStorage, TOKEN_KEY

TODAY = date.today().isoformat()


@pytest.fixture()
def storage(tmp_path):
    return LocalStorage(tmp_path / "storage.json")


@pytest.fixture()
def app(client, storage):
    return TaskApp(storage, http=client)


@pytest.fixture()
def logged_in(app):
    assert app.register("Alice", "alice@example.com", "password123")
    assert app.login("alice@example.com", "password123")
    return app


def test_end_to_end_buy_milk(logged_in):
    dashboard = logged_in.dashboard

    dashboard.open_add()
    assert dashboard.save_task({"title": "Buy milk", "priority": "low", "dueDate": TODAY})

    assert not dashboard.modal_open
    assert [t["title"] for t in dashboard.tasks] == ["Buy milk"]
    assert dashboard.stats["total"] == 1
    assert dashboard.stats["lowPriority"] == 1

    assert dashboard.delete_task(dashboard.tasks[0])
    assert dashboard.tasks == []
    assert dashboard.stats["total"] == 0


def test_register_does_not_log_in(app, storage):
    assert app.register("Alice", "alice@example.com", "password123")

    assert not app.session.is_authenticated
    assert storage.get(TOKEN_KEY) is None


def test_login_persists_session(logged_in, storage):
    assert storage.get(TOKEN_KEY) == logged_in.session.token
    assert storage.get("userId") == logged_in.session.user_id
    assert storage.get("currentUser")["email"] == "alice@example.com"


def test_failed_login_notifies(app):
    app.register("Alice", "alice@example.com", "password123")
    app.notifier.messages.clear()

    assert not app.login("alice@example.com", "wrong-password")

    notes = app.notifier.messages
    assert [(n.kind, n.text) for n in notes] == [("error", "Invalid credentials")]
    assert not app.session.is_authenticated


def test_restore_session_from_storage(logged_in, client, storage):
    restarted = TaskApp(storage, http=client)

    assert restarted.restore_session()
    assert restarted.session.user["name"] == "Alice"
    assert restarted.dashboard.refresh()


def test_rejected_token_clears_storage(client, storage):
    storage.set(TOKEN_KEY, "expired-or-forged")
    app = TaskApp(storage, http=client)

    assert not app.restore_session()
    assert not app.session.is_authenticated
    assert app.api.session is app.session
    assert app.api.session.auth_headers() == {}
    assert not storage.path.exists()


def test_logout(logged_in, storage):
    logged_in.logout()

    assert not logged_in.session.is_authenticated
    assert not storage.path.exists()
    with pytest.raises(ApiError) as excinfo:
        logged_in.api.list_tasks()
    assert excinfo.value.status_code == 401


def test_edit_flow_and_toggle(logged_in):
    dashboard = logged_in.dashboard
    dashboard.save_task({"title": "Draft", "priority": "medium", "dueDate": TODAY})
    task = dashboard.tasks[0]

    dashboard.open_edit(task)
    assert dashboard.save_task({"title": "Final"})
    assert dashboard.tasks[0]["title"] == "Final"
    assert dashboard.tasks[0]["id"] == task["id"]

    assert dashboard.toggle_complete(dashboard.tasks[0])
    assert dashboard.stats["completed"] == 1
    assert dashboard.toggle_complete(dashboard.tasks[0])
    assert dashboard.stats["completed"] == 0


def test_failed_save_keeps_modal_and_list(logged_in):
    dashboard = logged_in.dashboard
    dashboard.save_task({"title": "Keep", "priority": "low", "dueDate": TODAY})
    before = list(dashboard.tasks)
    logged_in.notifier.messages.clear()

    dashboard.open_add()
    assert not dashboard.save_task({"title": "No priority", "dueDate": TODAY})

    assert dashboard.modal_open
    assert dashboard.loading is False
    assert dashboard.tasks == before
    notes = logged_in.notifier.messages
    assert len(notes) == 1 and notes[0].kind == "error"


def test_second_save_refused_while_loading(logged_in):
    dashboard = logged_in.dashboard
    dashboard.loading = True

    assert not dashboard.save_task({"title": "x", "priority": "low", "dueDate": TODAY})
    dashboard.loading = False
    dashboard.refresh()
    assert dashboard.tasks == []


def test_set_filter_rejects_unknown_key(logged_in):
    with pytest.raises(ValueError):
        logged_in.dashboard.set_filter("tomorrow")


def test_render_lists_filtered_tasks(logged_in):
    dashboard = logged_in.dashboard
    dashboard.save_task({"title": "Urgent", "priority": "high", "dueDate": TODAY})
    dashboard.save_task({"title": "Chill", "priority": "low", "dueDate": TODAY})

    dashboard.set_filter("high")
    text = dashboard.render()

    assert "Total 2" in text
    assert "High Priority" in text
    assert "Urgent" in text
    assert "Chill" not in text

    dashboard.set_filter("medium")
    assert "No tasks match this filter" in dashboard.render()


def test_cli_add_and_list(client, storage, capsys):
    argv = ["--storage", str(storage.path)]
    assert cli.main(argv + ["register", "Alice", "alice@example.com", "--password", "password123"], http=client) == 0
    assert cli.main(argv + ["login", "alice@example.com", "--password", "password123"], http=client) == 0
    assert cli.main(argv + ["add", "Buy milk", "--priority", "low"], http=client) == 0
    capsys.readouterr()

    assert cli.main(argv + ["list", "--filter", "today"], http=client) == 0

    out = capsys.readouterr().out
    assert "Total 1" in out
    assert "Buy milk" in out


def test_cli_requires_login(client, storage, capsys):
    assert cli.main(["--storage", str(storage.path), "list"], http=client) == 1
    assert "Not logged in" in capsys.readouterr().err


def test_pending_and_completed_views(logged_in):
    dashboard = logged_in.dashboard
    dashboard.save_task({"title": "Open", "priority": "low", "dueDate": TODAY})
    dashboard.save_task({"title": "Closed", "priority": "low", "dueDate": TODAY, "completed": "yes"})

    dashboard.set_view("pending")
    assert [t["title"] for t in dashboard.visible_tasks()] == ["Open"]
    dashboard.set_view("completed")
    assert [t["title"] for t in dashboard.visible_tasks()] == ["Closed"]


def test_login_updates_the_session_shared_with_the_api(app):
    session = app.session
    app.register("Alice", "alice@example.com", "password123")

    assert app.login("alice@example.com", "password123")

    assert app.session is session
    assert app.api.session is session
    assert session.display_name == "Alice"
    assert app.api.list_tasks() == []


def test_cli_whoami(client, storage, capsys):
    argv = ["--storage", str(storage.path)]
    cli.main(argv + ["register", "Alice", "alice@example.com", "--password", "password123"], http=client)
    cli.main(argv + ["login", "alice@example.com", "--password", "password123"], http=client)
    capsys.readouterr()

    assert cli.main(argv + ["whoami"], http=client) == 0
    assert capsys.readouterr().out.strip() == "Alice <alice@example.com>"


def test_render_tolerates_missing_due_date(logged_in):
    dashboard = logged_in.dashboard
    dashboard.tasks = [{"id": "t1", "title": "Someday", "priority": "low", "dueDate": None}]

    assert "Someday" in dashboard.render()
