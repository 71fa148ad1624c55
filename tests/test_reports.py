from datetime import date, timedelta

import pytest

from app.auth.scopes import ScopeFilters
from app.exceptions import BaseAPIException
from app.models import Task, TaskAssignee
from app.utils.common import utc_now
from app.utils.report_service import resolve_window


def _task(db, title, status="pending", team=None, creator=None, assignees=(), created_at=None):
    task = Task(
        title=title,
        status=status,
        team_id=team.id if team else None,
        created_by=creator.id if creator else None,
        assigned_to=assignees[0].id if assignees else None,
        assignee_links=[TaskAssignee(user_id=user.id) for user in assignees],
    )
    if created_at is not None:
        task.created_at = created_at
    db.add(task)
    db.commit()
    return task


def _reports(client, headers, **params):
    response = client.get("/api/reports", params=params, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()["reports"]


def test_reports_forbidden_for_employees(client, auth_headers, employee):
    assert client.get("/api/reports", headers=auth_headers(employee)).status_code == 403


def test_start_after_end_is_rejected(client, auth_headers, admin):
    response = client.get(
        "/api/reports",
        params={"start_date": "2024-03-10", "end_date": "2024-03-01"},
        headers=auth_headers(admin),
    )

    assert response.status_code == 400
    assert response.json()["error_code"] == "VALIDATION_ERROR"


def test_status_distribution_has_every_status(client, auth_headers, admin, db):
    _task(db, "a", status="completed")
    _task(db, "b", status="completed")
    _task(db, "c", status="in_progress")

    dist = _reports(client, auth_headers(admin))["task_status_distribution"]

    assert dist["labels"] == ["pending", "in_progress", "completed", "cancelled"]
    assert dist["data"] == [0, 1, 2, 0]
    assert len(dist["colors"]) == 4


def test_manager_sees_only_created_or_managed(client, auth_headers, admin, manager, other_manager, make_team, db):
    own = make_team("Own", manager=manager)
    foreign = make_team("Foreign", manager=other_manager)
    _task(db, "mine", creator=manager)
    _task(db, "in my team", team=own, creator=admin)
    _task(db, "elsewhere", team=foreign, creator=other_manager)
    _task(db, "unteamed", creator=admin)

    reports = _reports(client, auth_headers(manager))

    assert sum(reports["task_status_distribution"]["data"]) == 2
    assert reports["team_performance"]["labels"] == ["Own"]
    assert reports["team_performance"]["tasks"] == [1]

    admin_reports = _reports(client, auth_headers(admin))
    assert sum(admin_reports["task_status_distribution"]["data"]) == 4
    assert admin_reports["team_performance"]["labels"] == ["Foreign", "Own"]


def test_filters_never_widen_scope(client, auth_headers, manager, other_manager, make_team, db):
    foreign = make_team("Foreign", manager=other_manager)
    _task(db, "elsewhere", team=foreign, creator=other_manager)

    reports = _reports(client, auth_headers(manager), team_id=foreign.id)

    assert sum(reports["task_status_distribution"]["data"]) == 0
    assert reports["team_performance"]["labels"] == []


def test_team_filter_narrows(client, auth_headers, admin, make_team, db):
    one = make_team("One")
    two = make_team("Two")
    _task(db, "a", team=one)
    _task(db, "b", team=two)
    _task(db, "c", team=two)

    reports = _reports(client, auth_headers(admin), team_id=two.id)

    assert sum(reports["task_status_distribution"]["data"]) == 2
    assert reports["team_performance"]["labels"] == ["Two"]


def test_team_performance_breakdown(client, auth_headers, admin, employee, other_employee, make_team, db):
    team = make_team("Crew", members=[employee, other_employee])
    _task(db, "a", team=team, status="completed")
    _task(db, "b", team=team, status="pending")
    _task(db, "c", team=team, status="in_progress")

    perf = _reports(client, auth_headers(admin))["team_performance"]

    assert perf == {
        "labels": ["Crew"],
        "members": [2],
        "tasks": [3],
        "completed": [1],
        "in_progress": [1],
        "pending": [1],
    }


def test_user_productivity_counts_assignee_set(client, auth_headers, admin, manager, employee, other_employee, db):
    _task(db, "a", assignees=[employee, other_employee], status="completed")
    _task(db, "b", assignees=[other_employee])
    _task(db, "c", assignees=[manager, employee])

    prod = _reports(client, auth_headers(admin))["user_productivity"]

    # managers are not ranked; ties broken by name
    assert prod["labels"] == [other_employee.name, employee.name]
    assert prod["total"] == [2, 2]
    assert prod["completed"] == [1, 1]
    assert prod["pending"] == [1, 1]


def test_tasks_over_time_window(client, auth_headers, admin, db):
    today = utc_now().date()
    _task(db, "today")
    _task(db, "long ago", created_at=utc_now() - timedelta(days=90))

    series = _reports(client, auth_headers(admin))["tasks_over_time"]

    assert len(series["labels"]) == 30
    assert series["labels"][-1] == today.isoformat()
    assert series["created"][-1] == 1
    assert sum(series["created"]) == 1


def test_tasks_over_time_respects_explicit_dates(client, auth_headers, admin, db):
    start = date(2024, 2, 1)
    _task(db, "in range", created_at=utc_now().replace(year=2024, month=2, day=2))

    series = _reports(client, auth_headers(admin), start_date="2024-02-01", end_date="2024-02-03")["tasks_over_time"]

    assert series["labels"] == [start.isoformat(), "2024-02-02", "2024-02-03"]
    assert series["created"] == [0, 1, 0]


def test_activity_timeline(client, auth_headers, admin):
    client.post("/api/tasks", json={"title": "Logged"}, headers=auth_headers(admin))
    client.post("/api/teams", json={"name": "Logged team"}, headers=auth_headers(admin))

    timeline = _reports(client, auth_headers(admin))["activity_timeline"]

    labels = [dataset["label"] for dataset in timeline["datasets"]]
    assert labels == ["task_created", "team_created"]
    assert all(dataset["data"][-1] == 1 for dataset in timeline["datasets"])


def test_resolve_window():
    today = date(2024, 6, 30)

    assert resolve_window(ScopeFilters(), today) == (date(2024, 6, 1), today)
    assert resolve_window(ScopeFilters(end_date=date(2024, 1, 31)), today) == (date(2024, 1, 2), date(2024, 1, 31))
    assert resolve_window(ScopeFilters(start_date=date(2024, 6, 20)), today) == (date(2024, 6, 20), today)

    with pytest.raises(BaseAPIException):
        resolve_window(ScopeFilters(start_date=date(2024, 7, 5)), today)


def test_future_start_without_end_is_rejected(client, auth_headers, admin):
    start = (utc_now().date() + timedelta(days=5)).isoformat()

    response = client.get("/api/reports", params={"start_date": start}, headers=auth_headers(admin))

    assert response.status_code == 400
    assert response.json()["error_code"] == "VALIDATION_ERROR"
