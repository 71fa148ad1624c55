"""
Dashboard aggregates.

Each aggregate renders its own role scope, so a report never counts a row
the caller could not reach through the list endpoints. Explicit filters
narrow that scope and never replace it.
"""
from dataclasses import replace
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session, aliased

from app.auth.fields import ACTIVITY_FIELDS, TASK_FIELDS, TEAM_FIELDS
from app.auth.predicates import render
from app.auth.scopes import ScopeFilters, activity_scope, report_task_scope, report_team_scope
from app.constants import (
    ACTION_COLORS,
    DEFAULT_ACTION_COLOR,
    EMPLOYEE,
    ErrorMessages,
    REPORT_WINDOW_DAYS,
    STATUS_COLORS,
    STATUS_ORDER,
    TOP_EMPLOYEES_LIMIT,
)
from app.enums import ActivityAction, TaskStatus
from app.exceptions import raise_validation_error
from app.models import ActivityLog, Task, TaskAssignee, Team, TeamMember, User
from app.utils.common import utc_now


def resolve_window(filters: ScopeFilters, today: Optional[date] = None) -> Tuple[date, date]:
    """
    Day range for the time series: the trailing window ending today,
    bounded by whichever of start/end the caller supplied. A start date
    after the resolved end is rejected.
    """
    today = today or utc_now().date()
    end = filters.end_date or today
    start = filters.start_date or (end - timedelta(days=REPORT_WINDOW_DAYS - 1))
    if start > end:
        raise_validation_error(ErrorMessages.INVALID_DATE_RANGE)
    return start, end

def _days(start: date, end: date) -> List[str]:
    count = (end - start).days + 1
    return [(start + timedelta(days=offset)).isoformat() for offset in range(max(count, 0))]

def _day_counts(rows) -> Dict[str, int]:
    # func.date() yields a string on SQLite and a date elsewhere
    return {str(day): count for day, count in rows if day is not None}


# --------------------------------------------------
# AGGREGATES
# --------------------------------------------------

def task_status_distribution(db: Session, user: User, filters: ScopeFilters) -> dict:
    rows = (
        db.query(Task.status, func.count(Task.id))
        .filter(render(report_task_scope(user.role, user.id, filters), TASK_FIELDS))
        .group_by(Task.status)
        .all()
    )
    counts = dict(rows)
    return {
        "labels": STATUS_ORDER,
        "data": [counts.get(status, 0) for status in STATUS_ORDER],
        "colors": [STATUS_COLORS[status] for status in STATUS_ORDER],
    }

def tasks_over_time(db: Session, user: User, filters: ScopeFilters, window: Tuple[date, date]) -> dict:
    """
    Tasks created per day, and tasks completed per day by the day of
    their last update.
    """
    start, end = window
    labels = _days(start, end)
    window_start = datetime.combine(start, time.min)
    window_end = datetime.combine(end + timedelta(days=1), time.min)

    created_scope = report_task_scope(user.role, user.id, replace(filters, start_date=start, end_date=end))
    created_day = func.date(Task.created_at)
    created = _day_counts(
        db.query(created_day, func.count(Task.id))
        .filter(render(created_scope, TASK_FIELDS))
        .group_by(created_day)
        .all()
    )

    completed_scope = report_task_scope(user.role, user.id, filters.without_dates())
    completed_day = func.date(Task.updated_at)
    completed = _day_counts(
        db.query(completed_day, func.count(Task.id))
        .filter(
            render(completed_scope, TASK_FIELDS),
            Task.status == TaskStatus.COMPLETED.value,
            Task.updated_at >= window_start,
            Task.updated_at < window_end,
        )
        .group_by(completed_day)
        .all()
    )

    return {
        "labels": labels,
        "created": [created.get(day, 0) for day in labels],
        "completed": [completed.get(day, 0) for day in labels],
    }

def team_performance(db: Session, user: User, filters: ScopeFilters) -> dict:
    teams = (
        db.query(Team)
        .filter(render(report_team_scope(user.role, user.id, filters), TEAM_FIELDS))
        .order_by(Team.name, Team.id)
        .all()
    )
    team_ids = [team.id for team in teams]

    member_counts = {}
    task_counts: Dict[int, Dict[str, int]] = {}
    if team_ids:
        member_counts = dict(
            db.query(TeamMember.team_id, func.count(TeamMember.id))
            .filter(TeamMember.team_id.in_(team_ids))
            .group_by(TeamMember.team_id)
            .all()
        )
        rows = (
            db.query(Task.team_id, Task.status, func.count(Task.id))
            .filter(
                render(report_task_scope(user.role, user.id, filters), TASK_FIELDS),
                Task.team_id.in_(team_ids),
            )
            .group_by(Task.team_id, Task.status)
            .all()
        )
        for team_id, status, count in rows:
            task_counts.setdefault(team_id, {})[status] = count

    def column(status):
        return [task_counts.get(team_id, {}).get(status, 0) for team_id in team_ids]

    return {
        "labels": [team.name for team in teams],
        "members": [member_counts.get(team_id, 0) for team_id in team_ids],
        "tasks": [sum(task_counts.get(team_id, {}).values()) for team_id in team_ids],
        "completed": column(TaskStatus.COMPLETED.value),
        "in_progress": column(TaskStatus.IN_PROGRESS.value),
        "pending": column(TaskStatus.PENDING.value),
    }

def user_productivity(db: Session, user: User, filters: ScopeFilters) -> dict:
    """
    Top employees by number of tasks in the caller's scope, counted
    through the assignee set.
    """
    link = aliased(TaskAssignee)
    rows = (
        db.query(User.id, User.name, Task.status, func.count(Task.id))
        .join(link, link.user_id == User.id)
        .join(Task, Task.id == link.task_id)
        .filter(
            User.role == EMPLOYEE,
            render(report_task_scope(user.role, user.id, filters), TASK_FIELDS),
        )
        .group_by(User.id, User.name, Task.status)
        .all()
    )

    stats: Dict[int, dict] = {}
    for user_id, name, status, count in rows:
        entry = stats.setdefault(user_id, {"name": name, "total": 0, "statuses": {}})
        entry["total"] += count
        entry["statuses"][status] = count

    ranked = sorted(stats.values(), key=lambda entry: (-entry["total"], entry["name"]))[:TOP_EMPLOYEES_LIMIT]
    return {
        "labels": [entry["name"] for entry in ranked],
        "total": [entry["total"] for entry in ranked],
        "completed": [entry["statuses"].get(TaskStatus.COMPLETED.value, 0) for entry in ranked],
        "in_progress": [entry["statuses"].get(TaskStatus.IN_PROGRESS.value, 0) for entry in ranked],
        "pending": [entry["statuses"].get(TaskStatus.PENDING.value, 0) for entry in ranked],
    }

def activity_timeline(db: Session, user: User, filters: ScopeFilters, window: Tuple[date, date]) -> dict:
    start, end = window
    labels = _days(start, end)
    scope = activity_scope(user.role, user.id, replace(filters, start_date=start, end_date=end))

    day = func.date(ActivityLog.created_at)
    rows = (
        db.query(day, ActivityLog.action_type, func.count(ActivityLog.id))
        .filter(render(scope, ACTIVITY_FIELDS))
        .group_by(day, ActivityLog.action_type)
        .all()
    )

    per_action: Dict[str, Dict[str, int]] = {}
    for log_day, action, count in rows:
        per_action.setdefault(action, {})[str(log_day)] = count

    known = [action.value for action in ActivityAction]
    ordered = [action for action in known if action in per_action]
    ordered += sorted(action for action in per_action if action not in known)

    return {
        "labels": labels,
        "datasets": [
            {
                "label": action,
                "data": [per_action[action].get(label, 0) for label in labels],
                "color": ACTION_COLORS.get(action, DEFAULT_ACTION_COLOR),
            }
            for action in ordered
        ],
    }

def build_reports(db: Session, user: User, filters: ScopeFilters) -> dict:
    window = resolve_window(filters)
    return {
        "task_status_distribution": task_status_distribution(db, user, filters),
        "tasks_over_time": tasks_over_time(db, user, filters, window),
        "team_performance": team_performance(db, user, filters),
        "user_productivity": user_productivity(db, user, filters),
        "activity_timeline": activity_timeline(db, user, filters, window),
    }
