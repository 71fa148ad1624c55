"""
Role scopes for list and aggregate queries.

Every builder here is a pure function of the caller's role and id plus
optional filters. Filters are always intersected with the role scope, so
a filter can only narrow what the caller is allowed to see.
"""
from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta
from typing import Optional

from app.auth.predicates import (
    MATCH_ALL, MATCH_NONE, AtLeast, Before, Equals, Predicate, all_of, any_of,
)
from app.enums import EntityType, UserRole


@dataclass(frozen=True)
class ScopeFilters:
    team_id: Optional[int] = None
    task_id: Optional[int] = None
    user_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    def without_dates(self) -> "ScopeFilters":
        return replace(self, start_date=None, end_date=None)


def _date_terms(field: str, filters: ScopeFilters):
    terms = []
    if filters.start_date is not None:
        terms.append(AtLeast(field, datetime.combine(filters.start_date, time.min)))
    if filters.end_date is not None:
        # end_date is inclusive of the whole day
        terms.append(Before(field, datetime.combine(filters.end_date + timedelta(days=1), time.min)))
    return terms


def _assigned_to_user(user_id: int) -> Predicate:
    return any_of(Equals("assigned_to", user_id), Equals("assignee", user_id))


# --------------------------------------------------
# TASKS
# --------------------------------------------------

def task_visibility(role: str, user_id: int) -> Predicate:
    """
    Tasks a caller may list or open. Admins and managers see every task,
    employees only tasks they are assigned to (primary or via the assignee set).
    """
    if role in (UserRole.ADMIN.value, UserRole.MANAGER.value):
        return MATCH_ALL
    if role == UserRole.EMPLOYEE.value:
        return _assigned_to_user(user_id)
    return MATCH_NONE


def report_task_scope(role: str, user_id: int, filters: ScopeFilters = ScopeFilters()) -> Predicate:
    """
    Tasks counted by reports: everything for admins, tasks a manager created
    or that belong to a team they manage, the employee's own tasks otherwise.
    """
    if role == UserRole.ADMIN.value:
        base = MATCH_ALL
    elif role == UserRole.MANAGER.value:
        base = any_of(Equals("created_by", user_id), Equals("team_manager", user_id))
    else:
        base = task_visibility(role, user_id)

    terms = [base]
    if filters.team_id is not None:
        terms.append(Equals("team_id", filters.team_id))
    if filters.task_id is not None:
        terms.append(Equals("id", filters.task_id))
    if filters.user_id is not None:
        terms.append(_assigned_to_user(filters.user_id))
    terms.extend(_date_terms("created_at", filters))
    return all_of(*terms)


# --------------------------------------------------
# TEAMS
# --------------------------------------------------

def report_team_scope(role: str, user_id: int, filters: ScopeFilters = ScopeFilters()) -> Predicate:
    if role == UserRole.ADMIN.value:
        base = MATCH_ALL
    elif role == UserRole.MANAGER.value:
        base = Equals("manager_id", user_id)
    else:
        base = Equals("member", user_id)

    terms = [base]
    if filters.team_id is not None:
        terms.append(Equals("id", filters.team_id))
    if filters.user_id is not None:
        terms.append(Equals("member", filters.user_id))
    if filters.task_id is not None:
        terms.append(Equals("has_task", filters.task_id))
    return all_of(*terms)


# --------------------------------------------------
# ACTIVITY LOG
# --------------------------------------------------

def activity_scope(
    role: str,
    user_id: int,
    filters: ScopeFilters = ScopeFilters(),
    entity_type: Optional[str] = None,
    entity_id: Optional[int] = None,
    action_type: Optional[str] = None,
) -> Predicate:
    """
    Activity rows visible to the caller. Managers see rows they authored and
    rows about teams they manage or tasks in their report task scope.
    """
    if role == UserRole.ADMIN.value:
        base = MATCH_ALL
    elif role == UserRole.MANAGER.value:
        base = any_of(
            Equals("user_id", user_id),
            Equals("managed_team", user_id),
            Equals("managed_task", user_id),
        )
    else:
        base = Equals("user_id", user_id)

    terms = [base]
    if filters.team_id is not None:
        terms.append(Equals("team", filters.team_id))
    if filters.task_id is not None:
        terms.append(Equals("entity_type", EntityType.TASK.value))
        terms.append(Equals("entity_id", filters.task_id))
    if filters.user_id is not None:
        terms.append(Equals("user_id", filters.user_id))
    if entity_type is not None:
        terms.append(Equals("entity_type", entity_type))
    if entity_id is not None:
        terms.append(Equals("entity_id", entity_id))
    if action_type is not None:
        terms.append(Equals("action_type", action_type))
    terms.extend(_date_terms("created_at", filters))
    return all_of(*terms)
