from typing import Optional

from app.auth.predicates import matches
from app.auth.scopes import task_visibility
from app.models import User, Task, Team

def is_admin(user: User):
    """
    Simple check if user is an admin.
    """
    return user.is_admin

def can_manage_tasks(user: User):
    """
    Admins and managers may create, update and delete tasks.
    """
    return user.is_admin or user.is_manager

def can_manage_task_in_team(user: User, team: Optional[Team]):
    """
    Checks whether a task write targeting `team` is allowed.
    Managers are limited to teams they manage; a task without a team is
    open to any manager.

    Args:
        user: The user
        team: Team the task targets, or None

    Returns:
        bool: True if allowed
    """
    if user.is_admin:
        return True
    if not user.is_manager:
        return False
    if team is None:
        return True
    return team.manager_id == user.id

def can_view_task(user: User, task: Task):
    """
    Same rule the task list applies, evaluated against a single task.
    """
    row = {
        "assigned_to": task.assigned_to,
        "assignee": set(task.assignee_ids),
    }
    return matches(task_visibility(user.role, user.id), row)

def can_update_task_status(user: User, task: Task):
    """
    Employees may change status only on tasks where they are the primary
    assignee. Admins and managers may change any task's status.
    """
    if user.is_employee:
        return task.assigned_to == user.id
    return can_manage_tasks(user)

def can_manage_teams(user: User):
    return user.is_admin or user.is_manager

def can_view_team_members(user: User, team: Team):
    """
    Employees only see member details of teams they belong to.
    """
    if not user.is_employee:
        return True
    return user.id in team.member_ids

def can_manage_team_members(user: User, team: Team):
    """
    Checks if user can add or remove members of a team.
    Admins can manage any team, managers only the teams they manage.
    """
    if user.is_admin:
        return True
    return user.is_manager and team.manager_id == user.id

def can_view_user(user: User, target_id: int):
    return user.is_admin or user.id == target_id
