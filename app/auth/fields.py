"""
Field maps binding predicate field names to SQLAlchemy expressions,
one per filterable entity.
"""
from sqlalchemy import and_, select

from app.auth.predicates import Field
from app.enums import EntityType
from app.models import ActivityLog, Task, TaskAssignee, Team, TeamMember


def _managed_team_ids(manager_id):
    return select(Team.id).where(Team.manager_id == manager_id)


def _tasks_in_manager_scope(manager_id):
    return select(Task.id).where(
        (Task.created_by == manager_id) | Task.team_id.in_(_managed_team_ids(manager_id))
    )


TASK_FIELDS = {
    "id": Field(Task.id),
    "team_id": Field(Task.team_id),
    "created_by": Field(Task.created_by),
    "assigned_to": Field(Task.assigned_to),
    "status": Field(Task.status),
    "created_at": Field(Task.created_at),
    "assignee": Field(matcher=lambda user_id: Task.assignee_links.any(TaskAssignee.user_id == user_id)),
    "team_manager": Field(matcher=lambda user_id: Task.team.has(Team.manager_id == user_id)),
}

TEAM_FIELDS = {
    "id": Field(Team.id),
    "manager_id": Field(Team.manager_id),
    "member": Field(matcher=lambda user_id: Team.member_links.any(TeamMember.user_id == user_id)),
    "has_task": Field(matcher=lambda task_id: Team.tasks.any(Task.id == task_id)),
}

ACTIVITY_FIELDS = {
    "user_id": Field(ActivityLog.user_id),
    "action_type": Field(ActivityLog.action_type),
    "entity_type": Field(ActivityLog.entity_type),
    "entity_id": Field(ActivityLog.entity_id),
    "created_at": Field(ActivityLog.created_at),
    "managed_team": Field(matcher=lambda manager_id: and_(
        ActivityLog.entity_type == EntityType.TEAM.value,
        ActivityLog.entity_id.in_(_managed_team_ids(manager_id)),
    )),
    "managed_task": Field(matcher=lambda manager_id: and_(
        ActivityLog.entity_type == EntityType.TASK.value,
        ActivityLog.entity_id.in_(_tasks_in_manager_scope(manager_id)),
    )),
    "team": Field(matcher=lambda team_id: (
        and_(
            ActivityLog.entity_type == EntityType.TEAM.value,
            ActivityLog.entity_id == team_id,
        )
        | and_(
            ActivityLog.entity_type == EntityType.TASK.value,
            ActivityLog.entity_id.in_(select(Task.id).where(Task.team_id == team_id)),
        )
    )),
}
