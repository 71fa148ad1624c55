from typing import List, Optional

from sqlalchemy.orm import Session, joinedload, selectinload

from app.auth.fields import TASK_FIELDS
from app.auth.permissions import (
    can_manage_task_in_team,
    can_manage_tasks,
    can_update_task_status,
    can_view_task,
)
from app.auth.predicates import render
from app.auth.scopes import task_visibility
from app.constants import ErrorMessages
from app.enums import ActivityAction, EntityType, ErrorCode, TaskStatus
from app.exceptions import (
    raise_assignee_not_in_team,
    raise_forbidden,
    raise_task_not_found,
    raise_user_not_found,
    raise_validation_error,
)
from app.models import Task, TaskAssignee, Team, User
from app.schemas import TaskCreate, TaskStatusUpdate, TaskUpdate
from app.utils.activity_logger import log_activity
from app.utils.common import dedupe_ids, get_object_or_404, json_value, to_naive_utc

# Plain columns a full update may change; assignees are handled separately
UPDATABLE_FIELDS = ("title", "description", "team_id", "due_date")


def _task_query(db: Session):
    return db.query(Task).options(
        joinedload(Task.assignee),
        joinedload(Task.creator),
        joinedload(Task.team),
        selectinload(Task.assignee_links).joinedload(TaskAssignee.user),
    )

def _load_task(db: Session, task_id: int) -> Task:
    task = _task_query(db).filter(Task.id == task_id).first()
    if not task:
        raise_task_not_found()
    return task

def _get_team(db: Session, team_id: Optional[int]) -> Optional[Team]:
    if team_id is None:
        return None
    return get_object_or_404(db, Team, team_id, ErrorMessages.TEAM_NOT_FOUND, ErrorCode.TEAM_NOT_FOUND)


# --------------------------------------------------
# ASSIGNEES
# --------------------------------------------------

def resolve_assignee_ids(assigned_to: Optional[int], assigned_user_ids: Optional[List[int]]) -> List[int]:
    """
    The list wins over the legacy single field when both are given.
    Duplicates collapse keeping first-seen order.
    """
    if assigned_user_ids is not None:
        return dedupe_ids(assigned_user_ids)
    if assigned_to is not None:
        return [assigned_to]
    return []

def _validate_assignees(db: Session, user_ids: List[int], team: Optional[Team]):
    if not user_ids:
        return

    found = {row[0] for row in db.query(User.id).filter(User.id.in_(user_ids)).all()}
    missing = [uid for uid in user_ids if uid not in found]
    if missing:
        raise_user_not_found(f"{ErrorMessages.USER_NOT_FOUND}: {', '.join(str(uid) for uid in missing)}")

    if team is not None:
        member_ids = set(team.member_ids)
        outsiders = [uid for uid in user_ids if uid not in member_ids]
        if outsiders:
            raise_assignee_not_in_team(outsiders)

def _replace_assignees(db: Session, task: Task, user_ids: List[int]) -> bool:
    """
    Rewrites the assignee set in the given order and mirrors the first
    entry into assigned_to. Returns False when nothing changed.
    """
    if task.assignee_ids == user_ids and task.assigned_to == (user_ids[0] if user_ids else None):
        return False

    task.assignee_links.clear()
    # Old rows must be gone before re-inserting the same (task, user) pairs
    db.flush()
    for uid in user_ids:
        task.assignee_links.append(TaskAssignee(user_id=uid))
    task.assigned_to = user_ids[0] if user_ids else None
    return True


# --------------------------------------------------
# READ
# --------------------------------------------------

def list_tasks(db: Session, user: User) -> List[Task]:
    return (
        _task_query(db)
        .filter(render(task_visibility(user.role, user.id), TASK_FIELDS))
        .order_by(Task.created_at.desc(), Task.id.desc())
        .all()
    )

def get_task(db: Session, user: User, task_id: int) -> Task:
    task = _load_task(db, task_id)
    if not can_view_task(user, task):
        raise_forbidden(ErrorMessages.ACCESS_DENIED)
    return task


# --------------------------------------------------
# WRITE
# --------------------------------------------------

def create_task(db: Session, user: User, data: TaskCreate) -> Task:
    """
    Creates a task together with its assignee set in a single commit.
    """
    if not can_manage_tasks(user):
        raise_forbidden(ErrorMessages.ONLY_ADMINS_MANAGERS)

    team = _get_team(db, data.team_id)
    if not can_manage_task_in_team(user, team):
        raise_forbidden(ErrorMessages.ONLY_TEAM_MANAGER)

    assignee_ids = resolve_assignee_ids(data.assigned_to, data.assigned_user_ids)
    _validate_assignees(db, assignee_ids, team)

    task = Task(
        title=data.title,
        description=data.description,
        status=TaskStatus.PENDING.value,
        assigned_to=assignee_ids[0] if assignee_ids else None,
        team_id=data.team_id,
        created_by=user.id,
        due_date=to_naive_utc(data.due_date),
        assignee_links=[TaskAssignee(user_id=uid) for uid in assignee_ids],
    )
    db.add(task)
    db.commit()

    log_activity(
        db, user, ActivityAction.TASK_CREATED, EntityType.TASK, task.id,
        f'Created task "{task.title}"',
        {
            "task_title": task.title,
            "status": task.status,
            "team_id": task.team_id,
            "assignee_ids": assignee_ids,
        },
    )
    return _load_task(db, task.id)

def update_task(db: Session, user: User, task_id: int, data: TaskUpdate) -> Task:
    """
    Applies the fields present in the request. Managers must manage both
    the task's current team and the team it ends up in.
    """
    if not can_manage_tasks(user):
        raise_forbidden(ErrorMessages.ONLY_ADMINS_MANAGERS)

    fields_set = data.model_fields_set
    if not fields_set:
        raise_validation_error(ErrorMessages.NO_FIELDS_TO_UPDATE)

    task = _load_task(db, task_id)
    if not can_manage_task_in_team(user, task.team):
        raise_forbidden(ErrorMessages.ONLY_TEAM_MANAGER)

    team_id = data.team_id if "team_id" in fields_set else task.team_id
    team = _get_team(db, team_id)
    if not can_manage_task_in_team(user, team):
        raise_forbidden(ErrorMessages.ONLY_TEAM_MANAGER)

    new_assignee_ids = None
    if data.assigned_user_ids is not None or "assigned_to" in fields_set:
        new_assignee_ids = resolve_assignee_ids(data.assigned_to, data.assigned_user_ids)
        _validate_assignees(db, new_assignee_ids, team)
    elif team is not None and team_id != task.team_id:
        _validate_assignees(db, task.assignee_ids, team)

    changes = {}
    for field in UPDATABLE_FIELDS:
        if field not in fields_set:
            continue
        new_value = getattr(data, field)
        if field == "title" and new_value is None:
            continue
        if field == "due_date":
            new_value = to_naive_utc(new_value)
        old_value = getattr(task, field)
        if old_value != new_value:
            changes[field] = {"old": json_value(old_value), "new": json_value(new_value)}
            setattr(task, field, new_value)

    if new_assignee_ids is not None:
        old_assignee_ids = task.assignee_ids
        if _replace_assignees(db, task, new_assignee_ids):
            changes["assignee_ids"] = {"old": old_assignee_ids, "new": new_assignee_ids}

    db.commit()

    if changes:
        log_activity(
            db, user, ActivityAction.TASK_UPDATED, EntityType.TASK, task_id,
            f'Updated task "{task.title}"',
            {"task_title": task.title, "changes": changes},
        )
    return _load_task(db, task_id)

def update_task_status(db: Session, user: User, task_id: int, data: TaskStatusUpdate) -> Task:
    task = _load_task(db, task_id)
    if not can_update_task_status(user, task):
        raise_forbidden(ErrorMessages.ONLY_ASSIGNEE)

    old_status = task.status
    new_status = data.status.value
    task.status = new_status
    db.commit()

    if old_status != new_status:
        log_activity(
            db, user, ActivityAction.TASK_STATUS_UPDATED, EntityType.TASK, task_id,
            f'Changed status of "{task.title}" from {old_status} to {new_status}',
            {"task_title": task.title, "old_status": old_status, "new_status": new_status},
        )
    return _load_task(db, task_id)

def delete_task(db: Session, user: User, task_id: int):
    if not can_manage_tasks(user):
        raise_forbidden(ErrorMessages.ONLY_ADMINS_MANAGERS)

    task = _load_task(db, task_id)
    if not can_manage_task_in_team(user, task.team):
        raise_forbidden(ErrorMessages.ONLY_TEAM_MANAGER)

    title = task.title
    db.delete(task)
    db.commit()

    log_activity(
        db, user, ActivityAction.TASK_DELETED, EntityType.TASK, task_id,
        f'Deleted task "{title}"',
        {"task_title": title},
    )
