from app.models import ActivityLog, Task, Team, User


def _user_brief(user: User):
    return {"id": user.id, "name": user.name, "email": user.email}

def user_to_dict(user: User):
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "role": user.role,
        "email_verified": user.email_verified,
        "created_at": user.created_at,
        "updated_at": user.updated_at,
    }

def task_to_dict(task: Task):
    """
    Task row flattened with the names the task list shows.
    """
    assignee = task.assignee
    creator = task.creator
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "status": task.status,
        "assigned_to": task.assigned_to,
        "assigned_to_name": assignee.name if assignee else None,
        "assigned_to_email": assignee.email if assignee else None,
        "team_id": task.team_id,
        "team_name": task.team.name if task.team else None,
        "created_by": task.created_by,
        "created_by_name": creator.name if creator else None,
        "due_date": task.due_date,
        "created_at": task.created_at,
        "updated_at": task.updated_at,
        "assignees": [_user_brief(user) for user in task.assignees],
    }

def team_to_dict(team: Team, member_count=None):
    manager = team.manager
    data = {
        "id": team.id,
        "name": team.name,
        "description": team.description,
        "manager_id": team.manager_id,
        "manager_name": manager.name if manager else None,
        "manager_email": manager.email if manager else None,
        "created_at": team.created_at,
        "updated_at": team.updated_at,
    }
    if member_count is not None:
        data["member_count"] = member_count
    return data

def member_to_dict(user: User, joined_at):
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "role": user.role,
        "joined_at": joined_at,
    }

def log_to_dict(log: ActivityLog):
    actor = log.user
    return {
        "id": log.id,
        "user_id": log.user_id,
        "user_name": actor.name if actor else None,
        "user_email": actor.email if actor else None,
        "user_role": actor.role if actor else None,
        "action_type": log.action_type,
        "entity_type": log.entity_type,
        "entity_id": log.entity_id,
        "description": log.description,
        "metadata": log.event_metadata or {},
        "created_at": log.created_at,
    }
