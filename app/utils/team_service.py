from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from app.auth.permissions import (
    can_manage_team_members,
    can_manage_teams,
    can_view_team_members,
    is_admin,
)
from app.constants import ErrorMessages, TEAM_MANAGER_ROLES
from app.enums import ActivityAction, EntityType, ErrorCode
from app.exceptions import (
    raise_bad_request,
    raise_forbidden,
    raise_member_not_found,
    raise_not_found,
    raise_user_not_found,
    raise_validation_error,
)
from app.models import Task, Team, TeamMember, User
from app.schemas import TeamCreate, TeamUpdate
from app.utils.activity_logger import log_activity
from app.utils.common import dedupe_ids, get_object_or_404
from app.utils.serializers import member_to_dict, team_to_dict


def _get_team(db: Session, team_id: int) -> Team:
    return get_object_or_404(db, Team, team_id, ErrorMessages.TEAM_NOT_FOUND, ErrorCode.TEAM_NOT_FOUND)

def _resolve_manager(db: Session, manager_id: int) -> User:
    manager = db.query(User).filter(User.id == manager_id).first()
    if not manager:
        raise_not_found(ErrorMessages.MANAGER_NOT_FOUND, ErrorCode.USER_NOT_FOUND)
    if manager.role not in TEAM_MANAGER_ROLES:
        raise_bad_request(ErrorMessages.INVALID_MANAGER_ROLE)
    return manager

def _require_existing_users(db: Session, user_ids: List[int]):
    if not user_ids:
        return
    found = {row[0] for row in db.query(User.id).filter(User.id.in_(user_ids)).all()}
    missing = [uid for uid in user_ids if uid not in found]
    if missing:
        raise_user_not_found(f"{ErrorMessages.USER_NOT_FOUND}: {', '.join(str(uid) for uid in missing)}")

def _member_count(db: Session, team_id: int) -> int:
    return db.query(func.count(TeamMember.id)).filter(TeamMember.team_id == team_id).scalar()


# --------------------------------------------------
# READ
# --------------------------------------------------

def list_teams(db: Session) -> List[dict]:
    counts = (
        db.query(TeamMember.team_id, func.count(TeamMember.id).label("member_count"))
        .group_by(TeamMember.team_id)
        .subquery()
    )
    rows = (
        db.query(Team, func.coalesce(counts.c.member_count, 0))
        .options(joinedload(Team.manager))
        .outerjoin(counts, counts.c.team_id == Team.id)
        .order_by(Team.created_at.desc(), Team.id.desc())
        .all()
    )
    return [team_to_dict(team, member_count) for team, member_count in rows]

def get_team(db: Session, user: User, team_id: int) -> dict:
    """
    Team detail with its members, most recently joined first.
    Employees only see teams they belong to.
    """
    team = _get_team(db, team_id)
    if not can_view_team_members(user, team):
        raise_forbidden(ErrorMessages.ACCESS_DENIED)

    rows = (
        db.query(User, TeamMember.joined_at)
        .join(TeamMember, TeamMember.user_id == User.id)
        .filter(TeamMember.team_id == team_id)
        .order_by(TeamMember.joined_at.desc(), TeamMember.id.desc())
        .all()
    )
    return {
        "team": team_to_dict(team, len(rows)),
        "members": [member_to_dict(member, joined_at) for member, joined_at in rows],
    }


# --------------------------------------------------
# WRITE
# --------------------------------------------------

def create_team(db: Session, user: User, data: TeamCreate) -> dict:
    """
    Creates a team and its initial members in one commit.
    A manager who names no manager becomes the team's manager.
    """
    if not can_manage_teams(user):
        raise_forbidden(ErrorMessages.ONLY_ADMINS_MANAGERS)

    manager_id = data.manager_id
    if manager_id is not None:
        _resolve_manager(db, manager_id)
    elif user.is_manager:
        manager_id = user.id

    member_ids = dedupe_ids(data.member_ids)
    _require_existing_users(db, member_ids)

    team = Team(
        name=data.name,
        description=data.description,
        manager_id=manager_id,
        member_links=[TeamMember(user_id=uid) for uid in member_ids],
    )
    db.add(team)
    db.commit()
    db.refresh(team)

    log_activity(
        db, user, ActivityAction.TEAM_CREATED, EntityType.TEAM, team.id,
        f'Created team "{team.name}"',
        {"team_name": team.name, "manager_id": manager_id, "member_ids": member_ids},
    )
    return team_to_dict(team, len(member_ids))

def update_team(db: Session, user: User, team_id: int, data: TeamUpdate) -> dict:
    if not can_manage_teams(user):
        raise_forbidden(ErrorMessages.ONLY_ADMINS_MANAGERS)

    updates = data.model_dump(exclude_unset=True)
    if updates.get("name", "") is None:
        del updates["name"]
    if not updates:
        raise_validation_error(ErrorMessages.NO_FIELDS_TO_UPDATE)

    team = _get_team(db, team_id)
    if updates.get("manager_id") is not None:
        _resolve_manager(db, updates["manager_id"])

    changes = {}
    for field, new_value in updates.items():
        old_value = getattr(team, field)
        if old_value != new_value:
            changes[field] = {"old": old_value, "new": new_value}
            setattr(team, field, new_value)

    db.commit()
    db.refresh(team)

    if changes:
        log_activity(
            db, user, ActivityAction.TEAM_UPDATED, EntityType.TEAM, team.id,
            f'Updated team "{team.name}"',
            {"team_name": team.name, "changes": changes},
        )
    return team_to_dict(team, _member_count(db, team.id))

def delete_team(db: Session, user: User, team_id: int):
    """
    Deletes a team. Its tasks are kept and detached from it.
    """
    if not is_admin(user):
        raise_forbidden(ErrorMessages.ONLY_ADMINS)

    team = _get_team(db, team_id)
    team_name = team.name

    db.query(Task).filter(Task.team_id == team_id).update({Task.team_id: None}, synchronize_session=False)
    db.query(TeamMember).filter(TeamMember.team_id == team_id).delete(synchronize_session=False)
    db.delete(team)
    db.commit()

    log_activity(
        db, user, ActivityAction.TEAM_DELETED, EntityType.TEAM, team_id,
        f'Deleted team "{team_name}"',
        {"team_name": team_name},
    )


# --------------------------------------------------
# MEMBERS
# --------------------------------------------------

def _get_managed_team(db: Session, user: User, team_id: int) -> Team:
    team = _get_team(db, team_id)
    if not can_manage_team_members(user, team):
        raise_forbidden(ErrorMessages.ACCESS_DENIED)
    return team

def add_member(db: Session, user: User, team_id: int, member_id: int) -> bool:
    """
    Adds a user to a team. Re-adding an existing member is a no-op.

    Returns:
        bool: True if a new membership was created
    """
    team = _get_managed_team(db, user, team_id)
    member = get_object_or_404(db, User, member_id, ErrorMessages.USER_NOT_FOUND, ErrorCode.USER_NOT_FOUND)

    existing = db.query(TeamMember).filter(
        TeamMember.team_id == team_id,
        TeamMember.user_id == member_id,
    ).first()
    if existing:
        return False

    db.add(TeamMember(team_id=team_id, user_id=member_id))
    db.commit()

    log_activity(
        db, user, ActivityAction.TEAM_MEMBER_ADDED, EntityType.TEAM, team_id,
        f'Added {member.name} to team "{team.name}"',
        {"team_name": team.name, "user_id": member_id, "user_name": member.name},
    )
    return True

def remove_member(db: Session, user: User, team_id: int, member_id: int):
    team = _get_managed_team(db, user, team_id)

    link: Optional[TeamMember] = db.query(TeamMember).filter(
        TeamMember.team_id == team_id,
        TeamMember.user_id == member_id,
    ).first()
    if not link:
        raise_member_not_found()

    member_name = link.user.name
    db.delete(link)
    db.commit()

    log_activity(
        db, user, ActivityAction.TEAM_MEMBER_REMOVED, EntityType.TEAM, team_id,
        f'Removed {member_name} from team "{team.name}"',
        {"team_name": team.name, "user_id": member_id, "user_name": member_name},
    )
