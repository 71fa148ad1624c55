from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.auth.auth_utils import hash_password
from app.auth.permissions import can_view_user
from app.constants import ErrorMessages
from app.enums import ErrorCode
from app.exceptions import (
    raise_already_exists,
    raise_bad_request,
    raise_forbidden,
    raise_validation_error,
)
from app.models import ActivityLog, Task, TaskAssignee, Team, TeamMember, User
from app.schemas import UserCreate, UserUpdate
from app.utils.common import get_object_or_404
from app.utils.logger import get_logger

logger = get_logger(__name__)


def list_users(db: Session) -> List[User]:
    return db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()

def create_user(db: Session, data: UserCreate) -> User:
    """
    Admin-created accounts skip OTP verification.
    """
    if db.query(User).filter(User.email == data.email).first():
        raise_already_exists()

    user = User(
        email=data.email,
        password_hash=hash_password(data.password),
        name=data.name.strip(),
        role=data.role.value,
        email_verified=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info(f"User {user.email} created with role {user.role}")
    return user

def get_user(db: Session, current_user: User, user_id: int) -> User:
    if not can_view_user(current_user, user_id):
        raise_forbidden(ErrorMessages.ACCESS_DENIED)
    return get_object_or_404(db, User, user_id, ErrorMessages.USER_NOT_FOUND, ErrorCode.USER_NOT_FOUND)

def update_user(db: Session, current_user: User, user_id: int, data: UserUpdate) -> User:
    if not can_view_user(current_user, user_id):
        raise_forbidden(ErrorMessages.ACCESS_DENIED)

    updates = data.model_dump(exclude_unset=True, exclude_none=True)
    if "role" in updates and not current_user.is_admin:
        raise_forbidden(ErrorMessages.ONLY_ADMIN_ROLE_CHANGE)
    if not updates:
        raise_validation_error(ErrorMessages.NO_FIELDS_TO_UPDATE)

    user = get_object_or_404(db, User, user_id, ErrorMessages.USER_NOT_FOUND, ErrorCode.USER_NOT_FOUND)
    if "name" in updates:
        user.name = updates["name"].strip()
    if "role" in updates:
        user.role = updates["role"].value

    db.commit()
    db.refresh(user)
    return user


# --------------------------------------------------
# DELETION
# --------------------------------------------------

def _reassign_primary_assignee(db: Session, user_id: int):
    """
    Tasks whose primary assignee is leaving fall back to the next
    remaining assignee in insertion order, or to nobody.
    """
    tasks = db.query(Task).filter(Task.assigned_to == user_id).all()
    for task in tasks:
        next_link = (
            db.query(TaskAssignee)
            .filter(TaskAssignee.task_id == task.id, TaskAssignee.user_id != user_id)
            .order_by(TaskAssignee.id)
            .first()
        )
        task.assigned_to = next_link.user_id if next_link else None
    db.flush()

def _remove_links(db: Session, user_id: int):
    db.query(TeamMember).filter(TeamMember.user_id == user_id).delete(synchronize_session=False)
    db.query(TaskAssignee).filter(TaskAssignee.user_id == user_id).delete(synchronize_session=False)

def _clear_references(db: Session, user_id: int):
    db.query(Team).filter(Team.manager_id == user_id).update(
        {Team.manager_id: None}, synchronize_session=False
    )
    db.query(Task).filter(Task.created_by == user_id).update(
        {Task.created_by: None}, synchronize_session=False
    )
    db.query(ActivityLog).filter(ActivityLog.user_id == user_id).update(
        {ActivityLog.user_id: None}, synchronize_session=False
    )

def delete_user(db: Session, current_user: User, user_id: int):
    """
    Removes a user and every reference to them in one transaction.
    Any failure rolls the whole deletion back.
    """
    if user_id == current_user.id:
        raise_bad_request(ErrorMessages.CANNOT_DELETE_SELF)

    user = get_object_or_404(db, User, user_id, ErrorMessages.USER_NOT_FOUND, ErrorCode.USER_NOT_FOUND)
    email = user.email

    try:
        _reassign_primary_assignee(db, user_id)
        _remove_links(db, user_id)
        _clear_references(db, user_id)
        db.delete(user)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Deleting user {user_id} failed, changes rolled back")
        raise

    logger.info(f"User {email} deleted by {current_user.email}")
