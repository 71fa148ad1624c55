from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.auth.dependencies import get_current_user, require_roles
from app.constants import ADMIN, MANAGER, SuccessMessages
from app.database.session import get_db
from app.models import User
from app.schemas import UserCreate, UserUpdate
from app.utils import user_service
from app.utils.serializers import user_to_dict

router = APIRouter(prefix="/users", tags=["Users"])

@router.get("")
def get_all_users(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(ADMIN, MANAGER))
):
    """
    Retrieves all users, newest first.
    Restricted to Admins and Managers.
    """
    return {"users": [user_to_dict(user) for user in user_service.list_users(db)]}

@router.post("", status_code=201)
def create_user(
    data: UserCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(ADMIN))
):
    """
    Creates an already-verified user.
    Restricted to Admins.
    """
    return {"user": user_to_dict(user_service.create_user(db, data))}

@router.get("/{user_id}")
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return {"user": user_to_dict(user_service.get_user(db, current_user, user_id))}

@router.put("/{user_id}")
def update_user(
    user_id: int,
    data: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Updates name and, for Admins only, role.
    """
    return {"user": user_to_dict(user_service.update_user(db, current_user, user_id, data))}

@router.delete("/{user_id}")
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(ADMIN))
):
    """
    Deletes a user together with their memberships and assignments.
    Restricted to Admins.
    """
    user_service.delete_user(db, current_user, user_id)
    return {"message": SuccessMessages.USER_DELETED}
