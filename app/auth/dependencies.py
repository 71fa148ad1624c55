from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.auth.auth_utils import decode_token
from app.config.settings import Settings
from app.constants import ErrorMessages
from app.database.session import get_db
from app.enums import TokenType
from app.exceptions import raise_unauthorized, raise_forbidden
from app.models import User

security = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_mailer(request: Request):
    return request.app.state.mailer


def get_google_verifier(request: Request):
    return request.app.state.google_verifier


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Dependency to get the current authenticated user from JWT token.

    Args:
        credentials: Bearer token credentials
        db: Database session
        settings: Application settings holding the signing key

    Returns:
        User: The authenticated user instance

    Raises:
        BaseAPIException: If token is missing, invalid or user not found
    """
    if credentials is None:
        raise_unauthorized("Authentication required")

    user_id = decode_token(credentials.credentials, TokenType.ACCESS, settings)
    if user_id is None:
        raise_unauthorized(ErrorMessages.INVALID_TOKEN)

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise_unauthorized(ErrorMessages.INVALID_TOKEN)

    return user


def require_roles(*roles: str):
    """
    Dependency factory to require one of the given user roles.

    Args:
        roles: Allowed roles (e.g. 'admin', 'manager')

    Returns:
        function: Dependency function that checks user role
    """
    def checker(user: User = Depends(get_current_user)):
        if user.role not in roles:
            raise_forbidden("Insufficient permissions")
        return user
    return checker
