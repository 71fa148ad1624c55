from datetime import date
from typing import Optional

from fastapi import Depends, Query
from sqlalchemy.orm import Session

from app.auth.dependencies import get_current_user
from app.auth.scopes import ScopeFilters
from app.constants import ACTIVITY_LOG_DEFAULT_LIMIT, ACTIVITY_LOG_MAX_LIMIT, ErrorMessages
from app.database.session import get_db
from app.enums import ActivityAction, EntityType
from app.exceptions import raise_validation_error
from app.models import User

class APIContext:
    def __init__(
        self,
        db: Session = Depends(get_db),
        user: User = Depends(get_current_user)
    ):
        self.db = db
        self.user = user

class ReportQueryParams:
    """
    Optional report filters shared by /reports and /activity-logs.
    """
    def __init__(
        self,
        team_id: Optional[int] = None,
        task_id: Optional[int] = None,
        user_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ):
        if start_date and end_date and start_date > end_date:
            raise_validation_error(ErrorMessages.INVALID_DATE_RANGE)

        self.filters = ScopeFilters(
            team_id=team_id,
            task_id=task_id,
            user_id=user_id,
            start_date=start_date,
            end_date=end_date,
        )

class ActivityLogParams:
    def __init__(
        self,
        entity_type: Optional[EntityType] = None,
        entity_id: Optional[int] = None,
        action_type: Optional[ActivityAction] = None,
        limit: int = Query(ACTIVITY_LOG_DEFAULT_LIMIT, ge=1, le=ACTIVITY_LOG_MAX_LIMIT),
        offset: int = Query(0, ge=0),
    ):
        self.entity_type = entity_type.value if entity_type else None
        self.entity_id = entity_id
        self.action_type = action_type.value if action_type else None
        self.limit = limit
        self.offset = offset
