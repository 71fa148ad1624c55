from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, joinedload

from app.auth.fields import ACTIVITY_FIELDS
from app.auth.predicates import render
from app.auth.scopes import ScopeFilters, activity_scope
from app.constants import ACTIVITY_LOG_DEFAULT_LIMIT
from app.models import ActivityLog, User


def list_activity_logs(
    db: Session,
    user: User,
    filters: ScopeFilters,
    entity_type: Optional[str] = None,
    entity_id: Optional[int] = None,
    action_type: Optional[str] = None,
    limit: int = ACTIVITY_LOG_DEFAULT_LIMIT,
    offset: int = 0,
) -> Tuple[List[ActivityLog], int]:
    """
    Newest-first page of the activity rows visible to the caller.

    Returns:
        (logs, total): the requested page and the number of matching rows
    """
    scope = activity_scope(
        user.role, user.id, filters,
        entity_type=entity_type, entity_id=entity_id, action_type=action_type,
    )
    query = db.query(ActivityLog).filter(render(scope, ACTIVITY_FIELDS))
    total = query.count()

    logs = (
        query.options(joinedload(ActivityLog.user))
        .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        .limit(limit)
        .offset(offset)
        .all()
    )
    return logs, total
