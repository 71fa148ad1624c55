from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.enums import ActivityAction, EntityType
from app.models import ActivityLog, User
from app.utils.logger import get_logger

logger = get_logger(__name__)


def log_activity(
    db: Session,
    actor: Optional[User],
    action: ActivityAction,
    entity_type: EntityType,
    entity_id: Optional[int],
    description: str,
    metadata: Optional[dict[str, Any]] = None,
) -> Optional[ActivityLog]:
    """
    Appends an activity entry after the triggering change has been committed.

    Best effort: skipped without an identified actor, and a failed write is
    rolled back and logged without reaching the caller.
    """
    actor_id = getattr(actor, "id", None)
    if actor_id is None:
        return None

    entry = ActivityLog(
        user_id=actor_id,
        action_type=action.value,
        entity_type=entity_type.value,
        entity_id=entity_id,
        description=description,
        event_metadata=metadata or {},
    )
    try:
        db.add(entry)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Error logging activity {action.value} for {entity_type.value} {entity_id}")
        return None
    return entry
