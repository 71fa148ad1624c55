from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.auth.dependencies import require_roles
from app.constants import ADMIN, MANAGER
from app.database.session import get_db
from app.models import User
from app.utils import activity_service
from app.utils.deps import ActivityLogParams, ReportQueryParams
from app.utils.serializers import log_to_dict

router = APIRouter(prefix="/activity-logs", tags=["Activity Logs"])

@router.get("")
def get_activity_logs(
    params: ReportQueryParams = Depends(),
    page: ActivityLogParams = Depends(),
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(ADMIN, MANAGER))
):
    """
    Retrieves activity entries visible to the caller, newest first.
    """
    logs, total = activity_service.list_activity_logs(
        db,
        user,
        params.filters,
        entity_type=page.entity_type,
        entity_id=page.entity_id,
        action_type=page.action_type,
        limit=page.limit,
        offset=page.offset,
    )
    return {"logs": [log_to_dict(log) for log in logs], "total": total}
