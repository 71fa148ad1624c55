from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.auth.dependencies import require_roles
from app.constants import ADMIN, MANAGER
from app.database.session import get_db
from app.models import User
from app.utils import report_service
from app.utils.deps import ReportQueryParams

router = APIRouter(prefix="/reports", tags=["Reports"])

@router.get("")
def get_reports(
    params: ReportQueryParams = Depends(),
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(ADMIN, MANAGER))
):
    """
    Retrieves dashboard aggregates scoped to the caller's role.
    Optional team/task/user/date filters narrow every aggregate.
    """
    return {"reports": report_service.build_reports(db, user, params.filters)}
