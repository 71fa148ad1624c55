from datetime import datetime, timezone
from typing import Type, TypeVar, Any, Optional

from sqlalchemy.orm import Session

from app.enums import ErrorCode
from app.exceptions import raise_not_found

T = TypeVar("T")

def utc_now() -> datetime:
    """
    Naive UTC timestamp, the form every DateTime column stores.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)

def get_object_or_404(
    db: Session,
    model: Type[T],
    obj_id: Any,
    msg: str = "Object not found",
    error_code: ErrorCode = ErrorCode.NOT_FOUND,
) -> T:
    """
    Retrieves an object by ID or raises a 404 API error.
    """
    obj = db.query(model).filter(model.id == obj_id).first()
    if not obj:
        raise_not_found(msg, error_code)
    return obj

def dedupe_ids(ids) -> list[int]:
    """
    Drops repeated ids, keeping first-seen order.
    """
    seen = set()
    result = []
    for value in ids or []:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result

def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)

def json_value(value):
    """
    Makes a column value safe for a JSON metadata column.
    """
    if isinstance(value, datetime):
        return value.isoformat()
    return value
