from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional, List

from app.enums import TaskStatus

def _strip_title(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("Title is required")
    return value

class TaskCreate(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    # Legacy single assignee; assigned_user_ids wins when both are given
    assigned_to: Optional[int] = None
    assigned_user_ids: Optional[List[int]] = None
    team_id: Optional[int] = None
    due_date: Optional[datetime] = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, value: Optional[str]) -> Optional[str]:
        return _strip_title(value)

class TaskUpdate(BaseModel):
    """
    Partial update. Only fields present in the request body are applied,
    so an explicit null clears a value while an absent field keeps it.
    """
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    assigned_to: Optional[int] = None
    assigned_user_ids: Optional[List[int]] = None
    team_id: Optional[int] = None
    due_date: Optional[datetime] = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, value: Optional[str]) -> Optional[str]:
        return _strip_title(value)

class TaskStatusUpdate(BaseModel):
    status: TaskStatus
