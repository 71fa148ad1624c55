from pydantic import BaseModel, BeforeValidator, Field, field_validator
from typing import Annotated, Optional, List

def _blank_to_none(value):
    if value == "" or value == "null":
        return None
    return value

def _strip_name(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("Team name is required")
    return value

# Forms send "" for an unselected manager
OptionalUserId = Annotated[Optional[int], BeforeValidator(_blank_to_none)]

class TeamCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    manager_id: OptionalUserId = None
    member_ids: List[int] = []

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: Optional[str]) -> Optional[str]:
        return _strip_name(value)

class TeamUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    manager_id: OptionalUserId = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: Optional[str]) -> Optional[str]:
        return _strip_name(value)

class TeamMemberAdd(BaseModel):
    user_id: int
