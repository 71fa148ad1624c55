from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional

from app.constants import MIN_PASSWORD_LENGTH
from app.enums import UserRole

class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)
    name: str = Field(min_length=1)
    role: UserRole

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()

class UserUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    role: Optional[UserRole] = None

