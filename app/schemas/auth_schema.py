from pydantic import BaseModel, EmailStr, Field, AliasChoices, field_validator
from typing import Optional

from app.constants import MIN_PASSWORD_LENGTH
from app.enums import UserRole

class _EmailModel(BaseModel):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()

class LoginRequest(_EmailModel):
    password: str = Field(min_length=1)

class SignupRequest(_EmailModel):
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)
    name: str = Field(min_length=1)
    role: UserRole = UserRole.EMPLOYEE
    secret_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("secret_key", "secretKey"),
    )

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        return value

class OtpVerifyRequest(_EmailModel):
    otp: str = Field(pattern=r"^[0-9]{6}$")

class SendOtpRequest(_EmailModel):
    pass

class GoogleAuthRequest(BaseModel):
    id_token: str = Field(min_length=1, validation_alias=AliasChoices("id_token", "idToken"))

class RefreshRequest(BaseModel):
    refresh_token: str = Field(min_length=1, validation_alias=AliasChoices("refresh_token", "refreshToken"))

class AuthUser(BaseModel):
    id: int
    email: str
    name: str
    role: str

    class Config:
        from_attributes = True

class TokenResponse(BaseModel):
    token: str
    refresh_token: str
    user: Optional[AuthUser] = None
    message: Optional[str] = None

class OtpSentResponse(BaseModel):
    message: str
    requires_otp: bool = True
    email: Optional[str] = None
