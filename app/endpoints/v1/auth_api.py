from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.auth.dependencies import get_current_user, get_google_verifier, get_mailer, get_settings
from app.auth.google import GoogleTokenVerifier
from app.config.settings import Settings
from app.database.session import get_db
from app.models import User
from app.schemas import (
    GoogleAuthRequest,
    LoginRequest,
    OtpSentResponse,
    OtpVerifyRequest,
    RefreshRequest,
    SendOtpRequest,
    SignupRequest,
    TokenResponse,
)
from app.utils import auth_service

router = APIRouter(prefix="/auth", tags=["Auth"])

@router.post("/signup", response_model=OtpSentResponse)
async def signup(
    data: SignupRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    mailer=Depends(get_mailer),
):
    """
    Registers an unverified account and emails a signup OTP.
    Admin and manager roles require the matching secret key.
    """
    return await auth_service.signup(db, settings, mailer, data)

@router.post("/signup-verify-otp", response_model=TokenResponse)
def signup_verify_otp(
    data: OtpVerifyRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return auth_service.verify_signup_otp(db, settings, data)

@router.post("/login", response_model=TokenResponse)
def login(
    data: LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return auth_service.login(db, settings, data)

@router.post("/google")
async def google_sign_in(
    data: GoogleAuthRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    mailer=Depends(get_mailer),
    verifier: GoogleTokenVerifier = Depends(get_google_verifier),
):
    """
    Signs in with a Google ID token.
    Returns tokens for verified accounts, otherwise sends an OTP.
    """
    result = await auth_service.google_sign_in(db, settings, mailer, verifier, data)
    return result.model_dump()

@router.post("/google-verify-otp", response_model=TokenResponse)
def google_verify_otp(
    data: OtpVerifyRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return auth_service.verify_google_otp(db, settings, data)

@router.post("/send-otp", response_model=OtpSentResponse)
async def send_otp(
    data: SendOtpRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    mailer=Depends(get_mailer),
):
    return await auth_service.send_otp(db, settings, mailer, data)

@router.post("/verify-otp", response_model=TokenResponse)
def verify_otp(
    data: OtpVerifyRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return auth_service.verify_otp(db, settings, data)

@router.post("/refresh", response_model=TokenResponse)
def refresh_token(
    data: RefreshRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Exchanges a refresh token for a new access/refresh pair.
    """
    return auth_service.refresh(db, settings, data)

@router.get("/me")
def get_me(current_user: User = Depends(get_current_user)):
    return {"user": auth_service.me(current_user)}
