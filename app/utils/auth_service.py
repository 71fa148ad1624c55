import hmac
from datetime import timedelta

from sqlalchemy.orm import Session

from app.auth.auth_utils import (
    create_access_token,
    create_refresh_token,
    decode_token,
    generate_otp,
    hash_password,
    otp_matches,
    verify_password,
)
from app.auth.google import GoogleTokenError, GoogleTokenVerifier, GoogleUnavailableError
from app.config.settings import Settings
from app.constants import ErrorMessages, SuccessMessages
from app.enums import TokenType, UserRole
from app.exceptions import (
    raise_already_exists,
    raise_already_verified,
    raise_dependency_error,
    raise_email_not_verified,
    raise_invalid_credentials,
    raise_invalid_google_token,
    raise_invalid_or_expired_token,
    raise_invalid_otp,
    raise_invalid_secret,
    raise_otp_expired,
    raise_user_not_found,
    raise_validation_error,
)
from app.models import User
from app.schemas import (
    AuthUser,
    GoogleAuthRequest,
    LoginRequest,
    OtpSentResponse,
    OtpVerifyRequest,
    RefreshRequest,
    SendOtpRequest,
    SignupRequest,
    TokenResponse,
)
from app.utils.common import utc_now
from app.utils.email_service import EmailDeliveryError
from app.utils.logger import get_logger

logger = get_logger(__name__)


# --------------------------------------------------
# HELPERS
# --------------------------------------------------

def _find_user(db: Session, email: str):
    return db.query(User).filter(User.email == email).first()

def _issue_tokens(user: User, settings: Settings, message: str) -> TokenResponse:
    return TokenResponse(
        token=create_access_token(user.id, settings),
        refresh_token=create_refresh_token(user.id, settings),
        user=AuthUser.model_validate(user),
        message=message,
    )

def _assign_new_otp(user: User, settings: Settings) -> str:
    otp = generate_otp()
    user.set_otp(otp, utc_now() + timedelta(minutes=settings.OTP_EXPIRE_MINUTES))
    return otp

async def _deliver_otp(mailer, email: str, otp: str):
    try:
        await mailer.send_otp(email, otp)
    except EmailDeliveryError:
        raise_dependency_error(ErrorMessages.OTP_SEND_FAILED)

def _consume_otp(user: User, otp: str):
    """
    Checks a submitted OTP and marks the email verified.
    A wrong code is reported before an expired one.
    """
    if not otp_matches(user.otp, otp):
        raise_invalid_otp()
    if user.otp_expires_at is None or user.otp_expires_at < utc_now():
        raise_otp_expired()

    user.email_verified = True
    user.clear_otp()

def _check_role_secret(settings: Settings, role: UserRole, secret_key):
    if not role.requires_secret:
        return

    if role == UserRole.ADMIN:
        expected = settings.ADMIN_SECRET_KEY
        missing_msg, invalid_msg = ErrorMessages.ADMIN_SECRET_REQUIRED, ErrorMessages.INVALID_ADMIN_SECRET
    else:
        expected = settings.MANAGER_SECRET_KEY
        missing_msg, invalid_msg = ErrorMessages.MANAGER_SECRET_REQUIRED, ErrorMessages.INVALID_MANAGER_SECRET

    if not secret_key:
        raise_validation_error(missing_msg)
    if not hmac.compare_digest(secret_key.encode("utf-8"), expected.encode("utf-8")):
        raise_invalid_secret(invalid_msg)


# --------------------------------------------------
# PASSWORD SIGNUP / LOGIN
# --------------------------------------------------

async def signup(db: Session, settings: Settings, mailer, data: SignupRequest) -> OtpSentResponse:
    """
    Registers (or re-registers) an unverified account and emails an OTP.
    The row is committed before the email goes out, so a delivery failure
    leaves it in place for a later send-otp.
    """
    _check_role_secret(settings, data.role, data.secret_key)

    user = _find_user(db, data.email)
    if user and user.email_verified:
        raise_already_exists()

    if user is None:
        user = User(email=data.email)
        db.add(user)

    user.name = data.name
    user.password_hash = hash_password(data.password)
    user.role = data.role.value
    user.email_verified = False
    otp = _assign_new_otp(user, settings)
    db.commit()

    logger.info(f"Signup pending verification for {data.email} ({data.role.value})")
    await _deliver_otp(mailer, data.email, otp)
    return OtpSentResponse(message=SuccessMessages.SIGNUP_OTP_SENT, email=data.email)

def verify_signup_otp(db: Session, settings: Settings, data: OtpVerifyRequest) -> TokenResponse:
    user = _find_user(db, data.email)
    if not user:
        raise_user_not_found()
    if user.email_verified:
        raise_already_verified()

    _consume_otp(user, data.otp)
    db.commit()
    return _issue_tokens(user, settings, SuccessMessages.ACCOUNT_CREATED)

def login(db: Session, settings: Settings, data: LoginRequest) -> TokenResponse:
    user = _find_user(db, data.email)
    if not user:
        raise_invalid_credentials()
    if not user.password_hash:
        raise_invalid_credentials(ErrorMessages.GOOGLE_ONLY_ACCOUNT)
    if not verify_password(data.password, user.password_hash):
        raise_invalid_credentials()
    if not user.email_verified:
        raise_email_not_verified()

    return _issue_tokens(user, settings, SuccessMessages.LOGIN_SUCCESSFUL)


# --------------------------------------------------
# GOOGLE SIGN-IN
# --------------------------------------------------

async def google_sign_in(
    db: Session,
    settings: Settings,
    mailer,
    verifier: GoogleTokenVerifier,
    data: GoogleAuthRequest,
):
    """
    Verified accounts get tokens straight away. Anyone else gets an
    unverified row (employee by default) and an OTP by email.

    Returns:
        TokenResponse or OtpSentResponse
    """
    if not verifier.configured:
        raise_dependency_error(ErrorMessages.GOOGLE_NOT_CONFIGURED)

    try:
        identity = verifier.verify(data.id_token)
    except GoogleTokenError:
        raise_invalid_google_token()
    except GoogleUnavailableError:
        raise_dependency_error(ErrorMessages.GOOGLE_UNAVAILABLE)

    user = _find_user(db, identity.email)

    if user and user.email_verified:
        if not user.google_id:
            user.google_id = identity.google_id
            db.commit()
        return _issue_tokens(user, settings, SuccessMessages.LOGIN_SUCCESSFUL)

    if user is None:
        user = User(
            email=identity.email,
            name=identity.name,
            role=UserRole.EMPLOYEE.value,
            google_id=identity.google_id,
            password_hash=None,
            email_verified=False,
        )
        db.add(user)
    elif not user.google_id:
        user.google_id = identity.google_id

    otp = _assign_new_otp(user, settings)
    db.commit()

    await _deliver_otp(mailer, identity.email, otp)
    return OtpSentResponse(message=SuccessMessages.OTP_SENT, email=identity.email)

def verify_google_otp(db: Session, settings: Settings, data: OtpVerifyRequest) -> TokenResponse:
    user = _find_user(db, data.email)
    if not user:
        raise_user_not_found()
    if user.email_verified:
        raise_already_verified()

    _consume_otp(user, data.otp)
    db.commit()
    return _issue_tokens(user, settings, SuccessMessages.VERIFICATION_SUCCESSFUL)


# --------------------------------------------------
# STANDALONE OTP
# --------------------------------------------------

async def send_otp(db: Session, settings: Settings, mailer, data: SendOtpRequest) -> OtpSentResponse:
    user = _find_user(db, data.email)
    if not user:
        raise_user_not_found()

    otp = _assign_new_otp(user, settings)
    db.commit()

    await _deliver_otp(mailer, data.email, otp)
    return OtpSentResponse(message=SuccessMessages.OTP_SENT, email=data.email)

def verify_otp(db: Session, settings: Settings, data: OtpVerifyRequest) -> TokenResponse:
    user = _find_user(db, data.email)
    if not user:
        raise_user_not_found()

    _consume_otp(user, data.otp)
    db.commit()
    return _issue_tokens(user, settings, SuccessMessages.VERIFICATION_SUCCESSFUL)


# --------------------------------------------------
# TOKENS
# --------------------------------------------------

def refresh(db: Session, settings: Settings, data: RefreshRequest) -> TokenResponse:
    """
    Rotates a valid refresh token into a fresh access/refresh pair.
    """
    user_id = decode_token(data.refresh_token, TokenType.REFRESH, settings)
    if user_id is None:
        raise_invalid_or_expired_token(ErrorMessages.INVALID_REFRESH_TOKEN)

    user = db.query(User).filter(User.id == user_id).first()
    if not user or not user.email_verified:
        raise_invalid_or_expired_token(ErrorMessages.INVALID_REFRESH_TOKEN)

    return _issue_tokens(user, settings, None)

def me(user: User) -> AuthUser:
    return AuthUser.model_validate(user)
