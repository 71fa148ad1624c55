from fastapi import HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.constants import ErrorMessages
from app.enums import ErrorCode
from app.utils.logger import get_logger

logger = get_logger(__name__)


class BaseAPIException(HTTPException):
    """
    Base exception for all API errors.
    Enforces a consistent, frontend-friendly response structure.
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        error_code: ErrorCode,
        details: dict | None = None,
    ):
        super().__init__(status_code=status_code, detail=message)
        self.message = message
        self.error_code = error_code
        self.details = details


def _error_body(request: Request, message: str, error_code: ErrorCode, details: dict | None = None):
    return {
        "success": False,
        "message": message,
        "error_code": error_code,
        "path": request.url.path,
        "details": details,
    }


# --------------------------------------------------
# GLOBAL EXCEPTION HANDLERS
# --------------------------------------------------

async def base_api_exception_handler(request: Request, exc: BaseAPIException):
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, exc.message, exc.error_code, exc.details),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg"),
            "type": err.get("type"),
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=jsonable_encoder(
            _error_body(request, "Invalid request", ErrorCode.VALIDATION_ERROR, {"errors": errors})
        ),
    )


async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=_error_body(request, ErrorMessages.SERVER_ERROR, ErrorCode.DEPENDENCY_ERROR),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=_error_body(request, ErrorMessages.SERVER_ERROR, ErrorCode.INTERNAL_SERVER_ERROR),
    )


# --------------------------------------------------
# CENTRAL ERROR FACTORY (ONLY PLACE TO RAISE ERRORS)
# --------------------------------------------------

def raise_api_error(
    status_code: int,
    message: str,
    error_code: ErrorCode,
    details: dict | None = None,
):
    raise BaseAPIException(
        status_code=status_code,
        message=message,
        error_code=error_code,
        details=details,
    )


# --------------------------------------------------
# GENERIC HTTP HELPERS
# --------------------------------------------------

def raise_bad_request(message: str, error_code: ErrorCode = ErrorCode.BAD_REQUEST):
    raise_api_error(400, message, error_code)


def raise_validation_error(message: str, details: dict | None = None):
    raise_api_error(400, message, ErrorCode.VALIDATION_ERROR, details)


def raise_unauthorized(
    message: str = ErrorMessages.INVALID_TOKEN,
    error_code: ErrorCode = ErrorCode.UNAUTHORIZED,
):
    raise_api_error(401, message, error_code)


def raise_forbidden(
    message: str = ErrorMessages.ACCESS_DENIED,
    error_code: ErrorCode = ErrorCode.FORBIDDEN,
):
    raise_api_error(403, message, error_code)


def raise_not_found(
    message: str,
    error_code: ErrorCode = ErrorCode.NOT_FOUND,
):
    raise_api_error(404, message, error_code)


def raise_conflict(message: str):
    raise_api_error(409, message, ErrorCode.ALREADY_EXISTS)


def raise_dependency_error(message: str):
    raise_api_error(500, message, ErrorCode.DEPENDENCY_ERROR)


# --------------------------------------------------
# DOMAIN-SPECIFIC HELPERS
# --------------------------------------------------

def raise_user_not_found(message: str = ErrorMessages.USER_NOT_FOUND):
    raise_not_found(message, ErrorCode.USER_NOT_FOUND)


def raise_task_not_found():
    raise_not_found(
        ErrorMessages.TASK_NOT_FOUND,
        ErrorCode.TASK_NOT_FOUND,
    )


def raise_member_not_found():
    raise_not_found(
        ErrorMessages.MEMBER_NOT_FOUND,
        ErrorCode.MEMBER_NOT_FOUND,
    )


def raise_invalid_credentials(message: str = ErrorMessages.INVALID_CREDENTIALS):
    raise_unauthorized(message, ErrorCode.INVALID_CREDENTIALS)


def raise_email_not_verified():
    raise_unauthorized(ErrorMessages.EMAIL_NOT_VERIFIED, ErrorCode.EMAIL_NOT_VERIFIED)


def raise_invalid_or_expired_token(message: str = ErrorMessages.INVALID_TOKEN):
    raise_unauthorized(message, ErrorCode.INVALID_OR_EXPIRED_TOKEN)


def raise_invalid_google_token():
    raise_unauthorized(ErrorMessages.INVALID_GOOGLE_TOKEN, ErrorCode.INVALID_GOOGLE_TOKEN)


def raise_invalid_secret(message: str):
    raise_forbidden(message, ErrorCode.INVALID_SECRET)


def raise_already_exists(message: str = ErrorMessages.EMAIL_EXISTS):
    raise_conflict(message)


def raise_already_verified():
    raise_bad_request(ErrorMessages.ALREADY_VERIFIED, ErrorCode.ALREADY_VERIFIED)


def raise_invalid_otp():
    raise_bad_request(ErrorMessages.INVALID_OTP, ErrorCode.INVALID_OTP)


def raise_otp_expired():
    raise_bad_request(ErrorMessages.OTP_EXPIRED, ErrorCode.OTP_EXPIRED)


def raise_assignee_not_in_team(invalid_ids: list[int]):
    raise_api_error(
        400,
        ErrorMessages.ASSIGNEE_NOT_IN_TEAM,
        ErrorCode.ASSIGNEE_NOT_IN_TEAM,
        {"user_ids": invalid_ids},
    )
