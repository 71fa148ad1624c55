from dataclasses import dataclass
from typing import Optional

from google.auth.exceptions import GoogleAuthError, TransportError
from google.auth.transport import requests as grequests
from google.oauth2 import id_token

from app.utils.logger import get_logger

logger = get_logger(__name__)


class GoogleTokenError(Exception):
    pass


class GoogleUnavailableError(Exception):
    pass


@dataclass
class GoogleIdentity:
    google_id: str
    email: str
    name: str


class GoogleTokenVerifier:
    """
    Verifies Google ID tokens against the configured OAuth client id.
    """

    def __init__(self, client_id: Optional[str]):
        self.client_id = client_id

    @property
    def configured(self) -> bool:
        return bool(self.client_id)

    def verify(self, token: str) -> GoogleIdentity:
        try:
            idinfo = id_token.verify_oauth2_token(token, grequests.Request(), self.client_id)
        except TransportError as e:
            logger.error(f"Could not reach Google to verify token: {e}")
            raise GoogleUnavailableError(str(e)) from e
        except (ValueError, GoogleAuthError) as e:
            logger.warning(f"Google token verification failed: {e}")
            raise GoogleTokenError(str(e)) from e

        email = idinfo.get("email")
        if not email or not idinfo.get("sub"):
            raise GoogleTokenError("Token is missing email or subject")

        logger.info(f"Google token verified for user: {email}")
        return GoogleIdentity(
            google_id=idinfo["sub"],
            email=email.lower(),
            name=idinfo.get("name") or email.split("@")[0],
        )
