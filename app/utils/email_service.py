from aiosmtplib import SMTPException
from fastapi_mail import FastMail, MessageSchema, MessageType
from fastapi_mail.errors import ConnectionErrors

from app.config.settings import Settings
from app.utils.config_mail import build_mail_config
from app.utils.logger import get_logger

logger = get_logger(__name__)

OTP_SUBJECT = "Your OTP for Email Verification"

OTP_TEMPLATE = """
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; background-color: #f5f5f5;">
  <div style="background-color: #ffffff; padding: 30px; border-radius: 10px;">
    <h2 style="color: #1976d2; margin-top: 0;">Email Verification</h2>
    <p style="color: #333; font-size: 16px;">Your OTP for email verification is:</p>
    <div style="background-color: #e3f2fd; padding: 20px; border-radius: 5px; text-align: center; margin: 20px 0;">
      <h1 style="color: #1976d2; margin: 0; font-size: 32px; letter-spacing: 5px;">{otp}</h1>
    </div>
    <p style="color: #666; font-size: 14px;">This OTP will expire in {minutes} minutes.</p>
    <p style="color: #666; font-size: 14px;">If you didn't request this OTP, please ignore this email.</p>
  </div>
</div>
"""


class EmailDeliveryError(Exception):
    pass


class Mailer:
    """
    Sends transactional email through FastAPI-Mail.
    """

    def __init__(self, settings: Settings):
        self.otp_expire_minutes = settings.OTP_EXPIRE_MINUTES
        self.client = FastMail(build_mail_config(settings))

    async def send_otp(self, email: str, otp: str):
        message = MessageSchema(
            subject=OTP_SUBJECT,
            recipients=[email],
            body=OTP_TEMPLATE.format(otp=otp, minutes=self.otp_expire_minutes),
            subtype=MessageType.html,
        )
        try:
            await self.client.send_message(message)
        except (ConnectionErrors, SMTPException) as e:
            logger.error(f"Error sending OTP email to {email}: {e}")
            raise EmailDeliveryError("Failed to send OTP email") from e

        logger.info(f"OTP email sent to {email}")
