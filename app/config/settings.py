from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    """
    Application configuration settings.
    Loads from environment variables or .env file.
    Constructed once by create_app() and passed down explicitly.
    """
    PROJECT_NAME: str = "Team Task Manager"
    PROJECT_VERSION: str = "1.0.0"
    PORT: int = 5000
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str = "sqlite:///./team_tasks.db"
    AUTO_CREATE_TABLES: bool = True

    SECRET_KEY: str
    REFRESH_SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    OTP_EXPIRE_MINUTES: int = 10

    # Role-gated signup secrets
    ADMIN_SECRET_KEY: str
    MANAGER_SECRET_KEY: str

    GOOGLE_CLIENT_ID: Optional[str] = None

    # Optional seeded admin. Using str instead of EmailStr to support .local domains in development
    ADMIN_EMAIL: Optional[str] = None
    ADMIN_PASSWORD: Optional[str] = None
    ADMIN_NAME: str = "Admin User"

    # Mail configurations
    MAIL_USERNAME: str = ""
    MAIL_PASSWORD: str = ""
    MAIL_FROM: str = "noreply@example.com"
    MAIL_FROM_NAME: str = "Team Task Management"
    MAIL_SERVER: str = "smtp.gmail.com"
    MAIL_PORT: int = 587
    MAIL_STARTTLS: bool = True
    MAIL_SSL_TLS: bool = False
    MAIL_SUPPRESS_SEND: bool = False

    ALLOWED_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )
