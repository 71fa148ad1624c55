from sqlalchemy import inspect
from sqlalchemy.orm import Session

from app.auth.auth_utils import hash_password
from app.config.settings import Settings
from app.database.base import Base
from app.database.session import Database
from app.enums import UserRole
from app.models import SCHEMA_VERSION, SchemaVersion, User
from app.utils.logger import get_logger

logger = get_logger(__name__)


class SchemaError(RuntimeError):
    pass


def ensure_schema(database: Database, settings: Settings):
    """
    Verifies at startup that every mapped table exists and that the stored
    schema version matches the code. Creates missing tables first when
    AUTO_CREATE_TABLES is on.

    Raises:
        SchemaError: If a table is missing or the versions differ
    """
    if settings.AUTO_CREATE_TABLES:
        Base.metadata.create_all(bind=database.engine)

    existing = set(inspect(database.engine).get_table_names())
    missing = sorted(set(Base.metadata.tables) - existing)
    if missing:
        raise SchemaError(f"Missing tables: {', '.join(missing)}")

    db: Session = database.session()
    try:
        versions = [row.version for row in db.query(SchemaVersion).all()]
        if not versions:
            db.add(SchemaVersion(version=SCHEMA_VERSION))
            db.commit()
            logger.info(f"Schema version {SCHEMA_VERSION} recorded")
        elif max(versions) != SCHEMA_VERSION:
            raise SchemaError(
                f"Database schema version {max(versions)} does not match expected {SCHEMA_VERSION}"
            )
        else:
            logger.info(f"Schema version {SCHEMA_VERSION} verified")
    finally:
        db.close()


def create_default_admin(database: Database, settings: Settings):
    """
    Checks for the configured ADMIN user and creates it if missing.
    Does nothing unless ADMIN_EMAIL and ADMIN_PASSWORD are both set.
    """
    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
        return

    email = settings.ADMIN_EMAIL.strip().lower()
    db: Session = database.session()
    try:
        admin = db.query(User).filter(User.email == email).first()
        if not admin:
            logger.info("Creating default ADMIN account...")
            admin_user = User(
                name=settings.ADMIN_NAME,
                email=email,
                password_hash=hash_password(settings.ADMIN_PASSWORD),
                role=UserRole.ADMIN.value,
                email_verified=True,
            )
            db.add(admin_user)
            db.commit()
            logger.info("Default ADMIN user created")
        else:
            logger.info("ADMIN user already exists")
    finally:
        db.close()
