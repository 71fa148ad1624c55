from sqlalchemy import Column, Integer, DateTime

from app.database.base import Base
from app.utils.common import utc_now

# Bump together with any change to the mapped tables
SCHEMA_VERSION = 1

class SchemaVersion(Base):
    __tablename__ = "schema_version"

    version = Column(Integer, primary_key=True, autoincrement=False)
    applied_at = Column(DateTime, default=utc_now)
