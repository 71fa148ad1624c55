from sqlalchemy import Column, Integer, String, Text, ForeignKey, DateTime, JSON, Index
from sqlalchemy.orm import relationship

from app.database.base import Base
from app.utils.common import utc_now

class ActivityLog(Base):
    """
    Append-only record of a notable mutation.
    Never updated or deleted by the application.
    """
    __tablename__ = "activity_logs"
    __table_args__ = (Index("idx_activity_logs_entity", "entity_type", "entity_id"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    action_type = Column(String(100), nullable=False, index=True)
    entity_type = Column(String(50), nullable=False)
    entity_id = Column(Integer, nullable=True)
    description = Column(Text, nullable=False)
    # "metadata" is reserved on declarative classes
    event_metadata = Column("metadata", JSON, nullable=True)

    created_at = Column(DateTime, default=utc_now, index=True)

    user = relationship("User")
