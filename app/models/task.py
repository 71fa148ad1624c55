from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from app.database.base import Base
from app.enums import TaskStatus
from app.utils.common import utc_now

class TaskAssignee(Base):
    """
    Authoritative multi-assignee relation. Insertion order (id) defines
    which assignee is mirrored into Task.assigned_to.
    """
    __tablename__ = "task_assignees"
    __table_args__ = (UniqueConstraint("task_id", "user_id", name="uq_task_assignees_task_user"),)

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    assigned_at = Column(DateTime, default=utc_now)

    task = relationship("Task", back_populates="assignee_links")
    user = relationship("User")

class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=TaskStatus.PENDING.value, index=True)

    # Legacy single assignee, mirrors the first TaskAssignee row
    assigned_to = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="SET NULL"), nullable=True, index=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    due_date = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utc_now, index=True)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    # Relationships
    assignee = relationship("User", foreign_keys=[assigned_to])
    creator = relationship("User", foreign_keys=[created_by])
    team = relationship("Team", back_populates="tasks")
    assignee_links = relationship(
        "TaskAssignee",
        back_populates="task",
        order_by="TaskAssignee.id",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def assignees(self):
        return [link.user for link in self.assignee_links]

    @property
    def assignee_ids(self):
        return [link.user_id for link in self.assignee_links]
