from app.database.base import Base
from .user import User
from .team import Team, TeamMember
from .task import Task, TaskAssignee
from .activity_log import ActivityLog
from .common import SchemaVersion, SCHEMA_VERSION
