from enum import Enum

class UserRole(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"

    @property
    def requires_secret(self):
        return self in (UserRole.ADMIN, UserRole.MANAGER)

class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

class ActivityAction(str, Enum):
    TASK_CREATED = "task_created"
    TASK_UPDATED = "task_updated"
    TASK_STATUS_UPDATED = "task_status_updated"
    TASK_DELETED = "task_deleted"
    TEAM_CREATED = "team_created"
    TEAM_UPDATED = "team_updated"
    TEAM_DELETED = "team_deleted"
    TEAM_MEMBER_ADDED = "team_member_added"
    TEAM_MEMBER_REMOVED = "team_member_removed"

class EntityType(str, Enum):
    TASK = "task"
    TEAM = "team"

class TokenType(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"

class ErrorCode(str, Enum):
    # Generic
    BAD_REQUEST = "BAD_REQUEST"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    DEPENDENCY_ERROR = "DEPENDENCY_ERROR"

    # Auth / User
    USER_NOT_FOUND = "USER_NOT_FOUND"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    EMAIL_NOT_VERIFIED = "EMAIL_NOT_VERIFIED"
    INVALID_SECRET = "INVALID_SECRET"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    ALREADY_VERIFIED = "ALREADY_VERIFIED"
    INVALID_OTP = "INVALID_OTP"
    OTP_EXPIRED = "OTP_EXPIRED"
    INVALID_GOOGLE_TOKEN = "INVALID_GOOGLE_TOKEN"
    INVALID_OR_EXPIRED_TOKEN = "INVALID_OR_EXPIRED_TOKEN"

    # Domain
    TEAM_NOT_FOUND = "TEAM_NOT_FOUND"
    TASK_NOT_FOUND = "TASK_NOT_FOUND"
    MEMBER_NOT_FOUND = "MEMBER_NOT_FOUND"

    # Business rules
    ASSIGNEE_NOT_IN_TEAM = "ASSIGNEE_NOT_IN_TEAM"
