from app.enums import UserRole, TaskStatus

# Auth Constants
OTP_LENGTH = 6
MIN_PASSWORD_LENGTH = 6
BCRYPT_MAX_BYTES = 72

# Roles
ADMIN = UserRole.ADMIN.value
MANAGER = UserRole.MANAGER.value
EMPLOYEE = UserRole.EMPLOYEE.value

TEAM_MANAGER_ROLES = [ADMIN, MANAGER]

# Reports
REPORT_WINDOW_DAYS = 30
TOP_EMPLOYEES_LIMIT = 10

STATUS_ORDER = [
    TaskStatus.PENDING.value,
    TaskStatus.IN_PROGRESS.value,
    TaskStatus.COMPLETED.value,
    TaskStatus.CANCELLED.value,
]

STATUS_COLORS = {
    TaskStatus.PENDING.value: "#ff9800",
    TaskStatus.IN_PROGRESS.value: "#2196f3",
    TaskStatus.COMPLETED.value: "#4caf50",
    TaskStatus.CANCELLED.value: "#f44336",
}

ACTION_COLORS = {
    "task_created": "#1976d2",
    "task_updated": "#7b1fa2",
    "task_status_updated": "#388e3c",
    "task_deleted": "#d32f2f",
    "team_created": "#f57c00",
    "team_updated": "#0097a7",
    "team_deleted": "#5d4037",
    "team_member_added": "#689f38",
    "team_member_removed": "#c2185b",
}
DEFAULT_ACTION_COLOR = "#607d8b"

# Activity log listing
ACTIVITY_LOG_DEFAULT_LIMIT = 100
ACTIVITY_LOG_MAX_LIMIT = 500

class ErrorMessages:
    TEAM_NOT_FOUND = "Team not found"
    TASK_NOT_FOUND = "Task not found"
    USER_NOT_FOUND = "User not found"
    MANAGER_NOT_FOUND = "Manager not found"
    MEMBER_NOT_FOUND = "Member not found in team"

    # Auth
    INVALID_CREDENTIALS = "Invalid credentials"
    GOOGLE_ONLY_ACCOUNT = "Please use Google Sign-In for this account"
    EMAIL_NOT_VERIFIED = "Please verify your email first"
    EMAIL_EXISTS = "User with this email already exists"
    ALREADY_VERIFIED = "Email already verified. Please login instead."
    INVALID_OTP = "Invalid OTP"
    OTP_EXPIRED = "OTP has expired. Please request a new one."
    INVALID_GOOGLE_TOKEN = "Invalid Google token. Please try signing in again."
    GOOGLE_NOT_CONFIGURED = "Google Sign-In is not configured"
    GOOGLE_UNAVAILABLE = "Could not reach Google to verify the sign-in. Please try again."
    INVALID_REFRESH_TOKEN = "Invalid or expired refresh token"
    INVALID_TOKEN = "Invalid or expired token"
    OTP_SEND_FAILED = "Failed to send OTP email. Please try again."
    ADMIN_SECRET_REQUIRED = "Admin secret key is required"
    MANAGER_SECRET_REQUIRED = "Manager secret key is required"
    INVALID_ADMIN_SECRET = "Invalid admin secret key"
    INVALID_MANAGER_SECRET = "Invalid manager secret key"

    # Permissions
    ACCESS_DENIED = "Access denied"
    ONLY_ADMINS = "Only admins can perform this action"
    ONLY_ADMINS_MANAGERS = "Only admins or managers can perform this action"
    ONLY_TEAM_MANAGER = "Only the team's manager can perform this action"
    ONLY_ASSIGNEE = "Access denied. You can only update tasks assigned to you."
    ONLY_ADMIN_ROLE_CHANGE = "Only admin can change roles"
    CANNOT_DELETE_SELF = "You cannot delete your own account"

    # Validation
    NO_FIELDS_TO_UPDATE = "No valid fields to update"
    INVALID_MANAGER_ROLE = "Manager must be an admin or manager role"
    ASSIGNEE_NOT_IN_TEAM = "All assigned users must be members of the selected team"
    INVALID_DATE_RANGE = "start_date must not be after end_date"

    # Server
    SERVER_ERROR = "Server error"

class SuccessMessages:
    OTP_SENT = "OTP sent to your email"
    SIGNUP_OTP_SENT = "OTP sent to your email. Please verify to complete signup."
    ACCOUNT_CREATED = "Account created successfully"
    LOGIN_SUCCESSFUL = "Login successful"
    VERIFICATION_SUCCESSFUL = "Verification successful"
    TEAM_DELETED = "Team deleted successfully"
    TASK_DELETED = "Task deleted successfully"
    USER_DELETED = "User and all associated data deleted successfully"
    MEMBER_ADDED = "Member added to team successfully"
    MEMBER_REMOVED = "Member removed from team successfully"
