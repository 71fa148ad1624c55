from .auth_schema import (
    LoginRequest,
    SignupRequest,
    OtpVerifyRequest,
    SendOtpRequest,
    GoogleAuthRequest,
    RefreshRequest,
    AuthUser,
    TokenResponse,
    OtpSentResponse,
)
from .user_schema import UserCreate, UserUpdate
from .team_schema import TeamCreate, TeamUpdate, TeamMemberAdd
from .task_schema import TaskCreate, TaskUpdate, TaskStatusUpdate
