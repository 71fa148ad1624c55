from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship

from app.database.base import Base
from app.enums import UserRole
from app.utils.common import utc_now

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    # Absent for Google-only accounts
    password_hash = Column("password", String(255), nullable=True)
    name = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.EMPLOYEE.value, index=True)
    google_id = Column(String(255), unique=True, nullable=True)
    email_verified = Column(Boolean, nullable=False, default=False)

    # One live OTP per user; value and expiry are always written together
    otp = Column(String(6), nullable=True)
    otp_expires_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    team_links = relationship("TeamMember", back_populates="user", passive_deletes=True)
    managed_teams = relationship("Team", back_populates="manager", passive_deletes=True)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    @property
    def is_manager(self) -> bool:
        return self.role == UserRole.MANAGER.value

    @property
    def is_employee(self) -> bool:
        return self.role == UserRole.EMPLOYEE.value

    def set_otp(self, otp: str, expires_at):
        self.otp = otp
        self.otp_expires_at = expires_at

    def clear_otp(self):
        self.otp = None
        self.otp_expires_at = None
