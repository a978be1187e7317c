"""
SQLAlchemy model for User entity.

Represents a dashboard user with role-based access control.
"""
from sqlalchemy import Column, Integer, String, DateTime, CheckConstraint
from sqlalchemy.orm import relationship

from ..clock import utc_now
from ..database import Base

ROLE_ADMIN = "admin"
ROLE_USER = "user"
VALID_ROLES = (ROLE_ADMIN, ROLE_USER)


class User(Base):
    """User model for dashboard authentication and RBAC."""

    __tablename__ = "users"

    # Columns
    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(64), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=ROLE_USER)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    last_login_at = Column(DateTime(timezone=True), nullable=True)

    # Constraints
    __table_args__ = (
        CheckConstraint("role IN ('admin', 'user')", name="check_valid_role"),
    )

    # Relationships
    devices = relationship("Device", back_populates="owner", passive_deletes=True)

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def __repr__(self):
        return f"<User(id={self.id}, username={self.username}, role={self.role})>"
