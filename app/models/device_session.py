"""
SQLAlchemy model for per-device login sessions.
"""

from sqlalchemy import Column, String, Integer, BigInteger, Boolean, ForeignKey, Index, text

from app.db.session import Base
from app.db.base_model import BaseModel

ACTIVE_DRIVER_CLAUSE = text("is_active AND role = 'driver'")


class DeviceSession(Base, BaseModel):
    """
    One row per physical device. A user acting as driver may hold at most one
    active row; the partial unique index makes the database reject the second.
    """
    __tablename__ = "sessions"

    user_id = Column(Integer, ForeignKey("taxiTap_users.id"), nullable=False, index=True)
    device_id = Column(String, nullable=False, unique=True)
    device_name = Column(String, nullable=True)
    platform = Column(String, nullable=False, default="unknown")  # ios | android | web | unknown
    role = Column(String, nullable=False)  # role the user logged in as
    is_active = Column(Boolean, nullable=False, default=True)
    last_activity_at = Column(BigInteger, nullable=False)

    __table_args__ = (
        Index(
            "uq_sessions_active_driver",
            "user_id",
            unique=True,
            sqlite_where=ACTIVE_DRIVER_CLAUSE,
            postgresql_where=ACTIVE_DRIVER_CLAUSE,
        ),
        Index("ix_sessions_active_last_activity", "is_active", "last_activity_at"),
    )

    def __repr__(self):
        return f"<DeviceSession {self.device_id} user={self.user_id} active={self.is_active}>"
