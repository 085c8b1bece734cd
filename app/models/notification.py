from sqlalchemy import Column, String, Integer, BigInteger, Boolean, ForeignKey

from app.db.session import Base
from app.db.base_model import BaseModel


class Notification(Base, BaseModel):
    """In-app notification produced by a ride lifecycle event."""
    __tablename__ = "notifications"

    user_id = Column(Integer, ForeignKey("taxiTap_users.id"), nullable=False, index=True)
    type = Column(String, nullable=False)  # e.g. 'ride_accepted', 'payment_received'
    title = Column(String, nullable=False)
    message = Column(String, nullable=False)
    priority = Column(String, nullable=False, default="medium")  # low | medium | high | urgent
    ride_id = Column(String, nullable=True)
    is_read = Column(Boolean, nullable=False, default=False, index=True)
    sent_at = Column(BigInteger, nullable=False)
    read_at = Column(BigInteger, nullable=True)

    def __repr__(self):
        return f"<Notification {self.id} {self.type} -> {self.user_id}>"
