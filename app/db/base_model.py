from datetime import datetime
from sqlalchemy import Column, DateTime, Integer
from sqlalchemy.orm import declared_attr

class BaseModel:
    """Columns shared by every TaxiTap table."""

    # Generate tablename automatically
    @declared_attr
    def __tablename__(cls):
        return cls.__name__.lower()

    # Primary key with autoincrement=True to match PostgreSQL SERIAL type
    id = Column(Integer, primary_key=True, autoincrement=True, index=True)

    # Row bookkeeping; domain timestamps are separate epoch-millisecond columns
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<{type(self).__name__} {self.id}>"
