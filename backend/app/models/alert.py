"""
Alert database model.
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum, Text
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.models.enums import AlertType, AlertPriority, RelatedKind


class Alert(Base):
    """
    Alert shown on the admin dashboard.

    ``related_kind`` + ``related_id`` form a tagged reference; there is no
    foreign key because the target table depends on the kind. See
    ``backend.app.services.alerts.RELATED_MODELS`` for the resolution table.
    """
    __tablename__ = "alerts"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    type = Column(Enum(AlertType), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    priority = Column(Enum(AlertPriority), default=AlertPriority.MEDIUM, nullable=False, index=True)
    is_read = Column(Boolean, default=False, nullable=False, index=True)

    related_kind = Column(Enum(RelatedKind), nullable=False)
    related_id = Column(Integer, nullable=False)

    expires_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Alert(id={self.id}, type='{self.type.value}', priority='{self.priority.value}')>"
