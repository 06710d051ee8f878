"""Authentication/session models."""
import uuid
from datetime import datetime

from sqlalchemy import Column, ForeignKey, Index, String
from sqlalchemy.orm import relationship

from location_api.database import Base


class AuthSession(Base):
    """Server-side record of an issued session token."""

    __tablename__ = "sessions"
    __table_args__ = (
        Index("ix_sessions_expires_at", "expires_at"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    token_hash = Column(String(64), unique=True, nullable=False, index=True)
    created_at = Column(String(26), default=lambda: datetime.utcnow().isoformat())
    updated_at = Column(String(26), default=lambda: datetime.utcnow().isoformat())
    expires_at = Column(String(26), nullable=False)
    user_agent = Column(String(255))
    ip_address = Column(String(45))

    user = relationship("User", back_populates="sessions")
