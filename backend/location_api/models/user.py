"""User and credential models."""
import uuid
from datetime import datetime

from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from location_api.database import Base

PASSWORD_PROVIDER = "credential"


class User(Base):
    """Authenticatable identity."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255))
    email_verified = Column(Integer, default=0)  # SQLite boolean
    created_at = Column(String(26), default=lambda: datetime.utcnow().isoformat())
    updated_at = Column(String(26), default=lambda: datetime.utcnow().isoformat(), onupdate=lambda: datetime.utcnow().isoformat())

    # Relationships
    credentials = relationship("Credential", back_populates="user", cascade="all, delete-orphan")
    sessions = relationship("AuthSession", back_populates="user", cascade="all, delete-orphan")

    def password_credential(self) -> "Credential | None":
        """Return the password credential row, if the user has one."""
        for credential in self.credentials:
            if credential.provider_id == PASSWORD_PROVIDER:
                return credential
        return None


class Credential(Base):
    """Sign-in method attached to a user (password or external provider)."""

    __tablename__ = "credentials"
    __table_args__ = (
        UniqueConstraint("user_id", "provider_id", name="uq_credential_provider"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    provider_id = Column(String(50), nullable=False, default=PASSWORD_PROVIDER)
    password_digest = Column(String(255))  # Null for provider-only credentials
    created_at = Column(String(26), default=lambda: datetime.utcnow().isoformat())
    updated_at = Column(String(26), default=lambda: datetime.utcnow().isoformat(), onupdate=lambda: datetime.utcnow().isoformat())

    user = relationship("User", back_populates="credentials")
