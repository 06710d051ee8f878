"""Store location models."""
import uuid
from datetime import datetime

from sqlalchemy import Column, Float, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from location_api.database import Base

MANAGER_ROLES = ("store_manager", "district_manager")


class District(Base):
    """Operating district grouping several stores."""

    __tablename__ = "districts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    district_number = Column(String(20), unique=True, nullable=False, index=True)
    district_name = Column(String(100), nullable=False)
    created_at = Column(String(26), default=lambda: datetime.utcnow().isoformat())
    updated_at = Column(String(26), default=lambda: datetime.utcnow().isoformat(), onupdate=lambda: datetime.utcnow().isoformat())

    locations = relationship("Location", back_populates="district")


class Manager(Base):
    """Store or district manager."""

    __tablename__ = "managers"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), index=True)
    phone_number = Column(String(30))
    role = Column(String(30), nullable=False)  # store_manager | district_manager
    created_at = Column(String(26), default=lambda: datetime.utcnow().isoformat())
    updated_at = Column(String(26), default=lambda: datetime.utcnow().isoformat(), onupdate=lambda: datetime.utcnow().isoformat())


class Location(Base):
    """A single store."""

    __tablename__ = "locations"
    __table_args__ = (
        Index("ix_locations_active", "is_active"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    store_number = Column(String(20), unique=True, nullable=False, index=True)
    store_name = Column(String(255), nullable=False)
    address = Column(String(255), nullable=False)
    city = Column(String(100), nullable=False)
    state = Column(String(50), nullable=False)
    zip_code = Column(String(20), nullable=False)
    phone_number = Column(String(30))
    latitude = Column(Float)
    longitude = Column(Float)
    google_place_id = Column(String(255))
    district_id = Column(String(36), ForeignKey("districts.id"))
    store_manager_id = Column(String(36), ForeignKey("managers.id"))
    district_manager_id = Column(String(36), ForeignKey("managers.id"))
    is_active = Column(Integer, default=1)  # SQLite boolean
    created_at = Column(String(26), default=lambda: datetime.utcnow().isoformat())
    updated_at = Column(String(26), default=lambda: datetime.utcnow().isoformat(), onupdate=lambda: datetime.utcnow().isoformat())

    # Relationships
    district = relationship("District", back_populates="locations")
    store_manager = relationship("Manager", foreign_keys=[store_manager_id])
    district_manager = relationship("Manager", foreign_keys=[district_manager_id])
    hours = relationship(
        "StoreHours",
        back_populates="location",
        cascade="all, delete-orphan",
        order_by="StoreHours.day_of_week",
    )


class StoreHours(Base):
    """Opening hours for one day of the week."""

    __tablename__ = "store_hours"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    location_id = Column(String(36), ForeignKey("locations.id", ondelete="CASCADE"), nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)  # 0 = Sunday
    open_time = Column(String(5))  # HH:MM, 24-hour
    close_time = Column(String(5))  # HH:MM, 24-hour
    is_closed = Column(Integer, default=0)  # SQLite boolean
    created_at = Column(String(26), default=lambda: datetime.utcnow().isoformat())
    updated_at = Column(String(26), default=lambda: datetime.utcnow().isoformat(), onupdate=lambda: datetime.utcnow().isoformat())

    location = relationship("Location", back_populates="hours")
