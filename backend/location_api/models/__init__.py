"""SQLAlchemy models package."""
from location_api.models.user import Credential, User
from location_api.models.auth import AuthSession
from location_api.models.location import District, Location, Manager, StoreHours

__all__ = [
    "User",
    "Credential",
    "AuthSession",
    "District",
    "Manager",
    "Location",
    "StoreHours",
]
