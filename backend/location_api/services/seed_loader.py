"""Service to load seed location data from a YAML file into the database."""
import logging
from pathlib import Path

import yaml
from sqlalchemy.orm import Session

from location_api.models.location import MANAGER_ROLES, District, Location, Manager, StoreHours

logger = logging.getLogger(__name__)

_LOCATION_FIELDS = (
    "store_name",
    "address",
    "city",
    "state",
    "zip_code",
    "phone_number",
    "latitude",
    "longitude",
    "google_place_id",
)


def load_seed_file(db: Session, seed_path: Path) -> dict[str, int]:
    """Upsert districts, managers, locations and hours from a YAML file.

    Districts are keyed by district_number, managers by email and locations
    by store_number, so loading the same file twice changes nothing.
    Returns counts of the records processed.
    """
    if not seed_path.exists():
        logger.warning(f"Seed file not found: {seed_path}")
        return {"districts": 0, "managers": 0, "locations": 0}

    with open(seed_path, "r") as f:
        data = yaml.safe_load(f) or {}

    districts = {}
    for entry in data.get("districts", []):
        district = _upsert_district(db, entry)
        if district:
            districts[district.district_number] = district

    managers = {}
    for entry in data.get("managers", []):
        manager = _upsert_manager(db, entry)
        if manager:
            managers[manager.email] = manager

    db.flush()

    location_count = 0
    for entry in data.get("locations", []):
        if _upsert_location(db, entry, districts, managers):
            location_count += 1

    db.commit()
    counts = {"districts": len(districts), "managers": len(managers), "locations": location_count}
    logger.info(f"Loaded seed data: {counts}")
    return counts


def _upsert_district(db: Session, entry: dict) -> District | None:
    number = entry.get("district_number")
    if not number:
        logger.warning(f"District entry missing district_number: {entry}")
        return None
    number = str(number)

    district = db.query(District).filter(District.district_number == number).first()
    if not district:
        district = District(district_number=number)
        db.add(district)
    district.district_name = entry.get("district_name", number)
    return district


def _upsert_manager(db: Session, entry: dict) -> Manager | None:
    email = entry.get("email")
    role = entry.get("role")
    if not email or role not in MANAGER_ROLES:
        logger.warning(f"Manager entry needs an email and a valid role: {entry}")
        return None

    manager = db.query(Manager).filter(Manager.email == email).first()
    if not manager:
        manager = Manager(email=email)
        db.add(manager)
    manager.first_name = entry.get("first_name", "")
    manager.last_name = entry.get("last_name", "")
    manager.phone_number = entry.get("phone_number")
    manager.role = role
    return manager


def _upsert_location(
    db: Session,
    entry: dict,
    districts: dict[str, District],
    managers: dict[str, Manager],
) -> Location | None:
    number = entry.get("store_number")
    if not number:
        logger.warning(f"Location entry missing store_number: {entry}")
        return None
    number = str(number)

    location = db.query(Location).filter(Location.store_number == number).first()
    if not location:
        location = Location(store_number=number)
        db.add(location)

    for field in _LOCATION_FIELDS:
        if field in entry:
            value = entry[field]
            setattr(location, field, str(value) if field == "zip_code" else value)
    location.is_active = 0 if entry.get("is_active") is False else 1

    district = districts.get(str(entry.get("district", "")))
    location.district = district
    location.store_manager = managers.get(entry.get("store_manager"))
    location.district_manager = managers.get(entry.get("district_manager"))

    if "hours" in entry:
        location.hours = [
            StoreHours(
                day_of_week=hour["day_of_week"],
                open_time=hour.get("open_time"),
                close_time=hour.get("close_time"),
                is_closed=1 if hour.get("is_closed") else 0,
            )
            for hour in entry["hours"]
        ]
    return location
