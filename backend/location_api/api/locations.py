"""Location API endpoints (session required)."""
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from location_api.api.deps import get_current_account, get_db
from location_api.models.location import District, Location, Manager, StoreHours
from location_api.schemas.location import (
    LocationCreate,
    LocationDetail,
    LocationDetailResponse,
    LocationListResponse,
    LocationResponse,
    LocationUpdate,
    MessageResponse,
    StoreHoursInput,
)

_REQUIRED_FIELDS = {"store_number", "store_name", "address", "city", "state", "zip_code", "is_active"}

router = APIRouter(
    prefix="/locations",
    tags=["locations"],
    dependencies=[Depends(get_current_account)],
)


def _get_location_or_404(db: Session, location_id: str) -> Location:
    location = db.query(Location).filter(Location.id == location_id).first()
    if not location:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Location not found",
        )
    return location


def _ensure_store_number_free(db: Session, store_number: str, exclude_id: str | None = None) -> None:
    query = db.query(Location).filter(Location.store_number == store_number)
    if exclude_id:
        query = query.filter(Location.id != exclude_id)
    if query.first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Store number already exists",
        )


def _ensure_references_exist(db: Session, data: dict) -> None:
    """Reject dangling district/manager references."""
    if data.get("district_id") and not db.get(District, data["district_id"]):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="District not found")
    for key in ("store_manager_id", "district_manager_id"):
        if data.get(key) and not db.get(Manager, data[key]):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Manager not found")


def _build_hours(hours: list[StoreHoursInput]) -> list[StoreHours]:
    return [
        StoreHours(
            day_of_week=hour.day_of_week,
            open_time=hour.open_time,
            close_time=hour.close_time,
            is_closed=1 if hour.is_closed else 0,
        )
        for hour in hours
    ]


@router.get("", response_model=LocationListResponse)
def list_locations(include_inactive: bool = True, db: Session = Depends(get_db)):
    """List locations, newest first."""
    query = db.query(Location)
    if not include_inactive:
        query = query.filter(Location.is_active == 1)
    locations = query.order_by(Location.created_at.desc()).all()

    return LocationListResponse(
        data=[LocationResponse.model_validate(location) for location in locations],
        count=len(locations),
    )


@router.get("/{location_id}", response_model=LocationDetailResponse)
def get_location(location_id: str, db: Session = Depends(get_db)):
    """Get a single location with its hours."""
    location = _get_location_or_404(db, location_id)
    return LocationDetailResponse(data=LocationDetail.model_validate(location))


@router.post("", response_model=LocationDetailResponse, status_code=status.HTTP_201_CREATED)
def create_location(location_data: LocationCreate, db: Session = Depends(get_db)):
    """Create a location, optionally with its weekly hours."""
    _ensure_store_number_free(db, location_data.store_number)

    fields = location_data.model_dump(exclude={"hours", "is_active"})
    _ensure_references_exist(db, fields)

    location = Location(**fields, is_active=1 if location_data.is_active else 0)
    if location_data.hours:
        location.hours = _build_hours(location_data.hours)

    db.add(location)
    db.commit()
    db.refresh(location)

    return LocationDetailResponse(
        data=LocationDetail.model_validate(location),
        message="Location created successfully",
    )


@router.put("/{location_id}", response_model=LocationDetailResponse)
def update_location(location_id: str, location_data: LocationUpdate, db: Session = Depends(get_db)):
    """Update the fields present in the request; hours are replaced when given."""
    location = _get_location_or_404(db, location_id)

    changes = location_data.model_dump(exclude_unset=True, exclude={"hours"})
    if changes.get("store_number") and changes["store_number"] != location.store_number:
        _ensure_store_number_free(db, changes["store_number"], exclude_id=location.id)
    _ensure_references_exist(db, changes)

    for field, value in changes.items():
        if value is None and field in _REQUIRED_FIELDS:
            continue
        if field == "is_active":
            value = 1 if value else 0
        setattr(location, field, value)

    if location_data.hours is not None:
        location.hours = _build_hours(location_data.hours)

    location.updated_at = datetime.utcnow().isoformat()
    db.commit()
    db.refresh(location)

    return LocationDetailResponse(
        data=LocationDetail.model_validate(location),
        message="Location updated successfully",
    )


@router.delete("/{location_id}", response_model=MessageResponse)
def deactivate_location(location_id: str, db: Session = Depends(get_db)):
    """Soft delete: the location is kept but marked inactive."""
    location = _get_location_or_404(db, location_id)
    location.is_active = 0
    location.updated_at = datetime.utcnow().isoformat()
    db.commit()

    return MessageResponse(message="Location deactivated successfully")
