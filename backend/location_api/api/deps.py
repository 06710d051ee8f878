"""Shared API dependencies."""
from datetime import timedelta

from fastapi import Depends, Request
from pydantic import ValidationError
from sqlalchemy.orm import Session

from location_api.api.session_cookie import read_session_cookie
from location_api.config import Settings, get_settings
from location_api.database import get_db
from location_api.errors import Misconfiguration, Unauthorized
from location_api.schemas.auth import AccountPublic
from location_api.services.authenticator import Authenticator

__all__ = [
    "get_db",
    "get_app_settings",
    "get_authenticator",
    "get_session_account",
    "get_current_account",
]


def get_app_settings() -> Settings:
    """Settings, with a bad configuration reported as a 500 instead of a crash."""
    try:
        return get_settings()
    except ValidationError as exc:
        raise Misconfiguration() from exc


def get_authenticator(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> Authenticator:
    return Authenticator(
        db,
        settings.secret_key,
        session_lifetime=timedelta(days=settings.session_lifetime_days),
        sliding_expiration=settings.session_sliding_expiration,
        update_age=timedelta(seconds=settings.session_update_age_seconds),
    )


def get_session_account(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    authenticator: Authenticator = Depends(get_authenticator),
) -> AccountPublic | None:
    """Account behind the request's session cookie, if any."""
    return authenticator.resolve_session(read_session_cookie(request, settings))


def get_current_account(
    account: AccountPublic | None = Depends(get_session_account),
) -> AccountPublic:
    """Require a valid session."""
    if account is None:
        raise Unauthorized()
    return account
