"""Location Data API."""
from contextlib import asynccontextmanager
from datetime import datetime
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from location_api.config import get_settings
from location_api.errors import register_exception_handlers

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup: Create tables, drop stale sessions, load seed data
    from location_api.database import Base, engine, SessionLocal
    from location_api.services.authenticator import Authenticator
    from location_api.services.seed_loader import load_seed_file

    # Import all models so they're registered with Base
    from location_api import models  # noqa: F401

    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        Authenticator(db, settings.secret_key).purge_expired_sessions()
        if settings.seed_file:
            load_seed_file(db, settings.seed_file)
    finally:
        db.close()

    logger.info(f"{settings.app_name} started ({settings.environment})")
    yield
    # Shutdown: cleanup if needed


app = FastAPI(
    title=settings.app_name,
    description="Store locations, districts, managers and hours",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.get("/")
async def root():
    return {"message": f"{settings.app_name} - v1.0.0"}


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "environment": settings.environment,
        "timestamp": datetime.utcnow().isoformat(),
    }


# Import and include routers
from location_api.api import auth, locations  # noqa: E402

app.include_router(auth.router, prefix="/api")
app.include_router(locations.router, prefix="/api")
