"""
FastAPI app assembly: logging, middleware, error handlers and router wiring.
"""
import logging
import os
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.responses import JSONResponse

# Configure logging
LOG_LEVEL_NAME = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_LEVEL = getattr(logging, LOG_LEVEL_NAME, logging.INFO)
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)
logger.setLevel(LOG_LEVEL)
logger.info("app_startup: log_level=%s", LOG_LEVEL_NAME)

from rental.api.customers import router as customers_router
from rental.api.errors import register_exception_handlers
from rental.api.locations import router as locations_router
from rental.api.pricing import router as pricing_router
from rental.api.reservations import router as reservations_router
from rental.api.support import SERVICE_NAME, router as support_router
from rental.api.vehicles import router as vehicles_router
from rental.db.database import SessionLocal, get_db
from rental.services.seeding import seed_demo_data
from rental.utils.feature_flags import demo_data_enabled
from rental.utils.runtime import cors_allowed_origins


@asynccontextmanager
async def lifespan(_app: FastAPI):
    if demo_data_enabled():
        db = SessionLocal()
        try:
            counts = seed_demo_data(db)
            logger.info("demo_data_seeded: %s", counts)
        finally:
            db.close()
    yield


app = FastAPI(
    title="Orange Car Rental Service",
    description="API for customers, fleet, pricing and reservations of the Orange car rental platform.",
    version="1.0.0",
    lifespan=lifespan,
)

# Avoid implicit trailing-slash redirects for predictable URLs
app.router.redirect_slashes = False

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(customers_router)
app.include_router(vehicles_router)
app.include_router(locations_router)
app.include_router(pricing_router)
app.include_router(reservations_router)
app.include_router(support_router)


@app.get("/health")
def health_check(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.error("health_check_failed: %s", exc)
        return JSONResponse(
            {"status": "unhealthy", "service": SERVICE_NAME, "database": "unreachable"},
            status_code=503,
        )
    return {"status": "ok", "service": SERVICE_NAME, "database": "ok"}
