from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import app.db.base  # noqa: F401  (registers every model)
from app.api.routes import admin, bookings, halls
from app.core.config import BOOKING_EXPIRY_ENABLED, BOOKING_EXPIRY_INTERVAL_MINUTES
from app.core.logging_config import get_logger
from app.scheduler.booking_expiry_job import BookingExpiryScheduler

logger = get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    scheduler = BookingExpiryScheduler(interval_minutes=BOOKING_EXPIRY_INTERVAL_MINUTES)
    app.state.expiry_scheduler = scheduler

    if BOOKING_EXPIRY_ENABLED:
        scheduler.start()
    else:
        logger.info("Booking expiry scheduler disabled (BOOKING_EXPIRY_ENABLED=false)")

    yield

    scheduler.stop()


app = FastAPI(
    title="Hall Booking API",
    version="1.0.0",
    description="Booking lifecycle, hall availability and payment-deadline expiry",
    lifespan=lifespan,
)


# ⭐ Request Logging Middleware
@app.middleware("http")
async def log_requests(request, call_next):
    logger.info(f"REQUEST: {request.method} {request.url.path}")

    try:
        response = await call_next(request)
        logger.info(f"RESPONSE: {response.status_code} {request.url.path}")
        return response

    except Exception as e:
        logger.error(f"ERROR: {request.url.path} -> {str(e)}")
        raise e


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(bookings.router)
app.include_router(halls.router)
app.include_router(admin.router)


@app.get("/", tags=["Root"])
def root():
    return {"message": "Backend running successfully"}
