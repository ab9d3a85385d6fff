"""FastAPI application entry point for the Interface Traffic Store.

This service records network interface traffic deltas into lifetime totals
and five rolling series (five-minute, hour, day, month, year), and exposes
interface administration, retention pruning and raw series reads over HTTP.

Run with: uvicorn trafficstore.main:app --reload
"""

from fastapi import FastAPI

from trafficstore.config import settings
from trafficstore.routers.interfaces import router as interfaces_router
from trafficstore.routers.traffic import router as traffic_router
from trafficstore.routers.upload import router as upload_router

app = FastAPI(
    title=settings.APP_NAME,
    description=(
        "Stores network interface traffic as lifetime totals and "
        "five-minute, hourly, daily, monthly and yearly series, with a "
        "fixed retention horizon per series."
    ),
    version=settings.TOOL_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.include_router(interfaces_router)
app.include_router(upload_router)
app.include_router(traffic_router)


@app.on_event("startup")
def on_startup():  # pragma: no cover
    """Create the schema and stamp version info if needed."""
    from trafficstore.database import SessionLocal
    from trafficstore.services.bootstrap import initialize_database

    with SessionLocal() as db:
        initialize_database(db)


@app.get("/", tags=["Health"])
def health_check():
    """Health check endpoint to verify the service is running."""
    return {"status": "healthy", "service": settings.APP_NAME}
