"""FastAPI application factory."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request

# Load .env file from project root (must be before other imports)
load_dotenv()
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from fastapi.responses import JSONResponse  # noqa: E402

from airport.api.routes import (  # noqa: E402
    aircraft,
    aircraft_models,
    airports,
    analytics,
    audit,
    auth,
    baggage,
    cities,
    flights,
    passengers,
    reports,
    tickets,
    users,
)
from airport.persistence.db_manager import DatabaseManager  # noqa: E402
from airport.persistence.errors import DatabaseNotReadyError  # noqa: E402
from airport.services.errors import AirportError  # noqa: E402

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open (or create) the SQLite database on startup."""
    manager = DatabaseManager()
    db_path = Path(os.environ.get("AIRPORT_DB_PATH", "airport.db"))
    try:
        manager.create(db_path)
        logger.info("Airport DB ready: %s", db_path)
    except OSError as exc:
        logger.warning("Airport DB unavailable at %s: %s", db_path, exc)

    app.state.db_manager = manager
    yield


app = FastAPI(
    title="Airport Management API",
    description="Flights, ticketing, passengers, fleet and baggage operations",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.environ.get("CORS_ORIGINS", "http://localhost:5173").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AirportError)
async def airport_error_handler(request: Request, exc: AirportError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(DatabaseNotReadyError)
async def database_not_ready_handler(request: Request, exc: DatabaseNotReadyError) -> JSONResponse:
    return JSONResponse(status_code=503, content={"detail": str(exc)})


app.include_router(auth.router, prefix="/api")
app.include_router(users.router, prefix="/api")
app.include_router(users.roles_router, prefix="/api")
app.include_router(cities.router, prefix="/api")
app.include_router(airports.router, prefix="/api")
app.include_router(airports.gates_router, prefix="/api")
app.include_router(aircraft_models.router, prefix="/api")
app.include_router(aircraft.router, prefix="/api")
app.include_router(flights.router, prefix="/api")
app.include_router(passengers.router, prefix="/api")
app.include_router(tickets.router, prefix="/api")
app.include_router(baggage.router, prefix="/api")
app.include_router(audit.router, prefix="/api")
app.include_router(analytics.router, prefix="/api")
app.include_router(reports.router, prefix="/api")


@app.get("/api/health")
async def health():
    manager: DatabaseManager = app.state.db_manager
    result = {
        "status": "ok",
        "database_ready": manager.is_ready,
        "database_path": str(manager.db_path) if manager.db_path else None,
    }

    if manager.is_ready:
        try:
            result["table_counts"] = manager.table_counts()
        except Exception as exc:
            result["database_error"] = str(exc)

    return result
