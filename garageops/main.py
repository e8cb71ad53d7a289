"""
Main FastAPI application entry point.
"""
import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from garageops.config import get_settings
from garageops.database import init_db
from garageops.exceptions import GarageError
from garageops.monitoring import PerformanceMonitor
from garageops.routers import auth, checklist, customers, employees, inventory, job_cards, parts, vehicles

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Request locations that prefix pydantic error paths
ERROR_LOCATIONS = {"body", "query", "path", "header"}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan events for the application.
    Handles startup and shutdown events.
    """
    # Startup
    logger.info("Starting %s %s", settings.app_name, settings.app_version)
    await init_db()
    logger.info("Database initialized, API available at %s", settings.api_v1_prefix)

    yield

    # Shutdown
    logger.info("Shutting down %s", settings.app_name)


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    ## GarageOps API

    Job card management for motorcycle and vehicle service garages.

    ### Entities:
    * **Job cards**: numbered work orders with status history
    * **Checklist items**: tasks on a job card, with subtasks and timers
    * **Parts**: parts allocated to a job card
    * **Customers, vehicles, employees**: the people and machines involved
    """,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.state.performance_monitor = PerformanceMonitor(settings.slow_request_threshold_ms)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def record_timing(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - started) * 1000

    route = request.scope.get("route")
    path = route.path if route is not None else request.url.path
    request.app.state.performance_monitor.record(f"{request.method} {path}", duration_ms)
    return response


@app.exception_handler(GarageError)
async def garage_error_handler(request: Request, exc: GarageError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message, "details": exc.details})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ())]
        if loc and loc[0] in ERROR_LOCATIONS:
            loc = loc[1:]
        details.append({"field": ".".join(loc), "message": error.get("msg", "Invalid value")})
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Validation failed", "details": details},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail, "details": None})


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Unhandled database error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Database error", "details": str(getattr(exc, "orig", None) or exc)},
    )


# Include routers
app.include_router(auth.router, prefix=settings.api_v1_prefix)
app.include_router(customers.router, prefix=settings.api_v1_prefix)
app.include_router(vehicles.router, prefix=settings.api_v1_prefix)
app.include_router(employees.router, prefix=settings.api_v1_prefix)
app.include_router(job_cards.router, prefix=settings.api_v1_prefix)
app.include_router(checklist.router, prefix=settings.api_v1_prefix)
app.include_router(parts.router, prefix=settings.api_v1_prefix)
app.include_router(inventory.router, prefix=settings.api_v1_prefix)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Welcome to GarageOps API",
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc",
    }


@app.get("/health")
async def health_check(request: Request):
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.app_version,
        "performance": request.app.state.performance_monitor.stats(),
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "garageops.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
