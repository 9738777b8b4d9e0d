from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import time

from .core.config import settings
from .core.database import close_db_connections
from .core.cache import cache_manager
from .core.error_handlers import general_exception_handler
from .core.logging import setup_logging, logger

from .routers import health, timetable, teacher_assignment

API_PREFIX = "/api/v1"

@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info(f"Starting {settings.app_name} scheduling API ({settings.environment})")

    await cache_manager.initialize()
    if cache_manager.enabled:
        logger.info("Schedule cache initialized")

    yield

    logger.info(f"Shutting down {settings.app_name} scheduling API")
    await cache_manager.close()
    await close_db_connections()
    logger.info("Shutdown complete")

app = FastAPI(
    title="CoachMate Scheduling API",
    description="Multi-tenant timetable scheduling with teacher conflict detection",
    version=settings.app_version,
    lifespan=lifespan
)

@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    logger.info(f"{request.method} {request.url.path} - {process_time:.3f}s")
    return response

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=3600,
)

app.add_exception_handler(Exception, general_exception_handler)

app.include_router(health.router)
app.include_router(timetable.router, prefix=API_PREFIX)
app.include_router(teacher_assignment.router, prefix=API_PREFIX)

@app.get("/")
async def root():
    return {
        "message": "CoachMate Scheduling API",
        "version": settings.app_version,
        "status": "active"
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
