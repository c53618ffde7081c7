"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from portal.config import settings
from portal.database import async_session, engine, get_db
from portal.errors import register_error_handlers
from portal.models import Base
from portal.services.blob_registry import blob_stores

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and mount blob backends on startup; release them on shutdown."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    blob_stores.init(settings, async_session)
    logger.info("Student portal API ready on port %d", settings.API_PORT)

    yield

    # Cleanup
    await blob_stores.close()
    await engine.dispose()


app = FastAPI(
    title="Student Portal API",
    version="1.0.0",
    description="Backend API for student records, course content and attendance.",
    lifespan=lifespan,
)

# CORS
origins = [o.strip() for o in settings.CORS_ORIGINS.split(",")]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)


@app.get("/api/health")
async def health_check():
    """Verify API, database and blob storage."""
    status = {
        "status": "Server running",
        "storage": settings.FILE_STORAGE_TYPE if blob_stores.ready else "not initialized",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    try:
        async for db in get_db():
            await db.execute(text("SELECT 1"))
            status["database"] = "Connected"
    except Exception as e:
        status["database"] = f"Disconnected: {e}"
    return status


# Register routers
from portal.routes.content import router as content_router
from portal.routes.files import router as files_router
from portal.routes.people import students_router, faculty_router, admin_router
from portal.routes.auth import router as auth_router
from portal.routes.attendance import router as attendance_router
from portal.routes.sms import router as sms_router
app.include_router(content_router)
app.include_router(files_router)
app.include_router(students_router)
app.include_router(faculty_router)
app.include_router(admin_router)
app.include_router(auth_router)
app.include_router(attendance_router)
app.include_router(sms_router)
