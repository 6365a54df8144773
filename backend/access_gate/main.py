from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
import uvicorn

from access_gate.api.routes import admin, health, reports, scan
from access_gate.core.config import settings
from access_gate.core.logging import setup_logging
from access_gate.db.base import Base
from access_gate.db import session as db_session
from access_gate.services.guard import StationRegistry
from access_gate.services.pipeline import ScanPipeline
from access_gate.services.reporting import ReportingService
from access_gate.services.store import SqlAuditLog, SqlParticipantStore

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)

def create_app(session_factory=None, engine=None, event_scope: Optional[str] = None) -> FastAPI:
    """Build the API around one database and one active event"""
    session_factory = session_factory or db_session.SessionLocal
    engine = engine or db_session.engine
    event_scope = settings.ACTIVE_EVENT_ID if event_scope is None else event_scope

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan events for startup and shutdown"""
        # Startup
        logger.info("🚀 Starting Access Gate...")

        # Create database tables
        logger.info("📦 Creating database tables...")
        Base.metadata.create_all(bind=engine)

        # Test database connection
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            logger.info("✅ Database connection successful")
        except Exception as e:
            logger.error(f"❌ Database connection failed: {e}")
            raise

        if event_scope:
            logger.info(f"🎫 Active event: {event_scope}")
        else:
            logger.warning("⚠️ No active event selected; every scan will be denied")

        yield

        # Shutdown
        logger.info("👋 Shutting down...")

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Event access validation: registration and zone entry/exit scanning",
        version=settings.VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    participants = SqlParticipantStore(session_factory)
    pipeline = ScanPipeline(
        lookup=participants,
        mutator=participants,
        audit=SqlAuditLog(session_factory),
    )
    app.state.session_factory = session_factory
    app.state.event_scope = event_scope
    app.state.participants = participants
    app.state.stations = StationRegistry(pipeline)
    app.state.reporting = ReportingService(session_factory)

    # Include routers
    app.include_router(health.router, prefix="/api", tags=["Health"])
    app.include_router(scan.router, prefix="/api", tags=["Scanning"])
    app.include_router(reports.router, prefix="/api", tags=["Reports"])
    app.include_router(admin.router, prefix="/api", tags=["Administration"])

    @app.get("/")
    async def root():
        """Root endpoint with API information"""
        return {
            "service": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "status": "operational",
            "docs": "/docs",
            "endpoints": {
                "health": "/api/health",
                "scan": "/api/stations/{station_id}/scan",
                "acknowledge": "/api/stations/{station_id}/ack",
                "reports": "/api/reports/...",
                "enroll": "/api/admin/participants"
            }
        }

    return app

app = create_app()

def run():
    uvicorn.run(app, host="0.0.0.0", port=8000, reload=False)

if __name__ == "__main__":
    run()
