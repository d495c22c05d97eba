import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from . import models  # noqa: F401 - register tables with Base
from .config import ALLOWED_ORIGINS, OUTBOUND_BACKEND, SEED_PROFESSIONALS
from .database import Base, SessionLocal, engine
from .domain.availability.router import router as availability_router
from .domain.bookings.router import router as bookings_router
from .domain.professionals.router import router as professionals_router
from .domain.professionals.service import ProfessionalService
from .domain.staff.router import router as staff_router
from .errors import AgendaError
from .routes.google_auth import router as google_auth_router
from .routes.outbound import router as outbound_router
from .services.dispatcher import OutboundDispatcher
from .services.email_service import ConfirmationNotifier
from .services.meeting_adapter import build_meeting_adapter

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Another worker may have created them first
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")
            raise

    if SEED_PROFESSIONALS:
        db = SessionLocal()
        try:
            ProfessionalService(db).seed_if_empty()
        finally:
            db.close()

    meeting_adapter = build_meeting_adapter()
    app.state.meeting_adapter = meeting_adapter
    app.state.outbound_dispatcher = OutboundDispatcher(
        meeting_adapter, ConfirmationNotifier(), SessionLocal
    )
    logger.info(f"📤 Outbound delivery backend: {OUTBOUND_BACKEND}")

    yield

    logger.info("Application shutting down...")
    await app.state.meeting_adapter.aclose()


app = FastAPI(title="Salud Para Chile Agenda API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(AgendaError)
async def agenda_error_handler(request: Request, exc: AgendaError):
    if exc.status_code >= 500:
        logger.error(f"❌ {request.method} {request.url.path} - {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed JSON or wrong types are client errors like any other: 400 with the offending fields"""
    fields = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        field = loc[-1] if loc else "body"
        if field not in fields:
            fields.append(field)

    logger.warning(f"⚠️ Validation error for {request.url.path}: {fields}")
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": f"Invalid request fields: {', '.join(fields)}",
            "fields": fields,
        },
    )


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"❌ Database error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Storage is unavailable, please try again later"},
    )


# CORS Configuration
logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Routes
app.include_router(professionals_router, prefix="/api")
app.include_router(availability_router, prefix="/api")
app.include_router(bookings_router, prefix="/api")
app.include_router(staff_router, prefix="/api")
app.include_router(outbound_router, prefix="/api")
app.include_router(google_auth_router)


@app.get("/")
def root():
    return {"message": "Salud Para Chile Agenda API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}
