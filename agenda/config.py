import json
import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/agenda.db")

# Clinic settings
# Booking timestamps and availability hours are wall-clock values in this zone
CLINIC_TIMEZONE = os.getenv("CLINIC_TIMEZONE", "America/Santiago")
DEFAULT_SESSION_MINUTES = int(os.getenv("DEFAULT_SESSION_MINUTES", "30"))
SEED_PROFESSIONALS = os.getenv("SEED_PROFESSIONALS", "true").lower() == "true"

# Staff credentials (prototype-grade, not a security boundary)
ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")
if not ADMIN_PASSWORD:
    import warnings

    warnings.warn(
        "ADMIN_PASSWORD not set! Using insecure default - DO NOT USE IN PRODUCTION",
        RuntimeWarning,
        stacklevel=2,
    )
    ADMIN_PASSWORD = "1234"  # noqa: S105 - Dev fallback only

# {"Dra. Ana Pérez": "secret", ...}
STAFF_CREDENTIALS: dict[str, str] = json.loads(os.getenv("STAFF_CREDENTIALS", "{}") or "{}")

# Frontend / CORS
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:5173"
).split(",")

# Google Calendar / Meet
# GOOGLE_TOKEN holds the JSON token blob printed by /oauth2callback
MEETING_PROVIDER = os.getenv("MEETING_PROVIDER", "google_meet")
GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID")
GOOGLE_CLIENT_SECRET = os.getenv("GOOGLE_CLIENT_SECRET")
GOOGLE_REDIRECT_URI = os.getenv("GOOGLE_REDIRECT_URI", "http://localhost:8000/oauth2callback")
GOOGLE_TOKEN = os.getenv("GOOGLE_TOKEN")
GOOGLE_CALENDAR_ID = os.getenv("GOOGLE_CALENDAR_ID", "primary")

# Email: Resend first, SMTP fallback
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", "Salud Para Chile <saludparachile@gmail.com>")
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
SMTP_HOST = os.getenv("SMTP_HOST")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USERNAME = os.getenv("SMTP_USERNAME")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
SMTP_USE_TLS = os.getenv("SMTP_USE_TLS", "true").lower() == "true"

# Outbound side effects: "inline" (FastAPI background tasks) or "arq" (Redis worker)
OUTBOUND_BACKEND = os.getenv("OUTBOUND_BACKEND", "inline")
# A task claimed longer ago than this is treated as abandoned by a crashed run
OUTBOUND_RUNNING_TIMEOUT_MINUTES = int(os.getenv("OUTBOUND_RUNNING_TIMEOUT_MINUTES", "15"))
