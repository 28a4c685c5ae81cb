import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# -------- DATABASE --------
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./hall_bookings.db")

# -------- AUTH --------
JWT_SECRET = os.getenv("JWT_SECRET", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60))

# -------- BOOKING EXPIRY --------
BOOKING_EXPIRY_ENABLED = _env_bool("BOOKING_EXPIRY_ENABLED", True)
BOOKING_EXPIRY_INTERVAL_MINUTES = int(os.getenv("BOOKING_EXPIRY_INTERVAL_MINUTES", 15))
PAYMENT_WINDOW_HOURS = int(os.getenv("PAYMENT_WINDOW_HOURS", 24))
EXPIRY_WARNING_HOURS = int(os.getenv("EXPIRY_WARNING_HOURS", 6))

# -------- EMAIL --------
SMTP_HOST = os.getenv("SMTP_HOST", "smtp.gmail.com")
SMTP_PORT = int(os.getenv("SMTP_PORT", 587))
SMTP_USER = os.getenv("SMTP_USER", "")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD", "")
EMAIL_FROM = os.getenv("EMAIL_FROM", "Hall Bookings <noreply@localhost>")
APP_URL = os.getenv("APP_URL", "http://localhost:5173")

# -------- LOGGING --------
LOG_DIR = os.getenv("LOG_DIR", "logs")
