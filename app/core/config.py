import os

# Database configuration
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./events.db")

# Redis configuration
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

# Auth tokens
SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "720"))

# Booking protocol
BOOKING_LOCK_ENABLED = os.getenv("BOOKING_LOCK_ENABLED", "true").lower() in ("1", "true", "yes")
BOOKING_LOCK_TIMEOUT = float(os.getenv("BOOKING_LOCK_TIMEOUT", "10"))
BOOKING_LOCK_BLOCKING_TIMEOUT = float(os.getenv("BOOKING_LOCK_BLOCKING_TIMEOUT", "5"))
BOOKING_MAX_ATTEMPTS = int(os.getenv("BOOKING_MAX_ATTEMPTS", "3"))
BOOKING_RETRY_BACKOFF = float(os.getenv("BOOKING_RETRY_BACKOFF", "0.05"))

# Read-repair schedule
RECONCILE_INTERVAL_SECONDS = float(os.getenv("RECONCILE_INTERVAL_SECONDS", "3600"))

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def get_database_url():
    return DATABASE_URL


def get_redis_url():
    return REDIS_URL
