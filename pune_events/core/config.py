import os

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./pune_events.db")

SESSION_TTL_SECONDS = int(os.getenv("SESSION_TTL_SECONDS", "3600"))
PASSWORD_HASH_ROUNDS = int(os.getenv("PASSWORD_HASH_ROUNDS", "12"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

FEATURED_EVENTS_LIMIT = int(os.getenv("FEATURED_EVENTS_LIMIT", "3"))
CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]

# Celery falls back to the Redis instance used for locks and sessions
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "")
RECONCILE_QUEUE = os.getenv("RECONCILE_QUEUE", "reconcile")
