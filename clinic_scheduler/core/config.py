import os

from dotenv import load_dotenv


load_dotenv()


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if not value:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]

APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./clinic_scheduler.db")
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "sql").strip().lower()
SEED_DEMO_DATA = _get_bool(os.getenv("SEED_DEMO_DATA"), default=True)
MOCK_LATENCY_MS = int(os.getenv("MOCK_LATENCY_MS", "0"))

SLOT_INTERVAL_MINUTES = int(os.getenv("SLOT_INTERVAL_MINUTES", "30"))
LIMITED_MAX_SLOTS = int(os.getenv("LIMITED_MAX_SLOTS", "5"))
AVAILABILITY_STRICT_SERVICE_LOOKUP = _get_bool(os.getenv("AVAILABILITY_STRICT_SERVICE_LOOKUP"), default=False)

CORS_ALLOW_ORIGINS = _get_list(os.getenv("CORS_ALLOW_ORIGINS"), default=["http://localhost:5173"])

def validate_runtime_config() -> None:
    if STORAGE_BACKEND not in {"sql", "memory"}:
        raise RuntimeError("STORAGE_BACKEND must be 'sql' or 'memory'.")
    if SLOT_INTERVAL_MINUTES <= 0:
        raise RuntimeError("SLOT_INTERVAL_MINUTES must be positive.")
    if LIMITED_MAX_SLOTS < 0:
        raise RuntimeError("LIMITED_MAX_SLOTS cannot be negative.")
    if APP_ENV.lower() == "production" and STORAGE_BACKEND == "memory":
        raise RuntimeError("The in-memory store cannot be used in production.")
