import logging
import os

from dotenv import load_dotenv


load_dotenv()

logger = logging.getLogger(__name__)


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

DATABASE_URL = os.getenv("DATABASE_URL")

CORS_ALLOW_ORIGINS = _get_list(os.getenv("CORS_ALLOW_ORIGINS"), ["http://localhost:3000"])

# Doctors without an explicit zone get their slots computed in this one.
DEFAULT_TIMEZONE = os.getenv("DEFAULT_TIMEZONE", "UTC")

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_MINUTES = int(os.getenv("JWT_EXPIRES_MINUTES", "60"))

VONAGE_APPLICATION_ID = os.getenv("VONAGE_APPLICATION_ID", "")
VONAGE_PRIVATE_KEY = os.getenv("VONAGE_PRIVATE_KEY", "")
VONAGE_VIDEO_API_URL = os.getenv("VONAGE_VIDEO_API_URL", "https://video.api.vonage.com")
VONAGE_REQUEST_TIMEOUT_SECONDS = float(os.getenv("VONAGE_REQUEST_TIMEOUT_SECONDS", "10"))

OPENROUTER_API_KEY = os.getenv("OPENROUTER_API_KEY", "")
OPENROUTER_BASE_URL = os.getenv("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1")
CHATBOT_MODEL = os.getenv("CHATBOT_MODEL", "deepseek/deepseek-chat")
CHATBOT_ENABLED = _get_bool(os.getenv("CHATBOT_ENABLED"), default=True)


def is_production() -> bool:
    return APP_ENV.strip().lower() == "production"


def video_configured() -> bool:
    return bool(VONAGE_APPLICATION_ID and VONAGE_PRIVATE_KEY)


def chatbot_configured() -> bool:
    return CHATBOT_ENABLED and bool(OPENROUTER_API_KEY)


def validate_runtime_config() -> list[str]:
    """Fail fast on fatal misconfiguration and report degraded features.

    Returns the names of features that will run in degraded mode.
    """
    if is_production() and JWT_SECRET_KEY == "change-me":
        raise RuntimeError("JWT_SECRET_KEY must be set in production.")

    degraded: list[str] = []

    if not video_configured():
        if is_production():
            raise RuntimeError("VONAGE_APPLICATION_ID and VONAGE_PRIVATE_KEY must be set in production.")
        logger.warning("Vonage credentials missing; appointment booking will fail until they are set.")
        degraded.append("video")

    if not chatbot_configured():
        logger.warning("OPENROUTER_API_KEY missing or chatbot disabled; chat assistant is unavailable.")
        degraded.append("chatbot")

    return degraded
