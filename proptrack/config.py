"""Runtime settings for PropTrack, read from the environment or ``.env``."""
import logging
from decimal import Decimal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

INSECURE_SECRET = "change-me-in-production"
INSECURE_ADMIN_PASS = "admin123"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_ENV: str = "development"
    SECRET_KEY: str = INSECURE_SECRET
    DATABASE_URL: str = "sqlite:///./data/proptrack.db"
    LOG_LEVEL: str = "INFO"

    # bootstrap account created on first start
    FIRST_ADMIN_USER: str = "admin"
    FIRST_ADMIN_PASS: str = INSECURE_ADMIN_PASS

    # report rendering
    CURRENCY_SYMBOL: str = "₱"

    # returns workflow
    LATE_RETURN_PENALTY_PER_DAY: Decimal = Field(default=Decimal("10.00"), ge=0)
    REQUEST_ASSIGNMENT_DAYS: int = Field(default=30, ge=1)

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"


def check_settings(s: Settings) -> None:
    """Refuse to run production on the shipped secret; warn about other defaults."""
    if s.SECRET_KEY == INSECURE_SECRET:
        if s.is_production:
            raise RuntimeError("SECRET_KEY must be set in production, check your .env file")
        logger.warning("SECRET_KEY uses the default value, set it in .env before deploying")
    if s.FIRST_ADMIN_PASS == INSECURE_ADMIN_PASS:
        logger.warning("FIRST_ADMIN_PASS uses the default value, change it in .env")


settings = Settings()
check_settings(settings)
