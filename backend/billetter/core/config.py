"""
Application configuration using pydantic-settings.
All config is loaded from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Billetter Booking API"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False
    API_PREFIX: str = "/api"

    # Seat reservations
    SEAT_RESERVATION_TIMEOUT_SECONDS: float = 900.0  # 15 minutes

    # Seat inventory generated for each new event
    SEATS_PER_ROW: int = 100
    REGULAR_EVENT_ROWS: int = 10
    LARGE_EVENT_ROWS: int = 1000
    LARGE_EVENT_KEYWORDS: list[str] = ["stadium", "100k"]
    SEAT_PRICE: str = "10.00"

    # Pagination
    SEAT_PAGE_SIZE_MAX: int = 20
    EVENT_PAGE_SIZE_MAX: int = 100

    # Payment provider redirect
    PAYMENT_URL: str = "http://localhost:3000/payment"

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
    }


@lru_cache()
def get_settings() -> Settings:
    return Settings()
