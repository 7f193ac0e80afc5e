from pathlib import Path
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings
from dotenv import load_dotenv


dotenv_path = Path(__file__).resolve().parents[2] / '.env'
load_dotenv(dotenv_path)


class Settings(BaseSettings):
    """Global configurations."""

    ENV_STATE: str = Field('dev', description="dev | prod")
    LOG_LEVEL: str = Field('INFO')

    HOST: str = Field('0.0.0.0')
    PORT: int = Field(8051)
    UVICORN_WORKERS: int = Field(1)
    UVICORN_RELOAD: str = Field("false")
    API_VERSION: str = Field("1.0.0")

    # Mediastack supports a pool of up to three keys
    MEDIASTACK_KEY_1: Optional[str] = None
    MEDIASTACK_KEY_2: Optional[str] = None
    MEDIASTACK_KEY_3: Optional[str] = None
    GUARDIAN_KEY_1: Optional[str] = None
    GNEWS_API_KEY: Optional[str] = None
    NEWSDATA_API_KEY: Optional[str] = None

    MEDIASTACK_BASE_URL: str = "https://api.mediastack.com/v1"
    GUARDIAN_BASE_URL: str = "https://content.guardianapis.com"
    GNEWS_BASE_URL: str = "https://gnews.io/api/v4"
    NEWSDATA_BASE_URL: str = "https://newsdata.io/api/1"

    # Requests allowed per key within the provider's reset window
    MEDIASTACK_RATE_LIMIT: int = 1000
    GUARDIAN_RATE_LIMIT: int = 5000
    GNEWS_RATE_LIMIT: int = 100
    NEWSDATA_RATE_LIMIT: int = 500

    # Lower number = tried first
    MEDIASTACK_PRIORITY: int = 1
    GUARDIAN_PRIORITY: int = 2
    GNEWS_PRIORITY: int = 3
    NEWSDATA_PRIORITY: int = 4

    NEWS_REQUEST_TIMEOUT: float = Field(5.0, gt=0, description="Seconds per upstream request")
    RERANK_TIMEOUT: float = Field(10.0, gt=0)
    KEY_USAGE_SWEEP_MINUTES: int = Field(60, ge=1)
    MIN_API_KEY_LENGTH: int = Field(6, ge=1)

    @property
    def is_production(self) -> bool:
        return self.ENV_STATE == "prod"


# Avoid having to re-read the .env file and create the Settings object every time you access it
@lru_cache()
def get_settings():
    return Settings()


# Settings will be the object that contains all the configuration of the application.
settings = get_settings()

