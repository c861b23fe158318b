import os
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

DEFAULT_BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/107.0.0.0 Safari/537.36"
)
DEFAULT_MOBILE_USER_AGENT = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 16_6 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/16.6 Mobile/15E148 Safari/604.1"
)


class Settings(BaseSettings):
    # App Settings
    APP_NAME: str = os.getenv("APP_NAME", "Media Gateway")
    DEBUG: bool = os.getenv("DEBUG", "False").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))

    # Identity presented to the media CDN; direct URLs are only honoured for
    # requests that look like they come from the platform's own pages.
    UPSTREAM_REFERER: str = os.getenv("UPSTREAM_REFERER", "https://www.douyin.com/")
    UPSTREAM_USER_AGENT: str = os.getenv("UPSTREAM_USER_AGENT", DEFAULT_BROWSER_USER_AGENT)

    # Resolver Settings
    RESOLVER_USER_AGENT: str = os.getenv("RESOLVER_USER_AGENT", DEFAULT_MOBILE_USER_AGENT)
    RESOLVER_TIMEOUT_SECONDS: float = float(os.getenv("RESOLVER_TIMEOUT_SECONDS", "15"))

    # Streaming Settings
    UPSTREAM_CONNECT_TIMEOUT_SECONDS: float = float(os.getenv("UPSTREAM_CONNECT_TIMEOUT_SECONDS", "10"))
    UPSTREAM_READ_TIMEOUT_SECONDS: float = float(os.getenv("UPSTREAM_READ_TIMEOUT_SECONDS", "30"))
    STREAM_CHUNK_SIZE: int = int(os.getenv("STREAM_CHUNK_SIZE", str(64 * 1024)))

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

# Create settings instance
settings = Settings()
