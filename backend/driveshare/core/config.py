import os
import logging
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Explicitly load .env file before defining Settings
env_path = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))), ".env")
load_dotenv(env_path)

class Settings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=True)

    PROJECT_NAME: str = "DriveShare"
    API_PREFIX: str = ""
    LOG_LEVEL: str = "INFO"

    # Database
    SQLALCHEMY_DATABASE_URI: str = "sqlite:///./driveshare.db"

    # Security
    SECRET_KEY: str = "YOUR_SECRET_KEY_HERE"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    AUTH_COOKIE_NAME: str = "token"

    # Storage
    UPLOAD_DIR: str = os.path.join(os.getcwd(), "uploads")
    # List of extra storage roots. Comma separated string in env, parsed to list.
    STORAGE_PATHS_STR: str = ""
    MAX_UPLOAD_SIZE: int = 100 * 1024 * 1024

    # Sharing
    SHARE_LINK_MIN_DAYS: int = 1
    SHARE_LINK_MAX_DAYS: int = 30
    PUBLIC_FILES_LIMIT: int = 50
    PUBLIC_BASE_URL: Optional[str] = None

    # Seed account for initial_data
    FIRST_USER_EMAIL: Optional[str] = None
    FIRST_USER_NAME: str = "admin"
    FIRST_USER_PASSWORD: Optional[str] = None

    @property
    def STORAGE_PATHS(self) -> List[str]:
        paths = [self.UPLOAD_DIR]
        if self.STORAGE_PATHS_STR:
            # Handle potential quote wrapping from env file parsing
            raw_str = self.STORAGE_PATHS_STR.strip('"\'')
            extra_paths = [p.strip() for p in raw_str.split(",") if p.strip()]
            paths.extend(extra_paths)
        return paths

settings = Settings()

# Ensure all storage paths exist
for path in settings.STORAGE_PATHS:
    if not os.path.exists(path):
        try:
            os.makedirs(path)
        except OSError as e:
            logger.warning("Could not create storage path %s: %s", path, e)
