import sys
from typing import List

from pydantic_settings import BaseSettings

_ENV_FILE = None if "pytest" in sys.modules else ".env"


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./employees.db"

    # profile pictures live here, served back under /uploads
    UPLOAD_DIR: str = "data/uploads"
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024

    SECRET_KEY: str = "change-me"
    JWT_ALGORITHM: str = "HS256"

    BACKEND_CORS_ORIGINS: List[str] = []
    LOG_LEVEL: str = "INFO"

    model_config = {
        "env_file": _ENV_FILE,
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
    }


settings = Settings()
