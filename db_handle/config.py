from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Connection parameters (used once, when the handle is first built)
    DB_HOST: str = "localhost"
    DB_PORT: Optional[int] = None
    DB_NAME: str = "dbname"
    DB_USER: str = "user"
    DB_PASSWORD: str = "password"

    # SQLAlchemy dialect+driver, e.g. "mysql+pymysql" or "mariadb+pymysql"
    DB_DRIVER: str = "mysql+pymysql"

    # Diagnostics
    DB_DEBUG: bool = False
    DB_ERROR_LOG: str = "errors.log"

    # Loads from a .env file in the root directory
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

# Singleton instance
settings = Settings()
