"""Application settings loaded from the environment and an optional .env file."""
from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    PROJECT_NAME: str = "House Rent API"
    DATABASE_URL: str = "sqlite:///./house_rent.db"
    JWT_SECRET_KEY: str = "change-me-in-production-please-32chars"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    UPLOAD_DIR: str = "static/uploads"
    MAX_UPLOAD_FILES: int = 5
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", case_sensitive=False)


settings = Settings()
