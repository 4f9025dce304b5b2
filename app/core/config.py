from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    ENVIRONMENT: str = "development"  # "development" or "production"

    CORS_ORIGINS: List[str] = ["http://localhost:8081", "http://localhost:19006"]

    # Background route generation (RQ)
    REDIS_URL: str = "redis://localhost:6379/0"
    ROUTE_GENERATION_QUEUE_NAME: str = "route_generation"
    ROUTE_GENERATION_JOB_TIMEOUT: str = "5m"

    # Route planning
    SOLVER_TIME_LIMIT_SECONDS: int = 30
    ROUTE_GENERATION_TIMEOUT_SECONDS: int = 35
    DEFAULT_BATTERY_THRESHOLD: int = 25
    STOP_PLANNING_SLOT_MINUTES: int = 15

    @property
    def is_production(self):
        return self.ENVIRONMENT == "production"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

settings = Settings()
