# live_sessions/core/config.py

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Values come from the environment provided by Docker Compose; the
    # defaults below are only meant for local development and tests.
    model_config = SettingsConfigDict(extra="ignore")

    # The environment mode: 'local' or 'prod'
    ENV: str = "local"

    # --- Production URLs (for inside Docker) ---
    DATABASE_URL_PROD: str = "postgresql://postgres:postgres@db:5432/live_sessions_db"
    KAFKA_BOOTSTRAP_SERVERS_PROD: str = "kafka:29092"

    # --- Local Development URLs (for running locally) ---
    DATABASE_URL_LOCAL: str = "sqlite:///./live_sessions.db"
    KAFKA_BOOTSTRAP_SERVERS_LOCAL: str = "localhost:9092"

    # Other secrets
    JWT_SECRET: str = "change-me"
    INTERNAL_API_KEY: str = ""

    # Catalog service used to resolve related course / museum ids
    CATALOG_SERVICE_URL: str = "http://catalog-service:3000"

    # --- Registration & listing behaviour ---
    ALLOW_LIVE_REGISTRATION: bool = True
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100

    LOG_LEVEL: str = "INFO"

    # --- Dynamic Properties ---
    # These properties return the correct URL based on the ENV
    @property
    def DATABASE_URL(self) -> str:
        return (
            self.DATABASE_URL_LOCAL if self.ENV == "local" else self.DATABASE_URL_PROD
        )

    @property
    def KAFKA_BOOTSTRAP_SERVERS(self) -> str:
        return (
            self.KAFKA_BOOTSTRAP_SERVERS_LOCAL
            if self.ENV == "local"
            else self.KAFKA_BOOTSTRAP_SERVERS_PROD
        )


# Create a single instance of the settings
settings = Settings()
