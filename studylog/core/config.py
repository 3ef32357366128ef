from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "postgresql://studylog:studylog@db:5432/studylog"
    APP_ENV: str = "development"
    SECRET_KEY: str = "changeme-secret-key"
    JWT_ALGORITHM: str = "HS256"

    # Comma-separated allowed origins, or "*" to allow all.
    # Example: "https://myapp.com,https://api.myapp.com"
    CORS_ORIGINS: str = "*"

    # Enrichment provider. Without a key every enrichment attempt fails
    # and notes stay in ANALYZING.
    OPENAI_API_KEY: str | None = None
    OPENAI_MODEL: str = "gpt-3.5-turbo"
    OPENAI_TIMEOUT: float = 60.0

    # Background thread pool running enrichment tasks.
    ENRICHMENT_WORKERS: int = 4

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    @property
    def cors_origins_list(self) -> list[str]:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
