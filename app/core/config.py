from pydantic_settings import BaseSettings, SettingsConfigDict



class Settings(BaseSettings):
    APP_ENV: str = "dev"
    PORT: int = 8084
    DATABASE_URL: str
    DATABASE_ECHO: bool = False
    LOG_LEVEL: str = "INFO"
    CURRENCY: str = "JOD"
    AWS_ACCESS_KEY: str | None = None
    AWS_SECRET_KEY: str | None = None
    AWS_REGION: str | None = None
    PAYMENT_EVENTS_QUEUE_URL: str | None = None
    REDIS_URL: str = "redis://localhost:6379/0"
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


Config = Settings()
