from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    OPENAI_API_KEY: str | None = None
    OPENAI_MODEL_SUGGEST: str = "gpt-4o-mini"
    OPENAI_TEMPERATURE_SUGGEST: float = 0.2

    AUTH_TOKEN_SECRET: str | None = None

    APP_NAME: str = "Luxride Booking"
    DATA_DIR: str = "./data"
    SESSION_IDLE_SECONDS: float = 24 * 3600
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"


settings = Settings()
