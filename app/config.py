from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    SECRET_KEY: str = "change-me"

    DATABASE_URL: str = "sqlite:///./household.db"

    FRONTEND_URL: str = "http://localhost:3000"

    SESSION_COOKIE_NAME: str = "household_session"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 14

    OPENAI_API_KEY: str | None = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    EXTRACTION_TIMEOUT_SECONDS: float = 10.0

    DEFAULT_RECURRENCE_WEEKS: int = 8
    MAX_RECURRENCE_WEEKS: int = 52
    MAX_EVENT_DURATION_HOURS: int = 24

    HISTORY_LIMIT: int = 20

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

settings = Settings()
