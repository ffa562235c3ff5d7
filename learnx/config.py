from dotenv import load_dotenv
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Also exposes .env to plain os.getenv readers such as run.py.
load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "LearnX"
    APP_VERSION: str = "1.0.0"

    SECRET_KEY: str = "dev-secret-key-change-me"
    SQLALCHEMY_DATABASE_URI: str = Field(
        default="sqlite:///learnx.db",
        validation_alias=AliasChoices("DATABASE_URL", "SQLALCHEMY_DATABASE_URI"),
    )
    SQL_ECHO: bool = False

    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    AUTH_COOKIE_NAME: str = "learnx_token"
    SESSION_COOKIE_SAMESITE: str = "Lax"
    SESSION_COOKIE_SECURE: bool = False

    CORS_ALLOWED_ORIGINS: list[str] = ["*"]

    LOG_LEVEL: str = "INFO"
    SEED_ON_STARTUP: bool = False


settings = Settings()
