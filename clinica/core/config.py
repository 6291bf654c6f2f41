# clinica/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore")

    APP_NAME: str = "Clinica API"
    LOG_LEVEL: str = "INFO"

    # si DATABASE_URL viene definido tiene prioridad sobre DB_*
    DATABASE_URL: str | None = None
    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    DB_USER: str = "root"
    DB_PASSWORD: str = ""
    DB_NAME: str = "clinica"
    CREATE_TABLES: bool = False

    CORS_ORIGINS: list[str] = Field(default_factory=lambda: [
        "https://clinica-frontend-react.vercel.app",
        "http://localhost:5173",
        "https://clinicaproxdomg.free.nf",
    ])

    SESSION_COOKIE: str = "clinica_sesion"
    SESSION_TTL_SECONDS: int = 60 * 60 * 8
    SESSION_COOKIE_SECURE: bool = False
    REDIS_URL: str | None = None

    MAX_PER_PAGE: int = 100

    @property
    def async_database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (f"mysql+aiomysql://{self.DB_USER}:{self.DB_PASSWORD}"
                f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}?charset=utf8mb4")


def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
