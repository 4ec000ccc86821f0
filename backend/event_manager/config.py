"""Application configuration via environment variables."""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """App settings loaded from .env or environment."""

    DATABASE_URL: str = "sqlite:///./event_manager.db"
    CORS_ORIGINS: str = "http://localhost:4200"
    LOG_LEVEL: str = "INFO"

    # Tokens
    JWT_SECRET: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    SESSION_TOKEN_EXPIRE_DAYS: int = 7
    EMAIL_VERIFY_EXPIRE_HOURS: int = 24
    PASSWORD_RESET_EXPIRE_MINUTES: int = 60

    # Registrations with one of these emails are created as admins
    ADMIN_EMAILS: str = ""

    # Links embedded in outgoing emails
    API_BASE_URL: str = "http://localhost:8000"
    FRONTEND_URL: str = "http://localhost:4200"

    # Outbound email; an empty SMTP_HOST disables delivery
    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_FROM: str = "Event Management System <no-reply@localhost>"
    SMTP_USE_TLS: bool = True
    DISPLAY_TIMEZONE: str = "UTC"  # IANA tz used when printing event dates

    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    class Config:
        env_file = ".env"

    @property
    def admin_emails(self) -> set[str]:
        return {e.strip().lower() for e in self.ADMIN_EMAILS.split(",") if e.strip()}


settings = Settings()
