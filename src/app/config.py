from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).parent.parent.parent / ".env"),
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_env: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 3000

    # Database
    database_url: str
    db_echo: bool = False
    db_pool_size: int = 10
    db_max_overflow: int = 5
    db_pool_timeout: int = 60
    db_pool_recycle: int = 1800

    # JWT
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    session_expire_hours: int = 8
    password_reset_expire_minutes: int = 30

    # Mail
    smtp_host: str = "localhost"
    smtp_port: int = 587
    smtp_user: str | None = None
    smtp_password: str | None = None
    smtp_ssl: bool = False
    smtp_starttls: bool = True
    smtp_timeout: int = 30
    email_from: str = "suporte@ecodescarte.com.br"
    mail_test_recipient: str = "test@example.com"

    # Front end / CORS
    frontend_url: str | None = None
    cors_origins: list[str] = [
        "http://localhost:5500",
        "http://127.0.0.1:5500",
        "http://localhost:3000",
    ]

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"

    @property
    def allowed_origins(self) -> list[str]:
        if self.is_production:
            return [self.frontend_url] if self.frontend_url else []
        origins = list(self.cors_origins)
        if self.frontend_url:
            origins.append(self.frontend_url)
        return origins


settings = Settings()
