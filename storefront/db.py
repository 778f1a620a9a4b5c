from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


class Settings(BaseSettings):
    database_url: str = Field(alias="DATABASE_URL")

    auth_secret: str = Field(alias="AUTH_SECRET")
    auth_algorithm: str = Field(default="HS256", alias="AUTH_ALGORITHM")
    access_token_expire_minutes: int = Field(default=1440, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    # Mercado Pago
    mp_access_token: str | None = Field(default=None, alias="MP_ACCESS_TOKEN")
    mp_api_base_url: str = Field(default="https://api.mercadopago.com", alias="MP_API_BASE_URL")
    mp_timeout_seconds: float = Field(default=10.0, alias="MP_TIMEOUT_SECONDS")
    mp_use_sandbox: bool = Field(default=False, alias="MP_USE_SANDBOX")
    mp_notification_url: str | None = Field(default=None, alias="MP_NOTIFICATION_URL")
    checkout_success_url: str = Field(
        default="https://fatalcompany.store/backurl/sucesso.html", alias="CHECKOUT_SUCCESS_URL"
    )
    checkout_failure_url: str = Field(
        default="https://fatalcompany.store/backurl/erro.html", alias="CHECKOUT_FAILURE_URL"
    )
    checkout_pending_url: str = Field(
        default="https://fatalcompany.store/backurl/pendente.html", alias="CHECKOUT_PENDING_URL"
    )

    # E-mail (SMTP)
    smtp_host: str | None = Field(default=None, alias="SMTP_HOST")
    smtp_port: int = Field(default=587, alias="SMTP_PORT")
    smtp_username: str | None = Field(default=None, alias="SMTP_USERNAME")
    smtp_password: str | None = Field(default=None, alias="SMTP_PASSWORD")
    smtp_starttls: bool = Field(default=True, alias="SMTP_STARTTLS")
    smtp_timeout_seconds: float = Field(default=15.0, alias="SMTP_TIMEOUT_SECONDS")
    mail_from: str = Field(default="Fatal Company <loja@fatal.com>", alias="MAIL_FROM")

    # Config do pydantic-settings (v2)
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",        # ignora chaves do .env que não tenham campo/alias
        case_sensitive=False,  # tolera caixa; prefira MAIÚSCULO no .env
    )

    @property
    def mp_back_urls(self) -> dict[str, str]:
        return {
            "success": self.checkout_success_url,
            "failure": self.checkout_failure_url,
            "pending": self.checkout_pending_url,
        }

    @property
    def smtp_enabled(self) -> bool:
        return bool(self.smtp_host)

    @field_validator("auth_secret")
    @classmethod
    def validate_auth_secret(cls, value: str) -> str:
        if not value or value == "change-me" or len(value) < 32:
            raise ValueError("AUTH_SECRET must be set and at least 32 chars long")
        return value

    @field_validator("mp_timeout_seconds")
    @classmethod
    def validate_mp_timeout(cls, value: float) -> float:
        if value <= 0 or value > 60:
            raise ValueError("MP_TIMEOUT_SECONDS must be between 0 and 60 seconds")
        return value


settings = Settings()

_connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}
engine = create_engine(settings.database_url, pool_pre_ping=True, connect_args=_connect_args)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


class Base(DeclarativeBase):
    pass


# Dependency
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
