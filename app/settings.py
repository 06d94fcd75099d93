from pydantic import Field, RedisDsn
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str = Field(..., alias="DATABASE_URL")
    DEBUG: bool = Field(default=False, alias="DEBUG")
    REDIS_URL: RedisDsn = Field(..., alias="REDIS_URL")
    SUPABASE_URL: str = Field(..., alias="SUPABASE_URL")
    SUPABASE_ANON_KEY: str = Field(..., alias="SUPABASE_ANON_KEY")
    SUPABASE_SERVICE_KEY: str = Field(..., alias="SUPABASE_SERVICE_KEY")
    SUPABASE_JWT_SECRET: str = Field(..., alias="SUPABASE_JWT_SECRET")
    ATTACHMENTS_BUCKET: str = Field(default="tickets", alias="ATTACHMENTS_BUCKET")

    # AI drafting
    GOOGLE_API_KEY: str = Field(..., alias="GOOGLE_API_KEY")
    LLM_MODEL: str = Field(default="gemini-2.5-flash-lite", alias="LLM_MODEL")
    LLM_TEMPERATURE: float = Field(default=0.7, alias="LLM_TEMPERATURE")
    LLM_MAX_TOKENS: int = Field(default=2000, alias="LLM_MAX_TOKENS")

    # Transactional email
    RESEND_API_KEY: str = Field(..., alias="RESEND_API_KEY")
    EMAIL_FROM: str = Field(
        default="AutoCRM <support@autocrm.com>", alias="EMAIL_FROM"
    )
    APP_URL: str = Field(default="http://localhost:5173", alias="APP_URL")

    # Role bootstrap
    STAFF_EMAIL_DOMAIN: str = Field(default="autocrm.com", alias="STAFF_EMAIL_DOMAIN")
    ROLE_CREATE_ATTEMPTS: int = Field(default=3, alias="ROLE_CREATE_ATTEMPTS")
    ROLE_CREATE_RETRY_DELAY: float = Field(
        default=1.0, alias="ROLE_CREATE_RETRY_DELAY"
    )

    # Attachments
    MAX_ATTACHMENT_FILES: int = Field(default=5, alias="MAX_ATTACHMENT_FILES")
    MAX_ATTACHMENT_SIZE_MB: int = Field(default=10, alias="MAX_ATTACHMENT_SIZE_MB")

    # Ticket list view
    SEARCH_DEBOUNCE_SECONDS: float = Field(
        default=0.3, alias="SEARCH_DEBOUNCE_SECONDS"
    )

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def MAX_ATTACHMENT_SIZE(self) -> int:
        return self.MAX_ATTACHMENT_SIZE_MB * 1024 * 1024


settings = Settings()
