from typing import List, Literal, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


CompensationPolicy = Literal["manual", "delete_identity", "retry_profile_write"]


class Settings(BaseSettings):
    # -------------------------------------------------
    # General
    # -------------------------------------------------
    PROJECT_NAME: str = "Lucidence Platform API"
    ENV: str = "development"

    # -------------------------------------------------
    # Frontend Domains
    # -------------------------------------------------
    FRONTEND_URL: str = "http://localhost:5173"
    EXTRA_CORS_ORIGINS: List[str] = []

    # -------------------------------------------------
    # CORS (auto-built below)
    # -------------------------------------------------
    BACKEND_CORS_ORIGINS: List[str] = []

    # -------------------------------------------------
    # Supabase (Identity Gateway + Document Store)
    # -------------------------------------------------
    SUPABASE_URL: Optional[str] = None
    SUPABASE_ANON_KEY: Optional[str] = None
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = None
    SUPABASE_JWT_SECRET: Optional[str] = None

    # -------------------------------------------------
    # Sign-in flows
    # -------------------------------------------------
    # Where emailed sign-in links land (joined to FRONTEND_URL)
    EMAIL_LINK_RETURN_PATH: str = "/complete-signin"
    FEDERATED_PROVIDER: str = "google"

    # -------------------------------------------------
    # SMTP Email Notifications
    # -------------------------------------------------
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: Optional[int] = None
    SMTP_USER: Optional[str] = None
    SMTP_PASS: Optional[str] = None

    ADMIN_NOTIFICATION_EMAIL: Optional[str] = None

    # -------------------------------------------------
    # Webhooks (new lead alerts)
    # -------------------------------------------------
    LEAD_WEBHOOK_URL: Optional[str] = None

    # -------------------------------------------------
    # Provisioning policies
    # -------------------------------------------------
    PROMOTION_COMPENSATION_POLICY: CompensationPolicy = Field(
        "manual",
        description="What to do when an identity was created but its profile write failed",
    )
    PROFILE_WRITE_RETRIES: int = Field(2, ge=0)
    ASSIGNMENT_REMOVAL_RETRIES: int = Field(0, ge=0)

    # -------------------------------------------------
    # Auth endpoint rate limits
    # -------------------------------------------------
    AUTH_RATE_LIMIT_MAX: int = 5
    AUTH_RATE_LIMIT_WINDOW_SECONDS: int = 900

    # -------------------------------------------------
    # Model Config
    # -------------------------------------------------
    model_config = SettingsConfigDict(case_sensitive=True)

    @property
    def email_link_return_url(self) -> str:
        return self.FRONTEND_URL.rstrip("/") + self.EMAIL_LINK_RETURN_PATH


# Instantiate settings
settings = Settings()

# -------------------------------------------------
# Build CORS list dynamically after loading settings
# -------------------------------------------------
cors_origins = [settings.FRONTEND_URL.rstrip("/")]
cors_origins.extend([d.rstrip("/") for d in settings.EXTRA_CORS_ORIGINS])

# remove duplicates
settings.BACKEND_CORS_ORIGINS = sorted(list(set(cors_origins)))
