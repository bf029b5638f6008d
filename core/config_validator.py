# core/config_validator.py

from typing import List, Optional
from core.config import Settings, settings as default_settings
from core.logging_config import logger


def validate_required_config(settings: Optional[Settings] = None) -> List[str]:
    """
    Returns the required environment variables that are not set.
    Without them neither the identity gateway nor the document store works.
    """
    settings = settings or default_settings
    missing = []

    if not settings.SUPABASE_URL:
        missing.append("SUPABASE_URL")
    if not settings.SUPABASE_SERVICE_ROLE_KEY:
        missing.append("SUPABASE_SERVICE_ROLE_KEY")

    return missing


def validate_optional_config(settings: Optional[Settings] = None) -> List[str]:
    """Optional but recommended configuration (warnings only)."""
    settings = settings or default_settings
    warnings = []

    if not settings.SUPABASE_ANON_KEY:
        warnings.append("SUPABASE_ANON_KEY (sign-in flows fall back to the service role key)")
    if not settings.SUPABASE_JWT_SECRET:
        warnings.append("SUPABASE_JWT_SECRET (bearer tokens are validated remotely)")
    if not all([settings.SMTP_HOST, settings.SMTP_PORT, settings.SMTP_USER, settings.SMTP_PASS]):
        warnings.append("SMTP_* (new lead e-mails are disabled)")

    return warnings


def validate_config_on_startup(settings: Optional[Settings] = None) -> bool:
    """
    Log configuration problems on application startup.
    Returns False when required configuration is missing; the app still
    starts so /health can report the problem.
    """
    missing_required = validate_required_config(settings)
    missing_optional = validate_optional_config(settings)

    for warning in missing_optional:
        logger.warning(f"Optional configuration missing: {warning}")

    if missing_required:
        logger.error(f"Missing required environment variables: {', '.join(missing_required)}")
        return False

    logger.info("Configuration validation passed")
    return True
