
from storefront.config.settings import config_settings
from storefront.common.logging_setup import get_logger

logger = get_logger("storefront.auth")

AUTH_TOKEN_EXPIRE_DAYS = int(config_settings.AUTH_TOKEN_EXPIRE_DAYS)

AUTH_TOKEN_TTL_SECONDS = AUTH_TOKEN_EXPIRE_DAYS * 24 * 3600

GUEST_SESSION_TTL_SECONDS = int(config_settings.GUEST_SESSION_EXPIRE_DAYS) * 24 * 3600

AUTH_COOKIE_NAME = "auth_token"

GUEST_COOKIE_NAME = "guest_session_id"
