from storefront.config.settings import config_settings
from storefront.common.logging_setup import get_logger

logger = get_logger("storefront.notifications")

EMAIL_BACKEND = config_settings.EMAIL_BACKEND
