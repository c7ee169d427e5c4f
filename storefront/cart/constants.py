from storefront.config.settings import config_settings
from storefront.common.logging_setup import get_logger

logger = get_logger("storefront.cart")

MAX_CART_LINE_QTY = int(config_settings.MAX_CART_LINE_QTY)
