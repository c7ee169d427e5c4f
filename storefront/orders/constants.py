from storefront.config.settings import config_settings
from storefront.common.logging_setup import get_logger

logger = get_logger("storefront.orders")

SHIPPING_INSIDE_DHAKA = int(config_settings.SHIPPING_INSIDE_DHAKA)
SHIPPING_OUTSIDE_DHAKA = int(config_settings.SHIPPING_OUTSIDE_DHAKA)

DHAKA_CITY_MARKERS = ("dhaka", "ঢাকা")

DEFAULT_PAGE_SIZE = int(config_settings.DEFAULT_PAGE_SIZE)
MAX_PAGE_SIZE = int(config_settings.MAX_PAGE_SIZE)
