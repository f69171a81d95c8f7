"""
Domain constants used across services/routers.
"""

# Orders.shipping_address column width
MAX_SHIPPING_ADDRESS_LENGTH = 1000

# Currency amounts are stored as Numeric(10, 2)
MONEY_MAX_DIGITS = 10
MONEY_DECIMAL_PLACES = 2

# Image uploads
ALLOWED_IMAGE_MIME_PREFIX = "image/"
