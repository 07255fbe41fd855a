"""Application-wide constants.

Centralizes pricing rules, storage keys and collection names so the cart,
checkout and repositories agree on them.
"""
from decimal import Decimal

# ============== CART ==============
CART_STORAGE_KEY = "cartItems"
MIN_LINE_QUANTITY = 1

# ============== PRICING ==============
BULK_DISCOUNT_MIN_QUANTITY = 3
BULK_DISCOUNT_RATE = Decimal("0.10")
MINOR_UNITS_PER_MAJOR = 100  # cents/paisa per currency unit
CURRENCY_LABEL = "Rs."

# ============== BACKEND COLLECTIONS ==============
TABLE_PRODUCTS = "products"
TABLE_ORDERS = "orders"
TABLE_ORDER_PRODUCTS = "order_products"
TABLE_PROFILES = "profiles"
TABLE_REVIEWS = "reviews"

# ============== AUTH ==============
AUTH_SESSION_STORAGE_KEY = "auth.session"
SESSION_REFRESH_MARGIN_SECONDS = 60

# ============== HTTP ==============
HTTP_TIMEOUT_SECONDS = 15

# ============== PAYMENT SHEET ==============
DEFAULT_MERCHANT_DISPLAY_NAME = "Tea App"
DEFAULT_PAYMENT_API_URL = "https://tea-app-web.vercel.app/api"
PAYMENT_SHEET_APPEARANCE = {
    "colors": {
        "primary": "#006400",
        "background": "#ffffff",
        "componentBackground": "#f3f3f3",
        "componentBorder": "#e0e0e0",
        "componentDivider": "#e0e0e0",
        "primaryText": "#000000",
        "secondaryText": "#646464",
        "componentText": "#000000",
        "placeholderText": "#8d8d8d",
    },
}
