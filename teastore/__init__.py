"""Tea/coffee storefront core: cart, checkout and backend services."""

__version__ = "1.0.0"
