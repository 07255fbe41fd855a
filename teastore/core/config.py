"""Environment-driven configuration objects for the storefront."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any

from dotenv import load_dotenv

from teastore.core.constants import (
    CART_STORAGE_KEY,
    DEFAULT_MERCHANT_DISPLAY_NAME,
    DEFAULT_PAYMENT_API_URL,
    HTTP_TIMEOUT_SECONDS,
    PAYMENT_SHEET_APPEARANCE,
)
from teastore.core.exceptions import ConfigurationException


@dataclass(slots=True)
class SupabaseConfig:
    url: str
    anon_key: str
    timeout: float = HTTP_TIMEOUT_SECONDS

    @property
    def rest_url(self) -> str:
        return f"{self.url.rstrip('/')}/rest/v1"

    @property
    def auth_url(self) -> str:
        return f"{self.url.rstrip('/')}/auth/v1"


@dataclass(slots=True)
class PaymentConfig:
    api_url: str
    merchant_display_name: str
    appearance: dict[str, Any] = field(default_factory=dict)
    timeout: float = HTTP_TIMEOUT_SECONDS


@dataclass(slots=True)
class Settings:
    supabase: SupabaseConfig
    payment: PaymentConfig
    redis_url: str | None
    cart_storage_key: str
    log_level: str


def _appearance(primary_color: str | None) -> dict[str, Any]:
    colors = dict(PAYMENT_SHEET_APPEARANCE["colors"])
    if primary_color:
        colors["primary"] = primary_color
    return {"colors": colors}


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationException(f"{name} must be a number, got {raw!r}")


def load_settings() -> Settings:
    """Load environment variables once and expose typed settings."""
    load_dotenv()

    supabase_url = os.getenv("SUPABASE_URL")
    if not supabase_url:
        raise ConfigurationException("SUPABASE_URL environment variable is not set")
    anon_key = os.getenv("SUPABASE_ANON_KEY")
    if not anon_key:
        raise ConfigurationException("SUPABASE_ANON_KEY environment variable is not set")

    timeout = _float_env("HTTP_TIMEOUT", HTTP_TIMEOUT_SECONDS)

    payment = PaymentConfig(
        api_url=os.getenv("PAYMENT_API_URL", DEFAULT_PAYMENT_API_URL).rstrip("/"),
        merchant_display_name=os.getenv("MERCHANT_DISPLAY_NAME", DEFAULT_MERCHANT_DISPLAY_NAME),
        appearance=_appearance(os.getenv("PAYMENT_PRIMARY_COLOR")),
        timeout=timeout,
    )

    return Settings(
        supabase=SupabaseConfig(url=supabase_url, anon_key=anon_key, timeout=timeout),
        payment=payment,
        redis_url=os.getenv("REDIS_URL") or None,
        cart_storage_key=os.getenv("CART_STORAGE_KEY", CART_STORAGE_KEY),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
