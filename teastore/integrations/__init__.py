"""Integrations package - clients for the hosted backend, auth, payments and storage."""

from teastore.integrations.kv_store import (
    KeyValueStore,
    MemoryKeyValueStore,
    RedisKeyValueStore,
    create_kv_store,
)
from teastore.integrations.payment_service import (
    PaymentService,
    PaymentSheet,
    PaymentSheetError,
    PaymentSheetResult,
    PaymentSheetStatus,
)
from teastore.integrations.supabase_auth import AuthEvent, AuthSession, SupabaseAuthClient
from teastore.integrations.supabase_data import BackendError, BackendResult, SupabaseDataClient

__all__ = [
    "AuthEvent",
    "AuthSession",
    "BackendError",
    "BackendResult",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "PaymentService",
    "PaymentSheet",
    "PaymentSheetError",
    "PaymentSheetResult",
    "PaymentSheetStatus",
    "RedisKeyValueStore",
    "SupabaseAuthClient",
    "SupabaseDataClient",
    "create_kv_store",
]
