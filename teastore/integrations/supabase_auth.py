"""
Authentication service client (Supabase GoTrue REST API).

Sessions are persisted in the key-value store so a restart keeps the user
signed in, refreshed shortly before expiry, and broadcast to listeners
registered with ``on_session_change``.
"""
from __future__ import annotations

import asyncio
import json
import time
from dataclasses import asdict, dataclass
from typing import Any, Callable

import aiohttp

from teastore.core.config import SupabaseConfig
from teastore.core.constants import AUTH_SESSION_STORAGE_KEY, SESSION_REFRESH_MARGIN_SECONDS
from teastore.core.exceptions import AuthException
from teastore.core.subscriptions import ListenerRegistry, Subscription
from teastore.integrations.http_client import HttpClient, decode_body, error_message
from teastore.integrations.kv_store import KeyValueStore
from teastore.logging_config import logger


class AuthEvent:
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"


@dataclass(frozen=True, slots=True)
class AuthSession:
    access_token: str
    refresh_token: str
    expires_at: float
    user_id: str
    email: str | None = None

    @property
    def expired(self) -> bool:
        return time.time() >= self.expires_at - SESSION_REFRESH_MARGIN_SECONDS

    @classmethod
    def from_token_response(cls, data: dict[str, Any]) -> AuthSession:
        user = data.get("user") or {}
        try:
            expires_at = data.get("expires_at") or time.time() + float(data.get("expires_in") or 3600)
            return cls(
                access_token=str(data["access_token"]),
                refresh_token=str(data["refresh_token"]),
                expires_at=float(expires_at),
                user_id=str(user["id"]),
                email=user.get("email"),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise AuthException(f"Malformed auth response: {exc}") from exc

    def to_json(self) -> str:
        return json.dumps(asdict(self))

    @classmethod
    def from_json(cls, raw: str) -> AuthSession | None:
        try:
            data = json.loads(raw)
            return cls(**data)
        except (TypeError, ValueError):
            return None


SessionListener = Callable[[str, "AuthSession | None"], None]


class SupabaseAuthClient(HttpClient):
    """Email/password auth with persisted, auto-refreshed sessions."""

    def __init__(
        self,
        config: SupabaseConfig,
        storage: KeyValueStore,
        *,
        session: aiohttp.ClientSession | None = None,
        storage_key: str = AUTH_SESSION_STORAGE_KEY,
    ):
        super().__init__(timeout=config.timeout, session=session)
        self._base_url = config.auth_url
        self._anon_key = config.anon_key
        self._storage = storage
        self._storage_key = storage_key
        self._current: AuthSession | None = None
        self._restored = False
        self._listeners: ListenerRegistry[tuple[str, AuthSession | None]] = ListenerRegistry()

    def _headers(self, access_token: str | None = None) -> dict[str, str]:
        return {
            "apikey": self._anon_key,
            "Authorization": f"Bearer {access_token or self._anon_key}",
            "Content-Type": "application/json",
        }

    async def _post(self, path: str, payload: dict[str, Any] | None, *, access_token: str | None = None) -> Any:
        url = f"{self._base_url}/{path}"
        try:
            session = self._get_session()
            async with session.post(url, json=payload or {}, headers=self._headers(access_token)) as resp:
                body = decode_body(await resp.text())
                if resp.status >= 400:
                    raise AuthException(error_message(body, resp.status))
                return body
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise AuthException(f"Auth service unavailable: {exc}") from exc

    async def _set_session(self, event: str, new_session: AuthSession | None) -> None:
        self._current = new_session
        try:
            if new_session is None:
                await self._storage.remove(self._storage_key)
            else:
                await self._storage.set(self._storage_key, new_session.to_json())
        except Exception as exc:
            logger.warning("Failed to persist auth session: %s", exc)
        self._listeners.notify((event, new_session))

    async def _restore(self) -> None:
        if self._restored:
            return
        self._restored = True
        try:
            raw = await self._storage.get(self._storage_key)
        except Exception as exc:
            logger.warning("Failed to read stored auth session: %s", exc)
            return
        if raw:
            self._current = AuthSession.from_json(raw)

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        data = await self._post("token?grant_type=password", {"email": email, "password": password})
        new_session = AuthSession.from_token_response(data)
        await self._set_session(AuthEvent.SIGNED_IN, new_session)
        logger.info("User %s signed in", new_session.user_id)
        return new_session

    async def sign_up(self, email: str, password: str) -> AuthSession | None:
        """Register a user; returns a session unless email confirmation is pending."""
        data = await self._post("signup", {"email": email, "password": password})
        if isinstance(data, dict) and data.get("access_token"):
            new_session = AuthSession.from_token_response(data)
            await self._set_session(AuthEvent.SIGNED_IN, new_session)
            return new_session
        return None

    async def refresh_session(self) -> AuthSession | None:
        await self._restore()
        if self._current is None:
            return None
        data = await self._post(
            "token?grant_type=refresh_token",
            {"refresh_token": self._current.refresh_token},
        )
        new_session = AuthSession.from_token_response(data)
        await self._set_session(AuthEvent.TOKEN_REFRESHED, new_session)
        return new_session

    async def get_current_session(self) -> AuthSession | None:
        """Current session, refreshed when close to expiry; ``None`` when signed out."""
        await self._restore()
        current = self._current
        if current is None or not current.expired:
            return current
        try:
            return await self.refresh_session()
        except AuthException as exc:
            logger.warning("Session refresh failed, signing out locally: %s", exc)
            await self._set_session(AuthEvent.SIGNED_OUT, None)
            return None

    async def access_token(self) -> str | None:
        current = await self.get_current_session()
        return current.access_token if current else None

    def on_session_change(self, callback: SessionListener) -> Subscription:
        return self._listeners.subscribe(lambda change: callback(*change))

    async def sign_out(self) -> None:
        await self._restore()
        current = self._current
        if current is not None:
            try:
                await self._post("logout", None, access_token=current.access_token)
            except AuthException as exc:
                # local sign-out still proceeds; the token simply expires server-side
                logger.warning("Remote sign-out failed: %s", exc)
        await self._set_session(AuthEvent.SIGNED_OUT, None)
