"""Shared aiohttp session handling for the REST integrations."""
from __future__ import annotations

import json
from typing import Any

import aiohttp

from teastore.core.constants import HTTP_TIMEOUT_SECONDS


class HttpClient:
    """Owns one lazily created ``aiohttp.ClientSession``."""

    def __init__(self, timeout: float = HTTP_TIMEOUT_SECONDS, session: aiohttp.ClientSession | None = None):
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


def decode_body(text: str) -> Any:
    """Decode a JSON body; empty bodies (204, return=minimal) decode to ``None``."""
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return text


def error_message(body: Any, status: int) -> str:
    if isinstance(body, dict):
        for key in ("message", "msg", "error_description", "error"):
            value = body.get(key)
            if value:
                return str(value)
    if isinstance(body, str) and body:
        return body
    return f"HTTP {status}"
