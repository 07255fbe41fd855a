"""
Backend data service client (PostgREST / Supabase REST API).

Every call returns a ``BackendResult`` with either ``data`` or ``error``;
HTTP and network failures never raise, callers check ``error`` explicitly.

Filters are equality matches: ``{"id": 5}`` becomes ``id=eq.5``.
"""
from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Sequence

import aiohttp

from teastore.core.config import SupabaseConfig
from teastore.integrations.http_client import HttpClient, decode_body, error_message
from teastore.logging_config import logger

TokenProvider = Callable[[], Awaitable[str | None]]

SINGLE_OBJECT_MEDIA_TYPE = "application/vnd.pgrst.object+json"


@dataclass(frozen=True, slots=True)
class BackendError:
    message: str
    code: str | None = None
    status: int | None = None


@dataclass(frozen=True, slots=True)
class BackendResult:
    data: Any = None
    error: BackendError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def __iter__(self):
        # allows ``data, error = await client.select(...)``
        yield self.data
        yield self.error


def _filter_value(value: Any) -> str:
    if value is None:
        return "is.null"
    if isinstance(value, bool):
        return f"eq.{str(value).lower()}"
    if isinstance(value, (list, tuple, set)):
        joined = ",".join(json.dumps(str(item)) for item in value)
        return f"in.({joined})"
    return f"eq.{value}"


def build_params(
    filters: Mapping[str, Any] | None = None,
    *,
    columns: str | None = None,
    order: str | None = None,
    limit: int | None = None,
    on_conflict: str | None = None,
) -> dict[str, str]:
    params: dict[str, str] = {}
    if columns:
        params["select"] = columns
    for column, value in (filters or {}).items():
        params[column] = _filter_value(value)
    if order:
        params["order"] = order
    if limit is not None:
        params["limit"] = str(int(limit))
    if on_conflict:
        params["on_conflict"] = on_conflict
    return params


class SupabaseDataClient(HttpClient):
    """Async REST client for the hosted database collections."""

    def __init__(
        self,
        config: SupabaseConfig,
        *,
        token_provider: TokenProvider | None = None,
        session: aiohttp.ClientSession | None = None,
    ):
        super().__init__(timeout=config.timeout, session=session)
        self._base_url = config.rest_url
        self._anon_key = config.anon_key
        self._token_provider = token_provider

    async def _headers(self, *, prefer: str | None = None, single: bool = False) -> dict[str, str]:
        token = None
        if self._token_provider is not None:
            token = await self._token_provider()
        headers = {
            "apikey": self._anon_key,
            "Authorization": f"Bearer {token or self._anon_key}",
            "Content-Type": "application/json",
            "Accept": SINGLE_OBJECT_MEDIA_TYPE if single else "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    async def _request(
        self,
        method: str,
        table: str,
        *,
        params: dict[str, str] | None = None,
        payload: Any = None,
        prefer: str | None = None,
        single: bool = False,
    ) -> BackendResult:
        url = f"{self._base_url}/{table}"
        try:
            headers = await self._headers(prefer=prefer, single=single)
            session = self._get_session()
            async with session.request(
                method,
                url,
                params=params,
                data=json.dumps(payload) if payload is not None else None,
                headers=headers,
            ) as resp:
                body = decode_body(await resp.text())
                if resp.status >= 400:
                    code = body.get("code") if isinstance(body, dict) else None
                    error = BackendError(error_message(body, resp.status), code=code, status=resp.status)
                    logger.error("Backend %s %s failed: %s", method, table, error.message)
                    return BackendResult(error=error)
                return BackendResult(data=body)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.error("Backend %s %s network error: %s", method, table, exc)
            return BackendResult(error=BackendError(str(exc) or exc.__class__.__name__))

    async def select(
        self,
        table: str,
        columns: str = "*",
        *,
        filters: Mapping[str, Any] | None = None,
        order: str | None = None,
        limit: int | None = None,
        single: bool = False,
    ) -> BackendResult:
        params = build_params(filters, columns=columns, order=order, limit=limit)
        return await self._request("GET", table, params=params, single=single)

    async def insert(
        self,
        table: str,
        rows: Mapping[str, Any] | Sequence[Mapping[str, Any]],
        *,
        returning: bool = True,
        single: bool = False,
    ) -> BackendResult:
        prefer = "return=representation" if returning else "return=minimal"
        return await self._request(
            "POST",
            table,
            params={"select": "*"} if returning else None,
            payload=rows,
            prefer=prefer,
            single=single,
        )

    async def upsert(
        self,
        table: str,
        rows: Mapping[str, Any] | Sequence[Mapping[str, Any]],
        *,
        on_conflict: str | None = None,
    ) -> BackendResult:
        return await self._request(
            "POST",
            table,
            params=build_params(on_conflict=on_conflict) or None,
            payload=rows,
            prefer="resolution=merge-duplicates,return=representation",
        )

    async def update(
        self,
        table: str,
        values: Mapping[str, Any],
        *,
        filters: Mapping[str, Any],
    ) -> BackendResult:
        if not filters:
            return BackendResult(error=BackendError("update without filters is not allowed"))
        return await self._request(
            "PATCH",
            table,
            params=build_params(filters),
            payload=dict(values),
            prefer="return=representation",
        )

    async def delete(self, table: str, *, filters: Mapping[str, Any]) -> BackendResult:
        if not filters:
            return BackendResult(error=BackendError("delete without filters is not allowed"))
        return await self._request("DELETE", table, params=build_params(filters), prefer="return=minimal")
