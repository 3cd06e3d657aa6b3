"""Async PostgREST client for the Supabase project backing MediPass.

This is the single point of Supabase HTTP interaction. It covers the
three calls the document store needs: filtered select, insert/upsert and
RPC. Filters are simple equality matches.
"""

from __future__ import annotations

from typing import Any, Mapping

import httpx

from .errors import SupabaseError, error_for_status

DEFAULT_TIMEOUT_SECONDS = 10.0


class SupabaseClient:
    """Minimal async PostgREST client authenticated with the service-role key."""

    def __init__(
        self,
        *,
        supabase_url: str,
        service_role_key: str,
        schema: str = "public",
        http_client: httpx.AsyncClient | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        if not supabase_url:
            raise ValueError("supabase_url is required")
        if not service_role_key:
            raise ValueError("service_role_key is required")

        self._supabase_url = supabase_url.rstrip("/")
        self._service_role_key = service_role_key
        self._schema = schema or "public"
        self._timeout_seconds = float(timeout_seconds)
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient()

    @property
    def base_rest_url(self) -> str:
        return f"{self._supabase_url}/rest/v1"

    def _headers(self, method: str, *, prefer: str | None = None) -> dict[str, str]:
        # Never log these headers.
        headers = {
            "apikey": self._service_role_key,
            "Authorization": f"Bearer {self._service_role_key}",
            "Accept-Profile": self._schema,
        }
        if method != "GET":
            headers["Content-Profile"] = self._schema
        if prefer:
            headers["Prefer"] = prefer
        return headers

    @staticmethod
    def _raise_for_error(resp: httpx.Response) -> None:
        if resp.status_code < 400:
            return

        message = resp.text
        code = details = None
        try:
            payload = resp.json()
            if isinstance(payload, dict):
                message = payload.get("message") or message
                code = payload.get("code")
                details = payload.get("details")
        except ValueError:
            pass

        raise error_for_status(resp.status_code)(
            status_code=resp.status_code,
            message=message,
            code=code,
            details=details,
        )

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        resp = await self._client.request(
            method,
            f"{self.base_rest_url}/{path}",
            timeout=self._timeout_seconds,
            **kwargs,
        )
        self._raise_for_error(resp)
        if not resp.content:
            return None
        return resp.json()

    async def select(
        self,
        table: str,
        match: Mapping[str, Any] | None = None,
        *,
        columns: str = "*",
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        params = {col: f"eq.{val}" for col, val in (match or {}).items()}
        params["select"] = columns
        if limit is not None:
            params["limit"] = str(int(limit))

        payload = await self._request(
            "GET", table, params=params, headers=self._headers("GET"),
        )
        if not isinstance(payload, list):
            raise SupabaseError(status_code=500, message="expected list response from select")
        return payload

    async def insert(
        self,
        table: str,
        row: Mapping[str, Any],
        *,
        upsert: bool = False,
    ) -> list[dict[str, Any]]:
        prefer = "return=representation"
        if upsert:
            prefer += ",resolution=merge-duplicates"
        payload = await self._request(
            "POST", table, json=dict(row), headers=self._headers("POST", prefer=prefer),
        )
        if not isinstance(payload, list):
            raise SupabaseError(status_code=500, message="expected list response from insert")
        return payload

    async def rpc(self, function_name: str, params: Mapping[str, Any] | None = None) -> Any:
        return await self._request(
            "POST",
            f"rpc/{function_name}",
            json=dict(params or {}),
            headers=self._headers("POST"),
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
