# billed/store.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol

import httpx

from .config import settings
from .errors import StoreError

logger = logging.getLogger(__name__)


# -----------------------------
# Collaborator interfaces
# -----------------------------
class BillCollection(Protocol):
    async def create(self, data: Dict[str, Any], headers: Optional[dict] = None) -> Dict[str, Any]: ...

    async def update(self, data: str, selector: str, headers: Optional[dict] = None) -> Dict[str, Any]: ...

    async def list(self, params: Optional[dict] = None) -> List[Dict[str, Any]]: ...


class BillStore(Protocol):
    def bills(self) -> BillCollection: ...


# -----------------------------
# HTTP implementation
# -----------------------------
class Api:
    """
    Thin async HTTP wrapper around the bills API.
    Non-2xx answers raise StoreError("Erreur <status>"), transport failures
    raise StoreError("Erreur réseau").
    """

    def __init__(
        self,
        base_url: str,
        jwt: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.jwt = jwt
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout or settings.API_TIMEOUT)

    def _headers(self, headers: Optional[dict], json_body: bool) -> dict:
        h: Dict[str, str] = {}
        if json_body:
            h["Content-Type"] = "application/json"
        if self.jwt:
            h["Authorization"] = f"Bearer {self.jwt}"
        h.update(headers or {})
        return h

    async def request(self, method: str, path: str, *, headers: Optional[dict] = None,
                      json_body: bool = True, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        try:
            resp = await self.client.request(method, url, headers=self._headers(headers, json_body), **kwargs)
        except httpx.RequestError as exc:
            logger.exception("Request to %s %s failed", method, url)
            raise StoreError("Erreur réseau", detail=str(exc)) from exc

        if resp.status_code >= 400:
            try:
                detail = resp.json()
            except ValueError:
                detail = resp.text
            logger.error("Error response %s from %s %s: %s", resp.status_code, method, url, detail)
            raise StoreError.from_status(resp.status_code, detail)
        return resp.json()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()


class ApiEntity:
    def __init__(self, key: str, api: Api):
        self.key = key
        self.api = api

    async def select(self, selector: str, headers: Optional[dict] = None) -> Dict[str, Any]:
        return await self.api.request("GET", f"/{self.key}/{selector}", headers=headers)

    async def list(self, params: Optional[dict] = None, headers: Optional[dict] = None) -> List[Dict[str, Any]]:
        return await self.api.request("GET", f"/{self.key}", headers=headers, params=params)

    async def create(self, data: Dict[str, Any], headers: Optional[dict] = None) -> Dict[str, Any]:
        # tuples are file parts: (name, content, content_type)
        files = {k: v for k, v in data.items() if isinstance(v, tuple)}
        fields = {k: v for k, v in data.items() if not isinstance(v, tuple)}
        return await self.api.request(
            "POST", f"/{self.key}", headers=headers, json_body=False, data=fields, files=files or None,
        )

    async def update(self, data: str, selector: str, headers: Optional[dict] = None) -> Dict[str, Any]:
        return await self.api.request("PATCH", f"/{self.key}/{selector}", headers=headers, content=data)


class Store:
    def __init__(self, base_url: Optional[str] = None, jwt: Optional[str] = None,
                 client: Optional[httpx.AsyncClient] = None):
        self.api = Api(base_url or settings.API_URL, jwt=jwt, client=client)

    def bills(self) -> ApiEntity:
        return ApiEntity("bills", self.api)

    async def aclose(self) -> None:
        await self.api.aclose()

    async def __aenter__(self) -> "Store":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()
