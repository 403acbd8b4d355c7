# src/plump_rest/infra/rest_store.py
"""
RestStore: TerminalStorePort over a REST backend, with an optional Socket.IO
push channel for server-side change notifications.

Paths:
  GET    /{type}/{id}[?view=]          read_attributes    (deduplicated)
  GET    /{type}/{id}/{rel}            read_relationship  (deduplicated)
  GET    /{type}?<params>              query
  PATCH  /{type}/{id}                  write_attributes (update)
  POST   /{type}                       write_attributes (create, terminal only)
  PUT    /{type}/{id}/{rel}            write_relationship_item
  DELETE /{type}/{id}/{rel}/{childId}  delete_relationship_item
  DELETE /{type}/{id}                  delete

Read results are handed back only after every read update for the response
has been fired, so the cache has accepted the data before the caller sees it.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional, Union
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ConfigDict, Field

from plump_rest.config import settings
from plump_rest.errors import InvariantViolation, TransportFailure
from plump_rest.models import InvalidationSignal, ModelReference
from plump_rest.ports.storage import SchemaSource, UpdateSink
from .change_listener import ChangeListener, SocketChannel
from .dedup import RequestDeduplicator
from .normalize import DateNormalizer

logger = logging.getLogger(__name__)


class RestOptions(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True, extra="forbid")

    base_url: str = Field(default_factory=lambda: settings.BASE_URL)
    socket_url: Optional[str] = Field(default_factory=lambda: settings.SOCKET_URL)
    api_key: Optional[str] = Field(default_factory=lambda: settings.API_KEY)
    only_fire_socket_events: bool = Field(default_factory=lambda: settings.ONLY_FIRE_SOCKET_EVENTS)
    terminal: bool = Field(default_factory=lambda: settings.TERMINAL)
    client: Optional[httpx.AsyncClient] = None


def _seg(value: Any) -> str:
    return quote(str(value), safe="")


def _unwrap(body: Any) -> Any:
    """`{data, included}` envelope, or a bare record with `included` alongside."""
    if isinstance(body, dict):
        if "data" in body:
            return body["data"]
        return {k: v for k, v in body.items() if k != "included"}
    return body


def _json(response: httpx.Response) -> Any:
    if not response.content:
        return None
    return response.json()


class RestStore:
    """
    Storage adapter for a REST backend.

    schemas: where date-field declarations come from (SchemaSource)
    sink:    receives fire_read_update / fire_write_update (UpdateSink)
    """

    def __init__(
        self,
        schemas: SchemaSource,
        sink: UpdateSink,
        options: Optional[RestOptions] = None,
        **overrides: Any,
    ) -> None:
        opts = options or RestOptions()
        if overrides:
            opts = RestOptions.model_validate({**dict(opts), **overrides})
        self.options = opts
        self.terminal = opts.terminal
        self._sink = sink
        self._normalizer = DateNormalizer(schemas)

        headers = {"X-API-Key": opts.api_key} if opts.api_key else None
        self._owns_client = opts.client is None
        self.http = opts.client or httpx.AsyncClient(
            base_url=opts.base_url, headers=headers, timeout=None
        )
        self._reads = RequestDeduplicator(self._get)

        self.listener = ChangeListener(sink)
        self.updates: "asyncio.Queue[Any]" = asyncio.Queue()
        self.channel: Optional[SocketChannel] = None
        if opts.socket_url:
            self.channel = SocketChannel(opts.socket_url, self.updates, api_key=opts.api_key)
        self._listen_task: Optional[asyncio.Task] = None
        self._connect_task: Optional[asyncio.Task] = None

    # --- lifecycle ---
    async def start(self) -> "RestStore":
        if self._listen_task is None:
            self._listen_task = asyncio.create_task(self.listener.run(self.updates))
        if self.channel is not None and self._connect_task is None:
            # connects (and retries) in the background; the HTTP side works without it
            self._connect_task = asyncio.create_task(self.channel.connect())
        return self

    async def close(self) -> None:
        for task in (self._connect_task, self._listen_task):
            if task is not None:
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._connect_task = None
        self._listen_task = None
        if self.channel is not None:
            await self.channel.disconnect()
        if self._owns_client:
            await self.http.aclose()

    async def __aenter__(self) -> "RestStore":
        return await self.start()

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    # --- push channel ---
    def update_from_socket(self, data: Any) -> Optional[InvalidationSignal]:
        return self.listener.on_push(data)

    # --- plumbing ---
    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        logger.debug("%s %s", method, url)
        try:
            return await self.http.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise TransportFailure(f"{method} {url} failed: {e}", url=url) from e

    async def _get(self, url: str) -> httpx.Response:
        return await self._request("GET", url)

    @staticmethod
    def _check(response: httpx.Response) -> httpx.Response:
        if response.is_success:
            return response
        message = response.reason_phrase or f"HTTP {response.status_code}"
        try:
            # prefer the server's {"error": {"message": ...}} body when it sends one
            message = response.json()["error"]["message"]
        except (ValueError, KeyError, TypeError):
            pass
        raise TransportFailure(message, status=response.status_code, url=str(response.request.url))

    def _fire_included(self, body: Any) -> None:
        if isinstance(body, dict):
            for included in body.get("included") or []:
                self._sink.fire_read_update(self._normalizer.normalize(included))

    def _fire_write(self, type_: str, id_: Any, invalidate: List[str]) -> None:
        if not self.options.only_fire_socket_events:
            self._sink.fire_write_update(InvalidationSignal(type=type_, id=id_, invalidate=invalidate))

    # --- reads ---
    async def read_attributes(
        self, item: ModelReference, view: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        url = f"/{_seg(item.type)}/{_seg(item.id)}"
        if view:
            url = f"{url}?view={quote(view, safe='')}"
        response = await self._reads.acquire(url)
        if response.status_code == 404:
            return None
        body = _json(self._check(response))
        self._fire_included(body)
        record = _unwrap(body)
        if record is None:
            return None
        return self._normalizer.normalize(record)

    async def read_relationship(
        self, item: ModelReference, rel: str
    ) -> Union[Dict[str, Any], List[Any]]:
        url = f"/{_seg(item.type)}/{_seg(item.id)}/{_seg(rel)}"
        response = await self._reads.acquire(url)
        if response.status_code == 404:
            return []
        body = _json(self._check(response))
        self._fire_included(body)
        record = _unwrap(body)
        if record is None:
            return []
        return self._normalizer.normalize(record)

    async def query(self, type_: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        response = self._check(await self._request("GET", f"/{_seg(type_)}", params=params or None))
        body = _json(response)
        self._fire_included(body)
        return [self._normalizer.normalize(v) for v in _unwrap(body) or []]

    # --- writes ---
    async def write_attributes(self, value: Dict[str, Any]) -> Dict[str, Any]:
        type_ = value["type"]
        if value.get("id"):
            response = await self._request("PATCH", f"/{_seg(type_)}/{_seg(value['id'])}", json=value)
        elif self.terminal:
            response = await self._request("POST", f"/{_seg(type_)}", json=value)
        else:
            raise InvariantViolation("Cannot create new content in a non-terminal store")

        body = _unwrap(_json(self._check(response)))
        # an empty 2xx reply (e.g. 204 on PATCH) still committed the write
        result = body if isinstance(body, dict) else dict(value)
        id_ = result.get("id", value.get("id"))
        if id_ is None:
            logger.warning("create of %s returned no record id; no invalidation fired", type_)
        else:
            self._fire_write(result.get("type", type_), id_, ["attributes"])
        return result

    async def write_relationship_item(
        self, value: ModelReference, rel: str, child: Dict[str, Any]
    ) -> Any:
        url = f"/{_seg(value.type)}/{_seg(value.id)}/{_seg(rel)}"
        response = self._check(await self._request("PUT", url, json=child))
        self._fire_write(value.type, value.id, [f"relationships.{rel}"])
        return _json(response)

    async def delete_relationship_item(
        self, value: ModelReference, rel: str, child: Dict[str, Any]
    ) -> Any:
        url = f"/{_seg(value.type)}/{_seg(value.id)}/{_seg(rel)}/{_seg(child['id'])}"
        response = self._check(await self._request("DELETE", url))
        self._fire_write(value.type, value.id, [f"relationships.{rel}"])
        return _json(response)

    async def delete(self, value: ModelReference) -> Any:
        response = self._check(await self._request("DELETE", f"/{_seg(value.type)}/{_seg(value.id)}"))
        self._fire_write(value.type, value.id, ["attributes"])
        return _json(response)
