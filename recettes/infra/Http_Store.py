"""HTTP-backed remote plan store.

Documents live at ``<base_url>/<collection>/<identity>``: GET returns the
document (404 when it does not exist), PUT overwrites it. Subscriptions poll
the document and yield a snapshot whenever the fetched content changes.
"""
from __future__ import annotations
import asyncio
import logging
from typing import Optional

import httpx

from recettes.infra.Remote_Store import Document, DocumentStore, DocumentSubscription, RemoteStoreError
from recettes.utilities.constants import REMOTE_COLLECTION, REMOTE_POLL_SECONDS

logger = logging.getLogger(__name__)


class HttpDocumentStore(DocumentStore):
    def __init__(self, base_url: str, *, collection: str = REMOTE_COLLECTION, token: str = "",
                 poll_interval: float = REMOTE_POLL_SECONDS, client: Optional[httpx.AsyncClient] = None):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self.collection = collection
        self.poll_interval = poll_interval
        self._client = client or httpx.AsyncClient(base_url=base_url, headers=headers, timeout=10.0)

    def _url(self, identity: str) -> str:
        return f"/{self.collection}/{identity}"

    async def get(self, identity: str) -> Optional[Document]:
        try:
            response = await self._client.get(self._url(identity))
            if response.status_code == 404:
                return None
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise RemoteStoreError(f"GET {self._url(identity)} failed: {e}") from e

    async def set(self, identity: str, document: Document) -> None:
        try:
            response = await self._client.put(self._url(identity), json=document)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise RemoteStoreError(f"PUT {self._url(identity)} failed: {e}") from e

    def subscribe(self, identity: str) -> "PollingSubscription":
        return PollingSubscription(self, identity)

    async def aclose(self) -> None:
        await self._client.aclose()


class PollingSubscription(DocumentSubscription):
    """Polls the document and yields it whenever it differs from the last one yielded."""

    def __init__(self, store: HttpDocumentStore, identity: str):
        self._store = store
        self.identity = identity
        self._last: Optional[Document] = None
        self.closed = False

    async def __anext__(self) -> Document:
        first = self._last is None
        while not self.closed:
            if not first:
                await asyncio.sleep(self._store.poll_interval)
            first = False
            if self.closed:
                break
            try:
                document = await self._store.get(self.identity)
            except RemoteStoreError as e:
                logger.warning("Polling plan for %s failed: %s", self.identity, e)
                continue
            if document is not None and document != self._last:
                self._last = document
                return document
        raise StopAsyncIteration

    def close(self) -> None:
        self.closed = True
