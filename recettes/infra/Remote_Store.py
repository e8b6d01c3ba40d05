"""Remote plan document store interface and an in-memory implementation.

A remote store keeps one plan document per authenticated identity and
supports get, set (whole-document overwrite) and subscribe. A subscription
is an async iterator of full-document snapshots with an explicit close().

The in-memory store mirrors the behaviour of a hosted document database:
subscribing yields the current document first, and every completed write
(including the subscriber's own) is delivered to all subscribers of that
identity.
"""
from __future__ import annotations
import asyncio
import copy
import logging
from collections import defaultdict
from typing import Any, AsyncIterator, Dict, Optional, Set

logger = logging.getLogger(__name__)

Document = Dict[str, Any]


class RemoteStoreError(Exception):
    """Any failure talking to the remote store (network, auth, server)."""


class DocumentSubscription:
    """Async iterator over snapshots; stop it with close()."""

    def __aiter__(self) -> AsyncIterator[Document]:
        return self

    async def __anext__(self) -> Document:
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError


class DocumentStore:
    async def get(self, identity: str) -> Optional[Document]:
        """Return the identity's document, or None if it does not exist."""
        raise NotImplementedError

    async def set(self, identity: str, document: Document) -> None:
        """Overwrite the identity's document."""
        raise NotImplementedError

    def subscribe(self, identity: str) -> DocumentSubscription:
        raise NotImplementedError

    async def aclose(self) -> None:
        """Release connections held by the store."""


_CLOSED = object()


class QueueSubscription(DocumentSubscription):
    def __init__(self, store: "InMemoryDocumentStore", identity: str):
        self._store = store
        self.identity = identity
        self.queue: asyncio.Queue = asyncio.Queue()
        self.closed = False

    async def __anext__(self) -> Document:
        if self.closed:
            raise StopAsyncIteration
        item = await self.queue.get()
        if item is _CLOSED:
            raise StopAsyncIteration
        return item

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._store._detach(self)
        self.queue.put_nowait(_CLOSED)


class InMemoryDocumentStore(DocumentStore):
    def __init__(self, documents: Optional[Dict[str, Document]] = None):
        self._documents: Dict[str, Document] = copy.deepcopy(documents) if documents else {}
        self._subscribers: Dict[str, Set[QueueSubscription]] = defaultdict(set)
        self.writes = 0

    async def get(self, identity: str) -> Optional[Document]:
        document = self._documents.get(identity)
        return copy.deepcopy(document) if document is not None else None

    async def set(self, identity: str, document: Document) -> None:
        self._documents[identity] = copy.deepcopy(document)
        self.writes += 1
        logger.debug("Stored plan document for %s (%d subscribers)", identity, len(self._subscribers[identity]))
        for subscription in list(self._subscribers[identity]):
            subscription.queue.put_nowait(copy.deepcopy(document))

    def subscribe(self, identity: str) -> QueueSubscription:
        subscription = QueueSubscription(self, identity)
        self._subscribers[identity].add(subscription)
        if identity in self._documents:
            subscription.queue.put_nowait(copy.deepcopy(self._documents[identity]))
        return subscription

    def subscriber_count(self, identity: str) -> int:
        return len(self._subscribers.get(identity, ()))

    def _detach(self, subscription: QueueSubscription) -> None:
        self._subscribers[subscription.identity].discard(subscription)
