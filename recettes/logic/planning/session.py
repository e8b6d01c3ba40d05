"""Plan session: owns the plan store, its persistence and remote reconciliation.

Lifecycle:
  * start() adopts the locally cached plan (if any) and computes the ledger.
  * Every plan mutation recomputes the ledger and requests a save: a
    synchronous local-cache write when signed out, a debounced remote write
    when signed in.
  * on_identity_changed(identity) signs in (one-time reconciliation, then a
    standing subscription to the remote document) or signs out (subscription
    detached, local-cache persistence again).
  * close() flushes a pending remote write and detaches everything.
"""
from __future__ import annotations
import asyncio
import logging
from typing import List, Optional

from recettes.domain.Catalog import RecipeCatalog
from recettes.domain.Plan import Plan, PlanDocumentError
from recettes.domain.ShoppingList import ShoppingLedgerLine
from recettes.events.Event_Bus import EventBus, GLOBAL_EVENT_BUS, PLAN_CHANGED, PLAN_REPLACED
from recettes.events.event_helpers import publish_ledger_updated, publish_sync_failed
from recettes.infra.Plan_Repository import PlanRepository
from recettes.infra.Remote_Store import DocumentStore, DocumentSubscription, RemoteStoreError
from recettes.logic.planning.scheduler import DebouncedTask
from recettes.logic.planning.store import PlanStore
from recettes.logic.shopping.list_builder import build_shopping_list
from recettes.utilities.constants import SAVE_DEBOUNCE_SECONDS

logger = logging.getLogger(__name__)


class PlanSession:
    def __init__(self, catalog: RecipeCatalog, repository: PlanRepository,
                 remote: Optional[DocumentStore] = None, *, bus: Optional[EventBus] = None,
                 debounce_seconds: float = SAVE_DEBOUNCE_SECONDS):
        self.catalog = catalog
        self.repository = repository
        self.remote = remote
        self._event_bus = bus or GLOBAL_EVENT_BUS
        self.store = PlanStore(catalog, bus=self._event_bus)
        self.identity: Optional[str] = None
        self.ledger: List[ShoppingLedgerLine] = []
        self._subscription: Optional[DocumentSubscription] = None
        self._subscription_task: Optional[asyncio.Task] = None
        # Bumped on every identity change; reconciliations from older sign-ins are dropped
        self._sign_in_generation = 0
        self._writer = DebouncedTask(debounce_seconds, self._write_remote)
        self._event_bus.subscribe(PLAN_CHANGED, self._on_plan_changed)
        self._event_bus.subscribe(PLAN_REPLACED, self._on_plan_replaced)

    @property
    def plan(self) -> Plan:
        return self.store.plan

    @property
    def authenticated(self) -> bool:
        return self.identity is not None and self.remote is not None

    @property
    def write_pending(self) -> bool:
        return self._writer.pending

    def start(self) -> "PlanSession":
        '''Adopts the cached plan when one is usable and computes the first ledger.'''
        cached = self.repository.load()
        if cached is not None:
            logger.info("Loaded cached plan with %d entries", len(cached))
            self.store.replace(cached, "cache")
        else:
            self.refresh_ledger()
        return self

    def set_catalog(self, catalog: RecipeCatalog):
        self.catalog = catalog
        self.store.catalog = catalog
        self.refresh_ledger()

    def refresh_ledger(self) -> List[ShoppingLedgerLine]:
        self.ledger = build_shopping_list(self.plan, self.catalog)
        publish_ledger_updated(self.ledger, bus=self._event_bus)
        return self.ledger

    # --- Event handlers -----------------------------------------------------
    def _on_plan_changed(self, event_name, payload):
        self.refresh_ledger()
        self.persist()

    def _on_plan_replaced(self, event_name, payload):
        self.refresh_ledger()
        if payload.get('source') == 'remote':
            self.repository.save(self.plan)

    # --- Write path ---------------------------------------------------------
    def persist(self):
        '''Debounced remote write when signed in, immediate local write otherwise.'''
        if self.authenticated:
            self._writer.schedule()
            return
        self.repository.save(self.plan)

    async def _write_remote(self):
        identity = self.identity
        if identity is None or self.remote is None:
            self.repository.save(self.plan)
            return
        snapshot = self.plan.to_dict()
        try:
            await self.remote.set(identity, snapshot)
            logger.debug("Saved plan for %s (%d entries)", identity, len(snapshot["items"]))
        except RemoteStoreError as e:
            logger.error("Remote save failed for %s: %s", identity, e)
            publish_sync_failed("set", identity, e, bus=self._event_bus)
            self.repository.save(self.plan)

    # --- Identity -----------------------------------------------------------
    async def on_identity_changed(self, identity: Optional[str]):
        '''Handles sign-in (identity) and sign-out (None).'''
        if identity == self.identity:
            return
        previous = self.identity
        self._sign_in_generation += 1
        generation = self._sign_in_generation
        self._detach_subscription()
        if previous is not None:
            # Remote copy of the previous identity may now be stale; keep a local one
            self._writer.cancel()
            self.repository.save(self.plan)
        self.identity = identity
        if identity is None:
            logger.info("Signed out of %s; plan persisted locally only", previous)
            return
        if self.remote is None:
            logger.warning("Identity %s set but no remote store is configured; using local cache", identity)
            return
        await self._reconcile(identity, generation)
        if self._sign_in_generation == generation:
            self._attach_subscription(identity)

    async def _reconcile(self, identity: str, generation: int):
        try:
            document = await self.remote.get(identity)
        except RemoteStoreError as e:
            logger.error("Could not fetch remote plan for %s: %s", identity, e)
            publish_sync_failed("get", identity, e, bus=self._event_bus)
            return
        if self._sign_in_generation != generation:
            logger.info("Discarding stale reconciliation for %s", identity)
            return
        if document is None:
            try:
                await self.remote.set(identity, self.plan.to_dict())
                logger.info("Initialized remote plan for %s from local plan", identity)
            except RemoteStoreError as e:
                logger.error("Could not initialize remote plan for %s: %s", identity, e)
                publish_sync_failed("set", identity, e, bus=self._event_bus)
                self.repository.save(self.plan)
            return
        try:
            plan = Plan.from_document(document)
        except PlanDocumentError as e:
            logger.warning("Ignoring malformed remote plan for %s: %s", identity, e)
            return
        logger.info("Remote plan for %s replaces local plan", identity)
        self.store.replace(plan, "remote")

    # --- Subscription -------------------------------------------------------
    def apply_remote_snapshot(self, document) -> bool:
        '''
        Adopts a remote snapshot if it differs from the current plan.
        Snapshots arriving while a local write is pending are ignored: that
        write will overwrite the remote document with the newer local state.
        '''
        try:
            incoming = Plan.from_document(document)
        except PlanDocumentError as e:
            logger.warning("Ignoring malformed remote snapshot: %s", e)
            return False
        if incoming.to_dict() == self.plan.to_dict():
            return False
        if self._writer.pending:
            logger.debug("Remote snapshot ignored, local write pending")
            return False
        self.store.replace(incoming, "remote")
        return True

    def _attach_subscription(self, identity: str):
        self._detach_subscription()
        subscription = self.remote.subscribe(identity)
        self._subscription = subscription
        self._subscription_task = asyncio.get_running_loop().create_task(self._follow(identity, subscription))

    async def _follow(self, identity: str, subscription: DocumentSubscription):
        try:
            async for document in subscription:
                if self.identity != identity:
                    break
                self.apply_remote_snapshot(document)
        except RemoteStoreError as e:
            logger.error("Plan subscription for %s stopped: %s", identity, e)
            publish_sync_failed("subscribe", identity, e, bus=self._event_bus)
        finally:
            subscription.close()

    def _detach_subscription(self):
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None
        if self._subscription_task is not None:
            self._subscription_task.cancel()
            self._subscription_task = None

    async def close(self):
        await self._writer.flush()
        self._detach_subscription()
        self._event_bus.unsubscribe(PLAN_CHANGED, self._on_plan_changed)
        self._event_bus.unsubscribe(PLAN_REPLACED, self._on_plan_replaced)
