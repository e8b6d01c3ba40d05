import asyncio

import pytest

from recettes.domain.Catalog import RecipeCatalog
from recettes.domain.Plan import Plan, PlanEntry
from recettes.domain.Recipe import Recipe
from recettes.events.Event_Bus import EventBus, PLAN_REPLACED, SYNC_FAILED
from recettes.infra.Local_Cache import LocalCache
from recettes.infra.Plan_Repository import PlanRepository
from recettes.infra.Remote_Store import InMemoryDocumentStore, RemoteStoreError
from recettes.logic.planning.session import PlanSession

DEBOUNCE = 0.01

SOUP = {"id": "soupe", "titre": "Soupe", "portions": 4,
        "ingredients": {"base": [{"nom": "carotte", "quantite": 400, "unite": "g"}]}}
SALAD = {"id": "salade", "titre": "Salade", "portions": 2,
         "ingredients": {"base": [{"nom": "sel", "quantite_par_personne": 1, "unite": "g"}]}}


class SlowStore(InMemoryDocumentStore):
    """Holds get() until released, to interleave identity changes with reconciliation."""

    def __init__(self, documents=None):
        super().__init__(documents)
        self.release = asyncio.Event()

    async def get(self, identity):
        await self.release.wait()
        return await super().get(identity)


class WriteFailingStore(InMemoryDocumentStore):
    async def set(self, identity, document):
        raise RemoteStoreError("offline")


class ReadFailingStore(InMemoryDocumentStore):
    async def get(self, identity):
        raise RemoteStoreError("offline")


async def settle():
    await asyncio.sleep(DEBOUNCE * 5)


@pytest.fixture
def catalog():
    return RecipeCatalog([Recipe.from_dict(SOUP), Recipe.from_dict(SALAD)])


@pytest.fixture
def repository(tmp_path):
    return PlanRepository(LocalCache(tmp_path))


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def events(bus):
    recorded = []
    for name in (PLAN_REPLACED, SYNC_FAILED):
        bus.subscribe(name, lambda event, payload: recorded.append((event, payload)))
    return recorded


def make_session(catalog, repository, remote, bus):
    return PlanSession(catalog, repository, remote, bus=bus, debounce_seconds=DEBOUNCE).start()


@pytest.mark.asyncio
async def test_signed_out_writes_go_to_local_cache_immediately(catalog, repository, bus):
    remote = InMemoryDocumentStore()
    session = make_session(catalog, repository, remote, bus)
    session.store.add("soupe")
    assert repository.load() == session.plan
    assert not session.write_pending
    assert remote.writes == 0
    assert [line.name for line in session.ledger] == ["carotte"]
    await session.close()


@pytest.mark.asyncio
async def test_start_adopts_cached_plan(catalog, repository, bus):
    repository.save(Plan([PlanEntry("salade", 3)]))
    session = make_session(catalog, repository, None, bus)
    assert session.plan == Plan([PlanEntry("salade", 3)])
    assert session.ledger[0].quantity == 3
    await session.close()


@pytest.mark.asyncio
async def test_empty_remote_is_initialized_from_local_plan(catalog, repository, bus):
    remote = InMemoryDocumentStore()
    session = make_session(catalog, repository, remote, bus)
    session.store.add("soupe")
    await session.on_identity_changed("alice")
    assert session.authenticated
    assert await remote.get("alice") == session.plan.to_dict()
    assert len(session.plan) == 1
    await session.close()


@pytest.mark.asyncio
async def test_existing_remote_plan_wins_and_is_cached(catalog, repository, bus, events):
    remote_plan = Plan([PlanEntry("salade", 5, {})])
    remote = InMemoryDocumentStore({"alice": remote_plan.to_dict()})
    session = make_session(catalog, repository, remote, bus)
    session.store.add("soupe")
    await session.on_identity_changed("alice")
    assert session.plan == remote_plan
    assert repository.load() == remote_plan
    assert session.ledger[0].quantity == 5
    assert events[-1][1]["source"] == "remote"
    await session.close()


@pytest.mark.asyncio
async def test_malformed_remote_plan_is_ignored(catalog, repository, bus):
    remote = InMemoryDocumentStore({"alice": {"items": [{"servings": 2}]}})
    session = make_session(catalog, repository, remote, bus)
    session.store.add("soupe")
    await session.on_identity_changed("alice")
    assert session.plan.get("soupe") is not None
    await session.close()


@pytest.mark.asyncio
async def test_burst_of_edits_produces_one_remote_write(catalog, repository, bus):
    remote = InMemoryDocumentStore({"alice": {"items": []}})
    session = make_session(catalog, repository, remote, bus)
    await session.on_identity_changed("alice")
    writes_before = remote.writes
    session.store.add("soupe")
    session.store.set_servings("soupe", 5)
    session.store.set_servings("soupe", 6)
    session.store.add("salade")
    assert session.write_pending
    await settle()
    assert remote.writes == writes_before + 1
    assert await remote.get("alice") == session.plan.to_dict()
    await session.close()


@pytest.mark.asyncio
async def test_own_write_echo_does_not_replace_plan(catalog, repository, bus, events):
    remote = InMemoryDocumentStore({"alice": {"items": []}})
    session = make_session(catalog, repository, remote, bus)
    await session.on_identity_changed("alice")
    replaced_before = len([e for e in events if e[0] == PLAN_REPLACED])
    session.store.add("soupe")
    await settle()
    assert len([e for e in events if e[0] == PLAN_REPLACED]) == replaced_before
    assert session.plan.get("soupe").servings_requested == 4
    await session.close()


@pytest.mark.asyncio
async def test_external_change_is_applied(catalog, repository, bus):
    remote = InMemoryDocumentStore({"alice": {"items": []}})
    session = make_session(catalog, repository, remote, bus)
    await session.on_identity_changed("alice")
    other_device = Plan([PlanEntry("salade", 4)])
    await remote.set("alice", other_device.to_dict())
    await settle()
    assert session.plan == other_device
    assert session.ledger[0].quantity == 4
    assert repository.load() == other_device
    await session.close()


@pytest.mark.asyncio
async def test_snapshot_ignored_while_local_write_pending(catalog, repository, bus):
    remote = InMemoryDocumentStore({"alice": {"items": []}})
    session = make_session(catalog, repository, remote, bus)
    await session.on_identity_changed("alice")
    session.store.add("soupe")
    assert session.apply_remote_snapshot({"items": []}) is False
    assert session.plan.get("soupe") is not None
    await settle()
    assert (await remote.get("alice"))["items"][0]["recipe_id"] == "soupe"
    await session.close()


@pytest.mark.asyncio
async def test_sign_out_detaches_subscription_and_persists_locally(catalog, repository, bus):
    remote = InMemoryDocumentStore({"alice": {"items": []}})
    session = make_session(catalog, repository, remote, bus)
    await session.on_identity_changed("alice")
    assert remote.subscriber_count("alice") == 1
    session.store.add("soupe")
    await session.on_identity_changed(None)
    assert remote.subscriber_count("alice") == 0
    assert not session.authenticated
    assert not session.write_pending
    # Pending remote write was cancelled; the local cache has the plan
    assert repository.load() == session.plan
    writes = remote.writes
    session.store.add("salade")
    await settle()
    assert remote.writes == writes
    assert repository.load().get("salade") is not None
    await session.close()


@pytest.mark.asyncio
async def test_stale_reconciliation_is_discarded(catalog, repository, bus):
    remote = SlowStore({"alice": Plan([PlanEntry("salade", 8)]).to_dict()})
    session = make_session(catalog, repository, remote, bus)
    session.store.add("soupe")
    sign_in = asyncio.create_task(session.on_identity_changed("alice"))
    await asyncio.sleep(0)
    await session.on_identity_changed(None)
    remote.release.set()
    await sign_in
    assert session.plan.get("soupe") is not None
    assert session.plan.get("salade") is None
    assert remote.subscriber_count("alice") == 0
    await session.close()


@pytest.mark.asyncio
async def test_resigning_in_during_stale_fetch_keeps_one_subscription(catalog, repository, bus):
    remote = SlowStore({"alice": Plan([PlanEntry("salade", 8)]).to_dict()})
    session = make_session(catalog, repository, remote, bus)
    first = asyncio.create_task(session.on_identity_changed("alice"))
    await asyncio.sleep(0)
    await session.on_identity_changed(None)
    second = asyncio.create_task(session.on_identity_changed("alice"))
    await asyncio.sleep(0)
    remote.release.set()
    await asyncio.gather(first, second)
    assert session.authenticated
    assert session.plan == Plan([PlanEntry("salade", 8)])
    assert remote.subscriber_count("alice") == 1
    await session.close()
    assert remote.subscriber_count("alice") == 0


@pytest.mark.asyncio
async def test_switching_identity_follows_new_document(catalog, repository, bus):
    remote = InMemoryDocumentStore({
        "alice": Plan([PlanEntry("soupe", 2)]).to_dict(),
        "bob": Plan([PlanEntry("salade", 6)]).to_dict(),
    })
    session = make_session(catalog, repository, remote, bus)
    await session.on_identity_changed("alice")
    await session.on_identity_changed("bob")
    assert session.plan == Plan([PlanEntry("salade", 6)])
    assert remote.subscriber_count("alice") == 0
    assert remote.subscriber_count("bob") == 1
    await session.close()


@pytest.mark.asyncio
async def test_remote_write_failure_falls_back_to_local_cache(catalog, repository, bus, events):
    remote = WriteFailingStore({"alice": {"items": []}})
    session = make_session(catalog, repository, remote, bus)
    await session.on_identity_changed("alice")
    session.store.add("soupe")
    await settle()
    failures = [payload for name, payload in events if name == SYNC_FAILED]
    assert failures and failures[-1]["operation"] == "set"
    assert failures[-1]["identity"] == "alice"
    assert repository.load() == session.plan
    await session.close()


@pytest.mark.asyncio
async def test_failed_fetch_keeps_local_plan_and_still_subscribes(catalog, repository, bus, events):
    remote = ReadFailingStore()
    session = make_session(catalog, repository, remote, bus)
    session.store.add("soupe")
    await session.on_identity_changed("alice")
    assert session.plan.get("soupe") is not None
    assert [payload["operation"] for name, payload in events if name == SYNC_FAILED] == ["get"]
    assert remote.subscriber_count("alice") == 1
    await session.close()


@pytest.mark.asyncio
async def test_identity_without_remote_stays_local(catalog, repository, bus):
    session = make_session(catalog, repository, None, bus)
    await session.on_identity_changed("alice")
    assert not session.authenticated
    session.store.add("soupe")
    assert repository.load() == session.plan
    await session.close()


@pytest.mark.asyncio
async def test_close_flushes_pending_write(catalog, repository, bus):
    remote = InMemoryDocumentStore({"alice": {"items": []}})
    session = PlanSession(catalog, repository, remote, bus=bus, debounce_seconds=10).start()
    await session.on_identity_changed("alice")
    session.store.add("salade")
    await session.close()
    assert (await remote.get("alice")) == session.plan.to_dict()
    assert remote.subscriber_count("alice") == 0


@pytest.mark.asyncio
async def test_catalog_change_recomputes_ledger(catalog, repository, bus):
    session = make_session(catalog, repository, None, bus)
    session.store.add("soupe")
    session.store.add("salade")
    session.set_catalog(RecipeCatalog([Recipe.from_dict(SALAD)]))
    assert [line.name for line in session.ledger] == ["sel"]
    await session.close()
