"""
Tests for the ModelRegistryCache.
"""
import threading

import pytest
from unittest.mock import MagicMock
from hypothesis import given, settings, strategies as st

from modellease_sdk.exceptions import LedgerUnavailableError, RegistryRefreshError
from modellease_sdk.ledger import LedgerClient
from modellease_sdk.models import Model, ModelRegistrySnapshot
from modellease_sdk.registry import ModelRegistryCache

model_strategy = st.tuples(
    st.text(max_size=30),
    st.integers(min_value=0, max_value=10**24),
    st.booleans()
)


def make_ledger(models, fail_on=None):
    """LedgerClient double serving ``models``; reads of ``fail_on`` ids raise."""
    fail_on = set(fail_on or ())
    ledger = MagicMock(spec=LedgerClient)
    ledger.get_model_count.side_effect = lambda: len(models)

    def get_model(i):
        if i in fail_on:
            raise LedgerUnavailableError(f"Failed to read model {i}")
        return Model.from_contract(i, models[i])

    ledger.get_model.side_effect = get_model
    return ledger


def test_initial_snapshot_is_empty():
    cache = ModelRegistryCache()
    assert len(cache.snapshot) == 0
    assert cache.get(0) is None


def test_refresh_scenario_a(fake_ledger):
    """count=2 with Summarizer/Translator gives ids 0 and 1 in order"""
    cache = ModelRegistryCache()
    snapshot = cache.refresh(fake_ledger)

    assert len(snapshot) == 2
    assert snapshot[0] == Model(id=0, description="Summarizer", price_per_use=100, available=True)
    assert snapshot[1] == Model(id=1, description="Translator", price_per_use=200, available=False)
    assert cache.snapshot is snapshot
    assert [c.args[0] for c in fake_ledger.get_model.call_args_list] == [0, 1]


def test_refresh_through_ledger_client(ledger):
    cache = ModelRegistryCache()
    cache.refresh(ledger)

    assert [m.description for m in cache.snapshot] == ["Summarizer", "Translator"]


@settings(max_examples=50)
@given(models=st.lists(model_strategy, max_size=12), workers=st.integers(min_value=1, max_value=4))
def test_refresh_index_invariant(models, workers):
    cache = ModelRegistryCache(max_workers=workers)
    snapshot = cache.refresh(make_ledger(models))

    assert len(snapshot) == len(models)
    for i, model in enumerate(snapshot):
        assert model.id == i
        assert (model.description, model.price_per_use, model.available) == models[i]


def test_refresh_replaces_wholesale(scenario_models, fake_ledger):
    cache = ModelRegistryCache()
    first = cache.refresh(fake_ledger)

    scenario_models.pop()
    second = cache.refresh(fake_ledger)

    assert len(first) == 2
    assert len(second) == 1
    assert cache.snapshot is second


def test_failed_model_read_keeps_previous_snapshot():
    models = [("a", 1, True), ("b", 2, True), ("c", 3, False)]
    cache = ModelRegistryCache()
    before = cache.refresh(make_ledger(models))

    changed = [("x", 9, False), ("y", 9, False), ("z", 9, False)]
    with pytest.raises(RegistryRefreshError) as exc_info:
        cache.refresh(make_ledger(changed, fail_on={2}))

    assert isinstance(exc_info.value.__cause__, LedgerUnavailableError)
    assert cache.snapshot is before
    assert [m.model_dump() for m in cache.snapshot] == [m.model_dump() for m in before]


def test_failed_count_read_keeps_previous_snapshot(fake_ledger):
    cache = ModelRegistryCache()
    before = cache.refresh(fake_ledger)

    fake_ledger.get_model_count.side_effect = LedgerUnavailableError("down")
    with pytest.raises(RegistryRefreshError):
        cache.refresh(fake_ledger)

    assert cache.snapshot is before


def test_concurrent_refresh_failure_keeps_previous_snapshot():
    cache = ModelRegistryCache(max_workers=4)
    before = cache.refresh(make_ledger([("a", 1, True)]))

    with pytest.raises(RegistryRefreshError):
        cache.refresh(make_ledger([("m", i, True) for i in range(8)], fail_on={5}))

    assert cache.snapshot is before


def test_readers_see_old_snapshot_during_refresh():
    models = [("a", 1, True), ("b", 2, True)]
    cache = ModelRegistryCache()
    before = cache.refresh(make_ledger(models))
    observed = []

    ledger = make_ledger([("c", 3, True), ("d", 4, True), ("e", 5, True)])
    inner = ledger.get_model.side_effect

    def get_model(i):
        observed.append(cache.snapshot)
        return inner(i)

    ledger.get_model.side_effect = get_model
    after = cache.refresh(ledger)

    assert observed and all(s is before for s in observed)
    assert cache.snapshot is after
    assert [m.description for m in after] == ["c", "d", "e"]


def test_readers_never_observe_mixed_snapshot():
    """Threads reading during repeated refreshes only see whole generations."""
    generations = [[(f"gen{g}", g, True)] * 5 for g in range(20)]
    cache = ModelRegistryCache(max_workers=3)
    cache.refresh(make_ledger(generations[0]))
    stop = threading.Event()
    mixed = []

    def reader():
        while not stop.is_set():
            snapshot = cache.snapshot
            if len({m.description for m in snapshot}) > 1:
                mixed.append(snapshot)

    threads = [threading.Thread(target=reader) for _ in range(3)]
    for t in threads:
        t.start()
    try:
        for models in generations[1:]:
            cache.refresh(make_ledger(models))
    finally:
        stop.set()
        for t in threads:
            t.join()

    assert mixed == []
    assert cache.snapshot[0].description == "gen19"


def test_clear_discards_snapshot(fake_ledger):
    cache = ModelRegistryCache()
    cache.refresh(fake_ledger)

    cache.clear()

    assert cache.snapshot == ModelRegistrySnapshot()


def test_invalid_worker_count():
    with pytest.raises(ValueError):
        ModelRegistryCache(max_workers=0)
