"""Uniqueness policies of the trace number key space.

Ledgers written only through TraceLedger keep stage tables nested (every
sales key has a distribution key, every distribution key a production key).
These tests seed the store directly to reach states where the two policies
disagree, as happens with records imported from another system.
"""

import pytest

from app.core.domain import (
    DistributionRecord,
    ProductionRecord,
    SalesRecord,
    Stage,
    UniquenessPolicy,
)
from app.core.errors import DuplicateKey, PredecessorMissing
from app.services.trace_keys import TraceKeySpace
from tests.conftest import DISTRIBUTOR, PRODUCER, RETAILER, register_participants


def _production(tn):
    return ProductionRecord(
        trace_number=tn, food_name="Tomato", origin_address="FarmX",
        quality=95, producer=PRODUCER, recorded_at=1,
    )


def _distribution(tn):
    return DistributionRecord(
        trace_number=tn, food_name="Tomato", handling_address="WarehouseY",
        distributor=DISTRIBUTOR, recorded_at=2,
    )


def _sale(tn):
    return SalesRecord(
        trace_number=tn, food_name="Tomato", sale_address="ShopZ",
        retailer=RETAILER, recorded_at=3,
    )


def test_fresh_key_is_free_for_every_stage(store):
    for policy in UniquenessPolicy:
        keys = TraceKeySpace(store, policy)
        assert all(keys.is_free("TN-001", stage) for stage in Stage)


def test_strict_policy_checks_all_tables_for_production(store):
    store.put_record(Stage.SALES, _sale("TN-X"))

    assert not TraceKeySpace(store, UniquenessPolicy.STRICT).is_free("TN-X", Stage.PRODUCTION)
    assert TraceKeySpace(store, "per_stage").is_free("TN-X", Stage.PRODUCTION)


def test_strict_policy_ignores_earlier_stages(store):
    store.put_record(Stage.PRODUCTION, _production("TN-1"))
    keys = TraceKeySpace(store, UniquenessPolicy.STRICT)

    assert keys.is_free("TN-1", Stage.DISTRIBUTION)
    assert not keys.is_free("TN-1", Stage.PRODUCTION)


def test_claim_raises_duplicate_key(store):
    store.put_record(Stage.DISTRIBUTION, _distribution("TN-1"))

    with pytest.raises(DuplicateKey):
        TraceKeySpace(store).claim("TN-1", Stage.DISTRIBUTION)


def test_occupied_lists_conflicting_stages_in_order(store):
    store.put_record(Stage.DISTRIBUTION, _distribution("TN-1"))

    assert TraceKeySpace(store).occupied("TN-1", Stage.PRODUCTION) == [Stage.DISTRIBUTION]
    assert TraceKeySpace(store, UniquenessPolicy.PER_STAGE).occupied("TN-1", Stage.PRODUCTION) == []
    assert TraceKeySpace(store).occupied("TN-1", Stage.SALES) == []


def test_store_refuses_to_overwrite(store):
    store.put_record(Stage.PRODUCTION, _production("TN-1"))
    with pytest.raises(DuplicateKey):
        store.put_record(Stage.PRODUCTION, _production("TN-1"))


def test_distribution_after_stray_sale_depends_on_policy(make_ledger, store):
    ledger_strict = make_ledger(store, uniqueness_policy=UniquenessPolicy.STRICT)
    ledger_loose = make_ledger(store, uniqueness_policy=UniquenessPolicy.PER_STAGE)
    register_participants(ledger_strict)
    store.put_record(Stage.PRODUCTION, _production("TN-X"))
    store.put_record(Stage.SALES, _sale("TN-X"))

    with pytest.raises(DuplicateKey):
        ledger_strict.create_distribution_record(DISTRIBUTOR, "TN-X", "WarehouseY")

    record = ledger_loose.create_distribution_record(DISTRIBUTOR, "TN-X", "WarehouseY")
    assert record.food_name == "Tomato"


def test_per_stage_policy_still_enforces_stage_order(make_ledger, store):
    ledger = make_ledger(store, uniqueness_policy=UniquenessPolicy.PER_STAGE)
    register_participants(ledger)

    with pytest.raises(PredecessorMissing):
        ledger.create_distribution_record(DISTRIBUTOR, "TN-1", "WarehouseY")
