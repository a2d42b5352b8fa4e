import pytest

from app.core.domain import Stage
from app.core.errors import (
    DuplicateKey,
    InvalidInput,
    NotFound,
    PredecessorMissing,
    Unauthorized,
)
from tests.conftest import ADMIN, DISTRIBUTOR, PRODUCER, RETAILER


def test_full_custody_chain(participants):
    ledger = participants

    production = ledger.create_production_record(PRODUCER, "TN-001", "Tomato", "FarmX", 95)
    distribution = ledger.create_distribution_record(DISTRIBUTOR, "TN-001", "WarehouseY")
    sale = ledger.create_sales_record(RETAILER, "TN-001", "ShopZ")

    assert production.quality == 95
    assert production.producer == PRODUCER
    assert distribution.food_name == "Tomato"
    assert distribution.distributor == DISTRIBUTOR
    assert sale.food_name == "Tomato"
    assert sale.sale_address == "ShopZ"
    assert sale.retailer == RETAILER

    assert ledger.get_production_record("TN-001") == production
    assert ledger.get_distribution_record("TN-001") == distribution
    assert ledger.get_sales_record("TN-001") == sale


def test_production_derives_trace_summary(participants):
    participants.create_production_record(PRODUCER, "TN-001", "Tomato", "FarmX", 95)

    summary = participants.get_trace_summary("TN-001")
    assert summary.food_name == "Tomato"
    assert summary.quality == "95"
    assert summary.producer_label == "AcmeFarms"
    assert summary.origin_address == "FarmX"


def test_distribution_requires_production(participants):
    with pytest.raises(PredecessorMissing):
        participants.create_distribution_record(DISTRIBUTOR, "TN-999", "WarehouseY")
    with pytest.raises(NotFound):
        participants.get_distribution_record("TN-999")


def test_sales_requires_distribution(participants):
    participants.create_production_record(PRODUCER, "TN-002", "Kale", "FarmX", 80)

    with pytest.raises(PredecessorMissing):
        participants.create_sales_record(RETAILER, "TN-002", "ShopZ")


def test_duplicate_production_keeps_first_record(participants):
    first = participants.create_production_record(PRODUCER, "TN-001", "Tomato", "FarmX", 95)

    with pytest.raises(DuplicateKey):
        participants.create_production_record(PRODUCER, "TN-001", "Potato", "FarmQ", 10)

    assert participants.get_production_record("TN-001") == first
    assert participants.get_trace_summary("TN-001").food_name == "Tomato"


def test_duplicate_distribution_and_sales(participants):
    participants.create_production_record(PRODUCER, "TN-001", "Tomato", "FarmX", 95)
    first = participants.create_distribution_record(DISTRIBUTOR, "TN-001", "WarehouseY")
    with pytest.raises(DuplicateKey):
        participants.create_distribution_record(DISTRIBUTOR, "TN-001", "WarehouseQ")
    assert participants.get_distribution_record("TN-001") == first

    sale = participants.create_sales_record(RETAILER, "TN-001", "ShopZ")
    with pytest.raises(DuplicateKey):
        participants.create_sales_record(RETAILER, "TN-001", "ShopQ")
    assert participants.get_sales_record("TN-001") == sale


@pytest.mark.parametrize("caller", [DISTRIBUTOR, RETAILER, ADMIN, "ghost"])
def test_only_producers_create_production(participants, caller):
    with pytest.raises(Unauthorized):
        participants.create_production_record(caller, "TN-001", "Tomato", "FarmX", 95)


@pytest.mark.parametrize("caller", [PRODUCER, RETAILER, ADMIN, "ghost"])
def test_only_distributors_create_distribution(participants, caller):
    participants.create_production_record(PRODUCER, "TN-001", "Tomato", "FarmX", 95)
    with pytest.raises(Unauthorized):
        participants.create_distribution_record(caller, "TN-001", "WarehouseY")


@pytest.mark.parametrize("caller", [PRODUCER, DISTRIBUTOR, ADMIN, "ghost"])
def test_only_retailers_create_sales(participants, caller):
    participants.create_production_record(PRODUCER, "TN-001", "Tomato", "FarmX", 95)
    participants.create_distribution_record(DISTRIBUTOR, "TN-001", "WarehouseY")
    with pytest.raises(Unauthorized):
        participants.create_sales_record(caller, "TN-001", "ShopZ")


def test_role_check_precedes_other_guards(participants):
    with pytest.raises(Unauthorized):
        participants.create_distribution_record(RETAILER, "", "")


@pytest.mark.parametrize("quality", [-1, "abc", "", "-5", "1.5", 1.5, True, None, "٣"])
def test_malformed_quality_is_rejected(participants, quality):
    with pytest.raises(InvalidInput):
        participants.create_production_record(PRODUCER, "TN-001", "Tomato", "FarmX", quality)
    with pytest.raises(NotFound):
        participants.get_production_record("TN-001")


def test_quality_accepts_digit_strings_and_zero(participants):
    assert participants.create_production_record(PRODUCER, "TN-001", "Tomato", "FarmX", "42").quality == 42
    assert participants.create_production_record(PRODUCER, "TN-002", "Tomato", "FarmX", 0).quality == 0


@pytest.mark.parametrize(
    "trace_number, food_name, origin_address",
    [("", "Tomato", "FarmX"), ("TN-001", "", "FarmX"), ("TN-001", "Tomato", " ")],
)
def test_production_requires_text_fields(participants, trace_number, food_name, origin_address):
    with pytest.raises(InvalidInput):
        participants.create_production_record(PRODUCER, trace_number, food_name, origin_address, 95)


def test_later_stages_require_address(participants):
    participants.create_production_record(PRODUCER, "TN-001", "Tomato", "FarmX", 95)
    with pytest.raises(InvalidInput):
        participants.create_distribution_record(DISTRIBUTOR, "TN-001", "")

    participants.create_distribution_record(DISTRIBUTOR, "TN-001", "WarehouseY")
    with pytest.raises(InvalidInput):
        participants.create_sales_record(RETAILER, "TN-001", "")


def test_supplied_food_name_must_match_predecessor(participants):
    participants.create_production_record(PRODUCER, "TN-001", "Tomato", "FarmX", 95)

    with pytest.raises(InvalidInput):
        participants.create_distribution_record(DISTRIBUTOR, "TN-001", "WarehouseY", food_name="Potato")

    record = participants.create_distribution_record(DISTRIBUTOR, "TN-001", "WarehouseY", food_name="Tomato")
    assert record.food_name == "Tomato"


def test_get_record_by_stage_name(participants):
    participants.create_production_record(PRODUCER, "TN-001", "Tomato", "FarmX", 95)

    assert participants.get_record("production", "TN-001").food_name == "Tomato"
    assert participants.get_record(Stage.PRODUCTION, "TN-001").food_name == "Tomato"
    with pytest.raises(NotFound):
        participants.get_record(Stage.SALES, "TN-001")
    with pytest.raises(InvalidInput):
        participants.get_record("shipping", "TN-001")


def test_repeated_reads_are_identical(participants):
    participants.create_production_record(PRODUCER, "TN-001", "Tomato", "FarmX", 95)

    first = participants.get_production_record("TN-001").model_dump_json()
    second = participants.get_production_record("TN-001").model_dump_json()
    assert first == second
