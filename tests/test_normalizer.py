"""Tests for raw customer normalization."""

import logging

import pytest

from customer_sync.normalizer import normalize, normalize_many
from customer_sync.schemas import Customer

from tests.conftest import MOCK_CUSTOMER_ALICE, MOCK_CUSTOMER_BAD_ID, MOCK_CUSTOMER_BOB


def test_normalize_string_id_with_partial_fields():
    customer = normalize({"id": "5", "name": "A"})
    assert customer == Customer(id=5, cg_id="", name="A", email="", mobile="")


def test_normalize_full_record():
    customer = normalize(MOCK_CUSTOMER_ALICE)
    assert customer.id == 101
    assert customer.cg_id == "CG-101"
    assert customer.name == "Alice"
    assert customer.email == "alice@example.com"
    assert customer.mobile == "+15550000101"


def test_normalize_null_and_empty_fields_become_empty_strings():
    customer = normalize(MOCK_CUSTOMER_BOB)
    assert customer.id == 102
    assert customer.cg_id == ""
    assert customer.email == ""


@pytest.mark.parametrize("raw_id", ["x", "", "  ", None, True, float("nan"), [1], {"v": 1}])
def test_normalize_rejects_unusable_ids(raw_id):
    assert normalize({"id": raw_id, "name": "A"}) is None


def test_normalize_rejects_missing_id():
    assert normalize({"name": "No id"}) is None


@pytest.mark.parametrize("raw", [None, "5", 5, ["id", 5]])
def test_normalize_rejects_non_mapping_input(raw):
    assert normalize(raw) is None


@pytest.mark.parametrize(
    "raw_id,expected",
    [("12abc", 12), (" 7 ", 7), ("-3", -3), ("5.9", 5), (8.7, 8), (42, 42)],
)
def test_normalize_reads_leading_integer(raw_id, expected):
    assert normalize({"id": raw_id}).id == expected


def test_normalize_coerces_non_string_fields():
    customer = normalize({"id": 1, "cgId": 9001, "mobile": 5551234, "name": 0})
    assert customer.cg_id == "9001"
    assert customer.mobile == "5551234"
    assert customer.name == ""


@pytest.mark.parametrize(
    "raw_value,expected",
    [(True, "true"), (False, ""), (5.0, "5"), (-2.0, "-2"), (5.25, "5.25"), (float("nan"), ""),
     (float("inf"), "Infinity")],
)
def test_normalize_stringifies_scalars_like_json_clients(raw_value, expected):
    assert normalize({"id": 1, "name": raw_value}).name == expected


def test_normalize_boolean_and_whole_float_fields():
    customer = normalize({"id": 1, "name": True, "mobile": 5.0})
    assert customer.name == "true"
    assert customer.mobile == "5"


def test_normalize_never_returns_none_fields():
    customer = normalize({"id": 3, "cgId": None, "name": None, "email": None, "mobile": None})
    for value in customer.model_dump().values():
        assert value is not None


def test_normalize_many_drops_invalid_and_keeps_order(caplog):
    with caplog.at_level(logging.WARNING, logger="customer_sync.normalizer"):
        customers = normalize_many([MOCK_CUSTOMER_BOB, MOCK_CUSTOMER_BAD_ID, MOCK_CUSTOMER_ALICE])

    assert [c.id for c in customers] == [102, 101]
    assert "Invalid customer record" in caplog.text


def test_customer_to_wire_uses_api_field_names():
    wire = Customer(id=1, cg_id="CG-1", name="A").to_wire()
    assert wire == {"id": 1, "cgId": "CG-1", "name": "A", "email": "", "mobile": ""}
