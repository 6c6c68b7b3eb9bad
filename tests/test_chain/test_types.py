"""Tests for chain boundary parsing and error classification."""

import pytest

from bondmarket.chain.types import classify_error, parse_bond_list, parse_bond_record
from bondmarket.models import FetchErrorCause

from factories import CONTRACT, NOW, raw_bond


class TestParseBondRecord:
    def test_parses_u64_strings(self) -> None:
        record = parse_bond_record(raw_bond())

        assert record is not None
        assert record.id == 1
        assert record.issuer == CONTRACT
        assert record.total_raise == 1_000_000_000
        assert record.raised == 250_000_000
        assert record.min_invest == 10_000
        assert record.rate_bps == 500
        assert record.start_ts == NOW
        assert record.end_ts == NOW + 31_536_000
        assert record.investor_count == 3
        assert record.canceled is False

    def test_maps_camel_case_descriptive_fields(self) -> None:
        record = parse_bond_record(raw_bond())

        assert record is not None
        assert record.bond_id == "TSLA-2027-5.3%"
        assert record.coupon_rate == "5.3%"
        assert record.maturity_date == "2027-08-15"
        assert record.principal_amount == "1800000000"
        assert record.credit_rating == "B1/B+"
        assert record.category == "Automotive"

    def test_unparsable_investor_count_defaults_to_zero(self) -> None:
        record = parse_bond_record(raw_bond(investor_count="many"))
        assert record is not None
        assert record.investor_count == 0

    def test_missing_amounts_default_to_zero(self) -> None:
        bond = raw_bond()
        del bond["raised"]
        del bond["min_invest"]
        record = parse_bond_record(bond)
        assert record is not None
        assert record.raised == 0
        assert record.min_invest == 0

    def test_integer_values_accepted(self) -> None:
        record = parse_bond_record(raw_bond(id=7, total_raise=42))
        assert record is not None
        assert record.id == 7
        assert record.total_raise == 42

    @pytest.mark.parametrize("value,expected", [(True, True), ("true", True), ("false", False), (None, False)])
    def test_canceled_flag(self, value: object, expected: bool) -> None:
        record = parse_bond_record(raw_bond(canceled=value))
        assert record is not None
        assert record.canceled is expected

    @pytest.mark.parametrize("bad_id", [None, "", "abc", "1.5"])
    def test_rejects_record_without_numeric_id(self, bad_id: object) -> None:
        assert parse_bond_record(raw_bond(id=bad_id)) is None

    def test_rejects_non_mapping(self) -> None:
        assert parse_bond_record(["1", "0xabc"]) is None


class TestParseBondList:
    def test_non_list_is_zero_records(self) -> None:
        assert parse_bond_list({"bonds": []}) == []
        assert parse_bond_list(None) == []
        assert parse_bond_list("0x1") == []

    def test_drops_malformed_entries_keeps_rest(self) -> None:
        records = parse_bond_list([raw_bond(id="1"), "garbage", raw_bond(id="x"), raw_bond(id="3")])
        assert [r.id for r in records] == [1, 3]


class TestClassifyError:
    @pytest.mark.parametrize(
        "text,cause",
        [
            ("RESOURCE_NOT_FOUND: BondStore", FetchErrorCause.RESOURCE_NOT_FOUND),
            ("account_not_found Account not found by Address(0x1)", FetchErrorCause.RESOURCE_NOT_FOUND),
            ("function_not_found get_all_bonds", FetchErrorCause.FUNCTION_NOT_FOUND),
            ("Move abort in 0x1::prediction_market: 0x1", FetchErrorCause.EXECUTION_REVERTED),
            ("vm_error Invalid transaction: ABORTED", FetchErrorCause.EXECUTION_REVERTED),
            ("Connection reset by peer", FetchErrorCause.UNKNOWN),
            ("", FetchErrorCause.UNKNOWN),
        ],
    )
    def test_classification(self, text: str, cause: FetchErrorCause) -> None:
        assert classify_error(text) is cause

    def test_every_cause_has_a_message(self) -> None:
        for cause in FetchErrorCause:
            assert cause.message
