"""
Unit tests for the ATM ledger domain.

Tests denominations, the greedy allocator and the Atm inventory manager.
"""

from decimal import Decimal

import pytest

from core.exceptions import (
    CoinLimitExceededError,
    DenominationNotFoundError,
    InsufficientFundsError,
    InvalidRefillError,
    WithdrawalError,
)
from core.value_objects import (
    CurrencyClass,
    WithdrawalPlan,
    from_cents,
    is_whole_cents,
    to_cents,
)
from domain.allocator import allocate
from domain.atm import Atm
from domain.denomination import Denomination


# Default stock with the 0.1 coins used up
NO_DIMES = [
    ("200", "bill", 7),
    ("100", "bill", 4),
    ("20", "bill", 15),
    ("10", "coin", 10),
    ("5", "coin", 1),
    ("1", "coin", 10),
    ("0.1", "coin", 0),
    ("0.01", "coin", 21),
]


# =============================================================================
# Value Objects Tests
# =============================================================================


class TestCents:
    """Tests for cents conversion."""

    def test_to_cents_from_float(self):
        """Floats convert through their shortest decimal form."""
        assert to_cents(0.1) == 10
        assert to_cents(188.3) == 18830

    def test_to_cents_floors_sub_cent(self):
        """Anything below a cent is dropped."""
        assert to_cents("0.019") == 1

    def test_to_cents_is_exact_for_long_input(self):
        """Digits beyond the default context precision still floor exactly."""
        assert to_cents("1999.99000000000000000000000001") == 199999

    @pytest.mark.parametrize("raw", ["1e15", "1e999999", "-1e999999"])
    def test_to_cents_rejects_huge(self, raw):
        with pytest.raises(ValueError, match="out of range"):
            to_cents(raw)

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("12.34", True),
            ("12.3400000", True),
            ("5E+3", True),
            ("0.001", False),
            ("1999.99000000000000000000000001", False),
            ("1E-999999999", False),
        ],
    )
    def test_is_whole_cents(self, raw, expected):
        assert is_whole_cents(Decimal(raw)) is expected

    def test_to_cents_rejects_garbage(self):
        """Non-numeric input raises ValueError."""
        with pytest.raises(ValueError):
            to_cents("abc")
        with pytest.raises(ValueError):
            to_cents(True)

    def test_from_cents_is_canonical(self):
        """Cents come back without trailing zeros."""
        assert str(from_cents(20000)) == "200"
        assert str(from_cents(10)) == "0.1"
        assert str(from_cents(1)) == "0.01"


class TestWithdrawalPlan:
    """Tests for WithdrawalPlan."""

    def test_totals(self):
        """Totals and counts sum both sub-plans."""
        plan = WithdrawalPlan(
            bills={Decimal("20"): 2},
            coins={Decimal("10"): 1, Decimal("0.01"): 3},
        )
        assert plan.total == Decimal("50.03")
        assert plan.bill_count == 2
        assert plan.coin_count == 4

    def test_to_dict_uses_value_strings(self):
        """Keys are rendered as plain decimal strings."""
        plan = WithdrawalPlan(bills={Decimal("200"): 1}, coins={Decimal("0.1"): 2})
        assert plan.to_dict() == {"bills": {"200": 1}, "coins": {"0.1": 2}}


# =============================================================================
# Denomination Tests
# =============================================================================


class TestDenomination:
    """Tests for Denomination."""

    def test_accessors(self):
        """Value, class and count are exposed."""
        d = Denomination("0.1", CurrencyClass.COIN, 12)
        assert d.value == Decimal("0.1")
        assert d.name == "0.1"
        assert d.cents == 10
        assert d.currency_class is CurrencyClass.COIN
        assert d.count == 12

    def test_add_coerces_strings(self):
        """String unit counts are coerced."""
        d = Denomination(200, CurrencyClass.BILL, 7)
        d.add("3")
        assert d.count == 10

    @pytest.mark.parametrize("units", [0, -1, "3.5", "abc"])
    def test_add_rejects_invalid_units(self, units):
        """Non-positive or non-integer units raise ValueError."""
        d = Denomination(200, CurrencyClass.BILL, 7)
        with pytest.raises(ValueError):
            d.add(units)
        assert d.count == 7

    def test_dispense(self):
        """Dispensing decrements the count."""
        d = Denomination(20, CurrencyClass.BILL, 15)
        d.dispense(2)
        assert d.count == 13

    def test_dispense_none_is_noop(self):
        """A denomination missing from the plan keeps its count."""
        d = Denomination(20, CurrencyClass.BILL, 15)
        d.dispense(None)
        assert d.count == 15

    def test_invalid_construction(self):
        """Zero values and negative counts are rejected."""
        with pytest.raises(ValueError):
            Denomination(0, CurrencyClass.COIN, 1)
        with pytest.raises(ValueError):
            Denomination(1, CurrencyClass.COIN, -1)


# =============================================================================
# Allocator Tests
# =============================================================================


class TestAllocator:
    """Tests for the greedy allocator."""

    def test_bills_pass(self, atm):
        """Highest bills first, residual left for coins."""
        allocation = allocate("50", atm._inventory, CurrencyClass.BILL)
        assert allocation.plan == {Decimal("200"): 0, Decimal("100"): 0, Decimal("20"): 2}
        assert allocation.remaining == Decimal("10")

    def test_zero_amount(self, atm):
        """Zero yields a complete, all-zero plan."""
        allocation = allocate(0, atm._inventory, CurrencyClass.COIN)
        assert set(allocation.plan) == {
            Decimal("10"), Decimal("5"), Decimal("1"), Decimal("0.1"), Decimal("0.01"),
        }
        assert all(count == 0 for count in allocation.plan.values())
        assert allocation.remaining == 0

    def test_empty_denomination_recorded(self):
        """A denomination out of stock is still a plan key."""
        denominations = [
            Denomination(5, CurrencyClass.COIN, 0),
            Denomination(1, CurrencyClass.COIN, 10),
        ]
        allocation = allocate(7, denominations, CurrencyClass.COIN)
        assert allocation.plan == {Decimal("5"): 0, Decimal("1"): 7}
        assert allocation.remaining_cents == 0

    def test_stock_limits_take(self):
        """Take never exceeds stock."""
        denominations = [Denomination(1, CurrencyClass.COIN, 3)]
        allocation = allocate(5, denominations, CurrencyClass.COIN)
        assert allocation.plan == {Decimal("1"): 3}
        assert allocation.remaining == Decimal("2")

    def test_does_not_mutate(self, atm):
        """Allocation reads counts only."""
        before = atm.counts()
        allocate("1999.99", atm._inventory, CurrencyClass.BILL)
        allocate("9.99", atm._inventory, CurrencyClass.COIN)
        assert atm.counts() == before

    def test_no_backtracking(self):
        """Greedy reports a residual even when another combination exists."""
        denominations = [
            Denomination(50, CurrencyClass.BILL, 1),
            Denomination(20, CurrencyClass.BILL, 3),
        ]
        allocation = allocate(60, denominations, CurrencyClass.BILL)
        assert allocation.plan == {Decimal("50"): 1, Decimal("20"): 0}
        assert allocation.remaining == Decimal("10")

    def test_no_float_noise(self):
        """An exactly covered amount leaves exactly zero."""
        denominations = [Denomination("0.1", CurrencyClass.COIN, 3)]
        allocation = allocate(0.1 + 0.2, denominations, CurrencyClass.COIN)
        assert allocation.remaining_cents == 0
        assert allocation.remaining == 0


# =============================================================================
# Atm Withdrawal Tests
# =============================================================================


class TestAtmWithdraw:
    """Tests for Atm.withdraw."""

    def test_withdraw_fifty(self, atm):
        """Two twenties and one ten, nothing else."""
        plan = atm.withdraw(50)
        assert plan.bills == {Decimal("200"): 0, Decimal("100"): 0, Decimal("20"): 2}
        assert plan.coins == {
            Decimal("10"): 1,
            Decimal("5"): 0,
            Decimal("1"): 0,
            Decimal("0.1"): 0,
            Decimal("0.01"): 0,
        }
        assert plan.total == Decimal("50")
        counts = atm.counts()
        assert counts[Decimal("20")] == 13
        assert counts[Decimal("10")] == 9

    def test_descending_greedy_order(self, atm):
        """Every denomination is used before the next one down."""
        plan = atm.withdraw("388.12")
        assert plan.bills == {Decimal("200"): 1, Decimal("100"): 1, Decimal("20"): 4}
        assert plan.coins == {
            Decimal("10"): 0,
            Decimal("5"): 1,
            Decimal("1"): 3,
            Decimal("0.1"): 1,
            Decimal("0.01"): 2,
        }

    @pytest.mark.parametrize(
        "amount",
        ["0.01", "0.99", "1.11", "20", "123.45", "188.30", "1000", "1999.99", "2000"],
    )
    def test_plan_total_matches_amount(self, atm, amount):
        """A plan always covers the request exactly, or the call fails."""
        before = atm.counts()
        try:
            plan = atm.withdraw(amount)
        except WithdrawalError:
            assert atm.counts() == before
        else:
            assert plan.total == Decimal(amount)
            for value, count in plan.combined.items():
                assert atm.counts()[value] == before[value] - count

    def test_fractional_part_uncoverable(self, make_atm):
        """188.30 fails when the 0.1 coins are gone."""
        atm = make_atm(NO_DIMES)
        before = atm.counts()

        with pytest.raises(InsufficientFundsError) as exc_info:
            atm.withdraw("188.30")

        assert atm.total_value() > Decimal("188.30")
        assert exc_info.value.remaining == Decimal("0.09")
        assert exc_info.value.plan.coins[Decimal("0.01")] == 21
        assert exc_info.value.details["remaining"] == "0.09"
        assert atm.counts() == before

    def test_not_enough_money(self, make_atm):
        """Asking for more than the machine holds fails."""
        atm = make_atm([("20", "bill", 2), ("1", "coin", 5)])
        with pytest.raises(InsufficientFundsError):
            atm.withdraw(100)
        assert atm.counts() == {Decimal("20"): 2, Decimal("1"): 5}

    def test_coin_limit(self, make_atm):
        """More than 50 coins fails without touching stock."""
        atm = make_atm([("20", "bill", 5), ("0.01", "coin", 100)])

        with pytest.raises(CoinLimitExceededError) as exc_info:
            atm.withdraw("0.75")

        assert exc_info.value.required_coins == 75
        assert exc_info.value.limit == 50
        assert atm.counts() == {Decimal("20"): 5, Decimal("0.01"): 100}

    def test_coin_limit_is_inclusive(self, make_atm):
        """Exactly 50 coins is allowed."""
        atm = make_atm([("0.01", "coin", 100)])
        plan = atm.withdraw("0.50")
        assert plan.coin_count == 50
        assert atm.counts()[Decimal("0.01")] == 50

    def test_stock_never_negative(self, atm):
        """Repeated withdrawals never overdraw a denomination."""
        for _ in range(20):
            try:
                atm.withdraw(200)
            except WithdrawalError:
                break
        assert all(count >= 0 for count in atm.counts().values())


# =============================================================================
# Atm Refill Tests
# =============================================================================


class TestAtmRefill:
    """Tests for Atm refill and validation."""

    def test_refill_bill(self, atm):
        """Refill adds exactly the requested units."""
        receipts = atm.refill({200: 3})
        assert atm.counts()[Decimal("200")] == 10
        assert len(receipts) == 1
        assert receipts[0].currency_class is CurrencyClass.BILL
        assert receipts[0].message == "Successfully added 3 200-unit bills"

    def test_refill_string_keys_and_amounts(self, atm):
        """Keys and amounts arriving as strings are accepted."""
        receipts = atm.refill({"0.01": "5", "10": 2})
        assert [r.currency_class for r in receipts] == [CurrencyClass.COIN, CurrencyClass.COIN]
        assert atm.counts()[Decimal("0.01")] == 26
        assert atm.counts()[Decimal("10")] == 12

    def test_refill_unknown_denomination(self, atm):
        """Unknown denominations fail validation and change nothing."""
        before = atm.counts()
        with pytest.raises(InvalidRefillError) as exc_info:
            atm.refill({3: 5})
        assert exc_info.value.details["invalid"] == ["3"]
        assert atm.counts() == before

    def test_refill_all_or_nothing_validation(self, atm):
        """One bad entry stops every entry."""
        before = atm.counts()
        with pytest.raises(InvalidRefillError):
            atm.refill({"200": 1, "100": -1})
        assert atm.counts() == before

    def test_validate_string_amount(self, atm):
        """A string holding a positive integer is valid."""
        assert atm.validate_refill({0.1: "4"}) is True

    @pytest.mark.parametrize(
        "units", [4.5, "3.5", -2, 0, "abc", None, True, "1e15", "1e999999999"]
    )
    def test_validate_rejects_amount(self, atm, units):
        """Non-integer, non-positive, oversized and non-numeric amounts are invalid."""
        with pytest.raises(InvalidRefillError):
            atm.validate_refill({0.1: units})

    @pytest.mark.parametrize("request_body", [{}, [], "200", None])
    def test_validate_rejects_shape(self, atm, request_body):
        """Empty or non-mapping requests are invalid."""
        with pytest.raises(InvalidRefillError):
            atm.validate_refill(request_body)

    def test_validate_rejects_sub_cent_key(self, atm):
        """Keys must match a denomination exactly, not after flooring."""
        with pytest.raises(InvalidRefillError):
            atm.validate_refill({"0.015": 1})

    def test_validate_rejects_huge_key(self, atm):
        """An enormous key is simply not a denomination."""
        with pytest.raises(InvalidRefillError) as exc_info:
            atm.validate_refill({"1e999999": 1})
        assert exc_info.value.details["invalid"] == ["1e999999"]

    def test_refill_large_whole_amount(self, atm):
        """Large counts below the digit ceiling are accepted."""
        atm.refill({"0.01": "99999999999999"})
        assert atm.counts()[Decimal("0.01")] == 21 + 99999999999999

    def test_refill_denomination(self, atm):
        """Single refill matches the value numerically."""
        assert atm.refill_denomination("0.10", 2) is CurrencyClass.COIN
        assert atm.counts()[Decimal("0.1")] == 14

    def test_refill_denomination_not_found(self, atm):
        """Unknown value is reported without changing stock."""
        before = atm.counts()
        with pytest.raises(DenominationNotFoundError):
            atm.refill_denomination(7, 1)
        assert atm.counts() == before

    def test_refill_denomination_huge_value_not_found(self, atm):
        with pytest.raises(DenominationNotFoundError):
            atm.refill_denomination("1e999999", 1)


# =============================================================================
# Atm Query Tests
# =============================================================================


class TestAtmQueries:
    """Tests for Atm construction and queries."""

    def test_values_descending(self, make_atm):
        """Values come back highest first regardless of input order."""
        atm = make_atm([("0.01", "coin", 1), ("100", "bill", 1), ("5", "coin", 1)])
        assert atm.denomination_values() == [Decimal("100"), Decimal("5"), Decimal("0.01")]

    def test_default_values(self, atm):
        """The seed holds eight denominations."""
        assert [str(v) for v in atm.denomination_values()] == [
            "200", "100", "20", "10", "5", "1", "0.1", "0.01",
        ]

    def test_limits(self, atm):
        """Configured limits are exposed."""
        assert atm.maximum_withdrawal == Decimal("2000")
        assert atm.max_coins_per_withdrawal == 50

    def test_total_value(self, atm):
        """Total face value of the seed stock."""
        assert atm.total_value() == Decimal("2216.41")

    def test_inventory_snapshot(self, atm):
        """Inventory rows are plain dictionaries."""
        assert atm.inventory()[0] == {"value": "200", "class": "bill", "count": 7}

    def test_duplicate_values_rejected(self):
        """Two denominations with the same value are refused."""
        with pytest.raises(ValueError):
            Atm(
                [Denomination("1", CurrencyClass.COIN, 1), Denomination("1.00", CurrencyClass.COIN, 2)],
                "2000",
                50,
            )

    def test_find(self, atm):
        """Lookup by numeric value."""
        assert atm.find("20.00").value == Decimal("20")
        assert atm.find(3) is None
        assert atm.find("abc") is None
