"""Tests for scenario inputs."""

import dataclasses

import pytest

from core.scenario import (
    DEFAULT_SCENARIO,
    AccountType,
    OneOffExpense,
    Scenario,
    SpendingPhase,
    format_order,
)


class TestAccountType:
    """Tests for AccountType."""

    def test_coerce_from_string(self):
        """Plain strings convert to account types."""
        assert AccountType("ira") is AccountType.IRA

    def test_format_order(self):
        """Orders format with display labels."""
        assert format_order(DEFAULT_SCENARIO.withdrawal_order) == "Cash → Taxable → IRA → Roth"


class TestScenario:
    """Tests for the Scenario dataclass."""

    def test_frozen(self):
        """Scenarios cannot be modified in place."""
        with pytest.raises(dataclasses.FrozenInstanceError):
            DEFAULT_SCENARIO.ira_balance = 0  # type: ignore[misc]

    def test_sequences_become_tuples(self):
        """Lists and strings are coerced on construction."""
        scenario = Scenario(
            spending_phases=[SpendingPhase(62, 95, 50_000)],
            withdrawal_order=["roth", "ira", "taxable", "cash"],
            tax_payment_order=["ira", "cash", "taxable"],
        )
        assert isinstance(scenario.spending_phases, tuple)
        assert scenario.withdrawal_order[0] is AccountType.ROTH
        assert scenario.tax_payment_order == (AccountType.IRA, AccountType.CASH, AccountType.TAXABLE)

    def test_years(self):
        """Years counts both end ages."""
        assert DEFAULT_SCENARIO.years == 34
        assert Scenario(start_age=70, end_age=69).years == 0

    def test_spending_phase_lookup(self):
        """The covering phase is found by age."""
        scenario = Scenario(
            spending_phases=(SpendingPhase(62, 69, 90_000), SpendingPhase(70, 95, 70_000))
        )
        assert scenario.spending_phase_at(65).annual_amount == 90_000
        assert scenario.spending_phase_at(70).annual_amount == 70_000
        assert scenario.spending_phase_at(96) is None

    def test_one_off_total(self):
        """One-offs at the same age add up."""
        scenario = Scenario(
            one_off_expenses=(OneOffExpense(65, 10_000), OneOffExpense(65, 5_000), OneOffExpense(66, 1))
        )
        assert scenario.one_off_total_at(65) == 15_000
        assert scenario.one_off_total_at(64) == 0

    def test_with_overrides(self):
        """Overrides return a copy and leave the original alone."""
        changed = DEFAULT_SCENARIO.with_overrides(ss_claim_age=70)
        assert changed.ss_claim_age == 70
        assert DEFAULT_SCENARIO.ss_claim_age == 67

    def test_dict_round_trip(self):
        """to_dict and from_dict preserve every field."""
        scenario = DEFAULT_SCENARIO.with_overrides(
            one_off_expenses=(OneOffExpense(70, 30_000, "Car"),), birth_year=1962
        )
        data = scenario.to_dict()
        assert data["withdrawal_order"] == ["cash", "taxable", "ira", "roth"]
        assert Scenario.from_dict(data) == scenario

    def test_from_dict_uses_defaults(self):
        """Missing keys keep the default scenario's values."""
        scenario = Scenario.from_dict({"ira_balance": 1_000, "unknown": 1})
        assert scenario.ira_balance == 1_000
        assert scenario.cash_balance == DEFAULT_SCENARIO.cash_balance
        assert scenario.spending_phases == DEFAULT_SCENARIO.spending_phases
