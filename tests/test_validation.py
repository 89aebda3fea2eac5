"""Tests for scenario validation."""

import pytest

from core.exceptions import ValidationError
from core.scenario import AccountType, OneOffExpense, SpendingPhase
from core.validation import (
    ValidationResult,
    validate_ages,
    validate_balances,
    validate_conversions,
    validate_orders,
    validate_rates,
    validate_scenario,
    validate_social_security,
    validate_spending,
)


class TestValidationResult:
    """Tests for ValidationResult."""

    def test_empty_is_valid(self):
        """No errors means valid."""
        result = ValidationResult()
        assert result.is_valid()
        result.raise_if_invalid()

    def test_warnings_do_not_invalidate(self):
        """Warnings alone keep the result valid."""
        result = ValidationResult()
        result.add_warning("taxable_basis", "Exceeds market value")
        assert result.is_valid()
        assert result.warning_messages() == ["taxable_basis: Exceeds market value"]

    def test_raise_if_invalid(self):
        """The first error is raised as a ValidationError."""
        result = ValidationResult()
        result.add_error("end_age", "Must be at least start age")
        result.add_error("cash_balance", "Cannot be negative")
        with pytest.raises(ValidationError) as excinfo:
            result.raise_if_invalid()
        assert excinfo.value.field == "end_age"
        assert str(excinfo.value) == "end_age: Must be at least start age"

    def test_error_messages(self):
        """Errors format as 'field: message'."""
        result = ValidationResult()
        result.add_error("start_age", "Cannot be negative")
        assert result.error_messages() == ["start_age: Cannot be negative"]


class TestScenarioValidation:
    """Tests for validate_scenario and its parts."""

    def test_default_scenario_valid(self, default_scenario):
        """The default scenario has no errors or warnings."""
        result = validate_scenario(default_scenario)
        assert result.is_valid()
        assert result.warnings == []

    def test_end_before_start(self, make_scenario):
        """End age before start age fails."""
        result = validate_ages(make_scenario(start_age=70, end_age=65))
        assert any(field == "end_age" for field, _ in result.errors)

    def test_negative_balance(self, make_scenario):
        """Negative balances fail."""
        result = validate_balances(make_scenario(cash_balance=-1))
        assert any(field == "cash_balance" for field, _ in result.errors)

    def test_basis_above_market_warns(self, make_scenario):
        """Basis above market value is only a warning."""
        result = validate_balances(make_scenario(taxable_balance=10, taxable_basis=20))
        assert result.is_valid()
        assert any(field == "taxable_basis" for field, _ in result.warnings)

    def test_tax_rate_of_100_percent(self, make_scenario):
        """A 100% tax rate fails."""
        result = validate_rates(make_scenario(ordinary_income_rate=1.0))
        assert any(field == "ordinary_income_rate" for field, _ in result.errors)

    def test_negative_return_allowed(self, make_scenario):
        """A negative return above -100% passes."""
        assert validate_rates(make_scenario(investment_return=-0.2)).is_valid()

    def test_overlapping_phases(self, make_scenario):
        """Overlapping spending phases fail."""
        scenario = make_scenario(
            end_age=70,
            spending_phases=(
                SpendingPhase(62, 66, 80_000),
                SpendingPhase(66, 70, 60_000),
            ),
        )
        result = validate_spending(scenario)
        assert not result.is_valid()
        assert any("overlap" in message for _, message in result.errors)

    def test_inverted_phase(self, make_scenario):
        """A phase that ends before it starts fails."""
        scenario = make_scenario(spending_phases=(SpendingPhase(65, 62, 10_000),))
        assert not validate_spending(scenario).is_valid()

    def test_phase_gap_warns(self, make_scenario):
        """Uncovered ages are a warning."""
        scenario = make_scenario(
            end_age=70,
            spending_phases=(SpendingPhase(62, 65, 80_000), SpendingPhase(68, 70, 60_000)),
        )
        result = validate_spending(scenario)
        assert result.is_valid()
        assert result.warning_messages() == ["spending_phases: No spending phase covers ages 66-67"]

    def test_one_off_outside_range_warns(self, make_scenario):
        """A one-off outside the simulated ages is a warning."""
        scenario = make_scenario(
            spending_phases=(SpendingPhase(62, 62, 10_000),),
            one_off_expenses=(OneOffExpense(age=90, amount=5_000),),
        )
        result = validate_spending(scenario)
        assert result.is_valid()
        assert any(field == "one_off_expenses" for field, _ in result.warnings)

    def test_withdrawal_order_must_be_permutation(self, make_scenario):
        """A withdrawal order missing an account fails."""
        scenario = make_scenario(withdrawal_order=(AccountType.CASH, AccountType.IRA))
        result = validate_orders(scenario)
        assert any(field == "withdrawal_order" for field, _ in result.errors)

    def test_tax_order_excludes_roth(self, make_scenario):
        """Roth cannot be a tax payment source."""
        scenario = make_scenario(
            tax_payment_order=(AccountType.ROTH, AccountType.CASH, AccountType.IRA)
        )
        result = validate_orders(scenario)
        assert any(field == "tax_payment_order" for field, _ in result.errors)

    def test_duplicate_accounts_fail(self, make_scenario):
        """Repeated accounts fail even when every account appears."""
        scenario = make_scenario(
            withdrawal_order=(
                AccountType.CASH,
                AccountType.CASH,
                AccountType.TAXABLE,
                AccountType.IRA,
                AccountType.ROTH,
            )
        )
        assert not validate_orders(scenario).is_valid()

    def test_claim_age_range(self, make_scenario):
        """Claim ages outside 62-70 fail."""
        assert not validate_social_security(make_scenario(ss_claim_age=61)).is_valid()
        assert not validate_social_security(make_scenario(ss_claim_age=71)).is_valid()
        assert validate_social_security(make_scenario(ss_claim_age=70)).is_valid()

    def test_conversion_ages_ordered(self, make_scenario):
        """Conversion end age before start age fails."""
        scenario = make_scenario(roth_conversion_start_age=70, roth_conversion_end_age=65)
        assert not validate_conversions(scenario).is_valid()

    def test_combined(self, make_scenario):
        """validate_scenario collects errors from every check."""
        scenario = make_scenario(cash_balance=-5, ss_claim_age=75)
        result = validate_scenario(scenario)
        fields = {field for field, _ in result.errors}
        assert {"cash_balance", "ss_claim_age"} <= fields
