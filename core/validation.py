"""Input validation for drawdown scenarios."""

from __future__ import annotations

from dataclasses import dataclass, field

from core.exceptions import ValidationError
from core.scenario import AccountType, Scenario
from core.tax_config import SS_MAX_CLAIM_AGE, SS_MIN_CLAIM_AGE

SPENDING_ACCOUNTS = frozenset(AccountType)
TAX_PAYMENT_ACCOUNTS = frozenset({AccountType.IRA, AccountType.TAXABLE, AccountType.CASH})


@dataclass
class ValidationResult:
    """Result of validation containing any errors and warnings found."""

    errors: list[tuple[str, str]] = field(default_factory=list)
    warnings: list[tuple[str, str]] = field(default_factory=list)

    def add_error(self, field_name: str, message: str) -> None:
        """Add a validation error."""
        self.errors.append((field_name, message))

    def add_warning(self, field_name: str, message: str) -> None:
        """Add a non-blocking warning."""
        self.warnings.append((field_name, message))

    def extend(self, other: "ValidationResult") -> None:
        """Merge another result into this one."""
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)

    def is_valid(self) -> bool:
        """Return True if no validation errors."""
        return len(self.errors) == 0

    def error_messages(self) -> list[str]:
        """Return formatted error messages."""
        return [f"{field_name}: {message}" for field_name, message in self.errors]

    def warning_messages(self) -> list[str]:
        """Return formatted warning messages."""
        return [f"{field_name}: {message}" for field_name, message in self.warnings]

    def raise_if_invalid(self) -> None:
        """Raise the first error as a ValidationError."""
        if self.errors:
            field_name, message = self.errors[0]
            raise ValidationError(field_name, message)


def validate_ages(scenario: Scenario) -> ValidationResult:
    """Validate the simulated age range."""
    result = ValidationResult()

    if scenario.start_age < 0:
        result.add_error("start_age", "Cannot be negative")
    if scenario.start_age > 120:
        result.add_error("start_age", "Must be at most 120")
    if scenario.end_age < scenario.start_age:
        result.add_error("end_age", "Must be at least start age")
    if scenario.end_age > 120:
        result.add_error("end_age", "Must be at most 120")

    return result


def validate_balances(scenario: Scenario) -> ValidationResult:
    """Validate starting balances and taxable cost basis."""
    result = ValidationResult()

    balances = {
        "ira_balance": scenario.ira_balance,
        "roth_balance": scenario.roth_balance,
        "taxable_balance": scenario.taxable_balance,
        "taxable_basis": scenario.taxable_basis,
        "cash_balance": scenario.cash_balance,
    }
    for name, balance in balances.items():
        if balance < 0:
            result.add_error(name, "Cannot be negative")
        if balance > 1_000_000_000:  # 1 billion sanity check
            result.add_error(name, "Exceeds maximum allowed value")

    if scenario.taxable_basis > scenario.taxable_balance:
        result.add_warning(
            "taxable_basis", "Exceeds taxable market value; it will be capped"
        )

    return result


def validate_rates(scenario: Scenario) -> ValidationResult:
    """Validate return, inflation and tax rates."""
    result = ValidationResult()

    for name in ("investment_return", "cash_return", "inflation_rate"):
        value = getattr(scenario, name)
        if value <= -1:
            result.add_error(name, "Must be greater than -100%")
        if value > 0.5:
            result.add_error(name, "Cannot exceed 50%")

    for name in ("ordinary_income_rate", "capital_gains_rate", "assumed_ira_tax_rate"):
        value = getattr(scenario, name)
        if value < 0:
            result.add_error(name, "Cannot be negative")
        if value >= 1:
            result.add_error(name, "Must be below 100%")

    return result


def validate_spending(scenario: Scenario) -> ValidationResult:
    """Validate spending phases and one-off expenses."""
    result = ValidationResult()

    phases = sorted(scenario.spending_phases, key=lambda phase: phase.from_age)
    for phase in phases:
        name = phase.label or f"{phase.from_age}-{phase.to_age}"
        if phase.from_age > phase.to_age:
            result.add_error("spending_phases", f"Phase {name} ends before it starts")
        if phase.annual_amount < 0:
            result.add_error("spending_phases", f"Phase {name} has negative spending")

    for previous, phase in zip(phases, phases[1:]):
        if phase.from_age <= previous.to_age:
            result.add_error(
                "spending_phases",
                f"Phases overlap at age {phase.from_age}",
            )

    uncovered = [
        age
        for age in range(scenario.start_age, scenario.end_age + 1)
        if scenario.spending_phase_at(age) is None
    ]
    if uncovered:
        result.add_warning(
            "spending_phases",
            f"No spending phase covers ages {uncovered[0]}-{uncovered[-1]}"
            if len(uncovered) > 1
            else f"No spending phase covers age {uncovered[0]}",
        )

    for expense in scenario.one_off_expenses:
        if expense.amount < 0:
            result.add_error("one_off_expenses", f"Expense at age {expense.age} is negative")
        if not scenario.start_age <= expense.age <= scenario.end_age:
            result.add_warning(
                "one_off_expenses",
                f"Expense at age {expense.age} is outside the simulated ages",
            )

    return result


def validate_orders(scenario: Scenario) -> ValidationResult:
    """Validate that the withdrawal and tax payment orders are permutations."""
    result = ValidationResult()

    order = scenario.withdrawal_order
    if len(order) != len(SPENDING_ACCOUNTS) or set(order) != SPENDING_ACCOUNTS:
        result.add_error("withdrawal_order", "Must list each account exactly once")

    tax_order = scenario.tax_payment_order
    if len(tax_order) != len(TAX_PAYMENT_ACCOUNTS) or set(tax_order) != TAX_PAYMENT_ACCOUNTS:
        result.add_error(
            "tax_payment_order", "Must list IRA, taxable and cash exactly once"
        )

    return result


def validate_social_security(scenario: Scenario) -> ValidationResult:
    """Validate Social Security inputs."""
    result = ValidationResult()

    if not SS_MIN_CLAIM_AGE <= scenario.ss_claim_age <= SS_MAX_CLAIM_AGE:
        result.add_error(
            "ss_claim_age", f"Must be between {SS_MIN_CLAIM_AGE} and {SS_MAX_CLAIM_AGE}"
        )
    if scenario.ss_annual_benefit < 0:
        result.add_error("ss_annual_benefit", "Cannot be negative")

    return result


def validate_conversions(scenario: Scenario) -> ValidationResult:
    """Validate the Roth conversion plan."""
    result = ValidationResult()

    if scenario.roth_conversion_amount < 0:
        result.add_error("roth_conversion_amount", "Cannot be negative")
    if scenario.roth_conversion_end_age < scenario.roth_conversion_start_age:
        result.add_error("roth_conversion_end_age", "Must be at least conversion start age")

    return result


def validate_scenario(scenario: Scenario) -> ValidationResult:
    """Run all validations and combine results."""
    combined = ValidationResult()

    validations = [
        validate_ages(scenario),
        validate_balances(scenario),
        validate_rates(scenario),
        validate_spending(scenario),
        validate_orders(scenario),
        validate_social_security(scenario),
        validate_conversions(scenario),
    ]

    for result in validations:
        combined.extend(result)

    return combined
