"""Shared pytest fixtures for drawdown planner tests."""

from typing import Any, Callable

import pytest

from core.scenario import DEFAULT_SCENARIO, AccountType, Scenario


def minimal_scenario(**overrides: Any) -> Scenario:
    """One year at 62 with zero balances and zero rates; only taxes are set."""
    values: dict[str, Any] = dict(
        start_age=62,
        end_age=62,
        ira_balance=0.0,
        roth_balance=0.0,
        taxable_balance=0.0,
        taxable_basis=0.0,
        cash_balance=0.0,
        investment_return=0.0,
        cash_return=0.0,
        inflation_rate=0.0,
        ordinary_income_rate=0.22,
        capital_gains_rate=0.15,
        spending_phases=(),
        one_off_expenses=(),
        ss_annual_benefit=0.0,
        ss_claim_age=67,
        ss_enabled=False,
        withdrawal_order=(
            AccountType.CASH,
            AccountType.TAXABLE,
            AccountType.IRA,
            AccountType.ROTH,
        ),
        tax_payment_order=(AccountType.CASH, AccountType.TAXABLE, AccountType.IRA),
        roth_conversion_amount=0.0,
        roth_conversion_start_age=63,
        roth_conversion_end_age=72,
        assumed_ira_tax_rate=0.22,
    )
    values.update(overrides)
    return Scenario(**values)


@pytest.fixture
def make_scenario() -> Callable[..., Scenario]:
    """Factory for minimal scenarios with selected fields overridden."""
    return minimal_scenario


@pytest.fixture
def default_scenario() -> Scenario:
    """The stock 62-95 planning scenario."""
    return DEFAULT_SCENARIO


@pytest.fixture
def short_default_scenario() -> Scenario:
    """Default scenario cut to ten years to keep sweeps fast."""
    return DEFAULT_SCENARIO.with_overrides(end_age=71)
