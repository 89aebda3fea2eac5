"""Scenario inputs for the retirement drawdown simulation."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from enum import Enum
from typing import Any, Iterable


class AccountType(str, Enum):
    """Account buckets tracked by the simulation."""

    IRA = "ira"
    ROTH = "roth"
    TAXABLE = "taxable"
    CASH = "cash"

    @property
    def label(self) -> str:
        """Display name for the account."""
        return _ACCOUNT_LABELS[self]


_ACCOUNT_LABELS = {
    AccountType.IRA: "IRA",
    AccountType.ROTH: "Roth",
    AccountType.TAXABLE: "Taxable",
    AccountType.CASH: "Cash",
}


def format_order(order: Iterable[AccountType]) -> str:
    """Format an account order as "Cash → Taxable → IRA → Roth"."""
    return " → ".join(AccountType(account).label for account in order)


@dataclass(frozen=True)
class SpendingPhase:
    """Annual spending (in today's dollars) between two ages, inclusive."""

    from_age: int
    to_age: int
    annual_amount: float
    label: str = ""

    def covers(self, age: int) -> bool:
        """Return True if this phase applies at ``age``."""
        return self.from_age <= age <= self.to_age


@dataclass(frozen=True)
class OneOffExpense:
    """A single expense (in today's dollars) at a specific age."""

    age: int
    amount: float
    note: str = ""


@dataclass(frozen=True)
class Scenario:
    """
    Immutable input for one simulation run.

    Balances are as of the start of ``start_age``. Rates are annual and
    compounding. ``withdrawal_order`` sets the spending waterfall over all
    four accounts; ``tax_payment_order`` sets the tax waterfall over IRA,
    taxable and cash (Roth never funds tax payments).

    Attributes:
        start_age: First simulated age
        end_age: Last simulated age (inclusive)
        ira_balance: Pre-tax IRA balance
        roth_balance: Roth IRA balance
        taxable_balance: Taxable brokerage market value
        taxable_basis: Taxable brokerage cost basis
        cash_balance: Cash balance
        investment_return: Annual return on IRA, Roth and taxable
        cash_return: Annual interest rate on cash
        inflation_rate: Annual inflation (also used as the SS COLA)
        ordinary_income_rate: Blended effective ordinary income tax rate
        capital_gains_rate: Blended effective capital gains tax rate
        spending_phases: Non-overlapping spending phases
        one_off_expenses: Single-year expenses
        ss_annual_benefit: Annual Social Security benefit at Full Retirement Age
        ss_claim_age: Social Security claiming age (62-70)
        ss_enabled: Whether Social Security income is modelled
        withdrawal_order: Spending withdrawal priority
        tax_payment_order: Tax payment priority
        roth_conversion_amount: Annual Roth conversion amount
        roth_conversion_start_age: First conversion age (inclusive)
        roth_conversion_end_age: Last conversion age (inclusive)
        assumed_ira_tax_rate: Flat rate applied to the IRA for net worth
        birth_year: Optional birth year for the SECURE 2.0 RMD start age
    """

    start_age: int = 62
    end_age: int = 95

    ira_balance: float = 0.0
    roth_balance: float = 0.0
    taxable_balance: float = 0.0
    taxable_basis: float = 0.0
    cash_balance: float = 0.0

    investment_return: float = 0.07
    cash_return: float = 0.03
    inflation_rate: float = 0.03

    ordinary_income_rate: float = 0.22
    capital_gains_rate: float = 0.15

    spending_phases: tuple[SpendingPhase, ...] = ()
    one_off_expenses: tuple[OneOffExpense, ...] = ()

    ss_annual_benefit: float = 0.0
    ss_claim_age: int = 67
    ss_enabled: bool = False

    withdrawal_order: tuple[AccountType, ...] = (
        AccountType.CASH,
        AccountType.TAXABLE,
        AccountType.IRA,
        AccountType.ROTH,
    )
    tax_payment_order: tuple[AccountType, ...] = (
        AccountType.CASH,
        AccountType.TAXABLE,
        AccountType.IRA,
    )

    roth_conversion_amount: float = 0.0
    roth_conversion_start_age: int = 63
    roth_conversion_end_age: int = 72

    assumed_ira_tax_rate: float = 0.22
    birth_year: int | None = None

    def __post_init__(self) -> None:
        # Accept lists and plain strings from forms and dictionaries.
        object.__setattr__(self, "spending_phases", tuple(self.spending_phases))
        object.__setattr__(self, "one_off_expenses", tuple(self.one_off_expenses))
        object.__setattr__(
            self, "withdrawal_order", tuple(AccountType(a) for a in self.withdrawal_order)
        )
        object.__setattr__(
            self, "tax_payment_order", tuple(AccountType(a) for a in self.tax_payment_order)
        )

    @property
    def years(self) -> int:
        """Number of simulated years (start and end age inclusive)."""
        return max(0, self.end_age - self.start_age + 1)

    def starting_total(self) -> float:
        """Total starting balance across all accounts."""
        return self.ira_balance + self.roth_balance + self.taxable_balance + self.cash_balance

    def spending_phase_at(self, age: int) -> SpendingPhase | None:
        """Return the first spending phase covering ``age``, if any."""
        for phase in self.spending_phases:
            if phase.covers(age):
                return phase
        return None

    def one_off_total_at(self, age: int) -> float:
        """Sum of one-off expenses at exactly ``age`` (today's dollars)."""
        return sum(expense.amount for expense in self.one_off_expenses if expense.age == age)

    def with_overrides(self, **changes: Any) -> "Scenario":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Scenario":
        """Create from a snake_case dictionary; missing keys keep defaults."""
        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in data.items() if key in known}
        if "spending_phases" in values:
            values["spending_phases"] = tuple(
                phase if isinstance(phase, SpendingPhase) else SpendingPhase(**phase)
                for phase in values["spending_phases"]
            )
        if "one_off_expenses" in values:
            values["one_off_expenses"] = tuple(
                item if isinstance(item, OneOffExpense) else OneOffExpense(**item)
                for item in values["one_off_expenses"]
            )
        return DEFAULT_SCENARIO.with_overrides(**values)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary (account orders as strings)."""
        data = asdict(self)
        data["spending_phases"] = [asdict(phase) for phase in self.spending_phases]
        data["one_off_expenses"] = [asdict(item) for item in self.one_off_expenses]
        data["withdrawal_order"] = [account.value for account in self.withdrawal_order]
        data["tax_payment_order"] = [account.value for account in self.tax_payment_order]
        return data


DEFAULT_SCENARIO = Scenario(
    start_age=62,
    end_age=95,
    ira_balance=2_000_000.0,
    roth_balance=0.0,
    taxable_balance=500_000.0,
    taxable_basis=250_000.0,
    cash_balance=200_000.0,
    investment_return=0.07,
    cash_return=0.03,
    inflation_rate=0.03,
    ordinary_income_rate=0.22,
    capital_gains_rate=0.15,
    spending_phases=(SpendingPhase(from_age=62, to_age=95, annual_amount=100_000.0, label="Base"),),
    one_off_expenses=(),
    ss_annual_benefit=36_000.0,
    ss_claim_age=67,
    ss_enabled=True,
    withdrawal_order=(
        AccountType.CASH,
        AccountType.TAXABLE,
        AccountType.IRA,
        AccountType.ROTH,
    ),
    tax_payment_order=(AccountType.CASH, AccountType.TAXABLE, AccountType.IRA),
    roth_conversion_amount=50_000.0,
    roth_conversion_start_age=63,
    roth_conversion_end_age=72,
    assumed_ira_tax_rate=0.22,
)
