"""Deterministic year-by-year simulation engine for retirement drawdown."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from core.accounts import SimulationState, draw_from
from core.ledger import (
    Ledger,
    LedgerAttribution,
    LedgerEntry,
    LedgerEntryType,
    LedgerPhase,
    LedgerPurpose,
)
from core.rmd import calculate_rmd
from core.scenario import AccountType, Scenario
from core.social_security import calculate_ss_benefit, calculate_ss_taxable
from core.tax_config import TAX_ITERATION_LIMITS
from core.taxes import TaxCalculation, TaxSources, calculate_yearly_tax
from utils.helpers import inflation_factor

logger = logging.getLogger(__name__)


@dataclass
class AccountTotals:
    """Dollar amounts per account, accumulated over one year."""

    cash: float = 0.0
    taxable: float = 0.0
    ira: float = 0.0
    roth: float = 0.0

    def add(self, account: AccountType, amount: float) -> None:
        """Add ``amount`` to the total for ``account``."""
        setattr(self, account.value, getattr(self, account.value) + amount)

    def total(self) -> float:
        """Sum across all accounts."""
        return self.cash + self.taxable + self.ira + self.roth


@dataclass(frozen=True)
class SpendingComponents:
    """How the year's spending need was built up."""

    base_spending: float
    one_off_expenses: float
    total_before_income: float
    ss_income: float
    net_spending_need: float


@dataclass(frozen=True)
class GrowthBreakdown:
    """Investment growth and cash interest credited in a year."""

    ira: float = 0.0
    roth: float = 0.0
    taxable: float = 0.0
    cash: float = 0.0

    @property
    def total(self) -> float:
        """Total growth across all accounts."""
        return self.ira + self.roth + self.taxable + self.cash


@dataclass(frozen=True)
class TanwComponents:
    """After-tax value of each account at year end."""

    ira_after_tax: float
    roth_after_tax: float
    taxable_after_tax: float
    cash_after_tax: float

    def total(self) -> float:
        """Tax-Adjusted Net Worth."""
        return (
            self.ira_after_tax
            + self.roth_after_tax
            + self.taxable_after_tax
            + self.cash_after_tax
        )


@dataclass(frozen=True)
class YearRow:
    """
    Outcome of one simulated year.

    ``spending_funded_from`` holds the net amount each account delivered
    for spending; ``tax_paid_from`` holds the gross amount removed from
    each account to pay taxes.
    """

    year_index: int
    age: int

    ira_end: float
    roth_end: float
    taxable_end: float
    cash_end: float
    total_end: float

    spending_need: float
    spending_components: SpendingComponents
    spending_funded_from: AccountTotals
    spending_shortfall: float

    tax_owed_ordinary: float
    tax_owed_cap_gains: float
    tax_owed_total: float
    tax_sources: TaxSources
    tax_paid_from: AccountTotals
    tax_shortfall: float

    ira_distributions_planned: float
    rmd_required: float
    rmd_forced: float
    ira_distributions_actual: float
    rmd_surplus_reinvested: float
    roth_conversion: float

    ss_gross: float
    ss_taxable: float
    ss_effective_rate: float

    growth: GrowthBreakdown
    tanw: float
    tanw_components: TanwComponents

    def as_record(self) -> dict[str, Any]:
        """Flatten the row (nested breakdowns become prefixed columns)."""
        record: dict[str, Any] = {
            "year_index": self.year_index,
            "age": self.age,
            "ira_end": self.ira_end,
            "roth_end": self.roth_end,
            "taxable_end": self.taxable_end,
            "cash_end": self.cash_end,
            "total_end": self.total_end,
            "spending_need": self.spending_need,
            "base_spending": self.spending_components.base_spending,
            "one_off_expenses": self.spending_components.one_off_expenses,
            "net_spending_need": self.spending_components.net_spending_need,
            "spending_shortfall": self.spending_shortfall,
            "tax_owed_ordinary": self.tax_owed_ordinary,
            "tax_owed_cap_gains": self.tax_owed_cap_gains,
            "tax_owed_total": self.tax_owed_total,
            "tax_shortfall": self.tax_shortfall,
            "ira_distributions_planned": self.ira_distributions_planned,
            "rmd_required": self.rmd_required,
            "rmd_forced": self.rmd_forced,
            "ira_distributions_actual": self.ira_distributions_actual,
            "rmd_surplus_reinvested": self.rmd_surplus_reinvested,
            "roth_conversion": self.roth_conversion,
            "ss_gross": self.ss_gross,
            "ss_taxable": self.ss_taxable,
            "ss_effective_rate": self.ss_effective_rate,
            "growth_total": self.growth.total,
            "tanw": self.tanw,
        }
        for account in ("cash", "taxable", "ira", "roth"):
            record[f"funded_from_{account}"] = getattr(self.spending_funded_from, account)
        for account in ("cash", "taxable", "ira"):
            record[f"tax_paid_from_{account}"] = getattr(self.tax_paid_from, account)
        for source in (
            "ira_distributions",
            "roth_conversion",
            "ss_taxable",
            "capital_gains",
            "cash_interest",
        ):
            record[f"tax_on_{source}"] = getattr(self.tax_sources, source)
        return record


@dataclass(frozen=True)
class SimulationSummary:
    """
    Aggregate metrics over a whole run.

    ``total_taxes_paid`` sums the tax owed each year; ``worst_shortfall_year``
    is the age with the largest spending shortfall (None without shortfalls).
    """

    final_total: float = 0.0
    final_tanw: float = 0.0
    total_taxes_paid: float = 0.0
    total_ordinary_tax: float = 0.0
    total_cap_gains_tax: float = 0.0
    total_converted: float = 0.0
    total_rmds: float = 0.0
    total_spending_shortfall: float = 0.0
    worst_shortfall_year: int | None = None


@dataclass
class SimulationResult:
    """Results from a drawdown simulation."""

    scenario: Scenario
    year_rows: list[YearRow]
    ledger: list[LedgerEntry]
    summary: SimulationSummary
    ledger_by_year: dict[int, list[LedgerEntry]] = field(default_factory=dict)

    def to_dataframe(self) -> pd.DataFrame:
        """Year rows as a DataFrame indexed by age."""
        frame = pd.DataFrame([row.as_record() for row in self.year_rows])
        if frame.empty:
            return frame
        return frame.set_index("age")

    def ledger_dataframe(self) -> pd.DataFrame:
        """Ledger entries as a DataFrame in creation order."""
        return pd.DataFrame([entry.as_record() for entry in self.ledger])


@dataclass(frozen=True)
class _SpendingNeed:
    base_spending: float
    one_off_expenses: float
    total_before_income: float


@dataclass
class _WaterfallOutcome:
    """Accumulated result of walking an account priority list."""

    by_account: AccountTotals = field(default_factory=AccountTotals)
    ira_gross: float = 0.0
    taxable_gross: float = 0.0
    taxable_gains: float = 0.0
    tax_ordinary: float = 0.0
    tax_cap_gains: float = 0.0
    remaining: float = 0.0


@dataclass(frozen=True)
class _TaxSettlement:
    tax: TaxCalculation
    ss_taxable: float
    paid_from: AccountTotals
    ira_gross: float
    taxable_gains: float
    shortfall: float


_DRAW_ATTRIBUTION = {
    AccountType.CASH: LedgerAttribution.CASH_WITHDRAWAL,
    AccountType.ROTH: LedgerAttribution.ROTH_WITHDRAWAL,
    AccountType.IRA: LedgerAttribution.IRA_DISTRIBUTION,
    AccountType.TAXABLE: LedgerAttribution.TAXABLE_SALE,
}

_SPENDING_DESCRIPTIONS = {
    AccountType.CASH: "Cash used for spending (no tax)",
    AccountType.ROTH: "Roth withdrawal for spending (tax-free)",
    AccountType.IRA: "IRA withdrawal for spending (net after income tax withheld)",
    AccountType.TAXABLE: "Taxable sale for spending (net after capital gains tax)",
}

_TAX_PAYMENT_DESCRIPTIONS = {
    AccountType.CASH: "Cash used to pay taxes (from cash reserves or prior income)",
    AccountType.TAXABLE: "Taxable sale to raise cash for taxes (generates additional cap gains tax)",
    AccountType.IRA: "IRA withdrawal to raise cash for taxes (generates additional income tax)",
}

_GROWTH_DESCRIPTIONS = {
    AccountType.IRA: "IRA growth",
    AccountType.ROTH: "Roth growth",
    AccountType.TAXABLE: "Taxable account growth",
    AccountType.CASH: "Cash interest",
}


def _calculate_spending_need(scenario: Scenario, year_index: int, age: int) -> _SpendingNeed:
    """Inflation-adjusted spending for the year (phase spending plus one-offs)."""
    factor = inflation_factor(scenario.inflation_rate, year_index)
    phase = scenario.spending_phase_at(age)
    base_spending = (phase.annual_amount if phase else 0.0) * factor
    one_off = scenario.one_off_total_at(age) * factor
    return _SpendingNeed(
        base_spending=base_spending,
        one_off_expenses=one_off,
        total_before_income=base_spending + one_off,
    )


def _apply_growth(
    state: SimulationState,
    scenario: Scenario,
    ledger: Ledger,
    year_index: int,
    age: int,
) -> GrowthBreakdown:
    """Credit one year of returns to every account (in-place)."""
    growth = GrowthBreakdown(
        ira=state.ira * scenario.investment_return,
        roth=state.roth * scenario.investment_return,
        taxable=state.taxable_market * scenario.investment_return,
        cash=state.cash * scenario.cash_return,
    )
    state.ira += growth.ira
    state.roth += growth.roth
    state.taxable_market += growth.taxable
    state.cash += growth.cash

    for account, amount in (
        (AccountType.IRA, growth.ira),
        (AccountType.ROTH, growth.roth),
        (AccountType.TAXABLE, growth.taxable),
        (AccountType.CASH, growth.cash),
    ):
        if amount == 0:
            continue
        ledger.record(
            year_index=year_index,
            age=age,
            phase=LedgerPhase.GROWTH,
            entry_type=LedgerEntryType.GROWTH,
            amount_gross=amount,
            account=account,
            purpose=LedgerPurpose.REINVEST,
            attribution=(
                LedgerAttribution.INTEREST
                if account == AccountType.CASH
                else LedgerAttribution.CAPITAL_GAINS
            ),
            description=_GROWTH_DESCRIPTIONS[account],
        )
    return growth


def _run_waterfall(
    target_net: float,
    order: tuple[AccountType, ...],
    state: SimulationState,
    scenario: Scenario,
    ledger: Ledger,
    year_index: int,
    age: int,
    *,
    for_taxes: bool,
) -> _WaterfallOutcome:
    """
    Draw ``target_net`` from accounts in priority order.

    Spending draws credit the account with the net amount delivered; tax
    payments credit it with the gross amount removed. Roth is never used
    to pay taxes.
    """
    outcome = _WaterfallOutcome()
    remaining = target_net

    for account in order:
        if remaining <= 0:
            break
        if for_taxes and account == AccountType.ROTH:
            continue
        if state.balance(account) <= 0:
            continue

        draw = draw_from(account, state, remaining, scenario)
        remaining -= draw.net
        outcome.by_account.add(account, draw.gross if for_taxes else draw.net)
        if account == AccountType.IRA:
            outcome.ira_gross += draw.gross
            outcome.tax_ordinary += draw.tax_ordinary
        elif account == AccountType.TAXABLE:
            outcome.taxable_gross += draw.gross
            outcome.taxable_gains += draw.gain
            outcome.tax_cap_gains += draw.tax_cap_gains

        if draw.gross <= 0:
            continue
        ledger.record(
            year_index=year_index,
            age=age,
            phase=LedgerPhase.TAX_SETTLEMENT if for_taxes else LedgerPhase.SPENDING,
            entry_type=LedgerEntryType.TAX_PAYMENT if for_taxes else LedgerEntryType.WITHDRAWAL,
            amount_gross=draw.gross,
            amount_net=draw.net,
            account=account,
            tax_ordinary=draw.tax_ordinary if account == AccountType.IRA else None,
            tax_cap_gains=draw.tax_cap_gains if account == AccountType.TAXABLE else None,
            purpose=LedgerPurpose.TAX if for_taxes else LedgerPurpose.SPENDING,
            attribution=_DRAW_ATTRIBUTION[account],
            description=(
                _TAX_PAYMENT_DESCRIPTIONS[account]
                if for_taxes
                else _SPENDING_DESCRIPTIONS[account]
            ),
        )

    outcome.remaining = max(0.0, remaining)
    return outcome


def _settle_taxes(
    state: SimulationState,
    scenario: Scenario,
    ledger: Ledger,
    year_index: int,
    age: int,
    *,
    ira_distributions: float,
    realized_cap_gains: float,
    roth_conversion: float,
    cash_interest: float,
    ss_gross: float,
) -> _TaxSettlement:
    """
    Compute and pay the year's taxes by fixed-point iteration.

    Each round recomputes Social Security taxability and the total bill
    from all income so far, then pays the unpaid remainder through the
    tax payment waterfall. IRA distributions and taxable sales made to pay
    tax are themselves taxable, so the next round picks them up. Stops when
    the remainder is within tolerance, when a round was paid from cash
    alone, or after the maximum number of rounds.
    """
    limits = TAX_ITERATION_LIMITS
    paid_from = AccountTotals()
    payment_ira_gross = 0.0
    payment_gains = 0.0
    shortfall = 0.0
    ira_for_tax = ira_distributions
    cap_gains_for_tax = realized_cap_gains
    tax: TaxCalculation | None = None
    ss_taxable = 0.0

    for _ in range(limits.max_rounds):
        ss_taxable = calculate_ss_taxable(
            ss_gross,
            ira_for_tax + roth_conversion + cap_gains_for_tax + cash_interest,
        ).taxable
        tax = calculate_yearly_tax(
            ira_for_tax,
            roth_conversion,
            cap_gains_for_tax,
            cash_interest,
            ss_gross,
            ss_taxable,
            scenario.ordinary_income_rate,
            scenario.capital_gains_rate,
        )

        tax_to_pay = tax.total_tax - paid_from.total()
        if tax_to_pay <= limits.tolerance:
            break

        payment = _run_waterfall(
            tax_to_pay,
            scenario.tax_payment_order,
            state,
            scenario,
            ledger,
            year_index,
            age,
            for_taxes=True,
        )
        paid_from.cash += payment.by_account.cash
        paid_from.taxable += payment.by_account.taxable
        paid_from.ira += payment.by_account.ira
        payment_ira_gross += payment.ira_gross
        payment_gains += payment.taxable_gains
        shortfall = payment.remaining

        ira_for_tax = ira_distributions + payment_ira_gross
        cap_gains_for_tax = realized_cap_gains + payment_gains

        if payment.ira_gross == 0 and payment.taxable_gains == 0:
            break

    if shortfall > limits.tolerance:
        logger.warning(
            f"Year {year_index} (age {age}): tax shortfall of ${shortfall:,.2f} - "
            "insufficient funds to pay all taxes"
        )

    assert tax is not None
    return _TaxSettlement(
        tax=tax,
        ss_taxable=ss_taxable,
        paid_from=paid_from,
        ira_gross=payment_ira_gross,
        taxable_gains=payment_gains,
        shortfall=shortfall,
    )


def _tanw_components(state: SimulationState, scenario: Scenario) -> TanwComponents:
    """After-tax value of each account for the net worth metric."""
    return TanwComponents(
        ira_after_tax=state.ira * (1 - scenario.assumed_ira_tax_rate),
        roth_after_tax=state.roth,
        taxable_after_tax=(
            state.taxable_market - state.unrealized_gains() * scenario.capital_gains_rate
        ),
        cash_after_tax=state.cash,
    )


def _simulate_year(
    state: SimulationState,
    scenario: Scenario,
    ledger: Ledger,
    year_index: int,
    prior_year_ira: float,
) -> YearRow:
    """Run one year's state transition (in-place on ``state``) and build its row."""
    age = scenario.start_age + year_index

    # Growth always precedes withdrawals, year 0 included.
    growth = _apply_growth(state, scenario, ledger, year_index, age)
    cash_interest = max(0.0, growth.cash)

    spending_need = _calculate_spending_need(scenario, year_index, age)

    ss_gross = 0.0
    if scenario.ss_enabled:
        ss_gross = calculate_ss_benefit(
            age,
            scenario.ss_annual_benefit,
            scenario.ss_claim_age,
            year_index,
            scenario.inflation_rate,
        )
    if ss_gross > 0:
        state.cash += ss_gross
        ledger.record(
            year_index=year_index,
            age=age,
            phase=LedgerPhase.SPENDING,
            entry_type=LedgerEntryType.INCOME,
            amount_gross=ss_gross,
            account=AccountType.CASH,
            purpose=LedgerPurpose.INCOME,
            attribution=LedgerAttribution.SOCIAL_SECURITY,
            description="Social Security benefit",
        )

    rmd_required = calculate_rmd(age, prior_year_ira, scenario.birth_year)

    net_spending_need = max(0.0, spending_need.total_before_income - ss_gross)
    spending = _run_waterfall(
        net_spending_need,
        scenario.withdrawal_order,
        state,
        scenario,
        ledger,
        year_index,
        age,
        for_taxes=False,
    )

    roth_conversion = 0.0
    if (
        scenario.roth_conversion_start_age <= age <= scenario.roth_conversion_end_age
        and scenario.roth_conversion_amount > 0
        and state.ira > 0
    ):
        roth_conversion = min(state.ira, scenario.roth_conversion_amount)
        state.ira -= roth_conversion
        state.roth += roth_conversion
        ledger.record(
            year_index=year_index,
            age=age,
            phase=LedgerPhase.CONVERSION,
            entry_type=LedgerEntryType.TRANSFER,
            amount_gross=roth_conversion,
            account_from=AccountType.IRA,
            account_to=AccountType.ROTH,
            purpose=LedgerPurpose.CONVERSION,
            attribution=LedgerAttribution.ROTH_CONVERSION,
            description="Roth conversion",
        )

    ira_distributions_planned = spending.ira_gross
    ira_distributions = spending.ira_gross
    rmd_forced = 0.0
    if rmd_required > ira_distributions_planned:
        rmd_forced = min(state.ira, rmd_required - ira_distributions_planned)
        if rmd_forced > 0:
            # Gross goes to cash; its tax is settled with the rest of the year's bill.
            state.ira -= rmd_forced
            state.cash += rmd_forced
            ira_distributions += rmd_forced
            rmd_tax = rmd_forced * scenario.ordinary_income_rate
            ledger.record(
                year_index=year_index,
                age=age,
                phase=LedgerPhase.RMD,
                entry_type=LedgerEntryType.WITHDRAWAL,
                amount_gross=rmd_forced,
                amount_net=rmd_forced - rmd_tax,
                account=AccountType.IRA,
                tax_ordinary=rmd_tax,
                purpose=LedgerPurpose.RMD,
                attribution=LedgerAttribution.IRA_DISTRIBUTION,
                description="RMD forced distribution (gross goes to cash, subject to income tax)",
            )

    settlement = _settle_taxes(
        state,
        scenario,
        ledger,
        year_index,
        age,
        ira_distributions=ira_distributions,
        realized_cap_gains=spending.taxable_gains,
        roth_conversion=roth_conversion,
        cash_interest=cash_interest,
        ss_gross=ss_gross,
    )
    ira_distributions += settlement.ira_gross

    rmd_surplus_reinvested = 0.0
    if rmd_forced > 0:
        # Only what cash still holds after all tax payments can be reinvested.
        theoretical_net_rmd = rmd_forced * (1 - scenario.ordinary_income_rate)
        rmd_surplus_reinvested = max(0.0, min(theoretical_net_rmd, state.cash))
        if rmd_surplus_reinvested > 0:
            state.cash -= rmd_surplus_reinvested
            state.taxable_market += rmd_surplus_reinvested
            state.taxable_basis += rmd_surplus_reinvested
            ledger.record(
                year_index=year_index,
                age=age,
                phase=LedgerPhase.REINVEST,
                entry_type=LedgerEntryType.DEPOSIT,
                amount_gross=rmd_surplus_reinvested,
                account=AccountType.TAXABLE,
                purpose=LedgerPurpose.REINVEST,
                attribution=LedgerAttribution.IRA_DISTRIBUTION,
                description="Reinvested RMD surplus",
            )

    state.clamp()
    tanw_components = _tanw_components(state, scenario)

    return YearRow(
        year_index=year_index,
        age=age,
        ira_end=state.ira,
        roth_end=state.roth,
        taxable_end=state.taxable_market,
        cash_end=state.cash,
        total_end=state.total(),
        spending_need=spending_need.total_before_income,
        spending_components=SpendingComponents(
            base_spending=spending_need.base_spending,
            one_off_expenses=spending_need.one_off_expenses,
            total_before_income=spending_need.total_before_income,
            ss_income=ss_gross,
            net_spending_need=net_spending_need,
        ),
        spending_funded_from=spending.by_account,
        spending_shortfall=spending.remaining,
        tax_owed_ordinary=settlement.tax.ordinary_income,
        tax_owed_cap_gains=settlement.tax.capital_gains,
        tax_owed_total=settlement.tax.total_tax,
        tax_sources=settlement.tax.sources,
        tax_paid_from=settlement.paid_from,
        tax_shortfall=settlement.shortfall,
        ira_distributions_planned=ira_distributions_planned,
        rmd_required=rmd_required,
        rmd_forced=rmd_forced,
        ira_distributions_actual=ira_distributions,
        rmd_surplus_reinvested=rmd_surplus_reinvested,
        roth_conversion=roth_conversion,
        ss_gross=ss_gross,
        ss_taxable=settlement.ss_taxable,
        ss_effective_rate=settlement.ss_taxable / ss_gross if ss_gross > 0 else 0.0,
        growth=growth,
        tanw=tanw_components.total(),
        tanw_components=tanw_components,
    )


def _compute_summary(year_rows: list[YearRow]) -> SimulationSummary:
    """Aggregate totals over all years."""
    if not year_rows:
        return SimulationSummary()

    worst_shortfall = 0.0
    worst_shortfall_year: int | None = None
    for row in year_rows:
        if row.spending_shortfall > worst_shortfall:
            worst_shortfall = row.spending_shortfall
            worst_shortfall_year = row.age

    final = year_rows[-1]
    return SimulationSummary(
        final_total=final.total_end,
        final_tanw=final.tanw,
        total_taxes_paid=sum(row.tax_owed_total for row in year_rows),
        total_ordinary_tax=sum(row.tax_owed_ordinary for row in year_rows),
        total_cap_gains_tax=sum(row.tax_owed_cap_gains for row in year_rows),
        total_converted=sum(row.roth_conversion for row in year_rows),
        total_rmds=sum(row.rmd_required for row in year_rows),
        total_spending_shortfall=sum(row.spending_shortfall for row in year_rows),
        worst_shortfall_year=worst_shortfall_year,
    )


def run_simulation(scenario: Scenario) -> SimulationResult:
    """
    Run a deterministic drawdown simulation.

    Each year, in order: growth, spending need, Social Security income,
    RMD requirement, spending withdrawals, Roth conversion, forced RMD
    top-up, tax settlement, RMD surplus reinvestment, then the year row.
    The scenario is never modified; every call starts from fresh state.

    Args:
        scenario: Scenario to simulate from ``start_age`` to ``end_age`` inclusive

    Returns:
        SimulationResult with one row per year, the ledger and a summary
    """
    state = SimulationState.from_scenario(scenario)
    ledger = Ledger()
    year_rows: list[YearRow] = []

    # RMDs use the IRA balance at the end of the previous simulated year.
    prior_year_ira = state.ira

    for year_index in range(scenario.years):
        row = _simulate_year(state, scenario, ledger, year_index, prior_year_ira)
        year_rows.append(row)
        prior_year_ira = state.ira

    return SimulationResult(
        scenario=scenario,
        year_rows=year_rows,
        ledger=list(ledger.entries),
        summary=_compute_summary(year_rows),
        ledger_by_year=ledger.by_year(),
    )
