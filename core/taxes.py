"""Flat-rate yearly tax calculation with per-source attribution."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TaxSources:
    """Tax attributed to each income stream for the year."""

    ira_distributions: float = 0.0
    roth_conversion: float = 0.0
    ss_taxable: float = 0.0
    capital_gains: float = 0.0
    cash_interest: float = 0.0

    def total(self) -> float:
        """Total attributed tax."""
        return (
            self.ira_distributions
            + self.roth_conversion
            + self.ss_taxable
            + self.capital_gains
            + self.cash_interest
        )


@dataclass(frozen=True)
class TaxCalculation:
    """
    Result of a yearly tax calculation.

    Attributes:
        ordinary_income: Tax on ordinary income (IRA, conversion, SS, interest)
        capital_gains: Tax on realized capital gains
        total_tax: Sum of ordinary and capital gains tax
        sources: Tax attributed to each contributing income stream
    """

    ordinary_income: float
    capital_gains: float
    total_tax: float
    sources: TaxSources


def calculate_yearly_tax(
    ira_distributions: float,
    roth_conversion: float,
    realized_cap_gains: float,
    cash_interest: float,
    ss_gross: float,
    ss_taxable: float,
    ordinary_rate: float,
    cap_gains_rate: float,
) -> TaxCalculation:
    """
    Calculate the year's tax bill using blended flat rates.

    Ordinary income is IRA distributions, Roth conversions, the taxable
    portion of Social Security and cash interest, all at ``ordinary_rate``.
    Realized capital gains are taxed at ``cap_gains_rate``.

    Args:
        ira_distributions: Gross IRA distributions for the year
        roth_conversion: Amount converted from IRA to Roth
        realized_cap_gains: Gains realized by taxable account sales
        cash_interest: Interest earned on cash
        ss_gross: Gross Social Security benefits (only the taxable part is taxed)
        ss_taxable: Taxable portion of Social Security benefits
        ordinary_rate: Effective ordinary income tax rate
        cap_gains_rate: Effective capital gains tax rate

    Returns:
        TaxCalculation with totals and per-source attribution
    """
    ordinary_base = ira_distributions + roth_conversion + ss_taxable + cash_interest
    ordinary_tax = ordinary_base * ordinary_rate
    cap_gains_tax = realized_cap_gains * cap_gains_rate

    return TaxCalculation(
        ordinary_income=ordinary_tax,
        capital_gains=cap_gains_tax,
        total_tax=ordinary_tax + cap_gains_tax,
        sources=TaxSources(
            ira_distributions=ira_distributions * ordinary_rate,
            roth_conversion=roth_conversion * ordinary_rate,
            ss_taxable=ss_taxable * ordinary_rate,
            capital_gains=cap_gains_tax,
            cash_interest=cash_interest * ordinary_rate,
        ),
    )
