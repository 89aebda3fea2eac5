"""Social Security benefit and taxability calculations."""

from __future__ import annotations

from dataclasses import dataclass

from core.tax_config import (
    SS_ADJUSTMENT_FACTORS,
    SS_THRESHOLDS_SINGLE,
    SSTaxThresholds,
)


@dataclass(frozen=True)
class SSTaxability:
    """Taxable portion of Social Security benefits for a year."""

    taxable: float
    provisional_income: float

    def effective_rate(self, ss_gross: float) -> float:
        """Fraction of gross benefits that is taxable."""
        if ss_gross <= 0:
            return 0.0
        return self.taxable / ss_gross


def claim_age_factor(claim_age: int) -> float:
    """Benefit multiplier for claiming at ``claim_age`` (1.0 when unlisted)."""
    return SS_ADJUSTMENT_FACTORS.get(claim_age, 1.0)


def calculate_ss_benefit(
    age: int,
    fra_amount: float,
    claim_age: int,
    years_from_start: int,
    inflation_rate: float,
) -> float:
    """
    Calculate the Social Security benefit received in a year.

    The benefit at Full Retirement Age is scaled by the claiming-age factor
    and then grown by inflation (as a COLA proxy) from the simulation start.

    Args:
        age: Age in the current year
        fra_amount: Annual benefit at Full Retirement Age, in today's dollars
        claim_age: Age at which benefits are claimed (62-70)
        years_from_start: Years since the simulation start (for COLA)
        inflation_rate: Annual inflation rate

    Returns:
        Annual benefit for the year (0 before the claim age)
    """
    if age < claim_age:
        return 0.0

    base_amount = fra_amount * claim_age_factor(claim_age)
    return base_amount * (1 + inflation_rate) ** years_from_start


def calculate_ss_taxable(
    ss_gross: float,
    other_taxable_income: float,
    thresholds: SSTaxThresholds = SS_THRESHOLDS_SINGLE,
) -> SSTaxability:
    """
    Calculate the taxable portion of Social Security benefits.

    Provisional income is other income plus half of the benefits:
    - at or below the first threshold nothing is taxable
    - between the thresholds up to 50% of benefits are taxable
    - above the second threshold up to 85% of benefits are taxable

    Args:
        ss_gross: Total benefits received in the year
        other_taxable_income: Income excluding Social Security
        thresholds: Provisional income thresholds (single filer by default)

    Returns:
        SSTaxability with the taxable amount and provisional income
    """
    provisional_income = other_taxable_income + ss_gross * 0.5

    if provisional_income <= thresholds.first:
        return SSTaxability(taxable=0.0, provisional_income=provisional_income)

    if provisional_income <= thresholds.second:
        taxable = min(
            (provisional_income - thresholds.first) * thresholds.first_tier_rate,
            ss_gross * thresholds.first_tier_rate,
        )
        return SSTaxability(taxable=taxable, provisional_income=provisional_income)

    first_tier = min(thresholds.first_tier_max, ss_gross * thresholds.first_tier_rate)
    second_tier = (provisional_income - thresholds.second) * thresholds.second_tier_rate
    taxable = min(first_tier + second_tier, ss_gross * thresholds.second_tier_rate)
    return SSTaxability(taxable=taxable, provisional_income=provisional_income)
