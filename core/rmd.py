"""Required Minimum Distribution (RMD) calculations."""

from __future__ import annotations

from core.tax_config import (
    RMD_START_AGES,
    RMD_TABLE_MAX_AGE,
    RMD_UNIFORM_LIFETIME_TABLE,
)


def rmd_start_age(birth_year: int | None = None) -> int:
    """Age at which RMDs begin for an owner born in ``birth_year``."""
    return RMD_START_AGES.for_birth_year(birth_year)


def get_rmd_divisor(age: int) -> float:
    """
    Get the RMD distribution period for a given age.

    Ages past the end of the Uniform Lifetime Table are extrapolated by
    shrinking the last divisor by 0.1 per year, floored at 1.0.

    Args:
        age: Account owner's age in the distribution year

    Returns:
        Distribution period (divisor)
    """
    divisor = RMD_UNIFORM_LIFETIME_TABLE.get(age)
    if divisor is not None:
        return divisor
    return max(2.0 - (age - RMD_TABLE_MAX_AGE) * 0.1, 1.0)


def calculate_rmd(
    age: int,
    prior_year_ira_balance: float,
    birth_year: int | None = None,
) -> float:
    """
    Calculate the Required Minimum Distribution for a year.

    The RMD for the year the owner turns ``age`` is the IRA balance on
    December 31 of the previous year divided by the Uniform Lifetime Table
    divisor for ``age``.

    Args:
        age: Account owner's age in the distribution year
        prior_year_ira_balance: IRA balance at the end of the prior year
        birth_year: Optional birth year to pick the SECURE 2.0 start age

    Returns:
        Required distribution for the year (0 before the start age)
    """
    if age < rmd_start_age(birth_year) or prior_year_ira_balance <= 0:
        return 0.0

    return prior_year_ira_balance / get_rmd_divisor(age)
