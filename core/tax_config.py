"""IRS and SSA policy tables used by the drawdown simulation."""

from __future__ import annotations

from dataclasses import dataclass


# IRS Uniform Lifetime Table for RMD calculations
# Source: IRS Publication 590-B, Table III (2022 update)
# Maps age to distribution period (divisor)
RMD_UNIFORM_LIFETIME_TABLE: dict[int, float] = {
    72: 27.4,
    73: 26.5,
    74: 25.5,
    75: 24.6,
    76: 23.7,
    77: 22.9,
    78: 22.0,
    79: 21.1,
    80: 20.2,
    81: 19.4,
    82: 18.5,
    83: 17.7,
    84: 16.8,
    85: 16.0,
    86: 15.2,
    87: 14.4,
    88: 13.7,
    89: 12.9,
    90: 12.2,
    91: 11.5,
    92: 10.8,
    93: 10.1,
    94: 9.5,
    95: 8.9,
    96: 8.4,
    97: 7.8,
    98: 7.3,
    99: 6.8,
    100: 6.4,
    101: 6.0,
    102: 5.6,
    103: 5.2,
    104: 4.9,
    105: 4.6,
    106: 4.3,
    107: 4.1,
    108: 3.9,
    109: 3.7,
    110: 3.5,
    111: 3.4,
    112: 3.3,
    113: 3.1,
    114: 3.0,
    115: 2.9,
    116: 2.8,
    117: 2.7,
    118: 2.5,
    119: 2.3,
    120: 2.0,
}

RMD_TABLE_MAX_AGE = 120


@dataclass(frozen=True)
class RMDStartAges:
    """
    RMD starting ages under SECURE Act 2.0.

    Attributes:
        default: Start age used when the owner's birth year is unknown
        born_1950_or_earlier: Start age for owners born in 1950 or earlier
        born_1951_to_1959: Start age for owners born 1951 through 1959
        born_1960_or_later: Start age for owners born in 1960 or later
    """

    default: int = 73
    born_1950_or_earlier: int = 72
    born_1951_to_1959: int = 73
    born_1960_or_later: int = 75

    def for_birth_year(self, birth_year: int | None) -> int:
        """Get the start age for a birth year (or the default when unknown)."""
        if birth_year is None:
            return self.default
        if birth_year <= 1950:
            return self.born_1950_or_earlier
        if birth_year <= 1959:
            return self.born_1951_to_1959
        return self.born_1960_or_later


RMD_START_AGES = RMDStartAges()


# Social Security benefit multipliers by claiming age, FRA of 67
# (born 1960 or later). Early claiming loses 5/9% per month for the first
# 36 months and 5/12% per month beyond that; delayed credits add 8% per year.
# Source: SSA.gov, Benefits By Year Of Birth
SS_FULL_RETIREMENT_AGE = 67
SS_MIN_CLAIM_AGE = 62
SS_MAX_CLAIM_AGE = 70

SS_ADJUSTMENT_FACTORS: dict[int, float] = {
    62: 0.70,
    63: 0.75,
    64: 0.80,
    65: 0.8667,
    66: 0.9333,
    67: 1.0,
    68: 1.08,
    69: 1.16,
    70: 1.24,
}


@dataclass(frozen=True)
class SSTaxThresholds:
    """
    Provisional-income thresholds for taxing Social Security benefits.

    These amounts were set by statute and are not indexed for inflation.
    Source: IRS Publication 915

    Attributes:
        first: Provisional income above which up to 50% of benefits are taxable
        second: Provisional income above which up to 85% of benefits are taxable
        first_tier_rate: Share of income between the thresholds that is taxable
        second_tier_rate: Share of income above the second threshold that is taxable
    """

    first: float
    second: float
    first_tier_rate: float = 0.5
    second_tier_rate: float = 0.85

    @property
    def first_tier_max(self) -> float:
        """Maximum taxable amount contributed by the first tier."""
        return (self.second - self.first) * self.first_tier_rate


SS_THRESHOLDS_SINGLE = SSTaxThresholds(first=25_000, second=34_000)


@dataclass(frozen=True)
class TaxIterationLimits:
    """
    Bounds for the yearly tax fixed-point iteration.

    Paying taxes from the IRA or the taxable account creates more taxable
    income, so the yearly bill is re-settled until the unpaid remainder
    falls under ``tolerance`` or ``max_rounds`` is reached.

    Attributes:
        max_rounds: Maximum number of settle rounds per year
        tolerance: Dollar amount below which the remainder is considered paid
    """

    max_rounds: int = 5
    tolerance: float = 1.0


TAX_ITERATION_LIMITS = TaxIterationLimits()
