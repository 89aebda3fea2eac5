"""Parameter sweeps that rank scenario variants by final Tax-Adjusted Net Worth."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from core.exceptions import OptimizationError
from core.scenario import AccountType, Scenario, format_order
from core.simulator import run_simulation

logger = logging.getLogger(__name__)


class OptimizationType(str, Enum):
    """Which scenario dimension a sweep varies."""

    CONVERSION = "conversion"
    WITHDRAWAL = "withdrawal"
    SS = "ss"


# Curated subset of the 24 possible orders, evaluated in this order.
COMMON_WITHDRAWAL_ORDERS: tuple[tuple[AccountType, ...], ...] = tuple(
    tuple(AccountType(account) for account in order)
    for order in (
        ("cash", "taxable", "ira", "roth"),
        ("cash", "ira", "taxable", "roth"),
        ("cash", "taxable", "roth", "ira"),
        ("cash", "ira", "roth", "taxable"),
        ("cash", "roth", "taxable", "ira"),
        ("cash", "roth", "ira", "taxable"),
        ("ira", "cash", "taxable", "roth"),
        ("ira", "taxable", "cash", "roth"),
        ("ira", "cash", "roth", "taxable"),
        ("taxable", "cash", "ira", "roth"),
        ("taxable", "ira", "cash", "roth"),
        ("roth", "cash", "taxable", "ira"),
    )
)


@dataclass(frozen=True)
class OptimizationVariant:
    """One evaluated candidate scenario."""

    label: str
    scenario: Scenario
    score: float


@dataclass(frozen=True)
class OptimizationResult:
    """
    Outcome of a sweep.

    Attributes:
        type: Dimension that was varied
        best_scenario: First candidate with the highest score (the input
            scenario when the sweep evaluated nothing)
        best_score: Final TANW of ``best_scenario``
        variants: Every candidate in evaluation order
    """

    type: OptimizationType
    best_scenario: Scenario
    best_score: float
    variants: tuple[OptimizationVariant, ...]

    def ranked(self) -> list[OptimizationVariant]:
        """Variants sorted by score, highest first (ties keep evaluation order)."""
        return sorted(self.variants, key=lambda variant: variant.score, reverse=True)


@dataclass(frozen=True)
class ConversionSweepOptions:
    """
    Search space for the Roth conversion optimizer.

    Attributes:
        amount_range: Inclusive (min, max) annual conversion amount
        amount_step: Increment between amounts
        end_age_range: Inclusive (min, max) last conversion age, stepped by
            one year. None means from the scenario's conversion start age to 80.
    """

    amount_range: tuple[float, float] = (0.0, 300_000.0)
    amount_step: float = 5_000.0
    end_age_range: tuple[int, int] | None = None

    def end_ages_for(self, scenario: Scenario) -> tuple[int, int]:
        """Resolve the end age range for ``scenario``."""
        if self.end_age_range is not None:
            return self.end_age_range
        return (scenario.roth_conversion_start_age, 80)


def stepped_values(low: float, high: float, step: float, name: str) -> list[float]:
    """
    Values from ``low`` to ``high`` inclusive in increments of ``step``.

    Each value is computed as ``low + i * step`` so long ranges do not
    accumulate floating point drift.

    Raises:
        OptimizationError: If ``step`` is not positive or ``low > high``
    """
    if step <= 0:
        raise OptimizationError(f"{name} step must be positive, got {step}")
    if low > high:
        raise OptimizationError(f"{name} range is inverted: {low} > {high}")

    values = []
    i = 0
    while True:
        value = low + i * step
        if value > high:
            break
        values.append(value)
        i += 1
    return values


def _sweep(
    sweep_type: OptimizationType,
    scenario: Scenario,
    candidates: Iterable[tuple[str, Scenario]],
) -> OptimizationResult:
    """Simulate each labelled candidate and keep the first best score."""
    variants: list[OptimizationVariant] = []
    best_scenario = scenario
    best_score = float("-inf")

    for label, candidate in candidates:
        score = run_simulation(candidate).summary.final_tanw
        variants.append(OptimizationVariant(label=label, scenario=candidate, score=score))
        if score > best_score:
            best_score = score
            best_scenario = candidate

    logger.debug(f"{sweep_type.value} sweep evaluated {len(variants)} variants, best {best_score:,.0f}")
    return OptimizationResult(
        type=sweep_type,
        best_scenario=best_scenario,
        best_score=best_score,
        variants=tuple(variants),
    )


def _format_amount(amount: float) -> str:
    if float(amount).is_integer():
        return f"{int(amount):,}"
    return f"{amount:,.2f}"


def optimize_roth_conversion(
    scenario: Scenario,
    options: ConversionSweepOptions | None = None,
) -> OptimizationResult:
    """
    Find the annual conversion amount and end age with the highest final TANW.

    Amounts form the outer loop and end ages the inner loop.

    Args:
        scenario: Base scenario; only the conversion amount and end age vary
        options: Search space (defaults to 0-300k by 5k, start age to 80)

    Returns:
        OptimizationResult of type CONVERSION
    """
    options = options or ConversionSweepOptions()
    amounts = stepped_values(*options.amount_range, options.amount_step, "amount")
    end_age_low, end_age_high = options.end_ages_for(scenario)
    if end_age_low > end_age_high:
        raise OptimizationError(
            f"end age range is inverted: {end_age_low} > {end_age_high}"
        )

    candidates = (
        (
            f"Convert ${_format_amount(amount)} until age {end_age}",
            scenario.with_overrides(
                roth_conversion_amount=amount,
                roth_conversion_end_age=end_age,
            ),
        )
        for amount in amounts
        for end_age in range(end_age_low, end_age_high + 1)
    )
    return _sweep(OptimizationType.CONVERSION, scenario, candidates)


def compare_withdrawal_orders(scenario: Scenario) -> OptimizationResult:
    """Evaluate each of the common withdrawal orders."""
    candidates = (
        (format_order(order), scenario.with_overrides(withdrawal_order=order))
        for order in COMMON_WITHDRAWAL_ORDERS
    )
    return _sweep(OptimizationType.WITHDRAWAL, scenario, candidates)


def compare_ss_claim_ages(
    scenario: Scenario,
    claim_ages: Iterable[int] = range(62, 71),
) -> OptimizationResult:
    """Evaluate Social Security claiming at each age (62 through 70 by default)."""
    candidates = (
        (f"Claim at {age}", scenario.with_overrides(ss_claim_age=age))
        for age in claim_ages
    )
    return _sweep(OptimizationType.SS, scenario, candidates)
