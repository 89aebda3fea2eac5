"""Side-by-side comparison of withdrawal orders."""

from __future__ import annotations

from dataclasses import dataclass

from core.optimize import COMMON_WITHDRAWAL_ORDERS
from core.scenario import AccountType, Scenario, format_order
from core.simulator import run_simulation


@dataclass(frozen=True)
class WithdrawalStrategyResult:
    """Outcome of simulating one withdrawal order."""

    label: str
    order: tuple[AccountType, ...]
    tanw: float
    total_taxes: float
    final_total: float


@dataclass(frozen=True)
class WithdrawalComparisonResult:
    """
    Withdrawal orders ranked by final TANW.

    Attributes:
        strategies: Results sorted by TANW, highest first
        best: First evaluated order with the highest TANW
        worst: First evaluated order with the lowest TANW
        current: Result for the scenario's own order, if it is one of the
            compared orders
    """

    strategies: tuple[WithdrawalStrategyResult, ...]
    best: WithdrawalStrategyResult
    worst: WithdrawalStrategyResult
    current: WithdrawalStrategyResult | None


def compare_withdrawal_strategies(scenario: Scenario) -> WithdrawalComparisonResult:
    """
    Simulate the scenario under each common withdrawal order.

    Args:
        scenario: Base scenario; only ``withdrawal_order`` varies

    Returns:
        WithdrawalComparisonResult with ranked strategies
    """
    strategies: list[WithdrawalStrategyResult] = []
    best: WithdrawalStrategyResult | None = None
    worst: WithdrawalStrategyResult | None = None
    current: WithdrawalStrategyResult | None = None

    for order in COMMON_WITHDRAWAL_ORDERS:
        summary = run_simulation(scenario.with_overrides(withdrawal_order=order)).summary
        strategy = WithdrawalStrategyResult(
            label=format_order(order),
            order=order,
            tanw=summary.final_tanw,
            total_taxes=summary.total_taxes_paid,
            final_total=summary.final_total,
        )
        strategies.append(strategy)

        if best is None or strategy.tanw > best.tanw:
            best = strategy
        if worst is None or strategy.tanw < worst.tanw:
            worst = strategy
        if order == scenario.withdrawal_order:
            current = strategy

    assert best is not None and worst is not None
    strategies.sort(key=lambda strategy: strategy.tanw, reverse=True)
    return WithdrawalComparisonResult(
        strategies=tuple(strategies),
        best=best,
        worst=worst,
        current=current,
    )
