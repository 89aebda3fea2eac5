"""Roth conversion grid: final TANW over conversion amount x end age."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from core.exceptions import OptimizationError
from core.optimize import stepped_values
from core.scenario import Scenario
from core.simulator import run_simulation

logger = logging.getLogger(__name__)

# Grid end ages stop here unless the scenario ends earlier.
GRID_MAX_END_AGE = 85


@dataclass(frozen=True)
class RothConversionGridOptions:
    """
    Axes of the conversion grid. Age bounds left as None are derived from
    the scenario: ``start_age`` to ``min(end_age, 85)``.
    """

    amount_min: float = 0.0
    amount_max: float = 300_000.0
    amount_step: float = 15_000.0
    end_age_min: int | None = None
    end_age_max: int | None = None
    end_age_step: int = 2


@dataclass(frozen=True)
class RothConversionGridCell:
    """Final TANW for one (amount, end age) combination."""

    amount: float
    end_age: int
    tanw: float


@dataclass(frozen=True)
class RothConversionGridResult:
    """
    Every grid cell plus the axes and extremes needed to draw a heatmap.

    Attributes:
        cells: Cells in evaluation order (amount outer, end age inner)
        amounts: Amount axis
        end_ages: End age axis
        min_tanw: Lowest TANW in the grid
        max_tanw: Highest TANW in the grid
        best_cell: First cell reaching ``max_tanw``
        current_cell: Cell matching the scenario's own amount and end age, if any
    """

    cells: tuple[RothConversionGridCell, ...]
    amounts: tuple[float, ...]
    end_ages: tuple[int, ...]
    min_tanw: float
    max_tanw: float
    best_cell: RothConversionGridCell
    current_cell: RothConversionGridCell | None

    def as_matrix(self) -> np.ndarray:
        """TANW values shaped (len(amounts), len(end_ages))."""
        matrix = np.array([cell.tanw for cell in self.cells], dtype=float)
        return matrix.reshape(len(self.amounts), len(self.end_ages))


def _end_age_axis(scenario: Scenario, options: RothConversionGridOptions) -> list[int]:
    low = options.end_age_min if options.end_age_min is not None else scenario.start_age
    if options.end_age_max is not None:
        high = options.end_age_max
    else:
        high = max(low, min(scenario.end_age, GRID_MAX_END_AGE))
    return [int(age) for age in stepped_values(low, high, options.end_age_step, "end age")]


def compute_roth_conversion_grid(
    scenario: Scenario,
    options: RothConversionGridOptions | None = None,
) -> RothConversionGridResult:
    """
    Simulate every (conversion amount, conversion end age) pair.

    Args:
        scenario: Base scenario; only the conversion amount and end age vary
        options: Grid axes (defaults to 0-300k by 15k, every 2 years)

    Returns:
        RothConversionGridResult

    Raises:
        OptimizationError: If an axis has a non-positive step or inverted range
    """
    options = options or RothConversionGridOptions()
    amounts = stepped_values(options.amount_min, options.amount_max, options.amount_step, "amount")
    end_ages = _end_age_axis(scenario, options)

    cells: list[RothConversionGridCell] = []
    min_tanw = float("inf")
    max_tanw = float("-inf")
    best_cell = RothConversionGridCell(amount=0.0, end_age=end_ages[0], tanw=0.0)
    current_cell: RothConversionGridCell | None = None

    for amount in amounts:
        for end_age in end_ages:
            candidate = scenario.with_overrides(
                roth_conversion_amount=amount,
                roth_conversion_end_age=end_age,
            )
            tanw = run_simulation(candidate).summary.final_tanw
            cell = RothConversionGridCell(amount=amount, end_age=end_age, tanw=tanw)
            cells.append(cell)

            if tanw < min_tanw:
                min_tanw = tanw
            if tanw > max_tanw:
                max_tanw = tanw
                best_cell = cell
            if (
                amount == scenario.roth_conversion_amount
                and end_age == scenario.roth_conversion_end_age
            ):
                current_cell = cell

    logger.debug(
        f"Conversion grid evaluated {len(amounts)} x {len(end_ages)} cells, "
        f"TANW {min_tanw:,.0f} to {max_tanw:,.0f}"
    )

    return RothConversionGridResult(
        cells=tuple(cells),
        amounts=tuple(amounts),
        end_ages=tuple(end_ages),
        min_tanw=min_tanw,
        max_tanw=max_tanw,
        best_cell=best_cell,
        current_cell=current_cell,
    )
