"""Retirement Drawdown Planner - Streamlit App."""

from __future__ import annotations

import logging

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from core.optimize import (
    ConversionSweepOptions,
    compare_ss_claim_ages,
    optimize_roth_conversion,
)
from core.roth_conversion import RothConversionGridOptions, compute_roth_conversion_grid
from core.scenario import (
    DEFAULT_SCENARIO,
    AccountType,
    OneOffExpense,
    Scenario,
    SpendingPhase,
    format_order,
)
from core.simulator import run_simulation
from core.validation import validate_scenario
from core.withdrawal_strategies import compare_withdrawal_strategies
from utils.helpers import (
    format_currency,
    format_currency_compact,
    format_percent,
    parse_currency,
)

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

ACCOUNT_COLORS = {
    AccountType.IRA: "#0d6efd",
    AccountType.ROTH: "#198754",
    AccountType.TAXABLE: "#fd7e14",
    AccountType.CASH: "#6c757d",
}

ORDER_CHOICES = {
    format_order(order): order
    for order in (
        DEFAULT_SCENARIO.withdrawal_order,
        (AccountType.CASH, AccountType.IRA, AccountType.TAXABLE, AccountType.ROTH),
        (AccountType.CASH, AccountType.TAXABLE, AccountType.ROTH, AccountType.IRA),
        (AccountType.IRA, AccountType.CASH, AccountType.TAXABLE, AccountType.ROTH),
        (AccountType.TAXABLE, AccountType.CASH, AccountType.IRA, AccountType.ROTH),
        (AccountType.ROTH, AccountType.CASH, AccountType.TAXABLE, AccountType.IRA),
    )
}

TAX_ORDER_CHOICES = {
    format_order(order): order
    for order in (
        DEFAULT_SCENARIO.tax_payment_order,
        (AccountType.CASH, AccountType.IRA, AccountType.TAXABLE),
        (AccountType.TAXABLE, AccountType.CASH, AccountType.IRA),
        (AccountType.IRA, AccountType.CASH, AccountType.TAXABLE),
    )
}

st.set_page_config(page_title="Retirement Drawdown Planner", layout="wide")

st.title("Retirement Drawdown Planner")


def currency_input(label: str, value: float, key: str, help_text: str | None = None) -> float:
    """Create a currency input field."""
    raw_value = st.text_input(
        label,
        key=key,
        help=help_text,
        value=st.session_state.get(key, format_currency(value)),
    )
    return parse_currency(raw_value, value)


def percent_input(label: str, value: float, key: str, max_value: float = 50.0) -> float:
    """Percent number input returned as a fraction."""
    return (
        st.number_input(
            label,
            min_value=0.0,
            max_value=max_value,
            value=value * 100,
            step=0.25,
            key=key,
        )
        / 100
    )


# =============================================================================
# SIDEBAR INPUTS
# =============================================================================

defaults = DEFAULT_SCENARIO

with st.sidebar:
    st.header("Ages")
    start_age = st.number_input("Start age", min_value=40, max_value=100, value=defaults.start_age)
    end_age = st.number_input(
        "End age", min_value=int(start_age), max_value=120, value=max(defaults.end_age, int(start_age))
    )
    birth_year_text = st.text_input(
        "Birth year (optional)",
        value="",
        help="Sets the RMD start age (72, 73 or 75). Leave blank to use 73.",
    )

    st.header("Balances")
    ira_balance = currency_input("Traditional IRA", defaults.ira_balance, "ira_balance")
    roth_balance = currency_input("Roth IRA", defaults.roth_balance, "roth_balance")
    taxable_balance = currency_input("Taxable brokerage", defaults.taxable_balance, "taxable_balance")
    taxable_basis = currency_input(
        "Taxable cost basis",
        defaults.taxable_basis,
        "taxable_basis",
        help_text="Amount originally invested in the taxable account.",
    )
    cash_balance = currency_input("Cash", defaults.cash_balance, "cash_balance")

    st.header("Returns and inflation")
    investment_return = percent_input("Investment return (%)", defaults.investment_return, "investment_return")
    cash_return = percent_input("Cash interest (%)", defaults.cash_return, "cash_return")
    inflation_rate = percent_input("Inflation (%)", defaults.inflation_rate, "inflation_rate")

    st.header("Taxes")
    ordinary_income_rate = percent_input(
        "Ordinary income rate (%)", defaults.ordinary_income_rate, "ordinary_income_rate", 99.0
    )
    capital_gains_rate = percent_input(
        "Capital gains rate (%)", defaults.capital_gains_rate, "capital_gains_rate", 99.0
    )
    assumed_ira_tax_rate = percent_input(
        "Assumed tax on remaining IRA (%)",
        defaults.assumed_ira_tax_rate,
        "assumed_ira_tax_rate",
        99.0,
    )

    st.header("Spending")
    phases_df = st.data_editor(
        pd.DataFrame(
            [
                {
                    "label": phase.label,
                    "from_age": phase.from_age,
                    "to_age": phase.to_age,
                    "annual_amount": phase.annual_amount,
                }
                for phase in defaults.spending_phases
            ]
        ),
        num_rows="dynamic",
        key="spending_phases",
    )
    one_offs_df = st.data_editor(
        pd.DataFrame(columns=["age", "amount", "note"]),
        num_rows="dynamic",
        key="one_off_expenses",
    )

    st.header("Social Security")
    ss_enabled = st.checkbox("Include Social Security", value=defaults.ss_enabled)
    ss_annual_benefit = currency_input(
        "Annual benefit at full retirement age",
        defaults.ss_annual_benefit,
        "ss_annual_benefit",
    )
    ss_claim_age = st.slider("Claim age", min_value=62, max_value=70, value=defaults.ss_claim_age)

    st.header("Withdrawals")
    withdrawal_label = st.selectbox("Withdrawal order", list(ORDER_CHOICES))
    tax_order_label = st.selectbox("Tax payment order", list(TAX_ORDER_CHOICES))

    st.header("Roth conversions")
    roth_conversion_amount = currency_input(
        "Annual conversion", defaults.roth_conversion_amount, "roth_conversion_amount"
    )
    conversion_ages = st.slider(
        "Conversion ages",
        min_value=int(start_age),
        max_value=int(end_age),
        value=(
            min(max(defaults.roth_conversion_start_age, int(start_age)), int(end_age)),
            min(max(defaults.roth_conversion_end_age, int(start_age)), int(end_age)),
        ),
    )


def _phases_from_frame(frame: pd.DataFrame) -> tuple[SpendingPhase, ...]:
    phases = []
    for row in frame.dropna(subset=["from_age", "to_age", "annual_amount"]).itertuples():
        phases.append(
            SpendingPhase(
                from_age=int(row.from_age),
                to_age=int(row.to_age),
                annual_amount=float(row.annual_amount),
                label=str(row.label) if isinstance(row.label, str) else "",
            )
        )
    return tuple(phases)


def _one_offs_from_frame(frame: pd.DataFrame) -> tuple[OneOffExpense, ...]:
    expenses = []
    for row in frame.dropna(subset=["age", "amount"]).itertuples():
        expenses.append(
            OneOffExpense(
                age=int(row.age),
                amount=float(row.amount),
                note=str(row.note) if isinstance(row.note, str) else "",
            )
        )
    return tuple(expenses)


birth_year = int(birth_year_text) if birth_year_text.strip().isdigit() else None

scenario = Scenario(
    start_age=int(start_age),
    end_age=int(end_age),
    ira_balance=ira_balance,
    roth_balance=roth_balance,
    taxable_balance=taxable_balance,
    taxable_basis=taxable_basis,
    cash_balance=cash_balance,
    investment_return=investment_return,
    cash_return=cash_return,
    inflation_rate=inflation_rate,
    ordinary_income_rate=ordinary_income_rate,
    capital_gains_rate=capital_gains_rate,
    spending_phases=_phases_from_frame(phases_df),
    one_off_expenses=_one_offs_from_frame(one_offs_df),
    ss_annual_benefit=ss_annual_benefit,
    ss_claim_age=ss_claim_age,
    ss_enabled=ss_enabled,
    withdrawal_order=ORDER_CHOICES[withdrawal_label],
    tax_payment_order=TAX_ORDER_CHOICES[tax_order_label],
    roth_conversion_amount=roth_conversion_amount,
    roth_conversion_start_age=conversion_ages[0],
    roth_conversion_end_age=conversion_ages[1],
    assumed_ira_tax_rate=assumed_ira_tax_rate,
    birth_year=birth_year,
)

validation_result = validate_scenario(scenario)
if not validation_result.is_valid():
    st.error("Please fix the following input errors:")
    for error_msg in validation_result.error_messages():
        st.warning(error_msg)
    st.stop()
for warning_msg in validation_result.warning_messages():
    st.info(warning_msg)

result = run_simulation(scenario)
summary = result.summary
years_df = result.to_dataframe()
ages = list(years_df.index)

# =============================================================================
# DISPLAY
# =============================================================================

summary_cols = st.columns(4)
summary_cols[0].metric(
    "Final TANW",
    format_currency(summary.final_tanw),
    help="Tax-Adjusted Net Worth: balances after paying the tax still owed on them.",
)
summary_cols[1].metric("Final balance", format_currency(summary.final_total))
summary_cols[2].metric("Lifetime taxes", format_currency(summary.total_taxes_paid))
summary_cols[3].metric(
    "Spending shortfall",
    format_currency(summary.total_spending_shortfall),
    help=(
        f"Worst year at age {summary.worst_shortfall_year}"
        if summary.worst_shortfall_year is not None
        else "Spending was fully funded in every year."
    ),
)

# =============================================================================
# CHARTS
# =============================================================================

balance_chart = go.Figure()
for account, column in (
    (AccountType.CASH, "cash_end"),
    (AccountType.TAXABLE, "taxable_end"),
    (AccountType.IRA, "ira_end"),
    (AccountType.ROTH, "roth_end"),
):
    balance_chart.add_trace(
        go.Scatter(
            x=ages,
            y=years_df[column] if not years_df.empty else [],
            name=account.label,
            stackgroup="balances",
            line=dict(color=ACCOUNT_COLORS[account]),
        )
    )
balance_chart.update_layout(
    title="Account balances (nominal)",
    xaxis_title="Age",
    yaxis_title="Balance ($)",
    hovermode="x unified",
)

tanw_chart = go.Figure(
    data=[
        go.Scatter(x=ages, y=years_df["total_end"] if not years_df.empty else [], name="Total balance"),
        go.Scatter(x=ages, y=years_df["tanw"] if not years_df.empty else [], name="TANW"),
    ]
)
tanw_chart.update_layout(title="Total balance vs. TANW", xaxis_title="Age", yaxis_title="$")

tax_chart = go.Figure()
for column, name in (
    ("tax_on_ira_distributions", "IRA distributions"),
    ("tax_on_roth_conversion", "Roth conversions"),
    ("tax_on_ss_taxable", "Social Security"),
    ("tax_on_capital_gains", "Capital gains"),
    ("tax_on_cash_interest", "Cash interest"),
):
    tax_chart.add_trace(
        go.Bar(x=ages, y=years_df[column] if not years_df.empty else [], name=name)
    )
tax_chart.update_layout(barmode="stack", title="Taxes by source", xaxis_title="Age", yaxis_title="Tax ($)")

tabs = st.tabs(["Overview", "Taxes", "Year by year", "Ledger", "Optimize"])

with tabs[0]:
    st.plotly_chart(balance_chart, use_container_width=True)
    st.plotly_chart(tanw_chart, use_container_width=True)

with tabs[1]:
    st.plotly_chart(tax_chart, use_container_width=True)
    tax_cols = st.columns(3)
    tax_cols[0].metric("Ordinary income tax", format_currency(summary.total_ordinary_tax))
    tax_cols[1].metric("Capital gains tax", format_currency(summary.total_cap_gains_tax))
    tax_cols[2].metric("Total converted", format_currency(summary.total_converted))
    if not years_df.empty and (years_df["tax_shortfall"] > 1).any():
        st.warning("Some years could not pay their full tax bill from the tax payment accounts.")

with tabs[2]:
    st.dataframe(years_df, use_container_width=True)

with tabs[3]:
    if result.year_rows:
        ledger_age = st.select_slider("Age", options=ages, value=ages[0])
        year_index = ledger_age - scenario.start_age
        ledger_df = pd.DataFrame(
            [entry.as_record() for entry in result.ledger_by_year.get(year_index, [])]
        )
        st.dataframe(ledger_df, use_container_width=True)
    else:
        st.info("No simulated years.")

with tabs[4]:
    st.subheader("Roth conversion")
    if st.button("Find best conversion plan"):
        with st.spinner("Running conversion sweep..."):
            st.session_state["conversion_result"] = optimize_roth_conversion(
                scenario,
                ConversionSweepOptions(
                    amount_range=(0.0, 300_000.0),
                    amount_step=25_000.0,
                    end_age_range=(
                        scenario.roth_conversion_start_age,
                        max(scenario.roth_conversion_start_age, min(80, scenario.end_age)),
                    ),
                ),
            )
    conversion_result = st.session_state.get("conversion_result")
    if conversion_result is not None:
        best = conversion_result.best_scenario
        st.success(
            f"Convert {format_currency(best.roth_conversion_amount)} per year until age "
            f"{best.roth_conversion_end_age}: final TANW {format_currency(conversion_result.best_score)} "
            f"({format_currency(conversion_result.best_score - summary.final_tanw)} vs. current plan)"
        )

    if st.button("Build conversion heatmap"):
        with st.spinner("Simulating conversion grid..."):
            st.session_state["conversion_grid"] = compute_roth_conversion_grid(
                scenario, RothConversionGridOptions()
            )
    grid = st.session_state.get("conversion_grid")
    if grid is not None:
        heatmap = go.Figure(
            data=go.Heatmap(
                z=grid.as_matrix(),
                x=list(grid.end_ages),
                y=[format_currency_compact(amount) for amount in grid.amounts],
                colorscale="Viridis",
                colorbar=dict(title="TANW"),
            )
        )
        heatmap.update_layout(
            title=(
                f"Final TANW by conversion plan (best: {format_currency_compact(grid.best_cell.amount)}"
                f" until {grid.best_cell.end_age})"
            ),
            xaxis_title="Last conversion age",
            yaxis_title="Annual conversion",
        )
        st.plotly_chart(heatmap, use_container_width=True)

    st.subheader("Withdrawal order")
    if st.button("Compare withdrawal orders"):
        with st.spinner("Comparing withdrawal orders..."):
            st.session_state["withdrawal_comparison"] = compare_withdrawal_strategies(scenario)
    comparison = st.session_state.get("withdrawal_comparison")
    if comparison is not None:
        st.dataframe(
            pd.DataFrame(
                [
                    {
                        "Order": strategy.label,
                        "Final TANW": format_currency(strategy.tanw),
                        "Lifetime taxes": format_currency(strategy.total_taxes),
                        "Final balance": format_currency(strategy.final_total),
                        "vs. best": format_percent(
                            strategy.tanw / comparison.best.tanw - 1 if comparison.best.tanw else 0.0
                        ),
                    }
                    for strategy in comparison.strategies
                ]
            ),
            use_container_width=True,
        )

    st.subheader("Social Security claim age")
    if st.button("Compare claim ages"):
        with st.spinner("Comparing claim ages..."):
            st.session_state["ss_result"] = compare_ss_claim_ages(scenario)
    ss_result = st.session_state.get("ss_result")
    if ss_result is not None:
        ss_chart = go.Figure(
            data=[
                go.Bar(
                    x=[variant.label for variant in ss_result.variants],
                    y=[variant.score for variant in ss_result.variants],
                    marker_color="#0d6efd",
                )
            ]
        )
        ss_chart.update_layout(title="Final TANW by claim age", yaxis_title="TANW ($)")
        st.plotly_chart(ss_chart, use_container_width=True)
        st.caption(f"Best: {ss_result.ranked()[0].label}")
