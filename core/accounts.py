"""Account balances and withdrawal mechanics for the drawdown simulation."""

from __future__ import annotations

from dataclasses import dataclass

from core.scenario import AccountType, Scenario


@dataclass
class SimulationState:
    """Mutable account balances threaded through one simulation run."""

    ira: float = 0.0
    roth: float = 0.0
    taxable_market: float = 0.0
    taxable_basis: float = 0.0
    cash: float = 0.0

    @classmethod
    def from_scenario(cls, scenario: Scenario) -> "SimulationState":
        """Starting balances for a scenario."""
        return cls(
            ira=scenario.ira_balance,
            roth=scenario.roth_balance,
            taxable_market=scenario.taxable_balance,
            taxable_basis=scenario.taxable_basis,
            cash=scenario.cash_balance,
        )

    def total(self) -> float:
        """Return total balance across all accounts."""
        return self.ira + self.roth + self.taxable_market + self.cash

    def balance(self, account: AccountType) -> float:
        """Return the balance of one account (market value for taxable)."""
        if account == AccountType.IRA:
            return self.ira
        if account == AccountType.ROTH:
            return self.roth
        if account == AccountType.TAXABLE:
            return self.taxable_market
        return self.cash

    def unrealized_gains(self) -> float:
        """Market value above cost basis in the taxable account."""
        if self.taxable_market <= 0:
            return 0.0
        return max(0.0, self.taxable_market - self.taxable_basis)

    def gain_fraction(self) -> float:
        """Share of a taxable sale that is capital gain."""
        if self.taxable_market <= 0:
            return 0.0
        return max(0.0, (self.taxable_market - self.taxable_basis) / self.taxable_market)

    def clamp(self) -> None:
        """Floor every balance at zero and keep basis within market value (in-place)."""
        self.ira = max(0.0, self.ira)
        self.roth = max(0.0, self.roth)
        self.taxable_market = max(0.0, self.taxable_market)
        self.cash = max(0.0, self.cash)
        self.taxable_basis = min(max(0.0, self.taxable_basis), self.taxable_market)


@dataclass(frozen=True)
class Draw:
    """
    Money taken out of one account.

    Attributes:
        account: Account drawn from
        gross: Amount that left the account
        net: Amount available after tax withheld on the draw
        gain: Capital gain realized (taxable sales only)
        tax_ordinary: Ordinary income tax withheld (IRA only)
        tax_cap_gains: Capital gains tax withheld (taxable sales only)
    """

    account: AccountType
    gross: float = 0.0
    net: float = 0.0
    gain: float = 0.0
    tax_ordinary: float = 0.0
    tax_cap_gains: float = 0.0


def _gross_up(net_needed: float, rate: float) -> float:
    """Gross amount that nets ``net_needed`` after a flat ``rate``."""
    if rate >= 1:
        return float("inf")
    return net_needed / (1 - rate)


def draw_cash(state: SimulationState, net_needed: float) -> Draw:
    """Take up to ``net_needed`` from cash (no tax)."""
    amount = min(state.cash, net_needed)
    state.cash -= amount
    return Draw(account=AccountType.CASH, gross=amount, net=amount)


def draw_roth(state: SimulationState, net_needed: float) -> Draw:
    """Take up to ``net_needed`` from the Roth (qualified, tax-free)."""
    amount = min(state.roth, net_needed)
    state.roth -= amount
    return Draw(account=AccountType.ROTH, gross=amount, net=amount)


def draw_ira(state: SimulationState, net_needed: float, ordinary_rate: float) -> Draw:
    """
    Take an IRA distribution grossed up so it nets ``net_needed``.

    The distribution is capped at the IRA balance; the tax portion is
    ``gross * ordinary_rate``.
    """
    gross = min(state.ira, _gross_up(net_needed, ordinary_rate))
    net = gross * (1 - ordinary_rate)
    state.ira -= gross
    return Draw(
        account=AccountType.IRA,
        gross=gross,
        net=net,
        tax_ordinary=gross - net,
    )


def sell_taxable(state: SimulationState, net_needed: float, cap_gains_rate: float) -> Draw:
    """
    Sell taxable holdings grossed up so the sale nets ``net_needed``.

    Each dollar sold carries the account's current gain fraction; the
    non-gain share of the sale reduces cost basis.
    """
    gain_pct = state.gain_fraction()
    effective_rate = gain_pct * cap_gains_rate
    gross = min(state.taxable_market, _gross_up(net_needed, effective_rate))
    net = gross * (1 - effective_rate)
    gain = gross * gain_pct
    tax = gain * cap_gains_rate

    state.taxable_market -= gross
    state.taxable_basis = max(0.0, state.taxable_basis - (gross - gain))
    return Draw(
        account=AccountType.TAXABLE,
        gross=gross,
        net=net,
        gain=gain,
        tax_cap_gains=tax,
    )


def draw_from(
    account: AccountType,
    state: SimulationState,
    net_needed: float,
    scenario: Scenario,
) -> Draw:
    """Draw from ``account`` using that account's tax treatment."""
    if account == AccountType.CASH:
        return draw_cash(state, net_needed)
    if account == AccountType.ROTH:
        return draw_roth(state, net_needed)
    if account == AccountType.IRA:
        return draw_ira(state, net_needed, scenario.ordinary_income_rate)
    return sell_taxable(state, net_needed, scenario.capital_gains_rate)
