"""Append-only transaction ledger explaining every simulated money movement."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator

from core.scenario import AccountType


class LedgerPhase(str, Enum):
    """Step of the yearly cycle that produced an entry."""

    GROWTH = "growth"
    SPENDING = "spending"
    RMD = "rmd"
    CONVERSION = "conversion"
    TAX_SETTLEMENT = "tax_settlement"
    REINVEST = "reinvest"


class LedgerEntryType(str, Enum):
    """Kind of money movement."""

    INCOME = "income"
    WITHDRAWAL = "withdrawal"
    DEPOSIT = "deposit"
    TRANSFER = "transfer"
    TAX_ACCRUAL = "tax_accrual"
    TAX_PAYMENT = "tax_payment"
    GROWTH = "growth"


class LedgerPurpose(str, Enum):
    """Why the money moved."""

    SPENDING = "spending"
    TAX = "tax"
    CONVERSION = "conversion"
    RMD = "rmd"
    REINVEST = "reinvest"
    INCOME = "income"


class LedgerAttribution(str, Enum):
    """Income stream or source the movement is attributed to."""

    IRA_DISTRIBUTION = "ira_distribution"
    ROTH_WITHDRAWAL = "roth_withdrawal"
    TAXABLE_SALE = "taxable_sale"
    CASH_WITHDRAWAL = "cash_withdrawal"
    SOCIAL_SECURITY = "social_security"
    ROTH_CONVERSION = "roth_conversion"
    CAPITAL_GAINS = "capital_gains"
    INTEREST = "interest"


@dataclass(frozen=True)
class LedgerEntry:
    """One immutable money movement in the simulation."""

    id: str
    year_index: int
    age: int
    phase: LedgerPhase
    entry_type: LedgerEntryType
    amount_gross: float
    purpose: LedgerPurpose
    description: str
    amount_net: float | None = None
    account: AccountType | None = None
    account_from: AccountType | None = None
    account_to: AccountType | None = None
    tax_ordinary: float | None = None
    tax_cap_gains: float | None = None
    attribution: LedgerAttribution | None = None

    def as_record(self) -> dict[str, Any]:
        """Flatten to a dictionary of plain values (enums as strings)."""
        return {
            "id": self.id,
            "year_index": self.year_index,
            "age": self.age,
            "phase": self.phase.value,
            "type": self.entry_type.value,
            "amount_gross": self.amount_gross,
            "amount_net": self.amount_net,
            "account": self.account.value if self.account else None,
            "account_from": self.account_from.value if self.account_from else None,
            "account_to": self.account_to.value if self.account_to else None,
            "tax_ordinary": self.tax_ordinary,
            "tax_cap_gains": self.tax_cap_gains,
            "purpose": self.purpose.value,
            "attribution": self.attribution.value if self.attribution else None,
            "description": self.description,
        }


class Ledger:
    """
    Append-only collection of ledger entries for one simulation run.

    Entries receive sequential ids in creation order and are never
    modified or removed once recorded.
    """

    def __init__(self) -> None:
        self._entries: list[LedgerEntry] = []

    def record(self, **fields: Any) -> LedgerEntry:
        """Create an entry with the next id and append it."""
        entry = LedgerEntry(id=f"ledger-{len(self._entries):06d}", **fields)
        self._entries.append(entry)
        return entry

    @property
    def entries(self) -> tuple[LedgerEntry, ...]:
        """All entries in creation order."""
        return tuple(self._entries)

    def for_year(self, year_index: int) -> list[LedgerEntry]:
        """Entries recorded for one simulation year."""
        return [entry for entry in self._entries if entry.year_index == year_index]

    def by_year(self) -> dict[int, list[LedgerEntry]]:
        """Group entries by year index, preserving order."""
        grouped: dict[int, list[LedgerEntry]] = {}
        for entry in self._entries:
            grouped.setdefault(entry.year_index, []).append(entry)
        return grouped

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LedgerEntry]:
        return iter(self._entries)
