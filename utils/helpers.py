from __future__ import annotations


def format_currency(value: float) -> str:
    return f"${value:,.0f}"


def format_currency_compact(value: float) -> str:
    """Short currency label for chart axes and cells: $1.2M, $350K, $900."""
    sign = "-" if value < 0 else ""
    magnitude = abs(value)
    if magnitude >= 1_000_000:
        return f"{sign}${magnitude / 1_000_000:.1f}M"
    if magnitude >= 1_000:
        return f"{sign}${magnitude / 1_000:.0f}K"
    return f"{sign}${magnitude:,.0f}"


def format_percent(rate: float, decimals: int = 1) -> str:
    return f"{rate * 100:.{decimals}f}%"


def inflation_factor(inflation_rate: float, years: int) -> float:
    """Growth of one dollar of spending after ``years`` of inflation."""
    return (1 + inflation_rate) ** years


def parse_currency(value: str, fallback: float) -> float:
    """Parse a currency string such as "$1,250,000" to float."""
    cleaned = value.replace("$", "").replace(",", "").strip()
    if not cleaned:
        return fallback
    try:
        return float(cleaned)
    except ValueError:
        return fallback
