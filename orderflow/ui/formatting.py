"""
Number formatting shared by the order flow panels.
"""


def format_compact(value: float) -> str:
    """
    Short axis label for a volume figure.

    Examples:
        1_250_000 -> "1.2M"
        15_400 -> "15K"
        -3_000 -> "-3K"
        950 -> "950"
    """
    sign = "-" if value < 0 else ""
    magnitude = abs(value)
    if magnitude >= 1_000_000:
        return f"{sign}{magnitude / 1_000_000:.1f}M"
    if magnitude >= 1_000:
        return f"{sign}{magnitude / 1_000:.0f}K"
    if magnitude == int(magnitude):
        return f"{sign}{int(magnitude)}"
    return f"{sign}{magnitude:.2f}"


def format_signed_compact(value: float) -> str:
    """format_compact with an explicit '+' on non-negative values."""
    text = format_compact(value)
    return text if value < 0 else f"+{text}"


def format_price(price: float) -> str:
    """Dollar price label with thousands separators."""
    if price >= 100:
        return f"${price:,.0f}" if price == int(price) else f"${price:,.2f}"
    return f"${price:,.4f}".rstrip("0").rstrip(".")
