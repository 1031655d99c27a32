# utils/formatting.py

def format_units(n: int) -> str:
    """
    Format integer quantities Brazilian-style with '.' as thousands separator.
    Example: 1234567 -> "1.234.567", -1500 -> "-1.500"
    """
    return f"{n:,.0f}".replace(",", ".")
