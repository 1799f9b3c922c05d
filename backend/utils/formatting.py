from decimal import Decimal, ROUND_HALF_UP

TWO_PLACES = Decimal("0.01")

def to_money(amount) -> Decimal:
    """Coerce to a Decimal rounded to paise. Floats go through str() to avoid binary noise."""
    if amount is None:
        return Decimal("0.00")
    if isinstance(amount, float):
        amount = str(amount)
    return Decimal(amount).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)

def format_indian_currency(amount: Decimal) -> str:
    if amount is None:
        return "₹ 0.00"
    amount = to_money(amount)
    sign = "-" if amount < 0 else ""
    amount_str = f"{abs(amount):.2f}"
    integer_part, decimal_part = amount_str.split(".")

    if len(integer_part) <= 3:
        return f"₹ {sign}{integer_part}.{decimal_part}"

    # Indian grouping: last three digits, then pairs (1,23,45,678.00)
    last_three = integer_part[-3:]
    remaining = integer_part[:-3]

    formatted_remaining = ""
    while len(remaining) > 2:
        formatted_remaining = "," + remaining[-2:] + formatted_remaining
        remaining = remaining[:-2]

    formatted_remaining = remaining + formatted_remaining

    return f"₹ {sign}{formatted_remaining},{last_three}.{decimal_part}"
