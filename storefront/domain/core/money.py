from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


def to_cents(value: float | int | str | Decimal | None) -> int:
    """Converte um valor em reais (como chega do front) para centavos."""
    if value is None:
        return 0
    amount = Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)
    return int(amount * 100)


def from_cents(cents: int | None) -> float:
    return float(Decimal(cents or 0) / 100)


def format_brl(cents: int) -> str:
    value = Decimal(cents or 0) / 100
    formatted = f"{value:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
    return f"R$ {formatted}"
