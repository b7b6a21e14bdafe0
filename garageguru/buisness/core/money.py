from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal('0.01')


def to_money(value) -> Decimal:
    """Two-place Decimal from a Decimal, int, float or numeric string (None -> 0.00)"""
    if value is None:
        return Decimal('0.00')
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def line_total(line) -> Decimal:
    return to_money(line['unit_price']) * int(line['quantity'])
