"""
Fixed-point token amounts.

Every quantity in the ledger is a ``decimal.Decimal`` at scale 18
(DECIMAL(36, 18) on the persistence side). Amounts are parsed once at the
boundary with ``parse_amount`` and stay Decimal from then on; floats are
refused outright.
"""

import decimal
from decimal import Decimal, ROUND_DOWN

from Vesting_Ledger.vl_shared import config, errors

Amount = Decimal

QUANTUM = Decimal(1).scaleb(-config.AMOUNT_DECIMALS)
MAX_AMOUNT = Decimal(10) ** config.AMOUNT_INTEGER_DIGITS

LEDGER_CONTEXT = decimal.Context(
    prec=config.AMOUNT_CONTEXT_PRECISION,
    rounding=ROUND_DOWN,
    traps=[decimal.InvalidOperation, decimal.DivisionByZero, decimal.Overflow],
)

ZERO = Decimal(0).quantize(QUANTUM)


def quantize(value: Decimal) -> Decimal:
    with decimal.localcontext(LEDGER_CONTEXT):
        return value.quantize(QUANTUM, rounding=ROUND_DOWN)


def parse_amount(value, allow_zero: bool = False) -> Decimal:
    if isinstance(value, bool) or isinstance(value, float):
        raise errors.InvalidAmountError(value, "floats are not accepted, pass a decimal string")

    if isinstance(value, Decimal):
        parsed = value
    elif isinstance(value, int):
        parsed = Decimal(value)
    elif isinstance(value, str):
        try:
            parsed = Decimal(value.strip())
        except decimal.InvalidOperation:
            raise errors.InvalidAmountError(value, "not a decimal number")
    else:
        raise errors.InvalidAmountError(value, f"unsupported type {type(value).__name__}")

    if not parsed.is_finite():
        raise errors.InvalidAmountError(value, "must be finite")
    if parsed < 0:
        raise errors.InvalidAmountError(value, "must not be negative")
    if parsed == 0 and not allow_zero:
        raise errors.InvalidAmountError(value, "must be greater than zero")
    if parsed >= MAX_AMOUNT:
        raise errors.InvalidAmountError(value, f"exceeds {config.AMOUNT_INTEGER_DIGITS} integer digits")

    quantized = quantize(parsed)
    if quantized != parsed:
        raise errors.InvalidAmountError(value, f"more than {config.AMOUNT_DECIMALS} fractional digits")
    return quantized


def load_amount(raw) -> Decimal:
    # stored values were written by to_storage, no validation needed
    if isinstance(raw, bytes):
        raw = raw.decode()
    return quantize(Decimal(raw))


def to_storage(amount: Decimal) -> str:
    return str(quantize(amount))


def to_wire(amount: Decimal) -> str:
    with decimal.localcontext(LEDGER_CONTEXT):
        return format(quantize(amount).normalize(), "f")


def mul_div(amount: Decimal, numerator: int, denominator: int) -> Decimal:
    """amount * numerator / denominator, truncated to the ledger scale.

    The product is formed before dividing so the ratio never gets rounded
    on its own.
    """
    with decimal.localcontext(LEDGER_CONTEXT):
        return (amount * numerator / denominator).quantize(QUANTUM, rounding=ROUND_DOWN)


def add(a: Decimal, b: Decimal) -> Decimal:
    with decimal.localcontext(LEDGER_CONTEXT):
        return a + b


def sub(a: Decimal, b: Decimal) -> Decimal:
    with decimal.localcontext(LEDGER_CONTEXT):
        return a - b


def total(amounts) -> Decimal:
    result = ZERO
    with decimal.localcontext(LEDGER_CONTEXT):
        for amount in amounts:
            result += amount
    return result
