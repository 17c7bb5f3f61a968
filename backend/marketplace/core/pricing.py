"""Price & Balance Arithmetic — decimal parsing, unit conversion and formatting.

Invariants:
    - Prices are compared as Decimal, never float ("40" == "40.00")
    - Prices carry at most 4 decimal places, so a debit of to_units(price) is exact
    - Balances are stored as integer units of 1/BALANCE_SCALE (exact arithmetic)
    - format_balance always renders two decimal places ("X.XX")

Design Decisions:
    - Integer units over Numeric columns: SQLite has no native decimal type and the
      conditional debit (balance >= amount) must compare exactly
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, ROUND_DOWN

from marketplace.core.errors import InputValidationError


BALANCE_SCALE: int = 10_000
WEI_PER_ETHER: int = 10 ** 18
_CENTS = Decimal("0.01")
_CHAIN_PRECISION = Decimal("0.0001")


def parse_price(raw: str | int | float | None, field: str = "price") -> Decimal:
    """Parse a decimal-as-string price. Raises InputValidationError if not a positive finite number."""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise InputValidationError("Missing required fields", field=field)
    try:
        value = Decimal(str(raw).strip())
    except InvalidOperation:
        raise InputValidationError(f"Invalid {field}: {raw!r}", field=field)
    if not value.is_finite() or value <= 0:
        raise InputValidationError(f"Invalid {field}: {raw!r}", field=field)
    if value.normalize().as_tuple().exponent < -4:
        raise InputValidationError(
            f"Invalid {field}: {raw!r} has more than 4 decimal places", field=field,
        )
    return value


def prices_match(submitted: str | int | float, listed: str) -> bool:
    """Exact equality on parsed decimals."""
    return parse_price(submitted) == parse_price(listed)


def to_units(amount: Decimal) -> int:
    """Decimal amount -> integer balance units (truncates below 1/BALANCE_SCALE)."""
    return int((amount * BALANCE_SCALE).to_integral_value(rounding=ROUND_DOWN))


def from_units(units: int) -> Decimal:
    return Decimal(units) / BALANCE_SCALE


def format_balance(units: int) -> str:
    """Render balance units as a two-decimal string, e.g. 600000 -> "60.00"."""
    return str(from_units(units).quantize(_CENTS, rounding=ROUND_HALF_UP))


def wei_to_ether(wei: int) -> Decimal:
    """Convert wei to ether, rounded to 4 decimal places."""
    return (Decimal(wei) / WEI_PER_ETHER).quantize(
        _CHAIN_PRECISION, rounding=ROUND_HALF_UP,
    )
