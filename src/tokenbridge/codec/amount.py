"""
Token amount scaling.

Amounts travel between chains with 8 decimals, whatever the token's native
precision. For tokens with more than 8 decimals the conversion floors away
the extra digits; the lost dust is never reconstructed. Tokens with 8 or
fewer decimals round-trip exactly.

All arithmetic is on Python integers with explicit width checks; decimal
strings are parsed digit-wise, never through floats.
"""

from ..errors import AmountOverflowError, ValidationError

WIRE_DECIMALS = 8
MAX_UINT64 = 2**64 - 1
MAX_UINT128 = 2**128 - 1
MAX_UINT256 = 2**256 - 1


def check_uint(value: int, bits: int = 256, name: str = "amount") -> int:
    """Ensure ``value`` is an unsigned integer of at most ``bits`` bits."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(
            f"{name} must be an integer, got {type(value).__name__}",
            field=name,
            value=value,
            expected="int",
        )
    if value < 0 or value >= 1 << bits:
        raise AmountOverflowError(
            f"{name} {value} does not fit in uint{bits}", amount=value, bits=bits
        )
    return value


def _check_decimals(decimals: int) -> int:
    if isinstance(decimals, bool) or not isinstance(decimals, int) or decimals < 0:
        raise ValidationError(
            f"Invalid token decimals {decimals!r}",
            field="decimals",
            value=decimals,
            expected="non-negative int",
        )
    return decimals


def normalize_amount(amount: int, decimals: int) -> int:
    """Convert a native amount to the 8-decimal wire scale (floor)."""
    check_uint(amount)
    if _check_decimals(decimals) > WIRE_DECIMALS:
        return amount // 10 ** (decimals - WIRE_DECIMALS)
    return amount


def denormalize_amount(amount: int, decimals: int) -> int:
    """Convert a wire amount back to the token's native scale."""
    check_uint(amount)
    if _check_decimals(decimals) > WIRE_DECIMALS:
        return check_uint(amount * 10 ** (decimals - WIRE_DECIMALS))
    return amount


def truncate_amount(amount: int, decimals: int) -> int:
    """Drop the native digits that the wire format cannot carry.

    Idempotent: truncating an already truncated amount is a no-op.
    """
    return denormalize_amount(normalize_amount(amount, decimals), decimals)


def parse_units(value: str, decimals: int) -> int:
    """Parse a decimal string such as ``"1.25"`` into base units.

    Fraction digits beyond ``decimals`` are floored away.
    """
    _check_decimals(decimals)
    text = str(value).strip()
    if text.startswith("+"):
        text = text[1:]
    whole, _, fraction = text.partition(".")
    if not whole:
        whole = "0"
    if not whole.isdigit() or (fraction and not fraction.isdigit()):
        raise ValidationError(
            f"Invalid decimal amount {value!r}",
            field="amount",
            value=value,
            expected="unsigned decimal string",
        )
    fraction = fraction[:decimals].ljust(decimals, "0")
    return check_uint(int(whole) * 10**decimals + int(fraction or "0"))


def format_units(amount: int, decimals: int) -> str:
    """Render base units as a decimal string without trailing zeros."""
    check_uint(amount)
    _check_decimals(decimals)
    if decimals == 0:
        return str(amount)
    whole, fraction = divmod(amount, 10**decimals)
    fraction_text = str(fraction).rjust(decimals, "0").rstrip("0")
    return f"{whole}.{fraction_text}" if fraction_text else str(whole)


def to_fixed_decimals(value: str, places: int = WIRE_DECIMALS) -> str:
    """Cut a decimal string to at most ``places`` fraction digits.

    Used on user input so amounts never carry more precision than the wire.
    """
    text = str(value).strip()
    whole, dot, fraction = text.partition(".")
    if not dot or len(fraction) <= places:
        return text
    if places == 0:
        return whole
    return f"{whole}.{fraction[:places]}"
