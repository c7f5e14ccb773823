from __future__ import annotations

from node_staking.core.constants.base import MAX_UINT256


def parse_wei_amount(value: str | int, *, field: str = "amount") -> int:
    """Parse a base-unit amount given as an integer or decimal integer text.

    Rejects negatives, fractions, exponents, bools and anything above uint256.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid {field}: {value!r}")
    if isinstance(value, int):
        amount = value
    else:
        text = str(value).strip().replace("_", "")
        if not (text.isascii() and text.isdigit()):
            raise ValueError(
                f"Invalid {field}: {value!r} is not a non-negative integer"
            )
        amount = int(text)
    if amount < 0:
        raise ValueError(f"Invalid {field}: must be non-negative")
    if amount > MAX_UINT256:
        raise ValueError(f"Invalid {field}: exceeds uint256")
    return amount


def format_wei(amount_wei: int, *, decimals: int = 18) -> str:
    """Render base units as a trimmed decimal string (``15 * 10**17`` -> ``1.5``)."""
    whole, frac = divmod(int(amount_wei), 10**decimals)
    if not frac:
        return str(whole)
    return f"{whole}.{str(frac).rjust(decimals, '0').rstrip('0')}"
