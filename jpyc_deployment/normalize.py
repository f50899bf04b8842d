import re
from typing import Any, Optional, Union

from ape.utils import ZERO_ADDRESS
from eth_typing import ChecksumAddress
from eth_utils import (
    is_address,
    is_checksum_address,
    is_checksum_formatted_address,
    to_checksum_address,
)

from jpyc_deployment.constants import (
    DEFAULT_DECIMALS,
    MAX_DECIMALS,
    MAX_UINT256,
    MIN_DECIMALS,
)

_DECIMAL_AMOUNT = re.compile(r"^(-?)(\d+)(?:\.(\d+))?$")
_INTEGER = re.compile(r"^-?\d+$")
_HEX_INTEGER = re.compile(r"^-?0[xX][0-9a-fA-F]+$")
_UINT256_DIGITS = len(str(MAX_UINT256))


class NormalizationError(ValueError):
    """Raised when a user supplied address or amount cannot be normalized"""


class InvalidAddress(NormalizationError):
    pass


class InvalidAmount(NormalizationError):
    pass


def is_zero_address(address: str) -> bool:
    return address.lower() == ZERO_ADDRESS.lower()


def checksum_address(value: Any) -> Optional[ChecksumAddress]:
    """
    Returns the checksummed form of an address, or None when the value is
    not an address. Mixed-case input must already carry a valid EIP-55 checksum.
    """
    candidate = str(value).strip() if value is not None else ""
    if not is_address(candidate):
        return None
    if is_checksum_formatted_address(candidate) and not is_checksum_address(candidate):
        return None
    return to_checksum_address(candidate)


def normalize_address(value: Any, label: str) -> ChecksumAddress:
    """Returns the checksummed form of an address, rejecting the zero address."""
    checksummed = checksum_address(value)
    if checksummed is None:
        raise InvalidAddress(f"Invalid {label} address: {value}")
    if is_zero_address(checksummed):
        raise InvalidAddress(f"{label} address must not be zero")
    return checksummed


def normalize_decimals(decimals: Optional[Union[int, str]] = None) -> int:
    if decimals is None:
        return DEFAULT_DECIMALS
    message = f"decimals must be an integer between {MIN_DECIMALS} and {MAX_DECIMALS}"
    if isinstance(decimals, bool):
        raise InvalidAmount(message)
    if isinstance(decimals, float):
        if not decimals.is_integer():
            raise InvalidAmount(message)
        decimals = int(decimals)
    text = str(decimals).strip()
    if not _INTEGER.match(text) or len(text) > len(str(MAX_DECIMALS)) + 1:
        raise InvalidAmount(message)
    value = int(text)
    if not MIN_DECIMALS <= value <= MAX_DECIMALS:
        raise InvalidAmount(message)
    return value


def _check_uint256(value: int, amount: Any) -> int:
    if value > MAX_UINT256:
        raise InvalidAmount(f"Amount exceeds uint256: {amount}")
    return value


def _parse_integer(amount: Any) -> int:
    """Parses an integer given as int, decimal string or 0x-prefixed hex string."""
    if isinstance(amount, bool):
        raise InvalidAmount(f"Invalid amount: {amount}")
    if isinstance(amount, int):
        return _check_uint256(amount, amount)
    text = str(amount).strip()
    if _HEX_INTEGER.match(text):
        digits, base = text.lower().replace("0x", "", 1).lstrip("-"), 16
    elif _INTEGER.match(text):
        digits, base = text.lstrip("-"), 10
    else:
        raise InvalidAmount(f"Invalid amount: {amount}")
    digits = digits.lstrip("0") or "0"
    if len(digits) > (64 if base == 16 else _UINT256_DIGITS):
        raise InvalidAmount(f"Amount exceeds uint256: {amount}")
    value = int(digits, base)
    if text.startswith("-"):
        return -value
    return _check_uint256(value, amount)


def _parse_units(amount: Any, decimals: int) -> int:
    """Scales a plain decimal string such as "1.5" by 10**decimals."""
    text = str(amount).strip()
    match = _DECIMAL_AMOUNT.match(text)
    if not match:
        raise InvalidAmount(f"Invalid amount: {amount}")
    sign, whole, fraction = match.groups()

    # trailing zeros do not count ("1.50" with 1 decimal is fine)
    fraction = (fraction or "").rstrip("0")
    if len(fraction) > decimals:
        raise InvalidAmount("fractional component exceeds decimals")

    digits = (whole + fraction.ljust(decimals, "0")).lstrip("0") or "0"
    if len(digits) > _UINT256_DIGITS:
        raise InvalidAmount(f"Amount exceeds uint256: {amount}")
    value = int(digits)
    if sign:
        return -value
    return _check_uint256(value, amount)


def normalize_amount(
    amount: Any, decimals: Optional[Union[int, str]] = DEFAULT_DECIMALS, raw: bool = False
) -> int:
    """
    Returns a token amount in the smallest unit.

    With ``raw`` the amount is taken as-is (decimal or hex integer) and
    ``decimals`` is ignored, otherwise a decimal amount such as "1.5" is
    scaled by the token decimals.
    """
    if raw:
        value = _parse_integer(amount)
    else:
        value = _parse_units(amount, normalize_decimals(decimals))
    if value < 0:
        raise InvalidAmount("amount must be non-negative")
    return value


def normalize_allowance(value: Any) -> int:
    """Minter allowances are always given in the smallest unit."""
    allowance = _parse_integer(value)
    if allowance < 0:
        raise InvalidAmount("Allowance amount must be non-negative")
    return allowance
