import re
from decimal import Decimal
from typing import Any, Union

from .errors import InvalidAddressError, MalformedQuantityError, ValidationError
from .models import Balance

QUANTITY_RE = re.compile(r"0x[0-9a-fA-F]+")
ADDRESS_RE = re.compile(r"0x[0-9a-fA-F]{40}")
DATA_RE = re.compile(r"0x(?:[0-9a-fA-F]{2})*")
BLOCK_TAGS = ("latest", "earliest", "pending", "safe", "finalized")


def decode_quantity(raw: Any) -> int:
    if not isinstance(raw, str) or not QUANTITY_RE.fullmatch(raw):
        raise MalformedQuantityError(raw)
    return int(raw[2:], 16)


def encode_quantity(value: int) -> str:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"quantity must be an int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"quantity must not be negative, got {value}")
    return hex(value)


def decode_balance(raw: Any) -> Balance:
    return Balance(value=str(decode_quantity(raw)))


def decode_data(raw: Any) -> str:
    if not isinstance(raw, str) or not DATA_RE.fullmatch(raw):
        raise MalformedQuantityError(raw)
    return raw.lower()


def validate_address(address: Any) -> str:
    if not isinstance(address, str) or not ADDRESS_RE.fullmatch(address):
        raise InvalidAddressError(address)
    return address


def block_tag(block: Union[str, int]) -> str:
    if isinstance(block, str):
        if block in BLOCK_TAGS:
            return block
        raise ValidationError(f"unknown block tag: {block!r}")
    if isinstance(block, bool) or not isinstance(block, int) or block < 0:
        raise ValidationError(f"block number must be a non-negative int, got {block!r}")
    return encode_quantity(block)


def format_units(value: Union[int, str], decimals: int = 18) -> Decimal:
    """Scale an integer amount of base units down by ``decimals`` places.

    ``format_units(1500000000000000000)`` gives ``Decimal("1.5")``. The
    conversion is exact for any size of ``value``.
    """
    if isinstance(value, str):
        value = decode_quantity(value) if value.startswith("0x") else int(value)
    if decimals < 0:
        raise ValueError(f"decimals must not be negative, got {decimals}")
    return Decimal(f"{value}e-{decimals}")
