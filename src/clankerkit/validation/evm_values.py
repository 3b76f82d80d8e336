from typing import Annotated, Any

from eth_typing import ChecksumAddress
from eth_utils.address import is_address
from hexbytes import HexBytes
from pydantic import BeforeValidator, Field, PlainSerializer

from clankerkit.checksum_cache import get_checksum_address
from clankerkit.constants import (
    MAX_INT24,
    MAX_UINT24,
    MAX_UINT256,
    MIN_INT24,
    MIN_UINT24,
    MIN_UINT256,
)

type ValidatedInt24 = Annotated[int, Field(strict=True, ge=MIN_INT24, le=MAX_INT24)]

type ValidatedUint24 = Annotated[int, Field(strict=True, ge=MIN_UINT24, le=MAX_UINT24)]
type ValidatedUint256 = Annotated[int, Field(strict=True, ge=MIN_UINT256, le=MAX_UINT256)]


def _validate_address(value: Any) -> ChecksumAddress:
    if not isinstance(value, (str, bytes)) or not is_address(value):
        msg = f"{value!r} is not a valid address"
        raise ValueError(msg)
    return get_checksum_address(value)


def _validate_hex(value: Any) -> HexBytes:
    if isinstance(value, bytes):
        return HexBytes(value)
    if not isinstance(value, str) or not value.startswith("0x"):
        msg = f"{value!r} is not a 0x-prefixed hex string"
        raise ValueError(msg)
    try:
        return HexBytes(value)
    except ValueError:
        msg = f"{value!r} is not a valid hex string"
        raise ValueError(msg) from None


def _validate_bytes32(value: Any) -> HexBytes:
    result = _validate_hex(value)
    if len(result) != 32:  # noqa: PLR2004
        msg = f"expected 32 bytes, got {len(result)}"
        raise ValueError(msg)
    return result


_hex_serializer = PlainSerializer(lambda value: value.to_0x_hex(), return_type=str)

type AddressField = Annotated[ChecksumAddress, BeforeValidator(_validate_address)]
type HexBytesField = Annotated[HexBytes, BeforeValidator(_validate_hex), _hex_serializer]
type Bytes32Field = Annotated[HexBytes, BeforeValidator(_validate_bytes32), _hex_serializer]
