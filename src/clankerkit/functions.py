from collections.abc import Sequence
from decimal import Decimal
from typing import Any

import eth_abi.abi
from eth_typing import ChecksumAddress
from eth_utils.crypto import keccak
from hexbytes import HexBytes

from clankerkit.checksum_cache import get_checksum_address


def create2_address(
    deployer: str | bytes,
    salt: bytes | str,
    init_code_hash: bytes | str,
) -> ChecksumAddress:
    """
    Generate the deterministic CREATE2 address for a given deployer, salt, and the keccak hash of
    the contract creation (init) bytecode.

    References:
        - https://eips.ethereum.org/EIPS/eip-1014
    """
    return get_checksum_address(
        keccak(HexBytes(0xFF) + HexBytes(deployer) + HexBytes(salt) + HexBytes(init_code_hash))[
            -20:
        ],  # Contract address is the least significant 20 bytes from the 32 byte hash
    )


def split_abi_types(type_list: str) -> list[str]:
    """
    Split a comma-separated list of ABI types, keeping tuple types intact.

    e.g. 'uint256,(address,bytes)[],bool' becomes ['uint256', '(address,bytes)[]', 'bool']
    """

    types: list[str] = []
    depth = 0
    start = 0
    for i, char in enumerate(type_list):
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        elif char == "," and depth == 0:
            types.append(type_list[start:i])
            start = i + 1
    if type_list[start:]:
        types.append(type_list[start:])
    return types


def extract_argument_types_from_function_prototype(function_prototype: str) -> list[str]:
    """
    Extract the argument types from the function prototype.

    e.g. the argument types for the prototype 'function(address,(uint24,bytes))' are
    ['address', '(uint24,bytes)']
    """

    return split_abi_types(
        function_prototype[function_prototype.find("(") + 1 : function_prototype.rfind(")")]
    )


def function_selector(function_prototype: str) -> HexBytes:
    """
    The 4-byte selector for a function or custom error prototype, e.g. 'NoFeesToClaim()'.
    """
    return HexBytes(keccak(text=function_prototype)[:4])


def event_topic(event_prototype: str) -> HexBytes:
    return HexBytes(keccak(text=event_prototype))


def encode_function_calldata(
    function_prototype: str, function_arguments: Sequence[Any] | None
) -> HexBytes:
    """
    Encode the calldata to execute a call to the given function prototype, with ordered arguments.
    The resulting bytes array will include the 4-byte function selector, followed by the
    ABI-encoded arguments.
    """

    if function_arguments is None:
        function_arguments = ()

    return HexBytes(
        function_selector(function_prototype)
        + eth_abi.abi.encode(
            types=extract_argument_types_from_function_prototype(function_prototype),
            args=function_arguments,
        )
    )


def eth_to_wei(amount: Decimal | int | str) -> int:
    """
    Convert a decimal amount of a token with 18 decimals to its integer base-unit amount.
    """
    return int(Decimal(str(amount)) * 10**18)
