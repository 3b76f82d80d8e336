"""
Call descriptions and the result types returned by the execution pipeline.

Every result holds either its success fields or a `ClassifiedError`, never both. Failed results
are returned, not raised; `unwrap()` converts a failed result into a raised `ClassifiedError` for
interactive callers.
"""

import dataclasses
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Self

from eth_typing import ChecksumAddress
from hexbytes import HexBytes
from web3.types import TxParams

from clankerkit.exceptions import ClassifiedError
from clankerkit.functions import encode_function_calldata, function_selector
from clankerkit.types.aliases import ChainId


@dataclasses.dataclass(slots=True, frozen=True, kw_only=True)
class ContractCall:
    """
    A single contract function call: target, prototype, positional arguments and attached value.
    """

    address: ChecksumAddress
    function_prototype: str
    args: tuple[Any, ...]
    chain_id: ChainId
    value: int = 0

    @property
    def selector(self) -> HexBytes:
        return function_selector(self.function_prototype)

    @property
    def calldata(self) -> HexBytes:
        return encode_function_calldata(self.function_prototype, self.args)

    def to_tx_params(self, sender: ChecksumAddress | None = None) -> TxParams:
        params = TxParams(
            to=self.address,
            data=self.calldata,
            value=self.value,
            chainId=self.chain_id,
        )
        if sender is not None:
            params["from"] = sender
        return params


@dataclasses.dataclass(slots=True, frozen=True, kw_only=True)
class DeploymentCall(ContractCall):
    """
    A factory call that deploys a token, with the address the token is expected to deploy to when
    a vanity salt was mined. Each factory version reads the deployed address from its receipt in
    its own way.
    """

    expected_address: ChecksumAddress | None = None

    def token_address_from_receipt(self, receipt: Mapping[str, Any]) -> ChecksumAddress:
        raise NotImplementedError


class _Result:
    __slots__ = ()

    error: ClassifiedError | None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Self:
        """
        Return the result if it succeeded, otherwise raise its `ClassifiedError`.
        """

        if self.error is not None:
            raise self.error
        return self


@dataclasses.dataclass(slots=True, frozen=True)
class GasEstimate(_Result):
    gas: int | None = None
    error: ClassifiedError | None = None


@dataclasses.dataclass(slots=True, frozen=True)
class SimulationResult(_Result):
    # Raw return data of the dry-run call
    data: HexBytes | None = None
    error: ClassifiedError | None = None


@dataclasses.dataclass(slots=True, frozen=True)
class ReadResult(_Result):
    value: Any = None
    error: ClassifiedError | None = None


@dataclasses.dataclass(slots=True, frozen=True)
class Submission(_Result):
    tx_hash: HexBytes | None = None
    error: ClassifiedError | None = None


@dataclasses.dataclass(slots=True, frozen=True)
class TokenAddressResult(_Result):
    address: ChecksumAddress | None = None
    error: ClassifiedError | None = None


@dataclasses.dataclass(slots=True, frozen=True)
class DeploymentSubmission(_Result):
    """
    A submitted deployment. `wait_for_transaction` blocks until the transaction is included and
    resolves the deployed token address from the receipt.
    """

    tx_hash: HexBytes | None = None
    expected_address: ChecksumAddress | None = None
    wait_for_transaction: Callable[[], Awaitable[TokenAddressResult]] | None = dataclasses.field(
        default=None, compare=False, repr=False
    )
    error: ClassifiedError | None = None

