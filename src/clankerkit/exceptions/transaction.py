"""
Exceptions defined here are raised (or returned as data) by the `transaction` module.
"""

import enum
from typing import Any

from hexbytes import HexBytes

from clankerkit.exceptions.base import ClankerKitError, ClankerKitValueError


class ErrorKind(enum.StrEnum):
    CALLER = "caller"  # the caller can correct the request
    STATE = "state"  # valid request, rejected by the current on-chain state
    UNKNOWN = "unknown"


class TransactionError(ClankerKitError):
    """
    Exception raised inside transaction execution helpers.
    """


class ClassifiedError(TransactionError):
    """
    An on-chain or transport failure mapped onto a stable taxonomy.

    Instances are returned inside result objects by the execution pipeline. They are only raised
    when a caller unwraps a failed result.
    """

    def __init__(
        self,
        error: BaseException,
        kind: ErrorKind,
        label: str,
        raw_name: str,
    ) -> None:
        self.error = error
        self.kind = kind
        self.label = label
        self.raw_name = raw_name
        super().__init__(message=label)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(kind={self.kind}, label={self.label!r}, raw_name={self.raw_name!r})"

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.error, self.kind, self.label, self.raw_name)


class ContractRevert(TransactionError):
    """
    Raised by a chain client when a call reverts. The error name is set when the client could
    decode the revert, and `data` holds the raw revert data (selector + arguments) when available.
    """

    def __init__(self, error_name: str | None = None, data: bytes | str | None = None) -> None:
        self.error_name = error_name
        self.data = HexBytes(data) if data is not None else None
        super().__init__(message=f"Execution reverted: {error_name or self.selector or 'unknown'}")

    @property
    def selector(self) -> str | None:
        if self.data is None or len(self.data) < 4:
            return None
        return self.data[:4].to_0x_hex()

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.error_name, self.data)


class ChainIdMismatch(ClankerKitValueError):
    """
    The payload targets a different chain than the connected client or wallet.
    """

    def __init__(self, expected: int, actual: int | None, source: str) -> None:
        self.expected = expected
        self.actual = actual
        self.source = source
        super().__init__(
            message=f"Token chainId doesn't match {source} chainId: {expected} != {actual}"
        )

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.expected, self.actual, self.source)


class MissingCollaborator(ClankerKitValueError):
    """
    A chain client, wallet, or account required by the operation was not provided.
    """

    def __init__(self, collaborator: str, operation: str) -> None:
        self.collaborator = collaborator
        self.operation = operation
        super().__init__(message=f"{collaborator} required for {operation}")

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.collaborator, self.operation)


class TokenCreatedEventMissing(TransactionError):
    """
    A confirmed deployment receipt holds no token creation event from the factory.
    """

    def __init__(self, tx_hash: HexBytes | str) -> None:
        self.tx_hash = HexBytes(tx_hash)
        super().__init__(
            message=f"No token creation event found in receipt for {self.tx_hash.to_0x_hex()}"
        )

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.tx_hash,)
