"""
Exceptions raised while compiling a deployment request into a factory call payload.

All of these terminate the attempt immediately, before any payload is handed to the execution
pipeline.
"""

from typing import Any

from clankerkit.exceptions.base import ClankerKitError


class CompilerError(ClankerKitError):
    """
    Exception raised inside the deployment compiler.
    """


class ValidationError(CompilerError):
    """
    The deployment request is malformed, out of range, or internally inconsistent.
    """

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(message=f"Invalid value for '{field}': {reason}")

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.field, self.reason)


class PrecisionError(CompilerError):
    """
    A basis-point allocation cannot represent the requested absolute amount within the allowed
    rounding tolerance.
    """

    def __init__(self, amount: int, allocated: int, bps: int) -> None:
        self.amount = amount
        self.allocated = allocated
        self.bps = bps
        if allocated < amount:
            message = (
                f"Precision error for airdrop. Expected {amount} but only {allocated} ({bps} bps) "
                f"allocated. Difference {amount - allocated}."
            )
        else:
            message = f"Precision error for airdrop. Difference {allocated - amount} is too large."
        super().__init__(message=message)

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.amount, self.allocated, self.bps)


class ConfigurationError(CompilerError):
    """
    The request asks for a feature that the resolved deployment target does not support.
    """
