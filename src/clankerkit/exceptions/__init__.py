from clankerkit.exceptions.base import (
    ClankerKitError,
    ClankerKitValueError,
    ExternalServiceError,
)
from clankerkit.exceptions.compiler import (
    CompilerError,
    ConfigurationError,
    PrecisionError,
    ValidationError,
)
from clankerkit.exceptions.transaction import (
    ChainIdMismatch,
    ClassifiedError,
    ContractRevert,
    ErrorKind,
    MissingCollaborator,
    TokenCreatedEventMissing,
    TransactionError,
)

from . import compiler, transaction

__all__ = (
    "ChainIdMismatch",
    "ClankerKitError",
    "ClankerKitValueError",
    "ClassifiedError",
    "CompilerError",
    "ConfigurationError",
    "ContractRevert",
    "ErrorKind",
    "ExternalServiceError",
    "MissingCollaborator",
    "PrecisionError",
    "TokenCreatedEventMissing",
    "TransactionError",
    "ValidationError",
    "compiler",
    "transaction",
)
