"""
Map low-level execution failures onto the `ClassifiedError` taxonomy.

A failure is searched, through its chain of causes, for:
    1. A contract revert. The decoded error name is looked up first, then the four-byte selector
       of the revert data, since name decoding fails for errors missing from the known ABI.
       Unmapped reverts are `unknown` with the raw name preserved.
    2. An insufficient funds condition, which the caller can fix.
    3. Anything else, which is `unknown`.
"""

from collections.abc import Iterator
from typing import Final, NamedTuple

from hexbytes import HexBytes
from web3.exceptions import ContractLogicError

from clankerkit.abi import KNOWN_ERRORS
from clankerkit.exceptions import ClassifiedError, ContractRevert, ErrorKind
from clankerkit.functions import function_selector
from clankerkit.logging import logger


class ErrorDescription(NamedTuple):
    kind: ErrorKind
    label: str
    raw_name: str


ERRORS_BY_NAME: Final[dict[str, ErrorDescription]] = {
    "NoFeesToClaim": ErrorDescription(
        kind=ErrorKind.STATE,
        label="No fees to claim",
        raw_name="NoFeesToClaim",
    ),
    "InvalidVaultConfiguration": ErrorDescription(
        kind=ErrorKind.CALLER,
        label="Invalid vault configuration",
        raw_name="InvalidVault",
    ),
    "BaseFeeTooLow": ErrorDescription(
        kind=ErrorKind.CALLER,
        label="Base fee is set too low",
        raw_name="BaseFeeTooLow",
    ),
}

# Errors raised by contracts outside the known ABI, e.g. the V4 pool manager and router
ERRORS_BY_SELECTOR: Final[dict[str, ErrorDescription]] = {
    "0x7e5ba1ad": ErrorDescription(
        kind=ErrorKind.STATE,
        label="Hook not enabled.",
        raw_name="HookNotEnabled",
    ),
    "0x8b063d73": ErrorDescription(
        kind=ErrorKind.STATE,
        label="Too little received (likely dev buy).",
        raw_name="V4TooLittleReceived",
    ),
}

_KNOWN_ERROR_NAMES_BY_SELECTOR: Final[dict[str, str]] = {
    function_selector(prototype).to_0x_hex(): prototype[: prototype.find("(")]
    for prototype in KNOWN_ERRORS
}

UNKNOWN_LABEL = "Something went wrong"


class _Revert(NamedTuple):
    error_name: str | None
    selector: str | None


def _walk(exc: BaseException) -> Iterator[BaseException]:
    """
    Yield the exception and every exception in its cause/context chain.
    """

    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def _selector_from_data(data: object) -> str | None:
    if isinstance(data, str):
        if not data.startswith("0x"):
            return None
        try:
            data = HexBytes(data)
        except ValueError:
            return None
    if not isinstance(data, bytes) or len(data) < 4:  # noqa: PLR2004
        return None
    return HexBytes(data[:4]).to_0x_hex()


def _as_revert(exc: BaseException) -> _Revert | None:
    match exc:
        case ContractRevert():
            selector = exc.selector
            error_name = exc.error_name
        case ContractLogicError():
            selector = _selector_from_data(exc.data)
            error_name = None
        case _:
            return None

    if error_name is None and selector is not None:
        error_name = _KNOWN_ERROR_NAMES_BY_SELECTOR.get(selector)
    return _Revert(error_name=error_name, selector=selector)


def _classified(exc: BaseException, description: ErrorDescription) -> ClassifiedError:
    return ClassifiedError(
        error=exc,
        kind=description.kind,
        label=description.label,
        raw_name=description.raw_name,
    )


def classify_error(exc: BaseException) -> ClassifiedError:
    """
    Classify a failure raised by a chain client or wallet.
    """

    if isinstance(exc, ClassifiedError):
        return exc

    classified: ClassifiedError | None = None

    for error in _walk(exc):
        if (revert := _as_revert(error)) is None:
            continue

        if revert.error_name is not None and revert.error_name in ERRORS_BY_NAME:
            classified = _classified(exc, ERRORS_BY_NAME[revert.error_name])
        elif revert.selector is not None and revert.selector in ERRORS_BY_SELECTOR:
            classified = _classified(exc, ERRORS_BY_SELECTOR[revert.selector])
        else:
            classified = ClassifiedError(
                error=exc,
                kind=ErrorKind.UNKNOWN,
                label=UNKNOWN_LABEL,
                raw_name=revert.error_name or "unknown",
            )
        break

    if classified is None:
        for error in _walk(exc):
            if "insufficient funds" in str(error).lower():
                classified = ClassifiedError(
                    error=error,
                    kind=ErrorKind.CALLER,
                    label="Insufficient funds.",
                    raw_name="InsufficientFundsError",
                )
                break

    if classified is None:
        classified = ClassifiedError(
            error=exc,
            kind=ErrorKind.UNKNOWN,
            label=UNKNOWN_LABEL,
            raw_name=type(exc).__name__,
        )

    logger.info(f"Classified {type(exc).__name__} as {classified.kind}: {classified.raw_name}")
    return classified


def classify_error_selector(selector: str | bytes) -> ClassifiedError:
    """
    Classify a bare four-byte error selector, e.g. one read from raw revert data.
    """

    selector = HexBytes(selector).to_0x_hex()
    error = ContractRevert(data=selector)

    if (description := ERRORS_BY_SELECTOR.get(selector)) is not None:
        return _classified(error, description)

    return ClassifiedError(
        error=error,
        kind=ErrorKind.CALLER,
        label="Contract error.",
        raw_name=f"Unknown hex: {selector}",
    )
