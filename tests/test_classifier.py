import pytest
from web3.exceptions import ContractCustomError, ContractLogicError

from clankerkit.exceptions import ClassifiedError, ContractRevert, ErrorKind
from clankerkit.functions import function_selector
from clankerkit.transaction.classifier import classify_error, classify_error_selector


def test_named_revert():
    error = classify_error(ContractRevert(error_name="NoFeesToClaim"))

    assert error.kind is ErrorKind.STATE
    assert error.label == "No fees to claim"
    assert error.raw_name == "NoFeesToClaim"
    assert str(error) == "No fees to claim"


@pytest.mark.parametrize(
    "name, kind, label, raw_name",
    [
        ("InvalidVaultConfiguration", ErrorKind.CALLER, "Invalid vault configuration", "InvalidVault"),
        ("BaseFeeTooLow", ErrorKind.CALLER, "Base fee is set too low", "BaseFeeTooLow"),
    ],
)
def test_named_revert_table(name, kind, label, raw_name):
    error = classify_error(ContractRevert(error_name=name))
    assert (error.kind, error.label, error.raw_name) == (kind, label, raw_name)


def test_unnamed_revert_falls_back_to_selector():
    error = classify_error(ContractRevert(error_name="Mystery", data="0x7e5ba1ad"))

    assert error.kind is ErrorKind.STATE
    assert error.label == "Hook not enabled."
    assert error.raw_name == "HookNotEnabled"


def test_selector_with_arguments():
    error = classify_error(ContractRevert(data="0x8b063d73" + "00" * 64))

    assert error.kind is ErrorKind.STATE
    assert error.label == "Too little received (likely dev buy)."
    assert error.raw_name == "V4TooLittleReceived"


def test_unrecognized_revert_keeps_raw_name():
    error = classify_error(ContractRevert(error_name="SomethingElse", data="0xdeadbeef"))

    assert error.kind is ErrorKind.UNKNOWN
    assert error.label == "Something went wrong"
    assert error.raw_name == "SomethingElse"


def test_unrecognized_revert_without_name():
    error = classify_error(ContractRevert(data="0xdeadbeef"))

    assert error.kind is ErrorKind.UNKNOWN
    assert error.raw_name == "unknown"


def test_web3_custom_error_decoded_by_selector():
    data = function_selector("NoFeesToClaim()").to_0x_hex()
    error = classify_error(ContractCustomError(message=data, data=data))

    assert error.kind is ErrorKind.STATE
    assert error.label == "No fees to claim"


def test_web3_logic_error_with_unknown_selector():
    error = classify_error(ContractLogicError(message="execution reverted", data="0x7e5ba1ad"))

    assert error.kind is ErrorKind.STATE
    assert error.raw_name == "HookNotEnabled"


def test_revert_found_in_cause_chain():
    try:
        try:
            raise ContractRevert(error_name="BaseFeeTooLow")
        except ContractRevert as exc:
            raise RuntimeError("estimation failed") from exc
    except RuntimeError as exc:
        error = classify_error(exc)

    assert error.kind is ErrorKind.CALLER
    assert error.raw_name == "BaseFeeTooLow"
    assert isinstance(error.error, RuntimeError)


def test_insufficient_funds():
    error = classify_error(
        ValueError("insufficient funds for gas * price + value: have 0 want 1000")
    )

    assert error.kind is ErrorKind.CALLER
    assert error.label == "Insufficient funds."
    assert error.raw_name == "InsufficientFundsError"


def test_anything_else_is_unknown():
    original = TimeoutError("request timed out")
    error = classify_error(original)

    assert error.kind is ErrorKind.UNKNOWN
    assert error.label == "Something went wrong"
    assert error.raw_name == "TimeoutError"
    assert error.error is original


def test_classified_errors_pass_through():
    error = classify_error(ContractRevert(error_name="NoFeesToClaim"))
    assert classify_error(error) is error


def test_classify_selector():
    error = classify_error_selector("0x7e5ba1ad")

    assert isinstance(error, ClassifiedError)
    assert error.kind is ErrorKind.STATE
    assert error.raw_name == "HookNotEnabled"


def test_classify_unknown_selector():
    error = classify_error_selector("0x12345678")

    assert error.kind is ErrorKind.CALLER
    assert error.label == "Contract error."
    assert error.raw_name == "Unknown hex: 0x12345678"
