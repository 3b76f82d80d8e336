import pytest
from hexbytes import HexBytes

from clankerkit.exceptions import ClassifiedError, ErrorKind
from clankerkit.transaction.types import ContractCall, GasEstimate, Submission

from .conftest import CHAIN_ID, OTHER_ACCOUNT, TOKEN_ADMIN


def test_contract_call():
    call = ContractCall(
        address=OTHER_ACCOUNT,
        function_prototype="transfer(address,uint256)",
        args=(TOKEN_ADMIN, 1),
        chain_id=CHAIN_ID,
        value=5,
    )

    assert call.selector == HexBytes("0xa9059cbb")
    assert call.calldata[:4] == call.selector
    assert len(call.calldata) == 4 + 2 * 32

    params = call.to_tx_params()
    assert params == {
        "to": OTHER_ACCOUNT,
        "data": call.calldata,
        "value": 5,
        "chainId": CHAIN_ID,
    }
    assert call.to_tx_params(sender=TOKEN_ADMIN)["from"] == TOKEN_ADMIN


def test_result_unwrap():
    estimate = GasEstimate(gas=21_000)
    assert estimate.ok
    assert estimate.unwrap() is estimate

    error = ClassifiedError(
        error=RuntimeError("boom"),
        kind=ErrorKind.UNKNOWN,
        label="Something went wrong",
        raw_name="RuntimeError",
    )
    submission = Submission(error=error)
    assert not submission.ok
    with pytest.raises(ClassifiedError, match="Something went wrong"):
        submission.unwrap()
