"""
The estimate -> simulate -> submit pipeline.

Operations that execute against the chain return result objects holding either their success
fields or a `ClassifiedError`; they do not raise for on-chain or transport failures. Caller bugs,
such as a missing wallet or a payload built for another chain, raise immediately.
"""

import functools
from collections.abc import Callable, Mapping, Sequence
from typing import Any

import eth_abi.abi
from eth_typing import ChecksumAddress
from hexbytes import HexBytes

from clankerkit.abi import TOKEN_CREATED_EVENT
from clankerkit.checksum_cache import get_checksum_address
from clankerkit.exceptions import (
    ChainIdMismatch,
    ClassifiedError,
    ErrorKind,
    MissingCollaborator,
    TokenCreatedEventMissing,
)
from clankerkit.functions import event_topic
from clankerkit.logging import logger
from clankerkit.transaction.chain import ChainClient, Wallet
from clankerkit.transaction.classifier import classify_error
from clankerkit.transaction.types import (
    ContractCall,
    DeploymentCall,
    DeploymentSubmission,
    GasEstimate,
    ReadResult,
    SimulationResult,
    Submission,
    TokenAddressResult,
)

# Applied to every gas estimate before submission, as a ratio
GAS_BUFFER_NUMERATOR = 12
GAS_BUFFER_DENOMINATOR = 10

DEFAULT_CONFIRMATION_TIMEOUT = 120.0

TOKEN_CREATED_TOPIC = event_topic(TOKEN_CREATED_EVENT)


def apply_gas_buffer(gas: int) -> int:
    return gas * GAS_BUFFER_NUMERATOR // GAS_BUFFER_DENOMINATOR


async def estimate_gas(
    client: ChainClient,
    call: ContractCall,
    sender: ChecksumAddress,
) -> GasEstimate:
    try:
        gas = await client.estimate_gas(call, sender)
    except Exception as exc:
        return GasEstimate(error=classify_error(exc))

    logger.debug(f"Estimated {gas} gas for {call.function_prototype} at {call.address}")
    return GasEstimate(gas=gas)


async def simulate_call(
    client: ChainClient,
    call: ContractCall,
    sender: ChecksumAddress | None = None,
) -> SimulationResult:
    try:
        data = await client.call(call, sender)
    except Exception as exc:
        return SimulationResult(error=classify_error(exc))

    logger.debug(f"Simulated {call.function_prototype} at {call.address}")
    return SimulationResult(data=data)


async def read_contract(
    client: ChainClient,
    call: ContractCall,
    return_types: Sequence[str],
) -> ReadResult:
    """
    Execute a view call and decode its output. A single return value is unpacked from its tuple.
    """

    simulation = await simulate_call(client, call)
    if simulation.error is not None:
        return ReadResult(error=simulation.error)

    assert simulation.data is not None
    try:
        decoded = eth_abi.abi.decode(types=list(return_types), data=simulation.data)
    except Exception as exc:
        return ReadResult(error=classify_error(exc))

    return ReadResult(value=decoded[0] if len(decoded) == 1 else decoded)


async def write_contract(
    client: ChainClient,
    wallet: Wallet | None,
    call: ContractCall,
    *,
    gas: int | None = None,
    simulate: bool = False,
) -> Submission:
    """
    Sign and broadcast the call from the wallet.

    If `simulate` is set, the call is dry-run first and a failing simulation returns its error
    without broadcasting. Gas is estimated, with the buffer applied, when not provided.
    """

    if wallet is None:
        raise MissingCollaborator(collaborator="Wallet account", operation=call.function_prototype)

    if simulate and (simulation := await simulate_call(client, call, wallet.address)).error:
        return Submission(error=simulation.error)

    if gas is None:
        estimate = await estimate_gas(client, call, wallet.address)
        if estimate.error is not None:
            return Submission(error=estimate.error)
        assert estimate.gas is not None
        gas = apply_gas_buffer(estimate.gas)

    try:
        tx_hash = await client.send_transaction(call, wallet, gas)
    except Exception as exc:
        return Submission(error=classify_error(exc))

    logger.info(f"Submitted {call.function_prototype} to {call.address}: {tx_hash.to_0x_hex()}")
    return Submission(tx_hash=tx_hash)


def _check_client_chain(client: ChainClient, chain_id: int) -> None:
    if client.chain_id != chain_id:
        raise ChainIdMismatch(expected=chain_id, actual=client.chain_id, source="public client")


def _check_wallet_chain(wallet: Wallet, chain_id: int) -> None:
    # A wallet without a chain signs for whichever chain the transaction names
    if wallet.chain_id is not None and wallet.chain_id != chain_id:
        raise ChainIdMismatch(expected=chain_id, actual=wallet.chain_id, source="wallet")


async def simulate_deploy_token(
    payload: DeploymentCall,
    client: ChainClient,
    sender: ChecksumAddress,
) -> SimulationResult:
    _check_client_chain(client, payload.chain_id)
    return await simulate_call(client, payload, sender)


def token_address_from_receipt(
    receipt: Mapping[str, Any],
    factory: ChecksumAddress,
) -> ChecksumAddress:
    """
    Read the deployed token address from the first v4 TokenCreated event emitted by the factory.
    """

    for log in receipt["logs"]:
        topics = log["topics"]
        if (
            topics
            and HexBytes(topics[0]) == TOKEN_CREATED_TOPIC
            and get_checksum_address(log["address"]) == factory
        ):
            # tokenAddress is the first indexed argument
            return get_checksum_address(HexBytes(topics[1])[-20:])

    raise TokenCreatedEventMissing(tx_hash=receipt["transactionHash"])


async def wait_for_token_address(
    client: ChainClient,
    tx_hash: HexBytes,
    read_token_address: Callable[[Mapping[str, Any]], ChecksumAddress],
    timeout: float = DEFAULT_CONFIRMATION_TIMEOUT,
) -> TokenAddressResult:
    """
    Wait for the deployment to be included, then resolve the token address from the receipt with
    `read_token_address`.

    A successful receipt without the deployment event raises `TokenCreatedEventMissing`.
    """

    try:
        receipt = await client.wait_for_receipt(tx_hash, timeout)
    except Exception as exc:
        return TokenAddressResult(error=classify_error(exc))

    if receipt["status"] == 0:
        reverted = ClassifiedError(
            error=RuntimeError(f"Transaction {tx_hash.to_0x_hex()} reverted"),
            kind=ErrorKind.UNKNOWN,
            label="Something went wrong",
            raw_name="TransactionReverted",
        )
        return TokenAddressResult(error=reverted)

    address = read_token_address(receipt)
    logger.info(f"Deployed token {address} in transaction {tx_hash.to_0x_hex()}")
    return TokenAddressResult(address=address)


async def deploy_token(
    payload: DeploymentCall,
    client: ChainClient,
    wallet: Wallet | None,
    *,
    simulate: bool = True,
    confirmation_timeout: float = DEFAULT_CONFIRMATION_TIMEOUT,
) -> DeploymentSubmission:
    """
    Estimate, optionally simulate, and submit a deployment payload.

    The returned submission carries the transaction hash immediately. Its `wait_for_transaction`
    coroutine function blocks until inclusion and resolves the token address.
    """

    if wallet is None:
        raise MissingCollaborator(collaborator="Wallet account", operation="deployToken")

    _check_client_chain(client, payload.chain_id)
    _check_wallet_chain(wallet, payload.chain_id)

    estimate = await estimate_gas(client, payload, wallet.address)
    if estimate.error is not None:
        return DeploymentSubmission(error=estimate.error)
    assert estimate.gas is not None

    submission = await write_contract(
        client,
        wallet,
        payload,
        gas=apply_gas_buffer(estimate.gas),
        simulate=simulate,
    )
    if submission.error is not None:
        return DeploymentSubmission(error=submission.error)
    assert submission.tx_hash is not None

    return DeploymentSubmission(
        tx_hash=submission.tx_hash,
        expected_address=payload.expected_address,
        wait_for_transaction=functools.partial(
            wait_for_token_address,
            client,
            submission.tx_hash,
            payload.token_address_from_receipt,
            confirmation_timeout,
        ),
    )
