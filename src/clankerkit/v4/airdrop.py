"""
Airdrop registration, proof lookup and claim transactions for tokens deployed with the airdrop
extension.

Merkle trees are built elsewhere; anything satisfying the `MerkleTree` protocol (e.g. a standard
OpenZeppelin-compatible tree over `(address, uint256)` leaves) can be registered and queried.
"""

import dataclasses
import json
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Protocol

import aiohttp
from eth_typing import ChecksumAddress
from hexbytes import HexBytes

from clankerkit.abi import AIRDROP_CLAIM
from clankerkit.checksum_cache import get_checksum_address
from clankerkit.config import DEFAULT_AIRDROP_SERVICE_URL
from clankerkit.deployments import DeploymentRegistry
from clankerkit.exceptions import ExternalServiceError
from clankerkit.logging import logger
from clankerkit.transaction.types import ContractCall
from clankerkit.types.aliases import ChainId


class MerkleTree(Protocol):
    @property
    def root(self) -> str: ...

    def entries(self) -> Iterable[tuple[int, tuple[str, int | str]]]:
        """
        Yield `(index, (account, amount))` for every leaf.
        """

    def get_proof(self, index: int) -> Sequence[str]: ...

    def dump(self) -> Mapping[str, Any]:
        """
        A JSON-serializable representation of the full tree.
        """


@dataclasses.dataclass(slots=True, frozen=True)
class AirdropProof:
    account: ChecksumAddress
    amount: int
    proof: tuple[HexBytes, ...]


async def _request_json(
    method: str,
    url: str,
    http_session: aiohttp.ClientSession | None,
    timeout: float,
    **kwargs: Any,
) -> Any:
    close_session_after_request = http_session is None

    session = (
        aiohttp.ClientSession(raise_for_status=True) if http_session is None else http_session
    )

    try:
        async with session.request(
            method,
            url=url,
            timeout=aiohttp.ClientTimeout(total=timeout),
            **kwargs,
        ) as resp:
            return await resp.json(content_type=None)
    except (aiohttp.ClientError, TimeoutError) as exc:
        raise ExternalServiceError(error=str(exc) or type(exc).__name__) from exc
    finally:
        if close_session_after_request:
            await session.close()


async def register_airdrop(
    token: str,
    tree: MerkleTree,
    *,
    url: str = DEFAULT_AIRDROP_SERVICE_URL,
    timeout: float = 30.0,
    http_session: aiohttp.ClientSession | None = None,
) -> bool:
    """
    Register an airdrop merkle tree with the airdrop service, so claimers can later fetch their
    proofs.

    The token must already be deployed and indexed, with the tree's merkle root set on its airdrop
    extension.
    """

    response = await _request_json(
        "POST",
        url,
        http_session,
        timeout,
        data=json.dumps(
            {
                "tokenAddress": get_checksum_address(token),
                "merkleRoot": tree.root,
                "tree": tree.dump(),
            }
        ),
        headers={"Content-Type": "application/json"},
    )
    try:
        success = bool(response["success"])
    except (KeyError, TypeError) as exc:
        raise ExternalServiceError(error=f"Malformed airdrop response {response!r}") from exc

    logger.info(f"Registered airdrop tree {tree.root} for {token}: {success}")
    return success


async def fetch_airdrop_proofs(
    token: str,
    account: str,
    *,
    url: str = DEFAULT_AIRDROP_SERVICE_URL,
    timeout: float = 30.0,
    http_session: aiohttp.ClientSession | None = None,
) -> list[AirdropProof]:
    """
    Fetch all proofs for an account from the airdrop service. The token's tree must have been
    registered with `register_airdrop`.
    """

    response = await _request_json(
        "GET",
        f"{url.rstrip('/')}/claim",
        http_session,
        timeout,
        params={
            "tokenAddress": get_checksum_address(token),
            "claimerAddress": get_checksum_address(account),
        },
    )
    try:
        return [
            AirdropProof(
                account=get_checksum_address(item["entry"]["account"]),
                amount=int(item["entry"]["amount"]),
                proof=tuple(HexBytes(node) for node in item["proof"]),
            )
            for item in response["proofs"]
        ]
    except (KeyError, TypeError, ValueError) as exc:
        raise ExternalServiceError(error=f"Malformed airdrop proofs response {response!r}") from exc


def get_airdrop_proofs(tree: MerkleTree, account: str) -> list[AirdropProof]:
    """
    All proofs for the account's leaves in a local tree. An account may appear more than once.
    """

    account = get_checksum_address(account)
    return [
        AirdropProof(
            account=account,
            amount=int(amount),
            proof=tuple(HexBytes(node) for node in tree.get_proof(index)),
        )
        for index, (leaf_account, amount) in tree.entries()
        if get_checksum_address(leaf_account) == account
    ]


def get_claim_airdrop_transaction(
    registry: DeploymentRegistry,
    chain_id: ChainId,
    token: str,
    recipient: str,
    amount: int,
    proof: Sequence[bytes | str],
) -> ContractCall:
    """
    Build the airdrop extension `claim` call. The amount must equal the amount in the tree leaf.
    """

    return ContractCall(
        address=registry.get(chain_id).related.airdrop,
        function_prototype=AIRDROP_CLAIM,
        args=(
            get_checksum_address(token),
            get_checksum_address(recipient),
            amount,
            [bytes(HexBytes(node)) for node in proof],
        ),
        chain_id=chain_id,
    )
