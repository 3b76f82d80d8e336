from collections.abc import Mapping, Sequence
from typing import Any

import aiohttp
import eth_abi.abi
from eth_typing import ChecksumAddress

from clankerkit.abi import (
    FEE_LOCKER_AVAILABLE_FEES,
    FEE_LOCKER_CLAIM,
    LOCKER_UPDATE_REWARD_ADMIN,
    LOCKER_UPDATE_REWARD_RECIPIENT,
    VAULT_AMOUNT_AVAILABLE_TO_CLAIM,
    VAULT_CLAIM,
)
from clankerkit.checksum_cache import get_checksum_address
from clankerkit.config import Settings
from clankerkit.config import settings as default_settings
from clankerkit.deployments import DeploymentRegistry, default_registry
from clankerkit.exceptions import MissingCollaborator
from clankerkit.logging import logger
from clankerkit.transaction.chain import ChainClient, Wallet
from clankerkit.transaction.classifier import classify_error
from clankerkit.transaction.execution import (
    deploy_token,
    read_contract,
    simulate_call,
    simulate_deploy_token,
    write_contract,
)
from clankerkit.transaction.types import (
    ContractCall,
    DeploymentSubmission,
    ReadResult,
    SimulationResult,
    Submission,
)
from clankerkit.types.aliases import ChainId
from clankerkit.v4.airdrop import (
    AirdropProof,
    MerkleTree,
    fetch_airdrop_proofs,
    get_claim_airdrop_transaction,
    register_airdrop,
)
from clankerkit.v4.payload import DeploymentPayload, build_deployment_payload
from clankerkit.v4.schema import DeploymentRequest
from clankerkit.v4.vanity import AddressMiningOracle


def get_claim_rewards_transaction(
    registry: DeploymentRegistry,
    chain_id: ChainId,
    token: str,
    reward_recipient: str,
) -> ContractCall:
    return ContractCall(
        address=registry.get(chain_id).related.fee_locker,
        function_prototype=FEE_LOCKER_CLAIM,
        args=(get_checksum_address(reward_recipient), get_checksum_address(token)),
        chain_id=chain_id,
    )


def get_available_rewards_transaction(
    registry: DeploymentRegistry,
    chain_id: ChainId,
    token: str,
    reward_recipient: str,
) -> ContractCall:
    return ContractCall(
        address=registry.get(chain_id).related.fee_locker,
        function_prototype=FEE_LOCKER_AVAILABLE_FEES,
        args=(get_checksum_address(reward_recipient), get_checksum_address(token)),
        chain_id=chain_id,
    )


def get_update_reward_recipient_transaction(
    registry: DeploymentRegistry,
    chain_id: ChainId,
    token: str,
    reward_index: int,
    new_recipient: str,
) -> ContractCall:
    return ContractCall(
        address=registry.get(chain_id).related.locker,
        function_prototype=LOCKER_UPDATE_REWARD_RECIPIENT,
        args=(get_checksum_address(token), reward_index, get_checksum_address(new_recipient)),
        chain_id=chain_id,
    )


def get_update_reward_admin_transaction(
    registry: DeploymentRegistry,
    chain_id: ChainId,
    token: str,
    reward_index: int,
    new_admin: str,
) -> ContractCall:
    return ContractCall(
        address=registry.get(chain_id).related.locker,
        function_prototype=LOCKER_UPDATE_REWARD_ADMIN,
        args=(get_checksum_address(token), reward_index, get_checksum_address(new_admin)),
        chain_id=chain_id,
    )


def get_vault_claim_transaction(
    registry: DeploymentRegistry,
    chain_id: ChainId,
    token: str,
) -> ContractCall:
    return ContractCall(
        address=registry.get(chain_id).related.vault,
        function_prototype=VAULT_CLAIM,
        args=(get_checksum_address(token),),
        chain_id=chain_id,
    )


class Clanker:
    """
    Deploy and manage Clanker v4 tokens through a chain client and wallet.

    The chain client is required for every on-chain operation, and the wallet for every write.
    Operations that execute against the chain return result objects instead of raising for
    on-chain failures; see `clankerkit.transaction.execution`.
    """

    def __init__(
        self,
        client: ChainClient | None = None,
        wallet: Wallet | None = None,
        *,
        registry: DeploymentRegistry | None = None,
        oracle: AddressMiningOracle | None = None,
        settings: Settings | None = None,
    ) -> None:
        if settings is None:
            settings = default_settings

        self.client = client
        self.wallet = wallet
        self.settings = settings
        self.registry = default_registry(settings) if registry is None else registry
        self.oracle = oracle

    def _require_client(self, operation: str) -> ChainClient:
        if self.client is None:
            raise MissingCollaborator(collaborator="Chain client", operation=operation)
        return self.client

    def _require_wallet(self, operation: str) -> Wallet:
        if self.wallet is None:
            raise MissingCollaborator(collaborator="Wallet account", operation=operation)
        return self.wallet

    def _chain_id(self, operation: str) -> ChainId:
        return self._require_client(operation).chain_id

    async def _write(self, call: ContractCall, operation: str, *, simulate: bool) -> Submission:
        client = self._require_client(operation)
        wallet = self._require_wallet(operation)
        return await write_contract(client, wallet, call, simulate=simulate)

    # Deployment

    async def get_deploy_transaction(
        self,
        request: DeploymentRequest | Mapping[str, Any],
    ) -> DeploymentPayload:
        return await build_deployment_payload(
            request,
            registry=self.registry,
            oracle=self.oracle,
            settings=self.settings,
        )

    async def deploy_simulate(
        self,
        request: DeploymentRequest | Mapping[str, Any],
        account: ChecksumAddress | None = None,
    ) -> SimulationResult:
        """
        Dry-run a deployment from `account`, or from the wallet if no account is given.
        """

        if account is None:
            account = self._require_wallet("deploy simulation").address
        client = self._require_client("deploy simulation")

        payload = await self.get_deploy_transaction(request)
        return await simulate_deploy_token(payload, client, account)

    async def deploy(
        self,
        request: DeploymentRequest | Mapping[str, Any],
        *,
        simulate: bool = True,
    ) -> DeploymentSubmission:
        client = self._require_client("deployToken")
        wallet = self._require_wallet("deployToken")

        payload = await self.get_deploy_transaction(request)
        logger.info(f"Deploying {payload.deployment_config.token_config.symbol} on {payload.chain_id}")
        return await deploy_token(
            payload,
            client,
            wallet,
            simulate=simulate,
            confirmation_timeout=self.settings.confirmation_timeout,
        )

    # Rewards

    async def claim_rewards(
        self,
        token: str,
        reward_recipient: str,
        *,
        simulate: bool = False,
    ) -> Submission:
        call = get_claim_rewards_transaction(
            self.registry, self._chain_id("claim"), token, reward_recipient
        )
        return await self._write(call, "claim", simulate=simulate)

    async def claim_rewards_simulate(
        self,
        token: str,
        reward_recipient: str,
        account: ChecksumAddress | None = None,
    ) -> SimulationResult:
        if account is None:
            account = self._require_wallet("claim simulation").address
        call = get_claim_rewards_transaction(
            self.registry, self._chain_id("claim simulation"), token, reward_recipient
        )
        return await simulate_call(self._require_client("claim simulation"), call, account)

    async def available_rewards(self, token: str, reward_recipient: str) -> ReadResult:
        """
        The fees accrued to `reward_recipient` for `token` and not yet claimed.
        """

        call = get_available_rewards_transaction(
            self.registry, self._chain_id("availableFees"), token, reward_recipient
        )
        return await read_contract(self._require_client("availableFees"), call, ["uint256"])

    async def update_reward_recipient(
        self,
        token: str,
        reward_index: int,
        new_recipient: str,
        *,
        simulate: bool = False,
    ) -> Submission:
        call = get_update_reward_recipient_transaction(
            self.registry,
            self._chain_id("updateRewardRecipient"),
            token,
            reward_index,
            new_recipient,
        )
        return await self._write(call, "updateRewardRecipient", simulate=simulate)

    async def update_reward_recipient_simulate(
        self,
        token: str,
        reward_index: int,
        new_recipient: str,
        account: ChecksumAddress | None = None,
    ) -> SimulationResult:
        if account is None:
            account = self._require_wallet("updateRewardRecipient simulation").address
        call = get_update_reward_recipient_transaction(
            self.registry,
            self._chain_id("updateRewardRecipient simulation"),
            token,
            reward_index,
            new_recipient,
        )
        return await simulate_call(
            self._require_client("updateRewardRecipient simulation"), call, account
        )

    async def update_reward_admin(
        self,
        token: str,
        reward_index: int,
        new_admin: str,
        *,
        simulate: bool = False,
    ) -> Submission:
        call = get_update_reward_admin_transaction(
            self.registry,
            self._chain_id("updateRewardAdmin"),
            token,
            reward_index,
            new_admin,
        )
        return await self._write(call, "updateRewardAdmin", simulate=simulate)

    async def update_reward_admin_simulate(
        self,
        token: str,
        reward_index: int,
        new_admin: str,
        account: ChecksumAddress | None = None,
    ) -> SimulationResult:
        if account is None:
            account = self._require_wallet("updateRewardAdmin simulation").address
        call = get_update_reward_admin_transaction(
            self.registry,
            self._chain_id("updateRewardAdmin simulation"),
            token,
            reward_index,
            new_admin,
        )
        return await simulate_call(self._require_client("updateRewardAdmin simulation"), call, account)

    # Vault

    async def claim_vaulted_tokens(self, token: str, *, simulate: bool = False) -> Submission:
        call = get_vault_claim_transaction(self.registry, self._chain_id("claim"), token)
        return await self._write(call, "claim", simulate=simulate)

    async def vault_claimable_amount(self, token: str) -> ReadResult:
        """
        The vaulted amount of `token` that can be claimed now. A vault holding no entry for the
        token returns no data, which reads as zero.
        """

        client = self._require_client("amountAvailableToClaim")
        chain_id = client.chain_id
        call = ContractCall(
            address=self.registry.get(chain_id).related.vault,
            function_prototype=VAULT_AMOUNT_AVAILABLE_TO_CLAIM,
            args=(get_checksum_address(token),),
            chain_id=chain_id,
        )

        simulation = await simulate_call(client, call)
        if simulation.error is not None:
            return ReadResult(error=simulation.error)
        if not simulation.data:
            return ReadResult(value=0)

        try:
            (amount,) = eth_abi.abi.decode(types=["uint256"], data=simulation.data)
        except Exception as exc:
            return ReadResult(error=classify_error(exc))
        return ReadResult(value=amount)

    # Airdrop

    async def claim_airdrop(
        self,
        token: str,
        recipient: str,
        amount: int,
        proof: Sequence[bytes | str],
        *,
        simulate: bool = False,
    ) -> Submission:
        call = get_claim_airdrop_transaction(
            self.registry,
            self._chain_id("claim"),
            token,
            recipient,
            amount,
            proof,
        )
        return await self._write(call, "claim", simulate=simulate)

    async def register_airdrop(
        self,
        token: str,
        tree: MerkleTree,
        *,
        http_session: aiohttp.ClientSession | None = None,
    ) -> bool:
        """
        Register an airdrop tree with the configured airdrop service.
        """

        return await register_airdrop(
            token,
            tree,
            url=str(self.settings.airdrop_service_url),
            timeout=self.settings.http.timeout,
            http_session=http_session,
        )

    async def fetch_airdrop_proofs(
        self,
        token: str,
        account: str,
        *,
        http_session: aiohttp.ClientSession | None = None,
    ) -> list[AirdropProof]:
        return await fetch_airdrop_proofs(
            token,
            account,
            url=str(self.settings.airdrop_service_url),
            timeout=self.settings.http.timeout,
            http_session=http_session,
        )
