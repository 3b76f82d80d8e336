from collections.abc import Mapping
from typing import Any

from eth_typing import ChecksumAddress

from clankerkit.abi import V3_CLAIM_REWARDS, V3_LOCKER_UPDATE_CREATOR_REWARD_RECIPIENT
from clankerkit.checksum_cache import get_checksum_address
from clankerkit.config import Settings
from clankerkit.config import settings as default_settings
from clankerkit.deployments import DeploymentRegistry, default_registry
from clankerkit.exceptions import MissingCollaborator
from clankerkit.logging import logger
from clankerkit.transaction.chain import ChainClient, Wallet
from clankerkit.transaction.execution import (
    deploy_token,
    simulate_call,
    simulate_deploy_token,
    write_contract,
)
from clankerkit.transaction.types import (
    ContractCall,
    DeploymentSubmission,
    SimulationResult,
    Submission,
)
from clankerkit.types.aliases import ChainId
from clankerkit.v3.payload import DeploymentPayload, build_deployment_payload
from clankerkit.v3.schema import DeploymentRequest
from clankerkit.v4.vanity import AddressMiningOracle


def get_claim_rewards_transaction(
    registry: DeploymentRegistry,
    chain_id: ChainId,
    token: str,
) -> ContractCall:
    return ContractCall(
        address=registry.get_v3(chain_id).address,
        function_prototype=V3_CLAIM_REWARDS,
        args=(get_checksum_address(token),),
        chain_id=chain_id,
    )


def get_update_creator_reward_recipient_transaction(
    registry: DeploymentRegistry,
    chain_id: ChainId,
    token_id: int,
    new_recipient: str,
) -> ContractCall:
    """
    The LP locker indexes rewards by the ID of the locked liquidity position, not by token.
    """

    return ContractCall(
        address=registry.get_v3(chain_id).locker,
        function_prototype=V3_LOCKER_UPDATE_CREATOR_REWARD_RECIPIENT,
        args=(token_id, get_checksum_address(new_recipient)),
        chain_id=chain_id,
    )


class Clanker:
    """
    Deploy and manage Clanker v3.1 tokens through a chain client and wallet.

    Results follow the same conventions as the v4 `clankerkit.v4.Clanker`.
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

    async def _simulate(
        self, call: ContractCall, operation: str, account: ChecksumAddress | None
    ) -> SimulationResult:
        if account is None:
            account = self._require_wallet(operation).address
        return await simulate_call(self._require_client(operation), call, account)

    async def _write(self, call: ContractCall, operation: str, *, simulate: bool) -> Submission:
        client = self._require_client(operation)
        wallet = self._require_wallet(operation)
        return await write_contract(client, wallet, call, simulate=simulate)

    # Deployment

    async def get_deploy_transaction(
        self,
        request: DeploymentRequest | Mapping[str, Any],
        requestor: str,
    ) -> DeploymentPayload:
        """
        Compile a deployment. Admins and reward recipients missing from the request fall back to
        `requestor`.
        """

        return await build_deployment_payload(
            request,
            requestor,
            registry=self.registry,
            oracle=self.oracle,
            settings=self.settings,
        )

    async def deploy_simulate(
        self,
        request: DeploymentRequest | Mapping[str, Any],
        account: ChecksumAddress | None = None,
    ) -> SimulationResult:
        if account is None:
            account = self._require_wallet("deploy simulation").address
        client = self._require_client("deploy simulation")

        payload = await self.get_deploy_transaction(request, account)
        return await simulate_deploy_token(payload, client, account)

    async def deploy(
        self,
        request: DeploymentRequest | Mapping[str, Any],
        *,
        simulate: bool = True,
    ) -> DeploymentSubmission:
        client = self._require_client("deployToken")
        wallet = self._require_wallet("deployToken")

        payload = await self.get_deploy_transaction(request, wallet.address)
        logger.info(
            f"Deploying {payload.deployment_config.token_config.symbol} through v3.1 on "
            f"{payload.chain_id}"
        )
        return await deploy_token(
            payload,
            client,
            wallet,
            simulate=simulate,
            confirmation_timeout=self.settings.confirmation_timeout,
        )

    # Rewards

    async def claim_rewards(self, token: str, *, simulate: bool = False) -> Submission:
        call = get_claim_rewards_transaction(self.registry, self._chain_id("claimRewards"), token)
        return await self._write(call, "claimRewards", simulate=simulate)

    async def claim_rewards_simulate(
        self,
        token: str,
        account: ChecksumAddress | None = None,
    ) -> SimulationResult:
        call = get_claim_rewards_transaction(
            self.registry, self._chain_id("claimRewards simulation"), token
        )
        return await self._simulate(call, "claimRewards simulation", account)

    async def update_creator_reward_recipient(
        self,
        token_id: int,
        new_recipient: str,
        *,
        simulate: bool = False,
    ) -> Submission:
        call = get_update_creator_reward_recipient_transaction(
            self.registry,
            self._chain_id("updateCreatorRewardRecipient"),
            token_id,
            new_recipient,
        )
        return await self._write(call, "updateCreatorRewardRecipient", simulate=simulate)

    async def update_creator_reward_recipient_simulate(
        self,
        token_id: int,
        new_recipient: str,
        account: ChecksumAddress | None = None,
    ) -> SimulationResult:
        call = get_update_creator_reward_recipient_transaction(
            self.registry,
            self._chain_id("updateCreatorRewardRecipient simulation"),
            token_id,
            new_recipient,
        )
        return await self._simulate(call, "updateCreatorRewardRecipient simulation", account)
