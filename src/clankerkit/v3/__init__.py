from .clanker import (
    Clanker,
    get_claim_rewards_transaction,
    get_update_creator_reward_recipient_transaction,
)
from .payload import DeploymentPayload, build_deployment_payload, compile_deployment
from .pool import desired_price, starting_tick
from .schema import DeploymentRequest, parse_request

__all__ = (
    "Clanker",
    "DeploymentPayload",
    "DeploymentRequest",
    "build_deployment_payload",
    "compile_deployment",
    "desired_price",
    "get_claim_rewards_transaction",
    "get_update_creator_reward_recipient_transaction",
    "parse_request",
    "starting_tick",
)
