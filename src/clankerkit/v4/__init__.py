from .airdrop import (
    AirdropProof,
    MerkleTree,
    fetch_airdrop_proofs,
    get_airdrop_proofs,
    get_claim_airdrop_transaction,
    register_airdrop,
)
from .allocation import BpsAllocation, allocate_bps, bps_of_supply, verify_bps_allocation
from .clanker import Clanker
from .extensions import Extension, compose_extensions
from .fees import FeeHookConfig, encode_fee_config
from .payload import DeploymentPayload, build_deployment_payload, compile_deployment
from .schema import DeploymentRequest, NormalizedConfig, normalize, parse_request
from .vanity import AddressMiningOracle, HttpAddressMiningOracle, VanityAddress

__all__ = (
    "AddressMiningOracle",
    "AirdropProof",
    "BpsAllocation",
    "Clanker",
    "DeploymentPayload",
    "DeploymentRequest",
    "Extension",
    "FeeHookConfig",
    "HttpAddressMiningOracle",
    "MerkleTree",
    "NormalizedConfig",
    "VanityAddress",
    "allocate_bps",
    "bps_of_supply",
    "build_deployment_payload",
    "compile_deployment",
    "compose_extensions",
    "encode_fee_config",
    "fetch_airdrop_proofs",
    "get_airdrop_proofs",
    "get_claim_airdrop_transaction",
    "normalize",
    "parse_request",
    "register_airdrop",
    "verify_bps_allocation",
)
