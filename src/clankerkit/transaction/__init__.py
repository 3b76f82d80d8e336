from .chain import ChainClient, LocalWallet, Wallet, Web3ChainClient
from .classifier import classify_error, classify_error_selector
from .execution import (
    deploy_token,
    estimate_gas,
    read_contract,
    simulate_call,
    simulate_deploy_token,
    token_address_from_receipt,
    wait_for_token_address,
    write_contract,
)
from .types import (
    ContractCall,
    DeploymentCall,
    DeploymentSubmission,
    GasEstimate,
    ReadResult,
    SimulationResult,
    Submission,
    TokenAddressResult,
)

__all__ = (
    "ChainClient",
    "ContractCall",
    "DeploymentCall",
    "DeploymentSubmission",
    "GasEstimate",
    "LocalWallet",
    "ReadResult",
    "SimulationResult",
    "Submission",
    "TokenAddressResult",
    "Wallet",
    "Web3ChainClient",
    "classify_error",
    "classify_error_selector",
    "deploy_token",
    "estimate_gas",
    "read_contract",
    "simulate_call",
    "simulate_deploy_token",
    "token_address_from_receipt",
    "wait_for_token_address",
    "write_contract",
)
