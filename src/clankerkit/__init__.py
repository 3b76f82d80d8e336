from .checksum_cache import get_checksum_address
from .config import settings
from .version import __version__

# isort: split

from .deployments import DeploymentRegistry, default_registry
from .exceptions import ClassifiedError, ErrorKind
from .logging import logger
from .transaction import (
    ContractCall,
    LocalWallet,
    Web3ChainClient,
    classify_error,
    classify_error_selector,
    deploy_token,
)
from .v4 import Clanker, DeploymentPayload, DeploymentRequest, build_deployment_payload

__all__ = (
    "Clanker",
    "ClassifiedError",
    "ContractCall",
    "DeploymentPayload",
    "DeploymentRegistry",
    "DeploymentRequest",
    "ErrorKind",
    "LocalWallet",
    "Web3ChainClient",
    "__version__",
    "build_deployment_payload",
    "classify_error",
    "classify_error_selector",
    "default_registry",
    "deploy_token",
    "get_checksum_address",
    "logger",
    "settings",
)
