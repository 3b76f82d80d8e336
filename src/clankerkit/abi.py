"""
ABI type layouts for the Clanker v4 factory, its modules, and the token contract, plus the v3.1
factory and LP locker.

Tuple field order follows the Solidity struct definitions exactly; eth-abi encodes positionally.
"""

# struct TokenConfig
TOKEN_CONFIG = "(address,string,string,bytes32,string,string,string,uint256)"
# struct PoolConfig
POOL_CONFIG = "(address,address,int24,int24,bytes)"
# struct LockerConfig
LOCKER_CONFIG = "(address,address[],address[],uint16[],int24[],int24[],uint16[],bytes)"
# struct MevModuleConfig
MEV_MODULE_CONFIG = "(address,bytes)"
# struct ExtensionConfig
EXTENSION_CONFIG = "(address,uint256,uint16,bytes)"
# struct DeploymentConfig
DEPLOYMENT_CONFIG = (
    f"({TOKEN_CONFIG},{POOL_CONFIG},{LOCKER_CONFIG},{MEV_MODULE_CONFIG},{EXTENSION_CONFIG}[])"
)

# struct PoolKey (Uniswap V4)
POOL_KEY = "(address,address,uint24,int24,address)"

# Factory
DEPLOY_TOKEN = f"deployToken({DEPLOYMENT_CONFIG})"
TOKEN_CREATED_EVENT = (
    "TokenCreated(address,address,address,string,string,string,string,string,int24,address,"
    "bytes32,address,address,address,uint256,address[])"
)

# Token constructor: name, symbol, maxSupply, admin, image, metadata, context, initialSupplyChainId
TOKEN_CONSTRUCTOR = ["string", "string", "uint256", "address", "string", "string", "string", "uint256"]

# Module instantiation data
STATIC_FEE_HOOK_DATA = ["uint24", "uint24"]
DYNAMIC_FEE_HOOK_DATA = ["uint24", "uint24", "uint256", "uint256", "int24", "uint256", "uint24"]
POOL_INITIALIZATION_DATA = ["(address,bytes,bytes)"]
MEV_SNIPER_AUCTION_DATA = ["(uint24,uint24,uint256)"]
LOCKER_DATA = ["(uint8[])"]
VAULT_DATA = ["address", "uint256", "uint256"]
AIRDROP_DATA = ["address", "bytes32", "uint256", "uint256"]
DEVBUY_V4_DATA = [POOL_KEY, "uint128", "address"]
DEVBUY_V3_DATA = ["uint24", "uint128", "address"]

# Token management
FEE_LOCKER_CLAIM = "claim(address,address)"
FEE_LOCKER_AVAILABLE_FEES = "availableFees(address,address)"
LOCKER_UPDATE_REWARD_RECIPIENT = "updateRewardRecipient(address,uint256,address)"
LOCKER_UPDATE_REWARD_ADMIN = "updateRewardAdmin(address,uint256,address)"
VAULT_CLAIM = "claim(address)"
VAULT_AMOUNT_AVAILABLE_TO_CLAIM = "amountAvailableToClaim(address)"
AIRDROP_CLAIM = "claim(address,address,uint256,bytes32[])"

# v3.1 factory: TokenConfig, VaultConfig, PoolConfig, InitialBuyConfig, RewardsConfig
V3_TOKEN_CONFIG = "(string,string,bytes32,string,string,string,uint256)"
V3_VAULT_CONFIG = "(uint8,uint256)"
V3_POOL_CONFIG = "(address,int24)"
V3_INITIAL_BUY_CONFIG = "(uint24,uint256)"
V3_REWARDS_CONFIG = "(uint256,address,address,address,address)"
V3_DEPLOY_TOKEN = (
    f"deployToken(({V3_TOKEN_CONFIG},{V3_VAULT_CONFIG},{V3_POOL_CONFIG},{V3_INITIAL_BUY_CONFIG},"
    f"{V3_REWARDS_CONFIG}))"
)
V3_CLAIM_REWARDS = "claimRewards(address)"
V3_LOCKER_UPDATE_CREATOR_REWARD_RECIPIENT = "updateCreatorRewardRecipient(uint256,address)"

# ERC20 mint, emitted by the token constructor
TRANSFER_EVENT = "Transfer(address,address,uint256)"

# Custom errors that can be decoded from revert data by name
KNOWN_ERRORS = (
    "BaseFeeTooLow()",
    "InvalidVaultConfiguration()",
    "NoFeesToClaim()",
)
