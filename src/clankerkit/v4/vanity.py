"""
Client side of vanity address mining.

The token init code hash is computed locally and sent to an address-mining oracle, which returns
a salt that makes the factory deploy the token at an address ending in the requested suffix.
"""

import dataclasses
from typing import Any, Protocol

import aiohttp
import eth_abi.abi
from eth_typing import ChecksumAddress
from eth_utils.crypto import keccak
from hexbytes import HexBytes

from clankerkit.abi import TOKEN_CONSTRUCTOR
from clankerkit.checksum_cache import get_checksum_address
from clankerkit.config import DEFAULT_VANITY_SERVICE_URL
from clankerkit.deployments import ClankerV4Deployment
from clankerkit.exceptions import ConfigurationError, ExternalServiceError
from clankerkit.logging import logger
from clankerkit.v4.schema import NormalizedConfig


@dataclasses.dataclass(slots=True, frozen=True)
class VanityAddress:
    salt: HexBytes
    address: ChecksumAddress


class AddressMiningOracle(Protocol):
    async def resolve(
        self,
        admin: ChecksumAddress,
        deployer: ChecksumAddress,
        init_code_hash: HexBytes,
        suffix: str,
    ) -> VanityAddress: ...


class HttpAddressMiningOracle:
    """
    An address-mining oracle reached by an HTTP GET with the query parameters `admin`, `deployer`,
    `init_code_hash` and `suffix`, responding with JSON `{address, salt}`.
    """

    def __init__(
        self,
        url: str = DEFAULT_VANITY_SERVICE_URL,
        timeout: float = 30.0,
        http_session: aiohttp.ClientSession | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.http_session = http_session

    async def resolve(
        self,
        admin: ChecksumAddress,
        deployer: ChecksumAddress,
        init_code_hash: HexBytes,
        suffix: str,
    ) -> VanityAddress:
        close_session_after_get = self.http_session is None

        session = (
            aiohttp.ClientSession(raise_for_status=True)
            if self.http_session is None
            else self.http_session
        )

        try:
            async with session.get(
                url=self.url,
                params={
                    "admin": admin,
                    "deployer": deployer,
                    "init_code_hash": init_code_hash.to_0x_hex(),
                    "suffix": suffix,
                },
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as resp:
                response: dict[str, Any] = await resp.json(content_type=None)
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise ExternalServiceError(error=str(exc) or type(exc).__name__) from exc
        finally:
            if close_session_after_get:
                await session.close()

        try:
            return VanityAddress(
                salt=HexBytes(response["salt"]),
                address=get_checksum_address(response["address"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ExternalServiceError(error=f"Malformed vanity response {response!r}") from exc


def token_init_code(config: NormalizedConfig, bytecode: bytes, total_supply: int) -> HexBytes:
    """
    The token creation bytecode followed by its encoded constructor arguments.
    """

    return HexBytes(
        bytes(bytecode)
        + eth_abi.abi.encode(
            types=TOKEN_CONSTRUCTOR,
            args=(
                config.name,
                config.symbol,
                total_supply,
                config.token_admin,
                config.image,
                config.metadata_json,
                config.context_json,
                config.chain_id,
            ),
        )
    )


def token_init_code_hash(config: NormalizedConfig, bytecode: bytes, total_supply: int) -> HexBytes:
    return HexBytes(keccak(token_init_code(config, bytecode, total_supply)))


async def resolve_vanity_address(
    oracle: AddressMiningOracle,
    *,
    admin: ChecksumAddress,
    deployer: ChecksumAddress,
    init_code: bytes,
    suffix: str,
) -> VanityAddress:
    """
    Query the oracle for a salt giving the token created from `init_code` by `deployer` an address
    with the suffix.

    The returned address is not checked locally; the chain computes the real address at deployment.
    """

    init_code_hash = HexBytes(keccak(init_code))
    logger.debug(
        f"Mining vanity address with suffix {suffix} for init code hash {init_code_hash.to_0x_hex()}"
    )
    vanity = await oracle.resolve(
        admin=admin,
        deployer=deployer,
        init_code_hash=init_code_hash,
        suffix=suffix,
    )
    logger.debug(f"Vanity address {vanity.address} with salt {vanity.salt.to_0x_hex()}")
    return vanity


async def mine_vanity_address(
    config: NormalizedConfig,
    deployment: ClankerV4Deployment,
    oracle: AddressMiningOracle,
    suffix: str,
    total_supply: int,
) -> VanityAddress:
    if deployment.token_bytecode is None:
        raise ConfigurationError(
            message=f"Token bytecode is not configured for chain {deployment.chain_id}, "
            "vanity addresses cannot be mined."
        )

    return await resolve_vanity_address(
        oracle,
        admin=config.token_admin,
        deployer=deployment.address,
        init_code=token_init_code(config, deployment.token_bytecode, total_supply),
        suffix=suffix,
    )
