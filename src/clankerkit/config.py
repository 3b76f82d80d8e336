import tomllib
from pathlib import Path
from typing import Annotated

import tomlkit
from pydantic import BaseModel, HttpUrl, PlainSerializer, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from clankerkit.logging import logger
from clankerkit.types.aliases import ChainId

CONFIG_DIR = Path.home() / ".config" / "clankerkit"
CONFIG_FILE = CONFIG_DIR / "config.toml"

DEFAULT_VANITY_SERVICE_URL = "https://vanity-v79d.onrender.com/find"
DEFAULT_AIRDROP_SERVICE_URL = "https://www.clanker.world/api/airdrops"
DEFAULT_VANITY_SUFFIX = "0x4b07"


class HttpSettings(BaseModel):
    # Seconds allowed for each request to an external HTTP service
    timeout: float = 30.0


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="CLANKERKIT_", env_nested_delimiter="__")

    vanity_service_url: HttpUrl = HttpUrl(DEFAULT_VANITY_SERVICE_URL)
    airdrop_service_url: HttpUrl = HttpUrl(DEFAULT_AIRDROP_SERVICE_URL)
    vanity_suffix: str = DEFAULT_VANITY_SUFFIX
    confirmation_timeout: float = 120.0
    http: HttpSettings = HttpSettings()
    # Serialize the paths as a string representation of the absolute path
    token_bytecode: dict[
        ChainId,
        Annotated[Path, PlainSerializer(lambda path: str(path.absolute()), return_type=str)],
    ] = {}
    v3_token_bytecode: dict[
        ChainId,
        Annotated[Path, PlainSerializer(lambda path: str(path.absolute()), return_type=str)],
    ] = {}

    @field_validator("vanity_suffix", mode="after")
    def validate_suffix(
        cls,  # noqa: N805
        suffix: str,
    ) -> str:
        """
        The suffix is matched against the hex form of an address, so it must be hex.
        """

        digits = suffix.removeprefix("0x")
        if not digits or any(char not in "0123456789abcdefABCDEF" for char in digits):
            msg = f"Vanity suffix {suffix!r} is not a hex string"
            raise ValueError(msg)
        return f"0x{digits.lower()}"

    @field_validator("token_bytecode", "v3_token_bytecode", mode="after")
    def validate_paths(
        cls,  # noqa: N805
        paths: dict[ChainId, Path],
    ) -> dict[ChainId, Path]:
        """
        Convert all file paths to an absolute reference.
        """

        return {chain_id: path.expanduser().absolute() for chain_id, path in paths.items()}


def load_config_from_file(config_path: Path) -> Settings:
    return Settings.model_validate(
        tomllib.loads(
            config_path.read_text(),
        ),
    )


def save_config_to_file(config: Settings, config_path: Path = CONFIG_FILE) -> None:
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(
        tomlkit.dumps(
            {
                # TOML keys must be strings
                key: {str(k): v for k, v in value.items()} if isinstance(value, dict) else value
                for key, value in config.model_dump(mode="json").items()
            }
        ),
    )
    logger.info(f"Saved configuration to {config_path}.")


if CONFIG_FILE.exists():
    settings = load_config_from_file(CONFIG_FILE)
    logger.debug(f"Loaded configuration from {CONFIG_FILE}.")
else:
    settings = Settings()
