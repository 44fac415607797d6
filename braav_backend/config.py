import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_SUI_NETWORK = "https://fullnode.testnet.sui.io"
DEFAULT_WALLET_SECRET = "default_secret_change_in_production"

# field name -> environment variable
ENV_NAMES = {
    "sui_network": "SUI_NETWORK",
    "package_id": "PACKAGE_ID",
    "vetting_table_id": "VETTING_TABLE_ID",
    "admin_cap_id": "ADMIN_CAP",
    "creator_cap_id": "CREATOR_CAP_ID",
    "publisher_id": "PUBLISHER_ID",
    "clock_object_id": "CLOCK_OBJECT_ID",
    "mnemonic": "MNEMONIC",
    "private_key": "PRIVATE_KEY",
    "wallet_secret": "WALLET_SECRET",
    "port": "PORT",
    "environment": "APP_ENV",
}


class Settings(BaseModel):
    """Process-wide configuration, read once at startup and never mutated."""

    model_config = ConfigDict(frozen=True)

    sui_network: str = DEFAULT_SUI_NETWORK
    package_id: Optional[str] = None
    vetting_table_id: Optional[str] = None
    admin_cap_id: Optional[str] = None
    creator_cap_id: Optional[str] = None
    publisher_id: Optional[str] = None
    clock_object_id: str = "0x6"
    mnemonic: Optional[str] = None
    private_key: Optional[str] = None
    wallet_secret: str = DEFAULT_WALLET_SECRET
    port: int = 3000
    environment: str = "development"

    # gas budgets in MIST
    gas_budget: int = 10_000_000
    display_gas_budget: int = 60_000_000

    @classmethod
    def from_env(cls, env_file: Optional[str] = None, environ=None) -> "Settings":
        if environ is None:
            load_dotenv(env_file)
            environ = os.environ

        values = {}
        for field, env_name in ENV_NAMES.items():
            raw = environ.get(env_name)
            if raw is not None and raw.strip():
                values[field] = raw.strip()

        settings = cls(**values)
        if settings.wallet_secret == DEFAULT_WALLET_SECRET:
            logger.warning("WALLET_SECRET is not set; custodial wallets use the built-in default secret")
        return settings

    def require(self, *fields: str) -> None:
        """Raise ConfigurationError naming every unset field."""
        missing = [ENV_NAMES.get(f, f) for f in fields if not getattr(self, f)]
        if missing:
            raise ConfigurationError(
                f"Required environment variables not set: {', '.join(missing)}",
                fields=missing,
            )

    def redacted(self) -> dict:
        data = self.model_dump()
        for secret in ("mnemonic", "private_key", "wallet_secret"):
            if data.get(secret):
                data[secret] = "***loaded***"
        return data
