"""
Credential gate for metered Gemini tiers.

High-resolution image models and every Veo model are billed against a paid
key. Before calling them the gate asks its provider whether a usable key is
active and, if not, runs the provider's selection flow and waits for it.
"""
import os
from typing import Optional, Protocol

from dotenv import load_dotenv

from config import Config
from utils.logger import get_logger

logger = get_logger("credentials")


class CredentialProvider(Protocol):
    """Capability the gate relies on; absent providers make the gate a no-op."""

    async def has_credential(self) -> bool:
        ...

    async def request_credential(self) -> None:
        ...

    def current_key(self) -> Optional[str]:
        ...


class EnvironmentCredentialProvider:
    """
    Reads GEMINI_API_KEY from the environment.

    Selecting a credential re-reads the dotenv file so a key dropped into it
    after startup is picked up without a restart.
    """

    def __init__(self, env_file: Optional[str] = None, env_var: str = "GEMINI_API_KEY"):
        self.env_file = env_file or Config.ENV_FILE
        self.env_var = env_var

    def current_key(self) -> Optional[str]:
        return os.getenv(self.env_var) or Config.GEMINI_API_KEY or None

    async def has_credential(self) -> bool:
        return bool(self.current_key())

    async def request_credential(self) -> None:
        logger.info(f"Reloading credentials from {self.env_file}")
        load_dotenv(self.env_file, override=True)
        key = os.getenv(self.env_var)
        if key:
            Config.GEMINI_API_KEY = key
        else:
            logger.warning(f"{self.env_var} is still not set after reloading {self.env_file}")


class StaticCredentialProvider:
    """Fixed key supplied by the embedding application."""

    def __init__(self, api_key: Optional[str]):
        self.api_key = api_key

    def current_key(self) -> Optional[str]:
        return self.api_key

    async def has_credential(self) -> bool:
        return bool(self.api_key)

    async def request_credential(self) -> None:
        logger.warning("Static credential provider has no selection flow")


class CredentialGate:
    """Ensures an authorized context exists before a metered call."""

    def __init__(self, provider: Optional[CredentialProvider] = None):
        self.provider = provider

    async def ensure_authorized(self) -> None:
        if self.provider is None:
            logger.debug("No credential provider configured, assuming external credentials")
            return
        if await self.provider.has_credential():
            return
        # Concurrent callers may each get here; the flow is safe to repeat.
        logger.info("No paid credential selected, starting credential selection")
        await self.provider.request_credential()
        logger.info("Credential selection finished")


_default_gate: Optional[CredentialGate] = None


def get_credential_gate() -> CredentialGate:
    """Process-wide gate backed by the environment provider."""
    global _default_gate
    if _default_gate is None:
        _default_gate = CredentialGate(EnvironmentCredentialProvider())
    return _default_gate
