"""Client configuration."""

from typing import Any, Optional

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .auth import Credentials
from .client import DEFAULT_REST_URL
from .logger import LogLevel
from .websocket import DEFAULT_WS_URL


class ClientConfig(BaseSettings):
    """
    Settings for :class:`~bitflyer_sdk.sdk.BitflyerClient`.

    Every field can be set from a ``BITFLYER_``-prefixed environment
    variable (``BITFLYER_API_KEY``, ``BITFLYER_WS_URL``, ...). Empty
    variables keep the defaults; keyword arguments win over the environment.
    """

    model_config = SettingsConfigDict(env_prefix="BITFLYER_", env_ignore_empty=True)

    api_key: Optional[str] = None
    api_secret: Optional[SecretStr] = None
    rest_url: str = DEFAULT_REST_URL
    ws_url: str = DEFAULT_WS_URL
    rest_timeout: float = 30.0
    ws_connect_timeout: Optional[float] = 10.0
    log_level: LogLevel = LogLevel.INFO

    @field_validator("log_level", mode="before")
    @classmethod
    def _lower_log_level(cls, v: Any) -> Any:
        return v.lower() if isinstance(v, str) else v

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Build a config from the process environment alone."""
        return cls()

    def credentials(self) -> Optional[Credentials]:
        """Credentials when both key and secret are configured."""
        if not self.api_key or self.api_secret is None:
            return None
        return Credentials(api_key=self.api_key, api_secret=self.api_secret)
