"""
Configuration for the remix OSC client.

Defaults target AbletonOSC on the local machine. Values can be overridden from
the environment (or a ``.env`` file):

    REMIX_OSC_HOST        remote listener host (default 127.0.0.1)
    REMIX_OSC_PORT        remote listener port (default 11000)
    REMIX_OSC_LOCAL_HOST  local bind host (default 127.0.0.1)
    REMIX_OSC_TIMEOUT_MS  response timeout in milliseconds (default 500)
"""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

load_dotenv()

# ===== AbletonOSC =====
ABLETON_OSC_HOST = "127.0.0.1"
ABLETON_OSC_PORT = 11000  # AbletonOSC input port; replies go to the sender's address

# ===== Local socket =====
LOCAL_BIND_HOST = "127.0.0.1"

# ===== Timing (seconds) =====
DEFAULT_TIMEOUT = 0.5
FLUSH_TIMEOUT = 0.001

# Cheap query used to probe whether Ableton is answering
TEST_CONNECTION_ADDRESS = "/live/song/get/tempo"


class OscSettings(BaseModel):
    """Validated connection settings for one OSC client."""
    remote_host: str = Field(
        default=ABLETON_OSC_HOST,
        description="Host of the OSC listener (AbletonOSC)"
    )
    remote_port: int = Field(
        default=ABLETON_OSC_PORT,
        ge=1,
        le=65535,
        description="Port of the OSC listener"
    )
    local_host: str = Field(
        default=LOCAL_BIND_HOST,
        description="Local address to bind; the port is always OS-assigned"
    )
    response_timeout: float = Field(
        default=DEFAULT_TIMEOUT,
        gt=0,
        description="Seconds to wait for each reply datagram"
    )
    flush_timeout: float = Field(
        default=FLUSH_TIMEOUT,
        gt=0,
        description="Seconds per drain attempt when flushing stale datagrams"
    )

    @field_validator("remote_host", "local_host")
    @classmethod
    def host_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Host must not be empty")
        return v.strip()

    @model_validator(mode="after")
    def flush_within_response_window(self) -> "OscSettings":
        if self.flush_timeout > self.response_timeout:
            raise ValueError("flush_timeout must not exceed response_timeout")
        return self

    @property
    def remote_addr(self):
        return (self.remote_host, self.remote_port)

    @classmethod
    def from_env(cls, **overrides) -> "OscSettings":
        """Build settings from REMIX_OSC_* environment variables.

        Keyword overrides win over the environment.
        """
        values = {}
        host = os.getenv("REMIX_OSC_HOST")
        if host:
            values["remote_host"] = host
        port = os.getenv("REMIX_OSC_PORT")
        if port:
            values["remote_port"] = port
        local_host = os.getenv("REMIX_OSC_LOCAL_HOST")
        if local_host:
            values["local_host"] = local_host
        timeout_ms = os.getenv("REMIX_OSC_TIMEOUT_MS")
        if timeout_ms:
            values["response_timeout"] = float(timeout_ms) / 1000.0
        values.update(overrides)
        return cls(**values)


def resolve_settings(settings: Optional[OscSettings] = None, **overrides) -> OscSettings:
    """Return ``settings`` with overrides applied, or settings from the environment."""
    if settings is None:
        return OscSettings.from_env(**overrides)
    if overrides:
        return OscSettings(**{**settings.model_dump(), **overrides})
    return settings
