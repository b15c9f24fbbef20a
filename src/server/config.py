"""Configuration model for the session websocket bridge."""

from __future__ import annotations

from dataclasses import dataclass

from contracts.ui_protocol import HEALTHZ_PATH, SESSION_PATH, WEBSOCKET_PATH


class ServerConfigurationError(Exception):
    """Raised when UI server configuration is invalid."""


@dataclass(frozen=True)
class UIServerConfig:
    """Validated UI server configuration derived from app settings.

    Port `0` asks the operating system for a free port.
    """
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8765

    def __post_init__(self) -> None:
        if not self.host.strip():
            raise ServerConfigurationError("ui_server.host cannot be empty")

        if not 0 <= self.port <= 65535:
            raise ServerConfigurationError(
                f"ui_server.port must be in [0, 65535], got: {self.port}"
            )

    @property
    def websocket_path(self) -> str:
        return WEBSOCKET_PATH

    @property
    def healthz_path(self) -> str:
        return HEALTHZ_PATH

    @property
    def session_path(self) -> str:
        return SESSION_PATH

    @classmethod
    def from_settings(cls, settings) -> "UIServerConfig":
        return cls(
            enabled=bool(settings.enabled),
            host=settings.host.strip(),
            port=settings.port,
        )
