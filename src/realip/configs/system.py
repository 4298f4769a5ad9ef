from pydantic import BaseModel, Field, field_validator

from realip.core.address import parse_network
from realip.core.trust import TrustedNetworks


class ProxyConfig(BaseModel):
    """Reverse proxies allowed to supply forwarding headers."""

    trusted_proxies: list[str] = Field(
        default_factory=list,
        description="CIDR ranges or single addresses of trusted proxies, "
        "e.g. ['10.0.0.0/8', '::1']",
    )

    @field_validator("trusted_proxies")
    @classmethod
    def _validate_networks(cls, value: list[str]) -> list[str]:
        for entry in value:
            try:
                parse_network(entry)
            except ValueError as exc:
                raise ValueError(f"Invalid trusted proxy {entry!r}: {exc}") from exc
        return [entry.strip() for entry in value]

    def build_trusted_networks(self) -> TrustedNetworks:
        return TrustedNetworks.parse(self.trusted_proxies)


class LoggingConfig(BaseModel):
    """Logging configuration settings."""

    level: str = Field(default="INFO", description="Root log level")
    json_output: bool = Field(
        default=True,
        description="Emit JSON lines instead of human-readable output",
    )


class APIConfig(BaseModel):
    """API server settings."""

    host: str = Field(default="0.0.0.0", description="API server host")
    port: int = Field(default=8000, description="API server port")
