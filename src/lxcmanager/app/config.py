"""Application configuration using pydantic-settings.

Configuration hierarchy:
- ProxmoxConfig: Platform connection (PROXMOX_)
- ReconcilerConfig: Polling and convergence policy (RECONCILER_)
- ServerConfig: HTTP server (SERVER_)
- LoggingConfig: Logging behavior (LOGGING_)
- MetricsConfig: Prometheus metrics (METRICS_)
- Settings: Root config aggregating all sub-configs
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProxmoxConfig(BaseSettings):
    """Proxmox VE connection configuration.

    Credentials use API token authentication. Empty defaults force
    explicit configuration (see missing_proxmox_settings).
    """

    model_config = SettingsConfigDict(env_prefix="PROXMOX_")

    host: str = Field(default="", description="Proxmox host (host:port)")
    node: str = Field(default="", description="Node that owns the containers")
    token_id: str = Field(default="", description="API token ID (user@realm!name)")
    token_secret: str = Field(default="", description="API token secret")

    # Proxmox ships self-signed certificates
    verify_ssl: bool = Field(default=False, description="Verify TLS certificates")
    timeout: float = Field(default=30.0, description="HTTP timeout (seconds)")


class ReconcilerConfig(BaseSettings):
    """Reconciliation policy.

    Worst-case wall time per operation:
      task:    task_max_attempts * task_interval_ms (15s default)
      address: address_max_attempts * address_interval_ms (5s default)
    """

    model_config = SettingsConfigDict(env_prefix="RECONCILER_")

    task_max_attempts: int = Field(default=30, ge=1)
    task_interval_ms: int = Field(default=500, ge=0)

    # Not tied to any platform signal (e.g. DHCP lease); tune for slow networks
    address_max_attempts: int = Field(default=5, ge=1)
    address_interval_ms: int = Field(default=1000, ge=0)

    serialize_per_container: bool = Field(
        default=False,
        description="Serialize API actions per container with a keyed lock",
    )


class ServerConfig(BaseSettings):
    """HTTP server configuration."""

    model_config = SettingsConfigDict(env_prefix="SERVER_")

    host: str = Field(default="0.0.0.0", description="Server bind address")
    port: int = Field(default=3000, description="Server port")


class LoggingConfig(BaseSettings):
    """Logging configuration.

    Supports both text and JSON formats:
    - text: Human-readable for local development
    - json: Structured logging for production (log aggregation)
    """

    model_config = SettingsConfigDict(env_prefix="LOGGING_")

    level: str = Field(default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    format: str = Field(default="text", description="Log format (text, json)")
    service_name: str = Field(default="lxc-manager", description="Service identifier in logs")
    rate_limit_seconds: float = Field(
        default=5.0,
        description="Minimum seconds between identical non-error messages",
    )
    slow_threshold_ms: float = Field(
        default=20000.0,
        description="Threshold for slow operation warnings (milliseconds)",
    )


class MetricsConfig(BaseSettings):
    """Prometheus metrics configuration."""

    model_config = SettingsConfigDict(env_prefix="METRICS_")

    enabled: bool = Field(default=True)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LXCMANAGER_",
        env_nested_delimiter="__",
    )

    proxmox: ProxmoxConfig = Field(default_factory=ProxmoxConfig)
    reconciler: ReconcilerConfig = Field(default_factory=ReconcilerConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    metrics: MetricsConfig = Field(default_factory=MetricsConfig)


_REQUIRED_PROXMOX = ("host", "node", "token_id", "token_secret")


def missing_proxmox_settings(settings: Settings) -> list[str]:
    """Return the PROXMOX_* environment variables that are not set."""
    return [
        f"PROXMOX_{name.upper()}"
        for name in _REQUIRED_PROXMOX
        if not getattr(settings.proxmox, name)
    ]


@lru_cache
def get_settings() -> Settings:
    return Settings()
