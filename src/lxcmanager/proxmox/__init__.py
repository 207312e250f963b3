"""Proxmox VE REST adapter."""

from lxcmanager.proxmox.client import (
    ProxmoxClient,
    ProxmoxClientConfig,
    create_platform_client,
)

__all__ = [
    "ProxmoxClient",
    "ProxmoxClientConfig",
    "create_platform_client",
]
