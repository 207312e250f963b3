"""Proxmox LXC manager: lifecycle operations reconciled against async platform tasks."""

__version__ = "0.1.0"
