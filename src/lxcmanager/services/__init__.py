from lxcmanager.services.host_service import HostService
from lxcmanager.services.inventory import ContainerInventory, derive_address

__all__ = ["ContainerInventory", "HostService", "derive_address"]
