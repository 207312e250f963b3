"""Host status endpoint."""

from fastapi import APIRouter, Depends

from lxcmanager.app.dependencies import Services, get_services
from lxcmanager.core.models import HostStatus

router = APIRouter(prefix="/host", tags=["host"])


@router.get("", response_model=HostStatus)
async def get_host_status(services: Services = Depends(get_services)) -> HostStatus:
    """CPU, memory, swap, disk and version info of the configured node."""
    return await services.host.get_host_status()
