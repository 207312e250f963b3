"""Container API endpoints.

Lifecycle endpoints block until the operation settles (task finished and,
for start, address converged or attempts exhausted).
"""

from typing import Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from lxcmanager.app.dependencies import Services, get_services
from lxcmanager.app.locks import container_guard
from lxcmanager.core.errors import ContainerNotFoundError
from lxcmanager.core.models import (
    ContainerSnapshot,
    LifecycleAction,
    NotFoundAfterOperation,
)

router = APIRouter(prefix="/containers", tags=["containers"])


# =============================================================================
# Schemas
# =============================================================================


class ContainerListResponse(BaseModel):
    """Container list response."""

    containers: list[ContainerSnapshot]


class ActionResponse(BaseModel):
    """Settled lifecycle action.

    status="not_found" means the container was absent from the refreshed
    list; the action itself did not fail.
    """

    action: LifecycleAction
    vmid: int
    status: Literal["settled", "not_found"]
    container: ContainerSnapshot | None = None
    message: str = ""


class DeleteResponse(BaseModel):
    """Delete response."""

    status: Literal["deleted"]
    vmid: int


# =============================================================================
# Helper
# =============================================================================


async def _run_action(
    services: Services, action: LifecycleAction, vmid: int
) -> ContainerSnapshot | NotFoundAfterOperation | None:
    async with container_guard(vmid, services.serialize_per_container):
        return await services.reconciler.execute(action, vmid)


def _to_action_response(
    action: LifecycleAction,
    vmid: int,
    result: ContainerSnapshot | NotFoundAfterOperation | None,
) -> ActionResponse:
    if isinstance(result, ContainerSnapshot):
        return ActionResponse(action=action, vmid=vmid, status="settled", container=result)
    message = result.message if result else f"Container not found after {action}"
    return ActionResponse(action=action, vmid=vmid, status="not_found", message=message)


# =============================================================================
# Endpoints
# =============================================================================


@router.get("", response_model=ContainerListResponse)
async def list_containers(
    services: Services = Depends(get_services),
) -> ContainerListResponse:
    """List all containers on the node, sorted by ID."""
    containers = await services.inventory.list_containers()
    return ContainerListResponse(containers=containers)


@router.get("/{vmid}", response_model=ContainerSnapshot)
async def get_container(
    vmid: int,
    services: Services = Depends(get_services),
) -> ContainerSnapshot:
    """Get one container."""
    container = await services.inventory.get_container(vmid)
    if container is None:
        raise ContainerNotFoundError(f"Container {vmid} not found")
    return container


@router.post("/{vmid}/start", response_model=ActionResponse)
async def start_container(
    vmid: int,
    services: Services = Depends(get_services),
) -> ActionResponse:
    """Start a container and return it once its address is known."""
    result = await _run_action(services, LifecycleAction.START, vmid)
    return _to_action_response(LifecycleAction.START, vmid, result)


@router.post("/{vmid}/stop", response_model=ActionResponse)
async def stop_container(
    vmid: int,
    services: Services = Depends(get_services),
) -> ActionResponse:
    """Stop a container and return the refreshed snapshot."""
    result = await _run_action(services, LifecycleAction.STOP, vmid)
    return _to_action_response(LifecycleAction.STOP, vmid, result)


@router.delete("/{vmid}", response_model=DeleteResponse)
async def delete_container(
    vmid: int,
    services: Services = Depends(get_services),
) -> DeleteResponse:
    """Delete a container. Destructive and cannot be undone."""
    await _run_action(services, LifecycleAction.DELETE, vmid)
    return DeleteResponse(status="deleted", vmid=vmid)
