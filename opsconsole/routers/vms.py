from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse
from typing import Any, List
import logging
from opsconsole.core.errors import RequestValidationFailed, UpstreamError
from opsconsole.models.vm import VMActionResponse, VMRecord, VMTarget
from opsconsole.services.azure_compute_service import AzureComputeService

logger = logging.getLogger(__name__)

router = APIRouter()

azure_service = AzureComputeService()


def _trimmed(payload: Any, field: str) -> str:
    value = payload.get(field) if isinstance(payload, dict) else None
    return value.strip() if isinstance(value, str) else ""


def parse_vm_target(payload: Any) -> VMTarget:
    """Validate a start/stop body; both fields must be non-empty strings"""
    name = _trimmed(payload, "name")
    resource_group = _trimmed(payload, "resourceGroup")

    if not name or not resource_group:
        raise RequestValidationFailed(
            "Both 'name' and 'resourceGroup' are required in request body."
        )

    return VMTarget(name=name, resource_group=resource_group)


@router.get("/vms", response_model=List[VMRecord])
def list_vms():
    """List all VMs in the subscription with their power state"""
    try:
        return azure_service.list_vms()
    except Exception as e:
        logger.error(f"Failed to fetch VMs: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to fetch virtual machines", "message": str(e)},
        )


@router.post("/vm/start", response_model=VMActionResponse)
def start_vm(payload: Any = Body(None)):
    """Start a VM, waiting for Azure to finish the operation"""
    target = parse_vm_target(payload)

    try:
        azure_service.start_vm(target)
    except Exception as e:
        logger.error(f"Failed to start VM {target.name} in resource group {target.resource_group}: {e}")
        raise UpstreamError("Failed to start VM", str(e))

    return VMActionResponse(success=True, message="VM started successfully")


@router.post("/vm/stop", response_model=VMActionResponse)
def stop_vm(payload: Any = Body(None)):
    """Stop (deallocate) a VM, waiting for Azure to finish the operation"""
    target = parse_vm_target(payload)

    try:
        azure_service.stop_vm(target)
    except Exception as e:
        logger.error(f"Failed to stop VM {target.name} in resource group {target.resource_group}: {e}")
        raise UpstreamError("Failed to stop VM", str(e))

    return VMActionResponse(success=True, message="VM stopped successfully")
