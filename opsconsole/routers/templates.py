from fastapi import APIRouter, Body
from typing import Any
import logging
from opsconsole.core.errors import RequestValidationFailed, UpstreamError
from opsconsole.models.vm import DevTemplateResponse
from opsconsole.routers.vms import azure_service
from opsconsole.services.dev_template_service import DevTemplateService

logger = logging.getLogger(__name__)

router = APIRouter()

dev_template_service = DevTemplateService(azure_service)


def parse_project_name(payload: Any) -> str:
    value = payload.get("projectName") if isinstance(payload, dict) else None
    project_name = value.strip() if isinstance(value, str) else ""

    if not project_name:
        raise RequestValidationFailed("Field 'projectName' is required in request body.")

    return project_name


@router.post("/dev", response_model=DevTemplateResponse)
def create_dev_template_vm(payload: Any = Body(None)):
    """Create a dev VM from the fixed template; blocks until Azure finishes"""
    project_name = parse_project_name(payload)

    try:
        vm_name = dev_template_service.create_dev_vm(project_name)
    except Exception as e:
        logger.error(f"Failed to create dev template VM: {e}")
        raise UpstreamError("Failed to create dev template VM", str(e))

    return DevTemplateResponse(success=True, vm_name=vm_name)
