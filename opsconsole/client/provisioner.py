import logging
from typing import Awaitable, Callable, Optional
from opsconsole.client.api import OpsApiClient
from opsconsole.core.errors import ApiCommandError
from opsconsole.models.vm import TemplateType

logger = logging.getLogger(__name__)

TEMPLATE_LABELS = {
    TemplateType.DEV: "Dev Environment",
    TemplateType.QA: "QA Environment",
    TemplateType.PRODUCTION: "Production Environment",
}
AVAILABLE_TEMPLATES = {TemplateType.DEV}
FALLBACK_ERROR = "Failed to create environment."


class EnvironmentProvisioner:
    """State and submission logic of the create-environment dialog"""

    def __init__(self, api: OpsApiClient, on_success: Optional[Callable[[str], Awaitable[None]]] = None):
        self.api = api
        self.on_success = on_success
        self.is_open = False
        self._reset()

    def _reset(self) -> None:
        self.template_type = TemplateType.DEV
        self.is_creating = False
        self.submit_error: Optional[str] = None

    def open(self) -> None:
        self.is_open = True

    def close(self) -> None:
        self.is_open = False
        self._reset()

    async def create(self, project_name: str, template_type: TemplateType = TemplateType.DEV) -> Optional[str]:
        """
        Submit the dialog. Returns the created VM name, or None if the
        submission was rejected locally, by the server or by the success
        hook; in that case ``submit_error`` holds the reason and the dialog
        stays open. A submit while one is in progress is ignored.
        """
        if self.is_creating:
            logger.debug("Ignoring submit while an environment is being created")
            return None

        self.template_type = template_type
        project_name = project_name.strip()

        if not project_name:
            self.submit_error = "Project Name is required."
            return None

        if template_type not in AVAILABLE_TEMPLATES:
            self.submit_error = "Only Dev Environment template is available right now."
            return None

        self.submit_error = None
        self.is_creating = True

        try:
            vm_name = await self.api.create_dev_environment(project_name)
            logger.info(f"Environment {vm_name} created for project {project_name!r}")
            if self.on_success is not None:
                await self.on_success(vm_name)
        except ApiCommandError as e:
            logger.warning(f"Environment creation for {project_name!r} failed: {e.message}")
            self.submit_error = e.message
            return None
        except Exception as e:
            logger.error(f"Post-creation step for {project_name!r} failed: {e}")
            self.submit_error = str(e) or FALLBACK_ERROR
            return None
        finally:
            self.is_creating = False

        self.close()
        return vm_name
