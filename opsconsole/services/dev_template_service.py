import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from opsconsole.core.config import Settings, settings as default_settings
from opsconsole.core.errors import TemplateConfigurationError, TemplateProvisioningError
from opsconsole.services.azure_compute_service import AzureComputeService
from opsconsole.services.normalization import build_dev_vm_name

logger = logging.getLogger(__name__)

DEV_VM_SIZE = "Standard_B2ats_v2"

# Ubuntu 22.04 LTS image reference for Azure SDK
UBUNTU_2204_IMAGE = {
    "publisher": "Canonical",
    "offer": "0001-com-ubuntu-server-jammy",
    "sku": "22_04-lts-gen2",
    "version": "latest",
}

OWNER_TAG = "internal-platform"


class DevTemplateService:
    """
    Provision a dev VM from the fixed template.

    Creation is two sequential Azure operations, network interface then VM,
    each awaited to completion. If the VM step fails the NIC is left in
    place; nothing is rolled back.
    """

    def __init__(
        self,
        compute_service: AzureComputeService,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = None,
    ):
        self.compute_service = compute_service
        self.settings = settings or default_settings
        self.clock = clock

    def build_tags(self, project_name: str) -> Dict[str, str]:
        return {
            "environment": "dev",
            "project": project_name,
            "owner": OWNER_TAG,
        }

    def _nic_parameters(self, subnet_id: str, tags: Dict[str, str]) -> Dict[str, Any]:
        return {
            "location": self.settings.azure_location,
            "ip_configurations": [{
                "name": "ipconfig1",
                "subnet": {"id": subnet_id},
                "private_ip_allocation_method": "Dynamic",
            }],
            "tags": tags,
        }

    def _vm_parameters(self, vm_name: str, nic_id: str, tags: Dict[str, str]) -> Dict[str, Any]:
        return {
            "location": self.settings.azure_location,
            "hardware_profile": {"vm_size": DEV_VM_SIZE},
            "storage_profile": {"image_reference": dict(UBUNTU_2204_IMAGE)},
            "os_profile": {
                "computer_name": vm_name,
                "admin_username": self.settings.vm_admin_username,
                "admin_password": self.settings.vm_admin_password,
                "linux_configuration": {"disable_password_authentication": False},
            },
            "network_profile": {
                "network_interfaces": [{"id": nic_id, "primary": True}],
            },
            "tags": tags,
        }

    def create_dev_vm(self, project_name: str) -> str:
        """Create the NIC and VM for ``project_name``; returns the VM name"""
        missing = self.settings.missing_template_settings()
        if missing:
            raise TemplateConfigurationError(missing)

        now = self.clock() if self.clock else None
        vm_name = build_dev_vm_name(project_name, now)
        nic_name = f"{vm_name}-nic"
        tags = self.build_tags(project_name)
        resource_group = self.settings.azure_resource_group

        network_client = self.compute_service.network_client
        compute_client = self.compute_service.compute_client

        subnet = network_client.subnets.get(
            resource_group,
            self.settings.azure_vnet_name,
            self.settings.azure_subnet_name,
        )
        if not subnet.id:
            raise TemplateProvisioningError("Could not resolve subnet ID from configured VNet/subnet.")

        logger.info(f"Creating NIC {nic_name} in resource group {resource_group}")
        nic = network_client.network_interfaces.begin_create_or_update(
            resource_group, nic_name, self._nic_parameters(subnet.id, tags)
        ).result()
        if not nic.id:
            raise TemplateProvisioningError("NIC creation succeeded but NIC ID was not returned.")

        logger.info(f"Creating dev VM {vm_name} for project {project_name!r}")
        compute_client.virtual_machines.begin_create_or_update(
            resource_group, vm_name, self._vm_parameters(vm_name, nic.id, tags)
        ).result()

        logger.info(f"Dev VM {vm_name} created")
        return vm_name
