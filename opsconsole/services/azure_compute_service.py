from azure.identity import ClientSecretCredential
from azure.mgmt.compute import ComputeManagementClient
from azure.mgmt.network import NetworkManagementClient
from typing import List, Optional
import logging
import threading
from opsconsole.core.config import Settings, settings as default_settings
from opsconsole.core.errors import MissingConfigurationError
from opsconsole.models.vm import UNKNOWN, VMRecord, VMTarget
from opsconsole.services.normalization import (
    extract_resource_group_from_id, format_power_state
)

logger = logging.getLogger(__name__)

class AzureComputeService:
    """Inventory and power operations against the Azure Compute management API"""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings
        self._compute_client: Optional[ComputeManagementClient] = None
        self._network_client: Optional[NetworkManagementClient] = None
        self._lock = threading.Lock()

    def _ensure_clients(self) -> None:
        with self._lock:
            if self._compute_client is not None:
                return

            missing = self.settings.missing_credentials()
            if missing:
                raise MissingConfigurationError(missing)

            credential = ClientSecretCredential(
                tenant_id=self.settings.azure_tenant_id,
                client_id=self.settings.azure_client_id,
                client_secret=self.settings.azure_client_secret,
            )
            subscription_id = self.settings.azure_subscription_id
            self._compute_client = ComputeManagementClient(credential, subscription_id)
            self._network_client = NetworkManagementClient(credential, subscription_id)
            logger.info(f"Azure clients initialised for subscription {subscription_id}")

    @property
    def compute_client(self) -> ComputeManagementClient:
        self._ensure_clients()
        return self._compute_client

    @property
    def network_client(self) -> NetworkManagementClient:
        self._ensure_clients()
        return self._network_client

    def _get_power_state(self, resource_group: str, name: str) -> str:
        try:
            instance_view = self.compute_client.virtual_machines.instance_view(resource_group, name)
        except Exception as e:
            logger.warning(f"Could not fetch power state for VM {name}: {e}")
            return UNKNOWN
        return format_power_state(instance_view.statuses)

    def list_vms(self) -> List[VMRecord]:
        """
        List every VM in the subscription with its power state

        Per-VM instance view failures degrade that VM to an Unknown power
        state; a failure of the listing itself propagates.
        """
        vms = []
        for vm in self.compute_client.virtual_machines.list_all():
            resource_group = extract_resource_group_from_id(vm.id)
            power_state = UNKNOWN

            if vm.name and resource_group != UNKNOWN:
                power_state = self._get_power_state(resource_group, vm.name)

            vms.append(VMRecord(
                name=vm.name or UNKNOWN,
                resource_group=resource_group,
                location=vm.location or UNKNOWN,
                power_state=power_state,
            ))

        logger.debug(f"Listed {len(vms)} VMs")
        return vms

    def start_vm(self, target: VMTarget) -> None:
        """Start a VM and block until Azure reports the operation complete"""
        logger.info(f"Starting VM {target.name} in resource group {target.resource_group}")
        poller = self.compute_client.virtual_machines.begin_start(target.resource_group, target.name)
        poller.result()

    def stop_vm(self, target: VMTarget) -> None:
        """Deallocate a VM so it stops accruing compute charges"""
        logger.info(f"Deallocating VM {target.name} in resource group {target.resource_group}")
        poller = self.compute_client.virtual_machines.begin_deallocate(target.resource_group, target.name)
        poller.result()
