from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Dict, List, Optional

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 5000
    log_level: str = "INFO"

    # Azure Credentials (required at startup)
    azure_tenant_id: Optional[str] = None
    azure_client_id: Optional[str] = None
    azure_client_secret: Optional[str] = None
    azure_subscription_id: Optional[str] = None

    # Dev Template Configuration (required only for /template/dev)
    azure_resource_group: Optional[str] = None
    azure_location: Optional[str] = None
    azure_vnet_name: Optional[str] = None
    azure_subnet_name: Optional[str] = None
    vm_admin_username: Optional[str] = None
    vm_admin_password: Optional[str] = None

    # Console client
    api_base_url: str = "http://localhost:5000"
    request_timeout: float = 30.0
    action_timeout: float = 600.0  # start/stop block until Azure finishes the operation
    provision_timeout: float = 900.0  # template creation blocks until the VM exists

    def _missing(self, fields: Dict[str, Optional[str]]) -> List[str]:
        return [env_name for env_name, value in fields.items() if not value]

    def missing_credentials(self) -> List[str]:
        """Names of the Azure credential env vars that are unset"""
        return self._missing({
            "AZURE_CLIENT_ID": self.azure_client_id,
            "AZURE_CLIENT_SECRET": self.azure_client_secret,
            "AZURE_TENANT_ID": self.azure_tenant_id,
            "AZURE_SUBSCRIPTION_ID": self.azure_subscription_id,
        })

    def missing_template_settings(self) -> List[str]:
        """Names of the dev template env vars that are unset"""
        return self._missing({
            "AZURE_RESOURCE_GROUP": self.azure_resource_group,
            "AZURE_LOCATION": self.azure_location,
            "AZURE_VNET_NAME": self.azure_vnet_name,
            "AZURE_SUBNET_NAME": self.azure_subnet_name,
            "VM_ADMIN_USERNAME": self.vm_admin_username,
            "VM_ADMIN_PASSWORD": self.vm_admin_password,
        })

settings = Settings()
