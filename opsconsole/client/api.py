import logging
import httpx
from typing import Any, Dict, List, Optional
from opsconsole.core.config import settings
from opsconsole.core.errors import ApiCommandError, FetchError
from opsconsole.models.vm import VMAction, VMRecord

logger = logging.getLogger(__name__)


def _payload_message(response: httpx.Response) -> Optional[str]:
    try:
        payload = response.json()
    except ValueError:
        return None
    if isinstance(payload, dict) and isinstance(payload.get("message"), str):
        return payload["message"]
    return None


class OpsApiClient:
    """Async client for the ops console backend"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        provision_timeout: Optional[float] = None,
        action_timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.provision_timeout = provision_timeout or settings.provision_timeout
        self.action_timeout = action_timeout or settings.action_timeout
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout or settings.request_timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "OpsApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def list_vms(self) -> List[VMRecord]:
        """GET /vms; raises FetchError on a non-2xx status or network failure"""
        try:
            response = await self._client.get("/vms")
        except httpx.RequestError as e:
            raise FetchError(str(e) or "Failed to fetch virtual machines.") from e

        if not response.is_success:
            raise FetchError(
                f"Request failed with status {response.status_code}",
                status=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise FetchError("Invalid inventory response", status=response.status_code) from e
        if not isinstance(data, list):
            raise FetchError("Invalid inventory response", status=response.status_code)

        return [VMRecord.from_payload(item) for item in data if isinstance(item, dict)]

    async def _post(self, path: str, body: Dict[str, Any], fallback: str, timeout: Optional[float] = None) -> Dict[str, Any]:
        kwargs = {"json": body}
        if timeout is not None:
            kwargs["timeout"] = timeout
        try:
            response = await self._client.post(path, **kwargs)
        except httpx.RequestError as e:
            raise ApiCommandError(str(e) or fallback) from e

        if not response.is_success:
            raise ApiCommandError(_payload_message(response) or fallback, status=response.status_code)

        try:
            payload = response.json()
        except ValueError:
            return {}
        return payload if isinstance(payload, dict) else {}

    async def run_action(self, vm: VMRecord, action: VMAction) -> Dict[str, Any]:
        """POST /vm/start or /vm/stop for one VM"""
        return await self._post(
            f"/vm/{action.value}",
            {"name": vm.name, "resourceGroup": vm.resource_group},
            fallback=f"Failed to {action.value} VM",
            timeout=self.action_timeout,
        )

    async def create_dev_environment(self, project_name: str) -> str:
        """POST /template/dev; returns the created VM name (empty if absent)"""
        payload = await self._post(
            "/template/dev",
            {"projectName": project_name},
            fallback="Failed to create environment.",
            timeout=self.provision_timeout,
        )
        vm_name = payload.get("vmName")
        return vm_name if isinstance(vm_name, str) else ""
