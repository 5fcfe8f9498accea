import logging
from typing import List, Optional
from opsconsole.client.api import OpsApiClient
from opsconsole.client.state import ConsoleState
from opsconsole.core.errors import FetchError
from opsconsole.models.vm import VMRecord

logger = logging.getLogger(__name__)


class InventoryFetcher:
    """Fetches the VM inventory and publishes it into the page state"""

    def __init__(self, api: OpsApiClient, state: ConsoleState):
        self.api = api
        self.state = state

    async def fetch(self, show_loading: bool = True, clear_error: bool = True) -> Optional[List[VMRecord]]:
        """
        Replace ``state.vms`` with a fresh inventory.

        Returns the new list, or None when the request failed. Failures are
        recorded as the page error only when ``clear_error`` is set, so
        background polls never disturb what the user is looking at.
        Cancelling the calling task abandons the request without recording
        anything.
        """
        if show_loading:
            self.state.loading = True
        if clear_error:
            self.state.error = None

        try:
            vms = await self.api.list_vms()
        except FetchError as e:
            logger.warning(f"Inventory fetch failed: {e.reason}")
            if clear_error:
                self.state.error = e.reason
            return None
        finally:
            if show_loading:
                self.state.loading = False

        self.state.vms = vms
        return vms
