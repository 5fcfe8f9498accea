"""Tests for inventory fetching and page flags."""

import pytest

from opsconsole.client.inventory import InventoryFetcher
from opsconsole.client.state import ConsoleState
from opsconsole.core.errors import FetchError
from tests.factories import build_vm_record


class TestInventoryFetcher:

    @pytest.mark.unit
    async def test_fetch_replaces_inventory(self, mock_api):
        vms = [build_vm_record(name="web-01"), build_vm_record(name="web-02")]
        mock_api.list_vms.return_value = vms
        state = ConsoleState(vms=[build_vm_record(name="old")], error="stale")

        result = await InventoryFetcher(mock_api, state).fetch()

        assert result == vms
        assert state.vms == vms
        assert state.loading is False
        assert state.error is None

    @pytest.mark.unit
    async def test_failure_sets_page_error_and_keeps_inventory(self, mock_api):
        existing = [build_vm_record(name="web-01")]
        mock_api.list_vms.side_effect = FetchError("Request failed with status 500", status=500)
        state = ConsoleState(vms=existing)

        result = await InventoryFetcher(mock_api, state).fetch()

        assert result is None
        assert state.error == "Request failed with status 500"
        assert state.vms == existing
        assert state.loading is False

    @pytest.mark.unit
    async def test_background_fetch_leaves_flags_alone(self, mock_api):
        mock_api.list_vms.side_effect = FetchError("Network down")
        state = ConsoleState(loading=False, error="previous error")

        result = await InventoryFetcher(mock_api, state).fetch(show_loading=False, clear_error=False)

        assert result is None
        assert state.error == "previous error"
        assert state.loading is False
