"""Tests for environment provisioning and toasts."""

import asyncio

import pytest
from unittest.mock import AsyncMock

from opsconsole.client.controller import ENVIRONMENT_CREATED_MESSAGE, VirtualMachinesController
from opsconsole.client.provisioner import EnvironmentProvisioner
from opsconsole.client.toasts import TOAST_DISMISS_DELAY, ToastQueue
from opsconsole.core.errors import ApiCommandError
from opsconsole.models.vm import TemplateType
from tests.factories import build_vm_record
from tests.fakes import settle


class TestEnvironmentProvisioner:

    @pytest.mark.unit
    async def test_empty_project_name_is_rejected_locally(self, mock_api):
        provisioner = EnvironmentProvisioner(mock_api)
        provisioner.open()

        result = await provisioner.create("   ")

        assert result is None
        assert provisioner.submit_error == "Project Name is required."
        assert provisioner.is_open is True
        mock_api.create_dev_environment.assert_not_called()

    @pytest.mark.unit
    @pytest.mark.parametrize("template_type", [TemplateType.QA, TemplateType.PRODUCTION])
    async def test_only_dev_template_is_available(self, mock_api, template_type):
        provisioner = EnvironmentProvisioner(mock_api)

        result = await provisioner.create("billing", template_type)

        assert result is None
        assert provisioner.submit_error == "Only Dev Environment template is available right now."
        mock_api.create_dev_environment.assert_not_called()

    @pytest.mark.unit
    async def test_success_runs_hook_and_closes(self, mock_api):
        mock_api.create_dev_environment.return_value = "dev-billing-20260208074511"
        on_success = AsyncMock()
        provisioner = EnvironmentProvisioner(mock_api, on_success=on_success)
        provisioner.open()

        result = await provisioner.create("  billing  ")

        assert result == "dev-billing-20260208074511"
        mock_api.create_dev_environment.assert_awaited_once_with("billing")
        on_success.assert_awaited_once_with("dev-billing-20260208074511")
        assert provisioner.is_open is False
        assert provisioner.is_creating is False
        assert provisioner.submit_error is None

    @pytest.mark.unit
    async def test_failure_keeps_dialog_open_with_server_message(self, mock_api):
        mock_api.create_dev_environment.side_effect = ApiCommandError("Failed to create dev template VM", status=500)
        on_success = AsyncMock()
        provisioner = EnvironmentProvisioner(mock_api, on_success=on_success)
        provisioner.open()

        result = await provisioner.create("billing")

        assert result is None
        assert provisioner.is_open is True
        assert provisioner.is_creating is False
        assert provisioner.submit_error == "Failed to create dev template VM"
        on_success.assert_not_called()

    @pytest.mark.unit
    async def test_failing_success_hook_is_shown_in_dialog(self, mock_api):
        mock_api.create_dev_environment.return_value = "dev-billing-20260208074511"
        on_success = AsyncMock(side_effect=RuntimeError("Inventory refresh failed"))
        provisioner = EnvironmentProvisioner(mock_api, on_success=on_success)
        provisioner.open()

        result = await provisioner.create("billing")

        assert result is None
        assert provisioner.submit_error == "Inventory refresh failed"
        assert provisioner.is_open is True
        assert provisioner.is_creating is False

    @pytest.mark.unit
    async def test_second_submit_ignored_while_creating(self, mock_api):
        release = asyncio.Event()

        async def gated_create(project_name):
            await release.wait()
            return "dev-billing-20260208074511"

        mock_api.create_dev_environment.side_effect = gated_create
        provisioner = EnvironmentProvisioner(mock_api)
        provisioner.open()
        first = asyncio.create_task(provisioner.create("billing"))
        await settle()
        assert provisioner.is_creating is True

        assert await provisioner.create("billing") is None
        assert provisioner.submit_error is None

        release.set()
        assert await first == "dev-billing-20260208074511"
        assert mock_api.create_dev_environment.await_count == 1

    @pytest.mark.unit
    async def test_retry_after_failure_clears_error(self, mock_api):
        mock_api.create_dev_environment.side_effect = [ApiCommandError("Failed to create environment."), "dev-x-1"]
        provisioner = EnvironmentProvisioner(mock_api)
        provisioner.open()

        await provisioner.create("x")
        assert provisioner.submit_error == "Failed to create environment."

        assert await provisioner.create("x") == "dev-x-1"
        assert provisioner.submit_error is None

    @pytest.mark.unit
    def test_close_resets_fields(self, mock_api):
        provisioner = EnvironmentProvisioner(mock_api)
        provisioner.open()
        provisioner.template_type = TemplateType.QA
        provisioner.submit_error = "boom"

        provisioner.close()

        assert provisioner.is_open is False
        assert provisioner.template_type == TemplateType.DEV
        assert provisioner.submit_error is None


class TestControllerProvisioning:

    @pytest.mark.unit
    async def test_success_refetches_and_toasts(self, mock_api, scheduler):
        new_vm = build_vm_record(name="dev-billing-20260208074511", power_state="Running")
        mock_api.list_vms.return_value = [new_vm]
        mock_api.create_dev_environment.return_value = new_vm.name
        controller = VirtualMachinesController(mock_api, scheduler)
        controller.provisioner.open()

        await controller.provisioner.create("billing")

        assert controller.vms == [new_vm]
        assert [toast.title for toast in controller.toasts.toasts] == [ENVIRONMENT_CREATED_MESSAGE]

        scheduler.advance(TOAST_DISMISS_DELAY)
        await settle()

        assert controller.toasts.toasts == []
        assert controller.active_timer_count == 0


class TestToastQueue:

    @pytest.mark.unit
    def test_toast_dismisses_after_delay(self, scheduler):
        toasts = ToastQueue(scheduler)
        toasts.push("Saved")

        scheduler.advance(TOAST_DISMISS_DELAY - 0.5)
        assert len(toasts.toasts) == 1

        scheduler.advance(0.5)
        assert toasts.toasts == []
        assert toasts.pending_timers == 0

    @pytest.mark.unit
    def test_manual_dismiss_cancels_timer(self, scheduler):
        toasts = ToastQueue(scheduler)
        first = toasts.push("First")
        second = toasts.push("Second", variant="error")

        toasts.dismiss(first.id)

        assert [toast.id for toast in toasts.toasts] == [second.id]
        assert toasts.pending_timers == 1
        assert first.id != second.id

    @pytest.mark.unit
    def test_clear_removes_everything(self, scheduler):
        toasts = ToastQueue(scheduler)
        toasts.push("a")
        toasts.push("b")

        toasts.clear()

        assert toasts.toasts == []
        assert scheduler.active_timers == []
