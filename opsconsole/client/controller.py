import asyncio
import contextlib
import logging
from typing import List, Optional, Set
from opsconsole.client.actions import ActionDispatcher
from opsconsole.client.api import OpsApiClient
from opsconsole.client.inventory import InventoryFetcher
from opsconsole.client.poller import ConvergencePoller
from opsconsole.client.provisioner import EnvironmentProvisioner
from opsconsole.client.scheduler import LoopScheduler, Scheduler
from opsconsole.client.state import ConsoleState
from opsconsole.client.toasts import ToastQueue
from opsconsole.models.vm import VMAction, VMKey, VMRecord

logger = logging.getLogger(__name__)

ENVIRONMENT_CREATED_MESSAGE = "Dev environment created successfully."


class VirtualMachinesController:
    """Non-rendering logic of the virtual machines page.

    ``mount()`` starts the initial inventory load; ``unmount()`` abandons
    every fetch the page started and tears down every poll and toast timer.
    Work that completes after ``unmount()`` leaves the page untouched.
    """

    def __init__(self, api: OpsApiClient, scheduler: Optional[Scheduler] = None):
        self.api = api
        self.scheduler = scheduler or LoopScheduler()
        self.state = ConsoleState()
        self.inventory = InventoryFetcher(api, self.state)
        self.poller = ConvergencePoller(self.inventory, self.state, self.scheduler)
        self.dispatcher = ActionDispatcher(api, self.state, self.poller)
        self.toasts = ToastQueue(self.scheduler)
        self.provisioner = EnvironmentProvisioner(api, on_success=self._on_environment_created)
        self._fetch_tasks: Set[asyncio.Task] = set()
        self._unmounted = False

    @property
    def vms(self) -> List[VMRecord]:
        return self.state.vms

    @property
    def loading(self) -> bool:
        return self.state.loading

    @property
    def error(self) -> Optional[str]:
        return self.state.error

    def action_lock(self, key: VMKey) -> Optional[VMAction]:
        return self.state.action_locks.get(key)

    def action_error(self, key: VMKey) -> Optional[str]:
        return self.state.action_errors.get(key)

    @property
    def active_timer_count(self) -> int:
        return len(self.poller.active_keys) + self.toasts.pending_timers

    def _start_fetch(self) -> asyncio.Task:
        task = asyncio.create_task(self.inventory.fetch())
        self._fetch_tasks.add(task)
        task.add_done_callback(self._fetch_tasks.discard)
        return task

    def mount(self) -> asyncio.Task:
        self._unmounted = False
        return self._start_fetch()

    async def unmount(self) -> None:
        self._unmounted = True
        current = asyncio.current_task()
        tasks = [task for task in self._fetch_tasks if task is not current and not task.done()]
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task

        self.poller.clear_all()
        self.toasts.clear()
        logger.debug("Virtual machines controller unmounted")

    async def refresh(self) -> Optional[List[VMRecord]]:
        """Re-fetch the inventory; returns None if it failed or the page was unmounted"""
        if self._unmounted:
            return None

        task = self._start_fetch()
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            # abandoned by unmount() rather than by our own caller
            if task.cancelled():
                return None
            raise

    async def handle_vm_action(self, vm: VMRecord, action: VMAction) -> bool:
        if self._unmounted:
            return False

        accepted = await self.dispatcher.dispatch(vm, action)
        if self._unmounted:
            # the command returned after teardown; drop the poll it started
            self.poller.clear(vm.key)
            return False
        return accepted

    async def _on_environment_created(self, vm_name: str) -> None:
        await self.refresh()
        if self._unmounted:
            logger.debug(f"Skipping toast for {vm_name}: page unmounted")
            return
        self.toasts.push(ENVIRONMENT_CREATED_MESSAGE)
