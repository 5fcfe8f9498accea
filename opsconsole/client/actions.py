import logging
from opsconsole.client.api import OpsApiClient
from opsconsole.client.poller import ConvergencePoller
from opsconsole.client.state import ConsoleState
from opsconsole.core.errors import ApiCommandError
from opsconsole.models.vm import VMAction, VMKey, VMRecord

logger = logging.getLogger(__name__)


class ActionDispatcher:
    """Issues start/stop commands, holding one pending action per VM"""

    def __init__(self, api: OpsApiClient, state: ConsoleState, poller: ConvergencePoller):
        self.api = api
        self.state = state
        self.poller = poller

    def is_pending(self, key: VMKey) -> bool:
        return self.state.action_locks.get(key) is not None

    async def dispatch(self, vm: VMRecord, action: VMAction) -> bool:
        """
        Send ``action`` for ``vm`` and hand off to the convergence poller.

        Returns False without doing anything if an action is already pending
        for the VM, and False if the backend rejected the command (the error
        is recorded against the VM and the lock released). Returns True once
        the command was accepted and polling has started.
        """
        key = vm.key
        if self.is_pending(key):
            logger.debug(f"Ignoring {action.value} for {vm.name}: {self.state.action_locks[key].value} pending")
            return False

        self.state.action_locks[key] = action
        self.state.action_errors[key] = None
        self.poller.clear(key)

        try:
            await self.api.run_action(vm, action)
        except ApiCommandError as e:
            logger.warning(f"Failed to {action.value} VM {vm.name}: {e.message}")
            self.state.action_errors[key] = e.message
            self.state.release_lock(key)
            return False

        # seed with the state observed before the command was issued
        self.poller.start(key, vm.power_state)
        return True
