"""Convergence polling after a start/stop command.

Azure power operations are asynchronous and the console has no push
channel, so after a command is accepted the inventory is re-fetched on a
fixed interval until the target VM's power state moves away from the state
it had before the command, or the attempt budget runs out.
"""
import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional
from opsconsole.client.inventory import InventoryFetcher
from opsconsole.client.scheduler import Scheduler, TimerHandle
from opsconsole.client.state import ConsoleState
from opsconsole.models.vm import VMKey

logger = logging.getLogger(__name__)

POLL_INTERVAL = 2.0
MAX_POLL_ATTEMPTS = 30
TIMEOUT_MESSAGE = "Timed out waiting for VM status update. Please refresh."


class PollOutcome(str, Enum):
    CONVERGED = "converged"
    TIMED_OUT = "timed_out"


@dataclass
class PollHandle:
    initial_state: str
    timer: Optional[TimerHandle] = None
    in_flight: bool = False
    attempts: int = 0
    task: Optional[asyncio.Task] = None
    outcome: Optional[PollOutcome] = None


class ConvergencePoller:

    def __init__(
        self,
        fetcher: InventoryFetcher,
        state: ConsoleState,
        scheduler: Scheduler,
        interval: float = POLL_INTERVAL,
        max_attempts: int = MAX_POLL_ATTEMPTS,
    ):
        self.fetcher = fetcher
        self.state = state
        self.scheduler = scheduler
        self.interval = interval
        self.max_attempts = max_attempts
        self._handles: Dict[VMKey, PollHandle] = {}

    def is_polling(self, key: VMKey) -> bool:
        return key in self._handles

    def handle(self, key: VMKey) -> Optional[PollHandle]:
        return self._handles.get(key)

    @property
    def active_keys(self) -> List[VMKey]:
        return list(self._handles)

    def start(self, key: VMKey, initial_power_state: str) -> PollHandle:
        """Begin polling ``key``; any previous poll for it is cancelled first"""
        self.clear(key)
        handle = PollHandle(initial_state=initial_power_state.lower())
        self._handles[key] = handle

        self._tick(key, handle)
        handle.timer = self.scheduler.call_every(self.interval, lambda: self._tick(key, handle))
        logger.debug(f"Polling {key.resource_group}/{key.name} from state {handle.initial_state!r}")
        return handle

    def clear(self, key: VMKey) -> None:
        handle = self._handles.pop(key, None)
        if handle is None:
            return
        if handle.timer is not None:
            handle.timer.cancel()
        if handle.task is not None and handle.task is not asyncio.current_task():
            handle.task.cancel()

    def clear_all(self) -> None:
        for key in list(self._handles):
            self.clear(key)

    def _tick(self, key: VMKey, handle: PollHandle) -> None:
        # skip when superseded or when the previous check has not returned
        if self._handles.get(key) is not handle or handle.in_flight:
            return
        handle.in_flight = True
        handle.task = asyncio.create_task(self._check(key, handle))

    def _finish(self, key: VMKey, handle: PollHandle, outcome: PollOutcome) -> None:
        handle.outcome = outcome
        self.clear(key)
        self.state.release_lock(key)

    async def _check(self, key: VMKey, handle: PollHandle) -> None:
        handle.attempts += 1
        try:
            latest = await self.fetcher.fetch(show_loading=False, clear_error=False)
            if self._handles.get(key) is not handle:
                return

            target = next((vm for vm in latest or [] if vm.key == key), None)
            if target is not None and target.power_state.lower() != handle.initial_state:
                logger.info(
                    f"VM {key.name} converged to {target.power_state} after {handle.attempts} attempt(s)"
                )
                self._finish(key, handle, PollOutcome.CONVERGED)
                return

            if handle.attempts >= self.max_attempts:
                logger.warning(f"Gave up waiting for VM {key.name} after {handle.attempts} attempts")
                self._finish(key, handle, PollOutcome.TIMED_OUT)
                self.state.action_errors[key] = TIMEOUT_MESSAGE
        finally:
            handle.in_flight = False
            handle.task = None
