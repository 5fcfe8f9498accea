import uuid
from typing import Dict, List
from opsconsole.client.scheduler import Scheduler, TimerHandle
from opsconsole.models.session import Toast

TOAST_DISMISS_DELAY = 3.0


class ToastQueue:
    """Transient notifications that dismiss themselves after a fixed delay"""

    def __init__(self, scheduler: Scheduler, dismiss_delay: float = TOAST_DISMISS_DELAY):
        self.scheduler = scheduler
        self.dismiss_delay = dismiss_delay
        self.toasts: List[Toast] = []
        self._timers: Dict[str, TimerHandle] = {}

    @property
    def pending_timers(self) -> int:
        return len(self._timers)

    def push(self, title: str, variant: str = "success") -> Toast:
        toast = Toast(id=uuid.uuid4().hex, title=title, variant=variant)
        self.toasts.append(toast)
        self._timers[toast.id] = self.scheduler.call_later(
            self.dismiss_delay, lambda: self.dismiss(toast.id)
        )
        return toast

    def dismiss(self, toast_id: str) -> None:
        timer = self._timers.pop(toast_id, None)
        if timer is not None:
            timer.cancel()
        self.toasts = [toast for toast in self.toasts if toast.id != toast_id]

    def clear(self) -> None:
        for toast_id in list(self._timers):
            self.dismiss(toast_id)
        self.toasts = []
