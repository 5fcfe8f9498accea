"""Console session with an inactivity watchdog.

The watchdog runs on an injected ``Scheduler``: a warning countdown becomes
visible shortly before the inactivity timeout, and the session expires when
the timeout elapses without recorded activity.
"""
import json
import logging
import uuid
from typing import List, MutableMapping, Optional
from pydantic import ValidationError
from opsconsole.client.scheduler import Scheduler, TimerHandle
from opsconsole.models.session import SessionWarning, User

logger = logging.getLogger(__name__)

STORAGE_USER_KEY = "cmm.auth.user"
STORAGE_TOKEN_KEY = "cmm.auth.token"
INACTIVITY_TIMEOUT = 120.0
WARNING_WINDOW = 10.0
WARNING_COUNTDOWN = 10


class SessionManager:

    def __init__(
        self,
        scheduler: Scheduler,
        storage: MutableMapping[str, str],
        inactivity_timeout: float = INACTIVITY_TIMEOUT,
        warning_window: float = WARNING_WINDOW,
        warning_countdown: int = WARNING_COUNTDOWN,
    ):
        self.scheduler = scheduler
        self.storage = storage
        self.inactivity_timeout = inactivity_timeout
        self.warning_window = warning_window
        self.warning_countdown = warning_countdown

        self.user: Optional[User] = None
        self.warning = SessionWarning(countdown=warning_countdown)
        self._warning_timer: Optional[TimerHandle] = None
        self._expiry_timer: Optional[TimerHandle] = None
        self._countdown_timer: Optional[TimerHandle] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def token(self) -> Optional[str]:
        return self.storage.get(STORAGE_TOKEN_KEY)

    @property
    def active_timers(self) -> List[TimerHandle]:
        timers = (self._warning_timer, self._expiry_timer, self._countdown_timer)
        return [timer for timer in timers if timer is not None]

    def restore(self) -> Optional[User]:
        """Rehydrate the user from storage; a malformed entry restores nothing"""
        token = self.storage.get(STORAGE_TOKEN_KEY)
        serialized = self.storage.get(STORAGE_USER_KEY)
        if not token or not serialized:
            return None

        try:
            user = User.model_validate(json.loads(serialized))
        except (ValueError, ValidationError):
            logger.warning("Discarding malformed stored session user")
            return None

        self.user = user
        self._reset_watchdog()
        return user

    def login(self, email: str, password: str, name: Optional[str] = None) -> User:
        """Open a session for ``email``; credentials are not verified here"""
        user = User(name=name or email.split("@", 1)[0], email=email)
        self.storage[STORAGE_USER_KEY] = user.model_dump_json()
        self.storage[STORAGE_TOKEN_KEY] = str(uuid.uuid4())
        self.user = user
        self._reset_watchdog()
        logger.info(f"Session started for {email}")
        return user

    def record_activity(self) -> None:
        if self.user is None:
            return
        self._reset_watchdog()

    def expire(self) -> None:
        logger.info("Session expired after inactivity")
        self.logout()

    def logout(self) -> None:
        self._clear_timers()
        self.warning = SessionWarning(countdown=self.warning_countdown)
        self.user = None
        self.storage.pop(STORAGE_USER_KEY, None)
        self.storage.pop(STORAGE_TOKEN_KEY, None)

    def _clear_timers(self) -> None:
        for timer in self.active_timers:
            timer.cancel()
        self._warning_timer = None
        self._expiry_timer = None
        self._countdown_timer = None

    def _reset_watchdog(self) -> None:
        self._clear_timers()
        self.warning = SessionWarning(countdown=self.warning_countdown)
        self._warning_timer = self.scheduler.call_later(
            self.inactivity_timeout - self.warning_window, self._show_warning
        )
        self._expiry_timer = self.scheduler.call_later(self.inactivity_timeout, self.expire)

    def _show_warning(self) -> None:
        self._warning_timer = None
        self.warning = SessionWarning(visible=True, countdown=self.warning_countdown)
        if self._countdown_timer is not None:
            self._countdown_timer.cancel()
        self._countdown_timer = self.scheduler.call_every(1.0, self._count_down)

    def _count_down(self) -> None:
        self.warning = SessionWarning(visible=True, countdown=max(self.warning.countdown - 1, 0))
