"""Preview scheduling: debouncing, stale-result suppression and URL slots."""

import logging
import threading
from typing import Any, Callable, Dict, Mapping, Optional

from ..models import Template

logger = logging.getLogger(__name__)


# (delay_seconds, function) -> object with start() and cancel()
TimerFactory = Callable[[float, Callable[[], None]], Any]


class Debouncer:
    """
    Cancel-pending, schedule-new call wrapper.

    Only the last call made within ``delay`` seconds runs. ``flush`` runs a
    pending call immediately and ``cancel`` drops it. With the default
    ``threading.Timer`` the callback runs on a timer thread; a host with an
    event loop can pass a factory that schedules on that loop instead.
    """

    def __init__(
        self,
        delay: float,
        callback: Callable[..., Any],
        timer_factory: TimerFactory = threading.Timer,
    ):
        self.delay = delay
        self.callback = callback
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._timer = None
        self._pending = None

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def call(self, *args, **kwargs):
        """Schedule ``callback(*args, **kwargs)``, replacing any pending call."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._pending = (args, kwargs)
            self._timer = self._timer_factory(self.delay, self._fire)
            if hasattr(self._timer, "daemon"):
                self._timer.daemon = True
            self._timer.start()

    def flush(self):
        """Run the pending call now, if there is one."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
        self._fire()

    def cancel(self):
        """Drop the pending call."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            self._pending = None

    def _fire(self):
        with self._lock:
            pending = self._pending
            self._pending = None
            self._timer = None
        if pending is None:
            return
        args, kwargs = pending
        self.callback(*args, **kwargs)


class PreviewSlots:
    """
    Registry holding at most one live preview URL per slot.

    Publishing a new URL releases the one it replaces, so superseded preview
    artifacts never accumulate.
    """

    def __init__(self, release: Optional[Callable[[str], None]] = None):
        """
        Initialize the registry.

        Args:
            release: Called with each URL that is no longer live
        """
        self._release = release or (lambda url: None)
        self._urls: Dict[str, str] = {}
        self._lock = threading.Lock()

    def publish(self, slot: str, url: str):
        """Make ``url`` the live URL of ``slot``; safe to call from timer threads."""
        with self._lock:
            previous = self._urls.get(slot)
            self._urls[slot] = url
        if previous is not None and previous != url:
            self._release(previous)

    def get(self, slot: str) -> Optional[str]:
        return self._urls.get(slot)

    def release(self, slot: str):
        with self._lock:
            url = self._urls.pop(slot, None)
        if url is not None:
            self._release(url)

    def release_all(self):
        with self._lock:
            slots = list(self._urls)
        for slot in slots:
            self.release(slot)

    @property
    def live_count(self) -> int:
        return len(self._urls)


RenderFunction = Callable[[Template, Optional[Mapping[str, str]]], Any]


class PreviewScheduler:
    """
    Debounced, cancel-and-replace preview regeneration.

    Every ``schedule`` bumps a generation token. A finished render is handed
    to ``publish`` only when its token is still the latest, so a slow render
    can never overwrite a newer preview.
    """

    def __init__(
        self,
        render: RenderFunction,
        publish: Callable[[Any], None],
        delay: float = 0.3,
        timer_factory: TimerFactory = threading.Timer,
    ):
        """
        Initialize the scheduler.

        Args:
            render: Produces a preview for (template, row)
            publish: Receives each non-stale preview
            delay: Debounce delay in seconds
            timer_factory: Timer constructor (threading.Timer by default)
        """
        self._render = render
        self._publish = publish
        self._generation = 0
        self._lock = threading.Lock()
        self._debouncer = Debouncer(delay, self._run, timer_factory)
        self.last_error: Optional[Exception] = None

    @property
    def generation(self) -> int:
        return self._generation

    def _next_token(self) -> int:
        with self._lock:
            self._generation += 1
            return self._generation

    def is_current(self, token: int) -> bool:
        return token == self._generation

    def schedule(self, template: Template, row: Optional[Mapping[str, str]] = None) -> int:
        """
        Schedule a preview of a snapshot of ``template``.

        Returns:
            Generation token of the scheduled render
        """
        token = self._next_token()
        self._debouncer.call(token, template.clone(), dict(row) if row else None)
        return token

    def render_now(self, template: Template, row: Optional[Mapping[str, str]] = None) -> int:
        """Render immediately, superseding anything pending."""
        self._debouncer.cancel()
        token = self._next_token()
        self._run(token, template.clone(), dict(row) if row else None)
        return token

    def flush(self):
        self._debouncer.flush()

    def cancel(self):
        """Drop the pending render and invalidate any render in flight."""
        self._debouncer.cancel()
        self._next_token()

    def _run(self, token: int, template: Template, row: Optional[Mapping[str, str]]):
        if not self.is_current(token):
            logger.debug("Dropping stale preview request %d", token)
            return
        try:
            result = self._render(template, row)
        except Exception as e:
            # Runs on the timer thread; keep the error for the caller to inspect
            logger.exception("Preview render failed")
            self.last_error = e
            return
        if not self.is_current(token):
            logger.debug("Discarding stale preview %d (latest is %d)", token, self._generation)
            return
        self.last_error = None
        self._publish(result)
