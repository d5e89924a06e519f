# client/progress_debouncer.py
import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Optional, Set
from util.constants import PROGRESS_QUIET_PERIOD_SECONDS, PROGRESS_THRESHOLD
from util.functions import percent_of

logger = logging.getLogger(__name__)

PersistFn = Callable[[str, int], Awaitable[None]]


class SessionState(str, Enum):
    IDLE = "idle"
    TRACKING = "tracking"
    FLUSHING = "flushing"
    CLOSED = "closed"


class ProgressDebouncer:
    """
    Coalesces a player's time-update events into few progress writes.

    Flow:
    - Each event with a known duration updates the latest percent and restarts the
      quiet-period timer.
    - When the timer fires, a flush is sent only if the percent moved at least
      `threshold` points from the last saved value.
    - teardown() cancels the timer and dispatches one final flush with the latest
      percent, ignoring the threshold. It never waits for the network.

    All transitions run on one event loop, so no locking is needed. Flush failures
    are logged and otherwise ignored; progress is an enhancement, not a record.
    """

    def __init__(
        self,
        asset_id: str,
        persist: PersistFn,
        *,
        threshold: int = PROGRESS_THRESHOLD,
        quiet_period: float = PROGRESS_QUIET_PERIOD_SECONDS,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        self.asset_id = asset_id
        self._persist = persist
        self._threshold = threshold
        self._quiet = quiet_period
        self._loop = loop
        self._timer: Optional[asyncio.TimerHandle] = None
        self._tasks: Set[asyncio.Task] = set()
        self.state = SessionState.IDLE
        self.percent: Optional[int] = None
        self.last_saved = 0

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    # ---------------- Events ----------------

    def on_time_update(self, current_time: float, duration: Optional[float]) -> None:
        if self.state is SessionState.CLOSED:
            return
        pct = percent_of(current_time, duration)
        if pct is None:
            # Metadata not loaded yet
            return
        self.percent = pct
        if self.state is SessionState.IDLE:
            self.state = SessionState.TRACKING
        self._restart_timer()

    def teardown(self) -> Optional[asyncio.Task]:
        """
        End the session. Returns the detached final-flush task (or None when no
        percent was ever observed); callers are not expected to await it.
        """
        if self.state is SessionState.CLOSED:
            return None
        self._cancel_timer()
        self.state = SessionState.CLOSED
        if self.percent is None:
            return None
        return self._dispatch(self.percent, final=True)

    # ---------------- Timer ----------------

    def _restart_timer(self) -> None:
        self._cancel_timer()
        self._timer = self._get_loop().call_later(self._quiet, self._on_quiet)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_quiet(self) -> None:
        self._timer = None
        if self.state is SessionState.FLUSHING:
            # One flush in flight at a time; look again after another quiet period
            self._restart_timer()
            return
        if self.state is not SessionState.TRACKING or self.percent is None:
            return
        if abs(self.percent - self.last_saved) < self._threshold:
            return
        self.state = SessionState.FLUSHING
        self._dispatch(self.percent, final=False)

    # ---------------- Flush ----------------

    def _dispatch(self, percent: int, *, final: bool) -> asyncio.Task:
        task = self._get_loop().create_task(self._flush(percent, final))
        # Keep a reference until done; the result itself is intentionally discarded
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _flush(self, percent: int, final: bool) -> None:
        try:
            await self._persist(self.asset_id, percent)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(
                "progress.flush.failed asset=%s pct=%d final=%s err=%s",
                self.asset_id,
                percent,
                final,
                type(e).__name__,
            )
        else:
            self.last_saved = percent
            logger.debug(
                "progress.flush.ok asset=%s pct=%d final=%s", self.asset_id, percent, final
            )
        finally:
            if self.state is SessionState.FLUSHING:
                self.state = SessionState.TRACKING

    @property
    def pending(self) -> int:
        return len(self._tasks)
