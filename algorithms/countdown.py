"""
Live eligibility countdown for under-age users.

Every tick re-runs the classifier against the absolute 18th-birthday instant,
so the displayed time never drifts. The caller owns the countdown and must
cancel it when the view using it goes away; using it as a context manager
does that automatically.
"""
import logging
import threading
from datetime import datetime, timezone

from algorithms.eligibility import EligibilityStatus, classify

DEFAULT_INTERVAL_SECONDS = 60

logger = logging.getLogger(__name__)


def utc_now():
    return datetime.now(timezone.utc)


class EligibilityCountdown:
    """
    Scheduled recompute of an eligibility state with a cancellation handle.

    Args:
        date_of_birth: the user's date of birth
        signup_reason: the user's signup reason
        on_tick: callable receiving the fresh EligibilityState on each tick
        interval: seconds between ticks
        clock: zero-argument callable returning the current datetime
    """

    def __init__(self, date_of_birth, signup_reason, on_tick,
                 interval=DEFAULT_INTERVAL_SECONDS, clock=utc_now):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.date_of_birth = date_of_birth
        self.signup_reason = signup_reason
        self.on_tick = on_tick
        self.interval = interval
        self.clock = clock
        self.last_state = None
        self._cancelled = threading.Event()
        self._thread = None

    @property
    def running(self):
        return self._thread is not None and self._thread.is_alive()

    @property
    def cancelled(self):
        return self._cancelled.is_set()

    def evaluate(self):
        """Classify at the clock's current time (pure, no scheduling)"""
        return classify(self.date_of_birth, self.signup_reason, self.clock())

    def _tick(self):
        state = self.evaluate()
        self.last_state = state
        self.on_tick(state)
        return state.status is EligibilityStatus.UNDER_AGE

    def start(self):
        """
        Evaluate once right away, then keep ticking in the background while
        the user is still under age.

        Errors from the first evaluation (e.g. InvalidDate) propagate to the
        caller; nothing is scheduled in that case.
        """
        if self._thread is not None:
            raise RuntimeError("countdown already started")
        if self.cancelled:
            return self

        if not self._tick():
            logger.debug("Countdown not scheduled, user is not under age")
            return self

        self._thread = threading.Thread(target=self._run, name='eligibility-countdown', daemon=True)
        self._thread.start()
        return self

    def _run(self):
        while not self._cancelled.wait(self.interval):
            try:
                still_counting = self._tick()
            except Exception:
                logger.exception("Eligibility countdown tick failed, stopping")
                break
            if not still_counting:
                logger.debug("Countdown finished, user is now eligible")
                break
        self._cancelled.set()

    def cancel(self, timeout=None):
        """Stop ticking; safe to call more than once or before start()"""
        self._cancelled.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def __enter__(self):
        return self.start()

    def __exit__(self, exc_type, exc, tb):
        self.cancel()
        return False
