# timer.py
# Live work timer: Idle/Running state machine that records a ledger entry on stop

import datetime
import enum
import logging
from typing import Any, Callable, List, Optional

import utils
from config import TIMER_TICK_SECONDS
from ledger import Category, Ledger, TimeEntry

# (interval_seconds, callback) -> handle with a stop() method.
# Textual's Widget.set_interval has this shape.
Scheduler = Callable[[float, Callable[[], None]], Any]
TickListener = Callable[[int], None]


class TimerState(enum.Enum):
    IDLE = 'idle'
    RUNNING = 'running'


class WorkTimer:
    """Times one in-progress interval and turns it into a ledger entry.

    While running, a repeating tick recomputes the elapsed seconds and passes
    them to the tick listeners. That figure is for display only: the stored
    entry's duration comes from the HH:MM start and end strings, so it is
    rounded to whole minutes.
    """

    def __init__(self, ledger: Ledger,
                 scheduler: Optional[Scheduler] = None,
                 clock: Callable[[], datetime.datetime] = datetime.datetime.now,
                 tick_seconds: float = TIMER_TICK_SECONDS):
        self.ledger = ledger
        self._scheduler = scheduler
        self._clock = clock
        self._tick_seconds = tick_seconds
        self._tick_handle = None
        self._listeners: List[TickListener] = []
        self.state = TimerState.IDLE
        self.start_instant: Optional[datetime.datetime] = None
        self.elapsed_seconds = 0

    @property
    def running(self) -> bool:
        return self.state is TimerState.RUNNING

    def add_tick_listener(self, listener: TickListener) -> None:
        self._listeners.append(listener)

    def remove_tick_listener(self, listener: TickListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def start(self) -> bool:
        if self.running:
            return False
        self.start_instant = self._clock()
        self.elapsed_seconds = 0
        self.state = TimerState.RUNNING
        if self._scheduler is not None:
            self._tick_handle = self._scheduler(self._tick_seconds, self.tick)
        logging.info(f"Timer started at {self.start_instant:%Y-%m-%d %H:%M:%S}")
        self._notify()
        return True

    def tick(self) -> None:
        """Recomputes the elapsed time and notifies listeners."""
        if not self.running:
            return
        self.elapsed_seconds = int((self._clock() - self.start_instant).total_seconds())
        self._notify()

    def stop(self, owner: str = "", date: Optional[str] = None, project: str = "",
             category: Category = Category.WORK) -> Optional[TimeEntry]:
        """Stops the timer and appends the interval to the ledger.

        The date defaults to the day the timer was started. Returns the new
        entry, or None when the timer was idle or the ledger ignored the entry.
        """
        if not self.running:
            return None
        end_instant = self._clock()
        start_str = utils.format_clock(self.start_instant)
        end_str = utils.format_clock(end_instant)
        if date is None:
            date = self.start_instant.date().isoformat()
        logging.info(f"Timer stopped: {start_str}-{end_str} on {date}")
        entry = self.ledger.add(owner, date, project, category, start_str, end_str)
        self._reset()
        return entry

    def cancel(self) -> None:
        """Drops a running timer without recording anything."""
        if self.running:
            logging.info("Timer cancelled.")
        self._reset()

    def _reset(self) -> None:
        if self._tick_handle is not None:
            self._tick_handle.stop()
            self._tick_handle = None
        self.state = TimerState.IDLE
        self.start_instant = None
        self.elapsed_seconds = 0
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self.elapsed_seconds)
