from __future__ import annotations
import threading
import time
from typing import Callable, Dict, Optional, Set


TimerListener = Callable[[], None]
Clock = Callable[[], int]


def now_ms() -> int:
    return int(time.time() * 1000)


def elapsed_seconds(start_ms: int, current_ms: Optional[int] = None) -> int:
    """Seconds shown by a count-up display; -1 while the timer is inactive."""
    if current_ms is None:
        current_ms = now_ms()
    if start_ms <= 0:
        return -1
    if start_ms > current_ms:
        return 0
    return int(round((current_ms - start_ms) / 1000))


class TimerStateManager:
    """Start timestamps of the shared anchorage repair and Nosaki timers.

    The game runs one cooldown for the whole roster, even with Nosaki in
    several fleets, so there is a single instance per process. Values are epoch
    ms; 0 means the timer is waiting for its next qualifying event.
    """

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._clock: Clock = clock or now_ms
        self._last_repair_refresh = 0
        self._last_nosaki_refresh = 0
        self._listeners: Set[TimerListener] = set()
        self._lock = threading.RLock()

    def now(self) -> int:
        return self._clock()

    def get_last_repair_refresh(self) -> int:
        return self._last_repair_refresh

    def get_last_nosaki_refresh(self) -> int:
        return self._last_nosaki_refresh

    def set_last_repair_refresh(self, timestamp: int) -> None:
        with self._lock:
            self._last_repair_refresh = int(timestamp)
            self._notify()

    def set_last_nosaki_refresh(self, timestamp: int) -> None:
        with self._lock:
            self._last_nosaki_refresh = int(timestamp)
            self._notify()

    def reset_repair_timer(self) -> None:
        self.set_last_repair_refresh(self._clock())

    def reset_nosaki_timer(self) -> None:
        self.set_last_nosaki_refresh(self._clock())

    def clear_repair_timer(self) -> None:
        self.set_last_repair_refresh(0)

    def clear_nosaki_timer(self) -> None:
        self.set_last_nosaki_refresh(0)

    def repair_elapsed_ms(self) -> Optional[int]:
        if self._last_repair_refresh <= 0:
            return None
        return self._clock() - self._last_repair_refresh

    def nosaki_elapsed_ms(self) -> Optional[int]:
        if self._last_nosaki_refresh <= 0:
            return None
        return self._clock() - self._last_nosaki_refresh

    def snapshot(self) -> Dict[str, int]:
        return {
            "lastRepairRefresh": self._last_repair_refresh,
            "lastNosakiRefresh": self._last_nosaki_refresh,
        }

    def subscribe(self, listener: TimerListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.add(listener)

        def unsubscribe() -> None:
            with self._lock:
                self._listeners.discard(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()


TIMERS = TimerStateManager()
