"""
Спільні фікстури тестів: планувальник з ручним часом та лінії, що записують
всі зміни рівнів.
"""

from datetime import datetime
from typing import Any, Callable, List, Set

import pytest

from controllers.errors import LineIOError
from controllers.power_state import PinLevel
from database.history import PowerHistory
from database.json_store import JsonStore
from hardware.simulated import SimulatedLines
from utils.config_manager import ConfigManager


# Понеділок, 19 жовтня 2026, 12:00 за локальним часом
START_MS = int(datetime(2026, 10, 19, 12, 0).timestamp() * 1000)

PINS = {'power': 24, 'reset': 23, 'led': 18}


class FakeTimer:
    def __init__(self, when: int, seq: int, callback: Callable[..., Any], args: tuple):
        self.when = when
        self.seq = seq
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Планувальник, час якого рухається тільки через advance()."""

    def __init__(self, start_ms: int = START_MS):
        self.now = start_ms
        self.timers: List[FakeTimer] = []
        self._seq = 0

    def now_ms(self) -> int:
        return self.now

    def call_later(self, delay_ms, callback, *args) -> FakeTimer:
        self._seq += 1
        timer = FakeTimer(self.now + max(int(delay_ms), 0), self._seq, callback, args)
        self.timers.append(timer)
        return timer

    def call_soon(self, callback, *args) -> None:
        callback(*args)

    def call(self, func, *args, timeout=None):
        return func(*args)

    def pending(self) -> List[FakeTimer]:
        return [timer for timer in self.timers if not timer.cancelled]

    def advance(self, ms: int) -> None:
        target = self.now + ms
        while True:
            due = [timer for timer in self.pending() if timer.when <= target]
            if not due:
                break
            timer = min(due, key=lambda t: (t.when, t.seq))
            self.timers.remove(timer)
            self.now = max(self.now, timer.when)
            timer.callback(*timer.args)
        self.timers = self.pending()
        self.now = target


class RecordingLines(SimulatedLines):
    """
    Симульовані лінії з журналом записів (час, лінія, рівень), перевіркою
    взаємного виключення кнопок та можливістю імітувати помилки запису.
    """

    def __init__(self, scheduler: FakeScheduler, led_level: PinLevel = PinLevel.LOW):
        super().__init__(PINS, led_level=led_level)
        self.scheduler = scheduler
        self.writes: List[tuple] = []
        self.fail_writes: Set[str] = set()
        self.fail_reads = False
        self.exclusion_violations = 0

    def write_line(self, name: str, level: PinLevel) -> None:
        if name in self.fail_writes:
            raise LineIOError(f"simulated write failure on {name}")
        super().write_line(name, level)
        self.writes.append((self.scheduler.now_ms(), name, level))
        if self.outputs.get('power') is PinLevel.HIGH and self.outputs.get('reset') is PinLevel.HIGH:
            self.exclusion_violations += 1

    def read_line(self, name: str) -> PinLevel:
        if self.fail_reads:
            raise LineIOError(f"simulated read failure on {name}")
        return super().read_line(name)


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def lines(scheduler) -> RecordingLines:
    recording = RecordingLines(scheduler)
    recording.setup_output('power')
    recording.setup_output('reset')
    recording.setup_input('led')
    return recording


@pytest.fixture
def store(tmp_path) -> JsonStore:
    return JsonStore(str(tmp_path / 'save' / 'powerStateHistory.json'))


@pytest.fixture
def history(store, scheduler):
    log = PowerHistory(store, clock=scheduler.now_ms)
    yield log
    log.close()


@pytest.fixture
def config() -> ConfigManager:
    return ConfigManager(None, overrides={
        'timing': {'poll_interval_ms': 0},
        'test_mode': {'enabled': True},
    })
