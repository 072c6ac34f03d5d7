"""
Визначення стану живлення комп'ютера за світлодіодом живлення.

Сирий сигнал лінії LED може "дрижати" під час перемикання, тому новий стан
фіксується тільки після того, як сигнал залишався незмінним протягом
інтервалу debounce. Кожна нова зміна сирого сигналу перезапускає таймер.
"""

from typing import Any, Callable, Dict, Optional

from controllers.errors import LineIOError
from controllers.power_state import PinLevel, PowerState
from hardware.base import BaseLines
from utils.logger import get_logger


StateCallback = Callable[[PowerState, int], None]


class LedWatcher:
    """Датчик стану живлення з гістерезисом."""

    def __init__(
        self,
        lines: BaseLines,
        scheduler,
        on_change: StateCallback,
        debounce_ms: int = 1000,
        poll_interval_ms: int = 500,
        line_name: str = 'led'
    ):
        """
        Ініціалізація датчика.

        Args:
            lines: Джерело ліній GPIO
            scheduler: Планувальник (call_later, call_soon, now_ms)
            on_change: Колбек підтвердженої зміни стану (стан, мітка часу в мс)
            debounce_ms: Скільки сигнал має бути стабільним до фіксації
            poll_interval_ms: Період опитування лінії (0 - тільки переривання)
            line_name: Ім'я вхідної лінії
        """
        self.lines = lines
        self.scheduler = scheduler
        self.on_change = on_change
        self.debounce_ms = debounce_ms
        self.poll_interval_ms = poll_interval_ms
        self.line_name = line_name
        self.logger = get_logger('led')

        self.current_state = PowerState.UNKNOWN
        self.last_raw_sample: Optional[PowerState] = None
        self.last_change: Optional[int] = None
        self.running = False

        self._debounce_timer = None
        self._poll_timer = None

    def start(self) -> None:
        """Зчитати початковий стан без debounce та почати стежити за лінією."""
        if self.running:
            return

        seed = self._read().to_state()
        self.last_raw_sample = seed
        self.current_state = seed
        self.running = True
        self.logger.info(f"Початковий стан живлення: {seed.name}")

        if seed != PowerState.UNKNOWN:
            self._commit_state(seed, self.scheduler.now_ms())

        try:
            self.lines.watch_line(self.line_name, self._on_edge)
        except LineIOError as e:
            self.logger.warning(f"Переривання для лінії {self.line_name} недоступні ({e}), тільки опитування")

        self._schedule_poll()

    def stop(self) -> None:
        """Скасувати таймер debounce та опитування."""
        self.running = False
        self._cancel_debounce()
        if self._poll_timer is not None:
            self._poll_timer.cancel()
            self._poll_timer = None

    def _read(self) -> PinLevel:
        try:
            return self.lines.read_line(self.line_name)
        except LineIOError as e:
            self.logger.error(f"Не вдалося зчитати лінію {self.line_name}: {e}")
            return PinLevel.UNKNOWN

    def _on_edge(self, level: PinLevel) -> None:
        # Може викликатися з потоку драйвера GPIO
        self.scheduler.call_soon(self.handle_sample, level)

    def _schedule_poll(self) -> None:
        if self.running and self.poll_interval_ms > 0:
            self._poll_timer = self.scheduler.call_later(self.poll_interval_ms, self._poll)

    def _poll(self) -> None:
        self._poll_timer = None
        if not self.running:
            return
        self.handle_sample(self._read())
        self._schedule_poll()

    def handle_sample(self, level: Any) -> None:
        """
        Обробити сирий рівень лінії.

        Повторний той самий рівень ігнорується. Рівень, що відрізняється від
        поточного стану, (пере)запускає таймер debounce; повернення до
        поточного стану скасовує його.
        """
        if not self.running:
            return

        candidate = PinLevel.from_raw(level).to_state()
        if candidate == self.last_raw_sample:
            return

        self.last_raw_sample = candidate
        self._cancel_debounce()

        if candidate != self.current_state:
            self.logger.debug(f"Лінія {self.line_name}: можлива зміна на {candidate.name}")
            self._debounce_timer = self.scheduler.call_later(self.debounce_ms, self._on_debounce_elapsed)

    def _cancel_debounce(self) -> None:
        if self._debounce_timer is not None:
            self._debounce_timer.cancel()
            self._debounce_timer = None

    def _on_debounce_elapsed(self) -> None:
        self._debounce_timer = None
        candidate = self.last_raw_sample
        if not self.running or candidate is None or candidate == self.current_state:
            return

        previous = self.current_state
        self.current_state = candidate
        self.logger.info(f"Стан живлення змінився: {previous.name} -> {candidate.name}")
        self._commit_state(candidate, self.scheduler.now_ms())

    def _commit_state(self, state: PowerState, timestamp: int) -> None:
        self.last_change = timestamp
        self.on_change(state, timestamp)

    def get_status(self) -> Dict[str, Any]:
        """
        Отримати статус датчика.

        Returns:
            Словник зі статусом датчика
        """
        return {
            'state': self.current_state.name,
            'last_raw_sample': self.last_raw_sample.name if self.last_raw_sample is not None else None,
            'last_change': self.last_change,
            'debounce_pending': self._debounce_timer is not None,
            'running': self.running,
        }
