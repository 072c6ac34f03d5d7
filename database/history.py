"""
Історія станів живлення за останній тиждень.

Події зберігаються у семи кошиках - по одному на день тижня (0 - неділя).
Кожен кошик впорядкований за часом, тому очищення старих подій - це
відсікання префікса. Після кожної зміни вся історія записується у JSON-файл
у фоновому потоці вводу/виводу.
"""

import threading
from bisect import bisect_right
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Deque, List, Optional

from controllers.errors import PersistenceError
from controllers.power_state import PowerState
from controllers.scheduler import now_ms
from database.json_store import JsonStore
from database.models import DAY_MS, WEEK_DAYS, PowerStateEvent, end_of_day, same_day
from utils.logger import get_logger


RETENTION_MS = WEEK_DAYS * DAY_MS


class PowerHistory:
    """Журнал подій зміни стану живлення з підсумками за тиждень."""

    def __init__(
        self,
        store: JsonStore,
        clock: Optional[Callable[[], int]] = None,
        executor: Optional[ThreadPoolExecutor] = None
    ):
        """
        Ініціалізація журналу.

        Args:
            store: Сховище JSON-документа
            clock: Джерело поточного часу в мс (за замовчуванням - системний час)
            executor: Виконавець для запису на диск (за замовчуванням - власний
                однопотоковий)
        """
        self.store = store
        self.clock = clock or now_ms
        self.logger = get_logger('history')

        self._lock = threading.Lock()
        self._buckets: List[Deque[PowerStateEvent]] = [deque() for _ in range(WEEK_DAYS)]

        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix='history-io')
        self._last_write: Optional[Future] = None
        self._closed = False

    # ---- Завантаження та збереження ----

    def load(self) -> bool:
        """
        Завантажити історію з файлу. Якщо файлу немає - створити його.

        Returns:
            True якщо історію завантажено або файл створено
        """
        try:
            data = self.store.load_json()
        except FileNotFoundError:
            self.logger.info(f"Файл історії не знайдено, створюю новий: {self.store.path}")
            return self.save()
        except PersistenceError as e:
            self.logger.error(f"Помилка читання історії: {e}")
            return False

        try:
            buckets = [
                deque(sorted((PowerStateEvent.from_dict(evt) for evt in data[day]),
                             key=lambda evt: evt.timestamp))
                for day in range(WEEK_DAYS)
            ]
        except (KeyError, IndexError, TypeError, ValueError) as e:
            self.logger.error(f"Файл історії пошкоджено ({self.store.path}): {e}")
            return False

        with self._lock:
            self._buckets = buckets
            removed = self._purge_locked(self.clock())

        total = sum(len(day) for day in buckets)
        self.logger.info(f"Історію завантажено: {total} подій (видалено застарілих: {removed})")
        return True

    def save(self) -> bool:
        """
        Синхронно записати поточну історію у файл.

        Returns:
            True якщо запис успішний
        """
        with self._lock:
            snapshot = self._serialize_locked()
        return self._write(snapshot)

    def _write(self, snapshot: List[List[dict]]) -> bool:
        try:
            self.store.atomic_write_json(snapshot)
            return True
        except PersistenceError as e:
            self.logger.error(f"Помилка збереження історії: {e}")
            return False

    def _schedule_save(self, snapshot: List[List[dict]]) -> None:
        """Поставити запис у чергу фонового потоку вводу/виводу."""
        if self._closed:
            self._write(snapshot)
            return
        self._last_write = self._executor.submit(self._write, snapshot)

    def flush(self, timeout: Optional[float] = None) -> bool:
        """
        Дочекатися завершення запланованих записів.

        Returns:
            Результат останнього запису (True якщо записів не було)
        """
        pending = self._last_write
        if pending is None:
            return True
        return pending.result(timeout=timeout)

    def close(self) -> None:
        """Дописати чергу та зупинити потік вводу/виводу."""
        if self._closed:
            return
        self.flush()
        self._closed = True
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    # ---- Зміни ----

    def record_event(self, state: PowerState, timestamp: Optional[int] = None) -> PowerStateEvent:
        """
        Додати подію зміни стану, очистити застарілі та зберегти історію.

        Args:
            state: Новий стан живлення
            timestamp: Час події в мс (за замовчуванням - зараз)

        Returns:
            Створена подія
        """
        now = self.clock()
        event = PowerStateEvent(timestamp=now if timestamp is None else int(timestamp),
                                state=PowerState(state))

        with self._lock:
            bucket = self._buckets[event.day]
            if bucket and bucket[-1].timestamp > event.timestamp:
                # Запізніла подія: вставити зі збереженням порядку
                position = bisect_right([evt.timestamp for evt in bucket], event.timestamp)
                bucket.insert(position, event)
            else:
                bucket.append(event)
            self._purge_locked(now)
            snapshot = self._serialize_locked()

        self.logger.info(f"Подія живлення: {event.state.name} о {event.timestamp}")
        self._schedule_save(snapshot)
        return event

    def purge(self, now: Optional[int] = None) -> int:
        """
        Видалити події, старші за 7 діб.

        Returns:
            Кількість видалених подій
        """
        with self._lock:
            return self._purge_locked(self.clock() if now is None else now)

    def _purge_locked(self, now: int) -> int:
        cutoff = now - RETENTION_MS
        removed = 0
        for bucket in self._buckets:
            while bucket and bucket[0].timestamp < cutoff:
                bucket.popleft()
                removed += 1
        return removed

    # ---- Читання ----

    def get_week_summary(self, now: Optional[int] = None) -> List[float]:
        """
        Частка кожного дня тижня, протягом якої комп'ютер був увімкнений.

        Returns:
            7 значень від 0 до 1, починаючи з неділі
        """
        with self._lock:
            self._purge_locked(self.clock() if now is None else now)
            days = [list(bucket) for bucket in self._buckets]
        return [self.day_fraction(day) for day in days]

    @staticmethod
    def day_fraction(events: List[PowerStateEvent]) -> float:
        """
        Частка доби, коли пристрій був увімкнений, за подіями одного кошика.

        Інтервал відкривається подією ON і закривається першою наступною
        подією OFF того ж календарного дня, інакше - кінцем дня події ON.
        """
        time_on = 0
        on_since: Optional[int] = None

        for event in events:
            if event.state == PowerState.ON:
                if on_since is None:
                    on_since = event.timestamp
            elif event.state == PowerState.OFF and on_since is not None:
                if same_day(on_since, event.timestamp):
                    time_on += event.timestamp - on_since
                else:
                    time_on += end_of_day(on_since) - on_since
                on_since = None

        if on_since is not None:
            time_on += end_of_day(on_since) - on_since

        return min(time_on / DAY_MS, 1.0)

    def get_event_history(self) -> List[List[PowerStateEvent]]:
        """Копія всієї історії: 7 списків подій, починаючи з неділі."""
        with self._lock:
            return [list(bucket) for bucket in self._buckets]

    def serialize(self) -> List[List[dict]]:
        """Історія у форматі файлу збереження."""
        with self._lock:
            return self._serialize_locked()

    def _serialize_locked(self) -> List[List[dict]]:
        return [[evt.to_dict() for evt in bucket] for bucket in self._buckets]

    def __len__(self) -> int:
        with self._lock:
            return sum(len(bucket) for bucket in self._buckets)

    def __repr__(self) -> str:
        return f"PowerHistory(path={self.store.path!s}, events={len(self)})"
