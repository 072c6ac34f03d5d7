"""
Однопотоковий планувальник на базі asyncio.

Весь стан ядра (поточний стан живлення, записи натискань кнопок) змінюється
тільки в потоці циклу подій. Таймери (debounce, відпускання кнопок,
опитування) плануються через `call_later`, колбеки GPIO та запити HTTP
передаються в цикл через `call_soon` / `call`.
"""

import asyncio
import concurrent.futures
import threading
import time
from typing import Any, Callable, Optional

from utils.logger import get_logger


def now_ms() -> int:
    """Поточний час у мілісекундах від епохи."""
    return int(time.time() * 1000)


class LoopScheduler:
    """Цикл подій asyncio в окремому потоці."""

    def __init__(self, name: str = "power-loop"):
        """
        Ініціалізація планувальника.

        Args:
            name: Ім'я потоку циклу подій
        """
        self.name = name
        self.logger = get_logger('scheduler')
        self.loop = asyncio.new_event_loop()
        self._thread: Optional[threading.Thread] = None
        self._started = threading.Event()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and self.loop.is_running()

    def in_loop_thread(self) -> bool:
        return self._thread is not None and threading.get_ident() == self._thread.ident

    def start(self) -> None:
        """Запустити цикл подій у фоновому потоці."""
        if self._thread is not None:
            return

        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()
        self._started.wait(timeout=5)
        self.logger.debug(f"Планувальник {self.name} запущено")

    def _run(self) -> None:
        asyncio.set_event_loop(self.loop)
        self.loop.call_soon(self._started.set)
        try:
            self.loop.run_forever()
        finally:
            self.loop.close()

    def stop(self, timeout: float = 5.0) -> None:
        """Зупинити цикл подій і дочекатися завершення потоку."""
        if self._thread is None:
            if not self.loop.is_closed():
                self.loop.close()
            return
        if self.loop.is_running():
            self.loop.call_soon_threadsafe(self.loop.stop)
        if not self.in_loop_thread():
            self._thread.join(timeout)
        self.logger.debug(f"Планувальник {self.name} зупинено")

    def now_ms(self) -> int:
        return now_ms()

    def call_later(self, delay_ms: float, callback: Callable[..., Any], *args: Any) -> asyncio.TimerHandle:
        """
        Запланувати одноразовий виклик через delay_ms мілісекунд.

        Викликається тільки з потоку циклу подій (або до його запуску).

        Returns:
            Дескриптор таймера з методом cancel()
        """
        return self.loop.call_later(max(delay_ms, 0) / 1000.0, self._guard, callback, args)

    def call_soon(self, callback: Callable[..., Any], *args: Any) -> None:
        """Передати виклик у цикл подій з будь-якого потоку."""
        if self.loop.is_closed():
            self.logger.debug("Цикл подій закрито, виклик пропущено")
            return
        self.loop.call_soon_threadsafe(self._guard, callback, args)

    def call(self, func: Callable[..., Any], *args: Any, timeout: Optional[float] = 10.0) -> Any:
        """
        Виконати func у потоці циклу подій і повернути результат.

        Якщо цикл не запущено або виклик уже з потоку циклу - виконує напряму.
        """
        if not self.running or self.in_loop_thread():
            return func(*args)

        future: concurrent.futures.Future = concurrent.futures.Future()

        def runner() -> None:
            if not future.set_running_or_notify_cancel():
                return
            try:
                future.set_result(func(*args))
            except Exception as e:
                future.set_exception(e)

        self.loop.call_soon_threadsafe(runner)
        return future.result(timeout=timeout)

    def _guard(self, callback: Callable[..., Any], args: tuple) -> None:
        try:
            callback(*args)
        except Exception:
            self.logger.exception(f"Помилка в колбеку планувальника {getattr(callback, '__name__', callback)}")
