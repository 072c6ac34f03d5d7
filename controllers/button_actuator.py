"""
Модуль для натискання кнопок корпусу (power, reset) через вихідні лінії.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from controllers.errors import ActuationFailed, InvalidButton, InvalidDuration, LineIOError
from controllers.power_state import Button, OperationResult, PinLevel
from hardware.base import BaseLines
from utils.logger import get_logger


@dataclass
class PressState:
    """Запис про натиснуту кнопку. duration_ms == 0 - кнопка відпущена."""
    started_at: int = 0
    duration_ms: int = 0

    @property
    def active(self) -> bool:
        return self.duration_ms > 0

    @property
    def release_at(self) -> int:
        return self.started_at + self.duration_ms

    def clear(self) -> None:
        self.started_at = 0
        self.duration_ms = 0


class ButtonActuator:
    """
    Тримає одну з кнопок натиснутою заданий час і потім відпускає її.

    Одночасно може бути натиснута тільки одна кнопка: натискання однієї
    примусово відпускає іншу.
    """

    def __init__(
        self,
        lines: BaseLines,
        scheduler,
        press_duration_ms: int = 200,
        hold_duration_ms: int = 5000,
        retry_interval_ms: int = 50
    ):
        """
        Ініціалізація актуатора.

        Args:
            lines: Джерело ліній GPIO з виходами 'power' та 'reset'
            scheduler: Планувальник (call_later, now_ms)
            press_duration_ms: Тривалість короткого натискання
            hold_duration_ms: Тривалість утримання
            retry_interval_ms: Пауза перед повторною спробою відпускання
        """
        self.lines = lines
        self.scheduler = scheduler
        self.press_duration_ms = press_duration_ms
        self.hold_duration_ms = hold_duration_ms
        self.retry_interval_ms = retry_interval_ms
        self.logger = get_logger('buttons')

        self.presses: Dict[Button, PressState] = {button: PressState() for button in Button}
        self._release_timer = None

    @staticmethod
    def parse_button(name: Any) -> Button:
        """
        Raises:
            InvalidButton: Невідома кнопка
        """
        try:
            return Button(name)
        except (ValueError, TypeError):
            raise InvalidButton(f'Requested button: "{name}" which is unknown.')

    def press_button(self, name: Any) -> OperationResult:
        """Коротко натиснути кнопку."""
        return self.set_button(name, self.press_duration_ms)

    def hold_button(self, name: Any) -> OperationResult:
        """Утримувати кнопку (примусове вимкнення для 'power')."""
        return self.set_button(name, self.hold_duration_ms)

    def set_button(self, name: Any, duration_ms: int) -> OperationResult:
        """
        Натиснути кнопку на duration_ms мілісекунд.

        Лінія встановлюється в HIGH одразу, відпускання відбувається
        асинхронно по таймеру.

        Returns:
            OperationResult: успіх, InvalidDuration, InvalidButton або ActuationFailed
        """
        if duration_ms <= 0:
            self.logger.warning(f"Некоректна тривалість натискання: {duration_ms}")
            return OperationResult.from_error(
                InvalidDuration(f"Press duration must be positive, got {duration_ms}ms.")
            )

        try:
            button = self.parse_button(name)
        except InvalidButton as e:
            self.logger.warning(f"Невідома кнопка: {name!r}")
            return OperationResult.from_error(e)

        other = button.other
        if self.presses[other].active:
            try:
                self._write(other, PinLevel.LOW)
            except ActuationFailed as e:
                self.logger.error(f"Не вдалося відпустити {other.value} перед натисканням {button.value}: {e}")
                return OperationResult.from_error(e)
            self.presses[other].clear()
            self.logger.info(f"Кнопку {other.value} відпущено примусово")

        press = self.presses[button]
        press.started_at = self.scheduler.now_ms()
        press.duration_ms = int(duration_ms)

        try:
            self._write(button, PinLevel.HIGH)
        except ActuationFailed as e:
            # Запис лишається, щоб таймер відпускання спробував повернути LOW
            self.logger.error(f"Не вдалося натиснути {button.value}: {e}")
            self._schedule_release()
            return OperationResult.from_error(e)

        self.logger.info(f"Кнопку {button.value} натиснуто ({duration_ms} мс)")
        self._schedule_release()
        return OperationResult.ok(
            data=self.get_press_states()[button.value],
            message=f"Pressed {button.value} for {duration_ms}ms"
        )

    def reconcile(self) -> None:
        """Відпустити кнопки, час натискання яких минув, і запланувати наступну перевірку."""
        self._release_timer = None
        now = self.scheduler.now_ms()

        for button, press in self.presses.items():
            if not press.active or now - press.duration_ms < press.started_at:
                continue
            try:
                self._write(button, PinLevel.LOW)
            except ActuationFailed as e:
                self.logger.error(f"Не вдалося відпустити {button.value}, повторю: {e}")
                continue
            press.clear()
            self.logger.info(f"Кнопку {button.value} відпущено")

        self._schedule_release()

    def _schedule_release(self) -> None:
        """Взвести таймер на найближче відпускання."""
        if self._release_timer is not None:
            self._release_timer.cancel()
            self._release_timer = None

        pending = [press.release_at for press in self.presses.values() if press.active]
        if not pending:
            return

        delay = min(pending) - self.scheduler.now_ms()
        if delay <= 0:
            # Час минув, але відпустити не вдалося - повторна спроба
            delay = self.retry_interval_ms
        self._release_timer = self.scheduler.call_later(delay, self.reconcile)

    def _write(self, button: Button, level: PinLevel) -> None:
        try:
            self.lines.write_line(button.value, level)
        except LineIOError as e:
            raise ActuationFailed(str(e))

    def is_active(self, name: Any) -> bool:
        return self.presses[self.parse_button(name)].active

    def next_release_at(self) -> Optional[int]:
        pending = [press.release_at for press in self.presses.values() if press.active]
        return min(pending) if pending else None

    def stop(self) -> None:
        """Скасувати таймер відпускання."""
        if self._release_timer is not None:
            self._release_timer.cancel()
            self._release_timer = None

    def release_all(self) -> bool:
        """
        Примусово встановити LOW на обох лініях.

        Returns:
            True якщо обидві лінії відпущено
        """
        released = True
        for button, press in self.presses.items():
            try:
                self._write(button, PinLevel.LOW)
            except ActuationFailed as e:
                self.logger.error(f"Не вдалося відпустити {button.value}: {e}")
                released = False
                continue
            press.clear()
        return released

    def get_press_states(self) -> Dict[str, Dict[str, Any]]:
        """
        Отримати стан кнопок.

        Returns:
            Словник {кнопка: {active, started_at, duration_ms}}
        """
        return {
            button.value: {
                'active': press.active,
                'started_at': press.started_at,
                'duration_ms': press.duration_ms,
            }
            for button, press in self.presses.items()
        }
