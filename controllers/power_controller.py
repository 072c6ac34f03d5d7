"""
Контролер живлення комп'ютера: об'єднує датчик стану, кнопки та історію.
"""

from typing import Any, Dict, List, Optional

from controllers.button_actuator import ButtonActuator
from controllers.errors import ActuationFailed, CommandNotConfigured, HardwareUnavailable, LineIOError, UnknownGoal
from controllers.power_state import Button, OperationResult, PinLevel, PowerState, PowerStateGoal
from controllers.scheduler import LoopScheduler
from database.history import PowerHistory
from hardware.base import BaseLines
from hardware.line_factory import open_lines
from sensors.led_watcher import LedWatcher
from utils.command import run_detached
from utils.config_manager import ConfigManager
from utils.logger import get_logger


class PowerController:
    """Клас для керування живленням комп'ютера."""

    def __init__(
        self,
        config: ConfigManager,
        history: PowerHistory,
        scheduler=None,
        lines: Optional[BaseLines] = None
    ):
        """
        Ініціалізація контролера.

        Args:
            config: Об'єкт ConfigManager
            history: Журнал подій живлення
            scheduler: Планувальник (за замовчуванням - власний LoopScheduler)
            lines: Вже налаштовані лінії GPIO (за замовчуванням відкриваються в start())
        """
        self.config = config
        self.history = history
        self.logger = get_logger('controller')

        self._owns_scheduler = scheduler is None
        self.scheduler = scheduler or LoopScheduler()

        self.lines = lines
        self.watcher: Optional[LedWatcher] = None
        self.actuator: Optional[ButtonActuator] = None

        timing = config.get_section('timing')
        self.debounce_ms = timing.get('debounce_ms', 1000)
        self.poll_interval_ms = timing.get('poll_interval_ms', 500)
        self.press_duration_ms = timing.get('press_duration_ms', 200)
        self.hold_duration_ms = timing.get('hold_duration_ms', 5000)
        self.retry_interval_ms = timing.get('retry_interval_ms', 50)

        self.wake_command: Optional[str] = config.get('wake.command')

        self.started = False
        self._shut_down = False

    # ---- Життєвий цикл ----

    def start(self) -> None:
        """Завантажити історію, відкрити лінії GPIO та почати стежити за станом."""
        if self.started:
            self.logger.warning("Контролер вже запущений")
            return

        self._shut_down = False
        self.history.load()
        if self._owns_scheduler:
            self.scheduler.start()
        self.scheduler.call(self._start_core)
        self.logger.info("Контролер живлення запущено")

    def _start_core(self) -> None:
        if self.lines is None:
            self.lines = open_lines(self.config)

        self.actuator = ButtonActuator(
            self.lines,
            self.scheduler,
            press_duration_ms=self.press_duration_ms,
            hold_duration_ms=self.hold_duration_ms,
            retry_interval_ms=self.retry_interval_ms
        )
        self.watcher = LedWatcher(
            self.lines,
            self.scheduler,
            self._on_state_change,
            debounce_ms=self.debounce_ms,
            poll_interval_ms=self.poll_interval_ms
        )
        self.watcher.start()
        self.started = True

    def shutdown(self) -> None:
        """
        Скасувати таймери, встановити LOW на виходах і звільнити лінії.

        Безпечно викликати повторно та після невдалого start().
        """
        if self._shut_down:
            return
        self._shut_down = True
        self.logger.info("Зупинка контролера живлення...")

        try:
            self.scheduler.call(self._shutdown_core)
        finally:
            self.history.close()
            if self._owns_scheduler:
                self.scheduler.stop()

    def _shutdown_core(self) -> None:
        # Спочатку таймери, щоб жоден не встановив HIGH після відпускання
        if self.watcher is not None:
            self.watcher.stop()
        if self.actuator is not None:
            self.actuator.stop()

        if self.actuator is not None:
            self.actuator.release_all()
        elif self.lines is not None:
            for button in Button:
                try:
                    self.lines.write_line(button.value, PinLevel.LOW)
                except (LineIOError, KeyError) as e:
                    self.logger.error(f"Не вдалося встановити LOW на {button.value}: {e}")

        if self.lines is not None:
            self.lines.release_all()
        self.started = False

    # ---- Стан ----

    def _on_state_change(self, state: PowerState, timestamp: int) -> None:
        self.history.record_event(state, timestamp)

    @property
    def current_state(self) -> PowerState:
        """Поточний стан живлення за світлодіодом."""
        if self.watcher is None:
            return PowerState.UNKNOWN
        return self.watcher.current_state

    def get_info(self) -> Dict[str, Any]:
        """Поточний стан та частка увімкненого часу для кожного дня тижня."""
        return {
            'currentState': int(self.current_state),
            'summary': self.history.get_week_summary(),
        }

    def get_history(self) -> List[List[dict]]:
        """Вся історія подій за тиждень для побудови графіків."""
        return self.history.serialize()

    def get_status(self) -> Dict[str, Any]:
        """
        Отримати діагностичний статус контролера.

        Returns:
            Словник зі станом ліній, датчика та кнопок
        """
        return {
            'started': self.started,
            'current_state': self.current_state.name,
            'simulated': self.lines.simulated if self.lines is not None else None,
            'lines': self.lines.get_status() if self.lines is not None else None,
            'led': self.watcher.get_status() if self.watcher is not None else None,
            'buttons': self.actuator.get_press_states() if self.actuator is not None else None,
            'next_release_at': self.actuator.next_release_at() if self.actuator is not None else None,
            'history_events': len(self.history),
        }

    # ---- Дії ----

    def _not_started(self) -> OperationResult:
        return OperationResult.from_error(HardwareUnavailable("Контролер живлення не запущено"))

    def press_button(self, name: Any) -> OperationResult:
        """Коротко натиснути кнопку 'power' або 'reset'."""
        return self.scheduler.call(self._press_button, name)

    def _press_button(self, name: Any) -> OperationResult:
        if self.actuator is None:
            return self._not_started()
        return self.actuator.press_button(name)

    def hold_button(self, name: Any) -> OperationResult:
        """Утримувати кнопку 'power' або 'reset'."""
        return self.scheduler.call(self._hold_button, name)

    def _hold_button(self, name: Any) -> OperationResult:
        if self.actuator is None:
            return self._not_started()
        return self.actuator.hold_button(name)

    def request_state(self, goal: Any) -> OperationResult:
        """
        Спробувати досягти цільового стану живлення.

        ON - коротке натискання power, OFF - утримання power.
        Якщо ціль збігається з поточним станом або UNCHANGED - нічого не робить.
        """
        return self.scheduler.call(self._request_state, goal)

    def _request_state(self, goal: Any) -> OperationResult:
        parsed = PowerStateGoal.parse(goal)
        if parsed == PowerStateGoal.UNKNOWN:
            self.logger.warning(f"Невідомий цільовий стан: {goal!r}")
            return OperationResult.from_error(UnknownGoal(f'Requested state: "{goal}" which is unknown.'))

        current = self.current_state
        if parsed == PowerStateGoal.UNCHANGED or int(parsed) == int(current):
            return OperationResult.ok(data={'currentState': int(current)}, message='Nothing to do')

        if self.actuator is None:
            return self._not_started()

        self.logger.info(f"Запит стану {parsed.name} (поточний {current.name})")
        if parsed == PowerStateGoal.ON:
            return self.actuator.press_button(Button.POWER.value)
        if parsed == PowerStateGoal.OFF:
            return self.actuator.hold_button(Button.POWER.value)

        return OperationResult.from_error(UnknownGoal(f'Requested state: "{goal}" which is unknown.'))

    def wake(self) -> OperationResult:
        """Запустити зовнішню команду пробудження (напр. wakeonlan) без очікування."""
        if not self.wake_command:
            return OperationResult.from_error(CommandNotConfigured("Команду wake не налаштовано"))

        try:
            run_detached(self.wake_command)
        except (OSError, ValueError) as e:
            self.logger.error(f"Не вдалося запустити команду wake: {e}")
            return OperationResult.from_error(ActuationFailed(f"Failed to run wake command: {e}"))

        return OperationResult.ok(message='Sent wake command')
