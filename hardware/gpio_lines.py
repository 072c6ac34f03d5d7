"""
Лінії GPIO Raspberry Pi через RPi.GPIO (нумерація BCM).
"""

from typing import Dict

try:
    import RPi.GPIO as GPIO
    GPIO_AVAILABLE = True
except (ImportError, RuntimeError):
    # RuntimeError - модуль встановлено, але запущено не на Raspberry Pi
    GPIO_AVAILABLE = False

from controllers.errors import HardwareUnavailable, LineIOError
from controllers.power_state import PinLevel
from hardware.base import BaseLines, LineCallback
from utils.logger import get_logger


class GpioLines(BaseLines):
    """Справжні лінії GPIO."""

    def __init__(self, pins: Dict[str, int]):
        """
        Ініціалізація ліній GPIO.

        Args:
            pins: Відповідність імені лінії номеру піна BCM

        Raises:
            HardwareUnavailable: RPi.GPIO не встановлено або недоступний
        """
        super().__init__(pins)
        self.logger = get_logger('gpio')

        if not GPIO_AVAILABLE:
            raise HardwareUnavailable(
                "RPi.GPIO не встановлено або запущено не на Raspberry Pi. "
                "Встановіть: pip install RPi.GPIO"
            )

        try:
            GPIO.setwarnings(False)
            GPIO.setmode(GPIO.BCM)
        except (RuntimeError, ValueError) as e:
            raise HardwareUnavailable(f"Не вдалося ініціалізувати GPIO: {e}")

    def setup_output(self, name: str, initial: PinLevel = PinLevel.LOW) -> None:
        channel = self.pin(name)
        try:
            GPIO.setup(channel, GPIO.OUT, initial=GPIO.HIGH if initial is PinLevel.HIGH else GPIO.LOW)
        except (RuntimeError, ValueError) as e:
            raise HardwareUnavailable(f"Не вдалося налаштувати вихід {name} (GPIO {channel}): {e}")
        self.outputs[name] = initial
        self.logger.info(f"GPIO {channel} ({name}): вихід, початковий рівень {initial.name}")

    def setup_input(self, name: str) -> None:
        channel = self.pin(name)
        try:
            GPIO.setup(channel, GPIO.IN, pull_up_down=GPIO.PUD_DOWN)
        except (RuntimeError, ValueError) as e:
            raise HardwareUnavailable(f"Не вдалося налаштувати вхід {name} (GPIO {channel}): {e}")
        self.inputs.add(name)
        self.logger.info(f"GPIO {channel} ({name}): вхід")

    def read_line(self, name: str) -> PinLevel:
        channel = self.pin(name)
        try:
            return PinLevel.from_raw(GPIO.input(channel))
        except (RuntimeError, ValueError) as e:
            raise LineIOError(f"Помилка читання {name} (GPIO {channel}): {e}")

    def write_line(self, name: str, level: PinLevel) -> None:
        channel = self.pin(name)
        try:
            GPIO.output(channel, GPIO.HIGH if level is PinLevel.HIGH else GPIO.LOW)
        except (RuntimeError, ValueError) as e:
            raise LineIOError(f"Помилка запису {level.name} у {name} (GPIO {channel}): {e}")
        self.outputs[name] = level

    def watch_line(self, name: str, callback: LineCallback) -> None:
        channel = self.pin(name)

        def on_edge(_channel: int) -> None:
            # Викликається з потоку RPi.GPIO
            try:
                level = PinLevel.from_raw(GPIO.input(channel))
            except (RuntimeError, ValueError):
                level = PinLevel.UNKNOWN
            callback(level)

        try:
            GPIO.add_event_detect(channel, GPIO.BOTH, callback=on_edge)
        except (RuntimeError, ValueError) as e:
            raise LineIOError(f"Не вдалося підписатися на зміни {name} (GPIO {channel}): {e}")

    def release_line(self, name: str) -> None:
        channel = self.pin(name)
        try:
            if name in self.inputs:
                GPIO.remove_event_detect(channel)
            GPIO.cleanup(channel)
        except (RuntimeError, ValueError) as e:
            self.logger.warning(f"Не вдалося звільнити {name} (GPIO {channel}): {e}")
        self.outputs.pop(name, None)
        self.inputs.discard(name)
