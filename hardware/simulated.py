"""
Симульовані лінії GPIO для роботи без доступу до заліза.
"""

from typing import Dict, List

from controllers.power_state import PinLevel
from hardware.base import BaseLines, LineCallback
from utils.logger import get_logger


class SimulatedLines(BaseLines):
    """
    Лінії в пам'яті. Світлодіод живлення за замовчуванням завжди LOW,
    тобто комп'ютер вважається вимкненим.
    """

    simulated = True

    def __init__(self, pins: Dict[str, int], led_level: PinLevel = PinLevel.LOW):
        """
        Ініціалізація симульованих ліній.

        Args:
            pins: Відповідність імені лінії номеру піна
            led_level: Рівень, який повертають вхідні лінії
        """
        super().__init__(pins)
        self.logger = get_logger('gpio')
        self.input_levels: Dict[str, PinLevel] = {}
        self.watchers: Dict[str, List[LineCallback]] = {}
        self.default_level = led_level

    def setup_output(self, name: str, initial: PinLevel = PinLevel.LOW) -> None:
        self.pin(name)
        self.outputs[name] = initial
        self.logger.debug(f"[СИМУЛЯЦІЯ] Лінія {name} налаштована як вихід ({initial.name})")

    def setup_input(self, name: str) -> None:
        self.pin(name)
        self.inputs.add(name)
        self.input_levels.setdefault(name, self.default_level)
        self.logger.debug(f"[СИМУЛЯЦІЯ] Лінія {name} налаштована як вхід")

    def read_line(self, name: str) -> PinLevel:
        if name in self.outputs:
            return self.outputs[name]
        return self.input_levels.get(name, self.default_level)

    def write_line(self, name: str, level: PinLevel) -> None:
        self.outputs[name] = level

    def watch_line(self, name: str, callback: LineCallback) -> None:
        self.watchers.setdefault(name, []).append(callback)

    def release_line(self, name: str) -> None:
        self.outputs.pop(name, None)
        self.inputs.discard(name)
        self.watchers.pop(name, None)

    def set_input(self, name: str, level: PinLevel) -> None:
        """Змінити рівень вхідної лінії та сповістити підписників."""
        if self.input_levels.get(name) == level:
            return
        self.input_levels[name] = level
        for callback in list(self.watchers.get(name, [])):
            callback(level)
