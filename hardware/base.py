"""
Базовий клас для джерела ліній GPIO.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict

from controllers.power_state import PinLevel


LineCallback = Callable[[PinLevel], None]


class BaseLines(ABC):
    """
    Абстрактний набір іменованих ліній ('power', 'reset', 'led').

    Помилки читання та запису підіймають LineIOError.
    """

    simulated = False

    def __init__(self, pins: Dict[str, int]):
        """
        Ініціалізація набору ліній.

        Args:
            pins: Відповідність імені лінії номеру піна
        """
        self.pins = dict(pins)
        self.outputs: Dict[str, PinLevel] = {}
        self.inputs: set = set()

    def pin(self, name: str) -> int:
        try:
            return self.pins[name]
        except KeyError:
            raise KeyError(f"Лінію '{name}' не налаштовано")

    @abstractmethod
    def setup_output(self, name: str, initial: PinLevel = PinLevel.LOW) -> None:
        """Налаштувати лінію як вихід з початковим рівнем."""
        pass

    @abstractmethod
    def setup_input(self, name: str) -> None:
        """Налаштувати лінію як вхід."""
        pass

    @abstractmethod
    def read_line(self, name: str) -> PinLevel:
        """Зчитати рівень лінії."""
        pass

    @abstractmethod
    def write_line(self, name: str, level: PinLevel) -> None:
        """Записати рівень на вихідну лінію."""
        pass

    @abstractmethod
    def watch_line(self, name: str, callback: LineCallback) -> None:
        """
        Підписатися на зміну рівня вхідної лінії.

        Колбек може викликатися з потоку драйвера.
        """
        pass

    @abstractmethod
    def release_line(self, name: str) -> None:
        """Звільнити лінію."""
        pass

    def release_all(self) -> None:
        """Звільнити всі налаштовані лінії."""
        for name in list(self.outputs) + list(self.inputs):
            self.release_line(name)

    def get_status(self) -> Dict[str, Any]:
        """
        Отримати статус ліній.

        Returns:
            Словник зі статусом
        """
        return {
            'type': self.__class__.__name__,
            'simulated': self.simulated,
            'pins': dict(self.pins),
            'outputs': {name: level.name for name, level in self.outputs.items()},
        }
