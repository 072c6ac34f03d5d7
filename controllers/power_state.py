"""
Стани живлення, цілі, рівні ліній та результат операцій.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Dict, Optional

from controllers.errors import PowerControlError


class PowerState(IntEnum):
    """Останній впевнено відомий стан живлення комп'ютера."""
    ON = 1
    OFF = 0
    UNKNOWN = -1


class PowerStateGoal(IntEnum):
    """Цільовий стан для запиту зміни живлення."""
    ON = 1
    OFF = 0
    UNKNOWN = -1
    UNCHANGED = -2  # Нічого не робити

    @classmethod
    def parse(cls, value: Any) -> 'PowerStateGoal':
        """
        Визначити ціль із значення запиту.

        Приймає числові коди (1, 0, -2) та назви 'on', 'off', 'unchanged'
        без урахування регістру. Все інше - UNKNOWN.
        """
        if isinstance(value, bool):
            return cls.UNKNOWN
        if isinstance(value, str):
            name = value.strip().upper()
            if name in ('ON', 'OFF', 'UNCHANGED'):
                return cls[name]
            try:
                value = int(name)
            except ValueError:
                return cls.UNKNOWN
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                return cls.UNKNOWN
        return cls.UNKNOWN


class PinLevel(IntEnum):
    """Сирий рівень лінії GPIO."""
    HIGH = 1
    LOW = 0
    UNSURE = 2  # Між станами або значення не має сенсу
    UNKNOWN = -1  # Значення відсутнє

    @classmethod
    def from_raw(cls, value: Any) -> 'PinLevel':
        """Перетворити значення драйвера (0/1/bool) на PinLevel."""
        if value is None:
            return cls.UNKNOWN
        if isinstance(value, PinLevel):
            return value
        try:
            raw = int(value)
        except (TypeError, ValueError):
            return cls.UNSURE
        if raw == 1:
            return cls.HIGH
        if raw == 0:
            return cls.LOW
        return cls.UNSURE

    def to_state(self) -> PowerState:
        """HIGH - увімкнено, LOW - вимкнено, все інше - невідомо."""
        if self is PinLevel.HIGH:
            return PowerState.ON
        if self is PinLevel.LOW:
            return PowerState.OFF
        return PowerState.UNKNOWN


class Button(str, Enum):
    """Кнопки корпусу, якими керує демон."""
    POWER = 'power'
    RESET = 'reset'

    @property
    def other(self) -> 'Button':
        return Button.RESET if self is Button.POWER else Button.POWER


@dataclass
class OperationResult:
    """Явний результат операції, що може завершитися помилкою."""
    success: bool
    code: int = 200
    error: Optional[str] = None
    message: Optional[str] = None
    data: Any = None

    @classmethod
    def ok(cls, data: Any = None, message: Optional[str] = None) -> 'OperationResult':
        return cls(success=True, code=200, data=data, message=message)

    @classmethod
    def from_error(cls, exc: PowerControlError) -> 'OperationResult':
        return cls(success=False, code=exc.code, error=exc.error, message=exc.message)

    def to_dict(self) -> Dict[str, Any]:
        """Конвертувати у тіло відповіді API."""
        if self.success:
            body: Dict[str, Any] = {'data': self.data, 'code': self.code}
            if self.message:
                body['message'] = self.message
            return body
        return {'error': self.error, 'code': self.code, 'message': self.message}
