"""
Винятки демона керування живленням.

Кожен виняток має `code` - HTTP-еквівалент статусу, який віддає API.
"""


class PowerControlError(Exception):
    """Базовий виняток для всіх помилок керування живленням."""

    code = 500
    error = 'Power Control Error'

    def __init__(self, message: str = ''):
        super().__init__(message or self.error)
        self.message = message or self.error


class InvalidButton(PowerControlError):
    """Запитано кнопку, якої не існує (не 'power' і не 'reset')."""

    code = 400
    error = 'Invalid Button'


class UnknownGoal(PowerControlError):
    """Запитано цільовий стан живлення, який неможливо досягти."""

    code = 400
    error = 'Bad Goal State'


class ActuationFailed(PowerControlError):
    """Не вдалося записати рівень на вихідну лінію."""

    code = 500
    error = 'Actuation Failed'


class PersistenceError(PowerControlError):
    """Не вдалося прочитати або записати файл історії."""

    code = 500
    error = 'Persistence Error'


class HardwareUnavailable(PowerControlError):
    """GPIO недоступні - використовуються симульовані лінії."""

    code = 503
    error = 'Hardware Unavailable'


class LineIOError(PowerControlError):
    """Помилка читання або запису окремої лінії GPIO."""

    code = 500
    error = 'Line I/O Error'


class CommandNotConfigured(PowerControlError):
    """Зовнішня команда (напр. wake) не задана в конфігурації."""

    code = 501
    error = 'Not Implemented'


class InvalidDuration(PowerControlError):
    """Тривалість натискання кнопки не додатна."""

    code = 400
    error = 'Invalid Duration'
