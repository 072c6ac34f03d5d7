"""
Моделі даних історії живлення.
"""

from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Any, Dict

from controllers.power_state import PowerState


DAY_MS = 24 * 60 * 60 * 1000
WEEK_DAYS = 7


def to_local_datetime(timestamp: int) -> datetime:
    """Перетворити мітку часу (мс від епохи) на локальний datetime."""
    return datetime.fromtimestamp(timestamp / 1000.0)


def day_of_week(timestamp: int) -> int:
    """Номер дня тижня за локальним часом: 0 - неділя, 6 - субота."""
    return (to_local_datetime(timestamp).weekday() + 1) % WEEK_DAYS


def end_of_day(timestamp: int) -> int:
    """Мітка часу (мс) наступної локальної опівночі, тобто кінець календарного дня."""
    local = to_local_datetime(timestamp)
    next_midnight = datetime.combine(local.date() + timedelta(days=1), time())
    return int(next_midnight.timestamp() * 1000)


def same_day(first: int, second: int) -> bool:
    """Чи припадають дві мітки часу на один локальний календарний день."""
    return to_local_datetime(first).date() == to_local_datetime(second).date()


@dataclass(frozen=True)
class PowerStateEvent:
    """Модель події зміни стану живлення."""
    timestamp: int  # мс від епохи
    state: PowerState

    @property
    def day(self) -> int:
        return day_of_week(self.timestamp)

    def to_dict(self) -> Dict[str, Any]:
        """Конвертувати в словник."""
        return {
            'timestamp': self.timestamp,
            'state': int(self.state)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PowerStateEvent':
        """Створити подію зі словника, збереженого у файлі."""
        return cls(timestamp=int(data['timestamp']), state=PowerState(int(data['state'])))
