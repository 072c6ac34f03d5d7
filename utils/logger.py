"""
Логування демона керування живленням.

Всі компоненти пишуть у дочірні logger'и 'power_control.<компонент>', тому
налаштування кореневого 'power_control' діє на весь демон.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union


LOGGER_NAME = 'power_control'
TEXT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class JsonFormatter(logging.Formatter):
    """Один JSON-об'єкт на запис, для збирачів логів."""

    def format(self, record: logging.LogRecord) -> str:
        data = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'component': record.name[len(LOGGER_NAME) + 1:] or None,
            'message': record.getMessage(),
        }
        if record.exc_info:
            data['exception'] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False)


def _parse_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    parsed = logging.getLevelName(str(level).upper())
    return parsed if isinstance(parsed, int) else logging.INFO


class Logger:
    """Налаштування логування демона (один екземпляр на процес)."""

    _instance: Optional['Logger'] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance.root = logging.getLogger(LOGGER_NAME)
        return cls._instance

    def setup(
        self,
        log_file: Optional[str] = "logs/power.log",
        log_level: Union[int, str] = logging.INFO,
        enable_console: bool = True,
        json_format: bool = False
    ) -> None:
        """
        Налаштувати обробники кореневого logger'а демона.

        Повторний виклик замінює попередні обробники.

        Args:
            log_file: Шлях до файлу логів (None - без запису у файл)
            log_level: Рівень логування (число або назва, напр. 'DEBUG')
            enable_console: Чи виводити логи в консоль
            json_format: JSON замість текстового формату
        """
        level = _parse_level(log_level)
        formatter = JsonFormatter() if json_format else logging.Formatter(TEXT_FORMAT, DATE_FORMAT)

        self.root.setLevel(level)
        for handler in list(self.root.handlers):
            self.root.removeHandler(handler)
            handler.close()

        handlers = []
        if log_file:
            path = Path(log_file)
            path.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(path, encoding='utf-8'))
        if enable_console:
            handlers.append(logging.StreamHandler())

        for handler in handlers:
            handler.setLevel(level)
            handler.setFormatter(formatter)
            self.root.addHandler(handler)

    def get_logger(self, component: Optional[str] = None) -> logging.Logger:
        """
        Logger компонента.

        До виклику setup() записи передаються кореневому logger'у Python.
        """
        if not component:
            return self.root
        return self.root.getChild(component)


def get_logger(component: Optional[str] = None) -> logging.Logger:
    """Отримати logger демона або його компонента."""
    return Logger().get_logger(component)
