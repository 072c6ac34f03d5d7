"""
Модуль для управління конфігурацією демона керування живленням.
"""

import copy
import yaml
from typing import Dict, Any, Optional
from pathlib import Path


DEFAULT_CONFIG: Dict[str, Any] = {
    'gpio': {
        'power_pin': 24,
        'reset_pin': 23,
        'led_pin': 18,
    },
    'timing': {
        'debounce_ms': 1000,
        'poll_interval_ms': 500,
        'press_duration_ms': 200,
        'hold_duration_ms': 5000,
        'retry_interval_ms': 50,
    },
    'history': {
        'save_file': 'save/powerStateHistory.json',
    },
    'api': {
        'enabled': True,
        'host': '127.0.0.1',
        'port': 8084,
    },
    'logging': {
        'log_file': 'logs/power.log',
        'level': 'INFO',
        'format': 'text',
    },
    'wake': {
        'command': None,
    },
    'test_mode': {
        'enabled': False,
        'led_level': 'LOW',
    },
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Рекурсивно накласти override на base."""
    result = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _merge(result[key], value)
        else:
            result[key] = value
    return result


class ConfigManager:
    """Клас для завантаження та управління конфігурацією."""

    def __init__(self, config_path: Optional[str] = "config.yaml", overrides: Optional[Dict[str, Any]] = None):
        """
        Ініціалізація ConfigManager.

        Args:
            config_path: Шлях до файлу конфігурації (None - тільки значення за замовчуванням)
            overrides: Значення, що накладаються поверх файлу (аргументи командного рядка, тести)
        """
        self.config_path = Path(config_path) if config_path else None
        self.overrides = overrides or {}
        self.config: Dict[str, Any] = {}
        self.load_config()

    def load_config(self) -> None:
        """Завантажити конфігурацію з файлу та накласти на значення за замовчуванням."""
        loaded: Dict[str, Any] = {}

        if self.config_path is not None:
            if not self.config_path.exists():
                raise FileNotFoundError(
                    f"Файл конфігурації не знайдено: {self.config_path}\n"
                    f"Скопіюйте config.example.yaml як config.yaml та налаштуйте його."
                )

            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    loaded = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Помилка парсингу YAML: {e}")

            if not isinstance(loaded, dict):
                raise ValueError("Кореневий елемент конфігурації має бути словником")

        self.config = _merge(_merge(DEFAULT_CONFIG, loaded), self.overrides)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Отримати значення з конфігурації за ключем.

        Args:
            key: Ключ у форматі 'section.key' або просто 'key'
            default: Значення за замовчуванням, якщо ключ не знайдено

        Returns:
            Значення з конфігурації або default
        """
        value = self.config

        try:
            for k in key.split('.'):
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Отримати всю секцію конфігурації.

        Args:
            section: Назва секції

        Returns:
            Словник з налаштуваннями секції або порожній словник
        """
        return self.config.get(section) or {}

    def is_test_mode(self) -> bool:
        """Перевірити, чи увімкнено тестовий режим (симульовані лінії GPIO)."""
        return bool(self.get('test_mode.enabled', False))

    def validate(self) -> bool:
        """
        Валідація конфігурації.

        Returns:
            True якщо конфігурація валідна
        """
        for section in ('gpio', 'api'):
            if section not in self.config:
                raise ValueError(f"Відсутня обов'язкова секція: {section}")

        gpio = self.get_section('gpio')
        pins = [gpio.get('power_pin'), gpio.get('reset_pin'), gpio.get('led_pin')]
        if any(not isinstance(pin, int) for pin in pins):
            raise ValueError("Номери пінів power_pin, reset_pin та led_pin мають бути цілими числами")
        if len(set(pins)) != len(pins):
            raise ValueError(f"Піни GPIO мають бути різними: {pins}")

        timing = self.get_section('timing')
        for key in ('debounce_ms', 'press_duration_ms', 'hold_duration_ms', 'retry_interval_ms'):
            value = timing.get(key)
            if not isinstance(value, (int, float)) or value <= 0:
                raise ValueError(f"Параметр timing.{key} має бути додатним числом")

        poll_interval = timing.get('poll_interval_ms')
        if not isinstance(poll_interval, (int, float)) or poll_interval < 0:
            raise ValueError("Параметр timing.poll_interval_ms не може бути від'ємним")

        led_level = str(self.get('test_mode.led_level', 'LOW')).upper()
        if led_level not in ('HIGH', 'LOW'):
            raise ValueError(f"test_mode.led_level має бути HIGH або LOW, отримано: {led_level}")

        if self.get('logging.format', 'text') not in ('text', 'json'):
            raise ValueError("logging.format має бути text або json")

        return True

    def reload(self) -> None:
        """Перезавантажити конфігурацію з файлу."""
        self.load_config()
