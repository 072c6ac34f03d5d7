"""
Вибір джерела ліній GPIO: справжні лінії або симуляція.
"""

from typing import Dict

from controllers.errors import HardwareUnavailable
from controllers.power_state import PinLevel
from hardware.base import BaseLines
from hardware.gpio_lines import GpioLines
from hardware.simulated import SimulatedLines
from utils.config_manager import ConfigManager
from utils.logger import get_logger


OUTPUT_LINES = ('power', 'reset')
INPUT_LINES = ('led',)


def pins_from_config(config: ConfigManager) -> Dict[str, int]:
    """Відповідність імен ліній номерам пінів із секції gpio."""
    gpio = config.get_section('gpio')
    return {
        'power': gpio.get('power_pin'),
        'reset': gpio.get('reset_pin'),
        'led': gpio.get('led_pin'),
    }


def _configure(lines: BaseLines) -> BaseLines:
    for name in OUTPUT_LINES:
        lines.setup_output(name, PinLevel.LOW)
    for name in INPUT_LINES:
        lines.setup_input(name)
    return lines


def open_lines(config: ConfigManager) -> BaseLines:
    """
    Відкрити та налаштувати лінії GPIO.

    Якщо GPIO недоступні (не Raspberry Pi, немає прав, немає RPi.GPIO),
    повертає симульовані лінії. Про перехід у симуляцію логується один раз.

    Returns:
        Налаштований набір ліній
    """
    logger = get_logger('gpio')
    pins = pins_from_config(config)
    led_level = PinLevel[str(config.get('test_mode.led_level', 'LOW')).upper()]

    if config.is_test_mode():
        logger.info("Тестовий режим: використовуються симульовані лінії GPIO")
        return _configure(SimulatedLines(pins, led_level=led_level))

    lines = None
    try:
        lines = GpioLines(pins)
        return _configure(lines)
    except HardwareUnavailable as e:
        logger.warning(f"GPIO недоступні ({e}). Працюю з симульованими лініями")
        if lines is not None:
            lines.release_all()
        return _configure(SimulatedLines(pins))
