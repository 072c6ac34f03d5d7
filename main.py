"""
Демон керування живленням комп'ютера з Raspberry Pi.

Стежить за світлодіодом живлення, веде тижневу історію увімкнень і
натискає кнопки power/reset за запитами REST API.
"""

import argparse
import signal
import sys
from threading import Event
from typing import Any, Dict, List, Optional

from utils.config_manager import ConfigManager
from utils.logger import Logger, get_logger
from controllers.power_controller import PowerController
from database.history import PowerHistory
from database.json_store import JsonStore
from api.server import APIServer


class PowerControlApp:
    """Збирає компоненти демона та керує їх життєвим циклом."""

    def __init__(self, config: ConfigManager):
        """
        Args:
            config: Завантажена конфігурація
        """
        self.config = config
        self.logger = get_logger()
        self.stop_requested = Event()

        self.history = PowerHistory(JsonStore(config.get('history.save_file')))
        self.controller = PowerController(config, self.history)
        self.api_server: Optional[APIServer] = None
        if config.get('api.enabled', True):
            self.api_server = APIServer(self.controller, config)

    def request_stop(self, signum=None, frame=None) -> None:
        if signum is not None:
            self.logger.info(f"Сигнал {signal.Signals(signum).name}, зупиняюсь...")
        self.stop_requested.set()

    def run(self) -> int:
        """
        Запустити контролер і API та працювати до сигналу завершення.

        Returns:
            Код виходу процесу
        """
        signal.signal(signal.SIGINT, self.request_stop)
        signal.signal(signal.SIGTERM, self.request_stop)

        mode = "симульовані лінії" if self.config.is_test_mode() else "GPIO"
        self.logger.info(f"Запуск демона керування живленням ({mode})")

        exit_code = 0
        try:
            self.controller.start()
            if self.api_server:
                self.api_server.start()
            self.stop_requested.wait()
        except Exception as e:
            self.logger.critical(f"Критична помилка: {e}", exc_info=True)
            exit_code = 1
        finally:
            self.stop()
        return exit_code

    def stop(self) -> None:
        """Зупинити API, відпустити кнопки та дописати історію."""
        if self.api_server:
            self.api_server.stop()
        self.controller.shutdown()
        self.logger.info("Демон зупинено")


def cli_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Значення з командного рядка, що мають пріоритет над файлом конфігурації."""
    overrides: Dict[str, Any] = {}
    if args.test_mode:
        overrides['test_mode'] = {'enabled': True}
    if args.port is not None:
        overrides['api'] = {'port': args.port}
    if args.log_level:
        overrides['logging'] = {'level': args.log_level}
    return overrides


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='Демон керування живленням комп\'ютера через GPIO')
    parser.add_argument('--config', '-c', default='config.yaml', help='Шлях до файлу конфігурації')
    parser.add_argument('--test-mode', action='store_true', help='Симульовані лінії GPIO замість справжніх')
    parser.add_argument('--port', '-p', type=int, help='Порт REST API')
    parser.add_argument('--log-level', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'], help='Рівень логування')
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    try:
        config = ConfigManager(args.config, overrides=cli_overrides(args))
    except (FileNotFoundError, ValueError) as e:
        print(f"Помилка конфігурації: {e}", file=sys.stderr)
        return 2

    log_config = config.get_section('logging')
    Logger().setup(
        log_file=log_config.get('log_file'),
        log_level=log_config.get('level', 'INFO'),
        json_format=log_config.get('format', 'text') == 'json'
    )

    try:
        config.validate()
    except ValueError as e:
        get_logger().error(f"Помилка валідації конфігурації: {e}")
        return 2

    return PowerControlApp(config).run()


if __name__ == '__main__':
    sys.exit(main())
