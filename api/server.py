"""
REST API сервер для керування живленням комп'ютера.
"""

import threading
from typing import Optional

from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import BadRequest, HTTPException
from werkzeug.serving import make_server

from controllers.power_controller import PowerController
from controllers.power_state import OperationResult
from utils.config_manager import ConfigManager
from utils.logger import get_logger


class APIServer:
    """Клас для REST API сервера."""

    def __init__(self, controller: PowerController, config: ConfigManager):
        """
        Ініціалізація API сервера.

        Args:
            controller: Контролер живлення
            config: Конфігурація
        """
        self.controller = controller
        self.config = config
        self.logger = get_logger('api')

        # Налаштування Flask
        api_config = config.get_section('api')
        self.host = api_config.get('host', '127.0.0.1')
        self.port = api_config.get('port', 8084)

        # Створити Flask додаток
        self.app = Flask(__name__)
        CORS(self.app)

        # Зареєструвати маршрути
        self._register_routes()

        self.server = None
        self.server_thread: Optional[threading.Thread] = None
        self.is_running = False

    @staticmethod
    def _respond(result: OperationResult):
        return jsonify(result.to_dict()), result.code

    @staticmethod
    def _json_body() -> dict:
        body = request.get_json(silent=True)
        if not isinstance(body, dict):
            raise BadRequest('Request body must be a JSON object')
        return body

    def _register_routes(self) -> None:
        """Зареєструвати всі маршрути API."""

        @self.app.after_request
        def log_request(response):
            self.logger.info(
                f"{request.method} {response.status_code} {request.full_path.rstrip('?')} FROM {request.remote_addr}"
            )
            return response

        @self.app.errorhandler(HTTPException)
        def handle_http_error(error: HTTPException):
            if error.code == 404:
                return jsonify({'error': '404 Not Found', 'code': 404}), 404
            if isinstance(error, BadRequest):
                return jsonify({'error': 'Bad Request', 'code': 400, 'message': error.description}), 400
            return jsonify({'error': error.name, 'code': error.code}), error.code

        @self.app.route('/')
        def index():
            return jsonify({'data': 'Power control daemon', 'code': 200})

        @self.app.route('/get-state')
        def get_state():
            """Поточний стан живлення: 1 - увімкнено, 0 - вимкнено, -1 - невідомо."""
            return jsonify({'data': int(self.controller.current_state), 'code': 200})

        @self.app.route('/get-info')
        def get_info():
            """Поточний стан та частка увімкненого часу за кожен день тижня."""
            return jsonify({'data': self.controller.get_info(), 'code': 200})

        @self.app.route('/get-history')
        def get_history():
            """Історія подій для побудови графіків."""
            return jsonify({'data': self.controller.get_history(), 'code': 200})

        @self.app.route('/status')
        def status():
            """Діагностичний статус контролера."""
            return jsonify({'data': self.controller.get_status(), 'code': 200})

        @self.app.route('/press-button', methods=['POST'])
        def press_button():
            body = self._json_body()
            return self._respond(self.controller.press_button(body.get('button')))

        @self.app.route('/hold-button', methods=['POST'])
        def hold_button():
            body = self._json_body()
            return self._respond(self.controller.hold_button(body.get('button')))

        @self.app.route('/request-state', methods=['POST'])
        def request_state():
            body = self._json_body()
            return self._respond(self.controller.request_state(body.get('state')))

        @self.app.route('/wake', methods=['POST'])
        def wake():
            return self._respond(self.controller.wake())

    def start(self) -> None:
        """Запустити API сервер в окремому потоці."""
        if self.is_running:
            self.logger.warning("API сервер вже запущений")
            return

        self.server = make_server(self.host, self.port, self.app, threaded=True)

        def run_server() -> None:
            self.logger.info(f"Запуск API сервера на {self.host}:{self.port}")
            self.server.serve_forever()

        self.server_thread = threading.Thread(target=run_server, name='api-server', daemon=True)
        self.server_thread.start()
        self.is_running = True
        self.logger.info("API сервер запущено")

    def stop(self) -> None:
        """Зупинити API сервер."""
        if not self.is_running:
            return
        self.server.shutdown()
        if self.server_thread is not None:
            self.server_thread.join(timeout=5)
        self.is_running = False
        self.logger.info("API сервер зупинено")
